from fastapi import APIRouter

from .. import __version__, config

router = APIRouter()


@router.get("/version")
def get_version():
    return {
        "status": "ok",
        "name": config.APP_NAME,
        "version": config.APP_VERSION,
        "package_version": __version__,
    }
