import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import config
from .api.health import router as health_router
from .api.keys import router as keys_router
from .api.prometheus import router as prometheus_router
from .api.version import router as version_router
from .errors import KeyStoreError
from .logging_config import setup_logging
from .middleware import TracingMiddleware
from .schemas.key import ErrorOut
from .services.keystore import Clock, KeyStore
from .services.reaper import Reaper

logger = logging.getLogger("token_orchestrator")


def create_app(store: Optional[KeyStore] = None, clock: Optional[Clock] = None,
               reaper_enabled: Optional[bool] = None,
               reaper_interval: Optional[float] = None) -> FastAPI:
    """Build the API around a key store.

    The store starts empty unless one is passed in; tests pass a store with
    a manual clock. The reaper is started and stopped with the app lifespan.
    """
    if store is None:
        store = KeyStore(clock=clock) if clock is not None else KeyStore()
    if reaper_enabled is None:
        reaper_enabled = config.REAPER_ENABLED
    reaper = Reaper(store, interval=reaper_interval)

    @asynccontextmanager
    async def lifespan(application: FastAPI):
        logger.info("Token Orchestrator starting up", extra={
            "component": "api",
            "lease_seconds": store.lease_duration,
            "reaper_enabled": reaper_enabled,
        })
        if reaper_enabled:
            await reaper.start()
        try:
            yield
        finally:
            await reaper.stop()
            logger.info("Token Orchestrator shutting down", extra={"component": "api"})

    application = FastAPI(title="Token Orchestrator API", version=config.APP_VERSION, lifespan=lifespan)
    application.state.store = store
    application.state.reaper = reaper

    application.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(TracingMiddleware)

    @application.exception_handler(KeyStoreError)
    async def key_store_error_handler(request: Request, exc: KeyStoreError):
        return JSONResponse(ErrorOut(error=exc.message).model_dump(), status_code=exc.status_code)

    application.include_router(keys_router)
    application.include_router(health_router)
    application.include_router(version_router)
    application.include_router(prometheus_router)
    return application


# Configure logging at import time
setup_logging()

app = create_app()


def run():
    import uvicorn

    logger.info(f"Token Orchestrator API running on port {config.PORT}")
    uvicorn.run(
        "token_orchestrator.main:app",
        host=config.HOST,
        port=config.PORT,
        reload=False,
        access_log=True
    )


if __name__ == "__main__":
    run()
