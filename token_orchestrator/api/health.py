"""
Health check endpoint - no authentication required
"""

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/healthz", include_in_schema=False)
def healthz(request: Request):
    store = request.app.state.store
    reaper = getattr(request.app.state, "reaper", None)
    return {
        "status": "ok",
        "keys": store.stats(),
        "reaper": "running" if reaper is not None and reaper.running else "stopped",
    }
