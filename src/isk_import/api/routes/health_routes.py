"""
Health check route - public, no authentication required.
"""
from fastapi import APIRouter, Request

from isk_import import __version__

router = APIRouter()


@router.get(
    "",
    summary="System health check",
)
async def health_check(request: Request):
    """
    Report whether the Drive folders and report sheet have been resolved.
    """
    state = request.app.state
    ready = state.orchestrator is not None
    health = {
        "status": "healthy" if ready else "degraded",
        "service": "ISK Import Report API",
        "version": __version__,
        "components": {
            "bootstrap": "ok" if ready else f"pending: {state.bootstrap_error or 'not started'}",
            "sweep": "running" if state.run_lock.locked() else "idle",
        },
    }
    if ready:
        ctx = state.orchestrator.context
        health["components"]["upload_folder"] = ctx.upload_folder_id
        health["components"]["sheet"] = ctx.sheet_id
    return health
