"""
Import trigger route - runs one sweep of the upload folder.
"""
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Request, status
from pydantic import BaseModel

from isk_import.utils.logger import get_logger

router = APIRouter()


# ── Pydantic models ──────────────────────────────────────────────

class FileOutcomeResponse(BaseModel):
    """Final state of one uploaded screenshot."""
    source_id: str
    source_name: str
    status: str
    state: str
    date: Optional[str] = None
    member: Optional[str] = None
    quantity: Optional[str] = None
    row_id: Optional[int] = None
    checksum: Optional[str] = None
    final_name: Optional[str] = None
    location: Optional[str] = None
    error: Optional[str] = None


class RunSummaryResponse(BaseModel):
    """Counts and per-file outcomes of a sweep."""
    started_at: str
    finished_at: Optional[str] = None
    total: int = 0
    processed: int = 0
    quarantined: int = 0
    errored: int = 0
    unrenamed: int = 0
    files: List[FileOutcomeResponse] = []


def _get_orchestrator(request: Request):
    """Return the bootstrapped orchestrator, bootstrapping now if startup failed."""
    state = request.app.state
    if state.orchestrator is None:
        try:
            state.orchestrator = state.orchestrator_factory()
            state.bootstrap_error = None
        except Exception as e:
            state.bootstrap_error = str(e)
            get_logger().error(f"Bootstrap failed: {e}", component="API", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=f"Import not configured: {e}",
            )
    return state.orchestrator


# ── Routes ────────────────────────────────────────────────────────

@router.post(
    "",
    response_model=RunSummaryResponse,
    summary="Process every screenshot in the upload folder",
)
def run_import(request: Request):
    """
    Run one sweep of UploadHere and report how many files were processed,
    quarantined and errored. Only one sweep runs at a time.
    """
    lock = request.app.state.run_lock
    if not lock.acquire(blocking=False):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A sweep is already running",
        )
    try:
        orchestrator = _get_orchestrator(request)
        try:
            summary = orchestrator.run()
        except Exception as e:
            get_logger().error(f"Sweep aborted: {e}", component="API", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=f"Could not list upload folder: {e}",
            )
        return summary.to_dict()
    finally:
        lock.release()
