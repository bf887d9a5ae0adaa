"""Status endpoint: synchronous snapshots of the daemon's services."""

from typing import Callable, Dict

from fastapi import APIRouter, Request

router = APIRouter(tags=["status"])

StatusSource = Callable[[], Dict]


@router.get("/status")
async def get_status(request: Request):
    """
    Reconciliation loop and connection status snapshots, keyed by source
    name. Sources are registered on app.state.status_sources.
    """
    sources: Dict[str, StatusSource] = getattr(request.app.state, "status_sources", None) or {}
    return {name: source() for name, source in sources.items()}
