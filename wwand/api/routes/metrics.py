"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .health import ALL_METHODS, MESSAGE_UNKNOWN_ENDPOINT, send_status

router = APIRouter(tags=["metrics"])


@router.get("/metrics")
async def metrics(request: Request):
    """Expose the registry attached to app.state.registry"""
    registry = getattr(request.app.state, "registry", None)
    if registry is None:
        return Response(content=b"", media_type=CONTENT_TYPE_LATEST)
    return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)


@router.api_route("/{path:path}", methods=ALL_METHODS)
async def catch_all(path: str = ""):
    return send_status(MESSAGE_UNKNOWN_ENDPOINT)
