"""Prometheus scrape endpoint."""

from fastapi import APIRouter, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, generate_latest

from chatrelay.utils.metrics import chat_sessions_active, ws_connections_active

router = APIRouter()


@router.get(
    "/metrics",
    response_class=Response,
    summary="Prometheus metrics endpoint",
    tags=["metrics"],
)
async def metrics(request: Request) -> Response:
    """
    Expose chat relay metrics in Prometheus text format.

    The connection and session gauges are re-read from the live registries
    before every scrape, so they stay exact even if an update was missed.
    """
    state = request.app.state
    ws_connections_active.set(len(state.connection_manager))
    chat_sessions_active.set(len(state.registry))

    return Response(
        content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST
    )
