"""
Liveness endpoint.

Reports the build version plus the state of the in-process price feed
and the number of live price subscribers. Never touches the database.
"""

from fastapi import APIRouter, Request

from fxdesk.core.config import settings
from fxdesk.interfaces.trading.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns version, price feed state and live subscriber count.",
)
def health_check(request: Request) -> HealthResponse:
    feed = getattr(request.app.state, "price_feed", None)
    stream = request.app.state.price_stream
    return HealthResponse(
        status="ok",
        version=settings.version,
        price_feed_running=bool(feed and feed.is_running),
        price_subscribers=stream.active_connections,
    )
