"""
FastAPI router for real-time price streaming.

Provides:
- WebSocket endpoint for live instrument snapshots
- SSE (Server-Sent Events) endpoint for HTTP-only clients
- Stream and scheduler status endpoints

The stream manager and the price feed live on ``app.state`` and are
created by ``fxdesk.main``.
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from fastapi.responses import StreamingResponse
from starlette.requests import HTTPConnection
from starlette.websockets import WebSocketState

from fxdesk.domain.trading.entities import CurrencyPair
from fxdesk.infrastructure.trading.currency_pair_repository import (
    CurrencyPairRepositoryAdapter,
)
from fxdesk.interfaces.trading.dependencies import get_price_store
from fxdesk.realtime.scheduler import PriceFeedScheduler
from fxdesk.realtime.stream import PriceStreamManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/realtime", tags=["realtime"])


def get_stream_manager(connection: HTTPConnection) -> PriceStreamManager:
    return connection.app.state.price_stream


def get_price_feed(connection: HTTPConnection) -> Optional[PriceFeedScheduler]:
    return getattr(connection.app.state, "price_feed", None)


# ------------------------------------------------------------------
# WebSocket endpoint
# ------------------------------------------------------------------


@router.websocket("/ws/prices")
async def ws_prices(
    websocket: WebSocket,
    manager: PriceStreamManager = Depends(get_stream_manager),
    price_store: CurrencyPairRepositoryAdapter = Depends(get_price_store),
) -> None:
    """WebSocket endpoint for live instrument prices.

    The current snapshot is sent right after the handshake, then one
    snapshot per simulator tick.

    Protocol (JSON):
        ← {"type": "instrument-snapshot", "data": [...], "timestamp": "..."}

        → {"action": "ping"}
        ← {"type": "pong", "timestamp": "..."}

        → {"action": "snapshot"}
        ← {"type": "instrument-snapshot", ...}
    """
    snapshot: list[CurrencyPair] = await asyncio.to_thread(price_store.list_all)
    await manager.connect(websocket, snapshot)

    try:
        while True:
            raw = await websocket.receive_text()
            await manager.handle_client_message(websocket, raw)
    except WebSocketDisconnect:
        await manager.disconnect(websocket)
    except Exception:
        # Dropped by the broadcaster after a failed or slow send.
        if websocket.application_state is WebSocketState.DISCONNECTED:
            logger.debug("Price WebSocket closed after being dropped.")
        else:
            logger.exception("Price WebSocket closed unexpectedly.")
        await manager.disconnect(websocket)


# ------------------------------------------------------------------
# SSE endpoint
# ------------------------------------------------------------------


@router.get(
    "/stream/prices",
    summary="Server-Sent Events price stream",
    description="HTTP streaming endpoint for clients that can't use WebSocket.",
)
async def sse_prices(
    manager: PriceStreamManager = Depends(get_stream_manager),
    price_store: CurrencyPairRepositoryAdapter = Depends(get_price_store),
) -> StreamingResponse:
    """SSE endpoint: the current snapshot first, then one per tick."""
    snapshot = await asyncio.to_thread(price_store.list_all)
    return StreamingResponse(
        manager.sse_generator(snapshot),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


# ------------------------------------------------------------------
# Status endpoints
# ------------------------------------------------------------------


@router.get(
    "/stream/status",
    summary="Get stream status",
    description="Return subscriber and broadcast counters.",
)
def stream_status(
    manager: PriceStreamManager = Depends(get_stream_manager),
) -> dict:
    """Return streaming stats."""
    return manager.stats


@router.get(
    "/scheduler/status",
    summary="Get scheduler status",
    description="Return the price feed state and its recent ticks.",
)
def scheduler_status(
    feed: Optional[PriceFeedScheduler] = Depends(get_price_feed),
) -> dict:
    """Return scheduler status and recent tick history."""
    if feed is None:
        return {"running": False, "note": "Price feed not started."}
    return feed.get_status()
