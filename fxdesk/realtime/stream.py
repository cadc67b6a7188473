"""
WebSocket & SSE price stream manager.

Keeps the set of live subscribers and fans the full instrument list
out to all of them after every simulator tick.

Architecture:
    FastAPI WebSocket endpoint  ──▶  PriceStreamManager
                                          │
                                    ┌─────┴──────┐
                                    │ Subscriber  │
                                    │ set (lock)  │
                                    └─────┬──────┘
                                          │ broadcast_snapshot()
                                          ▼
                                  JSON snapshot to all

Delivery is at-most-once and latest-value-wins: a subscriber whose
send fails or times out is dropped, nothing is retried or replayed.
SSE clients get a queue that holds only the newest undelivered message.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Optional, Protocol

from fxdesk.domain.trading.entities import CurrencyPair

logger = logging.getLogger(__name__)

SNAPSHOT_EVENT = "instrument-snapshot"


class Subscriber(Protocol):
    """Anything that accepts text frames."""

    async def send_text(self, data: str) -> None: ...


def instrument_payload(pair: CurrencyPair) -> dict:
    """Serialize an instrument; decimals are sent as strings."""
    return {
        "id": pair.id,
        "symbol": pair.symbol,
        "name": pair.name,
        "bid": str(pair.bid),
        "ask": str(pair.ask),
        "change": str(pair.change),
        "change_percent": str(pair.change_percent),
        "last_updated": pair.last_updated.isoformat() if pair.last_updated else None,
    }


@dataclass
class StreamEvent:
    """A single message pushed to subscribers."""

    event_type: str
    data: Any
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_json(self) -> str:
        return json.dumps({
            "type": self.event_type,
            "data": self.data,
            "timestamp": self.timestamp,
        }, default=str)


def snapshot_event(instruments: list[CurrencyPair]) -> StreamEvent:
    return StreamEvent(
        event_type=SNAPSHOT_EVENT,
        data=[instrument_payload(pair) for pair in instruments],
    )


class QueueSubscriber:
    """Queue-backed subscriber for SSE clients.

    Holds at most one message; a newer message replaces an
    undelivered older one.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[str] = asyncio.Queue(maxsize=1)

    async def send_text(self, data: str) -> None:
        if self._queue.full():
            self._queue.get_nowait()
        self._queue.put_nowait(data)

    async def receive(self) -> str:
        return await self._queue.get()


class PriceStreamManager:
    """Manages real-time price streaming to WebSocket & SSE subscribers.

    Membership changes and the fan-out's view of the membership are
    guarded by one asyncio.Lock. Sends run concurrently, each bounded
    by ``send_timeout`` seconds, so a slow subscriber cannot hold up
    the others.

    Usage in FastAPI:
        manager = PriceStreamManager()

        @app.websocket("/ws/prices")
        async def ws_endpoint(ws: WebSocket):
            await manager.connect(ws, await asyncio.to_thread(store.list_all))
            try:
                while True:
                    msg = await ws.receive_text()
                    await manager.handle_client_message(ws, msg)
            except WebSocketDisconnect:
                await manager.disconnect(ws)

        # From the scheduler:
        await manager.broadcast_snapshot(instruments)
    """

    def __init__(self, send_timeout: float = 1.0) -> None:
        self._subscribers: set[Any] = set()
        self._lock = asyncio.Lock()
        self._send_timeout = send_timeout
        self._latest: Optional[StreamEvent] = None
        self._stats = {
            "total_connections": 0,
            "total_broadcasts": 0,
            "total_messages_sent": 0,
            "total_dropped": 0,
        }

    @property
    def active_connections(self) -> int:
        return len(self._subscribers)

    @property
    def stats(self) -> dict:
        return {**self._stats, "active_connections": self.active_connections}

    # ------------------------------------------------------------------
    # Subscriber lifecycle
    # ------------------------------------------------------------------

    async def connect(self, websocket: Any, snapshot: list[CurrencyPair]) -> None:
        """Accept a WebSocket, send it the current snapshot, then register it."""
        event = self._remember(snapshot)
        await websocket.accept()
        await websocket.send_text(event.to_json())
        await self.subscribe(websocket)

    def _remember(self, snapshot: list[CurrencyPair]) -> StreamEvent:
        """Build the on-subscribe event; it seeds ``_latest`` until the first tick."""
        event = snapshot_event(snapshot)
        if self._latest is None:
            self._latest = event
        return event

    async def subscribe(self, subscriber: Subscriber) -> None:
        async with self._lock:
            self._subscribers.add(subscriber)
        self._stats["total_connections"] += 1
        logger.info("Price subscriber connected. Active: %d", self.active_connections)

    async def disconnect(self, subscriber: Subscriber) -> None:
        """Remove a subscriber. Removing an unknown subscriber is a no-op."""
        async with self._lock:
            self._subscribers.discard(subscriber)
        logger.info("Price subscriber disconnected. Active: %d", self.active_connections)

    async def handle_client_message(self, websocket: Any, raw: str) -> None:
        """Process a message from a WebSocket client.

        Supported commands:
            {"action": "ping"}
            {"action": "snapshot"}
        """
        try:
            msg = json.loads(raw)
        except json.JSONDecodeError:
            await websocket.send_text(json.dumps({"type": "error", "error": "Invalid JSON"}))
            return

        action = msg.get("action", "") if isinstance(msg, dict) else ""

        if action == "ping":
            await websocket.send_text(json.dumps({
                "type": "pong",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }))

        elif action == "snapshot":
            latest = self._latest or snapshot_event([])
            await websocket.send_text(latest.to_json())

        else:
            await websocket.send_text(json.dumps({
                "type": "error",
                "error": f"Unknown action: {action}",
                "supported": ["ping", "snapshot"],
            }))

    # ------------------------------------------------------------------
    # Broadcasting
    # ------------------------------------------------------------------

    async def broadcast_snapshot(self, instruments: list[CurrencyPair]) -> int:
        """Send the instrument list to every subscriber.

        Returns the number of subscribers that received the message.
        """
        event = snapshot_event(instruments)
        self._latest = event
        self._stats["total_broadcasts"] += 1

        async with self._lock:
            subscribers = list(self._subscribers)
        if not subscribers:
            return 0

        message = event.to_json()
        delivered = await asyncio.gather(
            *(self._send(subscriber, message) for subscriber in subscribers)
        )

        dead = [s for s, ok in zip(subscribers, delivered) if not ok]
        if dead:
            async with self._lock:
                self._subscribers.difference_update(dead)
            await asyncio.gather(*(self._close(subscriber) for subscriber in dead))
            self._stats["total_dropped"] += len(dead)
            logger.info("Dropped %d unreachable price subscribers.", len(dead))

        sent = len(subscribers) - len(dead)
        self._stats["total_messages_sent"] += sent
        return sent

    async def _send(self, subscriber: Subscriber, message: str) -> bool:
        try:
            await asyncio.wait_for(subscriber.send_text(message), self._send_timeout)
            return True
        except Exception as exc:
            logger.debug("Send to subscriber failed: %s", type(exc).__name__)
            return False

    async def _close(self, subscriber: Any) -> None:
        """Close a dropped WebSocket so its receive loop ends too."""
        close = getattr(subscriber, "close", None)
        if close is None:
            return
        try:
            await asyncio.wait_for(close(), self._send_timeout)
        except Exception as exc:
            logger.debug("Closing dropped subscriber failed: %s", type(exc).__name__)

    # ------------------------------------------------------------------
    # SSE generator
    # ------------------------------------------------------------------

    async def sse_generator(
        self, snapshot: list[CurrencyPair]
    ) -> AsyncGenerator[str, None]:
        """Async generator that yields Server-Sent Events.

        Starts with ``snapshot``, then one event per tick.
        """
        subscriber = QueueSubscriber()
        await subscriber.send_text(self._remember(snapshot).to_json())
        await self.subscribe(subscriber)

        try:
            yield ": connected\n\n"
            while True:
                message = await subscriber.receive()
                yield f"event: {SNAPSHOT_EVENT}\ndata: {message}\n\n"
        finally:
            await self.disconnect(subscriber)
