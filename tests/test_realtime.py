"""
Tests for the real-time price pipeline.

Covers:
- StreamEvent serialization
- PriceStreamManager (snapshot on connect, broadcast, dropping dead
  subscribers, client commands, SSE)
- Realtime route handlers (store read off the event loop)
- PriceFeedScheduler (tick + broadcast, skipped and failed ticks, status)
"""

import asyncio
import json
import threading
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import WebSocketDisconnect

from conftest import NOW, make_pair
from fxdesk.application.trading.dtos import TickResult
from fxdesk.interfaces.realtime import sse_prices, ws_prices
from fxdesk.realtime.scheduler import PriceFeedScheduler, TaskStatus
from fxdesk.realtime.stream import (
    SNAPSHOT_EVENT,
    PriceStreamManager,
    QueueSubscriber,
    StreamEvent,
    instrument_payload,
    snapshot_event,
)


def _socket() -> AsyncMock:
    ws = AsyncMock()
    ws.accept = AsyncMock()
    ws.send_text = AsyncMock()
    return ws


# =====================================================================
# StreamEvent
# =====================================================================


class TestStreamEvent:
    """Tests for the StreamEvent data class."""

    def test_to_json_produces_valid_json(self):
        event = StreamEvent(event_type="pong", data={"ok": True})
        parsed = json.loads(event.to_json())

        assert parsed["type"] == "pong"
        assert parsed["data"] == {"ok": True}
        assert "timestamp" in parsed

    def test_snapshot_shape(self):
        parsed = json.loads(snapshot_event([make_pair()]).to_json())

        assert parsed["type"] == SNAPSHOT_EVENT
        assert parsed["data"] == [instrument_payload(make_pair())]

    def test_instrument_payload_keeps_decimal_digits(self):
        payload = instrument_payload(make_pair(bid="1.10010", ask="1.10030"))

        assert payload["bid"] == "1.10010"
        assert payload["ask"] == "1.10030"
        assert payload["symbol"] == "EURUSD"
        assert payload["last_updated"] == NOW.isoformat()


# =====================================================================
# PriceStreamManager
# =====================================================================


class TestPriceStreamManager:
    """Tests for the WebSocket/SSE stream manager."""

    def test_initial_state(self):
        mgr = PriceStreamManager()
        assert mgr.active_connections == 0
        assert mgr.stats["total_broadcasts"] == 0

    @pytest.mark.asyncio
    async def test_connect_sends_snapshot_first(self):
        mgr = PriceStreamManager()
        ws = _socket()

        await mgr.connect(ws, [make_pair()])

        ws.accept.assert_awaited_once()
        ws.send_text.assert_awaited_once()
        first = json.loads(ws.send_text.await_args.args[0])
        assert first["type"] == SNAPSHOT_EVENT
        assert first["data"][0]["symbol"] == "EURUSD"
        assert mgr.active_connections == 1

        await mgr.disconnect(ws)
        assert mgr.active_connections == 0

    @pytest.mark.asyncio
    async def test_disconnect_unknown_is_noop(self):
        mgr = PriceStreamManager()
        await mgr.disconnect(_socket())
        assert mgr.active_connections == 0

    @pytest.mark.asyncio
    async def test_broadcast_sends_to_all_clients(self):
        mgr = PriceStreamManager()
        ws1, ws2 = _socket(), _socket()
        await mgr.subscribe(ws1)
        await mgr.subscribe(ws2)

        sent = await mgr.broadcast_snapshot([make_pair()])

        assert sent == 2
        for ws in (ws1, ws2):
            message = json.loads(ws.send_text.await_args.args[0])
            assert message["type"] == SNAPSHOT_EVENT

    @pytest.mark.asyncio
    async def test_failed_subscriber_is_dropped(self):
        mgr = PriceStreamManager()
        healthy, broken = _socket(), _socket()
        broken.send_text.side_effect = RuntimeError("socket closed")
        await mgr.subscribe(healthy)
        await mgr.subscribe(broken)

        sent = await mgr.broadcast_snapshot([make_pair()])

        assert sent == 1
        assert mgr.active_connections == 1
        assert mgr.stats["total_dropped"] == 1

        await mgr.broadcast_snapshot([make_pair()])
        assert broken.send_text.await_count == 1
        assert healthy.send_text.await_count == 2

    @pytest.mark.asyncio
    async def test_slow_subscriber_times_out_and_is_dropped(self):
        mgr = PriceStreamManager(send_timeout=0.05)
        fast, slow = _socket(), _socket()

        async def hang(_message):
            await asyncio.sleep(10)

        slow.send_text.side_effect = hang
        await mgr.subscribe(fast)
        await mgr.subscribe(slow)

        sent = await asyncio.wait_for(mgr.broadcast_snapshot([make_pair()]), 2)

        assert sent == 1
        assert mgr.active_connections == 1
        fast.send_text.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_broadcast_without_subscribers(self):
        mgr = PriceStreamManager()
        assert await mgr.broadcast_snapshot([make_pair()]) == 0
        assert mgr.stats["total_broadcasts"] == 1

    @pytest.mark.asyncio
    async def test_ping_pong(self):
        mgr = PriceStreamManager()
        ws = _socket()

        await mgr.handle_client_message(ws, json.dumps({"action": "ping"}))

        reply = json.loads(ws.send_text.await_args.args[0])
        assert reply["type"] == "pong"

    @pytest.mark.asyncio
    async def test_snapshot_command_returns_latest(self):
        mgr = PriceStreamManager()
        await mgr.broadcast_snapshot([make_pair(bid="1.20000", ask="1.20020")])
        ws = _socket()

        await mgr.handle_client_message(ws, json.dumps({"action": "snapshot"}))

        reply = json.loads(ws.send_text.await_args.args[0])
        assert reply["type"] == SNAPSHOT_EVENT
        assert reply["data"][0]["bid"] == "1.20000"

    @pytest.mark.asyncio
    async def test_invalid_json_gets_error(self):
        mgr = PriceStreamManager()
        ws = _socket()

        await mgr.handle_client_message(ws, "not json")

        reply = json.loads(ws.send_text.await_args.args[0])
        assert reply["type"] == "error"

    @pytest.mark.asyncio
    async def test_unknown_action_gets_error(self):
        mgr = PriceStreamManager()
        ws = _socket()

        await mgr.handle_client_message(ws, json.dumps({"action": "subscribe"}))

        reply = json.loads(ws.send_text.await_args.args[0])
        assert reply["type"] == "error"
        assert "ping" in reply["supported"]

    @pytest.mark.asyncio
    async def test_queue_subscriber_keeps_latest(self):
        sub = QueueSubscriber()
        await sub.send_text("first")
        await sub.send_text("second")
        assert await sub.receive() == "second"

    @pytest.mark.asyncio
    async def test_sse_generator_yields_snapshots(self):
        mgr = PriceStreamManager()
        gen = mgr.sse_generator([])

        assert await gen.__anext__() == ": connected\n\n"
        assert mgr.active_connections == 1

        await mgr.broadcast_snapshot([make_pair()])
        chunk = await asyncio.wait_for(gen.__anext__(), 1)

        assert chunk.startswith(f"event: {SNAPSHOT_EVENT}\ndata: ")
        assert chunk.endswith("\n\n")
        payload = json.loads(chunk.split("data: ", 1)[1])
        assert payload["data"][0]["symbol"] == "EURUSD"

        await gen.aclose()
        assert mgr.active_connections == 0

    @pytest.mark.asyncio
    async def test_sse_generator_sends_snapshot_before_first_tick(self):
        mgr = PriceStreamManager()
        gen = mgr.sse_generator([make_pair()])

        assert await gen.__anext__() == ": connected\n\n"
        chunk = await asyncio.wait_for(gen.__anext__(), 1)

        payload = json.loads(chunk.split("data: ", 1)[1])
        assert payload["type"] == SNAPSHOT_EVENT
        assert payload["data"][0]["symbol"] == "EURUSD"
        assert mgr.stats["total_broadcasts"] == 0

        await gen.aclose()

    @pytest.mark.asyncio
    async def test_snapshot_command_before_first_tick_repeats_connect_snapshot(self):
        mgr = PriceStreamManager()
        ws = _socket()
        await mgr.connect(ws, [make_pair()])

        await mgr.handle_client_message(ws, json.dumps({"action": "snapshot"}))

        reply = json.loads(ws.send_text.await_args.args[0])
        assert reply["type"] == SNAPSHOT_EVENT
        assert [item["symbol"] for item in reply["data"]] == ["EURUSD"]

    @pytest.mark.asyncio
    async def test_connect_does_not_replace_ticked_snapshot(self):
        mgr = PriceStreamManager()
        await mgr.broadcast_snapshot([make_pair(bid="1.20000", ask="1.20020")])
        ws = _socket()
        await mgr.connect(ws, [make_pair()])

        await mgr.handle_client_message(ws, json.dumps({"action": "snapshot"}))

        reply = json.loads(ws.send_text.await_args.args[0])
        assert reply["data"][0]["bid"] == "1.20000"

    @pytest.mark.asyncio
    async def test_dropped_socket_is_closed(self):
        mgr = PriceStreamManager()
        healthy, broken = _socket(), _socket()
        broken.send_text.side_effect = RuntimeError("socket closed")
        await mgr.subscribe(healthy)
        await mgr.subscribe(broken)

        await mgr.broadcast_snapshot([make_pair()])

        broken.close.assert_awaited_once()
        healthy.close.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failing_close_does_not_break_broadcast(self):
        mgr = PriceStreamManager()
        broken = _socket()
        broken.send_text.side_effect = RuntimeError("socket closed")
        broken.close.side_effect = RuntimeError("already closed")
        await mgr.subscribe(broken)

        assert await mgr.broadcast_snapshot([make_pair()]) == 0
        assert mgr.active_connections == 0


# =====================================================================
# Realtime routes
# =====================================================================


class TestRealtimeRoutes:
    """Route handlers called directly with a fake store."""

    def _store(self, seen_threads: list) -> MagicMock:
        store = MagicMock()

        def list_all():
            seen_threads.append(threading.get_ident())
            return [make_pair()]

        store.list_all.side_effect = list_all
        return store

    @pytest.mark.asyncio
    async def test_ws_reads_store_off_event_loop(self):
        seen: list = []
        mgr = PriceStreamManager()
        ws = _socket()
        ws.receive_text.side_effect = WebSocketDisconnect()

        await ws_prices(ws, manager=mgr, price_store=self._store(seen))

        assert seen and seen[0] != threading.get_ident()
        first = json.loads(ws.send_text.await_args_list[0].args[0])
        assert first["data"][0]["symbol"] == "EURUSD"
        assert mgr.active_connections == 0

    @pytest.mark.asyncio
    async def test_sse_route_starts_with_store_snapshot(self):
        seen: list = []
        mgr = PriceStreamManager()

        response = await sse_prices(manager=mgr, price_store=self._store(seen))
        body = response.body_iterator

        assert seen and seen[0] != threading.get_ident()
        assert await body.__anext__() == ": connected\n\n"
        chunk = await asyncio.wait_for(body.__anext__(), 1)
        assert json.loads(chunk.split("data: ", 1)[1])["data"][0]["symbol"] == "EURUSD"

        await body.aclose()


# =====================================================================
# PriceFeedScheduler
# =====================================================================


class TestPriceFeedScheduler:
    """Tests for the periodic tick + broadcast job."""

    def _scheduler(self, tick_result=None, error=None):
        simulator = MagicMock()
        if error is not None:
            simulator.execute.side_effect = error
        else:
            simulator.execute.return_value = tick_result
        stream = MagicMock()
        stream.broadcast_snapshot = AsyncMock(return_value=3)
        return PriceFeedScheduler(simulator, stream, interval_seconds=5), stream

    @pytest.mark.asyncio
    async def test_run_now_broadcasts_snapshot(self):
        pairs = [make_pair()]
        scheduler, stream = self._scheduler(TickResult(updated=1, instruments=pairs))

        result = await scheduler.run_now()

        assert result.status is TaskStatus.COMPLETED
        assert result.details["updated"] == 1
        assert result.details["delivered"] == 3
        stream.broadcast_snapshot.assert_awaited_once_with(pairs)

    @pytest.mark.asyncio
    async def test_skipped_tick_is_not_broadcast(self):
        scheduler, stream = self._scheduler(TickResult(tick_skipped=True))

        result = await scheduler.run_now()

        assert result.status is TaskStatus.SKIPPED
        stream.broadcast_snapshot.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_tick_is_recorded_not_raised(self):
        scheduler, stream = self._scheduler(error=RuntimeError("db down"))

        result = await scheduler.run_now()

        assert result.status is TaskStatus.FAILED
        assert "db down" in result.error
        stream.broadcast_snapshot.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_status_reports_history(self):
        scheduler, _ = self._scheduler(TickResult(instruments=[]))
        await scheduler.run_now()

        status = scheduler.get_status()

        assert status["running"] is False
        assert status["interval_seconds"] == 5
        assert status["recent_ticks"][0]["status"] == "completed"

    @pytest.mark.asyncio
    async def test_start_registers_single_instance_job(self):
        scheduler, _ = self._scheduler(TickResult())

        scheduler.start()
        try:
            job = scheduler._scheduler.get_job("price_tick")
            assert job is not None
            assert job.max_instances == 1
            assert job.coalesce is True
            assert scheduler.get_status()["next_run_time"] is not None
        finally:
            scheduler.stop()
        assert scheduler.is_running is False
