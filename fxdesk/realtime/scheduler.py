"""
Periodic price feed.

Uses APScheduler's asyncio scheduler to run one job: simulate a tick
in a worker thread, then broadcast the new snapshot to subscribers.

The job is registered with ``max_instances=1`` and ``coalesce=True``,
so a tick that overruns its interval causes the next run to be
skipped instead of overlapping.
"""

import asyncio
import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from fxdesk.application.trading.simulate_prices import SimulatePriceTickUseCase
from fxdesk.realtime.stream import PriceStreamManager

logger = logging.getLogger(__name__)

PRICE_TICK_JOB_ID = "price_tick"


class TaskStatus(Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class TaskResult:
    """Result of one scheduled tick."""

    task_name: str
    status: TaskStatus
    started_at: str
    finished_at: Optional[str] = None
    duration_seconds: float = 0.0
    details: dict = field(default_factory=dict)
    error: Optional[str] = None


class PriceFeedScheduler:
    """Runs the price simulator on a fixed interval and fans out results.

    Errors inside a tick are logged and recorded in the task history;
    they never escape the job.

    Usage:
        scheduler = PriceFeedScheduler(simulator, stream_manager)
        scheduler.start()            # inside a running event loop
        await scheduler.run_now()    # trigger a tick immediately
        scheduler.stop()
    """

    def __init__(
        self,
        simulator: SimulatePriceTickUseCase,
        stream_manager: PriceStreamManager,
        interval_seconds: float = 5.0,
    ) -> None:
        self._simulator = simulator
        self._stream = stream_manager
        self._interval = interval_seconds
        self._task_history: list[TaskResult] = []
        self._max_history = 200
        self._lock = threading.Lock()
        self._scheduler: Any | None = None

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None

    @property
    def task_history(self) -> list[TaskResult]:
        with self._lock:
            return list(self._task_history)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the interval job. Must be called from a running event loop."""
        if self._scheduler is not None:
            logger.warning("Price feed already running.")
            return

        self._scheduler = AsyncIOScheduler(
            timezone="UTC",
            job_defaults={"coalesce": True, "max_instances": 1},
        )
        self._scheduler.add_job(
            self.run_now,
            IntervalTrigger(seconds=self._interval),
            id=PRICE_TICK_JOB_ID,
            name="Price simulator tick",
        )
        self._scheduler.start()
        logger.info("Price feed started, tick every %.1fs.", self._interval)

    def stop(self) -> None:
        """Stop the interval job without waiting for a running tick."""
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Price feed stopped.")

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    async def run_now(self) -> TaskResult:
        """Run one tick and broadcast its snapshot."""
        start = time.monotonic()
        started_at = datetime.now(timezone.utc).isoformat()
        try:
            tick = await asyncio.to_thread(self._simulator.execute)
            if tick.tick_skipped:
                status = TaskStatus.SKIPPED
                delivered = 0
            else:
                status = TaskStatus.COMPLETED
                delivered = await self._stream.broadcast_snapshot(tick.instruments)

            task_result = TaskResult(
                task_name=PRICE_TICK_JOB_ID,
                status=status,
                started_at=started_at,
                finished_at=datetime.now(timezone.utc).isoformat(),
                duration_seconds=round(time.monotonic() - start, 3),
                details={
                    "updated": tick.updated,
                    "skipped": tick.skipped,
                    "failed": tick.failed,
                    "delivered": delivered,
                },
            )
        except Exception as exc:
            task_result = TaskResult(
                task_name=PRICE_TICK_JOB_ID,
                status=TaskStatus.FAILED,
                started_at=started_at,
                finished_at=datetime.now(timezone.utc).isoformat(),
                duration_seconds=round(time.monotonic() - start, 3),
                error=str(exc),
            )
            logger.exception("Price tick failed.")

        self._record_result(task_result)
        return task_result

    def _record_result(self, result: TaskResult) -> None:
        with self._lock:
            self._task_history.append(result)
            if len(self._task_history) > self._max_history:
                self._task_history = self._task_history[-self._max_history:]

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def get_status(self) -> dict:
        """Return scheduler state and the most recent ticks."""
        next_run = None
        if self._scheduler is not None:
            job = self._scheduler.get_job(PRICE_TICK_JOB_ID)
            if job is not None and job.next_run_time is not None:
                next_run = job.next_run_time.isoformat()

        history = self.task_history[-10:]
        return {
            "running": self.is_running,
            "interval_seconds": self._interval,
            "next_run_time": next_run,
            "recent_ticks": [
                {
                    "status": r.status.value,
                    "started_at": r.started_at,
                    "duration_seconds": r.duration_seconds,
                    "details": r.details,
                    "error": r.error,
                }
                for r in history
            ],
        }
