"""
Use case: Run one price simulator tick.

Input: none
Output: TickResult
Side effects: Writes a new quote for every instrument with a positive bid.
Failure cases: PersistenceError if the instrument list cannot be read.
    Per-instrument failures are logged and counted, never raised.
"""

import logging
import random
import threading
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Optional

from fxdesk.application.trading.dtos import TickResult
from fxdesk.domain.trading.ports import CurrencyPairRepository
from fxdesk.domain.trading.pricing import apply_tick, draw_delta

logger = logging.getLogger(__name__)

DEFAULT_MAX_DELTA = Decimal("0.0005")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SimulatePriceTickUseCase:
    """Perturbs every instrument's bid/ask by a small random delta.

    Single writer: a tick requested while another one is running
    returns immediately with ``tick_skipped=True``.
    """

    def __init__(
        self,
        price_store: CurrencyPairRepository,
        max_delta: Decimal = DEFAULT_MAX_DELTA,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._price_store = price_store
        self._max_delta = max_delta
        self._rng = rng or random.Random()
        self._clock = clock
        self._lock = threading.Lock()

    def execute(self) -> TickResult:
        """Run the tick and return the post-tick snapshot."""
        if not self._lock.acquire(blocking=False):
            logger.warning("Price tick still running; skipping this one.")
            return TickResult(tick_skipped=True)

        try:
            return self._tick()
        finally:
            self._lock.release()

    def _tick(self) -> TickResult:
        pairs = self._price_store.list_all()
        now = self._clock()
        updated = skipped = failed = 0

        for pair in pairs:
            try:
                bid_delta = draw_delta(self._rng, self._max_delta)
                ask_delta = draw_delta(self._rng, self._max_delta)
                update = apply_tick(pair, bid_delta, ask_delta, now)
                if update is None:
                    skipped += 1
                    logger.warning(
                        "Skipping %s: bid %s is not positive.", pair.symbol, pair.bid
                    )
                    continue
                self._price_store.update_quote(update)
                updated += 1
            except Exception:
                failed += 1
                logger.exception("Quote update failed for %s.", pair.symbol)

        logger.debug(
            "Price tick done: updated=%d skipped=%d failed=%d",
            updated,
            skipped,
            failed,
        )
        return TickResult(
            updated=updated,
            skipped=skipped,
            failed=failed,
            instruments=self._price_store.list_all(),
        )
