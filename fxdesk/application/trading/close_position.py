"""
Use case: Close a trading position.

Input: ClosePositionCommand
Output: TradingPosition (status closed)
Side effects: Updates the position row.
Failure cases: PositionNotFoundError (absent or owned by someone else),
    PositionAlreadyClosedError.
"""

import logging
from datetime import datetime, timezone
from typing import Callable

from fxdesk.application.trading.dtos import ClosePositionCommand
from fxdesk.domain.trading.entities import PositionStatus, TradingPosition
from fxdesk.domain.trading.errors import (
    PositionAlreadyClosedError,
    PositionNotFoundError,
)
from fxdesk.domain.trading.ports import PositionRepository
from fxdesk.domain.trading.pricing import realized_pnl

logger = logging.getLogger(__name__)


class ClosePositionUseCase:
    """Closes an open position at the given price and books its P&L.

    The open price is never modified.
    """

    def __init__(
        self,
        position_repo: PositionRepository,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._position_repo = position_repo
        self._clock = clock

    def execute(self, command: ClosePositionCommand) -> TradingPosition:
        position = self._position_repo.get(command.position_id)
        if position is None or position.user_id != command.user_id:
            raise PositionNotFoundError(command.position_id)
        if position.status is PositionStatus.CLOSED:
            raise PositionAlreadyClosedError(command.position_id)

        pnl = realized_pnl(position, command.close_price)
        closed = self._position_repo.close(
            position_id=position.id,
            close_price=command.close_price,
            pnl=pnl,
            closed_at=self._clock(),
        )
        logger.info("Closed position %d with pnl=%s", closed.id, pnl)
        return closed
