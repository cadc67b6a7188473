"""
Use case: Open a trading position.

Input: OpenPositionCommand
Output: TradingPosition (status open)
Side effects: Inserts a position row.
Failure cases: UserNotFoundError, CurrencyPairNotFoundError.
"""

import logging

from fxdesk.application.trading.dtos import OpenPositionCommand
from fxdesk.domain.trading.entities import NewPosition, TradingPosition
from fxdesk.domain.trading.errors import CurrencyPairNotFoundError, UserNotFoundError
from fxdesk.domain.trading.ports import (
    CurrencyPairRepository,
    PositionRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)


class OpenPositionUseCase:
    """Validates references, then persists a new open position."""

    def __init__(
        self,
        position_repo: PositionRepository,
        price_store: CurrencyPairRepository,
        user_repo: UserRepository,
    ) -> None:
        self._position_repo = position_repo
        self._price_store = price_store
        self._user_repo = user_repo

    def execute(self, command: OpenPositionCommand) -> TradingPosition:
        if self._user_repo.get(command.user_id) is None:
            raise UserNotFoundError(command.user_id)
        if self._price_store.get(command.currency_pair_id) is None:
            raise CurrencyPairNotFoundError(command.currency_pair_id)

        position = self._position_repo.create(
            NewPosition(
                user_id=command.user_id,
                currency_pair_id=command.currency_pair_id,
                type=command.type,
                amount=command.amount,
                open_price=command.open_price,
            )
        )
        logger.info(
            "Opened %s position %d on pair %d for user %s",
            position.type.value,
            position.id,
            position.currency_pair_id,
            position.user_id,
        )
        return position
