"""
Adapter: Trading position repository.

Implements PositionRepository port over the trading_positions table.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session, sessionmaker

from fxdesk.domain.trading.entities import (
    NewPosition,
    PositionStatus,
    PositionType,
    TradingPosition,
)
from fxdesk.domain.trading.errors import (
    PositionAlreadyClosedError,
    PositionNotFoundError,
)
from fxdesk.domain.trading.ports import PositionRepository
from fxdesk.infrastructure.persistence.database import session_scope
from fxdesk.infrastructure.persistence.models import TradingPositionRow


def to_position(row: TradingPositionRow) -> TradingPosition:
    return TradingPosition(
        id=row.id,
        user_id=row.user_id,
        currency_pair_id=row.currency_pair_id,
        type=PositionType(row.type),
        amount=row.amount,
        open_price=row.open_price,
        status=PositionStatus(row.status),
        close_price=row.close_price,
        current_pnl=row.current_pnl if row.current_pnl is not None else Decimal("0"),
        opened_at=row.opened_at,
        closed_at=row.closed_at,
    )


class PositionRepositoryAdapter(PositionRepository):
    """SQL implementation of the position repository."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def list_for_user(self, user_id: str) -> list[TradingPosition]:
        with session_scope(self._session_factory, "list_positions") as session:
            rows = session.scalars(
                select(TradingPositionRow)
                .where(TradingPositionRow.user_id == user_id)
                .order_by(TradingPositionRow.opened_at.desc(), TradingPositionRow.id.desc())
            )
            return [to_position(row) for row in rows]

    def get(self, position_id: int) -> Optional[TradingPosition]:
        with session_scope(self._session_factory, "get_position") as session:
            row = session.get(TradingPositionRow, position_id)
            return to_position(row) if row is not None else None

    def create(self, position: NewPosition) -> TradingPosition:
        with session_scope(self._session_factory, "create_position") as session:
            row = TradingPositionRow(
                user_id=position.user_id,
                currency_pair_id=position.currency_pair_id,
                type=position.type.value,
                amount=position.amount,
                open_price=position.open_price,
                current_pnl=Decimal("0"),
                status=PositionStatus.OPEN.value,
            )
            session.add(row)
            session.flush()
            session.refresh(row)
            return to_position(row)

    def close(
        self,
        position_id: int,
        close_price: Decimal,
        pnl: Decimal,
        closed_at: datetime,
    ) -> TradingPosition:
        with session_scope(self._session_factory, "close_position") as session:
            # Matches open rows only; a concurrent close sees rowcount 0.
            result = session.execute(
                update(TradingPositionRow)
                .where(
                    TradingPositionRow.id == position_id,
                    TradingPositionRow.status == PositionStatus.OPEN.value,
                )
                .values(
                    close_price=close_price,
                    current_pnl=pnl,
                    status=PositionStatus.CLOSED.value,
                    closed_at=closed_at,
                )
                .execution_options(synchronize_session=False)
            )
            row = session.get(TradingPositionRow, position_id)
            if row is None:
                raise PositionNotFoundError(position_id)
            if result.rowcount == 0:
                raise PositionAlreadyClosedError(position_id)
            return to_position(row)
