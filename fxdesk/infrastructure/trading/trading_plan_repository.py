"""
Adapter: Trading plan repository.

Implements TradingPlanRepository port.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from fxdesk.domain.trading.entities import TradingPlan
from fxdesk.domain.trading.ports import TradingPlanRepository
from fxdesk.infrastructure.persistence.database import session_scope
from fxdesk.infrastructure.persistence.models import TradingPlanRow


class TradingPlanRepositoryAdapter(TradingPlanRepository):
    """Reads subscription plans from the trading_plans table."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def list_all(self) -> list[TradingPlan]:
        with session_scope(self._session_factory, "list_trading_plans") as session:
            rows = session.scalars(select(TradingPlanRow).order_by(TradingPlanRow.id))
            return [
                TradingPlan(
                    id=row.id,
                    name=row.name,
                    price=row.price,
                    max_positions=row.max_positions,
                    features=list(row.features or []),
                    is_popular=bool(row.is_popular),
                )
                for row in rows
            ]
