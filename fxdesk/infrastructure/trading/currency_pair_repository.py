"""
Adapter: Currency pair repository (the price store).

Implements CurrencyPairRepository port.
Every read of the full list is a single SELECT, so a reader sees
either the pre-tick or the post-tick value of each row.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from fxdesk.domain.trading.entities import CurrencyPair, QuoteUpdate
from fxdesk.domain.trading.errors import CurrencyPairNotFoundError
from fxdesk.domain.trading.ports import CurrencyPairRepository
from fxdesk.infrastructure.persistence.database import session_scope
from fxdesk.infrastructure.persistence.models import CurrencyPairRow


def to_currency_pair(row: CurrencyPairRow) -> CurrencyPair:
    return CurrencyPair(
        id=row.id,
        symbol=row.symbol,
        name=row.name,
        bid=row.bid,
        ask=row.ask,
        change=row.change,
        change_percent=row.change_percent,
        last_updated=row.last_updated,
    )


class CurrencyPairRepositoryAdapter(CurrencyPairRepository):
    """SQL implementation of the price store."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def list_all(self) -> list[CurrencyPair]:
        with session_scope(self._session_factory, "list_currency_pairs") as session:
            rows = session.scalars(select(CurrencyPairRow).order_by(CurrencyPairRow.id))
            return [to_currency_pair(row) for row in rows]

    def get(self, pair_id: int) -> Optional[CurrencyPair]:
        with session_scope(self._session_factory, "get_currency_pair") as session:
            row = session.get(CurrencyPairRow, pair_id)
            return to_currency_pair(row) if row is not None else None

    def update_quote(self, update: QuoteUpdate) -> CurrencyPair:
        """Write the new quote for one instrument.

        Raises:
            CurrencyPairNotFoundError: If the instrument was removed.
        """
        with session_scope(self._session_factory, "update_quote") as session:
            row = session.get(CurrencyPairRow, update.pair_id)
            if row is None:
                raise CurrencyPairNotFoundError(update.pair_id)
            row.bid = update.bid
            row.ask = update.ask
            row.change = update.change
            row.change_percent = update.change_percent
            row.last_updated = update.last_updated
            session.flush()
            return to_currency_pair(row)
