"""
Shared fixtures.

Adapter and API tests run against a throwaway SQLite file database;
use-case tests build domain entities directly and mock the ports.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from fxdesk.domain.trading.entities import (
    CurrencyPair,
    FundedAccount,
    Tournament,
    TournamentParticipant,
    TradingPosition,
    PositionType,
    User,
)
from fxdesk.infrastructure.persistence.database import (
    build_engine,
    build_session_factory,
    create_schema,
    session_scope,
)
from fxdesk.infrastructure.persistence.models import (
    CurrencyPairRow,
    TournamentRow,
    TradingPlanRow,
    UserRow,
)

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


# =====================================================================
# Entity builders
# =====================================================================


def make_pair(pair_id: int = 1, symbol: str = "EURUSD", bid: str = "1.10000",
              ask: str = "1.10020") -> CurrencyPair:
    return CurrencyPair(
        id=pair_id,
        symbol=symbol,
        name=symbol,
        bid=Decimal(bid),
        ask=Decimal(ask),
        change=Decimal("0"),
        change_percent=Decimal("0"),
        last_updated=NOW,
    )


def make_participant(participant_id: int, current: str, initial: str = "10000.00",
                     user_id: str | None = None) -> TournamentParticipant:
    return TournamentParticipant(
        id=participant_id,
        tournament_id=1,
        user_id=user_id or f"user-{participant_id}",
        initial_balance=Decimal(initial),
        current_balance=Decimal(current),
        total_pnl=Decimal(current) - Decimal(initial),
    )


def make_tournament(tournament_id: int = 1, is_active: bool = True) -> Tournament:
    return Tournament(
        id=tournament_id,
        name="Spring Cup",
        start_date=NOW,
        end_date=NOW + timedelta(days=30),
        initial_balance=Decimal("10000.00"),
        is_active=is_active,
    )


def make_position(position_id: int = 1, user_id: str = "alice",
                  type_: PositionType = PositionType.BUY,
                  **overrides) -> TradingPosition:
    fields = dict(
        id=position_id,
        user_id=user_id,
        currency_pair_id=1,
        type=type_,
        amount=Decimal("1000.00"),
        open_price=Decimal("1.10000"),
        opened_at=NOW,
    )
    fields.update(overrides)
    return TradingPosition(**fields)


def make_funded_account(**overrides) -> FundedAccount:
    fields = dict(
        id=1,
        user_id="alice",
        account_type="Challenge",
        initial_balance=Decimal("10000.00"),
        current_balance=Decimal("10000.00"),
        equity=Decimal("10000.00"),
        max_drawdown=Decimal("10.00"),
        profit_target=Decimal("1000.00"),
    )
    fields.update(overrides)
    return FundedAccount(**fields)


def make_user(user_id: str = "alice") -> User:
    return User(id=user_id, email=f"{user_id}@example.com", first_name=user_id.title())


# =====================================================================
# Database fixtures
# =====================================================================


@pytest.fixture
def session_factory(tmp_path):
    """Session factory bound to a fresh SQLite file with the full schema."""
    engine = build_engine(f"sqlite:///{tmp_path / 'fxdesk.db'}")
    create_schema(engine)
    yield build_session_factory(engine)
    engine.dispose()


@pytest.fixture
def seeded(session_factory):
    """Two users, two instruments, one plan and one active tournament."""
    with session_scope(session_factory, "test_seed") as session:
        session.add_all([
            UserRow(id="alice", email="alice@example.com", first_name="Alice"),
            UserRow(id="bob", email="bob@example.com", first_name="Bob"),
            CurrencyPairRow(
                symbol="EURUSD", name="Euro / US Dollar",
                bid=Decimal("1.10000"), ask=Decimal("1.10020"),
            ),
            CurrencyPairRow(
                symbol="GBPUSD", name="British Pound / US Dollar",
                bid=Decimal("1.27000"), ask=Decimal("1.27025"),
            ),
            TradingPlanRow(
                name="Pro", price=Decimal("29.99"), max_positions=20,
                features=["Live quotes", "Funded challenges"], is_popular=True,
            ),
            TournamentRow(
                name="Spring Cup", start_date=NOW, end_date=NOW + timedelta(days=30),
                initial_balance=Decimal("10000.00"), is_active=True,
            ),
        ])
    return session_factory


# =====================================================================
# API fixtures
# =====================================================================


@pytest.fixture
def client(seeded):
    """TestClient wired to the seeded database.

    Not used as a context manager, so the price feed never starts.
    """
    from fastapi.testclient import TestClient

    from fxdesk.interfaces.trading.dependencies import get_db_session_factory
    from fxdesk.main import app
    from fxdesk.shared.security.rate_limiting import limiter

    app.dependency_overrides[get_db_session_factory] = lambda: seeded
    limiter.reset()
    yield TestClient(app)
    app.dependency_overrides.clear()
