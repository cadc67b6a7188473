"""
Dependency injection for the trading bounded context.

Provides FastAPI dependency functions that wire infrastructure
adapters into use cases via constructor injection.
These are the composition root for the trading context.

Every builder takes the session factory through ``Depends`` so tests
can swap the database with ``app.dependency_overrides``.
"""

from fastapi import Depends
from sqlalchemy.orm import Session, sessionmaker

from fxdesk.application.trading.close_position import ClosePositionUseCase
from fxdesk.application.trading.create_funded_account import (
    CreateFundedAccountUseCase,
)
from fxdesk.application.trading.get_dashboard import GetDashboardUseCase
from fxdesk.application.trading.get_funded_leaderboard import (
    GetFundedLeaderboardUseCase,
)
from fxdesk.application.trading.get_tournament_leaderboard import (
    GetTournamentLeaderboardUseCase,
)
from fxdesk.application.trading.join_tournament import JoinTournamentUseCase
from fxdesk.application.trading.open_position import OpenPositionUseCase
from fxdesk.application.trading.queries import (
    GetActiveTournamentUseCase,
    GetCurrentUserUseCase,
    ListAccountPerformanceUseCase,
    ListCurrencyPairsUseCase,
    ListFundedAccountsUseCase,
    ListPositionsUseCase,
    ListTradingPlansUseCase,
)
from fxdesk.application.trading.record_account_performance import (
    RecordAccountPerformanceUseCase,
)
from fxdesk.core.config import settings
from fxdesk.infrastructure.persistence.database import get_session_factory
from fxdesk.infrastructure.trading.currency_pair_repository import (
    CurrencyPairRepositoryAdapter,
)
from fxdesk.infrastructure.trading.funded_account_repository import (
    FundedAccountRepositoryAdapter,
)
from fxdesk.infrastructure.trading.position_repository import (
    PositionRepositoryAdapter,
)
from fxdesk.infrastructure.trading.tournament_repository import (
    TournamentRepositoryAdapter,
)
from fxdesk.infrastructure.trading.trading_plan_repository import (
    TradingPlanRepositoryAdapter,
)
from fxdesk.infrastructure.trading.user_repository import UserRepositoryAdapter

SessionFactory = sessionmaker[Session]


def get_db_session_factory() -> SessionFactory:
    """Return the process-wide session factory built from settings."""
    return get_session_factory()


def get_price_store(
    session_factory: SessionFactory = Depends(get_db_session_factory),
) -> CurrencyPairRepositoryAdapter:
    return CurrencyPairRepositoryAdapter(session_factory)


def get_current_user_use_case(
    session_factory: SessionFactory = Depends(get_db_session_factory),
) -> GetCurrentUserUseCase:
    """Build GetCurrentUserUseCase with its infrastructure dependencies."""
    return GetCurrentUserUseCase(user_repo=UserRepositoryAdapter(session_factory))


def get_list_currency_pairs_use_case(
    price_store: CurrencyPairRepositoryAdapter = Depends(get_price_store),
) -> ListCurrencyPairsUseCase:
    """Build ListCurrencyPairsUseCase with its infrastructure dependencies."""
    return ListCurrencyPairsUseCase(price_store=price_store)


def get_list_trading_plans_use_case(
    session_factory: SessionFactory = Depends(get_db_session_factory),
) -> ListTradingPlansUseCase:
    """Build ListTradingPlansUseCase with its infrastructure dependencies."""
    return ListTradingPlansUseCase(
        plan_repo=TradingPlanRepositoryAdapter(session_factory)
    )


def get_active_tournament_use_case(
    session_factory: SessionFactory = Depends(get_db_session_factory),
) -> GetActiveTournamentUseCase:
    """Build GetActiveTournamentUseCase with its infrastructure dependencies."""
    return GetActiveTournamentUseCase(
        tournament_repo=TournamentRepositoryAdapter(session_factory)
    )


def get_tournament_leaderboard_use_case(
    session_factory: SessionFactory = Depends(get_db_session_factory),
) -> GetTournamentLeaderboardUseCase:
    """Build GetTournamentLeaderboardUseCase with its infrastructure dependencies."""
    return GetTournamentLeaderboardUseCase(
        tournament_repo=TournamentRepositoryAdapter(session_factory)
    )


def get_join_tournament_use_case(
    session_factory: SessionFactory = Depends(get_db_session_factory),
) -> JoinTournamentUseCase:
    """Build JoinTournamentUseCase with its infrastructure dependencies."""
    return JoinTournamentUseCase(
        tournament_repo=TournamentRepositoryAdapter(session_factory),
        user_repo=UserRepositoryAdapter(session_factory),
    )


def get_dashboard_use_case(
    session_factory: SessionFactory = Depends(get_db_session_factory),
) -> GetDashboardUseCase:
    """Build GetDashboardUseCase with its infrastructure dependencies."""
    return GetDashboardUseCase(
        user_repo=UserRepositoryAdapter(session_factory),
        tournament_repo=TournamentRepositoryAdapter(session_factory),
        price_store=CurrencyPairRepositoryAdapter(session_factory),
        position_repo=PositionRepositoryAdapter(session_factory),
        funded_repo=FundedAccountRepositoryAdapter(session_factory),
    )


def get_list_positions_use_case(
    session_factory: SessionFactory = Depends(get_db_session_factory),
) -> ListPositionsUseCase:
    """Build ListPositionsUseCase with its infrastructure dependencies."""
    return ListPositionsUseCase(
        position_repo=PositionRepositoryAdapter(session_factory)
    )


def get_open_position_use_case(
    session_factory: SessionFactory = Depends(get_db_session_factory),
) -> OpenPositionUseCase:
    """Build OpenPositionUseCase with its infrastructure dependencies."""
    return OpenPositionUseCase(
        position_repo=PositionRepositoryAdapter(session_factory),
        price_store=CurrencyPairRepositoryAdapter(session_factory),
        user_repo=UserRepositoryAdapter(session_factory),
    )


def get_close_position_use_case(
    session_factory: SessionFactory = Depends(get_db_session_factory),
) -> ClosePositionUseCase:
    """Build ClosePositionUseCase with its infrastructure dependencies."""
    return ClosePositionUseCase(
        position_repo=PositionRepositoryAdapter(session_factory)
    )


def get_list_funded_accounts_use_case(
    session_factory: SessionFactory = Depends(get_db_session_factory),
) -> ListFundedAccountsUseCase:
    """Build ListFundedAccountsUseCase with its infrastructure dependencies."""
    return ListFundedAccountsUseCase(
        funded_repo=FundedAccountRepositoryAdapter(session_factory)
    )


def get_create_funded_account_use_case(
    session_factory: SessionFactory = Depends(get_db_session_factory),
) -> CreateFundedAccountUseCase:
    """Build CreateFundedAccountUseCase with its infrastructure dependencies."""
    return CreateFundedAccountUseCase(
        funded_repo=FundedAccountRepositoryAdapter(session_factory),
        user_repo=UserRepositoryAdapter(session_factory),
    )


def get_list_account_performance_use_case(
    session_factory: SessionFactory = Depends(get_db_session_factory),
) -> ListAccountPerformanceUseCase:
    """Build ListAccountPerformanceUseCase with its infrastructure dependencies."""
    return ListAccountPerformanceUseCase(
        funded_repo=FundedAccountRepositoryAdapter(session_factory)
    )


def get_record_performance_use_case(
    session_factory: SessionFactory = Depends(get_db_session_factory),
) -> RecordAccountPerformanceUseCase:
    """Build RecordAccountPerformanceUseCase with its infrastructure dependencies."""
    return RecordAccountPerformanceUseCase(
        funded_repo=FundedAccountRepositoryAdapter(session_factory)
    )


def get_funded_leaderboard_use_case(
    session_factory: SessionFactory = Depends(get_db_session_factory),
) -> GetFundedLeaderboardUseCase:
    """Build GetFundedLeaderboardUseCase with its infrastructure dependencies."""
    return GetFundedLeaderboardUseCase(
        funded_repo=FundedAccountRepositoryAdapter(session_factory),
        limit=settings.funded_leaderboard_limit,
    )
