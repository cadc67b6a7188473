"""
FastAPI router for the trading bounded context.

All routes delegate to use cases. No business logic here.
Input validation is handled by Pydantic schemas.
Error mapping is handled by centralized error handlers.
Routes that act on the caller's own data require the identity header.
"""

from fastapi import APIRouter, Depends, Request

from fxdesk.application.trading.close_position import ClosePositionUseCase
from fxdesk.application.trading.create_funded_account import (
    CreateFundedAccountUseCase,
)
from fxdesk.application.trading.dtos import (
    ClosePositionCommand,
    CreateFundedAccountCommand,
    GetDashboardQuery,
    GetLeaderboardQuery,
    JoinTournamentCommand,
    OpenPositionCommand,
    RecordPerformanceCommand,
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
from fxdesk.interfaces.trading.dependencies import (
    get_active_tournament_use_case,
    get_close_position_use_case,
    get_create_funded_account_use_case,
    get_current_user_use_case,
    get_dashboard_use_case,
    get_funded_leaderboard_use_case,
    get_join_tournament_use_case,
    get_list_account_performance_use_case,
    get_list_currency_pairs_use_case,
    get_list_funded_accounts_use_case,
    get_list_positions_use_case,
    get_list_trading_plans_use_case,
    get_open_position_use_case,
    get_record_performance_use_case,
    get_tournament_leaderboard_use_case,
)
from fxdesk.interfaces.trading.schemas import (
    AccountPerformanceResponse,
    ClosePositionRequest,
    CreateFundedAccountRequest,
    CurrencyPairResponse,
    DashboardResponse,
    ErrorResponse,
    FundedAccountResponse,
    FundedTraderResponse,
    LeaderboardEntryResponse,
    OpenPositionRequest,
    ParticipantResponse,
    PositionResponse,
    RecordPerformanceRequest,
    RecordPerformanceResponse,
    TournamentResponse,
    TradingPlanResponse,
    UserResponse,
)
from fxdesk.shared.security.identity import get_current_user_id
from fxdesk.shared.security.rate_limiting import limiter

router = APIRouter(tags=["trading"])

_AUTH = {401: {"model": ErrorResponse}}
_NOT_FOUND = {404: {"model": ErrorResponse}}
_CONFLICT = {409: {"model": ErrorResponse}}
_INVALID = {422: {"model": ErrorResponse}}


# ── Account ──────────────────────────────────────────────────────────


@router.get(
    "/auth/user",
    response_model=UserResponse,
    responses={**_AUTH, **_NOT_FOUND},
    summary="Current user",
    description="Return the record of the authenticated user.",
)
def get_auth_user(
    user_id: str = Depends(get_current_user_id),
    use_case: GetCurrentUserUseCase = Depends(get_current_user_use_case),
) -> UserResponse:
    return UserResponse.model_validate(use_case.execute(user_id))


@router.get(
    "/dashboard",
    response_model=DashboardResponse,
    responses={**_AUTH, **_NOT_FOUND},
    summary="Dashboard aggregate",
    description=(
        "User, instrument quotes, active tournament standing, positions "
        "and funded accounts in one response."
    ),
)
async def get_dashboard(
    user_id: str = Depends(get_current_user_id),
    use_case: GetDashboardUseCase = Depends(get_dashboard_use_case),
) -> DashboardResponse:
    """Build the dashboard for the authenticated user."""
    result = await use_case.execute(GetDashboardQuery(user_id=user_id))
    participant = (
        LeaderboardEntryResponse.from_ranked(result.participant)
        if result.participant is not None
        else None
    )
    return DashboardResponse(
        user=UserResponse.model_validate(result.user),
        currency_pairs=[
            CurrencyPairResponse.model_validate(p) for p in result.currency_pairs
        ],
        active_tournament=(
            TournamentResponse.model_validate(result.active_tournament)
            if result.active_tournament is not None
            else None
        ),
        participant=participant,
        leaderboard=[
            LeaderboardEntryResponse.from_ranked(r) for r in result.leaderboard
        ],
        positions=[PositionResponse.model_validate(p) for p in result.positions],
        funded_accounts=[
            FundedAccountResponse.model_validate(a) for a in result.funded_accounts
        ],
    )


# ── Reference data ───────────────────────────────────────────────────


@router.get(
    "/currency-pairs",
    response_model=list[CurrencyPairResponse],
    summary="List currency pairs",
    description="Current bid/ask and last change of every instrument.",
)
def list_currency_pairs(
    use_case: ListCurrencyPairsUseCase = Depends(get_list_currency_pairs_use_case),
) -> list[CurrencyPairResponse]:
    return [CurrencyPairResponse.model_validate(p) for p in use_case.execute()]


@router.get(
    "/trading-plans",
    response_model=list[TradingPlanResponse],
    summary="List trading plans",
)
def list_trading_plans(
    use_case: ListTradingPlansUseCase = Depends(get_list_trading_plans_use_case),
) -> list[TradingPlanResponse]:
    return [TradingPlanResponse.model_validate(p) for p in use_case.execute()]


# ── Tournaments ──────────────────────────────────────────────────────


@router.get(
    "/tournaments/active",
    response_model=TournamentResponse,
    responses=_NOT_FOUND,
    summary="Active tournament",
)
def get_active_tournament(
    use_case: GetActiveTournamentUseCase = Depends(get_active_tournament_use_case),
) -> TournamentResponse:
    return TournamentResponse.model_validate(use_case.execute())


@router.get(
    "/tournament/{tournament_id}/leaderboard",
    response_model=list[LeaderboardEntryResponse],
    responses=_NOT_FOUND,
    summary="Tournament leaderboard",
    description="Participants ranked by profit, highest first. Ties keep join order.",
)
def get_tournament_leaderboard(
    tournament_id: int,
    use_case: GetTournamentLeaderboardUseCase = Depends(
        get_tournament_leaderboard_use_case
    ),
) -> list[LeaderboardEntryResponse]:
    ranked = use_case.execute(GetLeaderboardQuery(tournament_id=tournament_id))
    return [LeaderboardEntryResponse.from_ranked(r) for r in ranked]


@router.post(
    "/tournament/{tournament_id}/join",
    response_model=ParticipantResponse,
    status_code=201,
    responses={**_AUTH, **_NOT_FOUND, **_CONFLICT},
    summary="Join a tournament",
    description="Register the caller with the tournament's starting balance.",
)
@limiter.limit(settings.rate_limit_heavy)
def join_tournament(
    request: Request,
    tournament_id: int,
    user_id: str = Depends(get_current_user_id),
    use_case: JoinTournamentUseCase = Depends(get_join_tournament_use_case),
) -> ParticipantResponse:
    participant = use_case.execute(
        JoinTournamentCommand(user_id=user_id, tournament_id=tournament_id)
    )
    return ParticipantResponse.model_validate(participant)


# ── Positions ────────────────────────────────────────────────────────


@router.get(
    "/positions",
    response_model=list[PositionResponse],
    responses=_AUTH,
    summary="List positions",
    description="The caller's positions, newest first.",
)
def list_positions(
    user_id: str = Depends(get_current_user_id),
    use_case: ListPositionsUseCase = Depends(get_list_positions_use_case),
) -> list[PositionResponse]:
    return [PositionResponse.model_validate(p) for p in use_case.execute(user_id)]


@router.post(
    "/positions",
    response_model=PositionResponse,
    status_code=201,
    responses={**_AUTH, **_NOT_FOUND, **_INVALID},
    summary="Open a position",
)
@limiter.limit(settings.rate_limit_heavy)
def open_position(
    request: Request,
    payload: OpenPositionRequest,
    user_id: str = Depends(get_current_user_id),
    use_case: OpenPositionUseCase = Depends(get_open_position_use_case),
) -> PositionResponse:
    """Open a buy or sell position for the caller."""
    command = OpenPositionCommand(
        user_id=user_id,
        currency_pair_id=payload.currency_pair_id,
        type=payload.type,
        amount=payload.amount,
        open_price=payload.open_price,
    )
    return PositionResponse.model_validate(use_case.execute(command))


@router.put(
    "/positions/{position_id}/close",
    response_model=PositionResponse,
    responses={**_AUTH, **_NOT_FOUND, **_CONFLICT, **_INVALID},
    summary="Close a position",
    description="Close one of the caller's open positions and book its P&L.",
)
@limiter.limit(settings.rate_limit_heavy)
def close_position(
    request: Request,
    position_id: int,
    payload: ClosePositionRequest,
    user_id: str = Depends(get_current_user_id),
    use_case: ClosePositionUseCase = Depends(get_close_position_use_case),
) -> PositionResponse:
    command = ClosePositionCommand(
        user_id=user_id,
        position_id=position_id,
        close_price=payload.close_price,
    )
    return PositionResponse.model_validate(use_case.execute(command))


# ── Funded accounts ──────────────────────────────────────────────────


@router.get(
    "/funded-accounts",
    response_model=list[FundedAccountResponse],
    responses=_AUTH,
    summary="List funded accounts",
)
def list_funded_accounts(
    user_id: str = Depends(get_current_user_id),
    use_case: ListFundedAccountsUseCase = Depends(get_list_funded_accounts_use_case),
) -> list[FundedAccountResponse]:
    return [
        FundedAccountResponse.model_validate(a) for a in use_case.execute(user_id)
    ]


@router.post(
    "/funded-accounts",
    response_model=FundedAccountResponse,
    status_code=201,
    responses={**_AUTH, **_NOT_FOUND, **_INVALID},
    summary="Open a funded account",
)
@limiter.limit(settings.rate_limit_heavy)
def create_funded_account(
    request: Request,
    payload: CreateFundedAccountRequest,
    user_id: str = Depends(get_current_user_id),
    use_case: CreateFundedAccountUseCase = Depends(
        get_create_funded_account_use_case
    ),
) -> FundedAccountResponse:
    command = CreateFundedAccountCommand(
        user_id=user_id,
        account_type=payload.account_type,
        initial_balance=payload.initial_balance,
        max_drawdown=payload.max_drawdown,
        profit_target=payload.profit_target,
    )
    return FundedAccountResponse.model_validate(use_case.execute(command))


@router.get(
    "/funded-accounts/{account_id}/performance",
    response_model=list[AccountPerformanceResponse],
    responses={**_AUTH, **_NOT_FOUND},
    summary="Funded account performance history",
    description="Performance snapshots, newest first.",
)
def list_account_performance(
    account_id: int,
    user_id: str = Depends(get_current_user_id),
    use_case: ListAccountPerformanceUseCase = Depends(
        get_list_account_performance_use_case
    ),
) -> list[AccountPerformanceResponse]:
    return [
        AccountPerformanceResponse.model_validate(r)
        for r in use_case.execute(user_id, account_id)
    ]


@router.post(
    "/funded-accounts/{account_id}/performance",
    response_model=RecordPerformanceResponse,
    status_code=201,
    responses={**_AUTH, **_NOT_FOUND, **_INVALID},
    summary="Record a performance snapshot",
    description=(
        "Store balance and equity, recompute drawdown and profit, and "
        "re-evaluate the account against its drawdown limit and profit target."
    ),
)
@limiter.limit(settings.rate_limit_heavy)
def record_account_performance(
    request: Request,
    account_id: int,
    payload: RecordPerformanceRequest,
    user_id: str = Depends(get_current_user_id),
    use_case: RecordAccountPerformanceUseCase = Depends(
        get_record_performance_use_case
    ),
) -> RecordPerformanceResponse:
    command = RecordPerformanceCommand(
        user_id=user_id,
        account_id=account_id,
        balance=payload.balance,
        equity=payload.equity,
        trades_count=payload.trades_count,
    )
    result = use_case.execute(command)
    return RecordPerformanceResponse(
        performance=AccountPerformanceResponse.model_validate(result.performance),
        account_status=result.status,
    )


@router.get(
    "/leaderboard/funded-traders",
    response_model=list[FundedTraderResponse],
    summary="Funded trader leaderboard",
    description="Active funded accounts ranked by profit across all users.",
)
def get_funded_leaderboard(
    use_case: GetFundedLeaderboardUseCase = Depends(get_funded_leaderboard_use_case),
) -> list[FundedTraderResponse]:
    return [
        FundedTraderResponse(
            rank=r.rank,
            profit=r.profit,
            profit_percent=r.profit_percent,
            account=FundedAccountResponse.model_validate(r.entry.account),
            user=UserResponse.model_validate(r.entry.user),
        )
        for r in use_case.execute()
    ]
