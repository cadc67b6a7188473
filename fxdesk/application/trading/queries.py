"""
Read-only use cases that pass straight through to a single port.

Output: domain entities.
Side effects: None.
"""

from fxdesk.domain.trading.entities import (
    AccountPerformance,
    CurrencyPair,
    FundedAccount,
    Tournament,
    TradingPlan,
    TradingPosition,
    User,
)
from fxdesk.domain.trading.errors import (
    FundedAccountNotFoundError,
    TournamentNotFoundError,
    UserNotFoundError,
)
from fxdesk.domain.trading.ports import (
    CurrencyPairRepository,
    FundedAccountRepository,
    PositionRepository,
    TournamentRepository,
    TradingPlanRepository,
    UserRepository,
)


class GetCurrentUserUseCase:
    def __init__(self, user_repo: UserRepository) -> None:
        self._user_repo = user_repo

    def execute(self, user_id: str) -> User:
        user = self._user_repo.get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user


class ListCurrencyPairsUseCase:
    def __init__(self, price_store: CurrencyPairRepository) -> None:
        self._price_store = price_store

    def execute(self) -> list[CurrencyPair]:
        return self._price_store.list_all()


class ListTradingPlansUseCase:
    def __init__(self, plan_repo: TradingPlanRepository) -> None:
        self._plan_repo = plan_repo

    def execute(self) -> list[TradingPlan]:
        return self._plan_repo.list_all()


class GetActiveTournamentUseCase:
    def __init__(self, tournament_repo: TournamentRepository) -> None:
        self._tournament_repo = tournament_repo

    def execute(self) -> Tournament:
        """Raises TournamentNotFoundError when no tournament is active."""
        tournament = self._tournament_repo.get_active()
        if tournament is None:
            raise TournamentNotFoundError("active")
        return tournament


class ListPositionsUseCase:
    def __init__(self, position_repo: PositionRepository) -> None:
        self._position_repo = position_repo

    def execute(self, user_id: str) -> list[TradingPosition]:
        return self._position_repo.list_for_user(user_id)


class ListFundedAccountsUseCase:
    def __init__(self, funded_repo: FundedAccountRepository) -> None:
        self._funded_repo = funded_repo

    def execute(self, user_id: str) -> list[FundedAccount]:
        return self._funded_repo.list_for_user(user_id)


class ListAccountPerformanceUseCase:
    """Performance history of one of the caller's funded accounts."""

    def __init__(self, funded_repo: FundedAccountRepository) -> None:
        self._funded_repo = funded_repo

    def execute(self, user_id: str, account_id: int) -> list[AccountPerformance]:
        account = self._funded_repo.get(account_id)
        if account is None or account.user_id != user_id:
            raise FundedAccountNotFoundError(account_id)
        return self._funded_repo.list_performance(account_id)
