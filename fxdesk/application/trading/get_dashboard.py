"""
Use case: Build the dashboard aggregate for one user.

Input: GetDashboardQuery (user_id)
Output: DashboardResult
Side effects: None (read-only query).
Failure cases: UserNotFoundError, PersistenceError.
"""

import asyncio
import logging

from fxdesk.application.trading.dtos import DashboardResult, GetDashboardQuery
from fxdesk.domain.trading.errors import UserNotFoundError
from fxdesk.domain.trading.leaderboard import rank_by_profit
from fxdesk.domain.trading.ports import (
    CurrencyPairRepository,
    FundedAccountRepository,
    PositionRepository,
    TournamentRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)


class GetDashboardUseCase:
    """Composes user, quotes, tournament standing, positions and accounts.

    Independent sub-fetches run concurrently in worker threads and are
    joined before the aggregate is assembled. No partial result is
    ever returned.
    """

    def __init__(
        self,
        user_repo: UserRepository,
        tournament_repo: TournamentRepository,
        price_store: CurrencyPairRepository,
        position_repo: PositionRepository,
        funded_repo: FundedAccountRepository,
    ) -> None:
        self._user_repo = user_repo
        self._tournament_repo = tournament_repo
        self._price_store = price_store
        self._position_repo = position_repo
        self._funded_repo = funded_repo

    async def execute(self, query: GetDashboardQuery) -> DashboardResult:
        """Run the dashboard use case.

        Raises:
            UserNotFoundError: If the user record does not exist.
        """
        logger.info("Building dashboard for user=%s", query.user_id)

        user, tournament, pairs, positions, accounts = await asyncio.gather(
            asyncio.to_thread(self._user_repo.get, query.user_id),
            asyncio.to_thread(self._tournament_repo.get_active),
            asyncio.to_thread(self._price_store.list_all),
            asyncio.to_thread(self._position_repo.list_for_user, query.user_id),
            asyncio.to_thread(self._funded_repo.list_for_user, query.user_id),
        )
        if user is None:
            raise UserNotFoundError(query.user_id)

        leaderboard = []
        participant = None
        if tournament is not None:
            participants = await asyncio.to_thread(
                self._tournament_repo.list_participants, tournament.id
            )
            leaderboard = rank_by_profit(participants)
            participant = next(
                (row for row in leaderboard if row.entry.user_id == query.user_id),
                None,
            )

        return DashboardResult(
            user=user,
            currency_pairs=pairs,
            active_tournament=tournament,
            participant=participant,
            leaderboard=leaderboard,
            positions=positions,
            funded_accounts=accounts,
        )
