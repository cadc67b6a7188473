"""
Use case: Rank the participants of a tournament.

Input: GetLeaderboardQuery (tournament_id)
Output: list[RankedEntry[TournamentParticipant]]
Side effects: None (read-only query).
Failure cases: TournamentNotFoundError.
"""

import logging

from fxdesk.application.trading.dtos import GetLeaderboardQuery
from fxdesk.domain.trading.entities import TournamentParticipant
from fxdesk.domain.trading.errors import TournamentNotFoundError
from fxdesk.domain.trading.leaderboard import RankedEntry, rank_by_profit
from fxdesk.domain.trading.ports import TournamentRepository

logger = logging.getLogger(__name__)


class GetTournamentLeaderboardUseCase:
    """Ranks tournament participants by profit, highest first."""

    def __init__(self, tournament_repo: TournamentRepository) -> None:
        self._tournament_repo = tournament_repo

    def execute(
        self, query: GetLeaderboardQuery
    ) -> list[RankedEntry[TournamentParticipant]]:
        """Run the leaderboard use case.

        Raises:
            TournamentNotFoundError: If the tournament does not exist.
        """
        if self._tournament_repo.get(query.tournament_id) is None:
            raise TournamentNotFoundError(query.tournament_id)

        participants = self._tournament_repo.list_participants(query.tournament_id)
        logger.info(
            "Ranking %d participants of tournament %d",
            len(participants),
            query.tournament_id,
        )
        return rank_by_profit(participants)
