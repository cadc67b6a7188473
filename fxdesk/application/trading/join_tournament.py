"""
Use case: Join an active tournament.

Input: JoinTournamentCommand
Output: TournamentParticipant seeded with the tournament's initial balance
Side effects: Inserts a participant row.
Failure cases: TournamentNotFoundError (absent or inactive),
    UserNotFoundError, AlreadyJoinedError.
"""

import logging

from fxdesk.application.trading.dtos import JoinTournamentCommand
from fxdesk.domain.trading.entities import TournamentParticipant
from fxdesk.domain.trading.errors import (
    AlreadyJoinedError,
    TournamentNotFoundError,
    UserNotFoundError,
)
from fxdesk.domain.trading.ports import TournamentRepository, UserRepository

logger = logging.getLogger(__name__)


class JoinTournamentUseCase:
    """Registers the caller in an active tournament."""

    def __init__(
        self, tournament_repo: TournamentRepository, user_repo: UserRepository
    ) -> None:
        self._tournament_repo = tournament_repo
        self._user_repo = user_repo

    def execute(self, command: JoinTournamentCommand) -> TournamentParticipant:
        tournament = self._tournament_repo.get(command.tournament_id)
        if tournament is None or not tournament.is_active:
            raise TournamentNotFoundError(command.tournament_id)
        if self._user_repo.get(command.user_id) is None:
            raise UserNotFoundError(command.user_id)
        if self._tournament_repo.find_participant(tournament.id, command.user_id):
            raise AlreadyJoinedError(tournament.id, command.user_id)

        return self._tournament_repo.add_participant(
            tournament_id=tournament.id,
            user_id=command.user_id,
            initial_balance=tournament.initial_balance,
        )
