"""
Adapter: Tournament repository.

Implements TournamentRepository port over the tournaments and
tournament_participants tables.
"""

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from fxdesk.domain.trading.entities import Tournament, TournamentParticipant
from fxdesk.domain.trading.errors import AlreadyJoinedError
from fxdesk.domain.trading.ports import TournamentRepository
from fxdesk.infrastructure.persistence.database import session_scope
from fxdesk.infrastructure.persistence.models import (
    TournamentParticipantRow,
    TournamentRow,
)

logger = logging.getLogger(__name__)


def to_tournament(row: TournamentRow) -> Tournament:
    return Tournament(
        id=row.id,
        name=row.name,
        description=row.description,
        start_date=row.start_date,
        end_date=row.end_date,
        initial_balance=row.initial_balance,
        is_active=bool(row.is_active),
        created_at=row.created_at,
    )


def to_participant(row: TournamentParticipantRow) -> TournamentParticipant:
    return TournamentParticipant(
        id=row.id,
        tournament_id=row.tournament_id,
        user_id=row.user_id,
        initial_balance=row.initial_balance,
        current_balance=row.current_balance,
        total_pnl=row.total_pnl,
        joined_at=row.joined_at,
    )


class TournamentRepositoryAdapter(TournamentRepository):
    """SQL implementation of the tournament repository."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def get(self, tournament_id: int) -> Optional[Tournament]:
        with session_scope(self._session_factory, "get_tournament") as session:
            row = session.get(TournamentRow, tournament_id)
            return to_tournament(row) if row is not None else None

    def get_active(self) -> Optional[Tournament]:
        """Return the lowest-id active tournament, if any."""
        with session_scope(self._session_factory, "get_active_tournament") as session:
            row = session.scalars(
                select(TournamentRow)
                .where(TournamentRow.is_active.is_(True))
                .order_by(TournamentRow.id)
                .limit(1)
            ).first()
            return to_tournament(row) if row is not None else None

    def list_participants(self, tournament_id: int) -> list[TournamentParticipant]:
        with session_scope(self._session_factory, "list_participants") as session:
            rows = session.scalars(
                select(TournamentParticipantRow)
                .where(TournamentParticipantRow.tournament_id == tournament_id)
                .order_by(TournamentParticipantRow.id)
            )
            return [to_participant(row) for row in rows]

    def find_participant(
        self, tournament_id: int, user_id: str
    ) -> Optional[TournamentParticipant]:
        with session_scope(self._session_factory, "find_participant") as session:
            row = session.scalars(
                select(TournamentParticipantRow).where(
                    TournamentParticipantRow.tournament_id == tournament_id,
                    TournamentParticipantRow.user_id == user_id,
                )
            ).first()
            return to_participant(row) if row is not None else None

    def add_participant(
        self, tournament_id: int, user_id: str, initial_balance: Decimal
    ) -> TournamentParticipant:
        with session_scope(self._session_factory, "add_participant") as session:
            row = TournamentParticipantRow(
                tournament_id=tournament_id,
                user_id=user_id,
                initial_balance=initial_balance,
                current_balance=initial_balance,
                total_pnl=Decimal("0"),
            )
            session.add(row)
            try:
                session.flush()
            except IntegrityError as exc:
                raise AlreadyJoinedError(tournament_id, user_id) from exc
            session.refresh(row)
            logger.info(
                "User %s joined tournament %d as participant %d",
                user_id,
                tournament_id,
                row.id,
            )
            return to_participant(row)

