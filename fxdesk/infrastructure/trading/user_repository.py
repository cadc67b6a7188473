"""
Adapter: User repository.

Implements UserRepository port on top of the users table.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session, sessionmaker

from fxdesk.domain.trading.entities import User
from fxdesk.domain.trading.ports import UserRepository
from fxdesk.infrastructure.persistence.database import session_scope
from fxdesk.infrastructure.persistence.models import UserRow

logger = logging.getLogger(__name__)


def to_user(row: UserRow) -> User:
    return User(
        id=row.id,
        email=row.email,
        first_name=row.first_name,
        last_name=row.last_name,
        profile_image_url=row.profile_image_url,
        role=row.role,
        subscription_plan_id=row.subscription_plan_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class UserRepositoryAdapter(UserRepository):
    """SQL implementation of the user repository."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def get(self, user_id: str) -> Optional[User]:
        with session_scope(self._session_factory, "get_user") as session:
            row = session.get(UserRow, user_id)
            return to_user(row) if row is not None else None

    def upsert(self, user: User) -> User:
        """Insert the user, or overwrite profile fields of the existing row."""
        with session_scope(self._session_factory, "upsert_user") as session:
            row = session.get(UserRow, user.id)
            if row is None:
                row = UserRow(id=user.id)
                session.add(row)
            row.email = user.email
            row.first_name = user.first_name
            row.last_name = user.last_name
            row.profile_image_url = user.profile_image_url
            row.role = user.role
            row.subscription_plan_id = user.subscription_plan_id
            row.updated_at = datetime.now(timezone.utc)
            session.flush()
            session.refresh(row)
            logger.info("Upserted user %s", user.id)
            return to_user(row)
