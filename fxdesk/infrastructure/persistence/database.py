"""
Engine and session factory construction.

One engine per process; each repository call opens its own short
session from the factory, so adapters are safe to call from worker
threads.
"""

import logging
from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from fxdesk.core.config import settings
from fxdesk.domain.trading.errors import PersistenceError
from fxdesk.infrastructure.persistence.models import Base

logger = logging.getLogger(__name__)


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Build a SQLAlchemy engine for the given URL."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Return a session factory bound to the engine."""
    return sessionmaker(bind=engine, expire_on_commit=False)


def create_schema(engine: Engine) -> None:
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(engine)
    logger.info("Database schema ensured on %s", engine.url.render_as_string())


@contextmanager
def session_scope(
    factory: sessionmaker[Session], operation: str
) -> Iterator[Session]:
    """Open a session, commit on success, roll back on failure.

    SQLAlchemy errors are logged and re-raised as PersistenceError.

    Args:
        factory: Session factory to open the session from.
        operation: Short name of the calling operation, for logs.
    """
    session = factory()
    try:
        yield session
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("Persistence failure in %s: %s", operation, type(exc).__name__)
        raise PersistenceError(operation) from exc
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Return the process-wide engine built from settings."""
    return build_engine(settings.database_url, echo=settings.database_echo)


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker[Session]:
    """Return the process-wide session factory."""
    return build_session_factory(get_engine())
