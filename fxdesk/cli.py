"""
CLI entry point for FXDesk.

Usage:
    # Create the database schema
    python -m fxdesk.cli init-db

    # Insert demo instruments, plans, a tournament and a user
    python -m fxdesk.cli seed --user-id demo

    # Run a single price tick and print the new quotes
    python -m fxdesk.cli tick

    # Start the API server
    python -m fxdesk.cli serve --port 8000
"""

import argparse
import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy import func, select

from fxdesk.core.config import settings
from fxdesk.shared.logging import configure_logging

logger = logging.getLogger(__name__)

DEMO_PAIRS = [
    ("EURUSD", "Euro / US Dollar", "1.10000", "1.10020"),
    ("GBPUSD", "British Pound / US Dollar", "1.27000", "1.27025"),
    ("USDJPY", "US Dollar / Japanese Yen", "149.50000", "149.52000"),
    ("AUDUSD", "Australian Dollar / US Dollar", "0.65500", "0.65518"),
    ("USDCHF", "US Dollar / Swiss Franc", "0.88000", "0.88020"),
]

DEMO_PLANS = [
    ("Starter", "0.00", 3, ["Live quotes", "Tournament access"], False),
    ("Pro", "29.99", 20, ["Live quotes", "Tournament access", "Funded challenges"], True),
    ("Elite", "99.99", -1, ["Unlimited positions", "Priority funding review"], False),
]


def cmd_init_db(args: argparse.Namespace) -> None:
    """Create all tables that do not exist yet."""
    from fxdesk.infrastructure.persistence.database import create_schema, get_engine

    create_schema(get_engine())
    logger.info("Schema ready.")


def cmd_seed(args: argparse.Namespace) -> None:
    """Insert demo data into an empty database."""
    from fxdesk.domain.trading.entities import User
    from fxdesk.infrastructure.persistence.database import (
        create_schema,
        get_engine,
        get_session_factory,
        session_scope,
    )
    from fxdesk.infrastructure.persistence.models import (
        CurrencyPairRow,
        TournamentRow,
        TradingPlanRow,
    )
    from fxdesk.infrastructure.trading.user_repository import UserRepositoryAdapter

    create_schema(get_engine())
    factory = get_session_factory()

    with session_scope(factory, "seed") as session:
        if session.scalar(select(func.count()).select_from(CurrencyPairRow)):
            logger.warning("Database already seeded; nothing to do.")
            return

        for symbol, name, bid, ask in DEMO_PAIRS:
            session.add(CurrencyPairRow(
                symbol=symbol, name=name, bid=Decimal(bid), ask=Decimal(ask),
            ))
        for name, price, max_positions, features, popular in DEMO_PLANS:
            session.add(TradingPlanRow(
                name=name,
                price=Decimal(price),
                max_positions=max_positions,
                features=features,
                is_popular=popular,
            ))

        now = datetime.now(timezone.utc)
        session.add(TournamentRow(
            name="Monthly FX Cup",
            description="Best profit over the month wins.",
            start_date=now,
            end_date=now + timedelta(days=args.days),
            initial_balance=Decimal("10000.00"),
            is_active=True,
        ))

    UserRepositoryAdapter(factory).upsert(
        User(id=args.user_id, email=f"{args.user_id}@example.com", first_name="Demo")
    )
    logger.info(
        "Seeded %d pairs, %d plans, 1 tournament and user '%s'.",
        len(DEMO_PAIRS),
        len(DEMO_PLANS),
        args.user_id,
    )


def cmd_tick(args: argparse.Namespace) -> None:
    """Run one simulator tick outside the server."""
    from fxdesk.application.trading.simulate_prices import SimulatePriceTickUseCase
    from fxdesk.infrastructure.persistence.database import get_session_factory
    from fxdesk.infrastructure.trading.currency_pair_repository import (
        CurrencyPairRepositoryAdapter,
    )

    simulator = SimulatePriceTickUseCase(
        price_store=CurrencyPairRepositoryAdapter(get_session_factory()),
        max_delta=settings.price_max_delta,
    )
    result = simulator.execute()
    for pair in result.instruments:
        logger.info(
            "%s bid=%s ask=%s change=%s (%s%%)",
            pair.symbol,
            pair.bid,
            pair.ask,
            pair.change,
            pair.change_percent,
        )
    logger.info(
        "Tick done: updated=%d skipped=%d failed=%d",
        result.updated,
        result.skipped,
        result.failed,
    )


def cmd_serve(args: argparse.Namespace) -> None:
    """Start the API server with uvicorn."""
    import uvicorn

    logger.info("Starting FXDesk at http://%s:%d", args.host, args.port)
    logger.info("WebSocket: ws://%s:%d/api/v1/realtime/ws/prices", args.host, args.port)
    uvicorn.run("fxdesk.main:app", host=args.host, port=args.port, reload=args.reload)


def main() -> None:
    configure_logging(level=settings.log_level)

    parser = argparse.ArgumentParser(description="FXDesk CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # Schema
    init_parser = subparsers.add_parser("init-db", help="Create database tables")
    init_parser.set_defaults(func=cmd_init_db)

    # Seed
    seed_parser = subparsers.add_parser("seed", help="Insert demo data")
    seed_parser.add_argument(
        "--user-id", default="demo", dest="user_id",
        help="Id of the demo user (default 'demo')",
    )
    seed_parser.add_argument(
        "--days", type=int, default=30,
        help="Length of the demo tournament in days (default 30)",
    )
    seed_parser.set_defaults(func=cmd_seed)

    # Tick
    tick_parser = subparsers.add_parser("tick", help="Run one price simulator tick")
    tick_parser.set_defaults(func=cmd_tick)

    # Server
    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Bind address")
    serve_parser.add_argument(
        "--port", type=int, default=8000,
        help="Port for the API server (default 8000)",
    )
    serve_parser.add_argument(
        "--reload", action="store_true",
        help="Reload on code changes (development only)",
    )
    serve_parser.set_defaults(func=cmd_serve)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
