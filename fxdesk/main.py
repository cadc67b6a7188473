"""
Application entry point.

Creates the FastAPI application and wires together:
- Routers (one per bounded context)
- Error handlers (centralized domain-to-HTTP mapping)
- Security middleware (headers, rate limiting)
- Logging configuration
- Real-time pipeline (price stream and price feed scheduler)

No business logic belongs here.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from fxdesk.application.trading.simulate_prices import SimulatePriceTickUseCase
from fxdesk.core.config import settings
from fxdesk.infrastructure.persistence.database import get_session_factory
from fxdesk.infrastructure.trading.currency_pair_repository import (
    CurrencyPairRepositoryAdapter,
)
from fxdesk.interfaces.health import router as health_router
from fxdesk.interfaces.realtime import router as realtime_router
from fxdesk.interfaces.trading.router import router as trading_router
from fxdesk.realtime.scheduler import PriceFeedScheduler
from fxdesk.realtime.stream import PriceStreamManager
from fxdesk.shared.errors.handlers import register_error_handlers
from fxdesk.shared.logging import configure_logging
from fxdesk.shared.security.headers import SecurityHeadersMiddleware
from fxdesk.shared.security.rate_limiting import limiter, rate_limit_exceeded_handler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: start/stop the price feed."""
    feed = None
    if settings.price_feed_enabled:
        simulator = SimulatePriceTickUseCase(
            price_store=CurrencyPairRepositoryAdapter(get_session_factory()),
            max_delta=settings.price_max_delta,
        )
        feed = PriceFeedScheduler(
            simulator=simulator,
            stream_manager=app.state.price_stream,
            interval_seconds=settings.price_tick_seconds,
        )
        feed.start()
        app.state.price_feed = feed
    else:
        logger.info("Price feed disabled by configuration.")

    yield

    if feed is not None:
        feed.stop()
        app.state.price_feed = None


def create_app() -> FastAPI:
    """Build the FastAPI app.

    The price stream manager is created here so routes and tests can
    reach it before the lifespan runs; the price feed itself is only
    started by the lifespan.
    """
    configure_logging(level=settings.log_level)

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # --- Rate Limiting ---
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # --- Security Middleware ---
    app.add_middleware(SecurityHeadersMiddleware)

    # --- Error Handlers ---
    register_error_handlers(app)

    # --- Real-time ---
    app.state.price_stream = PriceStreamManager(
        send_timeout=settings.broadcast_send_timeout
    )
    app.state.price_feed = None

    # --- Routers ---
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(trading_router, prefix="/api/v1")
    app.include_router(realtime_router, prefix="/api/v1")

    return app


app = create_app()
