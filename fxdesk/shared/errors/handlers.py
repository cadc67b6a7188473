"""
Centralized error handlers for FastAPI.

Maps domain-specific errors to HTTP responses.
No stack traces or internal details are exposed to clients.
All error responses use the ErrorResponse schema.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from fxdesk.domain.trading.errors import (
    EntityNotFoundError,
    InvalidOperationError,
    PersistenceError,
    TradingDomainError,
)
from fxdesk.shared.security.identity import AuthenticationRequiredError

logger = logging.getLogger(__name__)

HTTP_401 = 401
HTTP_404 = 404
HTTP_409 = 409
HTTP_422 = 422
HTTP_500 = 500
HTTP_503 = 503


def _error_response(status_code: int, error: str, detail: str | None = None) -> JSONResponse:
    """Build a consistent JSON error response."""
    body: dict[str, str | None] = {"error": error}
    if detail:
        body["detail"] = detail
    return JSONResponse(status_code=status_code, content=body)


def register_error_handlers(app: FastAPI) -> None:
    """Register all domain error handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(AuthenticationRequiredError)
    async def handle_unauthenticated(
        _request: Request, exc: AuthenticationRequiredError
    ) -> JSONResponse:
        return _error_response(HTTP_401, "Authentication required")

    @app.exception_handler(RequestValidationError)
    async def handle_validation(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Flatten pydantic errors into one readable detail line."""
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        )
        return _error_response(HTTP_422, "Validation failed", problems)

    @app.exception_handler(EntityNotFoundError)
    async def handle_not_found(
        _request: Request, exc: EntityNotFoundError
    ) -> JSONResponse:
        """Handle missing user, tournament, pair, position or account."""
        logger.warning("%s not found: %s", exc.entity, exc.entity_id)
        return _error_response(HTTP_404, f"{exc.entity} not found")

    @app.exception_handler(InvalidOperationError)
    async def handle_invalid_operation(
        _request: Request, exc: InvalidOperationError
    ) -> JSONResponse:
        """Handle operations that conflict with the current entity state."""
        logger.warning("Rejected operation: %s", exc.message)
        return _error_response(HTTP_409, "Conflict", exc.message)

    @app.exception_handler(PersistenceError)
    async def handle_persistence(
        _request: Request, exc: PersistenceError
    ) -> JSONResponse:
        """Handle store outages and constraint violations. Never retried."""
        logger.error("Persistence error during %s", exc.reason)
        return _error_response(HTTP_503, "Storage unavailable")

    @app.exception_handler(TradingDomainError)
    async def handle_trading_domain(
        _request: Request, exc: TradingDomainError
    ) -> JSONResponse:
        """Catch-all for unhandled trading domain errors."""
        logger.error("Unhandled trading domain error: %s", exc.message)
        return _error_response(HTTP_500, "Internal server error")

    @app.exception_handler(Exception)
    async def handle_unexpected(
        _request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all for unexpected errors. Never exposes internals."""
        logger.exception("Unexpected error: %s", type(exc).__name__)
        return _error_response(HTTP_500, "Internal server error")
