"""
Domain-specific errors for the trading bounded context.

All errors raised from the domain layer must be defined here.
These are mapped to HTTP responses at the interface layer.
No framework imports allowed.
"""


class TradingDomainError(Exception):
    """Base error for all trading domain errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class EntityNotFoundError(TradingDomainError):
    """Raised when a referenced entity does not exist."""

    entity = "Entity"

    def __init__(self, entity_id: object) -> None:
        super().__init__(f"{self.entity} not found: {entity_id}")
        self.entity_id = entity_id


class UserNotFoundError(EntityNotFoundError):
    """Raised when a user record cannot be found."""

    entity = "User"


class TournamentNotFoundError(EntityNotFoundError):
    """Raised when a tournament is missing or not active."""

    entity = "Tournament"


class CurrencyPairNotFoundError(EntityNotFoundError):
    """Raised when a currency pair cannot be found."""

    entity = "Currency pair"


class PositionNotFoundError(EntityNotFoundError):
    """Raised when a trading position cannot be found for the caller."""

    entity = "Position"


class FundedAccountNotFoundError(EntityNotFoundError):
    """Raised when a funded account cannot be found for the caller."""

    entity = "Funded account"


class InvalidOperationError(TradingDomainError):
    """Raised when an operation conflicts with the current entity state."""


class PositionAlreadyClosedError(InvalidOperationError):
    """Raised when closing a position that is already closed."""

    def __init__(self, position_id: int) -> None:
        super().__init__(f"Position already closed: {position_id}")
        self.position_id = position_id


class AlreadyJoinedError(InvalidOperationError):
    """Raised when a user joins a tournament twice."""

    def __init__(self, tournament_id: int, user_id: str) -> None:
        super().__init__(
            f"User {user_id} already joined tournament {tournament_id}"
        )
        self.tournament_id = tournament_id
        self.user_id = user_id


class PersistenceError(TradingDomainError):
    """Raised when the underlying store is unavailable or rejects a write."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Persistence failure: {reason}")
        self.reason = reason
