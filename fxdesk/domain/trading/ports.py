"""
Port interfaces (ABCs) for the trading bounded context.

Ports define the contracts that the domain requires from the outside world.
Infrastructure adapters implement these interfaces.
The domain layer never depends on concrete implementations.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Optional

from fxdesk.domain.trading.entities import (
    AccountPerformance,
    CurrencyPair,
    FundedAccount,
    FundedAccountStatus,
    FundedTrader,
    NewFundedAccount,
    NewPosition,
    QuoteUpdate,
    Tournament,
    TournamentParticipant,
    TradingPlan,
    TradingPosition,
    User,
)


class UserRepository(ABC):
    """Port for user records issued by the identity provider."""

    @abstractmethod
    def get(self, user_id: str) -> Optional[User]:
        """Return a user by id, or None."""
        raise NotImplementedError

    @abstractmethod
    def upsert(self, user: User) -> User:
        """Insert a user or update the existing record with the same id."""
        raise NotImplementedError


class TradingPlanRepository(ABC):
    """Port for subscription plans."""

    @abstractmethod
    def list_all(self) -> list[TradingPlan]:
        """Return all plans ordered by id."""
        raise NotImplementedError


class CurrencyPairRepository(ABC):
    """Port for the price store.

    ``list_all`` must read every instrument in one consistent query
    so readers never observe a half-applied update.
    """

    @abstractmethod
    def list_all(self) -> list[CurrencyPair]:
        """Return all instruments ordered by id."""
        raise NotImplementedError

    @abstractmethod
    def get(self, pair_id: int) -> Optional[CurrencyPair]:
        """Return one instrument, or None."""
        raise NotImplementedError

    @abstractmethod
    def update_quote(self, update: QuoteUpdate) -> CurrencyPair:
        """Persist a new quote for one instrument and return it."""
        raise NotImplementedError


class TournamentRepository(ABC):
    """Port for tournaments and their participants."""

    @abstractmethod
    def get(self, tournament_id: int) -> Optional[Tournament]:
        """Return a tournament by id, or None."""
        raise NotImplementedError

    @abstractmethod
    def get_active(self) -> Optional[Tournament]:
        """Return the currently active tournament, or None."""
        raise NotImplementedError

    @abstractmethod
    def list_participants(self, tournament_id: int) -> list[TournamentParticipant]:
        """Return participants ordered by id ascending."""
        raise NotImplementedError

    @abstractmethod
    def find_participant(
        self, tournament_id: int, user_id: str
    ) -> Optional[TournamentParticipant]:
        """Return a user's entry in a tournament, or None."""
        raise NotImplementedError

    @abstractmethod
    def add_participant(
        self, tournament_id: int, user_id: str, initial_balance: Decimal
    ) -> TournamentParticipant:
        """Create a participant seeded with the given balance.

        Raises:
            AlreadyJoinedError: The user already has an entry in the tournament.
        """
        raise NotImplementedError


class PositionRepository(ABC):
    """Port for trading positions."""

    @abstractmethod
    def list_for_user(self, user_id: str) -> list[TradingPosition]:
        """Return a user's positions, newest first."""
        raise NotImplementedError

    @abstractmethod
    def get(self, position_id: int) -> Optional[TradingPosition]:
        """Return a position by id, or None."""
        raise NotImplementedError

    @abstractmethod
    def create(self, position: NewPosition) -> TradingPosition:
        """Persist a new open position."""
        raise NotImplementedError

    @abstractmethod
    def close(
        self,
        position_id: int,
        close_price: Decimal,
        pnl: Decimal,
        closed_at: datetime,
    ) -> TradingPosition:
        """Mark an open position closed and return the updated record.

        Raises:
            PositionNotFoundError: No such position.
            PositionAlreadyClosedError: The position was already closed.
        """
        raise NotImplementedError


class FundedAccountRepository(ABC):
    """Port for funded accounts and their performance history."""

    @abstractmethod
    def list_for_user(self, user_id: str) -> list[FundedAccount]:
        """Return a user's funded accounts ordered by id."""
        raise NotImplementedError

    @abstractmethod
    def get(self, account_id: int) -> Optional[FundedAccount]:
        """Return a funded account by id, or None."""
        raise NotImplementedError

    @abstractmethod
    def create(self, account: NewFundedAccount) -> FundedAccount:
        """Persist a new active account seeded from its initial balance."""
        raise NotImplementedError

    @abstractmethod
    def apply_snapshot(
        self,
        account_id: int,
        balance: Decimal,
        equity: Decimal,
        drawdown: Decimal,
        profit: Decimal,
        status: FundedAccountStatus,
        trades_count: int,
    ) -> AccountPerformance:
        """Update the account and append a performance record atomically."""
        raise NotImplementedError

    @abstractmethod
    def list_performance(self, account_id: int) -> list[AccountPerformance]:
        """Return performance records, newest first."""
        raise NotImplementedError

    @abstractmethod
    def list_active_traders(self) -> list[FundedTrader]:
        """Return active accounts joined with their owners, ordered by id."""
        raise NotImplementedError
