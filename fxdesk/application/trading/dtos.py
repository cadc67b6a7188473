"""
Data Transfer Objects for the trading application layer.

DTOs carry data between the interface and application layers.
They are plain dataclasses with no behavior.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from fxdesk.domain.trading.entities import (
    AccountPerformance,
    CurrencyPair,
    FundedAccount,
    FundedAccountStatus,
    FundedTrader,
    PositionType,
    Tournament,
    TournamentParticipant,
    TradingPosition,
    User,
)
from fxdesk.domain.trading.leaderboard import RankedEntry


@dataclass(frozen=True)
class TickResult:
    """Outcome of one price simulator tick.

    Attributes:
        updated: Instruments whose quote was written.
        skipped: Instruments left untouched (non-positive bid).
        failed: Instruments whose update raised.
        instruments: Full instrument list read after the tick.
        tick_skipped: True when another tick was still running.
    """

    updated: int = 0
    skipped: int = 0
    failed: int = 0
    instruments: list[CurrencyPair] = field(default_factory=list)
    tick_skipped: bool = False


@dataclass(frozen=True)
class GetLeaderboardQuery:
    """Input DTO for a tournament leaderboard."""

    tournament_id: int


@dataclass(frozen=True)
class GetDashboardQuery:
    """Input DTO for the dashboard aggregate."""

    user_id: str


@dataclass(frozen=True)
class DashboardResult:
    """Output DTO: everything the dashboard page renders for one user.

    Attributes:
        user: The caller's user record.
        currency_pairs: Current instrument snapshot.
        active_tournament: Active tournament, or None.
        participant: Caller's ranked row in the active tournament, or None.
        leaderboard: Ranked participants of the active tournament.
        positions: Caller's positions, newest first.
        funded_accounts: Caller's funded accounts.
    """

    user: User
    currency_pairs: list[CurrencyPair]
    active_tournament: Optional[Tournament]
    participant: Optional[RankedEntry[TournamentParticipant]]
    leaderboard: list[RankedEntry[TournamentParticipant]]
    positions: list[TradingPosition]
    funded_accounts: list[FundedAccount]


@dataclass(frozen=True)
class OpenPositionCommand:
    """Input DTO for opening a trading position."""

    user_id: str
    currency_pair_id: int
    type: PositionType
    amount: Decimal
    open_price: Decimal


@dataclass(frozen=True)
class ClosePositionCommand:
    """Input DTO for closing a trading position."""

    user_id: str
    position_id: int
    close_price: Decimal


@dataclass(frozen=True)
class JoinTournamentCommand:
    """Input DTO for joining a tournament."""

    user_id: str
    tournament_id: int


@dataclass(frozen=True)
class CreateFundedAccountCommand:
    """Input DTO for opening a funded account."""

    user_id: str
    account_type: str
    initial_balance: Decimal
    max_drawdown: Decimal
    profit_target: Optional[Decimal] = None


@dataclass(frozen=True)
class RecordPerformanceCommand:
    """Input DTO for recording a funded account performance snapshot."""

    user_id: str
    account_id: int
    balance: Decimal
    equity: Decimal
    trades_count: int = 0


@dataclass(frozen=True)
class RecordPerformanceResult:
    """Output DTO: the stored record and the account's resulting status."""

    performance: AccountPerformance
    status: FundedAccountStatus


FundedTraderEntry = RankedEntry[FundedTrader]
