"""
Domain entities for the trading bounded context.

Entities represent core business objects with identity and lifecycle.
They contain no framework imports and no IO operations.
All monetary and price fields are Decimal.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class PositionType(Enum):
    """Direction of a trading position."""

    BUY = "buy"
    SELL = "sell"


class PositionStatus(Enum):
    """Lifecycle state of a trading position."""

    OPEN = "open"
    CLOSED = "closed"


class FundedAccountStatus(Enum):
    """Lifecycle state of a funded account."""

    ACTIVE = "active"
    SUSPENDED = "suspended"
    PASSED = "passed"
    FAILED = "failed"


@dataclass(frozen=True)
class User:
    """A platform user, identified by the identity provider's subject id."""

    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    role: str = "user"
    subscription_plan_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class TradingPlan:
    """A subscription plan. max_positions of -1 means unlimited."""

    id: int
    name: str
    price: Decimal
    max_positions: int
    features: list[str] = field(default_factory=list)
    is_popular: bool = False


@dataclass(frozen=True)
class CurrencyPair:
    """A tradable instrument with its latest bid/ask quote."""

    id: int
    symbol: str
    name: str
    bid: Decimal
    ask: Decimal
    change: Decimal
    change_percent: Decimal
    last_updated: Optional[datetime] = None


@dataclass(frozen=True)
class QuoteUpdate:
    """New quote values computed for one instrument during a tick."""

    pair_id: int
    bid: Decimal
    ask: Decimal
    change: Decimal
    change_percent: Decimal
    last_updated: datetime


@dataclass(frozen=True)
class Tournament:
    """A trading competition with a shared starting balance."""

    id: int
    name: str
    start_date: datetime
    end_date: datetime
    initial_balance: Decimal
    description: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class TournamentParticipant:
    """A user's entry in a tournament.

    Rank is not stored here; it is derived by the leaderboard ranker.
    """

    id: int
    tournament_id: int
    user_id: str
    initial_balance: Decimal
    current_balance: Decimal
    total_pnl: Decimal
    joined_at: Optional[datetime] = None


@dataclass(frozen=True)
class TradingPosition:
    """A buy or sell position on a currency pair."""

    id: int
    user_id: str
    currency_pair_id: int
    type: PositionType
    amount: Decimal
    open_price: Decimal
    status: PositionStatus = PositionStatus.OPEN
    close_price: Optional[Decimal] = None
    current_pnl: Decimal = Decimal("0")
    opened_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewPosition:
    """Fields required to open a position."""

    user_id: str
    currency_pair_id: int
    type: PositionType
    amount: Decimal
    open_price: Decimal


@dataclass(frozen=True)
class FundedAccount:
    """A capital-backed trading account subject to drawdown rules."""

    id: int
    user_id: str
    account_type: str
    initial_balance: Decimal
    current_balance: Decimal
    equity: Decimal
    max_drawdown: Decimal
    current_drawdown: Decimal = Decimal("0")
    profit_target: Optional[Decimal] = None
    status: FundedAccountStatus = FundedAccountStatus.ACTIVE
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewFundedAccount:
    """Fields required to open a funded account."""

    user_id: str
    account_type: str
    initial_balance: Decimal
    max_drawdown: Decimal
    profit_target: Optional[Decimal] = None


@dataclass(frozen=True)
class AccountPerformance:
    """A point-in-time performance record of a funded account."""

    id: int
    funded_account_id: int
    recorded_at: datetime
    balance: Decimal
    equity: Decimal
    drawdown: Decimal
    profit: Decimal
    trades_count: int = 0


@dataclass(frozen=True)
class FundedTrader:
    """A funded account joined with its owner, for the global leaderboard."""

    account: FundedAccount
    user: User

    @property
    def initial_balance(self) -> Decimal:
        return self.account.initial_balance

    @property
    def current_balance(self) -> Decimal:
        return self.account.current_balance
