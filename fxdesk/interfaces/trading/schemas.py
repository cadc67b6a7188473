"""
Pydantic schemas for trading API request/response validation.

These schemas enforce input validation and define the API contract.
Write payloads reject unknown fields, so a client cannot smuggle in
owner ids or statuses. Decimals are serialized as strings.
No business logic belongs here.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from fxdesk.domain.trading.entities import (
    FundedAccountStatus,
    PositionStatus,
    PositionType,
    TournamentParticipant,
)
from fxdesk.domain.trading.leaderboard import RankedEntry


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    price_feed_running: bool = False
    price_subscribers: int = 0


class ErrorResponse(BaseModel):
    """Body of every error response."""

    error: str
    detail: Optional[str] = None


class EntityResponse(BaseModel):
    """Base for responses built from domain entities."""

    model_config = ConfigDict(from_attributes=True)


class WriteRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")


# ── Reference data ───────────────────────────────────────────────────


class UserResponse(EntityResponse):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    role: str
    subscription_plan_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TradingPlanResponse(EntityResponse):
    id: int
    name: str
    price: Decimal
    max_positions: int = Field(description="-1 means unlimited")
    features: list[str]
    is_popular: bool


class CurrencyPairResponse(EntityResponse):
    id: int
    symbol: str
    name: str
    bid: Decimal
    ask: Decimal
    change: Decimal
    change_percent: Decimal
    last_updated: Optional[datetime] = None


# ── Tournaments ──────────────────────────────────────────────────────


class TournamentResponse(EntityResponse):
    id: int
    name: str
    description: Optional[str] = None
    start_date: datetime
    end_date: datetime
    initial_balance: Decimal
    is_active: bool
    created_at: Optional[datetime] = None


class ParticipantResponse(EntityResponse):
    id: int
    tournament_id: int
    user_id: str
    initial_balance: Decimal
    current_balance: Decimal
    total_pnl: Decimal
    joined_at: Optional[datetime] = None


class LeaderboardEntryResponse(ParticipantResponse):
    """A participant with its derived rank and profit figures."""

    rank: int
    profit: Decimal
    profit_percent: Decimal

    @classmethod
    def from_ranked(
        cls, ranked: RankedEntry[TournamentParticipant]
    ) -> "LeaderboardEntryResponse":
        participant = ranked.entry
        return cls(
            id=participant.id,
            tournament_id=participant.tournament_id,
            user_id=participant.user_id,
            initial_balance=participant.initial_balance,
            current_balance=participant.current_balance,
            total_pnl=participant.total_pnl,
            joined_at=participant.joined_at,
            rank=ranked.rank,
            profit=ranked.profit,
            profit_percent=ranked.profit_percent,
        )


# ── Positions ────────────────────────────────────────────────────────


class OpenPositionRequest(WriteRequest):
    """Request schema for opening a position.

    Attributes:
        currency_pair_id: Instrument to trade.
        type: "buy" or "sell".
        amount: Position size, positive, 2 decimals.
        open_price: Entry price, positive, 5 decimals.
    """

    currency_pair_id: int = Field(..., ge=1)
    type: PositionType
    amount: Decimal = Field(..., gt=0, max_digits=15, decimal_places=2)
    open_price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=5)


class ClosePositionRequest(WriteRequest):
    close_price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=5)


class PositionResponse(EntityResponse):
    id: int
    user_id: str
    currency_pair_id: int
    type: PositionType
    amount: Decimal
    open_price: Decimal
    close_price: Optional[Decimal] = None
    current_pnl: Decimal
    status: PositionStatus
    opened_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None


# ── Funded accounts ──────────────────────────────────────────────────


class CreateFundedAccountRequest(WriteRequest):
    """Request schema for opening a funded account.

    Attributes:
        account_type: Program name, e.g. "Challenge", "Funded", "Pro".
        initial_balance: Starting capital.
        max_drawdown: Allowed drawdown, percent of initial balance.
        profit_target: Optional profit at which the account passes.
    """

    account_type: str = Field(..., min_length=1, max_length=50)
    initial_balance: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    max_drawdown: Decimal = Field(..., gt=0, le=100, max_digits=5, decimal_places=2)
    profit_target: Optional[Decimal] = Field(
        default=None, gt=0, max_digits=12, decimal_places=2
    )


class FundedAccountResponse(EntityResponse):
    id: int
    user_id: str
    account_type: str
    initial_balance: Decimal
    current_balance: Decimal
    equity: Decimal
    max_drawdown: Decimal
    current_drawdown: Decimal
    profit_target: Optional[Decimal] = None
    status: FundedAccountStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RecordPerformanceRequest(WriteRequest):
    balance: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    equity: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    trades_count: int = Field(default=0, ge=0)


class AccountPerformanceResponse(EntityResponse):
    id: int
    funded_account_id: int
    recorded_at: datetime
    balance: Decimal
    equity: Decimal
    drawdown: Decimal
    profit: Decimal
    trades_count: int


class RecordPerformanceResponse(BaseModel):
    performance: AccountPerformanceResponse
    account_status: FundedAccountStatus


class FundedTraderResponse(BaseModel):
    """One row of the global funded-trader leaderboard."""

    rank: int
    profit: Decimal
    profit_percent: Decimal
    account: FundedAccountResponse
    user: UserResponse


# ── Dashboard ────────────────────────────────────────────────────────


class DashboardResponse(BaseModel):
    user: UserResponse
    currency_pairs: list[CurrencyPairResponse]
    active_tournament: Optional[TournamentResponse] = None
    participant: Optional[LeaderboardEntryResponse] = None
    leaderboard: list[LeaderboardEntryResponse]
    positions: list[PositionResponse]
    funded_accounts: list[FundedAccountResponse]
