"""
SQLAlchemy ORM models.

Table layout of the relational store. Decimal columns keep the
precision/scale used by the domain (5dp prices, 2dp money and
percentages). Rank is not stored; it is always derived.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

PRICE = Numeric(10, 5)
MONEY = Numeric(15, 2)
PERCENT = Numeric(5, 2)


class Base(DeclarativeBase):
    """Declarative base for all tables."""


class UserRow(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    email: Mapped[Optional[str]] = mapped_column(String, unique=True)
    first_name: Mapped[Optional[str]] = mapped_column(String)
    last_name: Mapped[Optional[str]] = mapped_column(String)
    profile_image_url: Mapped[Optional[str]] = mapped_column(String)
    role: Mapped[str] = mapped_column(String, default="user")
    subscription_plan_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("trading_plans.id")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class TradingPlanRow(Base):
    __tablename__ = "trading_plans"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    max_positions: Mapped[int] = mapped_column(Integer, nullable=False)
    features: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    is_popular: Mapped[bool] = mapped_column(Boolean, default=False)


class CurrencyPairRow(Base):
    __tablename__ = "currency_pairs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    symbol: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    bid: Mapped[Decimal] = mapped_column(PRICE, nullable=False)
    ask: Mapped[Decimal] = mapped_column(PRICE, nullable=False)
    change: Mapped[Decimal] = mapped_column(PRICE, nullable=False, default=Decimal("0"))
    change_percent: Mapped[Decimal] = mapped_column(
        PERCENT, nullable=False, default=Decimal("0")
    )
    last_updated: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class TournamentRow(Base):
    __tablename__ = "tournaments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    initial_balance: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class TournamentParticipantRow(Base):
    __tablename__ = "tournament_participants"
    __table_args__ = (UniqueConstraint("tournament_id", "user_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tournament_id: Mapped[int] = mapped_column(
        ForeignKey("tournaments.id"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)
    initial_balance: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    current_balance: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    total_pnl: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class TradingPositionRow(Base):
    __tablename__ = "trading_positions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    currency_pair_id: Mapped[int] = mapped_column(
        ForeignKey("currency_pairs.id"), nullable=False
    )
    type: Mapped[str] = mapped_column(String, nullable=False)
    amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    open_price: Mapped[Decimal] = mapped_column(PRICE, nullable=False)
    close_price: Mapped[Optional[Decimal]] = mapped_column(PRICE)
    current_pnl: Mapped[Decimal] = mapped_column(MONEY, default=Decimal("0"))
    status: Mapped[str] = mapped_column(String, default="open")
    opened_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    closed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))


class FundedAccountRow(Base):
    __tablename__ = "funded_accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    account_type: Mapped[str] = mapped_column(String(50), nullable=False)
    initial_balance: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    current_balance: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    equity: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    max_drawdown: Mapped[Decimal] = mapped_column(PERCENT, nullable=False)
    current_drawdown: Mapped[Decimal] = mapped_column(PERCENT, default=Decimal("0"))
    profit_target: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2))
    status: Mapped[str] = mapped_column(String(20), default="active")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class AccountPerformanceRow(Base):
    __tablename__ = "account_performance"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    funded_account_id: Mapped[int] = mapped_column(
        ForeignKey("funded_accounts.id"), nullable=False, index=True
    )
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    balance: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    equity: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    drawdown: Mapped[Decimal] = mapped_column(PERCENT, nullable=False)
    profit: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    trades_count: Mapped[int] = mapped_column(Integer, default=0)
