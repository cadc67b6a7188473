"""
Adapter: Funded account repository.

Implements FundedAccountRepository port over the funded_accounts and
account_performance tables.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from fxdesk.domain.trading.entities import (
    AccountPerformance,
    FundedAccount,
    FundedAccountStatus,
    FundedTrader,
    NewFundedAccount,
)
from fxdesk.domain.trading.errors import FundedAccountNotFoundError
from fxdesk.domain.trading.ports import FundedAccountRepository
from fxdesk.infrastructure.persistence.database import session_scope
from fxdesk.infrastructure.persistence.models import (
    AccountPerformanceRow,
    FundedAccountRow,
    UserRow,
)
from fxdesk.infrastructure.trading.user_repository import to_user

logger = logging.getLogger(__name__)


def to_funded_account(row: FundedAccountRow) -> FundedAccount:
    return FundedAccount(
        id=row.id,
        user_id=row.user_id,
        account_type=row.account_type,
        initial_balance=row.initial_balance,
        current_balance=row.current_balance,
        equity=row.equity,
        max_drawdown=row.max_drawdown,
        current_drawdown=(
            row.current_drawdown if row.current_drawdown is not None else Decimal("0")
        ),
        profit_target=row.profit_target,
        status=FundedAccountStatus(row.status),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def to_performance(row: AccountPerformanceRow) -> AccountPerformance:
    return AccountPerformance(
        id=row.id,
        funded_account_id=row.funded_account_id,
        recorded_at=row.recorded_at,
        balance=row.balance,
        equity=row.equity,
        drawdown=row.drawdown,
        profit=row.profit,
        trades_count=row.trades_count or 0,
    )


class FundedAccountRepositoryAdapter(FundedAccountRepository):
    """SQL implementation of the funded account repository."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def list_for_user(self, user_id: str) -> list[FundedAccount]:
        with session_scope(self._session_factory, "list_funded_accounts") as session:
            rows = session.scalars(
                select(FundedAccountRow)
                .where(FundedAccountRow.user_id == user_id)
                .order_by(FundedAccountRow.id)
            )
            return [to_funded_account(row) for row in rows]

    def get(self, account_id: int) -> Optional[FundedAccount]:
        with session_scope(self._session_factory, "get_funded_account") as session:
            row = session.get(FundedAccountRow, account_id)
            return to_funded_account(row) if row is not None else None

    def create(self, account: NewFundedAccount) -> FundedAccount:
        with session_scope(self._session_factory, "create_funded_account") as session:
            row = FundedAccountRow(
                user_id=account.user_id,
                account_type=account.account_type,
                initial_balance=account.initial_balance,
                current_balance=account.initial_balance,
                equity=account.initial_balance,
                max_drawdown=account.max_drawdown,
                current_drawdown=Decimal("0"),
                profit_target=account.profit_target,
                status=FundedAccountStatus.ACTIVE.value,
            )
            session.add(row)
            session.flush()
            session.refresh(row)
            logger.info(
                "Created %s funded account %d for user %s",
                account.account_type,
                row.id,
                account.user_id,
            )
            return to_funded_account(row)

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
        """Update balances and status, and append a performance row.

        Both writes share one transaction.
        """
        now = datetime.now(timezone.utc)
        with session_scope(self._session_factory, "record_performance") as session:
            account = session.get(FundedAccountRow, account_id)
            if account is None:
                raise FundedAccountNotFoundError(account_id)
            account.current_balance = balance
            account.equity = equity
            account.current_drawdown = drawdown
            account.status = status.value
            account.updated_at = now

            record = AccountPerformanceRow(
                funded_account_id=account_id,
                recorded_at=now,
                balance=balance,
                equity=equity,
                drawdown=drawdown,
                profit=profit,
                trades_count=trades_count,
            )
            session.add(record)
            session.flush()
            return to_performance(record)

    def list_performance(self, account_id: int) -> list[AccountPerformance]:
        with session_scope(self._session_factory, "list_performance") as session:
            rows = session.scalars(
                select(AccountPerformanceRow)
                .where(AccountPerformanceRow.funded_account_id == account_id)
                .order_by(
                    AccountPerformanceRow.recorded_at.desc(),
                    AccountPerformanceRow.id.desc(),
                )
            )
            return [to_performance(row) for row in rows]

    def list_active_traders(self) -> list[FundedTrader]:
        with session_scope(self._session_factory, "list_active_traders") as session:
            rows = session.execute(
                select(FundedAccountRow, UserRow)
                .join(UserRow, FundedAccountRow.user_id == UserRow.id)
                .where(FundedAccountRow.status == FundedAccountStatus.ACTIVE.value)
                .order_by(FundedAccountRow.id)
            )
            return [
                FundedTrader(account=to_funded_account(account), user=to_user(user))
                for account, user in rows
            ]
