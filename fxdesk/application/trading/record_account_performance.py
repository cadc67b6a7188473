"""
Use case: Record a funded account performance snapshot.

Input: RecordPerformanceCommand (balance, equity, trades_count)
Output: RecordPerformanceResult
Side effects: Updates account balances/status and appends a performance row.
Failure cases: FundedAccountNotFoundError (absent or owned by someone else).
"""

import logging

from fxdesk.application.trading.dtos import (
    RecordPerformanceCommand,
    RecordPerformanceResult,
)
from fxdesk.domain.trading.errors import FundedAccountNotFoundError
from fxdesk.domain.trading.funding import evaluate_account
from fxdesk.domain.trading.ports import FundedAccountRepository

logger = logging.getLogger(__name__)


class RecordAccountPerformanceUseCase:
    """Applies drawdown and profit-target rules to a new snapshot."""

    def __init__(self, funded_repo: FundedAccountRepository) -> None:
        self._funded_repo = funded_repo

    def execute(self, command: RecordPerformanceCommand) -> RecordPerformanceResult:
        account = self._funded_repo.get(command.account_id)
        if account is None or account.user_id != command.user_id:
            raise FundedAccountNotFoundError(command.account_id)

        evaluation = evaluate_account(account, command.balance, command.equity)
        if evaluation.status is not account.status:
            logger.info(
                "Funded account %d moved %s -> %s (drawdown=%s%%, profit=%s)",
                account.id,
                account.status.value,
                evaluation.status.value,
                evaluation.drawdown,
                evaluation.profit,
            )

        performance = self._funded_repo.apply_snapshot(
            account_id=account.id,
            balance=command.balance,
            equity=command.equity,
            drawdown=evaluation.drawdown,
            profit=evaluation.profit,
            status=evaluation.status,
            trades_count=command.trades_count,
        )
        return RecordPerformanceResult(performance=performance, status=evaluation.status)
