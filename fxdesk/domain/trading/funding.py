"""
Funded account rules.

A funded account fails when its drawdown from the initial balance
reaches the allowed maximum, and passes when its profit reaches the
target. Terminal states are never re-evaluated.
"""

from dataclasses import dataclass
from decimal import Decimal

from fxdesk.domain.trading.entities import FundedAccount, FundedAccountStatus
from fxdesk.domain.trading.pricing import HUNDRED, MONEY_QUANT, quantize_percent


@dataclass(frozen=True)
class FundedEvaluation:
    """Outcome of applying a performance snapshot to an account."""

    drawdown: Decimal
    profit: Decimal
    status: FundedAccountStatus


def drawdown_percent(initial_balance: Decimal, equity: Decimal) -> Decimal:
    """Return the drawdown of equity below the initial balance, in percent."""
    if initial_balance <= 0:
        return Decimal("0")
    loss = initial_balance - equity
    if loss <= 0:
        return Decimal("0.00")
    return quantize_percent(loss / initial_balance * HUNDRED)


def evaluate_account(
    account: FundedAccount, balance: Decimal, equity: Decimal
) -> FundedEvaluation:
    """Evaluate drawdown, profit and resulting status for a snapshot."""
    drawdown = drawdown_percent(account.initial_balance, equity)
    profit = (balance - account.initial_balance).quantize(MONEY_QUANT)

    status = account.status
    if status is FundedAccountStatus.ACTIVE:
        if drawdown >= account.max_drawdown:
            status = FundedAccountStatus.FAILED
        elif account.profit_target is not None and profit >= account.profit_target:
            status = FundedAccountStatus.PASSED

    return FundedEvaluation(drawdown=drawdown, profit=profit, status=status)
