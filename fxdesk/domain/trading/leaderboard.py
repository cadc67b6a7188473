"""
Leaderboard ranking.

Orders balance-carrying entries (tournament participants, funded
traders) by profit, highest first. Rank is always derived here and
never read back from storage.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Generic, Iterable, Protocol, TypeVar

from fxdesk.domain.trading.pricing import HUNDRED, quantize_percent


class Balanced(Protocol):
    """Anything with an initial and a current balance."""

    @property
    def initial_balance(self) -> Decimal: ...

    @property
    def current_balance(self) -> Decimal: ...


T = TypeVar("T", bound=Balanced)


@dataclass(frozen=True)
class RankedEntry(Generic[T]):
    """An entry with its derived rank and profit figures."""

    entry: T
    rank: int
    profit: Decimal
    profit_percent: Decimal


def profit_of(entry: Balanced) -> Decimal:
    """Return current minus initial balance."""
    return entry.current_balance - entry.initial_balance


def profit_percent_of(entry: Balanced) -> Decimal:
    """Return profit as a percentage of the initial balance.

    A zero initial balance yields 0 rather than raising.
    """
    if entry.initial_balance == 0:
        return Decimal("0")
    return quantize_percent(profit_of(entry) / entry.initial_balance * HUNDRED)


def rank_by_profit(entries: Iterable[T]) -> list[RankedEntry[T]]:
    """Rank entries by profit, descending.

    The sort is stable: entries with equal profit keep their input
    order, so callers pass entries in identifier order to break ties
    by identifier. Ranks run 1..n by position.
    """
    ordered = sorted(entries, key=profit_of, reverse=True)
    return [
        RankedEntry(
            entry=entry,
            rank=position,
            profit=profit_of(entry),
            profit_percent=profit_percent_of(entry),
        )
        for position, entry in enumerate(ordered, start=1)
    ]
