"""
Use case: Rank active funded traders globally.

Input: limit
Output: list[RankedEntry[FundedTrader]]
Side effects: None (read-only query).
"""

from fxdesk.domain.trading.entities import FundedTrader
from fxdesk.domain.trading.leaderboard import RankedEntry, rank_by_profit
from fxdesk.domain.trading.ports import FundedAccountRepository


class GetFundedLeaderboardUseCase:
    """Top active funded accounts by profit, with their owners."""

    def __init__(self, funded_repo: FundedAccountRepository, limit: int = 10) -> None:
        self._funded_repo = funded_repo
        self._limit = limit

    def execute(self) -> list[RankedEntry[FundedTrader]]:
        return rank_by_profit(self._funded_repo.list_active_traders())[: self._limit]
