"""
Use case: Open a funded account.

Input: CreateFundedAccountCommand
Output: FundedAccount (active, balance and equity = initial balance)
Side effects: Inserts a funded account row.
Failure cases: UserNotFoundError.
"""

from fxdesk.application.trading.dtos import CreateFundedAccountCommand
from fxdesk.domain.trading.entities import FundedAccount, NewFundedAccount
from fxdesk.domain.trading.errors import UserNotFoundError
from fxdesk.domain.trading.ports import FundedAccountRepository, UserRepository


class CreateFundedAccountUseCase:
    """Creates a funded account for the caller."""

    def __init__(
        self, funded_repo: FundedAccountRepository, user_repo: UserRepository
    ) -> None:
        self._funded_repo = funded_repo
        self._user_repo = user_repo

    def execute(self, command: CreateFundedAccountCommand) -> FundedAccount:
        if self._user_repo.get(command.user_id) is None:
            raise UserNotFoundError(command.user_id)
        return self._funded_repo.create(
            NewFundedAccount(
                user_id=command.user_id,
                account_type=command.account_type,
                initial_balance=command.initial_balance,
                max_drawdown=command.max_drawdown,
                profit_target=command.profit_target,
            )
        )
