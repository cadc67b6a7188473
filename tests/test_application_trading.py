"""
Tests for the trading application layer (use cases).

Tests use cases with mocked ports. No real infrastructure needed.
Each test verifies orchestration logic, not business rules.
"""

import random
import threading
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from conftest import (
    NOW,
    make_funded_account,
    make_pair,
    make_participant,
    make_position,
    make_tournament,
    make_user,
)
from fxdesk.application.trading.close_position import ClosePositionUseCase
from fxdesk.application.trading.create_funded_account import (
    CreateFundedAccountUseCase,
)
from fxdesk.application.trading.dtos import (
    ClosePositionCommand,
    CreateFundedAccountCommand,
    GetDashboardQuery,
    GetLeaderboardQuery,
    JoinTournamentCommand,
    OpenPositionCommand,
    RecordPerformanceCommand,
)
from fxdesk.application.trading.get_dashboard import GetDashboardUseCase
from fxdesk.application.trading.get_funded_leaderboard import (
    GetFundedLeaderboardUseCase,
)
from fxdesk.application.trading.get_tournament_leaderboard import (
    GetTournamentLeaderboardUseCase,
)
from fxdesk.application.trading.join_tournament import JoinTournamentUseCase
from fxdesk.application.trading.open_position import OpenPositionUseCase
from fxdesk.application.trading.queries import (
    GetActiveTournamentUseCase,
    ListAccountPerformanceUseCase,
)
from fxdesk.application.trading.record_account_performance import (
    RecordAccountPerformanceUseCase,
)
from fxdesk.application.trading.simulate_prices import SimulatePriceTickUseCase
from fxdesk.domain.trading.entities import (
    CurrencyPair,
    FundedAccountStatus,
    FundedTrader,
    PositionStatus,
    PositionType,
    QuoteUpdate,
)
from fxdesk.domain.trading.errors import (
    AlreadyJoinedError,
    CurrencyPairNotFoundError,
    FundedAccountNotFoundError,
    PersistenceError,
    PositionAlreadyClosedError,
    PositionNotFoundError,
    TournamentNotFoundError,
    UserNotFoundError,
)
from fxdesk.domain.trading.ports import (
    CurrencyPairRepository,
    FundedAccountRepository,
    PositionRepository,
    TournamentRepository,
    UserRepository,
)


class InMemoryPriceStore(CurrencyPairRepository):
    """Price store that keeps quotes in a dict and can fail on demand."""

    def __init__(self, pairs: list[CurrencyPair], fail_ids: tuple[int, ...] = ()) -> None:
        self.pairs = {pair.id: pair for pair in pairs}
        self.fail_ids = set(fail_ids)
        self.updates: list[QuoteUpdate] = []

    def list_all(self) -> list[CurrencyPair]:
        return [self.pairs[key] for key in sorted(self.pairs)]

    def get(self, pair_id: int):
        return self.pairs.get(pair_id)

    def update_quote(self, update: QuoteUpdate) -> CurrencyPair:
        if update.pair_id in self.fail_ids:
            raise PersistenceError("update_quote")
        old = self.pairs[update.pair_id]
        new = CurrencyPair(
            id=old.id,
            symbol=old.symbol,
            name=old.name,
            bid=update.bid,
            ask=update.ask,
            change=update.change,
            change_percent=update.change_percent,
            last_updated=update.last_updated,
        )
        self.pairs[old.id] = new
        self.updates.append(update)
        return new


# =====================================================================
# Price simulator
# =====================================================================


class TestSimulatePriceTickUseCase:
    """Tests for one simulator tick."""

    def _use_case(self, store: InMemoryPriceStore, seed: int = 1) -> SimulatePriceTickUseCase:
        return SimulatePriceTickUseCase(
            price_store=store, rng=random.Random(seed), clock=lambda: NOW
        )

    def test_updates_every_instrument(self) -> None:
        before = [make_pair(1, "EURUSD"), make_pair(2, "GBPUSD", "1.27000", "1.27025")]
        store = InMemoryPriceStore(before)

        result = self._use_case(store).execute()

        assert result.updated == 2
        assert result.skipped == 0
        assert result.failed == 0
        assert not result.tick_skipped
        for old, new in zip(before, result.instruments):
            assert abs(new.bid - old.bid) <= Decimal("0.0005")
            assert abs(new.ask - old.ask) <= Decimal("0.0005")
            assert new.change == new.bid - old.bid
            assert new.last_updated == NOW

    def test_zero_bid_instrument_is_left_alone(self) -> None:
        zero = make_pair(1, "XXXYYY", bid="0.00000", ask="0.00010")
        store = InMemoryPriceStore([zero, make_pair(2, "EURUSD")])

        result = self._use_case(store).execute()

        assert result.skipped == 1
        assert result.updated == 1
        assert store.pairs[1] == zero

    def test_failure_of_one_instrument_does_not_stop_others(self) -> None:
        store = InMemoryPriceStore(
            [make_pair(1, "EURUSD"), make_pair(2, "GBPUSD"), make_pair(3, "AUDUSD")],
            fail_ids=(2,),
        )

        result = self._use_case(store).execute()

        assert result.failed == 1
        assert result.updated == 2
        assert [u.pair_id for u in store.updates] == [1, 3]
        assert len(result.instruments) == 3

    def test_tick_requested_while_running_is_skipped(self) -> None:
        """A second tick never overlaps the one in progress."""
        started = threading.Event()
        release = threading.Event()
        store = MagicMock()

        def slow_list_all():
            started.set()
            release.wait(timeout=5)
            return []

        store.list_all.side_effect = slow_list_all
        use_case = SimulatePriceTickUseCase(price_store=store)

        worker = threading.Thread(target=use_case.execute)
        worker.start()
        assert started.wait(timeout=5)

        result = use_case.execute()
        release.set()
        worker.join(timeout=5)

        assert result.tick_skipped is True
        store.update_quote.assert_not_called()

    def test_store_unreadable_raises(self) -> None:
        store = MagicMock()
        store.list_all.side_effect = PersistenceError("list_currency_pairs")

        with pytest.raises(PersistenceError):
            SimulatePriceTickUseCase(price_store=store).execute()


# =====================================================================
# Dashboard
# =====================================================================


def _dashboard_use_case(user=None, tournament=None, participants=()):
    user_repo = MagicMock(spec=UserRepository)
    user_repo.get.return_value = user
    tournament_repo = MagicMock(spec=TournamentRepository)
    tournament_repo.get_active.return_value = tournament
    tournament_repo.list_participants.return_value = list(participants)
    price_store = MagicMock(spec=CurrencyPairRepository)
    price_store.list_all.return_value = [make_pair()]
    position_repo = MagicMock(spec=PositionRepository)
    position_repo.list_for_user.return_value = [make_position()]
    funded_repo = MagicMock(spec=FundedAccountRepository)
    funded_repo.list_for_user.return_value = []
    use_case = GetDashboardUseCase(
        user_repo=user_repo,
        tournament_repo=tournament_repo,
        price_store=price_store,
        position_repo=position_repo,
        funded_repo=funded_repo,
    )
    return use_case, tournament_repo


class TestGetDashboardUseCase:
    """Tests for the dashboard aggregate."""

    @pytest.mark.asyncio
    async def test_no_active_tournament(self) -> None:
        """Dashboard succeeds with no tournament and an empty leaderboard."""
        use_case, tournament_repo = _dashboard_use_case(user=make_user())

        result = await use_case.execute(GetDashboardQuery(user_id="alice"))

        assert result.active_tournament is None
        assert result.leaderboard == []
        assert result.participant is None
        assert len(result.currency_pairs) == 1
        assert len(result.positions) == 1
        tournament_repo.list_participants.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_user_raises(self) -> None:
        use_case, _ = _dashboard_use_case(user=None)

        with pytest.raises(UserNotFoundError):
            await use_case.execute(GetDashboardQuery(user_id="ghost"))

    @pytest.mark.asyncio
    async def test_ranked_leaderboard_and_own_row(self) -> None:
        use_case, _ = _dashboard_use_case(
            user=make_user(),
            tournament=make_tournament(),
            participants=[
                make_participant(1, "10100.00", user_id="bob"),
                make_participant(2, "10800.00", user_id="alice"),
            ],
        )

        result = await use_case.execute(GetDashboardQuery(user_id="alice"))

        assert result.active_tournament.id == 1
        assert [r.entry.user_id for r in result.leaderboard] == ["alice", "bob"]
        assert result.participant.rank == 1
        assert result.participant.profit == Decimal("800.00")

    @pytest.mark.asyncio
    async def test_sub_fetch_failure_propagates(self) -> None:
        use_case, tournament_repo = _dashboard_use_case(user=make_user())
        tournament_repo.get_active.side_effect = PersistenceError("get_active_tournament")

        with pytest.raises(PersistenceError):
            await use_case.execute(GetDashboardQuery(user_id="alice"))


# =====================================================================
# Tournaments
# =====================================================================


class TestGetTournamentLeaderboardUseCase:
    """Tests for the tournament leaderboard."""

    def test_unknown_tournament_raises(self) -> None:
        repo = MagicMock(spec=TournamentRepository)
        repo.get.return_value = None

        with pytest.raises(TournamentNotFoundError):
            GetTournamentLeaderboardUseCase(repo).execute(GetLeaderboardQuery(99))

    def test_ties_keep_join_order(self) -> None:
        repo = MagicMock(spec=TournamentRepository)
        repo.get.return_value = make_tournament()
        repo.list_participants.return_value = [
            make_participant(1, "10500.00"),
            make_participant(2, "10500.00"),
        ]

        ranked = GetTournamentLeaderboardUseCase(repo).execute(GetLeaderboardQuery(1))

        assert [r.entry.id for r in ranked] == [1, 2]
        assert [r.rank for r in ranked] == [1, 2]


class TestGetActiveTournamentUseCase:
    def test_none_active_raises(self) -> None:
        repo = MagicMock(spec=TournamentRepository)
        repo.get_active.return_value = None

        with pytest.raises(TournamentNotFoundError):
            GetActiveTournamentUseCase(repo).execute()


class TestJoinTournamentUseCase:
    """Tests for joining a tournament."""

    def _repos(self, tournament=None, user=None, existing=None):
        tournament_repo = MagicMock(spec=TournamentRepository)
        tournament_repo.get.return_value = tournament
        tournament_repo.find_participant.return_value = existing
        user_repo = MagicMock(spec=UserRepository)
        user_repo.get.return_value = user
        return tournament_repo, user_repo

    def test_joins_with_tournament_balance(self) -> None:
        tournament_repo, user_repo = self._repos(make_tournament(), make_user())

        JoinTournamentUseCase(tournament_repo, user_repo).execute(
            JoinTournamentCommand(user_id="alice", tournament_id=1)
        )

        tournament_repo.add_participant.assert_called_once_with(
            tournament_id=1, user_id="alice", initial_balance=Decimal("10000.00")
        )

    def test_inactive_tournament_raises(self) -> None:
        tournament_repo, user_repo = self._repos(
            make_tournament(is_active=False), make_user()
        )

        with pytest.raises(TournamentNotFoundError):
            JoinTournamentUseCase(tournament_repo, user_repo).execute(
                JoinTournamentCommand(user_id="alice", tournament_id=1)
            )

    def test_unknown_user_raises(self) -> None:
        tournament_repo, user_repo = self._repos(make_tournament(), None)

        with pytest.raises(UserNotFoundError):
            JoinTournamentUseCase(tournament_repo, user_repo).execute(
                JoinTournamentCommand(user_id="ghost", tournament_id=1)
            )

    def test_duplicate_join_raises(self) -> None:
        tournament_repo, user_repo = self._repos(
            make_tournament(), make_user(), existing=make_participant(1, "10000.00")
        )

        with pytest.raises(AlreadyJoinedError):
            JoinTournamentUseCase(tournament_repo, user_repo).execute(
                JoinTournamentCommand(user_id="alice", tournament_id=1)
            )
        tournament_repo.add_participant.assert_not_called()


# =====================================================================
# Positions
# =====================================================================


class TestOpenPositionUseCase:
    """Tests for opening positions."""

    def test_unknown_pair_raises(self) -> None:
        position_repo = MagicMock(spec=PositionRepository)
        price_store = MagicMock(spec=CurrencyPairRepository)
        price_store.get.return_value = None
        user_repo = MagicMock(spec=UserRepository)
        user_repo.get.return_value = make_user()

        with pytest.raises(CurrencyPairNotFoundError):
            OpenPositionUseCase(position_repo, price_store, user_repo).execute(
                OpenPositionCommand(
                    user_id="alice",
                    currency_pair_id=42,
                    type=PositionType.BUY,
                    amount=Decimal("1000.00"),
                    open_price=Decimal("1.10000"),
                )
            )
        position_repo.create.assert_not_called()

    def test_creates_position(self) -> None:
        position_repo = MagicMock(spec=PositionRepository)
        position_repo.create.return_value = make_position()
        price_store = MagicMock(spec=CurrencyPairRepository)
        price_store.get.return_value = make_pair()
        user_repo = MagicMock(spec=UserRepository)
        user_repo.get.return_value = make_user()

        position = OpenPositionUseCase(position_repo, price_store, user_repo).execute(
            OpenPositionCommand(
                user_id="alice",
                currency_pair_id=1,
                type=PositionType.BUY,
                amount=Decimal("1000.00"),
                open_price=Decimal("1.10000"),
            )
        )

        assert position.status is PositionStatus.OPEN
        new = position_repo.create.call_args.args[0]
        assert new.user_id == "alice"
        assert new.type is PositionType.BUY


class TestClosePositionUseCase:
    """Tests for closing positions."""

    def test_close_books_pnl_and_keeps_open_price(self) -> None:
        repo = MagicMock(spec=PositionRepository)
        repo.get.return_value = make_position()
        repo.close.side_effect = lambda position_id, close_price, pnl, closed_at: (
            make_position(
                status=PositionStatus.CLOSED,
                close_price=close_price,
                current_pnl=pnl,
                closed_at=closed_at,
            )
        )

        closed = ClosePositionUseCase(repo, clock=lambda: NOW).execute(
            ClosePositionCommand(
                user_id="alice", position_id=1, close_price=Decimal("1.10250")
            )
        )

        repo.close.assert_called_once_with(
            position_id=1,
            close_price=Decimal("1.10250"),
            pnl=Decimal("2.50"),
            closed_at=NOW,
        )
        assert closed.status is PositionStatus.CLOSED
        assert closed.closed_at == NOW
        assert closed.open_price == Decimal("1.10000")

    def test_other_users_position_is_not_found(self) -> None:
        repo = MagicMock(spec=PositionRepository)
        repo.get.return_value = make_position(user_id="bob")

        with pytest.raises(PositionNotFoundError):
            ClosePositionUseCase(repo).execute(
                ClosePositionCommand(
                    user_id="alice", position_id=1, close_price=Decimal("1.1")
                )
            )

    def test_already_closed_raises(self) -> None:
        repo = MagicMock(spec=PositionRepository)
        repo.get.return_value = make_position(status=PositionStatus.CLOSED)

        with pytest.raises(PositionAlreadyClosedError):
            ClosePositionUseCase(repo).execute(
                ClosePositionCommand(
                    user_id="alice", position_id=1, close_price=Decimal("1.1")
                )
            )
        repo.close.assert_not_called()


# =====================================================================
# Funded accounts
# =====================================================================


class TestCreateFundedAccountUseCase:
    def test_unknown_user_raises(self) -> None:
        funded_repo = MagicMock(spec=FundedAccountRepository)
        user_repo = MagicMock(spec=UserRepository)
        user_repo.get.return_value = None

        with pytest.raises(UserNotFoundError):
            CreateFundedAccountUseCase(funded_repo, user_repo).execute(
                CreateFundedAccountCommand(
                    user_id="ghost",
                    account_type="Challenge",
                    initial_balance=Decimal("10000.00"),
                    max_drawdown=Decimal("10.00"),
                )
            )


class TestRecordAccountPerformanceUseCase:
    """Tests for recording funded account snapshots."""

    def test_breach_fails_the_account(self) -> None:
        repo = MagicMock(spec=FundedAccountRepository)
        repo.get.return_value = make_funded_account()

        result = RecordAccountPerformanceUseCase(repo).execute(
            RecordPerformanceCommand(
                user_id="alice",
                account_id=1,
                balance=Decimal("8800.00"),
                equity=Decimal("8750.00"),
                trades_count=4,
            )
        )

        assert result.status is FundedAccountStatus.FAILED
        kwargs = repo.apply_snapshot.call_args.kwargs
        assert kwargs["drawdown"] == Decimal("12.50")
        assert kwargs["profit"] == Decimal("-1200.00")
        assert kwargs["status"] is FundedAccountStatus.FAILED
        assert kwargs["trades_count"] == 4

    def test_foreign_account_is_not_found(self) -> None:
        repo = MagicMock(spec=FundedAccountRepository)
        repo.get.return_value = make_funded_account(user_id="bob")

        with pytest.raises(FundedAccountNotFoundError):
            RecordAccountPerformanceUseCase(repo).execute(
                RecordPerformanceCommand(
                    user_id="alice",
                    account_id=1,
                    balance=Decimal("1"),
                    equity=Decimal("1"),
                )
            )
        repo.apply_snapshot.assert_not_called()


class TestListAccountPerformanceUseCase:
    def test_foreign_account_is_not_found(self) -> None:
        repo = MagicMock(spec=FundedAccountRepository)
        repo.get.return_value = make_funded_account(user_id="bob")

        with pytest.raises(FundedAccountNotFoundError):
            ListAccountPerformanceUseCase(repo).execute("alice", 1)


class TestGetFundedLeaderboardUseCase:
    def test_limits_and_ranks(self) -> None:
        repo = MagicMock(spec=FundedAccountRepository)
        repo.list_active_traders.return_value = [
            FundedTrader(
                account=make_funded_account(
                    id=i, current_balance=Decimal(10000 + i * 100)
                ),
                user=make_user(f"user-{i}"),
            )
            for i in range(1, 6)
        ]

        ranked = GetFundedLeaderboardUseCase(repo, limit=3).execute()

        assert [r.entry.account.id for r in ranked] == [5, 4, 3]
        assert [r.rank for r in ranked] == [1, 2, 3]
