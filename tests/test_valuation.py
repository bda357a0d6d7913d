"""
Tests for portfolio valuation, paced price collection and the use cases.
"""

import asyncio

import pytest

from fakes import FakeClock, FakeMarketData
from src.application.services.snapshot_collector import SnapshotBatch, SnapshotCollector
from src.application.use_cases.portfolio_valuation import PortfolioValuationUseCase
from src.application.use_cases.watchlist_overview import WatchlistOverviewUseCase
from src.domain.entities.market_snapshot import MarketSnapshot
from src.domain.entities.portfolio import PortfolioHolding
from src.domain.entities.user import UserRecord, WatchlistEntry
from src.domain.exceptions import (
    LocalRateLimitedError,
    UpstreamMalformedError,
    UpstreamRateLimitedError,
    UpstreamTimeoutError,
    UserNotFoundError,
)
from src.domain.services.valuation import valuate


def snapshot(coin_id: str, price) -> MarketSnapshot:
    return MarketSnapshot(coin_id=coin_id, name=coin_id.title(), symbol=coin_id[:3].upper(), current_price_usd=price)


class RecordingSleep:
    """Async sleep that advances a fake clock and records each delay."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        self.clock.advance(delay)


class SlowMarketData(FakeMarketData):
    """Fetches take ``duration`` seconds on the fake clock."""

    def __init__(self, clock: FakeClock, duration: float, **kwargs):
        super().__init__(**kwargs)
        self.clock = clock
        self.duration = duration

    async def fetch_coin_detail(self, raw_id: str) -> MarketSnapshot:
        self.clock.advance(self.duration)
        return await super().fetch_coin_detail(raw_id)


class TestValuate:
    """Tests for the pure valuation function."""

    def test_single_holding(self):
        """Test 2 units bought at 100 and now worth 150."""
        holdings = [PortfolioHolding(coin_id="bitcoin", amount=2, purchase_price=100)]

        stats = valuate(holdings, {"bitcoin": snapshot("bitcoin", 150)})

        assert stats.total_invested == 200
        assert stats.total_current_value == 300
        assert stats.total_gain_loss == 100
        assert stats.total_gain_loss_pct == 50
        assert stats.holdings[0].gain_loss_pct == 50

    def test_missing_price_counts_invested_only(self):
        """Test an unpriced holding adds cost but no value."""
        holdings = [
            PortfolioHolding(coin_id="bitcoin", amount=1, purchase_price=100),
            PortfolioHolding(coin_id="obscure", amount=10, purchase_price=5),
            PortfolioHolding(coin_id="delisted", amount=1, purchase_price=50),
        ]
        snapshots = {"bitcoin": snapshot("bitcoin", 120), "delisted": snapshot("delisted", None)}

        stats = valuate(holdings, snapshots)

        assert stats.total_invested == 200
        assert stats.total_current_value == 120
        assert stats.total_gain_loss == -80
        assert stats.unpriced_coin_ids == ["obscure", "delisted"]
        assert [row.index for row in stats.holdings] == [0, 1, 2]

    def test_empty_portfolio(self):
        stats = valuate([], {})

        assert stats.total_invested == 0
        assert stats.total_gain_loss_pct == 0
        assert stats.holdings == []


class TestSnapshotCollector:
    """Tests for paced sequential collection."""

    @pytest.mark.asyncio
    async def test_paces_between_fetches(self):
        """Test one interval between consecutive fetch starts, none before the first."""
        clock = FakeClock()
        sleep = RecordingSleep(clock)
        market_data = FakeMarketData(prices={"a": 1.0, "b": 2.0, "c": 3.0})
        collector = SnapshotCollector(market_data, pacing_interval=1.0, sleep=sleep, clock=clock)

        batch = await collector.collect(["a", "b", "c"])

        assert sleep.delays == [1.0, 1.0]
        assert set(batch.snapshots) == {"a", "b", "c"}
        assert batch.is_partial is False

    @pytest.mark.asyncio
    async def test_interval_measured_start_to_start(self):
        """Test time spent fetching counts toward the interval."""
        clock = FakeClock()
        sleep = RecordingSleep(clock)
        market_data = SlowMarketData(clock, 0.4, prices={"a": 1.0, "b": 2.0})
        collector = SnapshotCollector(market_data, pacing_interval=1.0, sleep=sleep, clock=clock)

        await collector.collect(["a", "b"])

        assert sleep.delays == [pytest.approx(0.6)]

    @pytest.mark.asyncio
    async def test_duplicates_fetched_once(self):
        market_data = FakeMarketData(prices={"a": 1.0})
        collector = SnapshotCollector(market_data, pacing_interval=0)

        await collector.collect(["a", "a", "a"])

        assert market_data.detail_calls == ["a"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [LocalRateLimitedError(12), UpstreamRateLimitedError(12)])
    async def test_stops_on_rate_limit(self, error):
        """Test a rate-limit rejection ends the batch and marks the rest missing."""
        market_data = FakeMarketData(prices={"a": 1.0, "c": 3.0}, errors={"b": error})
        collector = SnapshotCollector(market_data, pacing_interval=0)

        batch = await collector.collect(["a", "b", "c"])

        assert market_data.detail_calls == ["a", "b"]
        assert list(batch.snapshots) == ["a"]
        assert batch.missing == ["b", "c"]
        assert batch.stopped_reason == "rate_limited"
        assert batch.retry_after == 12

    @pytest.mark.asyncio
    async def test_other_failures_skip_one_coin(self):
        """Test unknown coins and timeouts skip only that coin."""
        market_data = FakeMarketData(
            prices={"a": 1.0, "d": 4.0},
            errors={"c": UpstreamTimeoutError(5)},
        )
        collector = SnapshotCollector(market_data, pacing_interval=0)

        batch = await collector.collect(["a", "b", "c", "d"])

        assert list(batch.snapshots) == ["a", "d"]
        assert batch.missing == ["b", "c"]
        assert batch.errors == {"b": "coin_not_found", "c": "upstream_timeout"}
        assert batch.stopped_reason is None

    @pytest.mark.asyncio
    async def test_malformed_payload_skips_one_coin(self):
        """Test an unreadable detail response degrades only that coin."""
        market_data = FakeMarketData(
            prices={"a": 1.0, "c": 3.0},
            errors={"b": UpstreamMalformedError("coin detail could not be read")},
        )
        collector = SnapshotCollector(market_data, pacing_interval=0)

        batch = await collector.collect(["a", "b", "c"])

        assert list(batch.snapshots) == ["a", "c"]
        assert batch.missing == ["b"]
        assert batch.errors == {"b": "upstream_malformed"}


class TestPortfolioValuationUseCase:
    """Tests for valuing a stored portfolio."""

    @pytest.fixture
    def alice(self, store):
        record = UserRecord(
            user_id="alice",
            portfolio=[
                PortfolioHolding(coin_id="bitcoin", amount=2, purchase_price=100),
                PortfolioHolding(coin_id="ethereum", amount=1, purchase_price=50),
            ],
        )
        store.records["alice"] = record.to_dict()
        return record

    @pytest.mark.asyncio
    async def test_full_valuation(self, store, alice):
        market_data = FakeMarketData(prices={"bitcoin": 150.0, "ethereum": 25.0})
        use_case = PortfolioValuationUseCase(store, SnapshotCollector(market_data, pacing_interval=0))

        report = await use_case.execute("alice")

        assert report.stats.total_invested == 250
        assert report.stats.total_current_value == 325
        assert report.is_partial is False
        assert report.to_dict()["totalGainLoss"] == 75

    @pytest.mark.asyncio
    async def test_rate_limited_batch_is_partial(self, store, alice):
        market_data = FakeMarketData(
            prices={"bitcoin": 150.0, "ethereum": 25.0},
            errors={"ethereum": LocalRateLimitedError(30)},
        )
        use_case = PortfolioValuationUseCase(store, SnapshotCollector(market_data, pacing_interval=0))

        report = await use_case.execute("alice")
        body = report.to_dict()

        assert report.stats.total_invested == 250
        assert report.stats.total_current_value == 300
        assert body["partial"] is True
        assert body["missingCoinIds"] == ["ethereum"]
        assert body["retryAfter"] == 30

    @pytest.mark.asyncio
    async def test_timeout_values_partial_data(self, store, alice):
        """Test the time budget ends collection and keeps fetched prices."""
        market_data = FakeMarketData(prices={"bitcoin": 150.0, "ethereum": 25.0})
        collector = SnapshotCollector(market_data, pacing_interval=5.0)
        use_case = PortfolioValuationUseCase(store, collector, timeout_seconds=0.05)

        report = await use_case.execute("alice")

        assert report.batch.stopped_reason == "timeout"
        assert report.batch.missing == ["ethereum"]
        assert report.stats.total_current_value == 300
        assert report.stats.unpriced_coin_ids == ["ethereum"]

    @pytest.mark.asyncio
    async def test_cancellation_keeps_fetched_snapshots(self, store, alice):
        """Test a cancelled valuation leaves collected prices in the caller's batch."""
        sleeping = asyncio.Event()

        async def block(delay: float) -> None:
            sleeping.set()
            await asyncio.Event().wait()

        market_data = FakeMarketData(prices={"bitcoin": 150.0, "ethereum": 25.0})
        collector = SnapshotCollector(market_data, pacing_interval=1.0, sleep=block)
        use_case = PortfolioValuationUseCase(store, collector)
        batch = SnapshotBatch()

        task = asyncio.create_task(use_case.execute("alice", batch))
        await sleeping.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        assert list(batch.snapshots) == ["bitcoin"]
        assert batch.missing == ["ethereum"]
        assert batch.stopped_reason == "cancelled"

        report = await use_case.value_collected("alice", batch)

        assert report.stats.total_invested == 250
        assert report.stats.total_current_value == 300
        assert report.stats.unpriced_coin_ids == ["ethereum"]
        assert report.to_dict()["stoppedReason"] == "cancelled"
        assert market_data.detail_calls == ["bitcoin"]

    @pytest.mark.asyncio
    async def test_unknown_user(self, store):
        use_case = PortfolioValuationUseCase(store, SnapshotCollector(FakeMarketData(), pacing_interval=0))

        with pytest.raises(UserNotFoundError):
            await use_case.execute("nobody")


class TestWatchlistOverviewUseCase:
    """Tests for the priced watchlist."""

    @pytest.mark.asyncio
    async def test_entries_joined_with_snapshots(self, store):
        store.records["alice"] = UserRecord(
            user_id="alice",
            watchlist=[WatchlistEntry(coin_id="bitcoin"), WatchlistEntry(coin_id="gone")],
        ).to_dict()
        market_data = FakeMarketData(prices={"bitcoin": 150.0})
        use_case = WatchlistOverviewUseCase(store, SnapshotCollector(market_data, pacing_interval=0))

        overview = (await use_case.execute("alice")).to_dict()

        assert [item["coinId"] for item in overview["items"]] == ["bitcoin", "gone"]
        assert overview["items"][0]["snapshot"]["currentPriceUsd"] == 150.0
        assert overview["items"][1]["snapshot"] is None
        assert overview["missingCoinIds"] == ["gone"]
