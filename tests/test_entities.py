"""
Tests for domain entities.
"""

from datetime import datetime, timezone

import pytest

from fakes import coin_detail_payload, market_chart_payload, markets_item, trending_payload
from src.domain.entities.coin import COIN_ID_ALIASES, normalize_coin_id
from src.domain.entities.market_chart import PriceHistory, TrendingCoin
from src.domain.entities.market_snapshot import MarketSnapshot
from src.domain.entities.portfolio import PortfolioHolding, PortfolioStats, HoldingValuation
from src.domain.entities.user import UserRecord, WatchlistEntry


class TestNormalizeCoinId:
    """Tests for coin id normalization."""

    @pytest.mark.parametrize("alias,canonical", sorted(COIN_ID_ALIASES.items()))
    def test_aliases_resolve(self, alias, canonical):
        """Test every alias maps to its canonical id."""
        assert normalize_coin_id(alias) == canonical

    def test_case_and_whitespace(self):
        """Test input is trimmed and lower-cased before lookup."""
        assert normalize_coin_id("BTC") == "bitcoin"
        assert normalize_coin_id(" Eth ") == "ethereum"

    @pytest.mark.parametrize("raw", ["Solana", "  XYZ-nonexistent ", "bitcoin", ""])
    def test_unknown_ids_pass_through(self, raw):
        """Test unrecognized ids come back trimmed and lower-cased."""
        assert normalize_coin_id(raw) == raw.strip().lower()


class TestMarketSnapshot:
    """Tests for MarketSnapshot entity."""

    def test_from_coin_detail(self):
        """Test nested market_data is flattened to USD figures."""
        snapshot = MarketSnapshot.from_coin_detail(coin_detail_payload("bitcoin", 43000.0))

        assert snapshot.coin_id == "bitcoin"
        assert snapshot.symbol == "BIT"
        assert snapshot.current_price_usd == 43000.0
        assert snapshot.market_cap_usd == 1_000_000_000
        assert snapshot.price_change_pct_1h == 0.1
        assert snapshot.price_change_pct_24h == 2.5
        assert snapshot.price_change_pct_30d == 12.0
        assert snapshot.max_supply == 21_000_000
        assert snapshot.image_url == "https://img.example/bitcoin.png"
        assert snapshot.description == "bitcoin description"

    def test_from_coin_detail_without_price(self):
        """Test a detail payload without a USD price yields an unpriced snapshot."""
        snapshot = MarketSnapshot.from_coin_detail(coin_detail_payload("obscure", None))

        assert snapshot.current_price_usd is None
        assert snapshot.has_price is False

    def test_from_markets_item(self):
        """Test flat markets item parsing."""
        snapshot = MarketSnapshot.from_markets_item(markets_item("ethereum", 3000.0, 2))

        assert snapshot.coin_id == "ethereum"
        assert snapshot.current_price_usd == 3000.0
        assert snapshot.market_cap_rank == 2
        assert snapshot.price_change_pct_24h == 1.5
        assert snapshot.price_change_pct_7d == 3.0
        assert snapshot.total_supply is None

    def test_to_dict(self):
        """Test conversion to API dictionary."""
        snapshot = MarketSnapshot(coin_id="bitcoin", name="Bitcoin", symbol="BTC", current_price_usd=1.0)

        result = snapshot.to_dict()

        assert result["id"] == "bitcoin"
        assert result["currentPriceUsd"] == 1.0
        assert set(result["priceChangePct"]) == {"1h", "24h", "7d", "30d"}


class TestPriceHistory:
    """Tests for market chart parsing."""

    def test_from_market_chart(self):
        history = PriceHistory.from_market_chart("bitcoin", 30, market_chart_payload([100.0, 110.0], start_ms=0))

        assert [point.price_usd for point in history.prices] == [100.0, 110.0]
        assert history.prices[0].timestamp == datetime(1970, 1, 1, tzinfo=timezone.utc)
        assert history.prices[1].timestamp == datetime(1970, 1, 2, tzinfo=timezone.utc)
        assert history.change_pct == pytest.approx(10.0)
        assert history.to_dict()["prices"][0] == {"timestamp": "1970-01-01T00:00:00+00:00", "priceUsd": 100.0}

    def test_null_prices_are_skipped(self):
        history = PriceHistory.from_market_chart("bitcoin", 1, {"prices": [[0, None], [1000, 5]]})

        assert [point.price_usd for point in history.prices] == [5.0]
        assert history.change_pct is None

    def test_bad_sample(self):
        with pytest.raises(ValueError):
            PriceHistory.from_market_chart("bitcoin", 1, {"prices": [[0, 1, 2]]})


class TestTrendingCoin:
    """Tests for trending item parsing."""

    def test_from_trending_item(self):
        item = trending_payload(["solana"])["coins"][0]["item"]

        coin = TrendingCoin.from_trending_item(item)

        assert coin.to_dict() == {
            "id": "solana",
            "name": "Solana",
            "symbol": "SOL",
            "marketCapRank": 1,
            "thumb": "https://img.example/solana.png",
            "score": 0,
        }


class TestPortfolioHolding:
    """Tests for PortfolioHolding entity."""

    def test_invested(self):
        """Test cost basis calculation."""
        holding = PortfolioHolding(coin_id="bitcoin", amount=2, purchase_price=100)
        assert holding.invested == 200

    def test_dict_round_trip(self):
        """Test camelCase serialization keeps the purchase date."""
        purchased = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
        holding = PortfolioHolding(coin_id="bitcoin", amount=1.5, purchase_price=100, purchase_date=purchased)

        data = holding.to_dict()
        restored = PortfolioHolding.from_dict(data)

        assert data["coinId"] == "bitcoin"
        assert data["purchasePrice"] == 100
        assert restored.purchase_date == purchased


class TestUserRecord:
    """Tests for UserRecord entity."""

    def test_lookups(self):
        """Test watchlist and holding lookups."""
        record = UserRecord(
            user_id="alice",
            watchlist=[WatchlistEntry(coin_id="bitcoin")],
            portfolio=[PortfolioHolding(coin_id="ethereum", amount=1, purchase_price=10)],
        )

        assert record.is_watching("bitcoin") is True
        assert record.is_watching("ethereum") is False
        assert record.find_holding("ethereum").amount == 1
        assert record.find_holding("bitcoin") is None

    def test_from_dict_skips_entries_without_coin_id(self):
        """Test invalid stored entries are dropped on load."""
        record = UserRecord.from_dict({
            "userId": "alice",
            "watchlist": [{"coinId": "bitcoin"}, {"coinId": ""}, {}],
            "portfolio": [{"coinId": None, "amount": 1, "purchasePrice": 1}],
        })

        assert [entry.coin_id for entry in record.watchlist] == ["bitcoin"]
        assert record.portfolio == []


class TestPortfolioStats:
    """Tests for PortfolioStats entity."""

    def test_gain_loss_pct_without_investment(self):
        """Test percentage is zero for an empty portfolio."""
        stats = PortfolioStats()
        assert stats.total_gain_loss == 0
        assert stats.total_gain_loss_pct == 0

    def test_unpriced_coin_ids(self):
        """Test holdings valued without a price are listed once."""
        row = dict(amount=1, purchase_price=1, invested=1, current_value=0, gain_loss=-1)
        stats = PortfolioStats(holdings=[
            HoldingValuation(index=0, coin_id="a", current_price=None, **row),
            HoldingValuation(index=1, coin_id="b", current_price=2.0, **row),
            HoldingValuation(index=2, coin_id="a", current_price=None, **row),
        ])

        assert stats.unpriced_coin_ids == ["a"]
