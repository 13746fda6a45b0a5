"""Tests for the ledger and market services."""

import logging

import pytest
from datetime import date, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock

from pydantic import ValidationError

from fincore.models import CategoryBudget, LedgerFilter, MarketSignal, PricePoint
from fintrack.category_config import BudgetEntry, CategoryConfig
from fintrack.config import Settings
from fintrack.main import create_services
from fintrack.services import (
    LedgerService,
    LedgerStore,
    MarketDataSource,
    MarketService,
    NoMarketDataError,
)
from fintrack.storage.series_cache import SERIES_TTL, SeriesCache


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

NOW = date(2025, 6, 15)


class InMemoryLedgerStore:
    """LedgerStore backed by plain lists."""

    def __init__(self, movements, user_budgets=(), global_budgets=()):
        self.movements = movements
        self.user_budgets = list(user_budgets)
        self.global_budgets = list(global_budgets)

    async def fetch_movements(self, user_id: str):
        return self.movements

    async def fetch_budgets(self, user_id: str):
        return self.user_budgets, self.global_budgets


def price_records(n: int, start: date = date(2025, 1, 1)) -> list[dict]:
    return [
        {"date": (start + timedelta(days=i)).isoformat(), "close": 100 + i}
        for i in range(n)
    ]


# ---------------------------------------------------------------------------
# LedgerService
# ---------------------------------------------------------------------------

class TestLedgerService:
    """Tests for LedgerService."""

    @pytest.fixture
    def movements(self):
        return [
            {"date": "2025-06-01", "amount": 1000, "category": "Income"},
            {"date": "2025-06-02", "amount": 450, "category": "Food"},
            {"date": "2025-06-03", "amount": 90, "category": "Transport"},
            {"date": "2025-06-04", "amount": 60, "category": "Outings"},
            {"date": "garbage", "amount": 5, "category": "Food"},
        ]

    def test_store_satisfies_protocol(self, movements):
        assert isinstance(InMemoryLedgerStore(movements), LedgerStore)

    @pytest.mark.asyncio
    async def test_budget_precedence(self, movements):
        """User budget, then store default, then YAML default."""
        store = InMemoryLedgerStore(
            movements,
            user_budgets=[CategoryBudget(category="Food", target=Decimal("500"))],
            global_budgets=[
                CategoryBudget(category="Food", target=Decimal("300")),
                CategoryBudget(category="Transport", target=Decimal("80")),
            ],
        )
        categories = CategoryConfig(
            budgets=[
                BudgetEntry(category="Transport", target=Decimal("1000")),
                BudgetEntry(category="Outings", target=Decimal("50")),
            ]
        )
        service = LedgerService(store, categories=categories)

        result = await service.summarize("u1", LedgerFilter(year=2025), now=NOW)
        budgets = {c.category: c.budget for c in result.by_category}

        assert budgets == {
            "Food": Decimal("500"),
            "Transport": Decimal("80"),
            "Outings": Decimal("50"),
        }
        assert [c.category for c in result.categories_over_budget] == ["Transport", "Outings"]
        assert result.balance == Decimal("400")
        assert len(result.rejected) == 1

    @pytest.mark.asyncio
    async def test_registry_from_category_config(self, movements):
        service = LedgerService(
            InMemoryLedgerStore(movements),
            categories=CategoryConfig(categories=["Income", "Food"]),
        )
        result = await service.summarize("u1", LedgerFilter(year=2025), now=NOW)

        assert result.total_outflow == Decimal("450")
        assert len(result.rejected) == 3

    @pytest.mark.asyncio
    async def test_malformed_store_budget_skipped(self, movements):
        store = InMemoryLedgerStore(
            movements,
            user_budgets=[{"category": "Food", "target": "abc"}],
            global_budgets=[{"category": "Food", "target": 300}],
        )
        result = await LedgerService(store).summarize("u1", LedgerFilter(year=2025), now=NOW)

        food = next(c for c in result.by_category if c.category == "Food")
        assert food.budget == Decimal("300")
        assert food.overage == Decimal("150")

    @pytest.mark.asyncio
    async def test_store_error_propagates(self):
        store = AsyncMock()
        store.fetch_movements.side_effect = ConnectionError("store down")
        service = LedgerService(store)

        with pytest.raises(ConnectionError):
            await service.summarize("u1", LedgerFilter(year=2025))

    @pytest.mark.asyncio
    async def test_filter_options(self, movements):
        service = LedgerService(InMemoryLedgerStore(movements))
        years, categories = await service.filter_options("u1")
        assert years == [2025]
        assert categories == ["Income", "Food", "Transport", "Outings"]


# ---------------------------------------------------------------------------
# MarketService
# ---------------------------------------------------------------------------

class TestMarketService:
    """Tests for MarketService."""

    @pytest.fixture
    def source(self):
        source = AsyncMock()
        source.fetch_history.return_value = price_records(60)
        return source

    @pytest.mark.asyncio
    async def test_analyze(self, source):
        service = MarketService(source)
        result = await service.analyze("aapl")

        source.fetch_history.assert_awaited_once_with("AAPL")
        assert len(result) == 60
        assert result.current_ratio is not None
        assert len(result.projection) == 5

    @pytest.mark.asyncio
    async def test_cache_hit_skips_fetch(self, source):
        service = MarketService(source)
        await service.analyze("AAPL")
        await service.analyze("aapl")

        assert service.fetch_count == 1
        source.fetch_history.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_stale_cache_refetches(self, source):
        now = [1_750_000_000.0]
        cache = SeriesCache(clock=lambda: now[0])
        service = MarketService(source, cache=cache)

        await service.get_series("AAPL")
        now[0] += SERIES_TTL + 1
        await service.get_series("AAPL")

        assert service.fetch_count == 2

    @pytest.mark.asyncio
    async def test_injected_cache_is_kept(self, source):
        """An empty cache passed in is used, not replaced by a default one."""
        cache = SeriesCache(ttl=60, max_symbols=3)
        service = MarketService(source, cache=cache)
        assert service.cache is cache

        await service.get_series("AAPL")
        assert "AAPL" in cache

    @pytest.mark.asyncio
    async def test_services_share_cache(self, source):
        cache = SeriesCache()
        await MarketService(source, cache=cache).get_series("AAPL")
        other = MarketService(source, cache=cache)
        await other.get_series("AAPL")

        assert other.fetch_count == 0
        source.fetch_history.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unsorted_history_is_sorted(self, source):
        records = price_records(60)
        source.fetch_history.return_value = list(reversed(records))
        series = await MarketService(source).get_series("AAPL")

        dates = [p.date for p in series]
        assert dates == sorted(dates)

    @pytest.mark.asyncio
    async def test_malformed_records_skipped(self, source):
        records = price_records(3) + [{"date": "2025-02-01", "close": -1}]
        source.fetch_history.return_value = records
        series = await MarketService(source).get_series("AAPL")
        assert len(series) == 3

    @pytest.mark.asyncio
    async def test_no_data(self, source):
        source.fetch_history.return_value = []
        service = MarketService(source)
        with pytest.raises(NoMarketDataError):
            await service.analyze("ZZZZ")
        assert "ZZZZ" not in service.cache

    @pytest.mark.asyncio
    async def test_blank_symbol(self, source):
        with pytest.raises(ValueError):
            await MarketService(source).analyze("  ")
        source.fetch_history.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_date_range(self, source):
        service = MarketService(source)
        start = date(2025, 2, 15)
        result = await service.analyze("AAPL", start=start, end=date(2025, 2, 24))

        assert result.dates[0] == start
        assert len(result) == 10
        # Full history is 60 days, so the long average is defined from day 50
        assert result.sma_long[0] is None
        assert result.sma_long[-1] is not None

    @pytest.mark.asyncio
    async def test_insufficient_history(self, source):
        source.fetch_history.return_value = price_records(30)
        result = await MarketService(source).analyze("AAPL")
        assert result.signal == MarketSignal.INSUFFICIENT_DATA
        assert result.projection == []

    @pytest.mark.asyncio
    async def test_source_error_propagates(self, source):
        source.fetch_history.side_effect = TimeoutError("quota exceeded")
        with pytest.raises(TimeoutError):
            await MarketService(source).analyze("AAPL")

    def test_source_protocol(self):
        class Source:
            async def fetch_history(self, symbol: str):
                return []

        assert isinstance(Source(), MarketDataSource)


# ---------------------------------------------------------------------------
# Application wiring
# ---------------------------------------------------------------------------

class TestCreateServices:
    """Tests for create_services."""

    @pytest.fixture(autouse=True)
    def no_basic_config(self, monkeypatch):
        monkeypatch.setattr(logging, "basicConfig", lambda **kw: None)

    def test_settings_flow_into_services(self, tmp_path):
        path = tmp_path / "budgets.yaml"
        path.write_text("categories: [Income, Food]\nbudgets:\n  - category: Food\n    target: 100\n")
        settings = Settings(
            _env_file=None,
            category_config_path=str(path),
            series_cache_ttl_hours=1,
            series_cache_max_symbols=5,
            short_window=5,
            long_window=10,
        )
        services = create_services(InMemoryLedgerStore([]), AsyncMock(), settings)

        assert services.market.cache.ttl == 3600
        assert services.market.cache.max_symbols == 5
        assert services.market.config.short_window == 5
        assert services.ledger.config.long_window == 10
        assert services.ledger.categories.categories == ["Income", "Food"]

    @pytest.mark.asyncio
    async def test_yaml_budget_applies(self, tmp_path):
        path = tmp_path / "budgets.yaml"
        path.write_text("budgets:\n  - category: Food\n    target: 10\n")
        settings = Settings(_env_file=None, category_config_path=str(path))
        store = InMemoryLedgerStore([{"date": "2025-06-02", "amount": 45, "category": "Food"}])
        services = create_services(store, AsyncMock(), settings)

        result = await services.ledger.summarize("u1", LedgerFilter(year=2025), now=NOW)
        assert [c.category for c in result.categories_over_budget] == ["Food"]

    def test_invalid_engine_settings_raise(self):
        settings = Settings(_env_file=None, short_window=80)
        with pytest.raises(ValidationError):
            create_services(InMemoryLedgerStore([]), AsyncMock(), settings)
