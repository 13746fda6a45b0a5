"""Stock watch service.

Looks a symbol up in the series cache, fetches its history from the
market data source on a miss (or once the cached copy is older than the
TTL), sorts it ascending and runs the indicator analysis.
"""

from __future__ import annotations

import logging
from datetime import date

from fincore.market import analyze_market, parse_price_points
from fincore.models.config import EngineConfig
from fincore.models.market import IndicatorResult, PricePoint
from fintrack.services.protocol import MarketDataSource
from fintrack.storage.series_cache import SeriesCache, normalize_symbol

logger = logging.getLogger(__name__)


class NoMarketDataError(LookupError):
    """The data source returned no usable observations for a symbol."""


class MarketService:
    """Analyze price series with cached fetching."""

    def __init__(
        self,
        source: MarketDataSource,
        cache: SeriesCache | None = None,
        config: EngineConfig | None = None,
    ):
        self.source = source
        self.cache = cache if cache is not None else SeriesCache()
        self.config = config
        self.fetch_count = 0  # calls made against the data source quota

    async def get_series(self, symbol: str) -> list[PricePoint]:
        """
        Get a symbol's date-ascending history, from cache when fresh.

        Raises:
            ValueError: If the symbol is blank
            NoMarketDataError: If the source has no usable observations
        """
        key = normalize_symbol(symbol)
        if not key:
            raise ValueError("symbol must not be empty")

        cached = await self.cache.get(key)
        if cached is not None:
            logger.debug(f"Series cache hit for {key} ({len(cached.series)} points)")
            return cached.series

        self.fetch_count += 1
        try:
            raw = await self.source.fetch_history(key)
        except Exception as e:
            logger.error(f"Failed to fetch history for {key}: {e}")
            raise

        points, rejected = parse_price_points(raw)
        if rejected:
            logger.warning(f"{key}: skipped {len(rejected)} malformed price records")
        if not points:
            raise NoMarketDataError(f"No price data found for symbol {key}")

        points.sort(key=lambda p: p.date)
        await self.cache.put(key, points)
        logger.info(f"Fetched {len(points)} closes for {key}")
        return points

    async def analyze(
        self,
        symbol: str,
        start: date | None = None,
        end: date | None = None,
    ) -> IndicatorResult:
        """
        Analyze a symbol, optionally restricted to a date range.

        Averages are computed over the full cached history and then sliced,
        so the first days of the range already carry defined values.
        """
        series = await self.get_series(symbol)
        result = analyze_market(series, config=self.config)
        if start is not None or end is not None:
            result = result.between(start, end)
        return result
