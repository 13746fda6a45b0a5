"""Storage helpers for the application layer."""

from fintrack.storage.series_cache import CachedSeries, SeriesCache, normalize_symbol

__all__ = ["CachedSeries", "SeriesCache", "normalize_symbol"]
