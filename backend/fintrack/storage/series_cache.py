"""Cache of fetched daily price series.

The market data source has a daily call quota, so a symbol's history is
fetched at most once per TTL (24 hours by default) and reused for every
analysis in between. Freshness is checked here, before the analyzer runs;
the analyzer itself never sees the cache.

Data structure:
- symbol -> CachedSeries {series, fetched_at}

The mapping can be written to and restored from a JSON snapshot so a
restart does not spend quota on series that are still fresh.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import orjson

from fincore.models.market import PricePoint
from fintrack.config import Settings, get_settings

logger = logging.getLogger(__name__)

# TTL for fetched series (24 hours - daily closes only change once a day)
SERIES_TTL = 24 * 60 * 60

# Maximum symbols to keep in memory (prevents unbounded growth)
MAX_CACHED_SYMBOLS = 100

SNAPSHOT_VERSION = 1


def normalize_symbol(symbol: str) -> str:
    """Ticker symbols are case-insensitive; store them upper-cased."""
    return symbol.strip().upper()


@dataclass(slots=True)
class CachedSeries:
    """A fetched price series and when it was fetched."""

    symbol: str
    series: list[PricePoint]
    fetched_at: float  # Unix timestamp in seconds

    def age(self, now: float) -> float:
        return now - self.fetched_at

    def is_fresh(self, ttl: float, now: float) -> bool:
        return self.age(now) < ttl


class SeriesCache:
    """In-memory symbol -> series cache with TTL.

    All mutation goes through an asyncio lock so concurrent analyses of
    the same symbol see a consistent mapping.
    """

    def __init__(
        self,
        ttl: float = SERIES_TTL,
        max_symbols: int = MAX_CACHED_SYMBOLS,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl = ttl
        self.max_symbols = max_symbols
        self._clock = clock
        self._entries: dict[str, CachedSeries] = {}
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> SeriesCache:
        """Build a cache sized from application settings."""
        settings = settings or get_settings()
        return cls(
            ttl=settings.series_cache_ttl_seconds,
            max_symbols=settings.series_cache_max_symbols,
        )

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, symbol: str) -> bool:
        return normalize_symbol(symbol) in self._entries

    async def get(self, symbol: str) -> CachedSeries | None:
        """Get a fresh cached series, dropping it if it has expired.

        Args:
            symbol: Ticker symbol

        Returns:
            CachedSeries or None if missing or stale
        """
        key = normalize_symbol(symbol)
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if not entry.is_fresh(self.ttl, self._clock()):
                del self._entries[key]
                logger.debug(f"Series for {key} expired after {entry.age(self._clock()):.0f}s")
                return None
            return entry

    async def put(
        self,
        symbol: str,
        series: list[PricePoint],
        fetched_at: float | None = None,
    ) -> CachedSeries:
        """Store a freshly fetched series."""
        key = normalize_symbol(symbol)
        entry = CachedSeries(
            symbol=key,
            series=list(series),
            fetched_at=fetched_at if fetched_at is not None else self._clock(),
        )
        async with self._lock:
            self._entries[key] = entry
            if len(self._entries) > self.max_symbols:
                self._cleanup()
        return entry

    async def invalidate(self, symbol: str) -> bool:
        """Drop a symbol. Returns True if it was cached."""
        async with self._lock:
            return self._entries.pop(normalize_symbol(symbol), None) is not None

    async def cleanup(self) -> int:
        """Remove stale entries and trim to ``max_symbols``."""
        async with self._lock:
            return self._cleanup()

    def _cleanup(self) -> int:
        """Must be called while holding the lock.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        removed = 0

        stale = [s for s, e in self._entries.items() if not e.is_fresh(self.ttl, now)]
        for symbol in stale:
            del self._entries[symbol]
            removed += 1

        # If still over limit, keep only the most recently fetched
        if len(self._entries) > self.max_symbols:
            newest_first = sorted(
                self._entries,
                key=lambda s: self._entries[s].fetched_at,
                reverse=True,
            )
            for symbol in newest_first[self.max_symbols:]:
                del self._entries[symbol]
                removed += 1

        if removed > 0:
            logger.debug(f"Cleaned up {removed} cached series")

        return removed

    # -------------------------------------------------------------------------
    # Snapshot persistence
    # -------------------------------------------------------------------------

    async def save_snapshot(self, path: Path) -> int:
        """Write all fresh entries to a JSON file.

        Returns:
            Number of entries written
        """
        async with self._lock:
            now = self._clock()
            entries = [
                {
                    "symbol": e.symbol,
                    "fetched_at": e.fetched_at,
                    "series": [
                        {"date": p.date, "close": str(p.close)} for p in e.series
                    ],
                }
                for e in self._entries.values()
                if e.is_fresh(self.ttl, now)
            ]

        path.write_bytes(orjson.dumps({"version": SNAPSHOT_VERSION, "entries": entries}))
        logger.info(f"Saved {len(entries)} cached series to {path}")
        return len(entries)

    async def load_snapshot(self, path: Path) -> int:
        """Restore still-fresh entries from a JSON file.

        A missing file is not an error. Entries that have expired since the
        snapshot was written are skipped, and the result is trimmed to
        ``max_symbols`` (newest first).

        Raises:
            ValidationError, KeyError: If any entry is malformed; the cache
                is left as it was

        Returns:
            Number of entries restored
        """
        if not path.exists():
            return 0

        data = orjson.loads(path.read_bytes())
        if data.get("version") != SNAPSHOT_VERSION:
            logger.warning(f"Ignoring series snapshot {path}: unsupported version {data.get('version')}")
            return 0

        # Build every entry before touching the mapping so a bad record
        # leaves the cache unchanged
        now = self._clock()
        entries = [
            CachedSeries(
                symbol=normalize_symbol(raw["symbol"]),
                series=[PricePoint.model_validate(p) for p in raw["series"]],
                fetched_at=float(raw["fetched_at"]),
            )
            for raw in data.get("entries", [])
        ]
        fresh = [e for e in entries if e.is_fresh(self.ttl, now)]

        async with self._lock:
            for entry in fresh:
                self._entries[entry.symbol] = entry
            if len(self._entries) > self.max_symbols:
                self._cleanup()
            restored = sum(1 for e in fresh if self._entries.get(e.symbol) is e)

        logger.info(f"Restored {restored} cached series from {path}")
        return restored
