"""Application entry point: wires settings into the services."""

import logging
from dataclasses import dataclass

from fintrack.category_config import load_category_config
from fintrack.config import Settings, configure_logging, get_settings
from fintrack.services import LedgerService, LedgerStore, MarketDataSource, MarketService
from fintrack.storage import SeriesCache

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """The services a front end talks to."""

    ledger: LedgerService
    market: MarketService


def create_services(
    store: LedgerStore,
    source: MarketDataSource,
    settings: Settings | None = None,
) -> Services:
    """
    Build the ledger and market services from application settings.

    Configures logging, loads the category/budget YAML and sizes the
    series cache. Invalid engine settings raise before any service exists.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    engine_config = settings.engine_config()
    categories = load_category_config(settings.category_config_file)
    cache = SeriesCache.from_settings(settings)

    logger.info(
        f"Services ready: windows {engine_config.short_window}/{engine_config.long_window}, "
        f"series TTL {settings.series_cache_ttl_hours}h, "
        f"{len(categories.categories) or 'open'} categories"
    )
    return Services(
        ledger=LedgerService(store, config=engine_config, categories=categories),
        market=MarketService(source, cache=cache, config=engine_config),
    )
