"""Services that feed collaborator snapshots to the analytics engine."""

from fintrack.services.ledger_service import LedgerService
from fintrack.services.market_service import MarketService, NoMarketDataError
from fintrack.services.protocol import LedgerStore, MarketDataSource

__all__ = [
    "LedgerService",
    "MarketService",
    "NoMarketDataError",
    "LedgerStore",
    "MarketDataSource",
]
