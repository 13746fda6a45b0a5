"""Data models."""

from fincore.models.config import BUY_LEVEL, SELL_LEVEL, DEFAULT_CONFIG, EngineConfig
from fincore.models.ledger import (
    ALL,
    AggregationResult,
    Category,
    CategoryBudget,
    CategoryRegistry,
    CategoryStats,
    CategoryTotal,
    LedgerFilter,
    MonthlyPoint,
    MonthOverMonth,
    Movement,
    RejectedRecord,
)
from fincore.models.market import (
    IndicatorResult,
    MarketSignal,
    PricePoint,
    ProjectionPoint,
    classify_ratio,
)

__all__ = [
    # Config
    "BUY_LEVEL",
    "SELL_LEVEL",
    "DEFAULT_CONFIG",
    "EngineConfig",
    # Ledger
    "ALL",
    "AggregationResult",
    "Category",
    "CategoryBudget",
    "CategoryRegistry",
    "CategoryStats",
    "CategoryTotal",
    "LedgerFilter",
    "MonthlyPoint",
    "MonthOverMonth",
    "Movement",
    "RejectedRecord",
    # Market
    "IndicatorResult",
    "MarketSignal",
    "PricePoint",
    "ProjectionPoint",
    "classify_ratio",
]
