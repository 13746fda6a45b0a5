"""Moving-average indicators (pure math, no I/O)."""

from fincore.indicators.indicators import (
    linear_weights,
    weighted_sma,
    latest_defined,
    ratio_series,
)

__all__ = [
    "linear_weights",
    "weighted_sma",
    "latest_defined",
    "ratio_series",
]
