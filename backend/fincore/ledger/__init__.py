"""Ledger aggregation: totals, budgets, monthly series and trends."""

from fincore.ledger.aggregator import (
    aggregate_ledger,
    available_categories,
    available_years,
    category_breakdown,
    category_stats,
    category_trend,
    month_over_month,
    monthly_series,
)
from fincore.ledger.budgets import budget_for, resolve_budgets
from fincore.ledger.records import parse_movement, parse_movements

__all__ = [
    "aggregate_ledger",
    "available_categories",
    "available_years",
    "category_breakdown",
    "category_stats",
    "category_trend",
    "month_over_month",
    "monthly_series",
    "budget_for",
    "resolve_budgets",
    "parse_movement",
    "parse_movements",
]
