"""Ledger aggregation for the finance dashboard.

Computes, for one filter selection (year, month or "all", category or
"all"):
- income/outflow totals and balance
- per-category outflow reconciled against budgets
- the monthly evolution series
- month-over-month change of the current calendar month
- statistics and a trailing trend for a single selected category

Conventions:
- The income category (``EngineConfig.income_category``) is inflow,
  every other category is outflow.
- The month-over-month comparison and the category trend are anchored
  to ``now`` (evaluation time by default), not to the filter's year.
- Amounts are Decimal and summed exactly.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, Mapping

from fincore.ledger.budgets import BudgetSource, budget_for, resolve_budgets
from fincore.ledger.records import parse_movements
from fincore.models.config import DEFAULT_CONFIG, EngineConfig
from fincore.models.ledger import (
    AggregationResult,
    CategoryRegistry,
    CategoryStats,
    CategoryTotal,
    LedgerFilter,
    MonthlyPoint,
    MonthOverMonth,
    Movement,
)
from fincore.timebucket import MonthKey, month_key, shift_month, to_utc_day, utc_now

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _total(movements: Iterable[Movement]) -> Decimal:
    return sum((m.amount for m in movements), ZERO)


def _pct_change(current: Decimal, previous: Decimal) -> Decimal | None:
    if previous == 0:
        return None
    return (current - previous) / previous * 100


def _budget_table(budgets: BudgetSource | None) -> dict[str, Decimal]:
    if budgets is None:
        return {}
    return resolve_budgets(budgets)


# =============================================================================
# Building blocks
# =============================================================================

def category_breakdown(
    movements: Iterable[Movement],
    budgets: Mapping[str, Decimal],
    income_category: str = DEFAULT_CONFIG.income_category,
) -> list[CategoryTotal]:
    """
    Sum outflow per category and attach each category's budget.

    Args:
        movements: Movements already restricted to the selected period
        budgets: Resolved category -> target table
        income_category: Label of the inflow category (excluded)

    Returns:
        CategoryTotal list, largest value first
    """
    sums: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for m in movements:
        if m.category != income_category:
            sums[m.category] += m.amount

    result = []
    for category, value in sums.items():
        budget = budget_for(budgets, category)
        overage = value - budget if budget > 0 and value > budget else ZERO
        result.append(
            CategoryTotal(category=category, value=value, budget=budget, overage=overage)
        )

    result.sort(key=lambda c: (-c.value, c.category))
    return result


def monthly_series(
    movements: Iterable[Movement],
    single_category: bool,
    income_category: str = DEFAULT_CONFIG.income_category,
) -> list[MonthlyPoint]:
    """
    Group movements into calendar-month buckets.

    Buckets are ordered by the timestamp of their first day.
    """
    # bucket -> [income, outflow]; a single category only uses slot 0
    buckets: dict[MonthKey, list[Decimal]] = {}

    for m in movements:
        sums = buckets.setdefault(m.month, [ZERO, ZERO])
        if single_category or m.category == income_category:
            sums[0] += m.amount
        else:
            sums[1] += m.amount

    points = []
    for key in sorted(buckets, key=lambda k: k.timestamp()):
        income, outflow = buckets[key]
        if single_category:
            points.append(MonthlyPoint(year=key.year, month=key.month, value=income))
        else:
            points.append(
                MonthlyPoint(year=key.year, month=key.month, income=income, outflow=outflow)
            )
    return points


def month_over_month(
    movements: Iterable[Movement],
    today: date,
    income_category: str = DEFAULT_CONFIG.income_category,
) -> MonthOverMonth:
    """
    Compare the calendar month containing ``today`` with the previous one.

    Uses the whole movement list, independent of any filter. The deltas
    are None when the previous month's total is zero.
    """
    current = month_key(today)
    previous = shift_month(current, -1)

    totals = {
        (current, False): ZERO,
        (current, True): ZERO,
        (previous, False): ZERO,
        (previous, True): ZERO,
    }
    for m in movements:
        slot = (m.month, m.category == income_category)
        if slot in totals:
            totals[slot] += m.amount

    return MonthOverMonth(
        current_month=current,
        previous_month=previous,
        current_total=totals[(current, False)],
        previous_total=totals[(previous, False)],
        delta_pct=_pct_change(totals[(current, False)], totals[(previous, False)]),
        current_income=totals[(current, True)],
        previous_income=totals[(previous, True)],
        income_delta_pct=_pct_change(totals[(current, True)], totals[(previous, True)]),
    )


def category_trend(
    movements: Iterable[Movement],
    category: str,
    today: date,
    months: int = DEFAULT_CONFIG.trend_months,
) -> Decimal:
    """
    Percentage change between the earliest and latest monthly sums of a
    category within the ``months`` calendar months ending with ``today``'s.

    Returns 0 with fewer than two distinct months of data, or when the
    earliest sum is zero.
    """
    last = month_key(today)
    first = shift_month(last, -(months - 1))

    sums: dict[MonthKey, Decimal] = defaultdict(lambda: ZERO)
    for m in movements:
        if m.category == category and first <= m.month <= last:
            sums[m.month] += m.amount

    if len(sums) < 2:
        return ZERO

    keys = sorted(sums)
    earliest, latest = sums[keys[0]], sums[keys[-1]]
    change = _pct_change(latest, earliest)
    return change if change is not None else ZERO


def category_stats(
    selected: list[Movement],
    history: Iterable[Movement],
    category: str,
    today: date,
    trend_months: int = DEFAULT_CONFIG.trend_months,
) -> CategoryStats:
    """
    Statistics for one selected category.

    Args:
        selected: Movements matching the full filter (period and category)
        history: All valid movements (used for the trailing trend)
        category: Selected category
        today: Anchor day for the trend window
        trend_months: Length of the trend window in calendar months
    """
    amounts = [m.amount for m in selected]
    total = sum(amounts, ZERO)
    count = len(amounts)

    return CategoryStats(
        category=category,
        total=total,
        mean=total / max(count, 1),
        maximum=max(amounts, default=ZERO),
        minimum=min(amounts, default=ZERO),
        count=count,
        trend_pct=category_trend(history, category, today, trend_months),
    )


# =============================================================================
# Public API
# =============================================================================

def aggregate_ledger(
    movements: Iterable[Movement | Mapping[str, Any]],
    budgets: BudgetSource | None,
    ledger_filter: LedgerFilter,
    *,
    now: date | datetime | str | None = None,
    registry: CategoryRegistry | None = None,
    config: EngineConfig | None = None,
) -> AggregationResult:
    """
    Aggregate a snapshot of ledger movements for one filter selection.

    Args:
        movements: Movements or raw record mappings, in any order
        budgets: Budget list(s) or ``{category: target}`` mapping; a list is
            resolved first-seen-wins, so pass user budgets before global ones
        ledger_filter: Year / month / category selection
        now: Anchor for month-over-month and the category trend
            (defaults to the current UTC time)
        registry: Known categories; records outside it are rejected
        config: Engine configuration

    Returns:
        AggregationResult; unusable records are listed in ``rejected``
    """
    config = config or DEFAULT_CONFIG
    income_category = config.income_category
    today = to_utc_day(now if now is not None else utc_now())

    valid, rejected = parse_movements(movements, registry=registry)
    resolved = _budget_table(budgets)

    period = [m for m in valid if ledger_filter.matches_period(m)]
    if ledger_filter.all_categories:
        selected = period
    else:
        selected = [m for m in period if m.category == ledger_filter.category]

    total_income = _total(m for m in selected if m.category == income_category)
    total_outflow = _total(m for m in selected if m.category != income_category)

    stats = None
    if not ledger_filter.all_categories:
        stats = category_stats(
            selected, valid, ledger_filter.category, today, config.trend_months
        )

    if rejected:
        logger.debug(f"Aggregating {len(valid)} movements, {len(rejected)} rejected")

    return AggregationResult(
        filter=ledger_filter,
        total_income=total_income,
        total_outflow=total_outflow,
        by_category=category_breakdown(period, resolved, income_category),
        monthly=monthly_series(
            selected, not ledger_filter.all_categories, income_category
        ),
        month_over_month=month_over_month(valid, today, income_category),
        category_stats=stats,
        movement_count=len(selected),
        rejected=rejected,
    )


def available_years(movements: Iterable[Movement]) -> list[int]:
    """Distinct years with movements, most recent first."""
    return sorted({m.date.year for m in movements}, reverse=True)


def available_categories(movements: Iterable[Movement]) -> list[str]:
    """Distinct categories in first-seen order."""
    seen: dict[str, None] = {}
    for m in movements:
        seen.setdefault(m.category, None)
    return list(seen)
