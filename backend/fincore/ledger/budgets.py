"""Per-category budget resolution.

A user may define their own monthly target for a category, and a global
default may exist for the same category. The user's target wins: sources
are scanned in the order given (user first, then global) and the first
set target seen for a category is kept. A target of 0 means "no budget"
and neither resolves nor hides a later entry.

Malformed entries (non-numeric or negative targets, blank categories) are
skipped with a warning; they never fail the aggregation.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Iterable, Mapping, Union

from pydantic import ValidationError

from fincore.models.ledger import CategoryBudget

logger = logging.getLogger(__name__)

BudgetSource = Union[Iterable[CategoryBudget], Mapping[str, Union[Decimal, int, float, str]]]


def _as_budgets(source: BudgetSource) -> list[CategoryBudget]:
    if isinstance(source, Mapping):
        entries: Iterable[Any] = (
            {"category": name, "target": target} for name, target in source.items()
        )
    else:
        entries = source

    budgets: list[CategoryBudget] = []
    for entry in entries:
        if isinstance(entry, CategoryBudget):
            budgets.append(entry)
            continue
        try:
            budgets.append(CategoryBudget.model_validate(entry))
        except ValidationError as e:
            logger.warning(f"Skipping malformed budget {entry!r}: {e.error_count()} error(s)")
    return budgets


def resolve_budgets(*sources: BudgetSource | None) -> dict[str, Decimal]:
    """
    Resolve the effective budget for every category.

    Args:
        *sources: Budget lists or ``{category: target}`` mappings, highest
            precedence first (typically user budgets, then global ones)

    Returns:
        Dict of category -> target, containing only categories with a
        budget set
    """
    resolved: dict[str, Decimal] = {}
    for source in sources:
        if source is None:
            continue
        for budget in _as_budgets(source):
            if budget.is_set and budget.category not in resolved:
                resolved[budget.category] = budget.target
    return resolved


def budget_for(resolved: Mapping[str, Decimal], category: str) -> Decimal:
    """Get the resolved target for a category (0 when none is set)."""
    return resolved.get(category, Decimal("0"))
