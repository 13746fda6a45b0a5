"""Category list and default budgets loaded from budgets.yaml.

Supports:
- ``categories``: the known category labels (empty = accept any label)
- ``budgets``: global default monthly targets per category
- Backward compatible: no YAML file = open category set, no budgets

Example::

    categories: [Income, Food, Transport, Shopping, Fixed costs, Savings, Outings, Other]
    budgets:
      - category: Food
        target: 400000
"""

import logging
from decimal import Decimal
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, model_validator

from fincore.models.ledger import CategoryBudget, CategoryRegistry
from fintrack.config import get_settings

logger = logging.getLogger(__name__)


class BudgetEntry(BaseModel):
    """A single default budget in the YAML config."""

    category: str
    target: Decimal = Field(default=Decimal("0"), ge=0)

    def to_budget(self) -> CategoryBudget:
        return CategoryBudget(category=self.category, target=self.target)


class CategoryConfig(BaseModel):
    """Top-level budgets.yaml configuration."""

    categories: list[str] = []
    budgets: list[BudgetEntry] = []

    @model_validator(mode="after")
    def _validate(self):
        seen: set[str] = set()
        for entry in self.budgets:
            if entry.category in seen:
                raise ValueError(f"duplicate default budget for category '{entry.category}'")
            seen.add(entry.category)
        if self.categories:
            unknown = sorted(seen - set(self.categories))
            if unknown:
                raise ValueError(f"budgets reference unknown categories: {unknown}")
        return self

    def registry(self) -> CategoryRegistry | None:
        """Known-category registry, or None when the set is open."""
        if not self.categories:
            return None
        return CategoryRegistry.of(self.categories)

    def global_budgets(self) -> list[CategoryBudget]:
        return [entry.to_budget() for entry in self.budgets]


_DEFAULT_PATH = Path(__file__).parent.parent / "budgets.yaml"


def load_category_config(path: Path | None = None) -> CategoryConfig:
    """Load category config from YAML file.

    Falls back to defaults (open categories, no budgets) if file doesn't exist.
    """
    config_path = path or get_settings().category_config_file or _DEFAULT_PATH

    if not config_path.exists():
        logger.info(
            f"No budgets.yaml found at {config_path}, "
            "using defaults (open categories, no budgets)"
        )
        return CategoryConfig()

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    config = CategoryConfig(**raw)
    logger.info(
        f"Loaded category config: {len(config.categories)} categories, "
        f"{len(config.budgets)} default budgets"
    )
    return config
