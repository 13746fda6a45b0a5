"""Ledger data models: movements, budgets, filters and aggregation results."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Annotated, Any, Iterable, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator

from fincore.timebucket import MonthKey, to_utc_day

ALL = "all"


def _normalize_category(value: str) -> str:
    name = value.strip()
    if not name:
        raise ValueError("category must not be empty")
    return name


# Categories are an open, user-editable set of labels
Category = Annotated[str, AfterValidator(_normalize_category)]


class Movement(BaseModel):
    """A single ledger movement (income or expense)."""

    model_config = ConfigDict(frozen=True)

    date: dt.date
    amount: Decimal = Field(ge=0)
    category: Category
    name: str = ""

    @field_validator("date", mode="before")
    @classmethod
    def _bucket_date(cls, value: Any) -> dt.date:
        return to_utc_day(value)

    @property
    def month(self) -> MonthKey:
        return MonthKey(self.date.year, self.date.month)


class CategoryBudget(BaseModel):
    """Monthly target for one category. A target of 0 means no budget."""

    model_config = ConfigDict(frozen=True)

    category: Category
    target: Decimal = Field(default=Decimal("0"), ge=0)

    @property
    def is_set(self) -> bool:
        return self.target > 0


class CategoryRegistry(BaseModel):
    """Known category labels supplied by the caller."""

    model_config = ConfigDict(frozen=True)

    categories: frozenset[Category] = frozenset()

    @classmethod
    def of(cls, names: Iterable[str]) -> CategoryRegistry:
        return cls(categories=frozenset(names))

    def __contains__(self, name: object) -> bool:
        return name in self.categories

    def __len__(self) -> int:
        return len(self.categories)


class LedgerFilter(BaseModel):
    """Dashboard filter: a year, a month (1-12) or "all", a category or "all"."""

    model_config = ConfigDict(frozen=True)

    year: int
    month: int | Literal["all"] = ALL
    category: Category | Literal["all"] = ALL

    @field_validator("month")
    @classmethod
    def _check_month(cls, value: int | str) -> int | str:
        if value != ALL and not 1 <= value <= 12:
            raise ValueError(f"month must be 1-12 or 'all', got {value}")
        return value

    @property
    def all_months(self) -> bool:
        return self.month == ALL

    @property
    def all_categories(self) -> bool:
        return self.category == ALL

    def matches_period(self, movement: Movement) -> bool:
        """Check the year and month selectors only."""
        if movement.date.year != self.year:
            return False
        return self.all_months or movement.date.month == self.month

    def matches(self, movement: Movement) -> bool:
        """Check all three selectors."""
        if not self.matches_period(movement):
            return False
        return self.all_categories or movement.category == self.category


# =============================================================================
# Aggregation results
# =============================================================================

class CategoryTotal(BaseModel):
    """Outflow of one category, reconciled against its budget."""

    model_config = ConfigDict(frozen=True)

    category: str
    value: Decimal
    budget: Decimal = Decimal("0")
    overage: Decimal = Decimal("0")

    @property
    def has_budget(self) -> bool:
        return self.budget > 0

    @property
    def over_budget(self) -> bool:
        return self.overage > 0

    @property
    def budget_used_pct(self) -> Decimal | None:
        """Share of the budget spent, as a percentage (None without a budget)."""
        if not self.has_budget:
            return None
        return self.value / self.budget * 100


class MonthlyPoint(BaseModel):
    """One month of the monthly evolution series.

    With the category selector on "all", ``income`` and ``outflow`` are
    filled. With a single category selected only ``value`` is.
    """

    model_config = ConfigDict(frozen=True)

    year: int
    month: int
    income: Decimal | None = None
    outflow: Decimal | None = None
    value: Decimal | None = None

    @property
    def key(self) -> MonthKey:
        return MonthKey(self.year, self.month)

    @property
    def label(self) -> str:
        return self.key.label

    @property
    def start(self) -> dt.date:
        return self.key.start


class MonthOverMonth(BaseModel):
    """Current calendar month against the one before it."""

    model_config = ConfigDict(frozen=True)

    current_month: MonthKey
    previous_month: MonthKey
    current_total: Decimal = Decimal("0")
    previous_total: Decimal = Decimal("0")
    delta_pct: Decimal | None = None  # outflow change, None when previous is 0
    current_income: Decimal = Decimal("0")
    previous_income: Decimal = Decimal("0")
    income_delta_pct: Decimal | None = None


class CategoryStats(BaseModel):
    """Statistics for a single selected category."""

    model_config = ConfigDict(frozen=True)

    category: str
    total: Decimal = Decimal("0")
    mean: Decimal = Decimal("0")
    maximum: Decimal = Decimal("0")
    minimum: Decimal = Decimal("0")
    count: int = 0
    trend_pct: Decimal = Decimal("0")


class RejectedRecord(BaseModel):
    """A raw record skipped during aggregation, with the reason."""

    model_config = ConfigDict(frozen=True)

    index: int
    record: Any
    reason: str


class AggregationResult(BaseModel):
    """Everything the ledger dashboard renders for one filter selection."""

    model_config = ConfigDict(frozen=True)

    filter: LedgerFilter
    total_income: Decimal = Decimal("0")
    total_outflow: Decimal = Decimal("0")
    by_category: list[CategoryTotal] = Field(default_factory=list)
    monthly: list[MonthlyPoint] = Field(default_factory=list)
    month_over_month: MonthOverMonth
    category_stats: CategoryStats | None = None
    movement_count: int = 0
    rejected: list[RejectedRecord] = Field(default_factory=list)

    @property
    def balance(self) -> Decimal:
        return self.total_income - self.total_outflow

    @property
    def categories_over_budget(self) -> list[CategoryTotal]:
        return [c for c in self.by_category if c.over_budget]
