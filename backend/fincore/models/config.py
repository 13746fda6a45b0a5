"""Analytics engine configuration models."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, model_validator

# Static momentum thresholds for the short/long ratio (not fitted to data)
BUY_LEVEL = Decimal("0.861608")
SELL_LEVEL = Decimal("1.095478")


class EngineConfig(BaseModel):
    """Engine parameters shared by the ledger and market analyzers."""

    model_config = ConfigDict(frozen=True)

    # Ledger
    income_category: str = "Income"
    trend_months: int = 3  # trailing calendar months for category trend

    # Moving-average windows
    short_window: int = 20
    long_window: int = 50

    # Ratio thresholds: below buy = oversold, above sell = overbought
    buy_level: Decimal = BUY_LEVEL
    sell_level: Decimal = SELL_LEVEL

    # Forward daily points in the linear projection
    projection_steps: int = 5

    @model_validator(mode="after")
    def _validate(self):
        if self.short_window < 1 or self.long_window < 1:
            raise ValueError("moving-average windows must be >= 1")
        if self.short_window >= self.long_window:
            raise ValueError(
                f"short_window ({self.short_window}) must be smaller than "
                f"long_window ({self.long_window})"
            )
        if self.buy_level >= self.sell_level:
            raise ValueError(
                f"buy_level ({self.buy_level}) must be below sell_level ({self.sell_level})"
            )
        if self.projection_steps < 1:
            raise ValueError("projection_steps must be >= 1")
        if self.trend_months < 2:
            raise ValueError("trend_months must be >= 2")
        if not self.income_category.strip():
            raise ValueError("income_category must not be empty")
        return self


DEFAULT_CONFIG = EngineConfig()
