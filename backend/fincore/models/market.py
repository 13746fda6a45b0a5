"""Market data models: price observations and indicator results."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fincore.models.config import BUY_LEVEL, SELL_LEVEL
from fincore.timebucket import to_utc_day


class MarketSignal(str, Enum):
    """Reading of the short/long ratio against the static thresholds."""

    OVERBOUGHT = "overbought"  # ratio above sell level
    OVERSOLD = "oversold"  # ratio below buy level
    NEUTRAL = "neutral"
    INSUFFICIENT_DATA = "insufficient_data"


class PricePoint(BaseModel):
    """One daily close observation."""

    model_config = ConfigDict(frozen=True)

    date: dt.date
    close: Decimal = Field(gt=0)

    @field_validator("date", mode="before")
    @classmethod
    def _bucket_date(cls, value: Any) -> dt.date:
        return to_utc_day(value)


class ProjectionPoint(BaseModel):
    """A projected close for a future day."""

    model_config = ConfigDict(frozen=True)

    step: int
    date: dt.date
    price: Decimal


def classify_ratio(
    ratio: Decimal | None,
    buy_level: Decimal = BUY_LEVEL,
    sell_level: Decimal = SELL_LEVEL,
) -> MarketSignal:
    """Compare a momentum ratio against the buy/sell levels."""
    if ratio is None or ratio.is_nan():
        return MarketSignal.INSUFFICIENT_DATA
    if ratio > sell_level:
        return MarketSignal.OVERBOUGHT
    if ratio < buy_level:
        return MarketSignal.OVERSOLD
    return MarketSignal.NEUTRAL


class IndicatorResult(BaseModel):
    """Moving averages, momentum ratio and projection for one price series.

    All series are aligned with ``dates``; entries are None until the
    corresponding window has filled.
    """

    model_config = ConfigDict(frozen=True)

    dates: list[dt.date] = Field(default_factory=list)
    closes: list[Decimal] = Field(default_factory=list)
    sma_short: list[Decimal | None] = Field(default_factory=list)
    sma_long: list[Decimal | None] = Field(default_factory=list)
    ratio: list[Decimal | None] = Field(default_factory=list)
    current_ratio: Decimal | None = None
    buy_level: Decimal = BUY_LEVEL
    sell_level: Decimal = SELL_LEVEL
    projection: list[ProjectionPoint] = Field(default_factory=list)

    @property
    def signal(self) -> MarketSignal:
        return classify_ratio(self.current_ratio, self.buy_level, self.sell_level)

    @property
    def last_close(self) -> Decimal | None:
        return self.closes[-1] if self.closes else None

    @property
    def has_sufficient_data(self) -> bool:
        return self.current_ratio is not None

    def __len__(self) -> int:
        return len(self.dates)

    def between(
        self,
        start: dt.date | None = None,
        end: dt.date | None = None,
    ) -> IndicatorResult:
        """Restrict the series to an inclusive date range.

        Averages stay as computed over the full history, and the current
        ratio and projection still describe the latest observation.
        """
        keep = [
            i for i, day in enumerate(self.dates)
            if (start is None or day >= start) and (end is None or day <= end)
        ]
        return self.model_copy(
            update={
                "dates": [self.dates[i] for i in keep],
                "closes": [self.closes[i] for i in keep],
                "sma_short": [self.sma_short[i] for i in keep],
                "sma_long": [self.sma_long[i] for i in keep],
                "ratio": [self.ratio[i] for i in keep],
            }
        )
