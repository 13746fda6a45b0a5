"""Market indicator analysis for the stock watch.

Given a date-ascending series of daily closes:
- short and long linearly weighted moving averages (20 / 50 by default)
- the short/long momentum ratio and its latest defined value
- static buy/sell levels the ratio is compared against
- a naive linear projection of the next few daily closes, using the
  ratio's distance from 1 as the slope

Fewer closes than the long window is not an error: the long average,
ratio and projection are simply left undefined.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Iterable, Mapping, Sequence

from pydantic import ValidationError

from fincore.errors import UnsortedSeriesError
from fincore.indicators import latest_defined, ratio_series, weighted_sma
from fincore.models.config import DEFAULT_CONFIG, EngineConfig
from fincore.models.ledger import RejectedRecord
from fincore.models.market import IndicatorResult, PricePoint, ProjectionPoint

logger = logging.getLogger(__name__)


def parse_price_points(
    records: Iterable[PricePoint | Mapping[str, Any]],
) -> tuple[list[PricePoint], list[RejectedRecord]]:
    """Split raw observations into valid PricePoints and rejected records."""
    points: list[PricePoint] = []
    rejected: list[RejectedRecord] = []

    for index, record in enumerate(records):
        if isinstance(record, PricePoint):
            points.append(record)
            continue
        try:
            points.append(PricePoint.model_validate(dict(record)))
        except (ValidationError, TypeError, ValueError) as e:
            rejected.append(RejectedRecord(index=index, record=record, reason=str(e)))

    if rejected:
        logger.debug(f"Rejected {len(rejected)} of {len(rejected) + len(points)} price records")
    return points, rejected


def filter_by_date_range(
    points: Iterable[PricePoint],
    start: date | None = None,
    end: date | None = None,
) -> list[PricePoint]:
    """Keep points within an inclusive date range (open ends allowed)."""
    return [
        p for p in points
        if (start is None or p.date >= start) and (end is None or p.date <= end)
    ]


def _check_ascending(points: Sequence[PricePoint]) -> None:
    for i in range(1, len(points)):
        if points[i].date < points[i - 1].date:
            raise UnsortedSeriesError(
                f"Price series must be date-ascending: {points[i].date} "
                f"follows {points[i - 1].date} at index {i}"
            )


def project(
    last_close: Decimal,
    last_date: date,
    current_ratio: Decimal,
    steps: int = DEFAULT_CONFIG.projection_steps,
) -> list[ProjectionPoint]:
    """
    Linear extrapolation of the next ``steps`` daily closes.

    projection[k] = last_close * (1 + (current_ratio - 1) * k / steps)

    Args:
        last_close: Latest observed close
        last_date: Date of the latest close
        current_ratio: Latest defined short/long ratio
        steps: Number of forward days

    Returns:
        List of ProjectionPoint for k = 1..steps
    """
    slope = current_ratio - 1
    n = Decimal(steps)
    return [
        ProjectionPoint(
            step=k,
            date=last_date + timedelta(days=k),
            price=last_close * (1 + slope * Decimal(k) / n),
        )
        for k in range(1, steps + 1)
    ]


def analyze_market(
    price_points: Sequence[PricePoint],
    *,
    config: EngineConfig | None = None,
) -> IndicatorResult:
    """
    Compute moving averages, momentum ratio and projection for a series.

    Args:
        price_points: Daily closes in ascending date order
        config: Engine configuration (windows, levels, projection steps)

    Returns:
        IndicatorResult aligned with the input series

    Raises:
        UnsortedSeriesError: If the series is not date-ascending
    """
    config = config or DEFAULT_CONFIG
    points = list(price_points)
    _check_ascending(points)

    closes = [p.close for p in points]
    sma_short = weighted_sma(closes, config.short_window)
    sma_long = weighted_sma(closes, config.long_window)
    ratio = ratio_series(sma_short, sma_long)
    current_ratio = latest_defined(ratio)

    projection: list[ProjectionPoint] = []
    if current_ratio is not None and points:
        projection = project(
            closes[-1], points[-1].date, current_ratio, config.projection_steps
        )
    else:
        logger.debug(
            f"Insufficient data for ratio: {len(closes)} closes, "
            f"long window {config.long_window}"
        )

    return IndicatorResult(
        dates=[p.date for p in points],
        closes=closes,
        sma_short=sma_short,
        sma_long=sma_long,
        ratio=ratio,
        current_ratio=current_ratio,
        buy_level=config.buy_level,
        sell_level=config.sell_level,
        projection=projection,
    )
