"""Linearly weighted moving average and series helpers.

The moving average used by the stock watch is neither the textbook simple
average nor an exponential one. Inside a window of ``period`` samples the
newest sample has weight 1 and each older sample loses ``1/period``, down
to ``1/period`` for the oldest:

    weight(j) = (period - j) / period        j = 0 (newest) .. period - 1

    y[i] = sum(x[i - j] * weight(j)) / sum(weight(j))

All arithmetic is done in Decimal, so recomputing a series over the same
input gives identical values.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, localcontext
from typing import Sequence


def _to_decimal(value: Decimal | int | float) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def linear_weights(period: int) -> list[Decimal]:
    """
    Get the window weights, newest sample first.

    Args:
        period: Window size (must be positive)

    Returns:
        List of ``period`` weights decreasing linearly from 1 to 1/period
    """
    if period <= 0:
        return []
    p = Decimal(period)
    return [Decimal(period - j) / p for j in range(period)]


def weighted_sma(
    values: Sequence[Decimal | int | float],
    period: int,
) -> list[Decimal | None]:
    """
    Calculate the linearly weighted moving average.

    NaN samples are not treated specially: any window containing one
    averages to NaN, as does a window mixing +inf and -inf.

    Args:
        values: Sequence of numeric values, oldest first
        period: Window size

    Returns:
        List the same length as ``values``; None until the window fills.
        All None when ``period <= 0`` or ``period > len(values)``.
    """
    n = len(values)
    if period <= 0 or period > n:
        return [None] * n

    arr = [_to_decimal(v) for v in values]
    weights = linear_weights(period)
    weight_sum = sum(weights, Decimal("0"))

    result: list[Decimal | None] = [None] * (period - 1)
    with localcontext() as ctx:
        # inf - inf and similar yield NaN instead of raising
        ctx.traps[InvalidOperation] = False
        for i in range(period - 1, n):
            acc = Decimal("0")
            for j, w in enumerate(weights):
                acc += arr[i - j] * w
            result.append(acc / weight_sum)

    return result


def ratio_series(
    numerators: Sequence[Decimal | None],
    denominators: Sequence[Decimal | None],
) -> list[Decimal | None]:
    """
    Element-wise ratio of two aligned series.

    A ratio is defined only where both inputs are defined and the
    denominator is non-zero.
    """
    if len(numerators) != len(denominators):
        raise ValueError(
            f"Series length mismatch: {len(numerators)} != {len(denominators)}"
        )

    result: list[Decimal | None] = []
    with localcontext() as ctx:
        ctx.traps[InvalidOperation] = False
        for num, den in zip(numerators, denominators):
            if num is None or den is None or den == 0:
                result.append(None)
            else:
                result.append(num / den)
    return result


def latest_defined(series: Sequence[Decimal | None]) -> Decimal | None:
    """Get the last defined value of a series, or None."""
    for value in reversed(series):
        if value is not None:
            return value
    return None
