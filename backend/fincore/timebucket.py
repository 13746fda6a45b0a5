"""UTC calendar bucketing for date-bearing values.

Ledger rows arrive as ``date`` objects, ``datetime`` objects (aware or
naive) or strings. Every one of them is reduced to a UTC calendar day
before grouping, so a movement recorded late in the evening west of UTC
never slides into the next day (or month).

Plain ``YYYY-MM-DD`` strings are split into their numeric components and
built directly as a date. They are never handed to a locale-aware parser
and never interpreted as local midnight.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import NamedTuple

from fincore.errors import MalformedDateError

_PLAIN_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


class MonthKey(NamedTuple):
    """Calendar month bucket key."""

    year: int
    month: int

    @property
    def start(self) -> date:
        """First day of the month."""
        return date(self.year, self.month, 1)

    @property
    def label(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    def timestamp(self) -> float:
        """Unix timestamp of the month's first day at 00:00 UTC."""
        return datetime(self.year, self.month, 1, tzinfo=timezone.utc).timestamp()


# =============================================================================
# Day bucketing
# =============================================================================

def _parse_string(value: str) -> date:
    text = value.strip()

    match = _PLAIN_DATE.match(text)
    if match:
        year, month, day = (int(part) for part in match.groups())
        try:
            return date(year, month, day)
        except ValueError as e:
            raise MalformedDateError(value, str(e)) from e

    # ISO 8601 timestamps, as written by the movement importer
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise MalformedDateError(value, str(e)) from e
    return _datetime_to_day(parsed)


def _datetime_to_day(value: datetime) -> date:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.date()


def to_utc_day(value: date | datetime | str) -> date:
    """Reduce a date-bearing value to its UTC calendar day.

    Args:
        value: ``date``, ``datetime`` (naive values are taken as UTC) or a
            ``YYYY-MM-DD`` / ISO 8601 string

    Returns:
        The calendar day, without a time component

    Raises:
        MalformedDateError: If the value cannot be interpreted as a date
    """
    # datetime is a subclass of date, check it first
    if isinstance(value, datetime):
        return _datetime_to_day(value)
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return _parse_string(value)
    raise MalformedDateError(value, f"unsupported type {type(value).__name__}")


# =============================================================================
# Month bucketing
# =============================================================================

def month_key(value: date | datetime | str) -> MonthKey:
    """Get the ``(year, month)`` bucket for a date-bearing value."""
    day = to_utc_day(value)
    return MonthKey(day.year, day.month)


def month_start(value: date | datetime | str) -> date:
    """Get the first day of the UTC month containing ``value``."""
    return month_key(value).start


def shift_month(key: MonthKey, months: int) -> MonthKey:
    """Move a month key forwards (positive) or backwards (negative)."""
    index = key.year * 12 + (key.month - 1) + months
    return MonthKey(index // 12, index % 12 + 1)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)
