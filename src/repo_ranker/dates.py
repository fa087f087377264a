"""Date helpers for scoring and GitHub search qualifiers."""

from __future__ import annotations

import calendar
import math
from datetime import UTC, date, datetime, timedelta

SECONDS_PER_DAY = 86400

_DATE_RANGES = ("today", "week", "month", "year")


def parse_timestamp(value: object) -> float | None:
    """Convert an ISO 8601 string or datetime to epoch seconds.

    Naive values are taken as UTC. Returns None when the value cannot be parsed.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value.strip():
        try:
            dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    try:
        return dt.timestamp()
    except (OverflowError, OSError, ValueError):
        return None


def days_since(value: object, now: float) -> float:
    """Whole days between ``value`` and ``now``, rounded up.

    Direction is ignored, so future dates count the same as past ones.
    An unparseable date yields ``math.inf``.
    """
    ts = parse_timestamp(value)
    if ts is None:
        return math.inf
    return float(math.ceil(abs(now - ts) / SECONDS_PER_DAY))


def format_date_for_github(day: date) -> str:
    return day.strftime("%Y-%m-%d")


def _months_back(day: date, months: int) -> date:
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    # Clamp the day for shorter months (Mar 31 -> Feb 28).
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


def parse_date_range(value: str, now: datetime | None = None) -> str:
    """Expand ``today``/``week``/``month``/``year`` to a ``>=YYYY-MM-DD`` qualifier.

    Any other value is returned unchanged so callers can pass GitHub's own
    syntax (``>2024-01-01``, ``2024-01-01..2024-06-30``) straight through.
    """
    key = value.strip().lower()
    if key not in _DATE_RANGES:
        return value
    current = now or datetime.now(tz=UTC)
    today = current.date()
    if key == "today":
        start = today
    elif key == "week":
        start = (current - timedelta(days=7)).date()
    elif key == "month":
        start = _months_back(today, 1)
    else:
        start = _months_back(today, 12)
    return f">={format_date_for_github(start)}"
