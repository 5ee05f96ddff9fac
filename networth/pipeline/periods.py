from __future__ import annotations

from datetime import date, datetime, timedelta
from enum import Enum

from dateutil.relativedelta import relativedelta

from .errors import ValidationError


class Granularity(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


_LOOKBACK = {
    Granularity.DAILY: relativedelta(days=30),
    Granularity.WEEKLY: relativedelta(months=6),
    Granularity.MONTHLY: relativedelta(years=2),
    Granularity.YEARLY: relativedelta(years=10),
}

_STEP = {
    Granularity.DAILY: relativedelta(days=1),
    Granularity.WEEKLY: relativedelta(weeks=1),
    Granularity.MONTHLY: relativedelta(months=1),
    Granularity.YEARLY: relativedelta(years=1),
}

# (max span in days, remote range keyword); anything longer falls through to 10y.
_LOOKUP_WINDOWS = [
    (30, "1mo"),
    (180, "6mo"),
    (365, "1y"),
    (730, "2y"),
    (1825, "5y"),
]


def parse_granularity(text: str | None) -> Granularity:
    if not text:
        return Granularity.DAILY
    try:
        return Granularity(text.strip().lower())
    except ValueError:
        raise ValidationError("Invalid period. Use: daily, weekly, monthly, yearly") from None


def _as_date(t: date | datetime) -> date:
    if isinstance(t, datetime):
        return t.date()
    return t


def bucket_key(t: date | datetime, granularity: Granularity) -> str:
    """Canonical bucket label for ``t``.

    Keys are year-major and zero padded, so string order is chronological
    order within a granularity. Weekly keys name the Sunday that closes the
    week; monthly and yearly keys are bare ``YYYY-MM`` / ``YYYY`` labels.
    """
    d = _as_date(t)
    if granularity is Granularity.WEEKLY:
        return (d + timedelta(days=6 - d.weekday())).isoformat()
    if granularity is Granularity.MONTHLY:
        return f"{d.year:04d}-{d.month:02d}"
    if granularity is Granularity.YEARLY:
        return f"{d.year:04d}"
    return d.isoformat()


def default_start(end: date, granularity: Granularity) -> date:
    return end - _LOOKBACK[granularity]


def lookup_window(start: date, end: date) -> str:
    days = (end - start).days
    for max_days, keyword in _LOOKUP_WINDOWS:
        if days <= max_days:
            return keyword
    return "10y"


def step(d: date, granularity: Granularity, n: int = 1) -> date:
    return d + _STEP[granularity] * n


def iter_buckets(start: date, end: date, granularity: Granularity):
    """Distinct bucket keys from ``start`` to ``end`` inclusive, in order."""
    # Offsets are taken from start each time so month-end starts do not drift.
    i = 0
    current = start
    last = None
    while current <= end:
        key = bucket_key(current, granularity)
        if key != last:
            yield key
            last = key
        i += 1
        current = step(start, granularity, i)
    end_key = bucket_key(end, granularity)
    if start <= end and end_key != last:
        yield end_key
