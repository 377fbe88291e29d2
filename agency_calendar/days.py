"""Timezone-safe calendar-day arithmetic.

Everything in the engine compares *local* calendar days. Aware datetimes are
converted to the configured zone and then handled as naive local wall time, so
adding days never drifts across DST changes and a day key never shifts because
a value happened to be serialized with a different UTC offset.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Any, Mapping, Optional

from .config import SUNDAY

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1)
EPOCH_KEY = "1970-01-01"

_ACCESSORS = ("to_datetime", "to_date", "toDate")


def to_local(value: Any, tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """Return ``value`` as a naive local datetime, or ``None`` if it cannot be read.

    Accepted shapes are :class:`datetime`, :class:`date`, ISO-8601 strings,
    epoch seconds, and wrapped timestamps: objects or mappings exposing
    ``seconds`` (or ``_seconds``), or a ``to_datetime()``/``to_date()``/``toDate()``
    accessor.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return _localize(value, tz)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        return _parse_iso(value, tz)
    if isinstance(value, (int, float)):
        return _from_epoch_seconds(value, tz)

    for accessor in _ACCESSORS:
        method = getattr(value, accessor, None)
        if callable(method):
            try:
                unwrapped = method()
            except (TypeError, ValueError, OverflowError):
                return None
            return to_local(unwrapped, tz)

    seconds = _wrapped_seconds(value)
    if seconds is not None:
        return _from_epoch_seconds(seconds, tz)
    return None


def start_of_day(value: Any, tz: Optional[tzinfo] = None) -> datetime:
    """Local midnight of ``value``; unreadable input maps to :data:`EPOCH`."""

    local = to_local(value, tz)
    if local is None:
        return EPOCH
    return local.replace(hour=0, minute=0, second=0, microsecond=0)


def day_key(value: Any, tz: Optional[tzinfo] = None) -> str:
    """``YYYY-MM-DD`` built from the local year, month and day fields."""

    local = to_local(value, tz)
    if local is None:
        return EPOCH_KEY
    return f"{local.year:04d}-{local.month:02d}-{local.day:02d}"


def add_days(value: datetime, days: int) -> datetime:
    return value + timedelta(days=days)


def start_of_week(value: datetime, week_start: int = SUNDAY) -> datetime:
    """Midnight of the first day of the week containing ``value``."""

    day = value.replace(hour=0, minute=0, second=0, microsecond=0)
    return day - timedelta(days=(day.weekday() - week_start) % 7)


def start_of_month(value: datetime) -> datetime:
    return datetime(value.year, value.month, 1)


def add_months(value: datetime, months: int) -> datetime:
    """First day of the month ``months`` away from ``value``."""

    index = value.year * 12 + (value.month - 1) + months
    return datetime(index // 12, index % 12 + 1, 1)


def days_between(start: datetime, end: datetime) -> int:
    """Whole calendar days from ``start`` to ``end`` (negative when ``end`` is earlier)."""

    return (end.date() - start.date()).days


def is_same_day(first: Any, second: Any, tz: Optional[tzinfo] = None) -> bool:
    return day_key(first, tz) == day_key(second, tz)


def minutes_since(day: datetime, value: datetime) -> int:
    """Whole minutes from local midnight of ``day`` to ``value``."""

    return int((value - start_of_day(day)).total_seconds() // 60)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _localize(value: datetime, tz: Optional[tzinfo]) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(tz).replace(tzinfo=None)


def _parse_iso(value: str, tz: Optional[tzinfo]) -> Optional[datetime]:
    text = value.strip()
    if not text:
        return None
    cleaned = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        parsed = datetime.fromisoformat(cleaned)
    except ValueError:
        logger.debug("Unable to parse timestamp %r", value)
        return None
    return _localize(parsed, tz)


def _from_epoch_seconds(seconds: float, tz: Optional[tzinfo]) -> Optional[datetime]:
    try:
        if tz is None:
            return datetime.fromtimestamp(seconds)
        return datetime.fromtimestamp(seconds, tz).replace(tzinfo=None)
    except (OverflowError, OSError, ValueError):
        return None


def _wrapped_seconds(value: Any) -> Optional[float]:
    if isinstance(value, Mapping):
        raw = value.get("seconds", value.get("_seconds"))
        nanos = value.get("nanoseconds", value.get("_nanoseconds", 0))
    else:
        raw = getattr(value, "seconds", getattr(value, "_seconds", None))
        nanos = getattr(value, "nanoseconds", getattr(value, "_nanoseconds", 0))
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return None
    if isinstance(nanos, (int, float)) and not isinstance(nanos, bool):
        return raw + nanos / 1_000_000_000
    return float(raw)


__all__ = [
    "EPOCH",
    "EPOCH_KEY",
    "add_days",
    "add_months",
    "day_key",
    "days_between",
    "is_same_day",
    "minutes_since",
    "start_of_day",
    "start_of_month",
    "start_of_week",
    "to_local",
]
