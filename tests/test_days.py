from __future__ import annotations

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from agency_calendar.config import MONDAY, SUNDAY
from agency_calendar.days import (
    EPOCH,
    EPOCH_KEY,
    add_days,
    add_months,
    day_key,
    days_between,
    is_same_day,
    minutes_since,
    start_of_day,
    start_of_week,
    to_local,
)

LOS_ANGELES = ZoneInfo("America/Los_Angeles")


class FakeFirestoreTimestamp:
    def __init__(self, seconds: int, nanoseconds: int = 0) -> None:
        self.seconds = seconds
        self.nanoseconds = nanoseconds


class DateAccessor:
    def __init__(self, value: datetime) -> None:
        self._value = value

    def toDate(self) -> datetime:
        return self._value


@pytest.mark.parametrize(
    "value",
    [
        "2024-01-15T23:30:00-08:00",
        "2024-01-16T07:30:00Z",
        "2024-01-16T02:30:00-05:00",
        "2024-01-15T00:00:01-08:00",
        datetime(2024, 1, 16, 7, 30, tzinfo=timezone.utc),
    ],
)
def test_day_key_is_stable_across_utc_offsets(value: object) -> None:
    assert day_key(value, LOS_ANGELES) == "2024-01-15"


def test_day_key_uses_local_fields_for_naive_values() -> None:
    assert day_key(datetime(2025, 11, 14, 23, 59)) == "2025-11-14"
    assert day_key("2025-11-14") == "2025-11-14"
    assert day_key(date(2025, 3, 9)) == "2025-03-09"


@pytest.mark.parametrize("value", [None, "", "not-a-date", "2025-13-40", object(), True])
def test_invalid_values_degrade_to_epoch(value: object) -> None:
    assert to_local(value) is None
    assert day_key(value) == EPOCH_KEY
    assert start_of_day(value) == EPOCH


def test_start_of_day_accepts_wrapped_timestamps() -> None:
    utc = ZoneInfo("UTC")
    # 2023-11-14T22:13:20Z
    expected = datetime(2023, 11, 14)

    assert start_of_day(FakeFirestoreTimestamp(1_700_000_000), utc) == expected
    assert start_of_day({"seconds": 1_700_000_000, "nanoseconds": 5}, utc) == expected
    assert start_of_day({"_seconds": 1_700_000_000}, utc) == expected
    assert start_of_day(DateAccessor(datetime(2023, 11, 14, 18, 0)), utc) == expected
    assert start_of_day(1_700_000_000, utc) == expected


def test_aware_values_convert_into_requested_zone() -> None:
    assert to_local("2024-01-16T07:30:00Z", LOS_ANGELES) == datetime(2024, 1, 15, 23, 30)


def test_start_of_day_across_dst_change() -> None:
    new_york = ZoneInfo("America/New_York")
    assert start_of_day("2024-03-10T23:00:00-04:00", new_york) == datetime(2024, 3, 10)
    assert add_days(datetime(2024, 3, 9), 2) == datetime(2024, 3, 11)


@pytest.mark.parametrize(
    "value, week_start, expected",
    [
        (datetime(2025, 11, 14, 12, 0), SUNDAY, datetime(2025, 11, 9)),
        (datetime(2025, 11, 9, 8, 0), SUNDAY, datetime(2025, 11, 9)),
        (datetime(2025, 11, 8, 8, 0), SUNDAY, datetime(2025, 11, 2)),
        (datetime(2025, 11, 14, 12, 0), MONDAY, datetime(2025, 11, 10)),
        (datetime(2025, 11, 9, 12, 0), MONDAY, datetime(2025, 11, 3)),
        (datetime(2026, 1, 1), SUNDAY, datetime(2025, 12, 28)),
    ],
)
def test_start_of_week(value: datetime, week_start: int, expected: datetime) -> None:
    assert start_of_week(value, week_start) == expected


def test_add_days_returns_new_value() -> None:
    original = datetime(2025, 11, 30, 9, 15)
    shifted = add_days(original, 2)

    assert shifted == datetime(2025, 12, 2, 9, 15)
    assert original == datetime(2025, 11, 30, 9, 15)


@pytest.mark.parametrize(
    "value, months, expected",
    [
        (datetime(2025, 11, 14), 1, datetime(2025, 12, 1)),
        (datetime(2025, 11, 30), 3, datetime(2026, 2, 1)),
        (datetime(2025, 1, 31), -1, datetime(2024, 12, 1)),
        (datetime(2025, 6, 15), -6, datetime(2024, 12, 1)),
    ],
)
def test_add_months_lands_on_first_of_month(value: datetime, months: int, expected: datetime) -> None:
    assert add_months(value, months) == expected


def test_days_between_ignores_time_of_day() -> None:
    assert days_between(datetime(2025, 11, 9, 23, 0), datetime(2025, 11, 10, 1, 0)) == 1
    assert days_between(datetime(2025, 11, 10), datetime(2025, 11, 3, 12)) == -7


def test_is_same_day_and_minutes_since() -> None:
    assert is_same_day("2025-11-14T08:00:00", datetime(2025, 11, 14, 22, 0))
    assert not is_same_day("2025-11-14T08:00:00", "2025-11-15T00:00:00")
    assert minutes_since(datetime(2025, 11, 14, 17), datetime(2025, 11, 14, 20, 30)) == 1230
    assert minutes_since(datetime(2025, 11, 14), datetime(2025, 11, 13, 23, 0)) == -60
