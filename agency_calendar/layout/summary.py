"""Per-day event-type markers for the 3- and 6-month views."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Dict, Iterable, List, Optional, Tuple

from ..config import DEFAULT_CONFIG, LayoutConfig
from ..days import add_days, add_months, day_key, start_of_month
from ..events import CalendarEvent, EventType
from .month import month_grid_start
from .tracks import event_days

logger = logging.getLogger(__name__)

GRID_DAYS = 42


@dataclass(frozen=True)
class MonthSummary:
    month_date: datetime
    days: Tuple[datetime, ...]
    events_by_day: Dict[str, List[EventType]] = field(default_factory=dict)

    def types_on(self, day: datetime) -> List[EventType]:
        return list(self.events_by_day.get(day_key(day), ()))


def walk_event_days(event: CalendarEvent, *, cap: int, tz: Optional[tzinfo] = None) -> List[str]:
    """Day keys from the event's local start to its local end, at most ``cap`` of them."""

    current, last = event_days(event, tz)
    keys: List[str] = []
    iterations = 0
    while current <= last:
        if iterations >= cap:
            logger.warning(
                "Day walk for event %s stopped after %d days (ends %s)", event.id, cap, day_key(last)
            )
            break
        keys.append(day_key(current))
        current = add_days(current, 1)
        iterations += 1
    return keys


def summarize_days(
    events: Iterable[CalendarEvent],
    *,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> Dict[str, List[EventType]]:
    """Map each covered day key to the distinct event types on it, in first-seen order."""

    by_day: Dict[str, List[EventType]] = {}
    for event in events:
        for key in walk_event_days(event, cap=config.day_walk_cap, tz=config.tzinfo):
            types = by_day.setdefault(key, [])
            if event.type not in types:
                types.append(event.type)
    return by_day


def layout_multi_month(
    events: Iterable[CalendarEvent],
    reference_date: datetime,
    months: int,
    *,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> Tuple[MonthSummary, ...]:
    if months not in (3, 6):
        raise ValueError(f"Multi-month views cover 3 or 6 months, got {months}")

    by_day = summarize_days(events, config=config)
    first_month = start_of_month(reference_date)
    summaries: List[MonthSummary] = []
    for offset in range(months):
        month_date = add_months(first_month, offset)
        grid_start = month_grid_start(month_date, config.week_start)
        days = tuple(add_days(grid_start, index) for index in range(GRID_DAYS))
        events_by_day = {
            day_key(day): list(by_day[day_key(day)]) for day in days if day_key(day) in by_day
        }
        summaries.append(MonthSummary(month_date=month_date, days=days, events_by_day=events_by_day))
    return tuple(summaries)


__all__ = ["GRID_DAYS", "MonthSummary", "layout_multi_month", "summarize_days", "walk_event_days"]
