"""Hour-axis placement for timed events in week and day views."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Dict, Final, Iterable, List, Optional, Tuple

from ..config import DEFAULT_CONFIG, LayoutConfig
from ..days import add_days, day_key, is_same_day, minutes_since, start_of_day, start_of_week, to_local
from ..events import CalendarEvent, LaidOutEvent
from .allday import AllDayLane, layout_all_day_lane
from .month import events_in_window
from .tracks import event_day_keys, event_days


@dataclass(frozen=True)
class EventStyle:
    """Vertical placement in window-relative minutes (one minute per layout unit)."""

    top: int = 0
    height: int = 0
    hidden: bool = False


HIDDEN: Final[EventStyle] = EventStyle(hidden=True)


def is_all_day(event: CalendarEvent, tz: Optional[tzinfo] = None) -> bool:
    """Whether ``event`` belongs in the all-day lane rather than on the hour axis.

    An explicit flag wins. Otherwise multi-day events and events that start
    and end exactly at local midnight are all-day.
    """

    if event.all_day is not None:
        return event.all_day
    first, last = event_days(event, tz)
    if first != last:
        return True
    start, end = to_local(event.start, tz), to_local(event.end, tz)
    if start is None or end is None:
        return True
    return start == first and end == last


def event_style(
    event: CalendarEvent,
    day: datetime,
    *,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> EventStyle:
    """Place ``event`` on the hour axis of ``day``, or report it hidden."""

    tz = config.tzinfo
    start, end = to_local(event.start, tz), to_local(event.end, tz)
    if start is None or end is None:
        return HIDDEN

    start_minutes = minutes_since(day, start)
    end_minutes = minutes_since(day, end)
    window_start = config.window_start_minutes
    window_end = config.window_end_minutes

    if end_minutes < start_minutes or start_minutes >= window_end:
        return HIDDEN
    if end_minutes < window_start or (end_minutes == window_start and start_minutes < end_minutes):
        return HIDDEN

    top = max(start_minutes, window_start) - window_start
    bottom = min(end_minutes, window_end) - window_start
    return EventStyle(top=top, height=max(config.min_event_height, bottom - top))


def current_time_offset(
    now: datetime,
    day: datetime,
    *,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> Optional[int]:
    """Offset of the "now" line for ``day``; ``None`` unless ``day`` is today and inside the window."""

    tz = config.tzinfo
    local_now = to_local(now, tz)
    if local_now is None or not is_same_day(local_now, day):
        return None
    minutes = minutes_since(day, local_now)
    if not config.window_start_minutes <= minutes < config.window_end_minutes:
        return None
    return minutes - config.window_start_minutes


@dataclass(frozen=True)
class TimeGridLayout:
    """Week or day view: all-day header lane plus hour-axis styles per (event, day)."""

    days: Tuple[datetime, ...]
    all_day: AllDayLane
    timed_events: Tuple[CalendarEvent, ...]
    styles: Dict[str, Dict[str, EventStyle]] = field(default_factory=dict)
    now_offsets: Dict[str, int] = field(default_factory=dict)

    @property
    def all_day_events(self) -> Tuple[LaidOutEvent, ...]:
        return self.all_day.events

    def style_for(self, event_id: str, day: datetime) -> EventStyle:
        return self.styles.get(event_id, {}).get(day_key(day), HIDDEN)

    def now_offset(self, day: datetime) -> Optional[int]:
        return self.now_offsets.get(day_key(day))


def layout_time_grid(
    events: Iterable[CalendarEvent],
    days: Tuple[datetime, ...],
    now: datetime,
    *,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> TimeGridLayout:
    tz = config.tzinfo
    in_window = events_in_window(events, days[0], days[-1], tz)

    all_day_events: List[CalendarEvent] = []
    timed: List[CalendarEvent] = []
    for event in in_window:
        (all_day_events if is_all_day(event, tz) else timed).append(event)
    timed.sort(key=lambda event: event.start or datetime.min)

    styles: Dict[str, Dict[str, EventStyle]] = {}
    for event in timed:
        start_key, end_key = event_day_keys(event, tz)
        per_day = {
            day_key(day): event_style(event, day, config=config)
            for day in days
            if start_key <= day_key(day) <= end_key
        }
        styles[event.id] = per_day

    now_offsets: Dict[str, int] = {}
    for day in days:
        offset = current_time_offset(now, day, config=config)
        if offset is not None:
            now_offsets[day_key(day)] = offset

    lane = layout_all_day_lane(all_day_events, days[0], len(days), config=config)
    return TimeGridLayout(
        days=days,
        all_day=lane,
        timed_events=tuple(timed),
        styles=styles,
        now_offsets=now_offsets,
    )


def layout_week(
    events: Iterable[CalendarEvent],
    reference_date: datetime,
    now: datetime,
    *,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> TimeGridLayout:
    week_start = start_of_week(start_of_day(reference_date, config.tzinfo), config.week_start)
    days = tuple(add_days(week_start, offset) for offset in range(7))
    return layout_time_grid(events, days, now, config=config)


def layout_day(
    events: Iterable[CalendarEvent],
    reference_date: datetime,
    now: datetime,
    *,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> TimeGridLayout:
    return layout_time_grid(events, (start_of_day(reference_date, config.tzinfo),), now, config=config)


__all__ = [
    "EventStyle",
    "HIDDEN",
    "TimeGridLayout",
    "current_time_offset",
    "event_style",
    "is_all_day",
    "layout_day",
    "layout_time_grid",
    "layout_week",
]
