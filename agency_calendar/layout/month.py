"""Month grid layout: six week rows with lanes and per-day overflow."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..config import DEFAULT_CONFIG, LayoutConfig
from ..days import add_days, day_key, start_of_month, start_of_week
from ..events import CalendarEvent, LaidOutEvent
from .tracks import allocate_tracks, event_day_keys

WEEKS_PER_MONTH_GRID = 6


@dataclass(frozen=True)
class DayCell:
    """One day of a week row, with everything needed for a "+N more" control."""

    day: datetime
    events: Tuple[LaidOutEvent, ...]
    visible: Tuple[LaidOutEvent, ...]
    overflow: int


@dataclass(frozen=True)
class WeekRow:
    days: Tuple[datetime, ...]
    laid_out_events: Tuple[LaidOutEvent, ...]
    cells: Tuple[DayCell, ...]


@dataclass(frozen=True)
class MonthLayout:
    month_date: datetime
    rows: Tuple[WeekRow, ...]
    overflow: Dict[str, int] = field(default_factory=dict)

    def cell_for(self, day: datetime) -> Optional[DayCell]:
        key = day_key(day)
        for row in self.rows:
            for cell in row.cells:
                if day_key(cell.day) == key:
                    return cell
        return None


def events_in_window(
    events: Iterable[CalendarEvent],
    first_day: datetime,
    last_day: datetime,
    tz: Optional[tzinfo] = None,
) -> List[CalendarEvent]:
    """Events whose day-key range intersects ``first_day..last_day`` (inclusive)."""

    first_key, last_key = day_key(first_day), day_key(last_day)
    selected: List[CalendarEvent] = []
    for event in events:
        start_key, end_key = event_day_keys(event, tz)
        if start_key <= last_key and end_key >= first_key:
            selected.append(event)
    return selected


def build_day_cells(
    days: Sequence[datetime],
    laid_out: Sequence[LaidOutEvent],
    *,
    max_visible_tracks: int,
    tz: Optional[tzinfo] = None,
) -> Tuple[DayCell, ...]:
    cells: List[DayCell] = []
    for day in days:
        key = day_key(day)
        covering = []
        for item in laid_out:
            start_key, end_key = event_day_keys(item.event, tz)
            if start_key <= key <= end_key:
                covering.append(item)
        covering.sort(key=lambda item: item.track)
        visible = tuple(item for item in covering if item.track < max_visible_tracks)
        cells.append(
            DayCell(
                day=day,
                events=tuple(covering),
                visible=visible,
                overflow=max(0, len(covering) - max_visible_tracks),
            )
        )
    return tuple(cells)


def layout_week_row(
    events: Iterable[CalendarEvent],
    week_start: datetime,
    *,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> WeekRow:
    tz = config.tzinfo
    days = tuple(add_days(week_start, offset) for offset in range(7))
    in_row = events_in_window(events, days[0], days[-1], tz)
    laid_out = allocate_tracks(
        in_row,
        days[0],
        7,
        order="start",
        initial_capacity=config.initial_track_capacity,
        tz=tz,
    )
    cells = build_day_cells(days, laid_out, max_visible_tracks=config.max_visible_tracks, tz=tz)
    return WeekRow(days=days, laid_out_events=tuple(laid_out), cells=cells)


def month_grid_start(reference_date: datetime, week_start: int) -> datetime:
    return start_of_week(start_of_month(reference_date), week_start)


def layout_month(
    events: Iterable[CalendarEvent],
    reference_date: datetime,
    *,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> MonthLayout:
    """Lay out the six-week grid that contains the month of ``reference_date``."""

    event_list = list(events)
    grid_start = month_grid_start(reference_date, config.week_start)
    rows = tuple(
        layout_week_row(event_list, add_days(grid_start, week * 7), config=config)
        for week in range(WEEKS_PER_MONTH_GRID)
    )
    overflow = {
        day_key(cell.day): cell.overflow
        for row in rows
        for cell in row.cells
        if cell.overflow > 0
    }
    return MonthLayout(month_date=start_of_month(reference_date), rows=rows, overflow=overflow)


__all__ = [
    "DayCell",
    "MonthLayout",
    "WeekRow",
    "build_day_cells",
    "events_in_window",
    "layout_month",
    "layout_week_row",
    "month_grid_start",
]
