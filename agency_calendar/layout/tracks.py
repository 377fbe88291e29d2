"""Greedy first-fit lane assignment over a fixed window of day columns."""

from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from typing import Iterable, List, Literal, Optional, Sequence, Tuple

from ..days import EPOCH, day_key, days_between, start_of_day
from ..events import CalendarEvent, LaidOutEvent

logger = logging.getLogger(__name__)

TrackOrder = Literal["start", "duration"]


def event_days(event: CalendarEvent, tz: Optional[tzinfo] = None) -> Tuple[datetime, datetime]:
    """Local midnights of the first and last day ``event`` touches."""

    return start_of_day(event.start, tz), start_of_day(event.end, tz)


def event_day_keys(event: CalendarEvent, tz: Optional[tzinfo] = None) -> Tuple[str, str]:
    return day_key(event.start, tz), day_key(event.end, tz)


def _sort_time(value: Optional[datetime]) -> float:
    if value is None:
        return 0.0
    return (value - EPOCH).total_seconds()


def allocate_tracks(
    events: Iterable[CalendarEvent],
    window_start: datetime,
    width: int,
    *,
    order: TrackOrder = "start",
    initial_capacity: int = 10,
    tz: Optional[tzinfo] = None,
) -> List[LaidOutEvent]:
    """Assign every event intersecting the window the lowest free track.

    ``order="start"`` processes events by their first day (ties keep input
    order); ``order="duration"`` puts the longest events first and breaks ties
    by start time. Events that miss the window entirely, including inverted
    ranges, are left out of the result.
    """

    window_day = start_of_day(window_start)
    candidates: List[Tuple[int, int, CalendarEvent]] = []
    for event in events:
        first, last = event_days(event, tz)
        start_idx = days_between(window_day, first)
        end_idx = days_between(window_day, last)
        if end_idx < start_idx or end_idx < 0 or start_idx >= width:
            continue
        candidates.append((start_idx, end_idx, event))

    if order == "duration":
        candidates.sort(key=lambda item: (-item[2].duration_seconds, _sort_time(item[2].start)))
    else:
        candidates.sort(key=lambda item: item[0])

    grid: List[List[bool]] = [[False] * width for _ in range(initial_capacity)]
    laid_out: List[LaidOutEvent] = []

    for start_idx, end_idx, event in candidates:
        first_col = max(0, start_idx)
        last_col = min(width - 1, end_idx)

        track = 0
        while True:
            if track == len(grid):
                logger.debug("Growing lane grid to %d tracks for event %s", track + 1, event.id)
                grid.append([False] * width)
            if not any(grid[track][first_col : last_col + 1]):
                break
            track += 1

        for col in range(first_col, last_col + 1):
            grid[track][col] = True
        laid_out.append(
            LaidOutEvent(event=event, start_col=first_col, span=last_col - first_col + 1, track=track)
        )

    return laid_out


def track_count(laid_out: Sequence[LaidOutEvent]) -> int:
    return max((item.track for item in laid_out), default=-1) + 1


__all__ = ["allocate_tracks", "event_day_keys", "event_days", "track_count"]
