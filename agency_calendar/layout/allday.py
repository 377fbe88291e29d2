"""Header lane for all-day and multi-day items in week and day views."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Tuple

from ..config import DEFAULT_CONFIG, LayoutConfig
from ..days import add_days
from ..events import CalendarEvent, LaidOutEvent
from .month import events_in_window
from .tracks import allocate_tracks, track_count


@dataclass(frozen=True)
class AllDayLane:
    """Lane placement for the header strip; it grows to ``lane_count`` rows."""

    events: Tuple[LaidOutEvent, ...]
    lane_count: int


def layout_all_day_lane(
    events: Iterable[CalendarEvent],
    window_start: datetime,
    width: int,
    *,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> AllDayLane:
    # Longest items claim the lowest lanes.
    tz = config.tzinfo
    in_window = events_in_window(events, window_start, add_days(window_start, width - 1), tz)
    laid_out = allocate_tracks(
        in_window,
        window_start,
        width,
        order="duration",
        initial_capacity=config.initial_track_capacity,
        tz=tz,
    )
    return AllDayLane(events=tuple(laid_out), lane_count=track_count(laid_out))


__all__ = ["AllDayLane", "layout_all_day_lane"]
