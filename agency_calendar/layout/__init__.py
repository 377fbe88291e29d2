"""Layout stages for the calendar views."""

from .allday import AllDayLane, layout_all_day_lane
from .month import DayCell, MonthLayout, WeekRow, layout_month
from .summary import MonthSummary, layout_multi_month, summarize_days
from .timed import HIDDEN, EventStyle, TimeGridLayout, event_style, layout_day, layout_week
from .tracks import allocate_tracks

__all__ = [
    "AllDayLane",
    "DayCell",
    "EventStyle",
    "HIDDEN",
    "MonthLayout",
    "MonthSummary",
    "TimeGridLayout",
    "WeekRow",
    "allocate_tracks",
    "event_style",
    "layout_all_day_lane",
    "layout_day",
    "layout_month",
    "layout_multi_month",
    "layout_week",
    "summarize_days",
]
