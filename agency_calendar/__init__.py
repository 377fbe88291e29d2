"""Top-level package for the calendar event-layout engine."""

from __future__ import annotations

from .config import DEFAULT_CONFIG, ConfigError, LayoutConfig, load_layout_config
from .days import day_key, start_of_day
from .events import CalendarEvent, EventDataError, EventType, LaidOutEvent
from .filters import apply_filters, filter_by_scope, filter_by_type
from .views import LayoutMemo, ViewMode, build_layout, navigate

__all__ = [
    "__version__",
    "CalendarEvent",
    "ConfigError",
    "DEFAULT_CONFIG",
    "EventDataError",
    "EventType",
    "LaidOutEvent",
    "LayoutConfig",
    "LayoutMemo",
    "ViewMode",
    "apply_filters",
    "build_layout",
    "day_key",
    "filter_by_scope",
    "filter_by_type",
    "load_layout_config",
    "navigate",
    "start_of_day",
]

__version__ = "0.1.0"
