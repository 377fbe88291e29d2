"""View modes, date navigation and the filter-then-layout pipeline."""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Collection, Iterable, Optional, Tuple, Union

from .config import DEFAULT_CONFIG, LayoutConfig
from .days import add_days, add_months, start_of_day, start_of_week
from .events import CalendarEvent, EventType
from .filters import apply_filters
from .layout.month import MonthLayout, layout_month
from .layout.summary import MonthSummary, layout_multi_month
from .layout.timed import TimeGridLayout, layout_day, layout_week
from .sources import EntityIndex

LOGGER = logging.getLogger(__name__)

CalendarLayout = Union[MonthLayout, TimeGridLayout, Tuple[MonthSummary, ...]]


class ViewMode(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    THREE_MONTH = "3-month"
    SIX_MONTH = "6-month"

    @property
    def months(self) -> int:
        return {ViewMode.THREE_MONTH: 3, ViewMode.SIX_MONTH: 6}.get(self, 1)


def navigate(current: datetime, view: ViewMode | str, direction: int) -> datetime:
    """Move ``current`` one page forward (``direction=1``) or back (``-1``).

    Day and week views keep the time of day; month-based views land on the
    first of the month.
    """

    mode = ViewMode(view)
    if mode is ViewMode.DAY:
        return add_days(current, direction)
    if mode is ViewMode.WEEK:
        return add_days(current, 7 * direction)
    return add_months(current, mode.months * direction)


def header_title(current: datetime, view: ViewMode | str, *, config: LayoutConfig = DEFAULT_CONFIG) -> str:
    mode = ViewMode(view)
    if mode is ViewMode.DAY:
        return f"{current:%A}, {current:%B} {current.day}, {current.year}"
    if mode is ViewMode.WEEK:
        week_start = start_of_week(current, config.week_start)
        week_end = add_days(week_start, 6)
        start_label = f"{week_start:%b} {week_start.day}"
        end_label = f"{week_end:%b} {week_end.day}, {week_end.year}"
        if week_start.year != week_end.year:
            return f"{start_label}, {week_start.year} - {end_label}"
        if week_start.month != week_end.month:
            return f"{start_label} - {end_label}"
        return f"{start_label} - {week_end.day}, {week_end.year}"
    return f"{current:%B} {current.year}"


def build_layout(
    events: Iterable[CalendarEvent],
    view: ViewMode | str,
    reference_date: datetime,
    now: datetime,
    *,
    enabled_types: Optional[Collection[EventType]] = None,
    scope_id: Optional[str] = None,
    index: Optional[EntityIndex] = None,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> CalendarLayout:
    """Filter ``events`` and lay them out for ``view`` around ``reference_date``."""

    mode = ViewMode(view)
    selected = apply_filters(events, enabled_types=enabled_types, scope_id=scope_id, index=index)
    reference = start_of_day(reference_date, config.tzinfo)
    LOGGER.debug("Laying out %d events for %s view at %s", len(selected), mode.value, reference.date())

    if mode is ViewMode.MONTH:
        return layout_month(selected, reference, config=config)
    if mode is ViewMode.WEEK:
        return layout_week(selected, reference, now, config=config)
    if mode is ViewMode.DAY:
        return layout_day(selected, reference, now, config=config)
    return layout_multi_month(selected, reference, mode.months, config=config)


class LayoutMemo:
    """Single-slot cache: identical inputs return the identical layout object."""

    def __init__(self, config: LayoutConfig = DEFAULT_CONFIG) -> None:
        self.config = config
        self._key: Any = None
        self._result: Optional[CalendarLayout] = None

    def layout(
        self,
        events: Iterable[CalendarEvent],
        view: ViewMode | str,
        reference_date: datetime,
        now: datetime,
        *,
        enabled_types: Optional[Collection[EventType]] = None,
        scope_id: Optional[str] = None,
        index: Optional[EntityIndex] = None,
    ) -> CalendarLayout:
        event_tuple = tuple(events)
        key = (
            event_tuple,
            ViewMode(view),
            reference_date,
            now,
            frozenset(enabled_types) if enabled_types is not None else None,
            scope_id,
            index,
        )
        if self._result is not None and key == self._key:
            return self._result
        self._result = build_layout(
            event_tuple,
            view,
            reference_date,
            now,
            enabled_types=enabled_types,
            scope_id=scope_id,
            index=index,
            config=self.config,
        )
        self._key = key
        return self._result


__all__ = ["CalendarLayout", "LayoutMemo", "ViewMode", "build_layout", "header_title", "navigate"]
