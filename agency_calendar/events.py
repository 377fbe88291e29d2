"""Event records consumed by the layout engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, tzinfo
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional

from .days import to_local

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Closed set of event kinds merged into the calendar."""

    TASK = "task"
    INVOICE = "invoice"
    ESTIMATE = "estimate"
    ROADMAP_ITEM = "roadmap_item"
    MANUAL = "manual"
    COMMENT = "comment"


ALL_EVENT_TYPES: frozenset[EventType] = frozenset(EventType)


class EventDataError(ValueError):
    """Raised when an event document cannot be read at all."""


@dataclass(frozen=True)
class CalendarEvent:
    """Normalized calendar event.

    ``start`` and ``end`` are naive local datetimes; ``None`` marks a missing
    or unparseable timestamp, which the layout stages treat as the epoch.
    """

    id: str
    title: str
    type: EventType
    start: Optional[datetime]
    end: Optional[datetime]
    source_id: Optional[str] = None
    user_id: Optional[str] = None
    brand_id: Optional[str] = None
    project_id: Optional[str] = None
    task_id: Optional[str] = None
    feedback_item_id: Optional[str] = None
    all_day: Optional[bool] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, tz: Optional[tzinfo] = None) -> "CalendarEvent":
        """Build an event from a camelCase (or snake_case) record.

        Raises :class:`EventDataError` when the record lacks an id or carries an
        unknown type. Bad timestamps never raise.
        """

        event_id = _pick(data, "id")
        if event_id is None or str(event_id) == "":
            raise EventDataError("Event record is missing an 'id'.")
        raw_type = _pick(data, "type")
        try:
            event_type = EventType(str(raw_type))
        except ValueError as exc:
            raise EventDataError(f"Event {event_id!r} has unknown type {raw_type!r}.") from exc

        all_day = _pick(data, "allDay", "all_day")
        return cls(
            id=str(event_id),
            title=str(_pick(data, "title") or ""),
            type=event_type,
            start=to_local(_pick(data, "startDate", "start_date", "start"), tz),
            end=to_local(_pick(data, "endDate", "end_date", "end"), tz),
            source_id=_optional_str(_pick(data, "sourceId", "source_id")),
            user_id=_optional_str(_pick(data, "userId", "user_id")),
            brand_id=_optional_str(_pick(data, "brandId", "brand_id")),
            project_id=_optional_str(_pick(data, "projectId", "project_id")),
            task_id=_optional_str(_pick(data, "taskId", "task_id")),
            feedback_item_id=_optional_str(_pick(data, "feedbackItemId", "feedback_item_id")),
            all_day=bool(all_day) if all_day is not None else None,
        )

    @property
    def duration_seconds(self) -> float:
        if self.start is None or self.end is None:
            return 0.0
        return (self.end - self.start).total_seconds()


@dataclass(frozen=True)
class LaidOutEvent:
    """An event placed in a row or lane: ``span`` columns from ``start_col`` on ``track``."""

    event: CalendarEvent
    start_col: int
    span: int
    track: int

    @property
    def id(self) -> str:
        return self.event.id

    @property
    def type(self) -> EventType:
        return self.event.type

    @property
    def end_col(self) -> int:
        """Exclusive end column."""
        return self.start_col + self.span


def parse_events(records: Iterable[Any], *, tz: Optional[tzinfo] = None) -> List[CalendarEvent]:
    """Normalize raw records, logging and skipping the ones that cannot be used."""

    events: List[CalendarEvent] = []
    for index, record in enumerate(records):
        if isinstance(record, CalendarEvent):
            events.append(record)
            continue
        if not isinstance(record, Mapping):
            logger.warning("Skipping event record %d: expected a mapping, got %s", index, type(record).__name__)
            continue
        try:
            events.append(CalendarEvent.from_mapping(record, tz=tz))
        except EventDataError as exc:
            logger.warning("Skipping event record %d: %s", index, exc)
    return events


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def _optional_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


__all__ = [
    "ALL_EVENT_TYPES",
    "CalendarEvent",
    "EventDataError",
    "EventType",
    "LaidOutEvent",
    "parse_events",
]
