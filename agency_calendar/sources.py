"""Source entities behind calendar events and their normalization into events.

The dashboard stores tasks, invoices, roadmap items and feedback comments in
their own collections. This module holds light read-only records for them,
an id index the scope resolver walks, and :func:`aggregate_events`, which
merges everything into one list of :class:`CalendarEvent`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar

from .days import to_local
from .events import CalendarEvent, EventDataError, EventType, parse_events

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


def _text(data: Mapping[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        value = data.get(key)
        if value is not None and value != "":
            return str(value)
    return None


def _require_id(data: Mapping[str, Any], kind: str) -> str:
    value = _text(data, "id")
    if value is None:
        raise EventDataError(f"{kind} record is missing an 'id'.")
    return value


@dataclass(frozen=True)
class Project:
    id: str
    brand_id: Optional[str] = None
    member_ids: Tuple[str, ...] = ()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, tz: Optional[tzinfo] = None) -> "Project":
        members = data.get("memberIds") or data.get("member_ids") or ()
        return cls(
            id=_require_id(data, "Project"),
            brand_id=_text(data, "brandId", "brand_id"),
            member_ids=tuple(str(member) for member in members),
        )

    def is_visible_to(self, user_id: Optional[str]) -> bool:
        # Projects without members are public.
        return not self.member_ids or user_id in self.member_ids


@dataclass(frozen=True)
class Board:
    id: str
    project_id: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, tz: Optional[tzinfo] = None) -> "Board":
        return cls(id=_require_id(data, "Board"), project_id=_text(data, "projectId", "project_id"))


@dataclass(frozen=True)
class Task:
    id: str
    board_id: Optional[str] = None
    title: str = ""
    due_date: Optional[datetime] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, tz: Optional[tzinfo] = None) -> "Task":
        return cls(
            id=_require_id(data, "Task"),
            board_id=_text(data, "boardId", "board_id"),
            title=_text(data, "title") or "",
            due_date=to_local(data.get("dueDate", data.get("due_date")), tz),
        )


@dataclass(frozen=True)
class Client:
    id: str
    brand_id: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, tz: Optional[tzinfo] = None) -> "Client":
        return cls(id=_require_id(data, "Client"), brand_id=_text(data, "brandId", "brand_id"))


@dataclass(frozen=True)
class Invoice:
    id: str
    client_id: Optional[str] = None
    number: str = ""
    date: Optional[datetime] = None
    user_id: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, tz: Optional[tzinfo] = None) -> "Invoice":
        return cls(
            id=_require_id(data, "Invoice"),
            client_id=_text(data, "clientId", "client_id"),
            number=_text(data, "invoiceNumber", "invoice_number") or "",
            date=to_local(data.get("date"), tz),
            user_id=_text(data, "userId", "user_id"),
        )


@dataclass(frozen=True)
class Estimate:
    id: str
    client_id: Optional[str] = None
    number: str = ""
    date: Optional[datetime] = None
    user_id: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, tz: Optional[tzinfo] = None) -> "Estimate":
        return cls(
            id=_require_id(data, "Estimate"),
            client_id=_text(data, "clientId", "client_id"),
            number=_text(data, "estimateNumber", "estimate_number") or "",
            date=to_local(data.get("date"), tz),
            user_id=_text(data, "userId", "user_id"),
        )


@dataclass(frozen=True)
class RoadmapItem:
    id: str
    project_id: Optional[str] = None
    title: str = ""
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, tz: Optional[tzinfo] = None) -> "RoadmapItem":
        return cls(
            id=_require_id(data, "Roadmap item"),
            project_id=_text(data, "projectId", "project_id"),
            title=_text(data, "title") or "",
            start_date=to_local(data.get("startDate", data.get("start_date")), tz),
            end_date=to_local(data.get("endDate", data.get("end_date")), tz),
        )


@dataclass(frozen=True)
class FeedbackComment:
    id: str
    project_id: Optional[str] = None
    comment: str = ""
    due_date: Optional[datetime] = None
    author_id: Optional[str] = None
    feedback_item_id: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, tz: Optional[tzinfo] = None) -> "FeedbackComment":
        return cls(
            id=_require_id(data, "Comment"),
            project_id=_text(data, "projectId", "project_id"),
            comment=_text(data, "comment", "commentText") or "",
            due_date=to_local(data.get("dueDate", data.get("due_date")), tz),
            author_id=_text(data, "reporterId", "authorId", "author_id"),
            feedback_item_id=_text(data, "feedbackItemId", "feedback_item_id"),
        )


def _index(items: Iterable[_T]) -> Dict[str, _T]:
    return {item.id: item for item in items}  # type: ignore[attr-defined]


@dataclass(frozen=True)
class EntityIndex:
    """Id lookups over the entities an event can belong to."""

    projects: Mapping[str, Project] = field(default_factory=dict)
    boards: Mapping[str, Board] = field(default_factory=dict)
    tasks: Mapping[str, Task] = field(default_factory=dict)
    clients: Mapping[str, Client] = field(default_factory=dict)
    invoices: Mapping[str, Invoice] = field(default_factory=dict)
    estimates: Mapping[str, Estimate] = field(default_factory=dict)
    roadmap_items: Mapping[str, RoadmapItem] = field(default_factory=dict)
    comments: Mapping[str, FeedbackComment] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        *,
        projects: Iterable[Project] = (),
        boards: Iterable[Board] = (),
        tasks: Iterable[Task] = (),
        clients: Iterable[Client] = (),
        invoices: Iterable[Invoice] = (),
        estimates: Iterable[Estimate] = (),
        roadmap_items: Iterable[RoadmapItem] = (),
        comments: Iterable[FeedbackComment] = (),
    ) -> "EntityIndex":
        return cls(
            projects=_index(projects),
            boards=_index(boards),
            tasks=_index(tasks),
            clients=_index(clients),
            invoices=_index(invoices),
            estimates=_index(estimates),
            roadmap_items=_index(roadmap_items),
            comments=_index(comments),
        )

    @classmethod
    def from_document(cls, document: Mapping[str, Any], *, tz: Optional[tzinfo] = None) -> "EntityIndex":
        """Read entity collections from a JSON-style document.

        Collection keys are ``projects``, ``boards``, ``tasks``, ``clients``,
        ``invoices``, ``estimates``, ``roadmapItems`` and ``comments``. Malformed
        records are logged and skipped.
        """

        return cls.build(
            projects=_load(document, ("projects",), Project, tz),
            boards=_load(document, ("boards",), Board, tz),
            tasks=_load(document, ("tasks",), Task, tz),
            clients=_load(document, ("clients",), Client, tz),
            invoices=_load(document, ("invoices",), Invoice, tz),
            estimates=_load(document, ("estimates",), Estimate, tz),
            roadmap_items=_load(document, ("roadmapItems", "roadmap_items"), RoadmapItem, tz),
            comments=_load(document, ("comments", "feedbackComments"), FeedbackComment, tz),
        )

    def project_brand(self, project_id: Optional[str]) -> Optional[str]:
        project = self.projects.get(project_id) if project_id else None
        return project.brand_id if project else None

    def board_project(self, board_id: Optional[str]) -> Optional[str]:
        board = self.boards.get(board_id) if board_id else None
        return board.project_id if board else None

    def client_brand(self, client_id: Optional[str]) -> Optional[str]:
        client = self.clients.get(client_id) if client_id else None
        return client.brand_id if client else None


def _load(
    document: Mapping[str, Any],
    keys: Sequence[str],
    record_type: Type[_T],
    tz: Optional[tzinfo],
) -> List[_T]:
    raw: Any = None
    for key in keys:
        if key in document:
            raw = document[key]
            break
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise EventDataError(f"Expected {keys[0]!r} to be a list, got {type(raw).__name__}.")

    records: List[_T] = []
    for position, item in enumerate(raw):
        if not isinstance(item, Mapping):
            logger.warning("Skipping %s record %d: expected a mapping", keys[0], position)
            continue
        try:
            records.append(record_type.from_mapping(item, tz=tz))  # type: ignore[attr-defined]
        except EventDataError as exc:
            logger.warning("Skipping %s record %d: %s", keys[0], position, exc)
    return records


def aggregate_events(
    index: EntityIndex,
    *,
    manual_events: Iterable[Any] = (),
    user_id: Optional[str] = None,
    tz: Optional[tzinfo] = None,
) -> List[CalendarEvent]:
    """Merge manual events and source entities into calendar events.

    Tasks, roadmap items and comments only appear when their project is visible
    to ``user_id``. Invoices and estimates are always included.
    """

    visible_projects = {
        project.id for project in index.projects.values() if project.is_visible_to(user_id)
    }
    visible_boards = {
        board.id for board in index.boards.values() if board.project_id in visible_projects
    }

    events: List[CalendarEvent] = list(parse_events(manual_events, tz=tz))

    for task in index.tasks.values():
        if task.due_date is None or task.board_id not in visible_boards:
            continue
        events.append(
            CalendarEvent(
                id=f"task-{task.id}",
                title=f"Task: {task.title}",
                type=EventType.TASK,
                start=task.due_date,
                end=task.due_date,
                source_id=task.id,
                user_id="system",
                project_id=index.board_project(task.board_id),
                task_id=task.id,
            )
        )

    for invoice in index.invoices.values():
        events.append(
            CalendarEvent(
                id=f"inv-{invoice.id}",
                title=f"Invoice #{invoice.number}",
                type=EventType.INVOICE,
                start=invoice.date,
                end=invoice.date,
                source_id=invoice.id,
                user_id=invoice.user_id,
            )
        )

    for estimate in index.estimates.values():
        events.append(
            CalendarEvent(
                id=f"est-{estimate.id}",
                title=f"Estimate #{estimate.number}",
                type=EventType.ESTIMATE,
                start=estimate.date,
                end=estimate.date,
                source_id=estimate.id,
                user_id=estimate.user_id,
            )
        )

    for item in index.roadmap_items.values():
        if item.project_id not in visible_projects:
            continue
        events.append(
            CalendarEvent(
                id=f"road-{item.id}",
                title=f"Roadmap: {item.title}",
                type=EventType.ROADMAP_ITEM,
                start=item.start_date,
                end=item.end_date,
                source_id=item.id,
                user_id="system",
                project_id=item.project_id,
            )
        )

    for comment in index.comments.values():
        if comment.due_date is None or comment.project_id not in visible_projects:
            continue
        events.append(
            CalendarEvent(
                id=f"comment-{comment.id}",
                title=comment.comment or "Feedback",
                type=EventType.COMMENT,
                start=comment.due_date,
                end=comment.due_date,
                source_id=comment.id,
                user_id=comment.author_id,
                project_id=comment.project_id,
                feedback_item_id=comment.feedback_item_id,
            )
        )

    logger.debug("Aggregated %d calendar events", len(events))
    return events


__all__ = [
    "Board",
    "Client",
    "EntityIndex",
    "Estimate",
    "FeedbackComment",
    "Invoice",
    "Project",
    "RoadmapItem",
    "Task",
    "aggregate_events",
]
