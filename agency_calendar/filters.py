"""Type toggles and scope (owning brand) filtering."""

from __future__ import annotations

import logging
from typing import Callable, Collection, Dict, Iterable, List, Optional

from .events import CalendarEvent, EventType
from .sources import EntityIndex

logger = logging.getLogger(__name__)

OwnerResolver = Callable[[CalendarEvent, EntityIndex], Optional[str]]


def filter_by_type(events: Iterable[CalendarEvent], enabled_types: Collection[EventType]) -> List[CalendarEvent]:
    enabled = {EventType(value) for value in enabled_types}
    return [event for event in events if event.type in enabled]


def _task_owner(task_id: Optional[str], index: EntityIndex) -> Optional[str]:
    task = index.tasks.get(task_id) if task_id else None
    if task is None:
        return None
    return index.project_brand(index.board_project(task.board_id))


def _resolve_task(event: CalendarEvent, index: EntityIndex) -> Optional[str]:
    return _task_owner(event.source_id or event.task_id, index)


def _resolve_roadmap_item(event: CalendarEvent, index: EntityIndex) -> Optional[str]:
    item = index.roadmap_items.get(event.source_id) if event.source_id else None
    return index.project_brand(item.project_id) if item else None


def _resolve_invoice(event: CalendarEvent, index: EntityIndex) -> Optional[str]:
    invoice = index.invoices.get(event.source_id) if event.source_id else None
    return index.client_brand(invoice.client_id) if invoice else None


def _resolve_estimate(event: CalendarEvent, index: EntityIndex) -> Optional[str]:
    estimate = index.estimates.get(event.source_id) if event.source_id else None
    return index.client_brand(estimate.client_id) if estimate else None


def _resolve_comment(event: CalendarEvent, index: EntityIndex) -> Optional[str]:
    comment = index.comments.get(event.source_id) if event.source_id else None
    return index.project_brand(comment.project_id) if comment else None


def _resolve_manual(event: CalendarEvent, index: EntityIndex) -> Optional[str]:
    return _task_owner(event.task_id, index)


_RESOLVERS: Dict[EventType, OwnerResolver] = {
    EventType.TASK: _resolve_task,
    EventType.ROADMAP_ITEM: _resolve_roadmap_item,
    EventType.INVOICE: _resolve_invoice,
    EventType.ESTIMATE: _resolve_estimate,
    EventType.COMMENT: _resolve_comment,
    EventType.MANUAL: _resolve_manual,
}


def resolve_owner(event: CalendarEvent, index: EntityIndex) -> Optional[str]:
    """Return the brand that owns ``event``, or ``None`` when it cannot be determined."""

    if event.brand_id:
        return event.brand_id
    owner = _RESOLVERS[event.type](event, index)
    if owner is None and event.project_id:
        owner = index.project_brand(event.project_id)
    return owner


def filter_by_scope(
    events: Iterable[CalendarEvent],
    scope_id: Optional[str],
    index: Optional[EntityIndex] = None,
) -> List[CalendarEvent]:
    """Keep events owned by ``scope_id``.

    Events whose owner cannot be resolved are kept.
    """

    if not scope_id:
        return list(events)

    lookup = index or EntityIndex()
    kept: List[CalendarEvent] = []
    unresolved = 0
    for event in events:
        owner = resolve_owner(event, lookup)
        if owner is None:
            unresolved += 1
            kept.append(event)
        elif owner == scope_id:
            kept.append(event)
    if unresolved:
        logger.debug("Kept %d events with no resolvable owner for scope %s", unresolved, scope_id)
    return kept


def apply_filters(
    events: Iterable[CalendarEvent],
    *,
    enabled_types: Optional[Collection[EventType]] = None,
    scope_id: Optional[str] = None,
    index: Optional[EntityIndex] = None,
) -> List[CalendarEvent]:
    selected = list(events) if enabled_types is None else filter_by_type(events, enabled_types)
    return filter_by_scope(selected, scope_id, index)


__all__ = ["apply_filters", "filter_by_scope", "filter_by_type", "resolve_owner"]
