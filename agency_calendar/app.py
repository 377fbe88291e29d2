"""Command line entry point: lay out an events document for one calendar view."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict, dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional, TextIO

from .config import ConfigError, LayoutConfig, load_env_file, load_layout_config
from .days import to_local
from .events import CalendarEvent, EventDataError, EventType, parse_events
from .layout.month import MonthLayout
from .rendering import MonthPreviewRenderer, PreviewConfig, preview_file_name
from .sources import EntityIndex, aggregate_events
from .views import CalendarLayout, ViewMode, build_layout

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Calendar event layout engine")
    parser.add_argument(
        "events",
        type=Path,
        help="JSON file holding a list of events or a document with 'events' and entity collections.",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Optional path to a .env file loaded before the CALENDAR_* settings are read.",
    )
    parser.add_argument(
        "--view",
        choices=[mode.value for mode in ViewMode],
        default=ViewMode.MONTH.value,
        help="Calendar view to lay out.",
    )
    parser.add_argument(
        "--date",
        type=str,
        default=None,
        help="Reference date (ISO-8601). Defaults to today.",
    )
    parser.add_argument(
        "--now",
        type=str,
        default=None,
        help="Timestamp used for the current-time line (ISO-8601). Defaults to the current time.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the layout JSON here instead of standard output.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")

    filter_group = parser.add_argument_group("Filter options")
    filter_group.add_argument(
        "--types",
        type=str,
        default=None,
        help="Comma-separated event types to show (default: all).",
    )
    filter_group.add_argument(
        "--scope",
        type=str,
        default=None,
        help="Only show events owned by this brand id.",
    )
    filter_group.add_argument(
        "--user",
        type=str,
        default=None,
        help="User id whose project visibility applies when aggregating source entities.",
    )

    preview_group = parser.add_argument_group("Preview options")
    preview_group.add_argument(
        "--preview-dir",
        type=Path,
        default=None,
        help="Directory where a PNG preview of a month layout is written.",
    )

    return parser


@dataclass
class AppSettings:
    events_path: Path
    view: ViewMode
    reference_date: datetime
    now: datetime
    enabled_types: Optional[frozenset[EventType]]
    scope_id: str | None
    user_id: str | None
    output: Path | None
    preview_dir: Path | None
    layout: LayoutConfig


def parse_types(raw: str | None) -> Optional[frozenset[EventType]]:
    if raw is None:
        return None
    names = [part.strip() for part in raw.split(",") if part.strip()]
    try:
        return frozenset(EventType(name) for name in names)
    except ValueError as exc:
        raise ConfigError(f"Unknown event type in --types: {raw!r}") from exc


def resolve_settings(
    args: argparse.Namespace,
    *,
    now_provider: Callable[[], datetime] = datetime.now,
) -> AppSettings:
    load_env_file(args.env_file)
    layout = load_layout_config()
    tz = layout.tzinfo

    now = _parse_timestamp(args.now, "--now", tz) if args.now else to_local(now_provider(), tz)
    reference = _parse_timestamp(args.date, "--date", tz) if args.date else now

    return AppSettings(
        events_path=args.events,
        view=ViewMode(args.view),
        reference_date=reference,  # type: ignore[arg-type]
        now=now,  # type: ignore[arg-type]
        enabled_types=parse_types(args.types),
        scope_id=args.scope,
        user_id=args.user,
        output=args.output,
        preview_dir=args.preview_dir,
        layout=layout,
    )


def _parse_timestamp(raw: str, option: str, tz) -> datetime:
    value = to_local(raw, tz)
    if value is None:
        raise ConfigError(f"{option} must be an ISO-8601 date or timestamp, got {raw!r}")
    return value


def load_document(path: Path, *, settings: AppSettings) -> tuple[List[CalendarEvent], EntityIndex]:
    """Read events (and optional source entities) from a JSON file."""

    document = json.loads(path.read_text(encoding="utf-8"))
    tz = settings.layout.tzinfo
    if isinstance(document, list):
        return parse_events(document, tz=tz), EntityIndex()
    if not isinstance(document, dict):
        raise EventDataError(f"{path.name}: expected a JSON list or object, got {type(document).__name__}")

    raw_events = document.get("events", [])
    if not isinstance(raw_events, list):
        raise EventDataError(f"{path.name}: 'events' must be a list")
    index = EntityIndex.from_document(document, tz=tz)
    events = aggregate_events(index, manual_events=raw_events, user_id=settings.user_id, tz=tz)
    return events, index


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, frozenset):
        return sorted(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def layout_to_json(view: ViewMode, layout: CalendarLayout) -> str:
    if isinstance(layout, tuple):
        payload: Any = {"view": view.value, "months": [asdict(month) for month in layout]}
    else:
        payload = {"view": view.value, **asdict(layout)}
    return json.dumps(payload, default=_json_default, indent=2)


def run(settings: AppSettings, *, stdout: TextIO | None = None) -> CalendarLayout:
    events, index = load_document(settings.events_path, settings=settings)
    LOGGER.info("Loaded %d events from %s", len(events), settings.events_path)

    layout = build_layout(
        events,
        settings.view,
        settings.reference_date,
        settings.now,
        enabled_types=settings.enabled_types,
        scope_id=settings.scope_id,
        index=index,
        config=settings.layout,
    )

    text = layout_to_json(settings.view, layout)
    if settings.output is not None:
        settings.output.parent.mkdir(parents=True, exist_ok=True)
        settings.output.write_text(text + "\n", encoding="utf-8")
        LOGGER.info("Wrote %s layout to %s", settings.view.value, settings.output)
    else:
        (stdout or sys.stdout).write(text + "\n")

    if settings.preview_dir is not None:
        if isinstance(layout, MonthLayout):
            renderer = MonthPreviewRenderer(
                PreviewConfig(
                    preview_output_dir=settings.preview_dir,
                    visible_tracks=settings.layout.max_visible_tracks,
                )
            )
            renderer.render_month(layout, preview_name=preview_file_name(layout))
        else:
            LOGGER.warning("Previews are only rendered for the month view; skipping")

    return layout


def main(
    argv: Optional[Iterable[str]] = None,
    *,
    now_provider: Callable[[], datetime] = datetime.now,
    stdout: TextIO | None = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        settings = resolve_settings(args, now_provider=now_provider)
        run(settings, stdout=stdout)
    except (ConfigError, EventDataError, json.JSONDecodeError, OSError) as exc:
        LOGGER.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
