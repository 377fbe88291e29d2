#!/usr/bin/env python3
"""Generate a sample month-layout preview PNG from synthetic events."""

from __future__ import annotations

import argparse
from datetime import datetime, timedelta
from pathlib import Path
import sys

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from agency_calendar import CalendarEvent, EventType, ViewMode, build_layout
from agency_calendar.rendering import MonthPreviewRenderer, PreviewConfig, preview_file_name


PREVIEWS_DIR = Path(__file__).resolve().parents[1] / "previews"


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=PREVIEWS_DIR,
        help="Directory for the preview PNG (defaults to previews/).",
    )
    parser.add_argument(
        "--month",
        type=str,
        default="2025-11",
        help="Month to render as YYYY-MM.",
    )
    return parser.parse_args()


def sample_events(month_start: datetime) -> list[CalendarEvent]:
    def event(event_id: str, kind: EventType, title: str, start_day: int, days: int = 1) -> CalendarEvent:
        start = month_start + timedelta(days=start_day - 1)
        return CalendarEvent(
            id=event_id,
            title=title,
            type=kind,
            start=start,
            end=start + timedelta(days=days - 1),
        )

    events = [
        event("road-1", EventType.ROADMAP_ITEM, "Roadmap: Website relaunch", 3, 12),
        event("task-1", EventType.TASK, "Task: Homepage copy", 4),
        event("task-2", EventType.TASK, "Task: Hero video edit", 4, 3),
        event("inv-1", EventType.INVOICE, "Invoice #1042", 14),
        event("est-1", EventType.ESTIMATE, "Estimate #77", 14),
        event("cal-1", EventType.MANUAL, "Brand workshop", 20, 2),
        event("comment-1", EventType.COMMENT, "Tighten logo spacing", 21),
    ]
    # A crowded day to exercise the "+N more" label.
    events.extend(event(f"task-busy-{n}", EventType.TASK, f"Task: Review {n}", 26) for n in range(5))
    return events


def main() -> None:
    args = parse_args()
    month_start = datetime.strptime(args.month, "%Y-%m")
    layout = build_layout(sample_events(month_start), ViewMode.MONTH, month_start, month_start)

    renderer = MonthPreviewRenderer(PreviewConfig(preview_output_dir=args.output_dir))
    name = preview_file_name(layout)  # type: ignore[arg-type]
    renderer.render_month(layout, preview_name=name)  # type: ignore[arg-type]

    print(f"Wrote preview to {args.output_dir / (name + '.png')}")


if __name__ == "__main__":
    main()
