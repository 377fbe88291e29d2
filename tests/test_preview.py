from __future__ import annotations

from datetime import datetime
from pathlib import Path

from PIL import Image

from agency_calendar.events import CalendarEvent, EventType
from agency_calendar.layout.month import layout_month
from agency_calendar.rendering import MonthPreviewRenderer, PreviewConfig, preview_file_name


def sample_layout():
    events = [
        CalendarEvent(
            id=f"task-{n}",
            title=f"A rather long task title number {n}",
            type=EventType.TASK,
            start=datetime(2025, 11, 14),
            end=datetime(2025, 11, 14 + n),
        )
        for n in range(5)
    ]
    return layout_month(events, datetime(2025, 11, 14))


def test_render_month_matches_canvas_size() -> None:
    cfg = PreviewConfig()
    image = MonthPreviewRenderer(cfg).render_month(sample_layout())

    assert image.mode == "L"
    assert image.size == cfg.canvas_size(6)
    assert image.size == (840, 28 + 6 * cfg.row_height)


def test_bars_are_drawn_on_the_canvas() -> None:
    cfg = PreviewConfig()
    image = MonthPreviewRenderer(cfg).render_month(sample_layout())

    assert image.getextrema()[0] <= cfg.bar_color


def test_preview_is_saved_to_output_dir(tmp_path: Path) -> None:
    output_dir = tmp_path / "previews"
    cfg = PreviewConfig(preview_output_dir=output_dir)
    layout = sample_layout()

    MonthPreviewRenderer(cfg).render_month(layout, preview_name=preview_file_name(layout))

    saved = output_dir / "month_2025-11.png"
    assert saved.exists()
    with Image.open(saved) as image:
        assert image.size == cfg.canvas_size(6)


def test_nothing_is_saved_without_a_name(tmp_path: Path) -> None:
    cfg = PreviewConfig(preview_output_dir=tmp_path)

    MonthPreviewRenderer(cfg).render_month(sample_layout())

    assert list(tmp_path.iterdir()) == []
