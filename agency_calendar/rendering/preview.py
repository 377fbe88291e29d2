"""Grayscale preview of a month layout, for eyeballing lane placement."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from PIL import Image, ImageDraw, ImageFont

from ..days import day_key
from ..events import LaidOutEvent
from ..layout.month import MonthLayout, WeekRow


def _font_length(font: ImageFont.ImageFont, text: str) -> float:
    try:
        return font.getlength(text)  # type: ignore[attr-defined]
    except AttributeError:  # pragma: no cover - fallback for older Pillow
        dummy_img = Image.new("L", (1, 1), color=255)
        draw = ImageDraw.Draw(dummy_img)
        return float(draw.textlength(text, font=font))


def _load_font(path_candidates: Sequence[Path], size: int) -> ImageFont.ImageFont:
    for candidate in path_candidates:
        if candidate and candidate.exists():
            return ImageFont.truetype(str(candidate), size=size)
    return ImageFont.load_default()


def _default_font_candidates(bold: bool) -> List[Path]:
    names = [
        "DejaVuSans-Bold.ttf" if bold else "DejaVuSans.ttf",
        "Arial Bold.ttf" if bold else "Arial.ttf",
    ]
    search_dirs = [
        Path("/usr/share/fonts/truetype/dejavu"),
        Path("/usr/share/fonts"),
        Path("/Library/Fonts"),
        Path.home() / ".fonts",
    ]
    return [directory / name for name in names for directory in search_dirs]


def _truncate(text: str, font: ImageFont.ImageFont, max_width: int) -> str:
    if _font_length(font, text) <= max_width:
        return text
    trimmed = text
    while trimmed and _font_length(font, trimmed + "...") > max_width:
        trimmed = trimmed[:-1]
    return trimmed + "..." if trimmed else ""


@dataclass
class PreviewConfig:
    """Canvas geometry, colours and fonts for the month preview."""

    column_width: int = 120
    header_height: int = 28
    day_label_height: int = 20
    bar_height: int = 16
    bar_gap: int = 3
    more_label_height: int = 16
    visible_tracks: int = 3
    background_color: int = 255
    grid_color: int = 189
    bar_color: int = 60
    bar_text_color: int = 255
    text_color: int = 17
    muted_text_color: int = 150
    label_font_size: int = 12
    bar_font_size: int = 11
    font_regular_path: Path | None = None
    font_bold_path: Path | None = None
    preview_output_dir: Path | None = None

    def __post_init__(self) -> None:
        if self.preview_output_dir is not None:
            self.preview_output_dir = Path(self.preview_output_dir)
            self.preview_output_dir.mkdir(parents=True, exist_ok=True)

    @property
    def row_height(self) -> int:
        lanes = self.visible_tracks * (self.bar_height + self.bar_gap)
        return self.day_label_height + lanes + self.more_label_height

    def canvas_size(self, rows: int) -> tuple[int, int]:
        return self.column_width * 7, self.header_height + rows * self.row_height

    def _font_candidates(self, bold: bool) -> List[Path]:
        provided = self.font_bold_path if bold else self.font_regular_path
        candidates: List[Path] = []
        if provided is not None:
            candidates.append(Path(provided))
        candidates.extend(_default_font_candidates(bold))
        return candidates

    def font(self, size: int, *, bold: bool = False) -> ImageFont.ImageFont:
        return _load_font(self._font_candidates(bold), size)


class MonthPreviewRenderer:
    """Draw a :class:`MonthLayout` onto a Pillow image."""

    def __init__(self, config: PreviewConfig | None = None) -> None:
        self.config = config or PreviewConfig()

    def render_month(self, layout: MonthLayout, *, preview_name: str | None = None) -> Image.Image:
        cfg = self.config
        canvas = Image.new("L", cfg.canvas_size(len(layout.rows)), color=cfg.background_color)
        draw = ImageDraw.Draw(canvas)

        self._draw_header(draw, layout)
        for row_index, row in enumerate(layout.rows):
            top = cfg.header_height + row_index * cfg.row_height
            self._draw_row(draw, layout, row, top)

        if cfg.preview_output_dir is not None and preview_name is not None:
            canvas.save(cfg.preview_output_dir / f"{preview_name}.png")
        return canvas

    # ------------------------------------------------------------------
    # Drawing helpers
    # ------------------------------------------------------------------

    def _draw_header(self, draw: ImageDraw.ImageDraw, layout: MonthLayout) -> None:
        cfg = self.config
        font = cfg.font(cfg.label_font_size, bold=True)
        if not layout.rows:
            return
        for col, day in enumerate(layout.rows[0].days):
            text = f"{day:%a}"
            x = col * cfg.column_width + (cfg.column_width - _font_length(font, text)) / 2
            draw.text((x, 6), text, font=font, fill=cfg.text_color)
        draw.line((0, cfg.header_height - 1, cfg.column_width * 7, cfg.header_height - 1), fill=cfg.grid_color)

    def _draw_row(self, draw: ImageDraw.ImageDraw, layout: MonthLayout, row: WeekRow, top: int) -> None:
        cfg = self.config
        label_font = cfg.font(cfg.label_font_size)
        bottom = top + cfg.row_height

        for col, cell in enumerate(row.cells):
            left = col * cfg.column_width
            draw.line((left, top, left, bottom), fill=cfg.grid_color)
            in_month = cell.day.month == layout.month_date.month
            fill = cfg.text_color if in_month else cfg.muted_text_color
            draw.text((left + 4, top + 3), str(cell.day.day), font=label_font, fill=fill)
            if cell.overflow:
                more_top = bottom - cfg.more_label_height
                draw.text((left + 4, more_top + 1), f"+ {cell.overflow} more", font=label_font, fill=cfg.muted_text_color)
        draw.line((0, bottom - 1, cfg.column_width * 7, bottom - 1), fill=cfg.grid_color)

        for item in row.laid_out_events:
            if item.track < cfg.visible_tracks:
                self._draw_bar(draw, item, top)

    def _draw_bar(self, draw: ImageDraw.ImageDraw, item: LaidOutEvent, row_top: int) -> None:
        cfg = self.config
        font = cfg.font(cfg.bar_font_size)
        left = item.start_col * cfg.column_width + 2
        right = item.end_col * cfg.column_width - 3
        y1 = row_top + cfg.day_label_height + item.track * (cfg.bar_height + cfg.bar_gap)
        y2 = y1 + cfg.bar_height
        draw.rectangle((left, y1, right, y2), fill=cfg.bar_color)
        label = _truncate(item.event.title or item.event.type.value, font, right - left - 6)
        if label:
            draw.text((left + 3, y1 + 2), label, font=font, fill=cfg.bar_text_color)


def preview_file_name(layout: MonthLayout) -> str:
    return f"month_{day_key(layout.month_date)[:7]}"


__all__ = ["MonthPreviewRenderer", "PreviewConfig", "preview_file_name"]
