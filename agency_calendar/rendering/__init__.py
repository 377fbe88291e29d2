"""Developer previews of computed layouts."""

from .preview import MonthPreviewRenderer, PreviewConfig, preview_file_name

__all__ = [
    "MonthPreviewRenderer",
    "PreviewConfig",
    "preview_file_name",
]
