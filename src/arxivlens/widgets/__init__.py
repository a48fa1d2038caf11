"""Widgets and markup renderers used by the ArxivLens app."""

from arxivlens.widgets.details import DETAIL_CACHE_MAX, PaperDetails, render_paper_details
from arxivlens.widgets.listing import (
    PREVIEW_ABSTRACT_MAX_LEN,
    format_categories,
    highlight_markup,
    render_paper_option,
)

__all__ = [
    "DETAIL_CACHE_MAX",
    "PREVIEW_ABSTRACT_MAX_LEN",
    "PaperDetails",
    "format_categories",
    "highlight_markup",
    "render_paper_details",
    "render_paper_option",
]
