"""List rendering helpers for paper entries."""

from __future__ import annotations

from collections.abc import Mapping

from rich.markup import escape as escape_markup

from arxivlens.highlight import CompiledMatcher, FieldMatchers, TermCategory, highlight, segments_to_markup
from arxivlens.models import Paper
from arxivlens.themes import THEME_COLORS, get_category_color, highlight_colors

PREVIEW_ABSTRACT_MAX_LEN = 150  # Max abstract preview length in list items


def highlight_markup(
    text: str,
    matcher: CompiledMatcher | None,
    colors: Mapping[TermCategory, str] | None = None,
) -> str:
    """Escape text and wrap every match of matcher in highlight markup."""
    if matcher is None or not matcher:
        return escape_markup(text)
    return segments_to_markup(highlight(text, matcher), colors or highlight_colors())


def format_categories(categories: tuple[str, ...]) -> str:
    """Render category codes, each in its archive color."""
    return " ".join(f"[{get_category_color(cat)}]{escape_markup(cat)}[/]" for cat in categories)


def truncate_abstract(text: str, limit: int = PREVIEW_ABSTRACT_MAX_LEN) -> str:
    """Shorten text at a word boundary, appending an ellipsis when cut."""
    if len(text) <= limit:
        return text
    return text[:limit].rsplit(" ", 1)[0] + "..."


def _render_meta_line(paper: Paper) -> str:
    parts: list[str] = []
    if paper.is_new_submission:
        parts.append(f"[{THEME_COLORS['green']}]NEW[/]")
    parts.append(f"[dim]{escape_markup(paper.arxiv_id or paper.id)}[/]")
    if paper.published is not None:
        parts.append(f"[dim]{paper.published:%Y-%m-%d}[/]")
    if paper.categories:
        parts.append(format_categories(paper.categories))
    return "  ".join(parts)


def render_paper_option(
    paper: Paper,
    matchers: FieldMatchers | None = None,
    *,
    show_preview: bool = False,
) -> str:
    """Render a paper as Rich markup for OptionList display.

    The title (and abstract preview) are highlighted with keyword terms, the
    author line with pinned authors.
    """
    keywords = matchers.keywords if matchers is not None else None
    authors = matchers.authors if matchers is not None else None
    colors = highlight_colors()

    title = highlight_markup(paper.title, keywords, colors)
    lines = [
        f"[bold]{title}[/]",
        highlight_markup(paper.all_authors, authors, colors) or "[dim italic]Unknown authors[/]",
        _render_meta_line(paper),
    ]
    if show_preview:
        if paper.summary:
            preview = highlight_markup(truncate_abstract(paper.summary), keywords, colors)
            lines.append(f"[dim italic]{preview}[/]")
        else:
            lines.append("[dim italic]No abstract available[/]")
    return "\n".join(lines)


__all__ = [
    "PREVIEW_ABSTRACT_MAX_LEN",
    "format_categories",
    "highlight_markup",
    "render_paper_option",
    "truncate_abstract",
]
