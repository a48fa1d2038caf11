"""Detail pane widget for the selected paper."""

from __future__ import annotations

from rich.markup import escape as escape_markup
from textual.widgets import Static

from arxivlens.highlight import FieldMatchers
from arxivlens.models import Paper
from arxivlens.themes import THEME_COLORS, highlight_colors
from arxivlens.widgets.listing import format_categories, highlight_markup

# Maximum number of cached detail pane renderings (FIFO eviction)
DETAIL_CACHE_MAX = 100

EMPTY_DETAILS_MARKUP = "[dim italic]Select a paper to view details[/]"


def _label(text: str) -> str:
    return f"[bold {THEME_COLORS['accent']}]{text}:[/]"


def _render_metadata(paper: Paper) -> str:
    lines = [f"  {_label('arXiv')} [{THEME_COLORS['purple']}]{escape_markup(paper.arxiv_id or paper.id)}[/]"]
    if paper.version is not None:
        lines[0] += f" [dim]v{paper.version}[/]"
    if paper.published is not None:
        lines.append(f"  {_label('Published')} {paper.published:%Y-%m-%d %H:%M}")
    if paper.updated is not None and paper.updated != paper.published:
        lines.append(f"  {_label('Updated')} {paper.updated:%Y-%m-%d %H:%M}")
    if paper.categories:
        lines.append(f"  {_label('Categories')} {format_categories(paper.categories)}")
    if paper.comment:
        lines.append(f"  {_label('Comments')} [dim]{escape_markup(paper.comment)}[/]")
    if paper.journal_ref:
        lines.append(f"  {_label('Journal')} {escape_markup(paper.journal_ref)}")
    if paper.doi:
        lines.append(f"  {_label('DOI')} {escape_markup(paper.doi)}")
    return "\n".join(lines)


def render_paper_details(paper: Paper | None, matchers: FieldMatchers | None = None) -> str:
    """Build the full detail pane markup for one paper.

    Authors are highlighted with pinned authors; title and abstract with
    keywords.
    """
    if paper is None:
        return EMPTY_DETAILS_MARKUP

    colors = highlight_colors()
    keywords = matchers.keywords if matchers is not None else None
    authors = matchers.authors if matchers is not None else None

    title = highlight_markup(paper.title, keywords, colors)
    sections = [
        f"[bold {THEME_COLORS['text']}]{title}[/]",
        _render_metadata(paper),
        f"[bold {THEME_COLORS['green']}]Authors[/]",
        f"  {highlight_markup(paper.all_authors, authors, colors) or '[dim italic]Unknown[/]'}",
        f"[bold {THEME_COLORS['orange']}]Abstract[/]",
    ]
    if paper.summary:
        sections.append(f"  [{THEME_COLORS['text']}]{highlight_markup(paper.summary, keywords, colors)}[/]")
    else:
        sections.append("  [dim italic]No abstract available[/]")

    links = [url for url in (paper.link, paper.pdf_url) if url]
    if links:
        sections.append(f"[bold {THEME_COLORS['pink']}]URL[/]")
        sections.extend(f"  [{THEME_COLORS['accent']}]{escape_markup(url)}[/]" for url in links)
    return "\n".join(sections)


class PaperDetails(Static):
    """Widget to display full paper details."""

    def __init__(self, id: str | None = None) -> None:
        super().__init__(EMPTY_DETAILS_MARKUP, id=id)
        self._paper: Paper | None = None
        self._detail_cache: dict[tuple, str] = {}
        self._detail_cache_order: list[tuple] = []

    def update_paper(self, paper: Paper | None, matchers: FieldMatchers | None = None) -> None:
        """Show paper, reusing cached markup when nothing relevant changed."""
        self._paper = paper
        if paper is None:
            self.update(EMPTY_DETAILS_MARKUP)
            return

        cache_key = (paper, matchers, tuple(sorted(THEME_COLORS.items())))
        markup = self._detail_cache.get(cache_key)
        if markup is None:
            markup = render_paper_details(paper, matchers)
            if len(self._detail_cache) >= DETAIL_CACHE_MAX:
                oldest = self._detail_cache_order.pop(0)
                self._detail_cache.pop(oldest, None)
            self._detail_cache[cache_key] = markup
            self._detail_cache_order.append(cache_key)
        self.update(markup)

    def clear_cache(self) -> None:
        self._detail_cache.clear()
        self._detail_cache_order.clear()

    @property
    def paper(self) -> Paper | None:
        return self._paper


__all__ = [
    "DETAIL_CACHE_MAX",
    "EMPTY_DETAILS_MARKUP",
    "PaperDetails",
    "render_paper_details",
]
