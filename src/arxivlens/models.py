"""Data models and constants for arxivlens."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from urllib.parse import quote, urlencode

# Application identity, used for platformdirs config paths
CONFIG_APP_NAME = "arxivlens"

# arXiv API constants
ARXIV_API_URL = "https://export.arxiv.org/api/query"
ARXIV_API_DEFAULT_MAX_RESULTS = 50
ARXIV_API_MAX_RESULTS_LIMIT = 200

DEFAULT_CATEGORY = "quant-ph"


class SortBy(str, Enum):
    """Sort criteria understood by the arXiv API."""

    RELEVANCE = "relevance"
    LAST_UPDATED_DATE = "lastUpdatedDate"
    SUBMITTED_DATE = "submittedDate"


class SortOrder(str, Enum):
    """Sort direction understood by the arXiv API."""

    ASCENDING = "ascending"
    DESCENDING = "descending"


@dataclass(frozen=True, slots=True)
class Paper:
    """One arXiv entry parsed from an Atom feed."""

    id: str
    title: str
    authors: tuple[str, ...] = ()
    summary: str = ""
    published: datetime | None = None
    updated: datetime | None = None
    categories: tuple[str, ...] = ()
    link: str | None = None
    pdf_url: str | None = None
    primary_category: str | None = None
    comment: str | None = None
    journal_ref: str | None = None
    doi: str | None = None
    arxiv_id: str = ""  # bare ID without version, e.g. "2401.12345"
    version: int | None = None

    @property
    def all_authors(self) -> str:
        """Authors joined for display and author matching."""
        return ", ".join(self.authors)

    @property
    def is_new_submission(self) -> bool:
        """True for first versions (published and updated timestamps agree)."""
        return self.published is not None and self.published == self.updated


@dataclass(frozen=True, slots=True)
class DroppedEntry:
    """An entry that was skipped while parsing a feed."""

    position: int  # zero-based index among the feed's <entry> elements
    reason: str
    entry_id: str | None = None


@dataclass(frozen=True, slots=True)
class Feed:
    """The parsed response to one catalog query."""

    papers: tuple[Paper, ...] = ()
    total_results: int | None = None
    start_index: int | None = None
    items_per_page: int | None = None
    query: str | None = None
    updated: datetime | None = None
    dropped: tuple[DroppedEntry, ...] = ()

    @classmethod
    def empty(cls) -> Feed:
        return cls()

    @property
    def dropped_count(self) -> int:
        return len(self.dropped)

    def __len__(self) -> int:
        return len(self.papers)

    def new_submissions(self) -> Feed:
        """Return a copy holding only first-version submissions."""
        return replace(self, papers=tuple(p for p in self.papers if p.is_new_submission))


@dataclass(frozen=True, slots=True)
class QueryDescriptor:
    """Fully resolved description of one arXiv API request."""

    base_url: str
    category: str
    author: str | None = None
    free_text: str | None = None
    start: int = 0
    max_results: int = ARXIV_API_DEFAULT_MAX_RESULTS
    sort_by: SortBy = SortBy.SUBMITTED_DATE
    sort_order: SortOrder = SortOrder.DESCENDING
    search_query: str = ""

    @property
    def params(self) -> dict[str, str]:
        """Query parameters in the order they appear in the URL."""
        return {
            "search_query": self.search_query,
            "sortBy": self.sort_by.value,
            "sortOrder": self.sort_order.value,
            "start": str(self.start),
            "max_results": str(self.max_results),
        }

    @property
    def url(self) -> str:
        """Percent-encoded request URL (UTF-8, so Unicode survives the trip)."""
        return f"{self.base_url}?{urlencode(self.params, quote_via=quote)}"

    def next_page(self) -> QueryDescriptor:
        return replace(self, start=self.start + self.max_results)

    def previous_page(self) -> QueryDescriptor:
        return replace(self, start=max(0, self.start - self.max_results))


__all__ = [
    "ARXIV_API_DEFAULT_MAX_RESULTS",
    "ARXIV_API_MAX_RESULTS_LIMIT",
    "ARXIV_API_URL",
    "CONFIG_APP_NAME",
    "DEFAULT_CATEGORY",
    "DroppedEntry",
    "Feed",
    "Paper",
    "QueryDescriptor",
    "SortBy",
    "SortOrder",
]
