"""arxivlens: browse recent arXiv abstracts with pinned authors and keywords highlighted."""

from arxivlens.errors import (
    ArxivLensError,
    FeedParseError,
    InvalidCategoryError,
    InvalidTermError,
    MalformedFeedError,
    NoDataError,
)
from arxivlens.highlight import (
    CompiledMatcher,
    FieldMatchers,
    HighlightSpan,
    SearchTerm,
    SearchTermSet,
    TermCategory,
    TextSegment,
    highlight,
    segments_to_markup,
)
from arxivlens.models import DroppedEntry, Feed, Paper, QueryDescriptor, SortBy, SortOrder
from arxivlens.paper_list import PaperFilter, PaperListModel
from arxivlens.parsing import normalize_arxiv_id, parse_feed
from arxivlens.query import build_query, format_query_label

__version__ = "0.1.0"

__all__ = [
    "ArxivLensError",
    "CompiledMatcher",
    "DroppedEntry",
    "Feed",
    "FeedParseError",
    "FieldMatchers",
    "HighlightSpan",
    "InvalidCategoryError",
    "InvalidTermError",
    "MalformedFeedError",
    "NoDataError",
    "Paper",
    "PaperFilter",
    "PaperListModel",
    "QueryDescriptor",
    "SearchTerm",
    "SearchTermSet",
    "SortBy",
    "SortOrder",
    "TermCategory",
    "TextSegment",
    "__version__",
    "build_query",
    "format_query_label",
    "highlight",
    "normalize_arxiv_id",
    "parse_feed",
    "segments_to_markup",
]
