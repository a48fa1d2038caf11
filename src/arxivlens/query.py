"""Translate user filters into arXiv API request descriptors.

Everything in this module is pure: identical inputs always produce identical
descriptors and nothing touches the network.
"""

from __future__ import annotations

import re

from arxivlens.errors import InvalidCategoryError
from arxivlens.models import (
    ARXIV_API_DEFAULT_MAX_RESULTS,
    ARXIV_API_MAX_RESULTS_LIMIT,
    ARXIV_API_URL,
    QueryDescriptor,
    SortBy,
    SortOrder,
)

# Category codes look like "quant-ph", "cs.AI", "math.AG" or "physics.atom-ph"
_CATEGORY_PATTERN = re.compile(r"[A-Za-z0-9.\-]+")

# arXiv field prefixes used in search_query, in the order they are emitted
ARXIV_QUERY_FIELDS = {
    "category": "cat",
    "author": "au",
    "all": "all",
}


def validate_category(category: str) -> str:
    """Return the trimmed category code or raise InvalidCategoryError."""
    cleaned = category.strip() if isinstance(category, str) else ""
    if not cleaned or not _CATEGORY_PATTERN.fullmatch(cleaned):
        raise InvalidCategoryError(category)
    return cleaned


def clamp_page_size(page_size: int) -> int:
    """Clamp a requested page size to the API's accepted range."""
    return max(1, min(page_size, ARXIV_API_MAX_RESULTS_LIMIT))


def _clean_value(value: str | None) -> str | None:
    """Collapse whitespace and drop double quotes; blank values become None."""
    if value is None:
        return None
    cleaned = " ".join(value.replace('"', " ").split())
    return cleaned or None


def _field_clause(prefix: str, value: str) -> str:
    if " " in value:
        return f'{prefix}:"{value}"'
    return f"{prefix}:{value}"


def build_search_query(category: str, author: str | None = None, free_text: str | None = None) -> str:
    """Build the ``search_query`` expression for already-cleaned values."""
    parts = [_field_clause(ARXIV_QUERY_FIELDS["category"], category)]
    if author:
        parts.append(_field_clause(ARXIV_QUERY_FIELDS["author"], author))
    if free_text:
        parts.append(_field_clause(ARXIV_QUERY_FIELDS["all"], free_text))
    return " AND ".join(parts)


def build_query(
    category: str,
    author: str | None = None,
    free_text: str | None = None,
    page_offset: int = 0,
    page_size: int = ARXIV_API_DEFAULT_MAX_RESULTS,
    *,
    sort_by: SortBy = SortBy.SUBMITTED_DATE,
    sort_order: SortOrder = SortOrder.DESCENDING,
    base_url: str = ARXIV_API_URL,
) -> QueryDescriptor:
    """Build the request descriptor for one page of a category listing.

    Args:
        category: arXiv category code such as "quant-ph" (required).
        author: Optional author name to restrict results to.
        free_text: Optional text matched against all fields.
        page_offset: Index of the first result; negative values clamp to 0.
        page_size: Results per page; clamped to 1..ARXIV_API_MAX_RESULTS_LIMIT.

    Raises:
        InvalidCategoryError: If category is empty or not a valid code.
    """
    category_clean = validate_category(category)
    author_clean = _clean_value(author)
    free_text_clean = _clean_value(free_text)
    return QueryDescriptor(
        base_url=base_url,
        category=category_clean,
        author=author_clean,
        free_text=free_text_clean,
        start=max(0, page_offset),
        max_results=clamp_page_size(page_size),
        sort_by=sort_by,
        sort_order=sort_order,
        search_query=build_search_query(category_clean, author_clean, free_text_clean),
    )


def format_query_label(descriptor: QueryDescriptor) -> str:
    """Build a human-readable label for headers and status lines."""
    end = descriptor.start + descriptor.max_results
    return f"{descriptor.search_query} [{descriptor.start + 1}-{end}]"


__all__ = [
    "ARXIV_QUERY_FIELDS",
    "build_query",
    "build_search_query",
    "clamp_page_size",
    "format_query_label",
    "validate_category",
]
