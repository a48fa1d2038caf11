"""Exception types raised by the query, parsing, and highlighting layers."""

from __future__ import annotations


class ArxivLensError(Exception):
    """Base class for all arxivlens errors."""


class InvalidCategoryError(ArxivLensError, ValueError):
    """Raised when a category code is empty or contains illegal characters."""

    def __init__(self, category: str) -> None:
        super().__init__(f"Invalid arXiv category: {category!r}")
        self.category = category


class InvalidTermError(ArxivLensError, ValueError):
    """Raised when a highlight term is empty after trimming."""

    def __init__(self, term: str) -> None:
        super().__init__(f"Highlight terms must contain at least one character, got {term!r}")
        self.term = term


class FeedParseError(ArxivLensError):
    """Raised when a response cannot be turned into a Feed at all."""


class MalformedFeedError(FeedParseError):
    """The response is not a well-formed Atom feed document."""


class NoDataError(FeedParseError):
    """The transport produced no bytes to parse."""


__all__ = [
    "ArxivLensError",
    "FeedParseError",
    "InvalidCategoryError",
    "InvalidTermError",
    "MalformedFeedError",
    "NoDataError",
]
