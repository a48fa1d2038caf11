"""Service layer: network access kept out of the UI and the parsing core."""

from arxivlens.services.arxiv_api_service import (
    enforce_rate_limit,
    fetch_feed,
    fetch_feed_bytes,
    fetch_page,
)

__all__ = [
    "enforce_rate_limit",
    "fetch_feed",
    "fetch_feed_bytes",
    "fetch_page",
]
