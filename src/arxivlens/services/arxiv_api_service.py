"""arXiv API transport: issue the GET for a QueryDescriptor and parse the reply.

Nothing here retries. HTTP failures surface as ``httpx`` exceptions and
unusable bodies as :class:`~arxivlens.errors.FeedParseError` subclasses.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

import httpx

from arxivlens.models import Feed, QueryDescriptor
from arxivlens.parsing import parse_feed

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30
DEFAULT_USER_AGENT = "arxivlens/0.1 (+https://github.com/arxivlens/arxivlens)"

# arXiv asks API clients to wait three seconds between consecutive calls
ARXIV_API_MIN_INTERVAL_SECONDS = 3.0


def _headers(user_agent: str) -> dict[str, str]:
    return {"User-Agent": user_agent}


def fetch_feed_bytes(
    descriptor: QueryDescriptor,
    *,
    client: httpx.Client | None = None,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    user_agent: str = DEFAULT_USER_AGENT,
) -> bytes:
    """Fetch the raw Atom response for one descriptor (blocking).

    Raises:
        httpx.HTTPStatusError: On a non-2xx response.
        httpx.HTTPError: On connection failures and timeouts.
    """
    logger.debug("GET %s", descriptor.url)
    if client is not None:
        response = client.get(descriptor.url, headers=_headers(user_agent), timeout=timeout_seconds)
    else:
        with httpx.Client() as tmp_client:
            response = tmp_client.get(descriptor.url, headers=_headers(user_agent), timeout=timeout_seconds)
    response.raise_for_status()
    return response.content


def fetch_feed(
    descriptor: QueryDescriptor,
    *,
    client: httpx.Client | None = None,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    user_agent: str = DEFAULT_USER_AGENT,
) -> Feed:
    """Fetch and parse one page of results (blocking)."""
    raw = fetch_feed_bytes(
        descriptor,
        client=client,
        timeout_seconds=timeout_seconds,
        user_agent=user_agent,
    )
    return parse_feed(raw)


async def fetch_page(
    descriptor: QueryDescriptor,
    *,
    client: httpx.AsyncClient | None = None,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    user_agent: str = DEFAULT_USER_AGENT,
) -> Feed:
    """Async counterpart of :func:`fetch_feed`, used by the TUI worker."""
    logger.debug("GET %s", descriptor.url)
    if client is not None:
        response = await client.get(descriptor.url, headers=_headers(user_agent), timeout=timeout_seconds)
    else:
        async with httpx.AsyncClient() as tmp_client:
            response = await tmp_client.get(
                descriptor.url,
                headers=_headers(user_agent),
                timeout=timeout_seconds,
            )
    response.raise_for_status()
    return parse_feed(response.content)


async def enforce_rate_limit(
    *,
    last_request_at: float,
    min_interval_seconds: float,
    now: Callable[[], float],
    sleep: Callable[[float], Awaitable[None]],
) -> tuple[float, float]:
    """Sleep until ``min_interval_seconds`` have passed since the last request.

    Returns:
        Tuple of (new_last_request_at, waited_seconds).
    """
    elapsed = now() - last_request_at
    waited = 0.0
    if last_request_at > 0 and elapsed < min_interval_seconds:
        waited = min_interval_seconds - elapsed
        await sleep(waited)
    return now(), waited


__all__ = [
    "ARXIV_API_MIN_INTERVAL_SECONDS",
    "DEFAULT_TIMEOUT_SECONDS",
    "DEFAULT_USER_AGENT",
    "enforce_rate_limit",
    "fetch_feed",
    "fetch_feed_bytes",
    "fetch_page",
]
