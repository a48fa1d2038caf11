"""Tests for arXiv API service helpers."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from arxivlens.errors import MalformedFeedError
from arxivlens.query import build_query
from arxivlens.services.arxiv_api_service import (
    DEFAULT_USER_AGENT,
    enforce_rate_limit,
    fetch_feed,
    fetch_feed_bytes,
    fetch_page,
)


@pytest.fixture
def descriptor():
    return build_query("quant-ph", None, None, 0, 2)


def _transport(status: int = 200, content: bytes = b"", seen: list | None = None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status, content=content)

    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_enforce_rate_limit_waits_when_needed() -> None:
    class FakeClock:
        def __init__(self) -> None:
            self._calls = 0

        def now(self) -> float:
            self._calls += 1
            if self._calls == 1:
                return 101.0
            return 104.5

    clock = FakeClock()
    sleep = AsyncMock()

    new_last, waited = await enforce_rate_limit(
        last_request_at=100.0,
        min_interval_seconds=3.0,
        now=clock.now,
        sleep=sleep,
    )

    sleep.assert_awaited_once_with(pytest.approx(2.0))
    assert waited == pytest.approx(2.0)
    assert new_last == pytest.approx(104.5)


@pytest.mark.asyncio
async def test_enforce_rate_limit_skips_wait_when_not_needed() -> None:
    sleep = AsyncMock()

    new_last, waited = await enforce_rate_limit(
        last_request_at=0.0,
        min_interval_seconds=3.0,
        now=lambda: 50.0,
        sleep=sleep,
    )

    sleep.assert_not_awaited()
    assert waited == 0.0
    assert new_last == 50.0


def test_fetch_feed_sends_descriptor_url_and_user_agent(descriptor, atom_feed_bytes) -> None:
    seen: list[httpx.Request] = []
    with httpx.Client(transport=_transport(content=atom_feed_bytes, seen=seen)) as client:
        feed = fetch_feed(descriptor, client=client)

    assert [p.arxiv_id for p in feed.papers] == ["2401.00001", "2312.09999"]
    assert len(seen) == 1
    assert seen[0].url == httpx.URL(descriptor.url)
    assert seen[0].headers["User-Agent"] == DEFAULT_USER_AGENT


def test_fetch_feed_bytes_returns_raw_body(descriptor) -> None:
    with httpx.Client(transport=_transport(content=b"<feed/>")) as client:
        assert fetch_feed_bytes(descriptor, client=client, user_agent="arxivlens-test/1.0") == b"<feed/>"


@pytest.mark.parametrize("status", [429, 500, 503, 404])
def test_fetch_feed_raises_on_http_error(descriptor, status: int) -> None:
    with httpx.Client(transport=_transport(status=status)) as client:
        with pytest.raises(httpx.HTTPStatusError) as excinfo:
            fetch_feed(descriptor, client=client)
    assert excinfo.value.response.status_code == status


def test_fetch_feed_propagates_parse_errors(descriptor) -> None:
    with httpx.Client(transport=_transport(content=b"<html>maintenance</html>")) as client:
        with pytest.raises(MalformedFeedError):
            fetch_feed(descriptor, client=client)


def test_fetch_feed_without_client_uses_temp_client(descriptor, atom_feed_bytes) -> None:
    response = MagicMock()
    response.content = atom_feed_bytes
    temp_client = MagicMock()
    temp_client.__enter__.return_value = temp_client
    temp_client.get.return_value = response

    with patch("arxivlens.services.arxiv_api_service.httpx.Client", return_value=temp_client):
        feed = fetch_feed(descriptor, timeout_seconds=5)

    assert len(feed) == 2
    temp_client.get.assert_called_once()
    assert temp_client.get.call_args.kwargs["timeout"] == 5
    temp_client.__exit__.assert_called_once()
    response.raise_for_status.assert_called_once()


@pytest.mark.asyncio
async def test_fetch_page_uses_shared_client(descriptor, atom_feed_bytes) -> None:
    response = MagicMock()
    response.content = atom_feed_bytes
    response.raise_for_status = MagicMock()
    client = SimpleNamespace(get=AsyncMock(return_value=response))

    feed = await fetch_page(descriptor, client=client, user_agent="arxivlens-test/1.0")

    assert len(feed) == 2
    client.get.assert_awaited_once()
    assert client.get.await_args.args == (descriptor.url,)
    assert client.get.await_args.kwargs["headers"] == {"User-Agent": "arxivlens-test/1.0"}
    response.raise_for_status.assert_called_once()


@pytest.mark.asyncio
async def test_fetch_page_without_shared_client_uses_temp_client(descriptor, atom_feed_bytes) -> None:
    response = MagicMock()
    response.content = atom_feed_bytes
    response.raise_for_status = MagicMock()

    class DummyClient:
        async def __aenter__(self):
            return self

        async def __aexit__(self, exc_type, exc, tb):
            return False

        async def get(self, *_args, **_kwargs):
            return response

    with patch("arxivlens.services.arxiv_api_service.httpx.AsyncClient", return_value=DummyClient()):
        feed = await fetch_page(descriptor, client=None)

    assert len(feed) == 2
    response.raise_for_status.assert_called_once()


@pytest.mark.asyncio
async def test_fetch_page_raises_on_rate_limit(descriptor) -> None:
    async with httpx.AsyncClient(transport=_transport(status=429)) as client:
        with pytest.raises(httpx.HTTPStatusError):
            await fetch_page(descriptor, client=client)
