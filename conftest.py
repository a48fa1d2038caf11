"""Shared test fixtures for arxivlens tests."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import pytest

from arxivlens.config import AppConfig
from arxivlens.highlight import SearchTermSet, _compile_cached
from arxivlens.models import Feed, Paper
from arxivlens.themes import DEFAULT_THEME, THEME_COLORS

# ── Module-level state isolation ─────────────────────────────────────────────


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Restore THEME_COLORS and the compiled-matcher cache after each test.

    Constructing ArxivLens applies config theme overrides to THEME_COLORS in place;
    without this fixture one app test could recolor every later render test.
    """
    yield
    THEME_COLORS.clear()
    THEME_COLORS.update(DEFAULT_THEME)
    _compile_cached.cache_clear()


# ── Factories ────────────────────────────────────────────────────────────────

_DEFAULT_TIMESTAMP = datetime(2024, 1, 15, 18, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_paper():
    """Factory fixture for creating Paper instances with sensible defaults.

    Papers default to first versions (published == updated).
    """

    def _make(
        arxiv_id: str = "2401.12345",
        title: str = "Test Paper",
        authors: tuple[str, ...] = ("Test Author",),
        summary: str = "Test abstract content.",
        categories: tuple[str, ...] = ("quant-ph",),
        published: datetime | None = _DEFAULT_TIMESTAMP,
        updated: datetime | None = None,
        version: int = 1,
        **kwargs: Any,
    ) -> Paper:
        return Paper(
            id=f"http://arxiv.org/abs/{arxiv_id}v{version}",
            title=title,
            authors=authors,
            summary=summary,
            published=published,
            updated=updated if updated is not None else published,
            categories=categories,
            link=f"http://arxiv.org/abs/{arxiv_id}v{version}",
            pdf_url=f"http://arxiv.org/pdf/{arxiv_id}v{version}",
            primary_category=categories[0] if categories else None,
            arxiv_id=arxiv_id,
            version=version,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_feed(make_paper):
    """Factory fixture building a Feed of ``count`` distinct papers."""

    def _make(count: int = 3, **kwargs: Any) -> Feed:
        papers = tuple(
            make_paper(arxiv_id=f"2401.{i:05d}", title=f"Paper {i}") for i in range(count)
        )
        kwargs.setdefault("total_results", count)
        return Feed(papers=papers, **kwargs)

    return _make


@pytest.fixture
def sample_config():
    """Factory fixture for creating AppConfig with optional overrides."""

    def _make(**kwargs: Any) -> AppConfig:
        return AppConfig(**kwargs)

    return _make


@pytest.fixture
def pinned_terms() -> SearchTermSet:
    return SearchTermSet.from_terms(
        authors=["Alice Zhang", "Bob Li"],
        keywords=["error correction", "qubit"],
    )


# ── Atom fixtures ────────────────────────────────────────────────────────────

ATOM_FEED_HEADER = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom"
      xmlns:opensearch="http://a9.com/-/spec/opensearch/1.1/"
      xmlns:arxiv="http://arxiv.org/schemas/atom">
  <title type="html">ArXiv Query: search_query=cat:quant-ph&amp;id_list=&amp;start=0&amp;max_results=2</title>
  <id>http://arxiv.org/api/abc</id>
  <updated>2024-01-16T00:00:00-05:00</updated>
  <opensearch:totalResults>1234</opensearch:totalResults>
  <opensearch:startIndex>0</opensearch:startIndex>
  <opensearch:itemsPerPage>2</opensearch:itemsPerPage>
"""

ENTRY_NEW = """
  <entry>
    <id>http://arxiv.org/abs/2401.00001v1</id>
    <updated>2024-01-15T18:00:00Z</updated>
    <published>2024-01-15T18:00:00Z</published>
    <title>Quantum   error
      correction with cat qubits</title>
    <summary>  We study   bosonic codes.
    Results follow.  </summary>
    <author><name>Alice Zhang</name></author>
    <author><name>Bob Li</name><arxiv:affiliation>MIT</arxiv:affiliation></author>
    <arxiv:comment>12 pages, 3 figures</arxiv:comment>
    <link href="http://arxiv.org/abs/2401.00001v1" rel="alternate" type="text/html"/>
    <link title="pdf" href="http://arxiv.org/pdf/2401.00001v1" rel="related" type="application/pdf"/>
    <arxiv:primary_category term="quant-ph" scheme="http://arxiv.org/schemas/atom"/>
    <category term="quant-ph" scheme="http://arxiv.org/schemas/atom"/>
    <category term="cond-mat.str-el" scheme="http://arxiv.org/schemas/atom"/>
    <category term="quant-ph" scheme="http://arxiv.org/schemas/atom"/>
  </entry>
"""

ENTRY_REPLACED = """
  <entry>
    <id>http://arxiv.org/abs/2312.09999v3</id>
    <updated>2024-01-15T12:00:00Z</updated>
    <published>2023-12-20T09:30:00Z</published>
    <title>Revised lattice surgery</title>
    <summary></summary>
    <author><name>Carol Ruiz</name></author>
    <link href="http://arxiv.org/abs/2312.09999v3" rel="alternate" type="text/html"/>
    <category term="quant-ph"/>
    <category term="xx.UNKNOWN"/>
  </entry>
"""

ENTRY_NO_TITLE = """
  <entry>
    <id>http://arxiv.org/abs/2401.00002v1</id>
    <published>2024-01-15T18:00:00Z</published>
    <summary>Orphaned abstract.</summary>
  </entry>
"""

ATOM_FEED_FOOTER = "</feed>\n"


def build_atom_feed(*entries: str) -> bytes:
    return (ATOM_FEED_HEADER + "".join(entries) + ATOM_FEED_FOOTER).encode("utf-8")


@pytest.fixture
def atom_feed_bytes() -> bytes:
    """Well-formed two-entry response: one new submission, one replacement."""
    return build_atom_feed(ENTRY_NEW, ENTRY_REPLACED)


@pytest.fixture
def atom_feed_with_missing_title() -> bytes:
    return build_atom_feed(ENTRY_NO_TITLE, ENTRY_NEW)


@pytest.fixture
def atom_entries() -> dict[str, str]:
    return {"new": ENTRY_NEW, "replaced": ENTRY_REPLACED, "no_title": ENTRY_NO_TITLE}


@pytest.fixture
def make_atom_feed():
    """Factory fixture wrapping entry snippets in the standard feed envelope."""
    return build_atom_feed
