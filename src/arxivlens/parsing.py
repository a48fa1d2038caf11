"""arXiv Atom feed parsing, ID normalization, and timestamp handling."""

from __future__ import annotations

import logging
import re
import time
import xml.etree.ElementTree as ET
from datetime import datetime

from arxivlens.errors import MalformedFeedError, NoDataError
from arxivlens.models import DroppedEntry, Feed, Paper

logger = logging.getLogger(__name__)

# Namespaces that may coexist in an arXiv API response
ATOM_NS_URI = "http://www.w3.org/2005/Atom"
ARXIV_NS_URI = "http://arxiv.org/schemas/atom"
OPENSEARCH_NS_URI = "http://a9.com/-/spec/opensearch/1.1/"
ATOM_NS = {"atom": ATOM_NS_URI, "arxiv": ARXIV_NS_URI, "opensearch": OPENSEARCH_NS_URI}

# Matches the trailing version of an ID (e.g., 2401.12345v2 -> "v2")
_ARXIV_VERSION_SUFFIX = re.compile(r"v(\d+)$", re.IGNORECASE)


def normalize_whitespace(text: str | None) -> str:
    """Trim text and collapse every whitespace run (including newlines) to one space."""
    if not text:
        return ""
    return " ".join(text.split())


def normalize_arxiv_id(raw: str) -> str:
    """Normalize arXiv IDs from raw IDs or URLs.

    Examples:
    - http://arxiv.org/abs/2401.12345v2 -> 2401.12345
    - https://arxiv.org/pdf/2401.12345v2.pdf -> 2401.12345
    - hep-th/9901001v1 -> hep-th/9901001
    """
    text = raw.strip()
    if not text:
        return ""

    if "arxiv.org" in text:
        for marker in ("/abs/", "/pdf/"):
            idx = text.find(marker)
            if idx >= 0:
                text = text[idx + len(marker) :]
                break

    text = text.split("?", 1)[0].split("#", 1)[0].strip().strip("/")
    text = text.removesuffix(".pdf")
    return _ARXIV_VERSION_SUFFIX.sub("", text)


def extract_version(raw_id: str) -> int | None:
    """Return the version number encoded in an entry ID, if any."""
    match = _ARXIV_VERSION_SUFFIX.search(raw_id.strip())
    return int(match.group(1)) if match else None


def parse_timestamp(raw: str | None) -> datetime | None:
    """Parse an ISO-8601 Atom timestamp; malformed values yield None."""
    cleaned = (raw or "").strip()
    if not cleaned:
        return None
    if cleaned.endswith(("Z", "z")):
        cleaned = cleaned[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(cleaned)
    except ValueError:
        logger.debug("Ignoring malformed timestamp %r", raw)
        return None


def _qualify(namespace: str, local: str) -> str:
    return f"{{{namespace}}}{local}" if namespace else local


def _node_text(node: ET.Element | None) -> str:
    """Normalized text of a node including any nested markup."""
    if node is None:
        return ""
    return normalize_whitespace("".join(node.itertext()))


def _optional_text(node: ET.Element | None) -> str | None:
    return _node_text(node) or None


def _parse_int(node: ET.Element | None) -> int | None:
    text = _node_text(node)
    try:
        return int(text)
    except ValueError:
        return None


class _EntryParser:
    """Extracts Paper fields from entries sharing one feed namespace."""

    def __init__(self, atom_ns: str) -> None:
        self._atom_ns = atom_ns

    def _atom(self, local: str) -> str:
        return _qualify(self._atom_ns, local)

    def _authors(self, entry: ET.Element) -> tuple[str, ...]:
        names: list[str] = []
        for author in entry.findall(self._atom("author")):
            name = _node_text(author.find(self._atom("name")))
            if name:
                names.append(name)
        return tuple(names)

    def _categories(self, entry: ET.Element) -> tuple[tuple[str, ...], str | None]:
        categories: list[str] = []
        for category in entry.findall(self._atom("category")):
            term = (category.get("term") or "").strip()
            if term and term not in categories:
                categories.append(term)

        primary_node = entry.find(_qualify(ARXIV_NS_URI, "primary_category"))
        primary = None
        if primary_node is not None:
            primary = (primary_node.get("term") or "").strip() or None
        if primary and primary not in categories:
            categories.insert(0, primary)
        return tuple(categories), primary

    def _links(self, entry: ET.Element) -> tuple[str | None, str | None]:
        page_url: str | None = None
        first_url: str | None = None
        pdf_url: str | None = None
        for link in entry.findall(self._atom("link")):
            href = (link.get("href") or "").strip()
            if not href:
                continue
            if first_url is None:
                first_url = href
            if link.get("title") == "pdf" or link.get("type") == "application/pdf":
                pdf_url = pdf_url or href
            elif link.get("rel", "alternate") == "alternate" and page_url is None:
                page_url = href
        return page_url or first_url, pdf_url

    def parse(self, entry: ET.Element, position: int) -> Paper | DroppedEntry:
        """Build a Paper, or describe why the entry had to be skipped."""
        raw_id = _node_text(entry.find(self._atom("id")))
        if not raw_id:
            return DroppedEntry(position=position, reason="missing <id>")
        title = _node_text(entry.find(self._atom("title")))
        if not title:
            return DroppedEntry(position=position, reason="missing <title>", entry_id=raw_id)

        categories, primary = self._categories(entry)
        link, pdf_url = self._links(entry)
        return Paper(
            id=raw_id,
            title=title,
            authors=self._authors(entry),
            summary=_node_text(entry.find(self._atom("summary"))),
            published=parse_timestamp(_node_text(entry.find(self._atom("published")))),
            updated=parse_timestamp(_node_text(entry.find(self._atom("updated")))),
            categories=categories,
            link=link,
            pdf_url=pdf_url,
            primary_category=primary,
            comment=_optional_text(entry.find(_qualify(ARXIV_NS_URI, "comment"))),
            journal_ref=_optional_text(entry.find(_qualify(ARXIV_NS_URI, "journal_ref"))),
            doi=_optional_text(entry.find(_qualify(ARXIV_NS_URI, "doi"))),
            arxiv_id=normalize_arxiv_id(raw_id),
            version=extract_version(raw_id),
        )


def _root_namespace(root: ET.Element) -> str | None:
    """Return the namespace of a <feed> root ("" if unqualified), or None."""
    tag = root.tag
    if not isinstance(tag, str):
        return None
    if tag.startswith("{"):
        namespace, _, local = tag[1:].partition("}")
    else:
        namespace, local = "", tag
    if local != "feed":
        return None
    return namespace


def parse_feed(raw_xml: bytes | str | None) -> Feed:
    """Parse an arXiv Atom response into a Feed.

    Entries missing ``<id>`` or ``<title>`` are skipped and reported in
    ``Feed.dropped``; every other field degrades to empty/None.

    Raises:
        NoDataError: If no bytes were supplied.
        MalformedFeedError: If the document is not well-formed XML or its
            root is not a ``<feed>`` element.
    """
    if raw_xml is None or not raw_xml.strip():
        raise NoDataError("The arXiv API returned no data")

    t0 = time.monotonic()
    try:
        root = ET.fromstring(raw_xml)
    except ET.ParseError as exc:
        raise MalformedFeedError(f"Invalid arXiv API XML response: {exc}") from exc

    atom_ns = _root_namespace(root)
    if atom_ns is None:
        raise MalformedFeedError(f"Expected an Atom <feed> root element, found {root.tag!r}")

    entry_parser = _EntryParser(atom_ns)
    papers: list[Paper] = []
    dropped: list[DroppedEntry] = []
    for position, entry in enumerate(root.findall(_qualify(atom_ns, "entry"))):
        result = entry_parser.parse(entry, position)
        if isinstance(result, DroppedEntry):
            logger.warning(
                "Skipping feed entry %d (%s): %s",
                position,
                result.entry_id or "no id",
                result.reason,
            )
            dropped.append(result)
        else:
            papers.append(result)

    feed = Feed(
        papers=tuple(papers),
        total_results=_parse_int(root.find(_qualify(OPENSEARCH_NS_URI, "totalResults"))),
        start_index=_parse_int(root.find(_qualify(OPENSEARCH_NS_URI, "startIndex"))),
        items_per_page=_parse_int(root.find(_qualify(OPENSEARCH_NS_URI, "itemsPerPage"))),
        query=_optional_text(root.find(_qualify(atom_ns, "title"))),
        updated=parse_timestamp(_node_text(root.find(_qualify(atom_ns, "updated")))),
        dropped=tuple(dropped),
    )
    logger.debug(
        "Parsed %d papers (%d dropped) in %.3fs",
        len(feed.papers),
        feed.dropped_count,
        time.monotonic() - t0,
    )
    return feed


__all__ = [
    "ARXIV_NS_URI",
    "ATOM_NS",
    "ATOM_NS_URI",
    "OPENSEARCH_NS_URI",
    "extract_version",
    "normalize_arxiv_id",
    "normalize_whitespace",
    "parse_feed",
    "parse_timestamp",
]
