"""Highlighting of pinned authors and keywords inside paper text.

A :class:`SearchTermSet` is compiled once into a :class:`CompiledMatcher`
(an Aho-Corasick automaton over case-folded terms) and reused for every text
body of a render pass. Matching cost is linear in the text length plus the
number of raw matches, independent of how many terms the set holds.

Overlapping matches are resolved so that the longest match wins and, among
equally long matches, the one starting first wins. Losing matches are dropped
entirely rather than trimmed.
"""

from __future__ import annotations

import functools
import unicodedata
from bisect import bisect_right, insort
from collections import deque
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum

from rich.markup import escape as escape_markup

from arxivlens.errors import InvalidTermError


class TermCategory(str, Enum):
    """What a highlight term stands for."""

    AUTHOR = "author"
    KEYWORD = "keyword"


@dataclass(frozen=True, slots=True)
class SearchTerm:
    """A single author or keyword to highlight."""

    text: str
    category: TermCategory = TermCategory.KEYWORD


@dataclass(frozen=True, slots=True)
class HighlightSpan:
    """A matched range ``text[start:end]`` and the term that produced it."""

    start: int
    end: int
    term: SearchTerm

    @property
    def category(self) -> TermCategory:
        return self.term.category


@dataclass(frozen=True, slots=True)
class TextSegment:
    """A contiguous run of a text body, highlighted or not."""

    text: str
    start: int
    end: int
    term: SearchTerm | None = None

    @property
    def category(self) -> TermCategory | None:
        return self.term.category if self.term is not None else None

    @property
    def highlighted(self) -> bool:
        return self.term is not None


def _fold_char(char: str) -> str:
    folded = char.casefold()
    if len(folded) == 1:
        return folded
    # Drop combining marks the fold adds ("İ" becomes "i" plus U+0307)
    return folded[0] + "".join(c for c in folded[1:] if not unicodedata.combining(c))


def fold_with_offsets(text: str) -> tuple[str, list[int]]:
    """Case-fold text and map every folded code point back to its source index.

    Folding can grow a character ("ß" becomes "ss"), so ``origins[i]`` is the
    index in ``text`` of the character that produced folded position ``i``.
    """
    parts: list[str] = []
    origins: list[int] = []
    for index, char in enumerate(text):
        folded = _fold_char(char)
        parts.append(folded)
        origins.extend([index] * len(folded))
    return "".join(parts), origins


def fold_case(text: str) -> str:
    """Case-fold text the way terms and haystacks are compared.

    >>> fold_case("Straße İstanbul")
    'strasse istanbul'
    """
    return "".join(_fold_char(char) for char in text)


class SearchTermSet:
    """Immutable, case-insensitively de-duplicated set of highlight terms.

    The first occurrence of a term wins, so an entry listed as both an author
    and a keyword keeps the category it was first given.

    Raises:
        InvalidTermError: If a term is empty after trimming whitespace.
    """

    __slots__ = ("_terms",)

    def __init__(self, terms: Iterable[SearchTerm | tuple[str, TermCategory | str]] = ()) -> None:
        seen: set[str] = set()
        unique: list[SearchTerm] = []
        for raw in terms:
            if isinstance(raw, SearchTerm):
                text, category = raw.text, raw.category
            else:
                text, category = raw
            cleaned = text.strip()
            if not cleaned:
                raise InvalidTermError(text)
            key = fold_case(cleaned)
            if key in seen:
                continue
            seen.add(key)
            unique.append(SearchTerm(cleaned, TermCategory(category)))
        self._terms: tuple[SearchTerm, ...] = tuple(unique)

    @classmethod
    def from_terms(
        cls,
        authors: Iterable[str] = (),
        keywords: Iterable[str] = (),
    ) -> SearchTermSet:
        """Build a set from plain author and keyword strings."""
        pairs = [(a, TermCategory.AUTHOR) for a in authors]
        pairs.extend((k, TermCategory.KEYWORD) for k in keywords)
        return cls(pairs)

    @property
    def terms(self) -> tuple[SearchTerm, ...]:
        return self._terms

    def only(self, category: TermCategory) -> SearchTermSet:
        """Return the subset of terms with the given category."""
        return SearchTermSet(t for t in self._terms if t.category is category)

    def compile(self) -> CompiledMatcher:
        return CompiledMatcher(self)

    def __iter__(self) -> Iterator[SearchTerm]:
        return iter(self._terms)

    def __len__(self) -> int:
        return len(self._terms)

    def __bool__(self) -> bool:
        return bool(self._terms)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SearchTermSet):
            return NotImplemented
        return self._terms == other._terms

    def __hash__(self) -> int:
        return hash(self._terms)

    def __repr__(self) -> str:
        return f"SearchTermSet({list(self._terms)!r})"


class CompiledMatcher:
    """Aho-Corasick automaton built once for a SearchTermSet."""

    __slots__ = ("_fail", "_goto", "_lengths", "_outputs", "_terms")

    def __init__(self, terms: SearchTermSet) -> None:
        self._terms: tuple[SearchTerm, ...] = terms.terms
        self._lengths: tuple[int, ...] = tuple(len(fold_case(t.text)) for t in self._terms)
        goto: list[dict[str, int]] = [{}]
        outputs: list[tuple[int, ...]] = [()]

        for index, term in enumerate(self._terms):
            state = 0
            for char in fold_case(term.text):
                nxt = goto[state].get(char)
                if nxt is None:
                    nxt = len(goto)
                    goto.append({})
                    outputs.append(())
                    goto[state][char] = nxt
                state = nxt
            outputs[state] = (*outputs[state], index)

        # Breadth-first pass: failure links point to the longest proper
        # suffix that is also a trie prefix; outputs inherit along them.
        fail = [0] * len(goto)
        queue = deque(goto[0].values())
        while queue:
            state = queue.popleft()
            for char, nxt in goto[state].items():
                queue.append(nxt)
                fallback = fail[state]
                while fallback and char not in goto[fallback]:
                    fallback = fail[fallback]
                fail[nxt] = goto[fallback].get(char, 0)
                outputs[nxt] = outputs[nxt] + outputs[fail[nxt]]

        self._goto = goto
        self._fail = fail
        self._outputs = outputs

    @property
    def terms(self) -> tuple[SearchTerm, ...]:
        return self._terms

    def __bool__(self) -> bool:
        return bool(self._terms)

    def iter_matches(self, text: str) -> Iterator[HighlightSpan]:
        """Yield every raw (possibly overlapping) match in order of end position.

        Matches are found in the folded text and mapped back to ``text``;
        one that starts or ends inside a single character's fold is skipped.
        """
        if not self._terms:
            return
        goto, fail, outputs, lengths = self._goto, self._fail, self._outputs, self._lengths
        folded, origins = fold_with_offsets(text)
        last = len(folded) - 1
        state = 0
        for pos, char in enumerate(folded):
            while state and char not in goto[state]:
                state = fail[state]
            state = goto[state].get(char, 0)
            if not outputs[state] or (pos < last and origins[pos + 1] == origins[pos]):
                continue
            for index in outputs[state]:
                first = pos + 1 - lengths[index]
                if first > 0 and origins[first - 1] == origins[first]:
                    continue
                yield HighlightSpan(origins[first], origins[pos] + 1, self._terms[index])

    def matches_any(self, text: str) -> bool:
        """Return True if any term occurs in text."""
        return next(self.iter_matches(text), None) is not None

    def find_spans(self, text: str) -> list[HighlightSpan]:
        """Return non-overlapping matches sorted by start position."""
        candidates = sorted(
            self.iter_matches(text),
            key=lambda span: (span.start - span.end, span.start),
        )
        starts: list[int] = []
        ends: dict[int, int] = {}
        accepted: dict[int, HighlightSpan] = {}
        for span in candidates:
            i = bisect_right(starts, span.start)
            if i > 0 and ends[starts[i - 1]] > span.start:
                continue
            if i < len(starts) and starts[i] < span.end:
                continue
            insort(starts, span.start)
            ends[span.start] = span.end
            accepted[span.start] = span
        return [accepted[start] for start in starts]


@functools.lru_cache(maxsize=32)
def _compile_cached(terms: SearchTermSet) -> CompiledMatcher:
    return CompiledMatcher(terms)


def _as_matcher(terms: SearchTermSet | CompiledMatcher) -> CompiledMatcher:
    if isinstance(terms, CompiledMatcher):
        return terms
    return _compile_cached(terms)


def highlight(text: str, terms: SearchTermSet | CompiledMatcher) -> list[TextSegment]:
    """Split text into highlighted and plain segments.

    Concatenating the ``text`` of the returned segments always reproduces the
    input exactly. With no terms (or no matches) the result is a single plain
    segment covering the whole text.
    """
    matcher = _as_matcher(terms)
    spans = matcher.find_spans(text) if matcher else []
    if not spans:
        return [TextSegment(text, 0, len(text))]

    segments: list[TextSegment] = []
    cursor = 0
    for span in spans:
        if span.start > cursor:
            segments.append(TextSegment(text[cursor : span.start], cursor, span.start))
        segments.append(TextSegment(text[span.start : span.end], span.start, span.end, span.term))
        cursor = span.end
    if cursor < len(text):
        segments.append(TextSegment(text[cursor:], cursor, len(text)))
    return segments


@dataclass(frozen=True, slots=True)
class FieldMatchers:
    """Per-field matchers for one render pass.

    Titles and abstracts are highlighted with keywords, author lists with
    pinned authors.
    """

    authors: CompiledMatcher
    keywords: CompiledMatcher

    @classmethod
    def from_terms(cls, terms: SearchTermSet) -> FieldMatchers:
        return cls(
            authors=terms.only(TermCategory.AUTHOR).compile(),
            keywords=terms.only(TermCategory.KEYWORD).compile(),
        )


def segments_to_markup(segments: Iterable[TextSegment], colors: Mapping[TermCategory, str]) -> str:
    """Render segments as Rich markup, escaping all user text."""
    parts: list[str] = []
    for segment in segments:
        escaped = escape_markup(segment.text)
        if segment.category is None:
            parts.append(escaped)
            continue
        color = colors.get(segment.category)
        style = f"bold {color}" if color else "bold"
        parts.append(f"[{style}]{escaped}[/]")
    return "".join(parts)


__all__ = [
    "CompiledMatcher",
    "FieldMatchers",
    "HighlightSpan",
    "SearchTerm",
    "SearchTermSet",
    "TermCategory",
    "TextSegment",
    "fold_case",
    "fold_with_offsets",
    "highlight",
    "segments_to_markup",
]
