"""Tests for the highlight engine."""

from __future__ import annotations

import pytest

from arxivlens.errors import InvalidTermError
from arxivlens.highlight import (
    CompiledMatcher,
    FieldMatchers,
    HighlightSpan,
    SearchTerm,
    SearchTermSet,
    TermCategory,
    TextSegment,
    fold_case,
    fold_with_offsets,
    highlight,
    segments_to_markup,
)


def _keywords(*terms: str) -> SearchTermSet:
    return SearchTermSet.from_terms(keywords=terms)


def _highlighted(segments: list[TextSegment]) -> list[str]:
    return [s.text for s in segments if s.highlighted]


class TestSearchTermSet:
    def test_deduplicates_case_insensitively_first_wins(self) -> None:
        terms = SearchTermSet.from_terms(authors=["Alice"], keywords=["alice", "Qubit", "QUBIT"])
        assert list(terms) == [
            SearchTerm("Alice", TermCategory.AUTHOR),
            SearchTerm("Qubit", TermCategory.KEYWORD),
        ]

    def test_terms_are_trimmed(self) -> None:
        terms = _keywords("  qubit  ")
        assert terms.terms[0].text == "qubit"

    @pytest.mark.parametrize("bad", ["", "   ", "\n\t"])
    def test_empty_term_is_rejected(self, bad: str) -> None:
        with pytest.raises(InvalidTermError):
            _keywords("fine", bad)

    def test_accepts_search_terms_and_pairs(self) -> None:
        terms = SearchTermSet([SearchTerm("a", TermCategory.AUTHOR), ("b", "keyword")])
        assert [t.category for t in terms] == [TermCategory.AUTHOR, TermCategory.KEYWORD]

    def test_equality_and_hash(self) -> None:
        assert _keywords("x", "y") == _keywords("x", "y")
        assert hash(_keywords("x", "y")) == hash(_keywords("x", "y"))
        assert _keywords("x") != _keywords("y")

    def test_only_filters_by_category(self, pinned_terms: SearchTermSet) -> None:
        authors = pinned_terms.only(TermCategory.AUTHOR)
        assert [t.text for t in authors] == ["Alice Zhang", "Bob Li"]

    def test_empty_set_is_falsy(self) -> None:
        assert not SearchTermSet()
        assert len(SearchTermSet()) == 0


class TestOverlapPolicy:
    def test_longest_match_wins(self) -> None:
        text = "quantum error correction"
        segments = highlight(text, _keywords("quantum error", "error correction", "error"))
        # "quantum error" (13) and "error correction" (16) overlap at "error"
        assert _highlighted(segments) == ["error correction"]

    def test_equal_length_earliest_start_wins(self) -> None:
        segments = highlight("abcd", _keywords("bcd", "abc"))
        assert _highlighted(segments) == ["abc"]
        assert [s.text for s in segments] == ["abc", "d"]

    def test_loser_is_discarded_not_trimmed(self) -> None:
        segments = highlight("quantum error correction", _keywords("quantum error", "error correction"))
        assert [s.text for s in segments] == ["quantum ", "error correction"]

    def test_adjacent_matches_stay_distinct(self) -> None:
        segments = highlight("foobar", _keywords("foo", "bar"))
        assert [(s.text, s.highlighted) for s in segments] == [("foo", True), ("bar", True)]

    def test_repeated_term_matches_every_occurrence(self) -> None:
        segments = highlight("qubit and qubit", _keywords("qubit"))
        assert _highlighted(segments) == ["qubit", "qubit"]

    def test_contained_shorter_term_loses(self) -> None:
        segments = highlight("superconducting qubits", _keywords("qubit", "conducting qubits"))
        assert _highlighted(segments) == ["conducting qubits"]

    def test_self_overlapping_term(self) -> None:
        segments = highlight("aaaa", _keywords("aa"))
        assert _highlighted(segments) == ["aa", "aa"]

    def test_chain_of_overlaps(self) -> None:
        # "bcde" is longest; "ab" and "ef" both overlap it and are dropped
        segments = highlight("abcdef", _keywords("ab", "bcde", "ef"))
        assert [s.text for s in segments] == ["a", "bcde", "f"]


class TestHighlight:
    def test_case_insensitive_whole_string(self) -> None:
        segments = highlight("Quantum", _keywords("quantum"))
        assert len(segments) == 1
        assert segments[0] == TextSegment("Quantum", 0, 7, SearchTerm("quantum", TermCategory.KEYWORD))
        assert segments[0].category is TermCategory.KEYWORD

    def test_empty_terms_yield_single_plain_segment(self) -> None:
        text = "Anything at all"
        assert highlight(text, SearchTermSet()) == [TextSegment(text, 0, len(text), None)]

    def test_no_matches_yield_single_plain_segment(self) -> None:
        assert highlight("abc", _keywords("xyz")) == [TextSegment("abc", 0, 3)]

    def test_empty_text(self) -> None:
        assert highlight("", _keywords("x")) == [TextSegment("", 0, 0)]

    def test_offsets_index_the_string(self) -> None:
        text = "Über die Schrödinger-Gleichung"
        segments = highlight(text, _keywords("schrödinger"))
        match = next(s for s in segments if s.highlighted)
        assert text[match.start : match.end] == "Schrödinger"

    def test_length_changing_fold_maps_back_to_source(self) -> None:
        text = "İstanbul qubit"
        segments = highlight(text, _keywords("istanbul", "qubit"))
        assert "".join(s.text for s in segments) == text
        assert _highlighted(segments) == ["İstanbul", "qubit"]

    def test_expanding_fold_matches_whole_characters(self) -> None:
        text = "Die Straße der Qubits"
        assert _highlighted(highlight(text, _keywords("strasse"))) == ["Straße"]
        assert CompiledMatcher(_keywords("s")).find_spans("Maß") == []
        spans = CompiledMatcher(_keywords("ss")).find_spans("Maß und Masse")
        assert [(s.start, s.end) for s in spans] == [(2, 3), (10, 12)]

    def test_fold_with_offsets(self) -> None:
        folded, origins = fold_with_offsets("aßİ")
        assert folded == "assi"
        assert origins == [0, 1, 1, 2]
        assert fold_case("QUBIT") == "qubit"

    def test_segments_carry_terms(self, pinned_terms: SearchTermSet) -> None:
        segments = highlight("Alice Zhang built a qubit", pinned_terms)
        categories = [(s.text, s.category) for s in segments if s.highlighted]
        assert categories == [("Alice Zhang", TermCategory.AUTHOR), ("qubit", TermCategory.KEYWORD)]

    def test_accepts_precompiled_matcher(self, pinned_terms: SearchTermSet) -> None:
        matcher = pinned_terms.compile()
        assert highlight("a qubit", matcher) == highlight("a qubit", pinned_terms)


class TestCompiledMatcher:
    def test_find_spans_sorted_and_non_overlapping(self) -> None:
        matcher = CompiledMatcher(_keywords("he", "she", "his", "hers"))
        spans = matcher.find_spans("ushers and his")
        assert [(s.start, s.end, s.term.text) for s in spans] == [(2, 6, "hers"), (11, 14, "his")]
        assert all(a.end <= b.start for a, b in zip(spans, spans[1:]))

    def test_iter_matches_reports_overlaps(self) -> None:
        matcher = CompiledMatcher(_keywords("he", "she", "hers"))
        raw = {(s.start, s.end) for s in matcher.iter_matches("ushers")}
        assert raw == {(1, 4), (2, 4), (2, 6)}

    def test_matches_any(self) -> None:
        matcher = SearchTermSet.from_terms(authors=["Bob Li"]).compile()
        assert matcher.matches_any("Alice Zhang, bob li")
        assert not matcher.matches_any("Alice Zhang")

    def test_empty_matcher(self) -> None:
        matcher = SearchTermSet().compile()
        assert not matcher
        assert matcher.find_spans("anything") == []
        assert not matcher.matches_any("anything")

    def test_span_category(self) -> None:
        span = HighlightSpan(0, 3, SearchTerm("Bob", TermCategory.AUTHOR))
        assert span.category is TermCategory.AUTHOR

    def test_field_matchers_split_by_category(self, pinned_terms: SearchTermSet) -> None:
        matchers = FieldMatchers.from_terms(pinned_terms)
        assert matchers.authors.matches_any("Bob Li")
        assert not matchers.authors.matches_any("qubit")
        assert matchers.keywords.matches_any("qubit")
        assert not matchers.keywords.matches_any("Bob Li")


class TestSegmentsToMarkup:
    COLORS = {TermCategory.AUTHOR: "#f92672", TermCategory.KEYWORD: "#e6db74"}

    def test_wraps_highlighted_segments(self) -> None:
        segments = highlight("a qubit", _keywords("qubit"))
        assert segments_to_markup(segments, self.COLORS) == "a [bold #e6db74]qubit[/]"

    def test_escapes_user_text(self) -> None:
        segments = highlight("[red]qubit[/red]", _keywords("qubit"))
        markup = segments_to_markup(segments, self.COLORS)
        assert markup == "\\[red]" + "[bold #e6db74]qubit[/]" + "\\[/red]"

    def test_missing_color_falls_back_to_bold(self) -> None:
        segments = highlight("Bob", SearchTermSet.from_terms(authors=["bob"]))
        assert segments_to_markup(segments, {}) == "[bold]Bob[/]"
