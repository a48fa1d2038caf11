"""Selection, filtering, and navigation state for the paper list."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field

from rapidfuzz import fuzz

from arxivlens.highlight import CompiledMatcher
from arxivlens.models import Feed, Paper

logger = logging.getLogger(__name__)

FUZZY_SCORE_CUTOFF = 60  # Minimum WRatio score (0-100) for a fuzzy hit


@dataclass(frozen=True, slots=True)
class PaperFilter:
    """Immutable description of which papers are visible."""

    text: str = ""
    new_only: bool = False
    pinned_only: bool = False

    @property
    def is_active(self) -> bool:
        return bool(self.text.strip()) or self.new_only or self.pinned_only

    def matches(self, paper: Paper, matcher: CompiledMatcher | None = None) -> bool:
        if self.new_only and not paper.is_new_submission:
            return False
        if self.pinned_only and (matcher is None or not matcher.matches_any(paper.all_authors)):
            return False
        query = self.text.strip().lower()
        if not query:
            return True
        haystack = f"{paper.title} {paper.all_authors}".lower()
        if query in haystack:
            return True
        return fuzz.WRatio(query, haystack) >= FUZZY_SCORE_CUTOFF


NO_FILTER = PaperFilter()


@dataclass(frozen=True, slots=True)
class ListSnapshot:
    """Consistent view of the model at one instant."""

    feed: Feed = field(default_factory=Feed.empty)
    visible: tuple[Paper, ...] = ()
    selected_index: int = 0
    filter: PaperFilter = NO_FILTER

    @property
    def current_paper(self) -> Paper | None:
        if not self.visible:
            return None
        return self.visible[self.selected_index]


class PaperListModel:
    """Owns the current Feed plus the selection and filter applied to it.

    Every mutation builds a complete new :class:`ListSnapshot` under a lock
    and publishes it with a single assignment, so a render pass that grabbed
    ``snapshot()`` never sees a half-applied feed swap. Navigation indexes
    the visible (filtered) papers and is a no-op when nothing is visible.

    Args:
        feed: Initial feed; defaults to an empty one.
        matcher: Author matcher backing the pinned-only filter.
    """

    def __init__(self, feed: Feed | None = None, matcher: CompiledMatcher | None = None) -> None:
        self._lock = threading.Lock()
        self._matcher = matcher
        feed = feed if feed is not None else Feed.empty()
        self._snapshot = ListSnapshot(feed=feed, visible=feed.papers)

    # ========================================================================
    # Read access
    # ========================================================================

    def snapshot(self) -> ListSnapshot:
        return self._snapshot

    @property
    def current_feed(self) -> Feed:
        return self._snapshot.feed

    @property
    def visible_papers(self) -> tuple[Paper, ...]:
        return self._snapshot.visible

    @property
    def selected_index(self) -> int:
        return self._snapshot.selected_index

    @property
    def filter(self) -> PaperFilter:
        return self._snapshot.filter

    @property
    def matcher(self) -> CompiledMatcher | None:
        return self._matcher

    def current_paper(self) -> Paper | None:
        """Return the selected paper, or None when nothing is visible."""
        return self._snapshot.current_paper

    def __len__(self) -> int:
        return len(self._snapshot.visible)

    # ========================================================================
    # Feed and filter replacement
    # ========================================================================

    def _visible_for(self, feed: Feed, paper_filter: PaperFilter) -> tuple[Paper, ...]:
        if not paper_filter.is_active:
            return feed.papers
        return tuple(p for p in feed.papers if paper_filter.matches(p, self._matcher))

    def replace_feed(self, feed: Feed) -> None:
        """Swap in a new feed, keep the filter, and reset selection to the top."""
        with self._lock:
            paper_filter = self._snapshot.filter
            visible = self._visible_for(feed, paper_filter)
            self._snapshot = ListSnapshot(feed=feed, visible=visible, filter=paper_filter)
        logger.debug("Feed replaced: %d papers, %d visible", len(feed.papers), len(visible))

    def set_matcher(self, matcher: CompiledMatcher | None) -> None:
        """Use a new author matcher and re-apply the current filter.

        The selected paper stays selected while it remains visible.
        """
        with self._lock:
            self._matcher = matcher
            current = self._snapshot
            visible = self._visible_for(current.feed, current.filter)
            selected = current.current_paper
            index = visible.index(selected) if selected is not None and selected in visible else 0
            self._snapshot = ListSnapshot(
                feed=current.feed,
                visible=visible,
                selected_index=index,
                filter=current.filter,
            )

    def set_filter(self, paper_filter: PaperFilter) -> None:
        """Apply a filter and select the first match."""
        with self._lock:
            feed = self._snapshot.feed
            visible = self._visible_for(feed, paper_filter)
            self._snapshot = ListSnapshot(feed=feed, visible=visible, filter=paper_filter)

    def clear_filter(self) -> None:
        self.set_filter(NO_FILTER)

    # ========================================================================
    # Navigation
    # ========================================================================

    def _move(self, target: Callable[[ListSnapshot], int]) -> None:
        with self._lock:
            current = self._snapshot
            if not current.visible:
                return
            index = max(0, min(target(current), len(current.visible) - 1))
            if index != current.selected_index:
                self._snapshot = ListSnapshot(
                    feed=current.feed,
                    visible=current.visible,
                    selected_index=index,
                    filter=current.filter,
                )

    def select(self, index: int) -> None:
        """Select a visible paper by position, clamped to the list bounds."""
        self._move(lambda _snap: index)

    def select_next(self) -> None:
        self._move(lambda snap: snap.selected_index + 1)

    def select_previous(self) -> None:
        self._move(lambda snap: snap.selected_index - 1)

    def jump_to_top(self) -> None:
        self._move(lambda _snap: 0)

    def jump_to_bottom(self) -> None:
        self._move(lambda snap: len(snap.visible) - 1)

    @staticmethod
    def half_page_step(height: int) -> int:
        """Rows moved by a half-page scroll in a viewport of ``height`` rows."""
        return max(height // 2, 1)

    def scroll_down(self, step: int) -> None:
        self._move(lambda snap: snap.selected_index + max(step, 0))

    def scroll_up(self, step: int) -> None:
        self._move(lambda snap: snap.selected_index - max(step, 0))


__all__ = [
    "FUZZY_SCORE_CUTOFF",
    "NO_FILTER",
    "ListSnapshot",
    "PaperFilter",
    "PaperListModel",
]
