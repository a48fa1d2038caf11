"""Textual TUI for browsing one arXiv category listing at a time.

The app owns a :class:`~arxivlens.paper_list.PaperListModel` and mirrors its
snapshot into an OptionList plus a detail pane. Pages are fetched in tracked
asyncio tasks; every request carries a token so a response that arrives after
a newer request was issued is dropped. A failed request leaves the current
list untouched.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import replace
from typing import Any

import httpx
from textual import on
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.css.query import NoMatches
from textual.timer import Timer
from textual.widgets import Footer, Header, Input, Label, OptionList
from textual.widgets.option_list import Option

from arxivlens.action_messages import (
    build_actionable_error,
    build_actionable_warning,
    build_feed_loaded_message,
    build_read_results_error,
)
from arxivlens.config import AppConfig, get_config_path, save_config
from arxivlens.errors import FeedParseError
from arxivlens.help_ui import build_help_sections
from arxivlens.highlight import FieldMatchers
from arxivlens.modals import ConfigScreen, HelpScreen
from arxivlens.models import Feed, QueryDescriptor
from arxivlens.paper_list import PaperFilter, PaperListModel
from arxivlens.query import format_query_label
from arxivlens.services.arxiv_api_service import (
    ARXIV_API_MIN_INTERVAL_SECONDS,
    enforce_rate_limit,
    fetch_page,
)
from arxivlens.themes import THEME_COLORS, THEME_NAME, apply_theme_overrides, build_textual_theme
from arxivlens.ui_constants import APP_BINDINGS, APP_CSS
from arxivlens.widgets.details import PaperDetails
from arxivlens.widgets.listing import render_paper_option

logger = logging.getLogger(__name__)

FetchPageFn = Callable[..., Awaitable[Feed]]

# Search debounce delay in seconds
SEARCH_DEBOUNCE_DELAY = 0.2

# Rows taken by one rendered option (title, authors, meta line)
OPTION_HEIGHT = 3


class ArxivLens(App):
    """Browse one page of an arXiv listing with pinned terms highlighted."""

    TITLE = "arxivlens"
    CSS = APP_CSS
    BINDINGS = APP_BINDINGS

    def __init__(
        self,
        descriptor: QueryDescriptor,
        *,
        config: AppConfig | None = None,
        new_only: bool = False,
        fetch_page_fn: FetchPageFn = fetch_page,
        min_request_interval: float = ARXIV_API_MIN_INTERVAL_SECONDS,
        save_config_fn: Callable[[AppConfig], bool] = save_config,
    ) -> None:
        super().__init__()
        self._config = config or AppConfig()
        self._save_config_fn = save_config_fn
        # Register and select the theme before compose() so $th-* CSS variables resolve
        apply_theme_overrides(self._config.theme)
        self.register_theme(build_textual_theme(THEME_COLORS))
        self.theme = THEME_NAME
        self._descriptor = descriptor
        self._fetch_page_fn = fetch_page_fn
        self._min_request_interval = min_request_interval
        self._matchers = FieldMatchers.from_terms(self._config.search_terms())
        self._model = PaperListModel(matcher=self._matchers.authors)
        if new_only:
            self._model.set_filter(PaperFilter(new_only=True))

        self._http_client: httpx.AsyncClient | None = None
        self._background_tasks: set[asyncio.Task[None]] = set()
        self._request_token = 0
        self._fetch_in_progress = False
        self._last_request_at = 0.0
        self._last_error: str | None = None
        self._search_timer: Timer | None = None
        self._pending_query = ""

    # ========================================================================
    # Public state
    # ========================================================================

    @property
    def model(self) -> PaperListModel:
        return self._model

    @property
    def descriptor(self) -> QueryDescriptor:
        return self._descriptor

    @property
    def loading(self) -> bool:
        return self._fetch_in_progress

    @property
    def last_error(self) -> str | None:
        return self._last_error

    # ========================================================================
    # Lifecycle
    # ========================================================================

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-container"):
            with Vertical(id="left-pane"):
                yield Label(" Papers", id="list-header")
                with Vertical(id="search-container"):
                    yield Input(placeholder=" Filter titles and authors", id="search-input")
                yield OptionList(id="paper-list")
                yield Label("", id="status-bar")
            with Vertical(id="right-pane"):
                with VerticalScroll(id="details-scroll"):
                    yield PaperDetails(id="paper-details")
        yield Footer()

    def on_mount(self) -> None:
        self._http_client = httpx.AsyncClient()
        self.sub_title = format_query_label(self._descriptor)
        self._fetch_in_progress = True
        self._refresh_list_view()
        self._get_paper_list_widget().focus()
        self._track_task(self._load_page(self._descriptor))

    async def on_unmount(self) -> None:
        timer = self._search_timer
        self._search_timer = None
        if timer is not None:
            timer.stop()

        pending = [task for task in self._background_tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            _, still_pending = await asyncio.wait(pending, timeout=0.5)
            for task in still_pending:
                logger.debug("Background task did not cancel before shutdown: %r", task)
        self._background_tasks.clear()

        client = self._http_client
        self._http_client = None
        if client is not None:
            await client.aclose()

    def _track_task(self, coro: Any) -> asyncio.Task[None]:
        """Create an asyncio task and track it to prevent garbage collection."""
        task = asyncio.create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        task.add_done_callback(self._on_task_done)
        return task

    @staticmethod
    def _on_task_done(task: asyncio.Task[None]) -> None:
        """Log unhandled exceptions from background tasks."""
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Unhandled exception in background task: %s", exc, exc_info=exc)

    # ========================================================================
    # Widget access
    # ========================================================================

    def _get_paper_list_widget(self) -> OptionList:
        return self.query_one("#paper-list", OptionList)

    def _get_paper_details_widget(self) -> PaperDetails:
        return self.query_one("#paper-details", PaperDetails)

    def _get_search_input_widget(self) -> Input:
        return self.query_one("#search-input", Input)

    def _get_search_container_widget(self) -> Vertical:
        return self.query_one("#search-container", Vertical)

    # ========================================================================
    # Fetching
    # ========================================================================

    def _http_error_message(self, exc: httpx.HTTPError | OSError) -> str:
        if isinstance(exc, httpx.HTTPStatusError):
            status_code = exc.response.status_code
            if status_code == 429:
                return build_actionable_error(
                    "load papers",
                    why="arXiv API rate limit reached (HTTP 429)",
                    next_step="wait a few seconds and press r",
                )
            if status_code >= 500:
                return build_actionable_error(
                    "load papers",
                    why=f"arXiv API is unavailable right now (HTTP {status_code})",
                    next_step="retry in a minute with r",
                )
            return build_actionable_error(
                "load papers",
                why=f"arXiv API rejected the request (HTTP {status_code})",
                next_step="check the category and author filters",
            )
        return build_actionable_error(
            "load papers",
            why="a network or I/O error occurred",
            next_step="check connectivity and press r",
        )

    async def _load_page(self, descriptor: QueryDescriptor) -> None:
        """Fetch one page and swap it in; on failure keep the current feed."""
        self._request_token += 1
        request_token = self._request_token
        self._fetch_in_progress = True
        self._update_status_bar()

        feed: Feed | None = None
        message: str | None = None
        try:
            self._last_request_at, waited = await enforce_rate_limit(
                last_request_at=self._last_request_at,
                min_interval_seconds=self._min_request_interval,
                now=time.monotonic,
                sleep=asyncio.sleep,
            )
            if waited:
                logger.debug("Rate limited: waited %.2fs", waited)
            feed = await self._fetch_page_fn(descriptor, client=self._http_client)
        except (httpx.HTTPError, OSError) as exc:
            logger.warning("arXiv fetch failed: %s", exc, exc_info=True)
            message = self._http_error_message(exc)
        except FeedParseError as exc:
            logger.warning("arXiv response unreadable: %s", exc)
            message = build_read_results_error(str(exc))
        finally:
            if request_token == self._request_token:
                self._fetch_in_progress = False

        # Ignore stale responses superseded by a newer request
        if request_token != self._request_token:
            logger.debug("Dropping stale response for %s", descriptor.url)
            return

        if feed is None:
            self._last_error = message
            self._refresh_list_view()
            if message:
                self.notify(message, title="arXiv", severity="error", timeout=8)
            return

        if descriptor.start > 0 and not feed.papers:
            self._update_status_bar()
            self.notify("No more results", title="arXiv")
            return

        self._last_error = None
        self._descriptor = descriptor
        self.sub_title = format_query_label(descriptor)
        self._model.replace_feed(feed)
        self._refresh_list_view()
        self.notify(build_feed_loaded_message(feed), title="arXiv")

    def _request_page(self, descriptor: QueryDescriptor) -> None:
        if self._fetch_in_progress:
            self.notify("Request already in progress", title="arXiv")
            return
        self._track_task(self._load_page(descriptor))

    def action_refresh(self) -> None:
        self._request_page(self._descriptor)

    def action_next_page(self) -> None:
        self._request_page(self._descriptor.next_page())

    def action_prev_page(self) -> None:
        if self._descriptor.start <= 0:
            self.notify("Already at first page", title="arXiv")
            return
        self._request_page(self._descriptor.previous_page())

    # ========================================================================
    # Rendering
    # ========================================================================

    def _refresh_list_view(self) -> None:
        """Rebuild the option list from the model snapshot."""
        snapshot = self._model.snapshot()
        try:
            option_list = self._get_paper_list_widget()
        except NoMatches:
            return
        option_list.clear_options()
        if snapshot.visible:
            option_list.add_options(
                [Option(render_paper_option(paper, self._matchers)) for paper in snapshot.visible]
            )
            option_list.highlighted = snapshot.selected_index
        else:
            option_list.add_option(Option(self._empty_list_message(), disabled=True))
        self._update_details()
        self._update_header()
        self._update_status_bar()

    def _empty_list_message(self) -> str:
        if self._fetch_in_progress:
            return "[dim italic]Loading papers...[/]"
        if self._model.filter.is_active:
            return "[dim italic]No papers match the current filter[/]"
        return "[dim italic]No papers[/]"

    def _sync_selection(self) -> None:
        """Move the OptionList highlight to the model's selection."""
        try:
            option_list = self._get_paper_list_widget()
        except NoMatches:
            return
        if len(self._model):
            option_list.highlighted = self._model.selected_index
        self._update_details()

    def _update_details(self) -> None:
        try:
            details = self._get_paper_details_widget()
        except NoMatches:
            return
        details.update_paper(self._model.current_paper(), self._matchers)

    def _update_header(self) -> None:
        snapshot = self._model.snapshot()
        total = len(snapshot.feed)
        shown = len(snapshot.visible)
        count = f"{shown}/{total}" if shown != total else str(total)
        suffix = ""
        if snapshot.filter.new_only:
            suffix += f" · [{THEME_COLORS['green']}]new only[/]"
        if snapshot.filter.pinned_only:
            suffix += f" · [{THEME_COLORS['pink']}]pinned authors[/]"
        try:
            self.query_one("#list-header", Label).update(f" [bold]Papers[/] ({count}){suffix}")
        except NoMatches:
            return

    def _update_status_bar(self) -> None:
        parts = [format_query_label(self._descriptor)]
        if self._fetch_in_progress:
            parts.append("loading...")
        dropped = self._model.current_feed.dropped_count
        if dropped:
            parts.append(f"{dropped} skipped")
        if self._last_error:
            parts.append(f"[{THEME_COLORS['pink']}]last request failed[/]")
        try:
            self.query_one("#status-bar", Label).update(" · ".join(parts))
        except NoMatches:
            return

    # ========================================================================
    # Navigation
    # ========================================================================

    @on(OptionList.OptionHighlighted, "#paper-list")
    def on_paper_highlighted(self, event: OptionList.OptionHighlighted) -> None:
        """Follow highlight changes made by the OptionList itself (mouse, arrows)."""
        # Stale events from earlier programmatic moves no longer match the widget
        if event.option_index is None or event.option_list.highlighted != event.option_index:
            return
        if not self._model.visible_papers or event.option_index == self._model.selected_index:
            return
        self._model.select(event.option_index)
        self._update_details()

    def _visible_option_rows(self) -> int:
        try:
            height = self._get_paper_list_widget().size.height
        except NoMatches:
            return 1
        return max(height // OPTION_HEIGHT, 1)

    def action_cursor_down(self) -> None:
        self._model.select_next()
        self._sync_selection()

    def action_cursor_up(self) -> None:
        self._model.select_previous()
        self._sync_selection()

    def action_jump_top(self) -> None:
        self._model.jump_to_top()
        self._sync_selection()

    def action_jump_bottom(self) -> None:
        self._model.jump_to_bottom()
        self._sync_selection()

    def action_half_page_down(self) -> None:
        self._model.scroll_down(self._model.half_page_step(self._visible_option_rows()))
        self._sync_selection()

    def action_half_page_up(self) -> None:
        self._model.scroll_up(self._model.half_page_step(self._visible_option_rows()))
        self._sync_selection()

    # ========================================================================
    # Filtering
    # ========================================================================

    def _apply_filter(self, paper_filter: PaperFilter) -> None:
        self._model.set_filter(paper_filter)
        self._refresh_list_view()

    def action_toggle_search(self) -> None:
        container = self._get_search_container_widget()
        if container.has_class("visible"):
            container.remove_class("visible")
            self._get_paper_list_widget().focus()
        else:
            container.add_class("visible")
            self._get_search_input_widget().focus()

    def action_cancel_search(self) -> None:
        container = self._get_search_container_widget()
        if not container.has_class("visible"):
            return
        container.remove_class("visible")
        self._get_search_input_widget().value = ""
        self._apply_filter(replace(self._model.filter, text=""))
        self._get_paper_list_widget().focus()

    @on(Input.Changed, "#search-input")
    def on_search_changed(self, event: Input.Changed) -> None:
        """Debounce filter updates while typing."""
        self._pending_query = event.value
        old_timer = self._search_timer
        self._search_timer = None
        if old_timer is not None:
            old_timer.stop()
        self._search_timer = self.set_timer(SEARCH_DEBOUNCE_DELAY, self._debounced_filter)

    def _debounced_filter(self) -> None:
        self._search_timer = None
        if self._pending_query != self._model.filter.text:
            self._apply_filter(replace(self._model.filter, text=self._pending_query))

    @on(Input.Submitted, "#search-input")
    def on_search_submitted(self, event: Input.Submitted) -> None:
        timer = self._search_timer
        self._search_timer = None
        if timer is not None:
            timer.stop()
        self._apply_filter(replace(self._model.filter, text=event.value))
        self._get_search_container_widget().remove_class("visible")
        self._get_paper_list_widget().focus()

    def action_toggle_new_only(self) -> None:
        current = self._model.filter
        self._apply_filter(replace(current, new_only=not current.new_only))

    def action_toggle_pinned_only(self) -> None:
        current = self._model.filter
        if not current.pinned_only and not self._matchers.authors:
            self.notify(
                build_actionable_warning(
                    "No pinned authors are configured",
                    next_step="press c to add pinned authors",
                ),
                title="Filter",
                severity="warning",
            )
            return
        self._apply_filter(replace(current, pinned_only=not current.pinned_only))

    # ========================================================================
    # Help & Settings
    # ========================================================================

    def action_show_help(self) -> None:
        """Show the help overlay with all keyboard shortcuts."""
        self.push_screen(HelpScreen(build_help_sections(self.BINDINGS)))

    def action_show_config(self) -> None:
        """Show the configuration dialog; saved pinned terms apply immediately."""
        self.push_screen(ConfigScreen(self._config, get_config_path()), self._on_config_edited)

    def _on_config_edited(self, result: AppConfig | None) -> None:
        if result is None:
            return
        self._config = result
        self._apply_search_terms()
        if self._save_config_fn(self._config):
            self.notify("Pinned terms saved", title="Config")
            return
        self.notify(
            build_actionable_warning(
                "Pinned terms apply to this session only",
                why="the config file could not be written",
                next_step="check permissions on the config directory",
            ),
            title="Config",
            severity="warning",
        )

    def _apply_search_terms(self) -> None:
        """Recompile matchers from the config and re-render with them."""
        self._matchers = FieldMatchers.from_terms(self._config.search_terms())
        self._model.set_matcher(self._matchers.authors)
        if self._model.filter.pinned_only and not self._matchers.authors:
            self._model.set_filter(replace(self._model.filter, pinned_only=False))
        try:
            details = self._get_paper_details_widget()
        except NoMatches:
            return
        details.clear_cache()
        self._refresh_list_view()


__all__ = [
    "OPTION_HEIGHT",
    "SEARCH_DEBOUNCE_DELAY",
    "ArxivLens",
]
