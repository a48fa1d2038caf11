"""CSS and key bindings for the ArxivLens app."""

from __future__ import annotations

from textual.binding import Binding, BindingType

APP_CSS = """
Screen {
    background: $th-background;
}

Header {
    background: $th-panel-alt;
    color: $th-text;
}

#main-container {
    height: 1fr;
}

#left-pane {
    width: 2fr;
    min-width: 40;
    height: 100%;
    border: tall $th-highlight;
    background: $th-panel;
}

#left-pane:focus-within {
    border: tall $th-accent;
}

#right-pane {
    width: 3fr;
    height: 100%;
    border: tall $th-highlight;
    background: $th-panel;
}

#list-header {
    padding: 0 1;
    color: $th-accent;
    text-style: bold;
}

#paper-list {
    height: 1fr;
    scrollbar-gutter: stable;
}

#paper-list > .option-list--option-highlighted {
    background: $th-highlight;
}

#paper-list:focus > .option-list--option-highlighted {
    background: $th-highlight-focus;
}

#details-scroll {
    height: 1fr;
    padding: 0 1;
}

#search-container {
    height: auto;
    padding: 0 1;
    display: none;
}

#search-container.visible {
    display: block;
}

#search-input {
    width: 100%;
    border: tall $th-accent;
    background: $th-background;
}

VerticalScroll {
    scrollbar-background: $th-scrollbar-bg;
    scrollbar-color: $th-scrollbar-thumb;
    scrollbar-color-hover: $th-scrollbar-hover;
    scrollbar-color-active: $th-scrollbar-active;
}

#status-bar {
    padding: 0 1;
    color: $th-muted;
}
"""

APP_BINDINGS: list[BindingType] = [
    Binding("q", "quit", "Quit"),
    Binding("j,down", "cursor_down", "Down", show=False),
    Binding("k,up", "cursor_up", "Up", show=False),
    Binding("g,home", "jump_top", "Top", show=False),
    Binding("G,end", "jump_bottom", "Bottom", show=False),
    Binding("ctrl+d", "half_page_down", "Half page down", show=False),
    Binding("ctrl+u", "half_page_up", "Half page up", show=False),
    Binding("slash", "toggle_search", "Search"),
    Binding("escape", "cancel_search", "Cancel", show=False),
    Binding("n", "toggle_new_only", "New only"),
    Binding("p", "toggle_pinned_only", "Pinned"),
    Binding("r", "refresh", "Refresh"),
    Binding("bracketright", "next_page", "Next page", show=False),
    Binding("bracketleft", "prev_page", "Previous page", show=False),
    Binding("c", "show_config", "Config"),
    Binding("question_mark", "show_help", "Help (?)"),
]

__all__ = [
    "APP_BINDINGS",
    "APP_CSS",
]
