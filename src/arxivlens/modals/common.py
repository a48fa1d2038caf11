"""Help overlay and the configuration dialog for pinned terms."""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path

from rich.markup import escape as escape_markup
from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, Static

from arxivlens.config import AppConfig
from arxivlens.themes import THEME_COLORS

logger = logging.getLogger(__name__)

# ============================================================================
# Help Overlay
# ============================================================================


class HelpScreen(ModalScreen[None]):
    """Overlay listing every key binding, grouped by section."""

    BINDINGS = [
        Binding("question_mark", "dismiss", "Close", show=False),
        Binding("escape", "dismiss", "Close"),
        Binding("q", "dismiss", "Close", show=False),
    ]

    CSS = """
    HelpScreen {
        align: center middle;
    }

    #help-dialog {
        width: 70%;
        height: 80%;
        min-width: 50;
        min-height: 16;
        background: $th-background;
        border: tall $th-accent;
        padding: 0 2;
    }

    #help-title {
        text-style: bold;
        color: $th-accent-alt;
        text-align: center;
        margin-bottom: 1;
    }

    .help-section-title {
        text-style: bold;
    }

    .help-keys {
        padding-left: 2;
        margin-bottom: 1;
        color: $th-text;
    }

    #help-footer {
        text-align: center;
        color: $th-muted;
    }
    """

    def __init__(self, sections: list[tuple[str, list[tuple[str, str]]]]) -> None:
        super().__init__()
        self._sections = sections

    @property
    def sections(self) -> list[tuple[str, list[tuple[str, str]]]]:
        return self._sections

    @staticmethod
    def _render_section_lines(entries: list[tuple[str, str]]) -> str:
        green = THEME_COLORS["green"]
        return "\n".join(
            f"[{green}]{escape_markup(key):>14}[/]  {escape_markup(description)}" for key, description in entries
        )

    def compose(self) -> ComposeResult:
        with VerticalScroll(id="help-dialog"):
            yield Label("Keyboard Shortcuts", id="help-title")
            for section_name, entries in self._sections:
                if not entries:
                    continue
                yield Label(f"[{THEME_COLORS['accent']}]{section_name}[/]", classes="help-section-title")
                yield Static(self._render_section_lines(entries), classes="help-keys")
            yield Label("Close: ? / Esc / q", id="help-footer")

    def action_dismiss(self) -> None:
        """Close the help screen."""
        self.dismiss(None)


# ============================================================================
# Configuration
# ============================================================================


def parse_term_list(text: str) -> list[str]:
    """Split a comma-separated input into trimmed, non-empty terms.

    >>> parse_term_list(" Alice Zhang, , Bob Li ")
    ['Alice Zhang', 'Bob Li']
    """
    return [term.strip() for term in text.split(",") if term.strip()]


class ConfigScreen(ModalScreen[AppConfig | None]):
    """Show the active configuration and edit the pinned authors and keywords.

    Dismisses with an updated copy of the config on save, or None on cancel.
    """

    BINDINGS = [
        Binding("ctrl+s", "save", "Save"),
        Binding("escape", "cancel", "Cancel"),
    ]

    CSS = """
    ConfigScreen {
        align: center middle;
    }

    #config-dialog {
        width: 60%;
        height: auto;
        min-width: 50;
        background: $th-background;
        border: tall $th-accent;
        padding: 0 2;
    }

    #config-title {
        text-style: bold;
        color: $th-accent-alt;
        margin-bottom: 1;
    }

    #config-summary {
        margin-bottom: 1;
    }

    .config-label {
        color: $th-muted;
    }

    #config-dialog Input {
        width: 100%;
        background: $th-panel;
        border: none;
        margin-bottom: 1;
    }

    #config-dialog Input:focus {
        border-left: tall $th-accent;
    }

    #config-buttons {
        height: auto;
        align: right middle;
    }

    #config-buttons Button {
        margin-left: 1;
    }
    """

    def __init__(self, config: AppConfig, config_path: Path) -> None:
        super().__init__()
        self._config = config
        self._config_path = config_path

    def _summary_markup(self) -> str:
        accent = THEME_COLORS["accent"]
        new_only = "yes" if self._config.new_only else "no"
        return "\n".join(
            [
                f"Default category: [{accent}]{self._config.category}[/]",
                f"Results per page: [{accent}]{self._config.max_results}[/]",
                f"New submissions only: [{accent}]{new_only}[/]",
                f"[dim]{escape_markup(str(self._config_path))}[/]",
            ]
        )

    def compose(self) -> ComposeResult:
        with Vertical(id="config-dialog"):
            yield Label("Configuration", id="config-title")
            yield Static(self._summary_markup(), id="config-summary")
            yield Label("Pinned authors (comma-separated)", classes="config-label")
            yield Input(
                value=", ".join(self._config.authors),
                placeholder="None",
                id="config-authors",
            )
            yield Label("Keywords (comma-separated)", classes="config-label")
            yield Input(
                value=", ".join(self._config.keywords),
                placeholder="None",
                id="config-keywords",
            )
            with Horizontal(id="config-buttons"):
                yield Button("Cancel", variant="default", id="cancel-btn")
                yield Button("Save (Ctrl+S)", variant="primary", id="save-btn")

    def on_mount(self) -> None:
        self.query_one("#config-authors", Input).focus()

    def action_save(self) -> None:
        authors = parse_term_list(self.query_one("#config-authors", Input).value)
        keywords = parse_term_list(self.query_one("#config-keywords", Input).value)
        logger.debug("Pinned terms edited: %d authors, %d keywords", len(authors), len(keywords))
        self.dismiss(replace(self._config, authors=authors, keywords=keywords))

    def action_cancel(self) -> None:
        self.dismiss(None)

    @on(Input.Submitted)
    def on_input_submitted(self) -> None:
        self.action_save()

    @on(Button.Pressed, "#save-btn")
    def on_save_pressed(self) -> None:
        self.action_save()

    @on(Button.Pressed, "#cancel-btn")
    def on_cancel_pressed(self) -> None:
        self.action_cancel()


__all__ = [
    "ConfigScreen",
    "HelpScreen",
    "parse_term_list",
]
