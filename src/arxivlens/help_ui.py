"""Help screen section builders derived from the app's key bindings."""

from __future__ import annotations

from collections.abc import Sequence

from textual.binding import Binding, BindingType

HELP_SECTION_ACTIONS: list[tuple[str, list[str]]] = [
    (
        "Navigation",
        [
            "cursor_down",
            "cursor_up",
            "jump_top",
            "jump_bottom",
            "half_page_down",
            "half_page_up",
        ],
    ),
    (
        "Search & Filter",
        [
            "toggle_search",
            "cancel_search",
            "toggle_new_only",
            "toggle_pinned_only",
        ],
    ),
    (
        "arXiv",
        [
            "refresh",
            "next_page",
            "prev_page",
        ],
    ),
    (
        "View & Settings",
        [
            "show_config",
            "show_help",
            "quit",
        ],
    ),
]

HELP_DESCRIPTION_OVERRIDES: dict[str, str] = {
    "cancel_search": "Clear search",
    "toggle_pinned_only": "Show only pinned authors",
    "toggle_new_only": "Show only new submissions",
    "show_config": "Configuration and pinned terms",
    "show_help": "This help",
}

_KEY_NAMES = {
    "slash": "/",
    "question_mark": "?",
    "bracketleft": "[",
    "bracketright": "]",
    "escape": "Esc",
}


def format_help_key(key: str) -> str:
    """Turn a Textual key list like ``"j,down"`` into ``"j / down"``.

    >>> format_help_key("ctrl+d")
    'Ctrl+d'
    """
    names = []
    for name in key.split(","):
        name = _KEY_NAMES.get(name.strip(), name.strip())
        if name.startswith("ctrl+"):
            name = "Ctrl+" + name.removeprefix("ctrl+")
        names.append(name)
    return " / ".join(names)


def _binding_for_action(bindings: Sequence[BindingType], action_name: str) -> Binding | None:
    for binding in bindings:
        if isinstance(binding, Binding) and binding.action == action_name:
            return binding
    return None


def build_help_sections(bindings: Sequence[BindingType]) -> list[tuple[str, list[tuple[str, str]]]]:
    """Group bindings into titled (key, description) sections.

    Actions without a binding are left out, so the help text never
    advertises a key the app does not handle.
    """
    sections: list[tuple[str, list[tuple[str, str]]]] = []
    for section_name, actions in HELP_SECTION_ACTIONS:
        entries: list[tuple[str, str]] = []
        for action_name in actions:
            binding = _binding_for_action(bindings, action_name)
            if binding is None:
                continue
            description = HELP_DESCRIPTION_OVERRIDES.get(action_name, binding.description)
            entries.append((format_help_key(binding.key), description))
        sections.append((section_name, entries))
    return sections


__all__ = [
    "HELP_DESCRIPTION_OVERRIDES",
    "HELP_SECTION_ACTIONS",
    "build_help_sections",
    "format_help_key",
]
