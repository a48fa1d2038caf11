"""Color palette, highlight colors, and the Textual theme built from them."""

from __future__ import annotations

from collections.abc import Mapping

from textual.theme import Theme as TextualTheme

from arxivlens.highlight import TermCategory

THEME_NAME = "arxivlens-monokai"

DEFAULT_THEME: dict[str, str] = {
    "background": "#272822",
    "panel": "#1e1e1e",
    "panel_alt": "#3e3d32",
    "border": "#75715e",
    "text": "#f8f8f2",
    "muted": "#75715e",
    "accent": "#66d9ef",
    "accent_alt": "#e6db74",
    "green": "#a6e22e",
    "yellow": "#e6db74",
    "orange": "#fd971f",
    "pink": "#f92672",
    "purple": "#ae81ff",
    "highlight": "#49483e",
    "highlight_focus": "#5a5950",
    "scrollbar_background": "#3e3d32",
    "scrollbar": "#75715e",
    "scrollbar_active": "#66d9ef",
    "scrollbar_hover": "#a8a8a2",
}

# Live palette used by renderers; apply_theme_overrides() updates it in place
THEME_COLORS: dict[str, str] = DEFAULT_THEME.copy()

# Pinned authors stand out in pink, keywords in yellow
HIGHLIGHT_COLOR_KEYS: dict[TermCategory, str] = {
    TermCategory.AUTHOR: "pink",
    TermCategory.KEYWORD: "yellow",
}

DEFAULT_CATEGORY_COLOR = "#888888"

DEFAULT_CATEGORY_COLORS: dict[str, str] = {
    "quant-ph": "#66d9ef",  # blue
    "cond-mat": "#a6e22e",  # green
    "hep-th": "#f92672",  # pink
    "hep-ph": "#fd971f",  # orange
    "gr-qc": "#ae81ff",  # purple
    "math-ph": "#e6db74",  # yellow
    "physics": "#a6e22e",  # green
    "cs": "#fd971f",  # orange
    "math": "#e6db74",  # yellow
    "stat": "#ae81ff",  # purple
}


def highlight_colors(palette: Mapping[str, str] | None = None) -> dict[TermCategory, str]:
    """Map each term category to a concrete color from the palette."""
    colors = palette if palette is not None else THEME_COLORS
    return {category: colors[key] for category, key in HIGHLIGHT_COLOR_KEYS.items()}


def get_category_color(category: str) -> str:
    """Color for an arXiv category; subject archives share their archive's color.

    >>> get_category_color("cond-mat.str-el") == DEFAULT_CATEGORY_COLORS["cond-mat"]
    True
    """
    if category in DEFAULT_CATEGORY_COLORS:
        return DEFAULT_CATEGORY_COLORS[category]
    archive = category.split(".", 1)[0]
    return DEFAULT_CATEGORY_COLORS.get(archive, DEFAULT_CATEGORY_COLOR)


def apply_theme_overrides(overrides: Mapping[str, str]) -> dict[str, str]:
    """Merge user color overrides into THEME_COLORS; unknown keys are ignored."""
    THEME_COLORS.clear()
    THEME_COLORS.update(DEFAULT_THEME)
    for key, value in overrides.items():
        if key in DEFAULT_THEME and value.startswith("#"):
            THEME_COLORS[key] = value
    return THEME_COLORS


def build_textual_theme(colors: Mapping[str, str] | None = None, name: str = THEME_NAME) -> TextualTheme:
    """Convert the palette to a Textual Theme with $th-* CSS variables."""
    colors = colors if colors is not None else THEME_COLORS
    variables = {
        "th-background": colors["background"],
        "th-panel": colors["panel"],
        "th-panel-alt": colors["panel_alt"],
        "th-highlight": colors["highlight"],
        "th-highlight-focus": colors["highlight_focus"],
        "th-accent": colors["accent"],
        "th-accent-alt": colors["accent_alt"],
        "th-muted": colors["muted"],
        "th-text": colors["text"],
        "th-scrollbar-bg": colors["scrollbar_background"],
        "th-scrollbar-thumb": colors["scrollbar"],
        "th-scrollbar-active": colors["scrollbar_active"],
        "th-scrollbar-hover": colors["scrollbar_hover"],
    }
    return TextualTheme(
        name=name,
        primary=colors["accent"],
        secondary=colors["accent_alt"],
        accent=colors["green"],
        foreground=colors["text"],
        background=colors["background"],
        surface=colors["panel"],
        panel=colors["panel_alt"],
        warning=colors["orange"],
        error=colors["pink"],
        success=colors["green"],
        dark=True,
        variables=variables,
    )


__all__ = [
    "DEFAULT_CATEGORY_COLOR",
    "DEFAULT_CATEGORY_COLORS",
    "DEFAULT_THEME",
    "HIGHLIGHT_COLOR_KEYS",
    "THEME_COLORS",
    "THEME_NAME",
    "apply_theme_overrides",
    "build_textual_theme",
    "get_category_color",
    "highlight_colors",
]
