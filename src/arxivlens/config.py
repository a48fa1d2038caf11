"""Configuration persistence: load and save the user's config file."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from arxivlens.errors import InvalidCategoryError
from arxivlens.highlight import SearchTermSet, TermCategory
from arxivlens.models import (
    ARXIV_API_DEFAULT_MAX_RESULTS,
    ARXIV_API_MAX_RESULTS_LIMIT,
    CONFIG_APP_NAME,
    DEFAULT_CATEGORY,
)
from arxivlens.query import validate_category

logger = logging.getLogger(__name__)

# ============================================================================
# Configuration Persistence
# ============================================================================
#
# File layout (every key optional):
#
#   {
#     "query":     {"category": "quant-ph", "max_results": 200, "new_only": true},
#     "highlight": {"authors": ["..."], "keywords": ["..."]},
#     "theme":     {"pink": "#ff79c6", ...}
#   }
#
# _dict_to_config() returns a valid AppConfig for any input: wrong types fall
# back to defaults, invalid categories and blank terms are dropped with a
# warning, and max_results is clamped to 1..ARXIV_API_MAX_RESULTS_LIMIT.
#
CONFIG_FILENAME = "config.json"


@dataclass(slots=True)
class AppConfig:
    """User configuration passed into the query and highlight layers."""

    category: str = DEFAULT_CATEGORY
    max_results: int = ARXIV_API_DEFAULT_MAX_RESULTS
    new_only: bool = False
    authors: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    theme: dict[str, str] = field(default_factory=dict)

    def search_terms(self) -> SearchTermSet:
        """Build the highlight term set; blank terms are skipped."""
        pairs: list[tuple[str, TermCategory]] = []
        for category, values in ((TermCategory.AUTHOR, self.authors), (TermCategory.KEYWORD, self.keywords)):
            for value in values:
                if value.strip():
                    pairs.append((value, category))
                else:
                    logger.warning("Ignoring blank %s highlight term", category.value)
        return SearchTermSet(pairs)


def get_config_path() -> Path:
    """Get the path to the configuration file.

    Uses platformdirs for cross-platform config directory:
    - Linux: ~/.config/arxivlens/config.json
    - macOS: ~/Library/Application Support/arxivlens/config.json
    - Windows: %APPDATA%/arxivlens/config.json
    """
    return Path(user_config_dir(CONFIG_APP_NAME)) / CONFIG_FILENAME


def _safe_get(data: dict, key: str, default: Any, expected_type: type) -> Any:
    """Safely get a value from dict with type validation.

    Returns the default if key is missing or value has wrong type.
    """
    value = data.get(key, default)
    if not isinstance(value, expected_type) or (expected_type is int and isinstance(value, bool)):
        return default
    return value


def _coerce_max_results(value: Any) -> int:
    """Validate and clamp the configured page size for arXiv API queries."""
    if not isinstance(value, int) or isinstance(value, bool):
        return ARXIV_API_DEFAULT_MAX_RESULTS
    return max(1, min(value, ARXIV_API_MAX_RESULTS_LIMIT))


def _parse_category(raw: Any) -> str:
    if not isinstance(raw, str):
        return DEFAULT_CATEGORY
    try:
        return validate_category(raw)
    except InvalidCategoryError as e:
        logger.warning("%s; using %s", e, DEFAULT_CATEGORY)
        return DEFAULT_CATEGORY


def _parse_terms(section: dict[str, Any], key: str) -> list[str]:
    """Parse a list of highlight terms, dropping non-strings and blanks."""
    raw = _safe_get(section, key, [], list)
    terms: list[str] = []
    for item in raw:
        if not isinstance(item, str) or not item.strip():
            logger.warning("Ignoring invalid %s entry in config: %r", key, item)
            continue
        terms.append(item.strip())
    return terms


def _parse_str_dict(data: dict[str, Any], key: str) -> dict[str, str]:
    """Parse a dict[str, str] field from config data with type validation."""
    raw = _safe_get(data, key, {}, dict)
    return {k: v for k, v in raw.items() if isinstance(k, str) and isinstance(v, str)}


def _dict_to_config(data: dict[str, Any]) -> AppConfig:
    """Deserialize a dictionary to AppConfig with type validation."""
    if not isinstance(data, dict):
        raise TypeError(f"expected a JSON object, got {type(data).__name__}")
    query = _safe_get(data, "query", {}, dict)
    highlight = _safe_get(data, "highlight", {}, dict)
    return AppConfig(
        category=_parse_category(query.get("category", DEFAULT_CATEGORY)),
        max_results=_coerce_max_results(query.get("max_results", ARXIV_API_DEFAULT_MAX_RESULTS)),
        new_only=_safe_get(query, "new_only", False, bool),
        authors=_parse_terms(highlight, "authors"),
        keywords=_parse_terms(highlight, "keywords"),
        theme=_parse_str_dict(data, "theme"),
    )


def _config_to_dict(config: AppConfig) -> dict[str, Any]:
    """Serialize AppConfig to a JSON-compatible dictionary."""
    return {
        "query": {
            "category": config.category,
            "max_results": _coerce_max_results(config.max_results),
            "new_only": config.new_only,
        },
        "highlight": {
            "authors": list(config.authors),
            "keywords": list(config.keywords),
        },
        "theme": dict(config.theme),
    }


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from disk.

    Returns default config if file doesn't exist or is corrupted.
    Logs specific errors to help diagnose config issues.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        return AppConfig()

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
        return _dict_to_config(data)
    except json.JSONDecodeError as e:
        logger.warning("Config file has invalid JSON, using defaults: %s", e)
        return AppConfig()
    except (KeyError, TypeError) as e:
        logger.warning("Config file has invalid structure, using defaults: %s", e)
        return AppConfig()
    except OSError as e:
        logger.warning("Could not read config file, using defaults: %s", e)
        return AppConfig()


def save_config(config: AppConfig, path: Path | None = None) -> bool:
    """Write the config as indented JSON, replacing the file atomically.

    The JSON goes to a temp file beside the target first, so readers see
    either the old config or the new one. Returns False after logging when
    the file cannot be written.
    """
    config_path = path or get_config_path()
    payload = json.dumps(_config_to_dict(config), indent=2, ensure_ascii=False) + "\n"
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=config_path.parent, prefix=".config-", suffix=".tmp")
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_path, config_path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise
    except OSError as e:
        logger.error("Could not save config to %s: %s", config_path, e)
        return False
    logger.debug("Saved config to %s", config_path)
    return True


__all__ = [
    "CONFIG_FILENAME",
    "AppConfig",
    "get_config_path",
    "load_config",
    "save_config",
]
