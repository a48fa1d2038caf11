"""User-facing copy for notifications, status lines, and CLI errors."""

from __future__ import annotations

from arxivlens.models import Feed


def _ensure_sentence(text: str) -> str:
    """Return text with terminal sentence punctuation."""
    cleaned = text.strip()
    if not cleaned:
        return ""
    if cleaned.endswith((".", "!", "?")):
        return cleaned
    return f"{cleaned}."


def build_next_step_hint(next_step: str) -> str:
    return f"Next step: {_ensure_sentence(next_step)}"


def build_actionable_error(
    action: str,
    *,
    next_step: str,
    why: str | None = None,
) -> str:
    """Build a 2-3 line error message: what failed, why, what to try."""
    lines = [f"Could not {action.strip()}."]
    if why:
        lines.append(f"Why: {_ensure_sentence(why)}")
    lines.append(build_next_step_hint(next_step))
    return "\n".join(lines)


def build_actionable_warning(
    message: str,
    *,
    next_step: str,
    why: str | None = None,
) -> str:
    lines = [_ensure_sentence(message)]
    if why:
        lines.append(f"Why: {_ensure_sentence(why)}")
    lines.append(build_next_step_hint(next_step))
    return "\n".join(lines)


def _plural(count: int, noun: str, plural: str | None = None) -> str:
    if count == 1:
        return f"{count} {noun}"
    return f"{count} {plural or noun + 's'}"


def build_feed_loaded_message(feed: Feed) -> str:
    """Summarize a freshly loaded feed, including skipped entries."""
    message = f"Loaded {_plural(len(feed), 'paper')}"
    if feed.total_results is not None:
        message += f" of {feed.total_results}"
    if feed.dropped_count:
        message += f" ({_plural(feed.dropped_count, 'entry', 'entries')} skipped)"
    return _ensure_sentence(message)


def build_read_results_error(why: str) -> str:
    """Error shown when a response could not be turned into a feed."""
    return build_actionable_error(
        "read results",
        why=why,
        next_step="press r to retry; the previous list is kept",
    )


__all__ = [
    "build_actionable_error",
    "build_actionable_warning",
    "build_feed_loaded_message",
    "build_next_step_hint",
    "build_read_results_error",
]
