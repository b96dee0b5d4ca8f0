"""UI-facing copy builders for notifications and error messages."""

from __future__ import annotations

from character_browser.models import FetchFailure


def _ensure_sentence(text: str) -> str:
    """Return text with terminal sentence punctuation."""
    cleaned = text.strip()
    if not cleaned:
        return ""
    if cleaned.endswith((".", "!", "?")):
        return cleaned
    return f"{cleaned}."


def build_actionable_error(
    action: str,
    *,
    next_step: str,
    why: str | None = None,
) -> str:
    """Build a 2-3 line actionable error message."""
    lines = [f"Could not {action.strip()}."]
    if why:
        lines.append(f"Why: {_ensure_sentence(why)}")
    lines.append(build_next_step_hint(next_step))
    return "\n".join(lines)


def build_next_step_hint(next_step: str) -> str:
    """Build a canonical next-step guidance line."""
    return f"Next step: {_ensure_sentence(next_step)}"


def build_fetch_error_message(
    failure: FetchFailure, *, retry_hint: str = "press r to retry"
) -> str:
    """Build the notification shown when a page fetch fails."""
    action = f"load page {failure.page}"
    status_code = failure.status_code
    if status_code == 429:
        return build_actionable_error(
            action,
            why="the character API rate limit was reached (HTTP 429)",
            next_step=f"wait a few seconds and {retry_hint}",
        )
    if status_code is not None and status_code >= 500:
        return build_actionable_error(
            action,
            why=f"the character API is unavailable right now (HTTP {status_code})",
            next_step=f"{retry_hint} in a minute",
        )
    if status_code is not None:
        return build_actionable_error(
            action,
            why=f"the character API rejected the request (HTTP {status_code})",
            next_step=f"check the configured api_url and {retry_hint}",
        )
    return build_actionable_error(
        action,
        why=str(failure) or "a network or I/O error occurred",
        next_step=f"check connectivity and {retry_hint}",
    )


__all__ = [
    "build_actionable_error",
    "build_fetch_error_message",
    "build_next_step_hint",
]
