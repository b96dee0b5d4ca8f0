"""Widget chrome for the controls line and footer hints."""

from __future__ import annotations

from textual.widgets import Static

from character_browser.i18n import mode_label, sort_label, status_label, translate
from character_browser.models import MODE_PAGINATION, STATUS_ERROR, STATUS_FETCHING, FilterCriteria
from character_browser.query import escape_rich_text
from character_browser.themes import THEME_COLORS


class ControlsBar(Static):
    """One-line summary of mode, filters, sort and language."""

    DEFAULT_CSS = """
    ControlsBar {
        height: 1;
        padding: 0 1;
        background: #1e1e1e;
        color: #f8f8f2;
    }
    """

    def show_controls(
        self,
        *,
        mode: str,
        criteria: FilterCriteria,
        sort_key: str,
        language: str,
    ) -> None:
        self.update(
            render_controls(mode=mode, criteria=criteria, sort_key=sort_key, language=language)
        )


def render_controls(*, mode: str, criteria: FilterCriteria, sort_key: str, language: str) -> str:
    """Build the controls line markup."""
    muted = THEME_COLORS["muted"]
    accent = THEME_COLORS["accent"]
    species = escape_rich_text(criteria.species) if criteria.species else translate(language, "all")
    entries = [
        (translate(language, "mode"), mode_label(language, mode)),
        (translate(language, "filter_status"), status_label(language, criteria.status)),
        (translate(language, "filter_species"), species),
        (translate(language, "sort_by"), sort_label(language, sort_key)),
        (translate(language, "change_language"), translate(language, "language_name")),
    ]
    return "  ".join(f"[{muted}]{label}:[/] [{accent}]{value}[/]" for label, value in entries)


def build_status_bar_text(
    *,
    mode: str,
    status: str,
    cursor: int,
    loaded: bool,
    shown: int,
    total: int,
    error_message: str | None,
    language: str,
) -> str:
    """Build the status bar line for the current load state."""
    if status == STATUS_ERROR:
        message = escape_rich_text(error_message or "")
        return f"[{THEME_COLORS['pink']}]{translate(language, 'error', message=message)}[/]"
    if status == STATUS_FETCHING and not loaded:
        return translate(language, "loading")

    parts = [translate(language, "shown", shown=shown, total=total)]
    if mode == MODE_PAGINATION and loaded:
        parts.insert(0, translate(language, "page", page=cursor))
    if status == STATUS_FETCHING:
        parts.append(translate(language, "loading_more"))
    return " · ".join(parts)


class ContextFooter(Static):
    """Context-sensitive footer showing relevant keybindings."""

    DEFAULT_CSS = """
    ContextFooter {
        dock: bottom;
        height: 1;
        background: #272822;
        color: #75715e;
        padding: 0 1;
    }
    """

    def render_bindings(self, bindings: list[tuple[str, str]]) -> None:
        """Update the footer with a list of (key, label) binding hints."""
        accent = THEME_COLORS["accent"]
        muted = THEME_COLORS["muted"]
        parts = [
            f"[bold {accent}]{escape_rich_text(key)}[/] [{muted}]{label}[/]"
            for key, label in bindings
        ]
        self.update("  ".join(parts))


__all__ = ["ContextFooter", "ControlsBar", "build_status_bar_text", "render_controls"]
