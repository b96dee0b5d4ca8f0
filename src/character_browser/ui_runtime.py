"""Internal runtime helpers for TUI widget refs and refresh orchestration."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from textual.widgets import Label, OptionList

from character_browser.widgets import ContextFooter, ControlsBar


@dataclass(slots=True)
class UiRefs:
    """Cached widget references for hot UI paths.

    These refs are internal-only and must not be treated as a public API.
    """

    controls_bar: ControlsBar | None = None
    character_list: OptionList | None = None
    status_bar: Label | None = None
    footer: ContextFooter | None = None

    def reset(self) -> None:
        """Clear all cached refs (for unmount/teardown)."""
        self.controls_bar = None
        self.character_list = None
        self.status_bar = None
        self.footer = None


@dataclass(slots=True)
class UiRefreshCoordinator:
    """Small boundary object for orchestrating common refresh sequences."""

    refresh_list_view: Callable[[], None]
    update_controls: Callable[[], None]
    update_status_bar: Callable[[], None]
    update_footer: Callable[[], None]

    def apply_state_refresh(self) -> None:
        """Run the full refresh sequence after any load-state change."""
        self.refresh_list_view()
        self.update_controls()
        self.update_status_bar()
        self.update_footer()


__all__ = [
    "UiRefreshCoordinator",
    "UiRefs",
]
