"""Internal UI constants for the CharacterBrowser app."""

from __future__ import annotations

from textual.binding import Binding, BindingType

APP_CSS = """
Screen {
    background: #272822;
}

Header {
    background: #3e3d32;
    color: #f8f8f2;
}

#character-list {
    height: 1fr;
    border: tall #49483e;
    background: #1e1e1e;
    scrollbar-gutter: stable;
}

#character-list:focus {
    border: tall #66d9ef;
}

#status-bar {
    width: 100%;
    padding: 0 1;
    background: #1e1e1e;
    color: #75715e;
}

#status-bar.error {
    color: #f92672;
}
"""

APP_BINDINGS: list[BindingType] = [
    Binding("q", "quit", "Quit", show=False),
    Binding("m", "toggle_mode", "Mode", show=False),
    Binding("n", "next_page", "Next", show=False),
    Binding("right", "next_page", "Next", show=False),
    Binding("p", "previous_page", "Previous", show=False),
    Binding("left", "previous_page", "Previous", show=False),
    Binding("f", "cycle_status", "Status", show=False),
    Binding("g", "cycle_species", "Species", show=False),
    Binding("s", "cycle_sort", "Sort", show=False),
    Binding("l", "cycle_language", "Language", show=False),
    Binding("r", "retry", "Retry", show=False),
    Binding("j", "cursor_down", "Down", show=False),
    Binding("k", "cursor_up", "Up", show=False),
]

# (key, translation key) pairs shown in the footer per load mode
FOOTER_HINTS_PAGINATION: list[tuple[str, str]] = [
    ("p", "previous"),
    ("n", "next"),
    ("m", "mode"),
    ("f", "status"),
    ("g", "species"),
    ("s", "sort_by"),
    ("l", "change_language"),
]
FOOTER_HINTS_INFINITE: list[tuple[str, str]] = [
    ("m", "mode"),
    ("f", "status"),
    ("g", "species"),
    ("s", "sort_by"),
    ("l", "change_language"),
]

__all__ = [
    "APP_BINDINGS",
    "APP_CSS",
    "FOOTER_HINTS_INFINITE",
    "FOOTER_HINTS_PAGINATION",
]
