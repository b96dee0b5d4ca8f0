"""Widget classes and render helpers for the character list UI."""

from character_browser.widgets.chrome import (
    ContextFooter,
    ControlsBar,
    build_status_bar_text,
    render_controls,
)
from character_browser.widgets.listing import (
    IMAGE_URL_MAX_LEN,
    build_list_empty_message,
    render_character_option,
    render_sentinel_row,
)

__all__ = [
    "IMAGE_URL_MAX_LEN",
    "ContextFooter",
    "ControlsBar",
    "build_list_empty_message",
    "build_status_bar_text",
    "render_character_option",
    "render_controls",
    "render_sentinel_row",
]
