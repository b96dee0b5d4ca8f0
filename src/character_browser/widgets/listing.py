"""List rendering helpers for character entries and the trailing sentinel row."""

from __future__ import annotations

from character_browser.i18n import status_label, translate
from character_browser.models import (
    MODE_INFINITE_SCROLL,
    STATUS_ERROR,
    STATUS_FETCHING,
    Character,
)
from character_browser.query import escape_rich_text, truncate_text
from character_browser.themes import THEME_COLORS, get_status_color

IMAGE_URL_MAX_LEN = 60  # Max image reference length shown per entry

_ICON_SETS: dict[str, dict[str, str]] = {
    "unicode": {
        "status": "●",
        "previous": "◀",
        "next": "▶",
        "end": "—",
    },
    "ascii": {
        "status": "*",
        "previous": "<",
        "next": ">",
        "end": "-",
    },
}
_ACTIVE_ICON_SET = _ICON_SETS["unicode"]


def set_ascii_icons(enabled: bool) -> None:
    """Switch list indicators between Unicode and ASCII modes."""
    global _ACTIVE_ICON_SET
    _ACTIVE_ICON_SET = _ICON_SETS["ascii"] if enabled else _ICON_SETS["unicode"]


def _render_name_line(character: Character, language: str) -> str:
    color = get_status_color(character.status)
    dot = f"[{color}]{_ACTIVE_ICON_SET['status']}[/]"
    name = escape_rich_text(character.name) or f"#{escape_rich_text(character.id)}"
    return f"{dot} [bold]{name}[/] [{color}]{status_label(language, character.status)}[/]"


def _render_details_line(character: Character, language: str) -> str:
    muted = THEME_COLORS["muted"]
    parts = [
        f"[{muted}]{translate(language, 'species')}:[/] {escape_rich_text(character.species)}",
        f"[{muted}]{translate(language, 'gender')}:[/] {escape_rich_text(character.gender)}",
    ]
    return "  ".join(parts)


def render_character_option(character: Character, *, language: str = "en") -> str:
    """Render a character as Rich markup for OptionList display."""
    muted = THEME_COLORS["muted"]
    lines = [
        _render_name_line(character, language),
        _render_details_line(character, language),
        f"[{muted}]{translate(language, 'origin')}:[/] {escape_rich_text(character.origin)}",
    ]
    if character.image:
        image = escape_rich_text(truncate_text(character.image, IMAGE_URL_MAX_LEN))
        lines.append(f"[dim]{image}[/]")
    return "\n".join(lines)


def render_sentinel_row(
    *,
    mode: str,
    status: str,
    cursor: int,
    loaded: bool,
    has_next: bool,
    can_request_previous: bool,
    can_request_next: bool,
    language: str = "en",
) -> str:
    """Render the last list row: page navigation or the infinite-scroll sentinel."""
    muted = THEME_COLORS["muted"]
    accent = THEME_COLORS["accent"]
    if status == STATUS_FETCHING:
        key = "loading_more" if mode == MODE_INFINITE_SCROLL and loaded else "loading"
        return f"[italic {accent}]{translate(language, key)}[/]"
    if status == STATUS_ERROR:
        return f"[{THEME_COLORS['pink']}]{translate(language, 'retry_hint')}[/]"

    if mode == MODE_INFINITE_SCROLL:
        if loaded and not has_next:
            end = _ACTIVE_ICON_SET["end"]
            return f"[{muted}]{end} {translate(language, 'end_of_list')} {end}[/]"
        return f"[{muted}]···[/]"

    previous_color = accent if can_request_previous else muted
    next_color = accent if can_request_next else muted
    previous_label = f"{_ACTIVE_ICON_SET['previous']} {translate(language, 'previous')}"
    previous = f"[{previous_color}]{previous_label}[/]"
    next_ = f"[{next_color}]{translate(language, 'next')} {_ACTIVE_ICON_SET['next']}[/]"
    return f"{previous}   [bold]{translate(language, 'page', page=cursor)}[/]   {next_}"


def build_list_empty_message(*, language: str, filtered: bool) -> str:
    """Message shown in place of the list when the view is empty."""
    if filtered:
        return f"[dim italic]{translate(language, 'no_characters')}[/]"
    return f"[dim italic]{translate(language, 'loading')}[/]"


__all__ = [
    "IMAGE_URL_MAX_LEN",
    "build_list_empty_message",
    "render_character_option",
    "render_sentinel_row",
    "set_ascii_icons",
]
