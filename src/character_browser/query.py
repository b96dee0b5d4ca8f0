"""Filter/sort pipeline and text formatting utilities.

The pipeline is a pure function of (characters, filter criteria, sort key):
``build_view`` never mutates its input and returns a new list every call.
"""

from __future__ import annotations

import functools
import unicodedata
from collections.abc import Iterable, Sequence

from rich.markup import escape as escape_markup

from character_browser.models import SORT_NONE, SORT_OPTIONS, Character, FilterCriteria

# ============================================================================
# Text Formatting Utilities
# ============================================================================


def truncate_text(text: str, max_len: int, suffix: str = "...") -> str:
    """Truncate text to max_len characters, adding suffix if truncated.

    Args:
        text: The text to truncate.
        max_len: Maximum length before truncation (not including suffix).
        suffix: String to append when truncated.

    Returns:
        Original text if within limit, otherwise truncated with suffix.
    """
    if len(text) <= max_len:
        return text
    return text[:max_len] + suffix


def escape_rich_text(text: str) -> str:
    """Escape text for safe Rich markup rendering."""
    return escape_markup(text) if text else ""


# ============================================================================
# Filtering
# ============================================================================


def matches_filter(character: Character, criteria: FilterCriteria) -> bool:
    """Return True when every set criterion equals the character's field."""
    if criteria.status and character.status != criteria.status:
        return False
    if criteria.species and character.species != criteria.species:
        return False
    return True


def filter_characters(
    characters: Iterable[Character], criteria: FilterCriteria
) -> list[Character]:
    """Keep characters matching all set criteria, preserving order."""
    if criteria.is_empty:
        return list(characters)
    return [c for c in characters if matches_filter(c, criteria)]


# ============================================================================
# Sorting
# ============================================================================


@functools.lru_cache(maxsize=4096)
def collation_key(text: str) -> tuple[str, str]:
    """Locale-independent collation key for display strings.

    Accents are folded onto their base letters and case is folded, so
    "Éclair" sorts next to "eclair" rather than after "z". The raw text is
    the tie-breaker, which makes the ordering total and deterministic.
    """
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base.casefold(), text)


def sort_characters(characters: Sequence[Character], sort_key: str) -> list[Character]:
    """Sort characters by the given key, returning a new sorted list.

    Args:
        characters: Characters in accumulation order.
        sort_key: One of SORT_OPTIONS. ``""`` keeps the input order.

    Raises:
        ValueError: Unknown sort key.
    """
    if sort_key not in SORT_OPTIONS:
        raise ValueError(f"Unknown sort key: {sort_key!r}")
    if sort_key == SORT_NONE:
        return list(characters)

    field_name, _, direction = sort_key.partition("-")
    descending = direction == "desc"
    if field_name == "name":
        return sorted(characters, key=lambda c: collation_key(c.name), reverse=descending)
    return sorted(characters, key=lambda c: collation_key(c.origin), reverse=descending)


def build_view(
    characters: Sequence[Character],
    criteria: FilterCriteria,
    sort_key: str,
) -> list[Character]:
    """Apply filter criteria, then the sort key, to accumulated characters."""
    return sort_characters(filter_characters(characters, criteria), sort_key)


def next_option(options: Sequence[str], current: str) -> str:
    """Return the option after ``current``, wrapping around (first if unknown)."""
    try:
        index = options.index(current)
    except ValueError:
        return options[0]
    return options[(index + 1) % len(options)]


__all__ = [
    "build_view",
    "collation_key",
    "escape_rich_text",
    "filter_characters",
    "matches_filter",
    "next_option",
    "sort_characters",
    "truncate_text",
]
