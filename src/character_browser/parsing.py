"""GraphQL payload parsing for character pages."""

from __future__ import annotations

import logging
from typing import Any

from character_browser.models import (
    CHARACTER_STATUSES,
    UNKNOWN_STATUS,
    Character,
    PageResult,
)

logger = logging.getLogger(__name__)

CHARACTERS_QUERY = """
query GetCharacters($page: Int) {
  characters(page: $page) {
    info {
      next
    }
    results {
      id
      name
      status
      species
      gender
      origin {
        name
      }
      image
    }
  }
}
""".strip()


def _text(value: Any) -> str:
    """Coerce a scalar wire value to a stripped string ("" for null/objects)."""
    if value is None or isinstance(value, (dict, list)):
        return ""
    return str(value).strip()


def normalize_status(raw: Any) -> str:
    """Map a wire status to one of CHARACTER_STATUSES.

    The endpoint reports "unknown" in lower case; anything unrecognised
    (including missing values) collapses onto it as well.
    """
    text = _text(raw)
    for status in CHARACTER_STATUSES:
        if text.lower() == status.lower():
            return status
    return UNKNOWN_STATUS


def parse_character(entry: dict[str, Any]) -> Character:
    """Build a Character from one ``results`` entry."""
    origin = entry.get("origin")
    origin_name = _text(origin.get("name")) if isinstance(origin, dict) else ""
    return Character(
        id=_text(entry.get("id")),
        name=_text(entry.get("name")),
        status=normalize_status(entry.get("status")),
        species=_text(entry.get("species")),
        gender=_text(entry.get("gender")),
        origin=origin_name,
        image=_text(entry.get("image")),
    )


def parse_characters_payload(payload: Any) -> PageResult:
    """Parse a GetCharacters GraphQL response body into a PageResult.

    Raises:
        ValueError: The body reports GraphQL errors or lacks ``data.characters``.
    """
    if not isinstance(payload, dict):
        raise ValueError("Response body is not a JSON object")

    errors = payload.get("errors")
    if errors:
        first = errors[0] if isinstance(errors, list) and errors else errors
        message = first.get("message") if isinstance(first, dict) else str(first)
        raise ValueError(f"GraphQL error: {message}")

    data = payload.get("data")
    characters = data.get("characters") if isinstance(data, dict) else None
    if not isinstance(characters, dict):
        raise ValueError("Response is missing data.characters")

    info = characters.get("info")
    has_next = isinstance(info, dict) and info.get("next") is not None

    raw_results = characters.get("results")
    if raw_results is None:
        raw_results = []
    if not isinstance(raw_results, list):
        raise ValueError("data.characters.results is not a list")

    parsed: list[Character] = []
    for entry in raw_results:
        if not isinstance(entry, dict):
            logger.warning("Skipping malformed character entry: %r", entry)
            continue
        parsed.append(parse_character(entry))

    return PageResult(characters=tuple(parsed), has_next=has_next)


__all__ = [
    "CHARACTERS_QUERY",
    "normalize_status",
    "parse_character",
    "parse_characters_payload",
]
