"""Localized display text (English and German)."""

from __future__ import annotations

import logging

from character_browser.models import DEFAULT_LANGUAGE

logger = logging.getLogger(__name__)

TRANSLATIONS: dict[str, dict[str, str]] = {
    "en": {
        "title": "Rick and Morty Characters",
        "filter_status": "Filter by Status",
        "filter_species": "Filter by Species",
        "sort_by": "Sort by",
        "all": "All",
        "alive": "Alive",
        "dead": "Dead",
        "unknown": "Unknown",
        "change_language": "Change Language",
        "language_name": "English",
        "sort_none": "None",
        "sort_name_asc": "Name (A-Z)",
        "sort_name_desc": "Name (Z-A)",
        "sort_origin_asc": "Origin (A-Z)",
        "sort_origin_desc": "Origin (Z-A)",
        "mode": "Mode",
        "mode_pagination": "Pages",
        "mode_infinite": "Infinite scroll",
        "page": "Page {page}",
        "previous": "Previous",
        "next": "Next",
        "loading": "Loading...",
        "loading_more": "Loading more...",
        "end_of_list": "No more characters",
        "error": "Error! {message}",
        "retry_hint": "Press r to retry",
        "retry": "Retry",
        "no_characters": "No characters match the current filters.",
        "shown": "{shown} of {total} loaded",
        "status": "Status",
        "species": "Species",
        "gender": "Gender",
        "origin": "Origin",
        "image": "Image",
    },
    "de": {
        "title": "Rick und Morty Charaktere",
        "filter_status": "Nach Status filtern",
        "filter_species": "Nach Spezies filtern",
        "sort_by": "Sortieren nach",
        "all": "Alle",
        "alive": "Lebendig",
        "dead": "Tot",
        "unknown": "Unbekannt",
        "change_language": "Sprache ändern",
        "language_name": "Deutsch",
        "sort_none": "Keine",
        "sort_name_asc": "Name (A-Z)",
        "sort_name_desc": "Name (Z-A)",
        "sort_origin_asc": "Herkunft (A-Z)",
        "sort_origin_desc": "Herkunft (Z-A)",
        "mode": "Modus",
        "mode_pagination": "Seiten",
        "mode_infinite": "Endlos-Scrollen",
        "page": "Seite {page}",
        "previous": "Zurück",
        "next": "Weiter",
        "loading": "Wird geladen...",
        "loading_more": "Weitere werden geladen...",
        "end_of_list": "Keine weiteren Charaktere",
        "error": "Fehler! {message}",
        "retry_hint": "Drücke r für einen neuen Versuch",
        "retry": "Erneut versuchen",
        "no_characters": "Keine Charaktere entsprechen den Filtern.",
        "shown": "{shown} von {total} geladen",
        "status": "Status",
        "species": "Spezies",
        "gender": "Geschlecht",
        "origin": "Herkunft",
        "image": "Bild",
    },
}

# Keys for the fixed status enumeration (as reported by the endpoint)
_STATUS_KEYS = {"Alive": "alive", "Dead": "dead", "unknown": "unknown"}


def translate(language: str, key: str, **fields: object) -> str:
    """Look up display text for ``key``.

    Falls back to English for unknown languages or missing keys, and to the
    key itself when English lacks it too.
    """
    table = TRANSLATIONS.get(language) or TRANSLATIONS[DEFAULT_LANGUAGE]
    text = table.get(key)
    if text is None:
        text = TRANSLATIONS[DEFAULT_LANGUAGE].get(key)
    if text is None:
        logger.debug("Missing translation key %r (%s)", key, language)
        return key
    return text.format(**fields) if fields else text


def status_label(language: str, status: str) -> str:
    """Display text for a status filter value ("" means all)."""
    if not status:
        return translate(language, "all")
    key = _STATUS_KEYS.get(status)
    return translate(language, key) if key else status


def sort_label(language: str, sort_key: str) -> str:
    """Display text for a sort key ("" means none)."""
    if not sort_key:
        return translate(language, "sort_none")
    return translate(language, "sort_" + sort_key.replace("-", "_"))


def mode_label(language: str, mode: str) -> str:
    return translate(language, f"mode_{mode}")


__all__ = [
    "TRANSLATIONS",
    "mode_label",
    "sort_label",
    "status_label",
    "translate",
]
