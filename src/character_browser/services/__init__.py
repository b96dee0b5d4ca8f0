"""Service layer between the app and the character API."""

from character_browser.services.character_api_service import (
    enforce_rate_limit,
    fetch_page,
)

__all__ = [
    "enforce_rate_limit",
    "fetch_page",
]
