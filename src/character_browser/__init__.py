"""Rick and Morty character browser with page navigation and infinite scroll."""

from character_browser.coordinator import FetchCoordinator, FetchTicket
from character_browser.models import (
    MODE_INFINITE_SCROLL,
    MODE_PAGINATION,
    STATUS_ERROR,
    STATUS_FETCHING,
    STATUS_IDLE,
    Character,
    FetchFailure,
    FilterCriteria,
    PageResult,
    UserConfig,
)
from character_browser.query import build_view, filter_characters, sort_characters
from character_browser.store import RecordStore
from character_browser.trigger import ProximitySensor, Subscription

__all__ = [
    "MODE_INFINITE_SCROLL",
    "MODE_PAGINATION",
    "STATUS_ERROR",
    "STATUS_FETCHING",
    "STATUS_IDLE",
    "Character",
    "FetchCoordinator",
    "FetchFailure",
    "FetchTicket",
    "FilterCriteria",
    "PageResult",
    "ProximitySensor",
    "RecordStore",
    "Subscription",
    "UserConfig",
    "build_view",
    "filter_characters",
    "sort_characters",
]
