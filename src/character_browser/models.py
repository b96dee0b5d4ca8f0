"""Data models and constants for the character browser application."""

from __future__ import annotations

from dataclasses import dataclass, field

# Application identity, single source of truth for platformdirs config paths
CONFIG_APP_NAME = "character-browser"

# Load modes
MODE_PAGINATION = "pagination"
MODE_INFINITE_SCROLL = "infinite"
LOAD_MODES = (MODE_PAGINATION, MODE_INFINITE_SCROLL)

# Load statuses
STATUS_IDLE = "idle"
STATUS_FETCHING = "fetching"
STATUS_ERROR = "error"
LOAD_STATUSES = (STATUS_IDLE, STATUS_FETCHING, STATUS_ERROR)

# Fixed filter enumerations (values exactly as the endpoint reports them)
CHARACTER_STATUSES = ("Alive", "Dead", "unknown")
UNKNOWN_STATUS = "unknown"
CHARACTER_SPECIES = ("Human", "Alien")

# Sort order options ("" keeps accumulation order)
SORT_NONE = ""
SORT_OPTIONS = ("", "name-asc", "name-desc", "origin-asc", "origin-desc")

# Data source constants
CHARACTER_API_URL = "https://rickandmortyapi.com/graphql"
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30
DEFAULT_MIN_REQUEST_INTERVAL_SECONDS = 0.5

SUPPORTED_LANGUAGES = ("en", "de")
DEFAULT_LANGUAGE = "en"


class FetchFailure(Exception):
    """A page could not be fetched from the data source.

    The only error kind the fetch coordinator recognizes. Transport, HTTP status,
    and payload problems are all normalised into this type by the source adapter.
    """

    def __init__(self, message: str, *, page: int, status_code: int | None = None) -> None:
        super().__init__(message)
        self.page = page
        self.status_code = status_code


@dataclass(frozen=True, slots=True)
class Character:
    """A single character record as returned by the data source."""

    id: str
    name: str
    status: str
    species: str
    gender: str
    origin: str
    image: str


@dataclass(frozen=True, slots=True)
class PageResult:
    """One page of characters plus whether a further page exists."""

    characters: tuple[Character, ...]
    has_next: bool


@dataclass(frozen=True, slots=True)
class FilterCriteria:
    """Exact-match constraints on status and species ("" = unconstrained)."""

    status: str = ""
    species: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.status and not self.species


@dataclass(slots=True)
class SessionState:
    """State to restore on next run (mode, filters, sort)."""

    mode: str = MODE_PAGINATION
    status_filter: str = ""
    species_filter: str = ""
    sort_key: str = SORT_NONE

    def __post_init__(self) -> None:
        """Clamp values to their valid ranges (defense-in-depth)."""
        if self.mode not in LOAD_MODES:
            self.mode = MODE_PAGINATION
        if self.sort_key not in SORT_OPTIONS:
            self.sort_key = SORT_NONE


@dataclass(slots=True)
class UserConfig:
    """Complete user configuration including session state and preferences."""

    language: str = DEFAULT_LANGUAGE
    default_mode: str = MODE_PAGINATION
    api_url: str = CHARACTER_API_URL
    request_timeout_seconds: int = DEFAULT_REQUEST_TIMEOUT_SECONDS
    min_request_interval_seconds: float = DEFAULT_MIN_REQUEST_INTERVAL_SECONDS
    session: SessionState = field(default_factory=SessionState)
    version: int = 1
    config_defaulted: bool = False  # Runtime only: set when a corrupt file was replaced


__all__ = [
    "CHARACTER_API_URL",
    "CHARACTER_SPECIES",
    "CHARACTER_STATUSES",
    "CONFIG_APP_NAME",
    "DEFAULT_LANGUAGE",
    "DEFAULT_MIN_REQUEST_INTERVAL_SECONDS",
    "DEFAULT_REQUEST_TIMEOUT_SECONDS",
    "LOAD_MODES",
    "LOAD_STATUSES",
    "MODE_INFINITE_SCROLL",
    "MODE_PAGINATION",
    "SORT_NONE",
    "SORT_OPTIONS",
    "STATUS_ERROR",
    "STATUS_FETCHING",
    "STATUS_IDLE",
    "SUPPORTED_LANGUAGES",
    "UNKNOWN_STATUS",
    "Character",
    "FetchFailure",
    "FilterCriteria",
    "PageResult",
    "SessionState",
    "UserConfig",
]
