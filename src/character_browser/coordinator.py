"""Fetch coordinator: the load-mode state machine behind the character list.

The coordinator is the only writer of the record store, the page cursor and
the load status. Triggers are accepted only while no fetch is in flight, so a
burst of proximity events produces a single request. Every fetch remembers
the mode and generation it was issued under; a result that arrives after a
mode switch is dropped instead of being applied under the wrong policy.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Coroutine
from dataclasses import dataclass
from typing import Any

from character_browser.models import (
    LOAD_MODES,
    MODE_INFINITE_SCROLL,
    MODE_PAGINATION,
    SORT_NONE,
    SORT_OPTIONS,
    STATUS_ERROR,
    STATUS_FETCHING,
    STATUS_IDLE,
    Character,
    FetchFailure,
    FilterCriteria,
    PageResult,
)
from character_browser.query import build_view
from character_browser.store import RecordStore
from character_browser.trigger import ProximitySensor, Subscription

logger = logging.getLogger(__name__)

PageFetcher = Callable[[int], Awaitable[PageResult]]
TaskSpawner = Callable[[Coroutine[Any, Any, None]], "asyncio.Task[None]"]
Listener = Callable[[], None]


@dataclass(frozen=True, slots=True)
class FetchTicket:
    """Identity of one issued fetch."""

    page: int
    mode: str
    generation: int


class FetchCoordinator:
    """Owns load mode, load status, page cursor and the record store."""

    def __init__(
        self,
        fetch_page: PageFetcher,
        *,
        mode: str = MODE_PAGINATION,
        sensor: ProximitySensor | None = None,
        spawn: TaskSpawner | None = None,
    ) -> None:
        if mode not in LOAD_MODES:
            raise ValueError(f"Unknown load mode: {mode!r}")
        self._fetch_page = fetch_page
        self._spawn: TaskSpawner = spawn or asyncio.create_task
        self._mode = mode
        self._status = STATUS_IDLE
        self._store = RecordStore()
        self._cursor = 1
        self._has_next = False
        self._loaded = False  # True once a page was applied since the last reset
        self._generation = 0
        self._inflight: FetchTicket | None = None
        self._failed_page: int | None = None
        self._last_error: FetchFailure | None = None
        self._filter = FilterCriteria()
        self._sort_key = SORT_NONE
        self._view_cache: tuple[tuple[int, FilterCriteria, str], tuple[Character, ...]] | None = (
            None
        )
        self._listeners: list[Listener] = []
        self._sensor = sensor
        self._subscription: Subscription | None = None
        self._sync_subscription()

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def mode(self) -> str:
        return self._mode

    @property
    def status(self) -> str:
        return self._status

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def has_next(self) -> bool:
        return self._has_next

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def records(self) -> tuple[Character, ...]:
        return self._store.records

    @property
    def inflight(self) -> FetchTicket | None:
        return self._inflight

    @property
    def failed_page(self) -> int | None:
        return self._failed_page

    @property
    def last_error(self) -> FetchFailure | None:
        return self._last_error

    @property
    def filter_criteria(self) -> FilterCriteria:
        return self._filter

    @property
    def sort_key(self) -> str:
        return self._sort_key

    @property
    def view(self) -> tuple[Character, ...]:
        """Filtered and sorted records, recomputed when store or criteria change."""
        key = (self._store.revision, self._filter, self._sort_key)
        if self._view_cache is None or self._view_cache[0] != key:
            view = tuple(build_view(self._store.records, self._filter, self._sort_key))
            self._view_cache = (key, view)
        return self._view_cache[1]

    @property
    def can_request_next(self) -> bool:
        return self._mode == MODE_PAGINATION and self._loaded and self._has_next

    @property
    def can_request_previous(self) -> bool:
        return self._mode == MODE_PAGINATION and self._cursor > 1

    @property
    def proximity_subscribed(self) -> bool:
        return self._subscription is not None

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Register a state-change callback. Returns a function that removes it."""
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def start(self) -> asyncio.Task[None] | None:
        """Load page 1 if nothing has been loaded yet."""
        if self._loaded:
            return None
        return self._issue(1)

    def set_mode(self, mode: str) -> asyncio.Task[None] | None:
        """Switch load mode, reset store and cursor, and fetch page 1.

        A no-op when ``mode`` is already active. Any fetch still in flight
        completes in the background and its result is discarded.
        """
        if mode not in LOAD_MODES:
            raise ValueError(f"Unknown load mode: {mode!r}")
        if mode == self._mode:
            return None
        logger.debug("Mode switch %s -> %s (inflight=%s)", self._mode, mode, self._inflight)
        self._generation += 1
        self._mode = mode
        self._store.clear()
        self._cursor = 1
        self._has_next = False
        self._loaded = False
        self._status = STATUS_IDLE
        self._inflight = None
        self._failed_page = None
        self._last_error = None
        self._sync_subscription()
        self._notify()
        return self._issue(1)

    def request_next(self) -> asyncio.Task[None] | None:
        """Pagination: load the page after the cursor, if there is one."""
        if not self.can_request_next:
            logger.debug("request_next ignored (mode=%s, has_next=%s)", self._mode, self._has_next)
            return None
        return self._issue(self._cursor + 1)

    def request_previous(self) -> asyncio.Task[None] | None:
        """Pagination: load the page before the cursor, if there is one."""
        if not self.can_request_previous:
            logger.debug("request_previous ignored (mode=%s, cursor=%d)", self._mode, self._cursor)
            return None
        return self._issue(self._cursor - 1)

    def on_proximity_trigger(self) -> asyncio.Task[None] | None:
        """Infinite scroll: the sentinel came into view; load the next page.

        Silently ignored outside infinite-scroll mode, while a fetch is in
        flight, and once the source reported there are no further pages.
        """
        if self._mode != MODE_INFINITE_SCROLL:
            return None
        if self._status == STATUS_FETCHING:
            logger.debug("Proximity trigger dropped: fetch in flight")
            return None
        if self._loaded and not self._has_next:
            return None
        return self._issue(self._cursor + 1 if self._loaded else 1)

    def retry(self) -> asyncio.Task[None] | None:
        """Re-issue the page whose fetch failed."""
        if self._status != STATUS_ERROR or self._failed_page is None:
            return None
        return self._issue(self._failed_page)

    def set_filter(self, criteria: FilterCriteria) -> None:
        """Change the filter criteria. Only the derived view changes."""
        if criteria == self._filter:
            return
        self._filter = criteria
        self._notify()

    def set_sort(self, sort_key: str) -> None:
        """Change the sort key. Only the derived view changes."""
        if sort_key not in SORT_OPTIONS:
            raise ValueError(f"Unknown sort key: {sort_key!r}")
        if sort_key == self._sort_key:
            return
        self._sort_key = sort_key
        self._notify()

    def close(self) -> None:
        """Release the proximity subscription and drop listeners (teardown)."""
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None
        self._listeners.clear()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _sync_subscription(self) -> None:
        """Hold a sensor subscription exactly while in infinite-scroll mode."""
        if self._sensor is None:
            return
        if self._mode == MODE_INFINITE_SCROLL and self._subscription is None:
            self._subscription = self._sensor.subscribe(self.on_proximity_trigger)
        elif self._mode != MODE_INFINITE_SCROLL and self._subscription is not None:
            self._subscription.close()
            self._subscription = None

    def _issue(self, page: int) -> asyncio.Task[None] | None:
        if self._status == STATUS_FETCHING:
            logger.debug("Trigger for page %d dropped: fetch in flight", page)
            return None
        ticket = FetchTicket(page=page, mode=self._mode, generation=self._generation)
        self._inflight = ticket
        self._status = STATUS_FETCHING
        logger.debug("Fetching page %d (%s)", page, self._mode)
        self._notify()
        return self._spawn(self._run_fetch(ticket))

    def _is_current(self, ticket: FetchTicket) -> bool:
        return ticket.generation == self._generation and ticket.mode == self._mode

    def _enter_error(self, ticket: FetchTicket, failure: FetchFailure) -> None:
        self._status = STATUS_ERROR
        self._inflight = None
        self._failed_page = ticket.page
        self._last_error = failure
        self._notify()

    async def _run_fetch(self, ticket: FetchTicket) -> None:
        try:
            result = await self._fetch_page(ticket.page)
        except FetchFailure as exc:
            if not self._is_current(ticket):
                logger.debug("Discarding stale failure for page %d: %s", ticket.page, exc)
                return
            logger.warning("Fetch for page %d failed: %s", ticket.page, exc)
            self._enter_error(ticket, exc)
            return
        except Exception as exc:
            # Leave the state machine usable, then let the task report the bug
            if self._is_current(ticket):
                self._enter_error(
                    ticket, FetchFailure(f"Unexpected error: {exc}", page=ticket.page)
                )
            raise

        if not self._is_current(ticket):
            logger.debug(
                "Discarding stale page %d issued under %s (now %s)",
                ticket.page,
                ticket.mode,
                self._mode,
            )
            return

        if ticket.mode == MODE_PAGINATION:
            self._store.replace(result.characters)
        else:
            self._store.append(result.characters)
        self._cursor = ticket.page
        self._has_next = result.has_next
        self._loaded = True
        self._status = STATUS_IDLE
        self._inflight = None
        self._failed_page = None
        self._last_error = None
        logger.debug(
            "Applied page %d: %d records, store=%d, has_next=%s",
            ticket.page,
            len(result.characters),
            len(self._store),
            result.has_next,
        )
        self._notify()


__all__ = [
    "FetchCoordinator",
    "FetchTicket",
    "Listener",
    "PageFetcher",
    "TaskSpawner",
]
