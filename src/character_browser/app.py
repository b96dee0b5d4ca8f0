"""Textual application for browsing characters in paged or infinite-scroll mode."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import Callable
from typing import Any

import httpx
from textual.app import App, ComposeResult
from textual.css.query import NoMatches
from textual.widgets import Header, Label, OptionList
from textual.widgets.option_list import Option

from character_browser.action_messages import build_fetch_error_message
from character_browser.config import save_config
from character_browser.coordinator import FetchCoordinator
from character_browser.i18n import translate
from character_browser.models import (
    CHARACTER_SPECIES,
    CHARACTER_STATUSES,
    LOAD_MODES,
    MODE_INFINITE_SCROLL,
    MODE_PAGINATION,
    SORT_OPTIONS,
    STATUS_ERROR,
    STATUS_FETCHING,
    STATUS_IDLE,
    SUPPORTED_LANGUAGES,
    FetchFailure,
    FilterCriteria,
    PageResult,
    SessionState,
    UserConfig,
)
from character_browser.query import escape_rich_text, next_option
from character_browser.services.interfaces import AppServices, build_default_app_services
from character_browser.trigger import ProximitySensor
from character_browser.ui_constants import (
    APP_BINDINGS,
    APP_CSS,
    FOOTER_HINTS_INFINITE,
    FOOTER_HINTS_PAGINATION,
)
from character_browser.ui_runtime import UiRefreshCoordinator, UiRefs
from character_browser.widgets import (
    ContextFooter,
    ControlsBar,
    build_list_empty_message,
    build_status_bar_text,
    render_character_option,
    render_sentinel_row,
)
from character_browser.widgets.listing import set_ascii_icons

logger = logging.getLogger(__name__)


class CharacterBrowser(App):
    """A TUI application to browse Rick and Morty characters."""

    TITLE = "Rick and Morty Characters"

    CSS = APP_CSS

    BINDINGS = APP_BINDINGS

    def __init__(
        self,
        config: UserConfig | None = None,
        restore_session: bool = True,
        mode: str | None = None,
        language: str | None = None,
        ascii_icons: bool = False,
        services: AppServices | None = None,
    ) -> None:
        super().__init__()
        self._config = config or UserConfig()
        self._restore_session = restore_session
        self._services: AppServices = services or build_default_app_services()
        self._language = language if language in SUPPORTED_LANGUAGES else self._config.language

        session = self._config.session
        if mode is None:
            mode = session.mode if restore_session else self._config.default_mode
        if mode not in LOAD_MODES:
            mode = MODE_PAGINATION

        # Background task tracking (prevent GC of fire-and-forget tasks)
        self._background_tasks: set[asyncio.Task[None]] = set()

        # Shared HTTP client for connection pooling (created in on_mount)
        self._http_client: httpx.AsyncClient | None = None
        self._last_request_at: float = 0.0
        # A mode switch can leave an old fetch running next to the new one
        self._rate_limit_lock = asyncio.Lock()

        self._sensor = ProximitySensor()
        self._coordinator = FetchCoordinator(
            self._fetch_character_page,
            mode=mode,
            sensor=self._sensor,
            spawn=self._track_task,
        )
        if restore_session:
            self._coordinator.set_filter(
                FilterCriteria(status=session.status_filter, species=session.species_filter)
            )
            self._coordinator.set_sort(session.sort_key)
        self._remove_listener: Callable[[], None] | None = None
        self._notified_error: FetchFailure | None = None
        self._last_status = self._coordinator.status

        set_ascii_icons(ascii_icons)

        # Internal UI boundaries (cached refs + refresh orchestration)
        self._ui_refs = UiRefs()
        self._ui_refresh = UiRefreshCoordinator(
            refresh_list_view=self._refresh_list_view,
            update_controls=self._update_controls,
            update_status_bar=self._update_status_bar,
            update_footer=self._update_footer,
        )

    @property
    def coordinator(self) -> FetchCoordinator:
        return self._coordinator

    @property
    def language(self) -> str:
        return self._language

    def _get_services(self) -> AppServices:
        """Return app service interfaces, lazily creating defaults for test doubles."""
        services = getattr(self, "_services", None)
        if services is None:
            services = build_default_app_services()
            self._services = services
        return services

    def compose(self) -> ComposeResult:
        yield Header()
        yield ControlsBar(id="controls")
        yield OptionList(id="character-list")
        yield Label("", id="status-bar")
        yield ContextFooter()

    def on_mount(self) -> None:
        """Create the HTTP client, wire the coordinator to the UI and load page 1."""
        self._http_client = httpx.AsyncClient()

        if self._config.config_defaulted:
            self.notify(
                "Config file was corrupt and has been backed up. Using defaults.",
                severity="warning",
                timeout=8,
            )

        self.title = translate(self._language, "title")
        self._remove_listener = self._coordinator.add_listener(self._on_state_changed)
        option_list = self._get_character_list_widget()
        self.watch(option_list, "scroll_y", self._on_list_scrolled, init=False)

        self._ui_refresh.apply_state_refresh()
        self._coordinator.start()

        logger.debug(
            "App mounted: mode=%s, language=%s, api_url=%s",
            self._coordinator.mode,
            self._language,
            self._config.api_url,
        )
        option_list.focus()

    async def on_unmount(self) -> None:
        """Save session state, release the coordinator and close the HTTP client."""
        self._save_session_state()

        remove_listener = self._remove_listener
        self._remove_listener = None
        if remove_listener is not None:
            remove_listener()
        self._coordinator.close()

        # Cancel tracked background tasks to avoid leaks during teardown.
        pending = [task for task in self._background_tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            _, still_pending = await asyncio.wait(pending, timeout=0.5)
            for task in still_pending:
                logger.debug("Background task did not cancel before shutdown: %r", task)
        self._background_tasks.clear()

        client = self._http_client
        self._http_client = None
        if client is not None:
            try:
                await client.aclose()
            except Exception as e:
                logger.debug(
                    "Failed to close shared HTTP client during shutdown: %s", e, exc_info=True
                )
        self._ui_refs.reset()

    # ========================================================================
    # Widget refs
    # ========================================================================

    @staticmethod
    def _is_live_widget(widget: Any) -> bool:
        """Return True for mounted/attached widgets safe to reuse."""
        return bool(widget is not None and getattr(widget, "is_attached", False))

    def _get_cached_widget(self, ref_name: str, resolver: Callable[[], Any]) -> Any:
        """Resolve and cache a widget reference by UiRefs attribute name."""
        widget = getattr(self._ui_refs, ref_name)
        if self._is_live_widget(widget):
            return widget
        widget = resolver()
        setattr(self._ui_refs, ref_name, widget)
        return widget

    def _get_controls_bar_widget(self) -> ControlsBar:
        return self._get_cached_widget("controls_bar", lambda: self.query_one(ControlsBar))

    def _get_character_list_widget(self) -> OptionList:
        return self._get_cached_widget(
            "character_list", lambda: self.query_one("#character-list", OptionList)
        )

    def _get_status_bar_widget(self) -> Label:
        return self._get_cached_widget("status_bar", lambda: self.query_one("#status-bar", Label))

    def _get_footer_widget(self) -> ContextFooter:
        return self._get_cached_widget("footer", lambda: self.query_one(ContextFooter))

    # ========================================================================
    # Background tasks and data source
    # ========================================================================

    def _track_task(self, coro: Any) -> asyncio.Task[None]:
        """Create an asyncio task and track it to prevent garbage collection."""
        task = asyncio.create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        task.add_done_callback(self._on_task_done)
        return task

    @staticmethod
    def _on_task_done(task: asyncio.Task[None]) -> None:
        """Log unhandled exceptions from background tasks."""
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Unhandled exception in background task: %s", exc, exc_info=exc)

    async def _fetch_character_page(self, page: int) -> PageResult:
        """Fetch one page through the character API service, honoring rate limits."""
        api = self._get_services().character_api
        loop = asyncio.get_running_loop()
        async with self._rate_limit_lock:
            self._last_request_at, waited = await api.enforce_rate_limit(
                last_request_at=self._last_request_at,
                min_interval_seconds=self._config.min_request_interval_seconds,
                now=loop.time,
                sleep=asyncio.sleep,
            )
        if waited > 0:
            logger.debug("Waited %.2fs for rate limit before page %d", waited, page)
        return await api.fetch_page(
            client=self._http_client,
            page=page,
            api_url=self._config.api_url,
            timeout_seconds=self._config.request_timeout_seconds,
        )

    # ========================================================================
    # State -> UI
    # ========================================================================

    def _on_state_changed(self) -> None:
        """Coordinator listener: re-render and drive the proximity sensor."""
        self._ui_refresh.apply_state_refresh()

        coordinator = self._coordinator
        previous_status = self._last_status
        self._last_status = coordinator.status
        error = coordinator.last_error
        if coordinator.status == STATUS_ERROR and error is not None:
            if error is not self._notified_error:
                self._notified_error = error
                self.notify(
                    escape_rich_text(build_fetch_error_message(error)),
                    title=translate(self._language, "title"),
                    severity="error",
                    timeout=8,
                )
        elif coordinator.status == STATUS_IDLE and previous_status == STATUS_FETCHING:
            # Only a successful load re-arms; failures wait for a retry or a new crossing.
            self._sensor.rearm()
        self.call_after_refresh(self._check_sentinel)

    def _on_list_scrolled(self) -> None:
        self._check_sentinel()

    def _check_sentinel(self) -> None:
        """Report whether the sentinel row is fully visible (list scrolled to its end)."""
        if self._coordinator.mode != MODE_INFINITE_SCROLL:
            return
        try:
            option_list = self._get_character_list_widget()
        except NoMatches:
            return
        visible = option_list.scroll_y >= option_list.max_scroll_y
        self._sensor.observe(visible)

    def _refresh_list_view(self) -> None:
        """Rebuild the option list from the coordinator's current view."""
        try:
            option_list = self._get_character_list_widget()
        except NoMatches:
            return
        coordinator = self._coordinator
        previous_highlight = option_list.highlighted
        option_list.clear_options()

        view = coordinator.view
        options: list[Option] = [
            Option(render_character_option(character, language=self._language))
            for character in view
        ]
        if not view and coordinator.status != STATUS_ERROR:
            options.append(
                Option(
                    build_list_empty_message(
                        language=self._language,
                        filtered=coordinator.loaded and bool(coordinator.records),
                    ),
                    disabled=True,
                )
            )
        options.append(
            Option(
                render_sentinel_row(
                    mode=coordinator.mode,
                    status=coordinator.status,
                    cursor=coordinator.cursor,
                    loaded=coordinator.loaded,
                    has_next=coordinator.has_next,
                    can_request_previous=coordinator.can_request_previous,
                    can_request_next=coordinator.can_request_next,
                    language=self._language,
                ),
                disabled=True,
            )
        )
        option_list.add_options(options)

        if view:
            keep = coordinator.mode == MODE_INFINITE_SCROLL and previous_highlight is not None
            option_list.highlighted = min(previous_highlight, len(view) - 1) if keep else 0

    def _update_controls(self) -> None:
        try:
            controls = self._get_controls_bar_widget()
        except NoMatches:
            return
        controls.show_controls(
            mode=self._coordinator.mode,
            criteria=self._coordinator.filter_criteria,
            sort_key=self._coordinator.sort_key,
            language=self._language,
        )

    def _update_status_bar(self) -> None:
        """Update the status bar with load state and counts."""
        try:
            status_bar = self._get_status_bar_widget()
        except NoMatches:
            return
        coordinator = self._coordinator
        error = coordinator.last_error
        status_bar.update(
            build_status_bar_text(
                mode=coordinator.mode,
                status=coordinator.status,
                cursor=coordinator.cursor,
                loaded=coordinator.loaded,
                shown=len(coordinator.view),
                total=len(coordinator.records),
                error_message=str(error) if error is not None else None,
                language=self._language,
            )
        )
        status_bar.set_class(coordinator.status == STATUS_ERROR, "error")

    def _update_footer(self) -> None:
        try:
            footer = self._get_footer_widget()
        except NoMatches:
            return
        hints = (
            FOOTER_HINTS_PAGINATION
            if self._coordinator.mode == MODE_PAGINATION
            else FOOTER_HINTS_INFINITE
        )
        bindings = [(key, translate(self._language, label_key)) for key, label_key in hints]
        if self._coordinator.status == STATUS_ERROR:
            bindings.insert(0, ("r", translate(self._language, "retry")))
        footer.render_bindings(bindings)

    # ========================================================================
    # Actions
    # ========================================================================

    def action_toggle_mode(self) -> None:
        """Switch between page navigation and infinite scroll."""
        current = self._coordinator.mode
        new_mode = MODE_INFINITE_SCROLL if current == MODE_PAGINATION else MODE_PAGINATION
        self._coordinator.set_mode(new_mode)

    def action_next_page(self) -> None:
        self._coordinator.request_next()

    def action_previous_page(self) -> None:
        self._coordinator.request_previous()

    def action_retry(self) -> None:
        self._coordinator.retry()

    def action_cycle_status(self) -> None:
        criteria = self._coordinator.filter_criteria
        status = next_option(("", *CHARACTER_STATUSES), criteria.status)
        self._coordinator.set_filter(dataclasses.replace(criteria, status=status))

    def action_cycle_species(self) -> None:
        criteria = self._coordinator.filter_criteria
        species = next_option(("", *CHARACTER_SPECIES), criteria.species)
        self._coordinator.set_filter(dataclasses.replace(criteria, species=species))

    def action_cycle_sort(self) -> None:
        self._coordinator.set_sort(next_option(SORT_OPTIONS, self._coordinator.sort_key))

    def action_cycle_language(self) -> None:
        self._language = next_option(SUPPORTED_LANGUAGES, self._language)
        self.title = translate(self._language, "title")
        self._ui_refresh.apply_state_refresh()

    def action_cursor_down(self) -> None:
        self._get_character_list_widget().action_cursor_down()

    def action_cursor_up(self) -> None:
        self._get_character_list_widget().action_cursor_up()

    # ========================================================================
    # Persistence
    # ========================================================================

    def _save_session_state(self) -> None:
        """Persist mode, filters, sort and language for the next run."""
        criteria = self._coordinator.filter_criteria
        self._config.session = SessionState(
            mode=self._coordinator.mode,
            status_filter=criteria.status,
            species_filter=criteria.species,
            sort_key=self._coordinator.sort_key,
        )
        self._config.language = self._language
        if not save_config(self._config):
            logger.warning("Session state could not be saved")


__all__ = ["CharacterBrowser"]
