"""Pilot tests for the character browser TUI."""

from __future__ import annotations

import asyncio
from unittest.mock import patch

import pytest
from textual.widgets import Label, OptionList

from character_browser.app import CharacterBrowser
from character_browser.models import (
    MODE_INFINITE_SCROLL,
    MODE_PAGINATION,
    STATUS_ERROR,
    STATUS_IDLE,
    FetchFailure,
    FilterCriteria,
    PageResult,
    SessionState,
    UserConfig,
)
from character_browser.services.interfaces import AppServices


class FakeCharacterApi:
    """In-memory character API with optional per-page failures."""

    def __init__(self, pages: dict[int, PageResult]) -> None:
        self.pages = pages
        self.failures: dict[int, int | None] = {}
        self.requests: list[int] = []

    async def enforce_rate_limit(self, *, last_request_at, min_interval_seconds, now, sleep):
        return now(), 0.0

    async def fetch_page(self, *, client, page, api_url, timeout_seconds):
        self.requests.append(page)
        if page in self.failures:
            raise FetchFailure("HTTP 503", page=page, status_code=self.failures[page])
        return self.pages[page]


@pytest.fixture
def fake_api(make_character):
    def _page(first_id: int, names: list[str], has_next: bool) -> PageResult:
        chars = tuple(
            make_character(
                id=str(first_id + i),
                name=name,
                status="Alive" if i % 2 == 0 else "Dead",
            )
            for i, name in enumerate(names)
        )
        return PageResult(characters=chars, has_next=has_next)

    return FakeCharacterApi(
        {
            1: _page(1, ["Rick", "Morty", "Summer"], True),
            2: _page(4, ["Beth", "Jerry"], True),
            3: _page(6, ["Squanchy"], False),
        }
    )


def _make_app(fake_api, **kwargs) -> CharacterBrowser:
    kwargs.setdefault("restore_session", False)
    return CharacterBrowser(services=AppServices(character_api=fake_api), **kwargs)


async def _settle(pilot) -> None:
    for _ in range(5):
        await pilot.pause(0.02)


def _names(app: CharacterBrowser) -> list[str]:
    return [c.name for c in app.coordinator.view]


@pytest.mark.asyncio
async def test_mount_loads_first_page(fake_api):
    app = _make_app(fake_api)
    with patch("character_browser.app.save_config", return_value=True):
        async with app.run_test() as pilot:
            await _settle(pilot)

            assert fake_api.requests == [1]
            assert app.coordinator.status == STATUS_IDLE
            assert _names(app) == ["Rick", "Morty", "Summer"]
            option_list = app.query_one("#character-list", OptionList)
            # Three characters plus the navigation row
            assert option_list.option_count == 4
            assert option_list.get_option_at_index(3).disabled is True


@pytest.mark.asyncio
async def test_next_and_previous_keys_page_through(fake_api):
    app = _make_app(fake_api)
    with patch("character_browser.app.save_config", return_value=True):
        async with app.run_test() as pilot:
            await _settle(pilot)

            await pilot.press("n")
            await _settle(pilot)
            assert app.coordinator.cursor == 2
            assert _names(app) == ["Beth", "Jerry"]

            await pilot.press("left")
            await _settle(pilot)
            assert app.coordinator.cursor == 1
            assert _names(app) == ["Rick", "Morty", "Summer"]
            assert fake_api.requests == [1, 2, 1]


@pytest.mark.asyncio
async def test_previous_on_first_page_does_nothing(fake_api):
    app = _make_app(fake_api)
    with patch("character_browser.app.save_config", return_value=True):
        async with app.run_test() as pilot:
            await _settle(pilot)
            await pilot.press("p")
            await _settle(pilot)
            assert fake_api.requests == [1]


@pytest.mark.asyncio
async def test_infinite_scroll_loads_until_exhausted(fake_api):
    app = _make_app(fake_api, mode=MODE_INFINITE_SCROLL)
    with patch("character_browser.app.save_config", return_value=True):
        async with app.run_test(size=(100, 60)) as pilot:
            await _settle(pilot)
            await _settle(pilot)

            assert fake_api.requests == [1, 2, 3]
            assert _names(app) == ["Rick", "Morty", "Summer", "Beth", "Jerry", "Squanchy"]
            assert app.coordinator.has_next is False
            assert app.coordinator.proximity_subscribed is True


@pytest.mark.asyncio
async def test_toggle_mode_resets_and_refetches(fake_api):
    app = _make_app(fake_api)
    with patch("character_browser.app.save_config", return_value=True):
        async with app.run_test() as pilot:
            await _settle(pilot)
            await pilot.press("n")
            await _settle(pilot)
            assert app.coordinator.cursor == 2

            await pilot.press("m")
            await _settle(pilot)

            assert app.coordinator.mode == MODE_INFINITE_SCROLL
            assert fake_api.requests[:3] == [1, 2, 1]
            assert _names(app)[:3] == ["Rick", "Morty", "Summer"]

            await pilot.press("m")
            await _settle(pilot)
            assert app.coordinator.mode == MODE_PAGINATION
            assert app.coordinator.cursor == 1
            assert app.coordinator.proximity_subscribed is False


@pytest.mark.asyncio
async def test_fetch_failure_shows_error_and_retry_recovers(fake_api):
    fake_api.failures[2] = 503
    app = _make_app(fake_api)
    with patch("character_browser.app.save_config", return_value=True):
        async with app.run_test() as pilot:
            await _settle(pilot)
            await pilot.press("n")
            await _settle(pilot)

            assert app.coordinator.status == STATUS_ERROR
            assert app.coordinator.failed_page == 2
            assert _names(app) == ["Rick", "Morty", "Summer"]
            assert app.query_one("#status-bar", Label).has_class("error")

            del fake_api.failures[2]
            await pilot.press("r")
            await _settle(pilot)

            assert app.coordinator.status == STATUS_IDLE
            assert app.coordinator.cursor == 2
            assert not app.query_one("#status-bar", Label).has_class("error")


@pytest.mark.asyncio
async def test_filter_and_sort_keys_do_not_refetch(fake_api):
    app = _make_app(fake_api)
    with patch("character_browser.app.save_config", return_value=True):
        async with app.run_test() as pilot:
            await _settle(pilot)

            await pilot.press("f")
            await _settle(pilot)
            assert app.coordinator.filter_criteria == FilterCriteria(status="Alive")
            assert _names(app) == ["Rick", "Summer"]

            await pilot.press("s")
            await _settle(pilot)
            assert app.coordinator.sort_key == "name-asc"
            assert _names(app) == ["Rick", "Summer"]

            await pilot.press("s")
            await _settle(pilot)
            assert _names(app) == ["Summer", "Rick"]
            assert fake_api.requests == [1]


@pytest.mark.asyncio
async def test_language_key_switches_title(fake_api):
    app = _make_app(fake_api)
    with patch("character_browser.app.save_config", return_value=True):
        async with app.run_test() as pilot:
            await _settle(pilot)
            await pilot.press("l")
            await _settle(pilot)
            assert app.language == "de"
            assert app.title == "Rick und Morty Charaktere"


@pytest.mark.asyncio
async def test_session_is_restored_and_saved(fake_api):
    config = UserConfig(
        session=SessionState(
            mode=MODE_PAGINATION,
            status_filter="Dead",
            species_filter="",
            sort_key="name-desc",
        )
    )
    app = _make_app(fake_api, config=config, restore_session=True)
    with patch("character_browser.app.save_config", return_value=True) as save:
        async with app.run_test() as pilot:
            await _settle(pilot)
            assert _names(app) == ["Morty"]
            await pilot.press("m")
            await _settle(pilot)

    save.assert_called_once()
    saved = save.call_args.args[0]
    assert saved.session.mode == MODE_INFINITE_SCROLL
    assert saved.session.status_filter == "Dead"
    assert saved.session.sort_key == "name-desc"


@pytest.mark.asyncio
async def test_unmount_cleans_up_background_tasks(fake_api):
    app = _make_app(fake_api)
    with patch("character_browser.app.save_config", return_value=True):
        async with app.run_test() as pilot:
            await _settle(pilot)
        assert len(app._background_tasks) == 0
        assert app._http_client is None


@pytest.mark.asyncio
async def test_failed_first_page_after_mode_switch_shows_error_row(fake_api):
    app = _make_app(fake_api)
    with patch("character_browser.app.save_config", return_value=True):
        async with app.run_test() as pilot:
            await _settle(pilot)
            fake_api.failures[1] = 503

            await pilot.press("m")
            await _settle(pilot)

            assert app.coordinator.mode == MODE_INFINITE_SCROLL
            assert app.coordinator.status == STATUS_ERROR
            assert app.coordinator.records == ()
            option_list = app.query_one("#character-list", OptionList)
            assert option_list.option_count == 1
            assert option_list.get_option_at_index(0).disabled is True
            assert app.query_one("#status-bar", Label).has_class("error")

            del fake_api.failures[1]
            await pilot.press("r")
            await _settle(pilot)
            assert app.coordinator.status != STATUS_ERROR
            assert _names(app)[:3] == ["Rick", "Morty", "Summer"]


class SlowRateLimitApi(FakeCharacterApi):
    """Records how many rate-limit checks run at the same time."""

    def __init__(self, pages: dict[int, PageResult]) -> None:
        super().__init__(pages)
        self.active = 0
        self.max_active = 0
        self.seen_last_request_at: list[float] = []

    async def enforce_rate_limit(self, *, last_request_at, min_interval_seconds, now, sleep):
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        self.seen_last_request_at.append(last_request_at)
        await asyncio.sleep(0.01)
        self.active -= 1
        return now(), 0.0


@pytest.mark.asyncio
async def test_overlapping_fetches_share_the_rate_limit(fake_api):
    api = SlowRateLimitApi(fake_api.pages)
    app = _make_app(api)
    with patch("character_browser.app.save_config", return_value=True):
        async with app.run_test() as pilot:
            await _settle(pilot)
            api.max_active = 0
            api.seen_last_request_at.clear()

            first, second = await asyncio.gather(
                app._fetch_character_page(2), app._fetch_character_page(3)
            )

            assert first is fake_api.pages[2]
            assert second is fake_api.pages[3]
            assert api.max_active == 1
            assert api.seen_last_request_at[1] > api.seen_last_request_at[0]
