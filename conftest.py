"""Shared test fixtures for character browser tests."""

from __future__ import annotations

import asyncio
import logging

import pytest

from character_browser.models import Character, FetchFailure, PageResult
from character_browser.query import collation_key
from character_browser.themes import DEFAULT_THEME, THEME_COLORS
from character_browser.widgets.listing import set_ascii_icons

# ── Module-level state isolation ─────────────────────────────────────────────


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Restore THEME_COLORS, icon set, collation cache and logging after each test.

    CharacterBrowser.__init__ switches the module-level icon set. Without this
    fixture a test that enables ASCII icons would leak into later tests.
    """
    yield
    THEME_COLORS.clear()
    THEME_COLORS.update(DEFAULT_THEME)
    set_ascii_icons(False)
    collation_key.cache_clear()
    logging.disable(logging.NOTSET)


# ── Factories ────────────────────────────────────────────────────────────────


@pytest.fixture
def make_character():
    """Factory fixture for creating Character instances with sensible defaults."""

    def _make(
        id: str = "1",
        name: str = "Rick Sanchez",
        status: str = "Alive",
        species: str = "Human",
        gender: str = "Male",
        origin: str = "Earth (C-137)",
        image: str | None = None,
    ) -> Character:
        if image is None:
            image = f"https://rickandmortyapi.com/api/character/avatar/{id}.jpeg"
        return Character(
            id=id,
            name=name,
            status=status,
            species=species,
            gender=gender,
            origin=origin,
            image=image,
        )

    return _make


@pytest.fixture
def make_page(make_character):
    """Factory fixture for a PageResult of ``count`` characters starting at ``first_id``."""

    def _make(first_id: int = 1, count: int = 3, has_next: bool = True) -> PageResult:
        characters = tuple(
            make_character(id=str(first_id + offset), name=f"Character {first_id + offset}")
            for offset in range(count)
        )
        return PageResult(characters=characters, has_next=has_next)

    return _make


class ControlledSource:
    """Fake page source whose fetches stay pending until the test resolves them."""

    def __init__(self) -> None:
        self.requests: list[int] = []
        self._pending: list[tuple[int, asyncio.Future[PageResult]]] = []

    async def __call__(self, page: int) -> PageResult:
        future: asyncio.Future[PageResult] = asyncio.get_running_loop().create_future()
        self.requests.append(page)
        self._pending.append((page, future))
        return await future

    @property
    def pending_pages(self) -> list[int]:
        return [page for page, future in self._pending if not future.done()]

    def _take(self, page: int | None) -> tuple[int, asyncio.Future[PageResult]]:
        for index, (pending_page, future) in enumerate(self._pending):
            if future.done():
                continue
            if page is None or pending_page == page:
                del self._pending[index]
                return pending_page, future
        raise AssertionError(f"No pending fetch for page {page}")

    def resolve(self, result: PageResult, *, page: int | None = None) -> None:
        _, future = self._take(page)
        future.set_result(result)

    def fail(self, page: int | None = None, *, status_code: int | None = None) -> None:
        failed_page, future = self._take(page)
        future.set_exception(FetchFailure("boom", page=failed_page, status_code=status_code))


@pytest.fixture
def controlled_source() -> ControlledSource:
    return ControlledSource()
