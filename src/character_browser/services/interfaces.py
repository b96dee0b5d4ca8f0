"""Service interfaces + default adapters for app-level dependency injection."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import httpx

from character_browser.models import PageResult
from character_browser.services import character_api_service as _character_api


@runtime_checkable
class CharacterApiService(Protocol):
    """Interface for character API operations used by the app."""

    async def enforce_rate_limit(
        self,
        *,
        last_request_at: float,
        min_interval_seconds: float,
        now: Callable[[], float],
        sleep: Callable[[float], Awaitable[None]],
    ) -> tuple[float, float]:
        """Enforce API rate limiting and return (new_timestamp, wait_seconds)."""
        ...

    async def fetch_page(
        self,
        *,
        client: httpx.AsyncClient | None,
        page: int,
        api_url: str,
        timeout_seconds: int,
    ) -> PageResult:
        """Fetch one page of characters."""
        ...


class DefaultCharacterApiService:
    """Default adapter that delegates to function-based character API services."""

    async def enforce_rate_limit(
        self,
        *,
        last_request_at: float,
        min_interval_seconds: float,
        now: Callable[[], float],
        sleep: Callable[[float], Awaitable[None]],
    ) -> tuple[float, float]:
        return await _character_api.enforce_rate_limit(
            last_request_at=last_request_at,
            min_interval_seconds=min_interval_seconds,
            now=now,
            sleep=sleep,
        )

    async def fetch_page(
        self,
        *,
        client: httpx.AsyncClient | None,
        page: int,
        api_url: str,
        timeout_seconds: int,
    ) -> PageResult:
        return await _character_api.fetch_page(
            client=client,
            page=page,
            api_url=api_url,
            timeout_seconds=timeout_seconds,
        )


@dataclass(slots=True)
class AppServices:
    """Aggregated service interfaces consumed by the app layer."""

    character_api: CharacterApiService


def build_default_app_services() -> AppServices:
    """Build default app services backed by existing function-based modules."""
    return AppServices(character_api=DefaultCharacterApiService())


__all__ = [
    "AppServices",
    "CharacterApiService",
    "DefaultCharacterApiService",
    "build_default_app_services",
]
