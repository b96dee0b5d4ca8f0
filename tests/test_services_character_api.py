"""Tests for character API service helpers."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from character_browser.models import CHARACTER_API_URL, FetchFailure, PageResult
from character_browser.services.character_api_service import (
    USER_AGENT,
    build_request_body,
    decode_page_response,
    enforce_rate_limit,
    fetch_page,
)

PAYLOAD = {
    "data": {
        "characters": {
            "info": {"next": 3},
            "results": [
                {
                    "id": "21",
                    "name": "Aqua Morty",
                    "status": "unknown",
                    "species": "Humanoid",
                    "gender": "Male",
                    "origin": {"name": "unknown"},
                    "image": "https://rickandmortyapi.com/api/character/avatar/21.jpeg",
                }
            ],
        }
    }
}


def _response(status_code: int = 200, **kwargs) -> httpx.Response:
    return httpx.Response(status_code, request=httpx.Request("POST", CHARACTER_API_URL), **kwargs)


@pytest.mark.asyncio
async def test_enforce_rate_limit_waits_when_needed() -> None:
    class FakeClock:
        def __init__(self) -> None:
            self._calls = 0

        def now(self) -> float:
            self._calls += 1
            if self._calls == 1:
                return 100.2
            return 100.5

    clock = FakeClock()
    sleep = AsyncMock()

    new_last, waited = await enforce_rate_limit(
        last_request_at=100.0,
        min_interval_seconds=0.5,
        now=clock.now,
        sleep=sleep,
    )

    sleep.assert_awaited_once_with(pytest.approx(0.3))
    assert waited == pytest.approx(0.3)
    assert new_last == pytest.approx(100.5)


@pytest.mark.asyncio
async def test_enforce_rate_limit_skips_wait_on_first_request() -> None:
    sleep = AsyncMock()

    new_last, waited = await enforce_rate_limit(
        last_request_at=0.0,
        min_interval_seconds=0.5,
        now=lambda: 50.0,
        sleep=sleep,
    )

    sleep.assert_not_awaited()
    assert waited == 0.0
    assert new_last == 50.0


def test_build_request_body_carries_page_variable() -> None:
    body = build_request_body(4)
    assert body["variables"] == {"page": 4}
    assert "characters(page: $page)" in body["query"]


def test_decode_page_response_success() -> None:
    page = decode_page_response(_response(json=PAYLOAD), 2)
    assert isinstance(page, PageResult)
    assert page.has_next is True
    assert page.characters[0].name == "Aqua Morty"


@pytest.mark.parametrize("status_code", [404, 429, 500, 503])
def test_decode_page_response_http_error_becomes_fetch_failure(status_code) -> None:
    with pytest.raises(FetchFailure) as excinfo:
        decode_page_response(_response(status_code, json={}), 5)
    assert excinfo.value.page == 5
    assert excinfo.value.status_code == status_code


def test_decode_page_response_invalid_json_becomes_fetch_failure() -> None:
    with pytest.raises(FetchFailure, match="Invalid response") as excinfo:
        decode_page_response(_response(content=b"<html>oops</html>"), 1)
    assert excinfo.value.status_code is None


def test_decode_page_response_graphql_error_becomes_fetch_failure() -> None:
    response = _response(json={"errors": [{"message": "bad page"}]})
    with pytest.raises(FetchFailure, match="bad page"):
        decode_page_response(response, 1)


@pytest.mark.asyncio
async def test_fetch_page_uses_shared_client() -> None:
    client = SimpleNamespace(post=AsyncMock(return_value=_response(json=PAYLOAD)))

    page = await fetch_page(client=client, page=2, timeout_seconds=12)

    assert len(page.characters) == 1
    client.post.assert_awaited_once()
    args, kwargs = client.post.call_args
    assert args == (CHARACTER_API_URL,)
    assert kwargs["json"]["variables"] == {"page": 2}
    assert kwargs["headers"] == {"User-Agent": USER_AGENT}
    assert kwargs["timeout"] == 12


@pytest.mark.asyncio
async def test_fetch_page_honors_api_url() -> None:
    client = SimpleNamespace(post=AsyncMock(return_value=_response(json=PAYLOAD)))
    await fetch_page(
        client=client, page=1, api_url="http://localhost:9/graphql", timeout_seconds=5
    )
    assert client.post.call_args.args == ("http://localhost:9/graphql",)


@pytest.mark.asyncio
async def test_fetch_page_without_shared_client_uses_temp_client() -> None:
    response = _response(json=PAYLOAD)

    class DummyClient:
        async def __aenter__(self):
            return self

        async def __aexit__(self, exc_type, exc, tb):
            return False

        async def post(self, *_args, **_kwargs):
            return response

    with patch(
        "character_browser.services.character_api_service.httpx.AsyncClient",
        return_value=DummyClient(),
    ):
        page = await fetch_page(client=None, page=1, timeout_seconds=30)

    assert page.has_next is True


@pytest.mark.asyncio
async def test_fetch_page_network_error_becomes_fetch_failure() -> None:
    client = MagicMock()
    client.post = AsyncMock(side_effect=httpx.ConnectError("connection refused"))

    with pytest.raises(FetchFailure, match="Network error") as excinfo:
        await fetch_page(client=client, page=3, timeout_seconds=30)

    assert excinfo.value.page == 3
    assert excinfo.value.status_code is None


@pytest.mark.asyncio
async def test_fetch_page_invalid_url_becomes_fetch_failure() -> None:
    client = MagicMock()
    client.post = AsyncMock(side_effect=httpx.InvalidURL("Invalid port"))

    with pytest.raises(FetchFailure, match="Network error") as excinfo:
        await fetch_page(client=client, page=2, api_url="http://host:port", timeout_seconds=30)

    assert excinfo.value.page == 2


@pytest.mark.asyncio
async def test_fetch_page_malformed_api_url_becomes_fetch_failure() -> None:
    with pytest.raises(FetchFailure) as excinfo:
        await fetch_page(client=None, page=1, api_url="http://[::1", timeout_seconds=1)

    assert excinfo.value.page == 1
    assert isinstance(excinfo.value.__cause__, httpx.InvalidURL)


@pytest.mark.asyncio
async def test_fetch_page_rejects_page_zero() -> None:
    client = MagicMock()
    client.post = AsyncMock()
    with pytest.raises(ValueError, match="Page must be >= 1"):
        await fetch_page(client=client, page=0, timeout_seconds=30)
    client.post.assert_not_awaited()
