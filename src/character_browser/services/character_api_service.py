"""Character API service helpers for rate limits and page fetches."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

import httpx

from character_browser.models import CHARACTER_API_URL, FetchFailure, PageResult
from character_browser.parsing import CHARACTERS_QUERY, parse_characters_payload

logger = logging.getLogger(__name__)

USER_AGENT = "character-browser/0.1"


async def enforce_rate_limit(
    *,
    last_request_at: float,
    min_interval_seconds: float,
    now: Callable[[], float],
    sleep: Callable[[float], Awaitable[None]],
) -> tuple[float, float]:
    """Wait as needed to respect API rate limits.

    Returns:
        Tuple of (new_last_request_at, waited_seconds).
    """
    current = now()
    waited_seconds = 0.0
    elapsed = current - last_request_at
    if last_request_at > 0 and elapsed < min_interval_seconds:
        waited_seconds = min_interval_seconds - elapsed
        await sleep(waited_seconds)
    return now(), waited_seconds


def build_request_body(page: int) -> dict[str, object]:
    """GraphQL request body for one page of characters."""
    return {"query": CHARACTERS_QUERY, "variables": {"page": page}}


def decode_page_response(response: httpx.Response, page: int) -> PageResult:
    """Turn an HTTP response into a PageResult, normalising errors to FetchFailure."""
    try:
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        status_code = exc.response.status_code
        raise FetchFailure(
            f"HTTP {status_code} from character API", page=page, status_code=status_code
        ) from exc
    try:
        return parse_characters_payload(response.json())
    except ValueError as exc:
        raise FetchFailure(f"Invalid response: {exc}", page=page) from exc


async def fetch_page(
    *,
    client: httpx.AsyncClient | None,
    page: int,
    api_url: str = CHARACTER_API_URL,
    timeout_seconds: int,
    user_agent: str = USER_AGENT,
) -> PageResult:
    """Fetch a single page of characters.

    Raises:
        FetchFailure: Transport, HTTP status, or payload error.
    """
    if page < 1:
        raise ValueError(f"Page must be >= 1, got {page}")
    body = build_request_body(page)
    headers = {"User-Agent": user_agent}

    try:
        if client is not None:
            response = await client.post(
                api_url,
                json=body,
                headers=headers,
                timeout=timeout_seconds,
            )
        else:
            async with httpx.AsyncClient() as tmp_client:
                response = await tmp_client.post(
                    api_url,
                    json=body,
                    headers=headers,
                    timeout=timeout_seconds,
                )
    except (httpx.HTTPError, httpx.InvalidURL, OSError) as exc:
        logger.warning("Character page %d request failed: %s", page, exc, exc_info=True)
        raise FetchFailure(f"Network error: {exc}", page=page) from exc

    return decode_page_response(response, page)


__all__ = [
    "USER_AGENT",
    "build_request_body",
    "decode_page_response",
    "enforce_rate_limit",
    "fetch_page",
]
