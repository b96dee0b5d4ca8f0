"""Tests for user-facing error copy."""

from __future__ import annotations

from character_browser.action_messages import (
    build_actionable_error,
    build_fetch_error_message,
    build_next_step_hint,
)
from character_browser.models import FetchFailure


def test_build_actionable_error_with_reason() -> None:
    message = build_actionable_error("load page 2", why="timeout", next_step="retry")
    assert message == "Could not load page 2.\nWhy: timeout.\nNext step: retry."


def test_build_next_step_hint_keeps_existing_punctuation() -> None:
    assert build_next_step_hint("Try again!") == "Next step: Try again!"


def test_rate_limited_fetch_message() -> None:
    message = build_fetch_error_message(FetchFailure("x", page=4, status_code=429))
    assert message.startswith("Could not load page 4.")
    assert "HTTP 429" in message
    assert "press r to retry" in message


def test_server_error_fetch_message() -> None:
    message = build_fetch_error_message(FetchFailure("x", page=1, status_code=502))
    assert "unavailable" in message
    assert "HTTP 502" in message


def test_client_error_fetch_message() -> None:
    message = build_fetch_error_message(FetchFailure("x", page=1, status_code=400))
    assert "rejected" in message
    assert "api_url" in message


def test_network_fetch_message_includes_cause() -> None:
    message = build_fetch_error_message(FetchFailure("Network error: refused", page=2))
    assert "Why: Network error: refused." in message
    assert "check connectivity" in message


def test_retry_hint_is_customisable() -> None:
    message = build_fetch_error_message(
        FetchFailure("x", page=1, status_code=429), retry_hint="run the command again"
    )
    assert "press r" not in message
    assert "run the command again" in message
