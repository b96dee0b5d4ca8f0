"""Configuration persistence: load and save."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from character_browser.models import (
    CHARACTER_API_URL,
    CHARACTER_SPECIES,
    CHARACTER_STATUSES,
    CONFIG_APP_NAME,
    DEFAULT_LANGUAGE,
    DEFAULT_MIN_REQUEST_INTERVAL_SECONDS,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    LOAD_MODES,
    MODE_PAGINATION,
    SORT_OPTIONS,
    SUPPORTED_LANGUAGES,
    SessionState,
    UserConfig,
)

logger = logging.getLogger(__name__)

# ============================================================================
# Configuration Persistence
# ============================================================================
#
# Validation contract: _dict_to_config() guarantees valid output for any input:
#
#   Field                         Rule                          Handler
#   ────────────────────────────  ────────────────────────────  ─────────────────────
#   language                      in SUPPORTED_LANGUAGES        _dict_to_config
#   default_mode, session.mode    in LOAD_MODES                 _coerce_choice
#   session.sort_key              in SORT_OPTIONS               _parse_session_state
#   session.status_filter         "" or in CHARACTER_STATUSES   _parse_session_state
#   session.species_filter        "" or in CHARACTER_SPECIES    _parse_session_state
#   request_timeout_seconds       1 ≤ x ≤ 300                   _coerce_timeout
#   min_request_interval_seconds  0 ≤ x ≤ 60                    _coerce_interval
#   scalar fields                 type-checked via _safe_get()  _dict_to_config
#
CONFIG_FILENAME = "config.json"
REQUEST_TIMEOUT_LIMIT_SECONDS = 300
MIN_REQUEST_INTERVAL_LIMIT_SECONDS = 60.0


def get_config_path() -> Path:
    """Get the path to the configuration file.

    Uses platformdirs for cross-platform config directory:
    - Linux: ~/.config/character-browser/config.json
    - macOS: ~/Library/Application Support/character-browser/config.json
    - Windows: %APPDATA%/character-browser/config.json
    """
    config_dir = Path(user_config_dir(CONFIG_APP_NAME))
    return config_dir / CONFIG_FILENAME


def _config_to_dict(config: UserConfig) -> dict[str, Any]:
    """Serialize UserConfig to a JSON-compatible dictionary."""
    return {
        "version": config.version,
        "language": config.language,
        "default_mode": config.default_mode,
        "api_url": config.api_url,
        "request_timeout_seconds": _coerce_timeout(config.request_timeout_seconds),
        "min_request_interval_seconds": _coerce_interval(config.min_request_interval_seconds),
        "session": {
            "mode": config.session.mode,
            "status_filter": config.session.status_filter,
            "species_filter": config.session.species_filter,
            "sort_key": config.session.sort_key,
        },
    }


def _safe_get(data: dict, key: str, default: Any, expected_type: type) -> Any:
    """Safely get a value from dict with type validation.

    Returns the default if key is missing or value has wrong type.
    """
    value = data.get(key, default)
    if not isinstance(value, expected_type):
        return default
    return value


def _coerce_choice(value: Any, choices: tuple[str, ...], default: str, name: str) -> str:
    """Return value when it is one of choices, else default (with a warning)."""
    if isinstance(value, str) and value in choices:
        return value
    if value is not None:
        logger.warning("Invalid %s %r, defaulting to %r", name, value, default)
    return default


def _coerce_timeout(value: Any) -> int:
    """Validate and clamp the request timeout."""
    if not isinstance(value, int) or isinstance(value, bool):
        return DEFAULT_REQUEST_TIMEOUT_SECONDS
    return max(1, min(value, REQUEST_TIMEOUT_LIMIT_SECONDS))


def _coerce_interval(value: Any) -> float:
    """Validate and clamp the minimum interval between requests."""
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return DEFAULT_MIN_REQUEST_INTERVAL_SECONDS
    return max(0.0, min(float(value), MIN_REQUEST_INTERVAL_LIMIT_SECONDS))


def _parse_session_state(data: dict[str, Any]) -> SessionState:
    """Parse the session state section from config data."""
    session_data = data.get("session", {})
    if not isinstance(session_data, dict):
        session_data = {}

    status_filter = _safe_get(session_data, "status_filter", "", str)
    if status_filter and status_filter not in CHARACTER_STATUSES:
        status_filter = ""
    species_filter = _safe_get(session_data, "species_filter", "", str)
    if species_filter and species_filter not in CHARACTER_SPECIES:
        species_filter = ""

    return SessionState(
        mode=_coerce_choice(session_data.get("mode"), LOAD_MODES, MODE_PAGINATION, "session mode"),
        status_filter=status_filter,
        species_filter=species_filter,
        sort_key=_coerce_choice(session_data.get("sort_key"), SORT_OPTIONS, "", "sort key"),
    )


def _dict_to_config(data: dict[str, Any]) -> UserConfig:
    """Deserialize a dictionary to UserConfig with type validation."""
    return UserConfig(
        language=_coerce_choice(
            data.get("language"), SUPPORTED_LANGUAGES, DEFAULT_LANGUAGE, "language"
        ),
        default_mode=_coerce_choice(
            data.get("default_mode"), LOAD_MODES, MODE_PAGINATION, "default mode"
        ),
        api_url=_safe_get(data, "api_url", CHARACTER_API_URL, str) or CHARACTER_API_URL,
        request_timeout_seconds=_coerce_timeout(data.get("request_timeout_seconds")),
        min_request_interval_seconds=_coerce_interval(data.get("min_request_interval_seconds")),
        session=_parse_session_state(data),
        version=_safe_get(data, "version", 1, int),
    )


def _backup_corrupt_config(config_path: Path) -> None:
    """Move an unreadable config aside so the next save starts clean."""
    backup = config_path.with_name(config_path.name + ".corrupt")
    try:
        os.replace(config_path, backup)
    except OSError as e:
        logger.warning("Could not back up corrupt config file: %s", e)


def load_config() -> UserConfig:
    """Load configuration from disk.

    Returns default config if file doesn't exist or is corrupted. A corrupt
    file is renamed to ``config.json.corrupt`` and the returned config has
    ``config_defaulted`` set so the UI can warn.
    """
    config_path = get_config_path()

    if not config_path.exists():
        return UserConfig()

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning("Config file has invalid JSON, using defaults: %s", e)
        _backup_corrupt_config(config_path)
        return UserConfig(config_defaulted=True)
    except OSError as e:
        logger.warning("Could not read config file, using defaults: %s", e)
        return UserConfig()

    if not isinstance(data, dict):
        logger.warning("Config file root is not an object, using defaults")
        _backup_corrupt_config(config_path)
        return UserConfig(config_defaulted=True)
    return _dict_to_config(data)


def save_config(config: UserConfig) -> bool:
    """Save configuration to disk atomically.

    Uses write-to-tempfile + os.replace() to prevent partial writes
    on crash/interrupt from corrupting the config file.

    Creates the config directory if it doesn't exist.
    Returns True on success, False on failure.
    """
    config_path = get_config_path()

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = _config_to_dict(config)
        json_str = json.dumps(data, indent=2, ensure_ascii=False)
        fd, tmp_path = tempfile.mkstemp(dir=config_path.parent, suffix=".tmp", prefix=".config-")
        closed = False
        try:
            os.write(fd, json_str.encode("utf-8"))
            os.close(fd)
            closed = True
            os.replace(tmp_path, config_path)
        except BaseException:
            if not closed:
                os.close(fd)
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise
        return True
    except OSError as e:
        logger.error("Failed to save config: %s", e)
        return False


__all__ = [
    "CONFIG_APP_NAME",
    "CONFIG_FILENAME",
    "get_config_path",
    "load_config",
    "save_config",
]
