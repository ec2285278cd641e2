"""
Centralized configuration for the coach console.

Values resolve in order: environment variable -> YAML settings file -> default.

Usage:
    from coach_console.config import load_settings

    settings = load_settings()
    client = CoachClient(settings.base_url, timeout=settings.http_timeout)
"""

import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlsplit, urlunsplit

import yaml
from pydantic import BaseModel, Field, field_validator

from coach_console import paths
from coach_console.observability import LOG_LEVELS

logger = logging.getLogger(__name__)

# ============================================================
# Defaults
# ============================================================

DEFAULT_BASE_URL: str = "http://localhost:8080"
"""Coach service root; every pull endpoint is resolved against it."""

DEFAULT_HTTP_TIMEOUT: float = 10.0
"""Seconds before a REST call is abandoned as a transport failure."""

DEFAULT_TICK_INTERVAL: float = 1.0
"""Countdown cadence in seconds."""

DEFAULT_HISTORY_DAYS: int = 7
"""How far back the session history list reaches."""

WS_PATH = "/connect"


def _log_level(value: str) -> str:
    level = value.upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"unknown log level {value!r}, expected one of {', '.join(LOG_LEVELS)}")
    return level


# env var -> (settings field, caster)
_ENV_KEYS: dict[str, tuple[str, Callable[[str], Any]]] = {
    "COACH_BASE_URL": ("base_url", str),
    "COACH_WS_URL": ("ws_url", str),
    "COACH_HTTP_TIMEOUT": ("http_timeout", float),
    "COACH_TICK_INTERVAL": ("tick_interval", float),
    "COACH_HISTORY_DAYS": ("history_days", int),
    "COACH_LOG_LEVEL": ("log_level", _log_level),
}


class Settings(BaseModel):
    """Resolved console settings."""

    model_config = {"frozen": True}

    base_url: str = DEFAULT_BASE_URL
    ws_url: str | None = None
    http_timeout: float = Field(default=DEFAULT_HTTP_TIMEOUT, gt=0)
    tick_interval: float = Field(default=DEFAULT_TICK_INTERVAL, gt=0)
    history_days: int = Field(default=DEFAULT_HISTORY_DAYS, ge=1)
    log_level: str = "INFO"
    log_json: bool | None = None

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        return _log_level(value)

    @property
    def push_url(self) -> str:
        """Websocket URL, derived from base_url when not set explicitly."""
        if self.ws_url:
            return self.ws_url
        return derive_ws_url(self.base_url)


def derive_ws_url(base_url: str) -> str:
    """http://host:port/x -> ws://host:port/connect (https -> wss)."""
    parts = urlsplit(base_url)
    scheme = "wss" if parts.scheme == "https" else "ws"
    return urlunsplit((scheme, parts.netloc, WS_PATH, "", ""))


def _env_bool(value: str) -> bool | None:
    if value.lower() in ("1", "true", "yes"):
        return True
    if value.lower() in ("0", "false", "no"):
        return False
    return None


def _read_file(path: Optional[str]) -> dict[str, Any]:
    """
    Load the YAML settings document.

    Raises:
        FileNotFoundError if an explicitly requested file doesn't exist.
        yaml.YAMLError if the file is invalid YAML.
        ValueError if the document is not a mapping.
    """
    config_path = Path(path) if path else paths.config_path()
    if not config_path.exists():
        if path:
            raise FileNotFoundError(f"Console settings not found: {config_path}")
        return {}

    with open(config_path) as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{config_path} must contain a mapping of settings")
    return data


def load_settings(path: Optional[str] = None) -> Settings:
    """Resolve settings from env, then the YAML file, then defaults."""
    values = {k: v for k, v in _read_file(path).items() if k in Settings.model_fields}

    for env_key, (field, caster) in _ENV_KEYS.items():
        raw = os.environ.get(env_key)
        if raw is None:
            continue
        try:
            values[field] = caster(raw)
        except ValueError:
            logger.warning(f"Ignoring invalid {env_key}={raw!r}")

    raw_json = os.environ.get("COACH_LOG_JSON")
    if raw_json is not None:
        values["log_json"] = _env_bool(raw_json)

    return Settings(**values)
