"""
Handlers and formatters for console logs.

configure_logging installs a single stderr handler on the root logger:
JSON lines when stderr is piped, a readable line on a terminal. Either way
the handler carries a ViewFilter, so each record knows which view emitted it.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from .context import ViewFilter

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Attributes every LogRecord has; anything else arrived through extra=
_BUILTIN_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "view_id"}


def _utc_timestamp(created: float) -> str:
    stamp = datetime.fromtimestamp(created, timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


class JSONFormatter(logging.Formatter):
    """
    One JSON object per record.

        {"timestamp": "2026-10-18T09:00:00.000Z", "level": "INFO",
         "logger": "coach_console.hooks", "message": "Hook schedule saved",
         "view_id": "view-3f2a9c01b7de", "hook_id": "ai_request"}

    Extras passed through extra= become top-level keys. Values that are not
    JSON-native are rendered with str().
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": _utc_timestamp(record.created),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        view_id = getattr(record, "view_id", None)
        if view_id:
            entry["view_id"] = view_id
        entry.update((k, v) for k, v in vars(record).items() if k not in _BUILTIN_ATTRS)
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class HumanFormatter(logging.Formatter):
    """2026-10-18 09:00:00 [INFO] coach_console.hooks: [view-3f2a9c01b7de] Hook triggered"""

    def __init__(self):
        super().__init__(datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        view_id = getattr(record, "view_id", None)
        tag = f"[{view_id}] " if view_id else ""
        line = f"{self.formatTime(record, self.datefmt)} [{record.levelname}] {record.name}: {tag}{record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(level: str = "INFO", json_format: bool | None = None) -> None:
    """
    Replace the root logger's handlers with one stderr handler.

    Args:
        level: One of LOG_LEVELS, case-insensitive.
        json_format: Force JSON (True) or human (False) output. None picks
            JSON when stderr is not a TTY.

    Raises:
        ValueError for a level outside LOG_LEVELS.
    """
    level_name = level.upper()
    if level_name not in LOG_LEVELS:
        raise ValueError(f"Unknown log level {level!r}; expected one of {', '.join(LOG_LEVELS)}")
    if json_format is None:
        json_format = not sys.stderr.isatty()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if json_format else HumanFormatter())
    handler.addFilter(ViewFilter())

    root = logging.getLogger()
    root.setLevel(level_name)
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)
