"""
Test configuration: ensures repo root is in sys.path + environment isolation.

This allows tests to import coach_console and tests.fixtures without an
editable install, and keeps a developer's own ~/.coach_console settings and
COACH_* variables out of every test.
"""

import sys
from pathlib import Path

import pytest

# Add repo root to sys.path so tests can import coach_console.*, tests.fixtures.*
REPO_ROOT = Path(__file__).parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

_ENV_VARS = (
    "COACH_BASE_URL",
    "COACH_WS_URL",
    "COACH_HTTP_TIMEOUT",
    "COACH_TICK_INTERVAL",
    "COACH_HISTORY_DAYS",
    "COACH_LOG_LEVEL",
    "COACH_LOG_JSON",
    "COACH_CONSOLE_CONFIG",
)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Point the console home at a temp dir and clear COACH_* overrides."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("COACH_CONSOLE_HOME", str(tmp_path / "home"))
    return tmp_path
