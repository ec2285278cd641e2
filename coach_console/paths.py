from __future__ import annotations

import os
from pathlib import Path

APP_ENV_HOME = "COACH_CONSOLE_HOME"
APP_ENV_CONFIG = "COACH_CONSOLE_CONFIG"


def app_home() -> Path:
    """
    User-writable home for the coach console.
    Override with COACH_CONSOLE_HOME.
    """
    if os.environ.get(APP_ENV_HOME):
        return Path(os.environ[APP_ENV_HOME]).expanduser().resolve()
    return (Path.home() / ".coach_console").resolve()


def config_dir() -> Path:
    return app_home() / "config"


def config_path() -> Path:
    """
    Settings file path.

    Resolution order:
    1. COACH_CONSOLE_CONFIG env var (explicit override)
    2. ~/.coach_console/config/console.yaml (default)
    """
    if os.environ.get(APP_ENV_CONFIG):
        return Path(os.environ[APP_ENV_CONFIG]).expanduser().resolve()
    return config_dir() / "console.yaml"
