# COACH CONSOLE - Client library
"""
Exports for the CLI and other consumers.
"""

from .client import CoachClient
from .config import Settings, load_settings
from .console import Console
from .errors import ActionResult, ConsoleError, ErrorKind, RemoteRejection, TransportFailure
from .hooks import HookCard, HookRegistryCache
from .models import (
    Configured,
    FocusRecord,
    HookDefinition,
    HookResult,
    ParamSpec,
    ScheduleWindow,
    SessionState,
    Unconfigured,
)
from .results import ResultFeed
from .schedule import is_due, next_eligible_run, normalize, validate
from .session import SessionFeed, SessionStateReconciler
from .ticker import ClockTicker

__version__ = "0.1.0"

__all__ = [
    "CoachClient",
    "Settings",
    "load_settings",
    "Console",
    "ActionResult",
    "ConsoleError",
    "ErrorKind",
    "RemoteRejection",
    "TransportFailure",
    "HookCard",
    "HookRegistryCache",
    "Configured",
    "FocusRecord",
    "HookDefinition",
    "HookResult",
    "ParamSpec",
    "ScheduleWindow",
    "SessionState",
    "Unconfigured",
    "ResultFeed",
    "is_due",
    "next_eligible_run",
    "normalize",
    "validate",
    "SessionFeed",
    "SessionStateReconciler",
    "ClockTicker",
]
