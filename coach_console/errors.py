"""
Error taxonomy for console operations.

Remote calls raise TransportFailure or RemoteRejection; the hook registry,
result feed and history views catch them at the call site and hand back an
ActionResult so one hook's failure never disturbs another.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from coach_console.schedule import InvalidWindow


class ConsoleError(Exception):
    """Base class for console failures."""

    pass


class TransportFailure(ConsoleError):
    """Network or connection-level failure talking to the coach service."""

    pass


class RemoteRejection(ConsoleError):
    """The coach service answered with a non-success status."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(body.strip() or f"HTTP {status_code}")


class ValidationFailure(ConsoleError):
    """A schedule window broke a local constraint."""

    def __init__(self, invalid: "InvalidWindow"):
        self.invalid = invalid
        super().__init__(invalid.message)


class ErrorKind(str, Enum):
    TRANSPORT = "transport"
    REMOTE = "remote"
    VALIDATION = "validation"
    PENDING = "pending"
    UNKNOWN_ID = "unknown_id"


@dataclass
class ActionResult:
    """Outcome of a user-facing action (save, trigger, context, mark-read)."""

    success: bool
    error: str | None = None
    error_kind: ErrorKind | None = None
    data: Any = None

    @classmethod
    def ok(cls, data: Any = None) -> "ActionResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, kind: ErrorKind, error: str, data: Any = None) -> "ActionResult":
        return cls(success=False, error=error, error_kind=kind, data=data)

    @classmethod
    def from_exception(cls, exc: ConsoleError) -> "ActionResult":
        """Map a caught console error onto its result kind."""
        if isinstance(exc, RemoteRejection):
            return cls.fail(ErrorKind.REMOTE, str(exc))
        if isinstance(exc, ValidationFailure):
            return cls.fail(ErrorKind.VALIDATION, str(exc), data=exc.invalid)
        return cls.fail(ErrorKind.TRANSPORT, str(exc))

    def to_dict(self) -> dict:
        """Convert to dictionary for logging/JSON output."""
        return {
            "success": self.success,
            "error": self.error,
            "error_kind": self.error_kind.value if self.error_kind else None,
        }
