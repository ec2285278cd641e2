"""
Schedule window rules: validation, parameter normalization and eligibility.

A window is a same-day range [first_run, last_run] plus a minimum gap between
runs. Windows that wrap past midnight (first_run after last_run) are rejected,
not read as overnight ranges.

Usage:
    from coach_console.schedule import validate, normalize, is_due

    check = validate(window, hook.parameter_schema)
    if not check.ok:
        print(check.message)
    window = normalize(window, hook.parameter_schema)
    if is_due(window, datetime.now(), last_fired):
        ...
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta
from enum import Enum
from typing import Optional, Union

from coach_console.durations import format_frequency
from coach_console.models import ParamSpec, ScheduleWindow

FREQUENCY_PRESETS: tuple[tuple[str, str], ...] = (
    ("15 min", "15m"),
    ("30 min", "30m"),
    ("1 hour", "1h"),
    ("2 hours", "2h"),
    ("4 hours", "4h"),
)

DEFAULT_FIRST_RUN = time(9, 0)
DEFAULT_LAST_RUN = time(21, 0)
DEFAULT_FREQUENCY = timedelta(hours=2)


class WindowViolation(str, Enum):
    FIRST_AFTER_LAST = "first_after_last"
    NON_POSITIVE_FREQUENCY = "non_positive_frequency"
    UNKNOWN_PARAMETER = "unknown_parameter"


@dataclass(frozen=True)
class Violation:
    code: WindowViolation
    message: str
    key: str | None = None


@dataclass(frozen=True)
class ValidWindow:
    """Validation passed."""

    ok: bool = True


@dataclass(frozen=True)
class InvalidWindow:
    """Validation failed; every broken constraint is listed."""

    violations: tuple[Violation, ...] = field(default_factory=tuple)
    ok: bool = False

    @property
    def codes(self) -> set[WindowViolation]:
        return {v.code for v in self.violations}

    @property
    def message(self) -> str:
        return "; ".join(v.message for v in self.violations)


WindowCheck = Union[ValidWindow, InvalidWindow]


def _timing_violations(window: ScheduleWindow) -> list[Violation]:
    violations: list[Violation] = []

    if window.first_run > window.last_run:
        violations.append(
            Violation(
                WindowViolation.FIRST_AFTER_LAST,
                f"First run {window.first_run:%H:%M} is after last run {window.last_run:%H:%M}",
            )
        )

    if window.frequency <= timedelta(0):
        violations.append(
            Violation(
                WindowViolation.NON_POSITIVE_FREQUENCY,
                f"Frequency must be positive, got {format_frequency(window.frequency)}",
            )
        )
    return violations


def validate(window: ScheduleWindow, schema: Sequence[ParamSpec] = ()) -> WindowCheck:
    """
    Check a window against its ordering, frequency and parameter constraints.

    Never raises; returns ValidWindow or an InvalidWindow naming each
    violated constraint.
    """
    violations = _timing_violations(window)

    known = {spec.key for spec in schema}
    for key in sorted(window.parameters):
        if key not in known:
            violations.append(
                Violation(WindowViolation.UNKNOWN_PARAMETER, f"Unknown parameter: {key}", key=key)
            )

    if violations:
        return InvalidWindow(violations=tuple(violations))
    return ValidWindow()


def normalize(window: ScheduleWindow, schema: Sequence[ParamSpec]) -> ScheduleWindow:
    """Fill every declared parameter the window lacks with its default."""
    params = dict(window.parameters)
    for spec in schema:
        # Empty string counts as unset
        if not params.get(spec.key):
            params[spec.key] = spec.default_value
    return window.model_copy(update={"parameters": params})


def default_window(schema: Sequence[ParamSpec] = ()) -> ScheduleWindow:
    """Starting draft for a hook that has never been configured."""
    window = ScheduleWindow(
        enabled=False,
        first_run=DEFAULT_FIRST_RUN,
        last_run=DEFAULT_LAST_RUN,
        frequency=DEFAULT_FREQUENCY,
    )
    return normalize(window, schema)


def in_window(window: ScheduleWindow, moment: time) -> bool:
    """Inclusive time-of-day check."""
    return window.first_run <= moment <= window.last_run


def is_due(window: ScheduleWindow, now: datetime, last_fired: Optional[datetime] = None) -> bool:
    """
    True iff the window is enabled, now's time of day is inside
    [first_run, last_run], and at least `frequency` has passed since last_fired.

    Advisory only; nothing here executes hooks.
    """
    if not window.enabled:
        return False
    if not in_window(window, now.time()):
        return False
    if last_fired is None:
        return True
    return now - last_fired >= window.frequency


def next_eligible_run(
    window: ScheduleWindow, now: datetime, last_fired: Optional[datetime] = None
) -> datetime | None:
    """
    Earliest instant >= now at which is_due would hold.

    Returns None for disabled windows and for windows whose bounds or
    frequency are invalid. Parameters play no part in timing.
    """
    if not window.enabled or _timing_violations(window):
        return None

    candidate = now
    if last_fired is not None:
        candidate = max(candidate, last_fired + window.frequency)

    day_start = candidate.replace(
        hour=window.first_run.hour, minute=window.first_run.minute, second=0, microsecond=0
    )
    day_end = candidate.replace(
        hour=window.last_run.hour, minute=window.last_run.minute, second=0, microsecond=0
    )
    if candidate < day_start:
        return day_start
    if candidate <= day_end:
        return candidate
    return day_start + timedelta(days=1)
