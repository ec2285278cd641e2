"""Duration parsing and display helpers shared by schedules and history."""

import re
from datetime import timedelta

_DURATION_RE = re.compile(r"-?(?:\d+(?:\.\d+)?(?:h|m|s))+")
_PART_RE = re.compile(r"(\d+(?:\.\d+)?)(h|m|s)")
_UNIT_SECONDS = {"h": 3600, "m": 60, "s": 1}


def parse_frequency(text: str) -> timedelta:
    """
    Parse a compact duration string ("15m", "2h", "1h30m", "45s").

    A leading "-" negates the whole value; a bare "0" is zero.

    Raises:
        ValueError if the text is not a duration.
    """
    value = text.strip()
    if value in ("0", "-0"):
        return timedelta(0)
    if not _DURATION_RE.fullmatch(value):
        raise ValueError(f"Invalid duration: {text!r}")

    seconds = sum(float(n) * _UNIT_SECONDS[unit] for n, unit in _PART_RE.findall(value))
    if value.startswith("-"):
        seconds = -seconds
    return timedelta(seconds=seconds)


def format_frequency(delta: timedelta) -> str:
    """Render a duration in the compact form parse_frequency reads back."""
    total = int(delta.total_seconds())
    sign = "-" if total < 0 else ""
    total = abs(total)
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)

    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if seconds or not parts:
        parts.append(f"{seconds}s")
    return sign + "".join(parts)


def format_duration(total_seconds: int) -> str:
    """Human display form: 3723 -> "1h 2m 3s"; anything <= 0 -> "0s"."""
    if total_seconds <= 0:
        return "0s"
    hours, rest = divmod(int(total_seconds), 3600)
    minutes, seconds = divmod(rest, 60)

    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if seconds or not parts:
        parts.append(f"{seconds}s")
    return " ".join(parts)
