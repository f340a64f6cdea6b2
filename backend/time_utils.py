# backend/time_utils.py
"""
Minute-precision wall-clock times.

Times never roll over midnight: arithmetic clamps to 00:00 and 23:59.
"""

import re
from dataclasses import dataclass

from .errors import FormatError, RangeError

MINUTES_PER_DAY = 1440
LAST_MINUTE = MINUTES_PER_DAY - 1

TIME_RE = re.compile(r"^(\d{2}):(\d{2})$")


@dataclass(frozen=True, order=True)
class TimeOfDay:
    hour: int
    minute: int

    def __post_init__(self):
        if not 0 <= self.hour <= 23 or not 0 <= self.minute <= 59:
            raise RangeError(f"Invalid time {self.hour}:{self.minute}")

    def __str__(self) -> str:
        return format_time(self)

    @property
    def minutes(self) -> int:
        return to_minutes(self)


END_OF_DAY = TimeOfDay(23, 59)


def parse_time(value: str) -> TimeOfDay:
    """Parse 'HH:MM' (24-hour, zero-padded)."""
    if not isinstance(value, str):
        raise FormatError(f"Expected an HH:MM string, got {value!r}")
    match = TIME_RE.match(value.strip())
    if not match:
        raise FormatError(f"Time must be in HH:MM format: {value!r}")
    hour, minute = (int(part) for part in match.groups())
    if hour > 23 or minute > 59:
        raise FormatError(f"Time out of range: {value!r}")
    return TimeOfDay(hour, minute)


def format_time(t: TimeOfDay) -> str:
    return f"{t.hour:02d}:{t.minute:02d}"


def to_minutes(t: TimeOfDay) -> int:
    """Minutes since midnight."""
    return t.hour * 60 + t.minute


def from_minutes(total: int) -> TimeOfDay:
    if not 0 <= total <= LAST_MINUTE:
        raise RangeError(f"Minutes since midnight must be 0-{LAST_MINUTE}, got {total}")
    return TimeOfDay(total // 60, total % 60)


def add_minutes(t: TimeOfDay, delta: int) -> TimeOfDay:
    """Shift a time by delta minutes, clamped to the same day."""
    total = to_minutes(t) + delta
    return from_minutes(min(max(total, 0), LAST_MINUTE))


def compare(a: TimeOfDay, b: TimeOfDay) -> int:
    """Return -1, 0 or 1."""
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def format_duration(minutes: int) -> str:
    """Render a minute count as 'Xh Ym', e.g. 150 -> '2h 30m'."""
    hours, mins = divmod(minutes, 60)
    return f"{hours}h {mins}m"
