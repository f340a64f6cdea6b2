# backend/intervals.py
"""
Per-day availability: an ordered list of disjoint [start, end) intervals plus a note.

Every operation here is pure: it takes a DayAvailability and returns a new one
and leaves the input untouched.

Adjacent intervals (a.end == b.start) are allowed and are never merged here;
only the grid conversion in grid.py merges contiguous slots.
"""

import logging
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, List, Optional, Tuple, Union

from .errors import NotFoundError, OverlapError, RangeError, ValidationError
from .time_utils import TimeOfDay, add_minutes, parse_time, to_minutes

logger = logging.getLogger(__name__)

# How far a resize pushes the end when the new start passes it
RESIZE_STEP_MINUTES = 60


class Weekday(str, Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"

    @property
    def index(self) -> int:
        return WEEKDAYS.index(self)


WEEKDAYS = list(Weekday)


@dataclass(frozen=True)
class TimeInterval:
    id: str
    start: TimeOfDay
    end: TimeOfDay

    @property
    def duration_minutes(self) -> int:
        return to_minutes(self.end) - to_minutes(self.start)

    def overlaps(self, other: "TimeInterval") -> bool:
        """Half-open intersection test; touching ends do not overlap."""
        return self.start < other.end and other.start < self.end


@dataclass(frozen=True)
class DayAvailability:
    day: Weekday
    intervals: Tuple[TimeInterval, ...] = field(default_factory=tuple)
    note: str = ""

    def __post_init__(self):
        # Always a tuple; a stored day is never mutated in place
        object.__setattr__(self, "intervals", tuple(self.intervals))

    @property
    def has_intervals(self) -> bool:
        return len(self.intervals) > 0


def new_interval_id() -> str:
    return str(uuid.uuid4())


def new_interval(
    start: Union[str, TimeOfDay],
    end: Union[str, TimeOfDay],
    interval_id: Optional[str] = None,
) -> TimeInterval:
    """Build an interval from HH:MM strings or TimeOfDay values."""
    if isinstance(start, str):
        start = parse_time(start)
    if isinstance(end, str):
        end = parse_time(end)
    return TimeInterval(id=interval_id or new_interval_id(), start=start, end=end)


def sort_intervals(intervals: Iterable[TimeInterval]) -> Tuple[TimeInterval, ...]:
    return tuple(sorted(intervals, key=lambda i: (i.start, i.end)))


def find_interval(day: DayAvailability, interval_id: str) -> TimeInterval:
    for interval in day.intervals:
        if interval.id == interval_id:
            return interval
    raise NotFoundError(f"Interval {interval_id} not found on {day.day.value}")


def _first_overlap(
    intervals: Iterable[TimeInterval], candidate: TimeInterval
) -> Optional[TimeInterval]:
    for existing in intervals:
        if existing.id != candidate.id and existing.overlaps(candidate):
            return existing
    return None


def _replace_interval(day: DayAvailability, updated: TimeInterval) -> DayAvailability:
    others = [i for i in day.intervals if i.id != updated.id]
    clash = _first_overlap(others, updated)
    if clash:
        raise OverlapError(
            f"{updated.start}-{updated.end} overlaps {clash.start}-{clash.end} "
            f"on {day.day.value}"
        )
    return replace(day, intervals=sort_intervals(others + [updated]))


# ==========================================
# MUTATIONS
# ==========================================

def insert(day: DayAvailability, interval: TimeInterval) -> DayAvailability:
    """
    Add an interval to the day.

    Overlapping ranges raise OverlapError; they are never merged.
    """
    if interval.start >= interval.end:
        raise ValidationError(
            f"Interval {interval.start}-{interval.end} must start before it ends",
            [f"interval {interval.id}: start {interval.start} is not before end {interval.end}"],
        )
    if any(existing.id == interval.id for existing in day.intervals):
        raise ValidationError(
            f"Interval id {interval.id} already exists on {day.day.value}",
            [f"duplicate interval id {interval.id}"],
        )
    clash = _first_overlap(day.intervals, interval)
    if clash:
        raise OverlapError(
            f"{interval.start}-{interval.end} overlaps {clash.start}-{clash.end} "
            f"on {day.day.value}"
        )
    return replace(day, intervals=sort_intervals(day.intervals + (interval,)))


def remove(day: DayAvailability, interval_id: str) -> DayAvailability:
    find_interval(day, interval_id)
    return replace(day, intervals=[i for i in day.intervals if i.id != interval_id])


def resize(
    day: DayAvailability,
    interval_id: str,
    new_start: Optional[TimeOfDay] = None,
    new_end: Optional[TimeOfDay] = None,
) -> DayAvailability:
    """
    Move an interval's start, end, or both, checking overlap once on the result.

    An end at or before the (new) start is ignored. When the start then reaches
    or passes the end, the end is pushed to start + 1 hour, clamped to 23:59. A
    start of 23:59 leaves no room for a one-minute interval and is rejected.
    Nothing to change returns the day as it was.
    """
    interval = find_interval(day, interval_id)
    start = interval.start if new_start is None else new_start
    end = interval.end

    if new_end is not None:
        if new_end > start:
            end = new_end
        else:
            logger.debug(f"Ignoring end {new_end} at or before start {start} ({interval_id})")

    if start >= end:
        end = add_minutes(start, RESIZE_STEP_MINUTES)
        if start >= end:
            raise RangeError(f"No room for an interval starting at {start}")
        logger.debug(f"Start {start} passed end {interval.end}; end moved to {end}")

    if (start, end) == (interval.start, interval.end):
        return day
    return _replace_interval(day, replace(interval, start=start, end=end))


def resize_start(day: DayAvailability, interval_id: str, new_start: TimeOfDay) -> DayAvailability:
    return resize(day, interval_id, new_start=new_start)


def resize_end(day: DayAvailability, interval_id: str, new_end: TimeOfDay) -> DayAvailability:
    """An end at or before the start is ignored and the day is returned unchanged."""
    return resize(day, interval_id, new_end=new_end)


def set_note(day: DayAvailability, text: str) -> DayAvailability:
    return replace(day, note=text or "")


# ==========================================
# VALIDATION
# ==========================================

def validate(day: DayAvailability) -> List[str]:
    """Return a list of invariant violations; an empty list means the day is valid."""
    violations = []
    seen_ids = set()

    for interval in day.intervals:
        if interval.start >= interval.end:
            violations.append(
                f"{day.day.value}: interval {interval.id} starts at {interval.start} "
                f"but ends at {interval.end}"
            )
        if interval.id in seen_ids:
            violations.append(f"{day.day.value}: duplicate interval id {interval.id}")
        seen_ids.add(interval.id)

    for previous, current in zip(day.intervals, day.intervals[1:]):
        if current.start < previous.start:
            violations.append(
                f"{day.day.value}: intervals out of order ({previous.start} before {current.start})"
            )
        if previous.overlaps(current):
            violations.append(
                f"{day.day.value}: {previous.start}-{previous.end} overlaps "
                f"{current.start}-{current.end}"
            )

    return violations

