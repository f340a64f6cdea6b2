# backend/weekly.py
"""
A teacher's week of availability.

WeeklyAvailability owns one DayAvailability per weekday. Every write goes through
replace_day or replace_week, which validate before applying anything.
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Union

from . import intervals as interval_set
from .errors import ValidationError
from .intervals import WEEKDAYS, DayAvailability, TimeInterval, Weekday
from .time_utils import TimeOfDay, format_duration

logger = logging.getLogger(__name__)

DayKey = Union[Weekday, str]


def as_weekday(value: DayKey) -> Weekday:
    try:
        return Weekday(value)
    except ValueError:
        raise ValidationError(f"Unknown day: {value!r}", [f"unknown day {value!r}"])


class WeeklyAvailability:
    """Seven days of availability. Missing days read back as empty."""

    def __init__(self, days: Optional[Mapping[DayKey, DayAvailability]] = None):
        self._days: Dict[Weekday, DayAvailability] = {}
        if days:
            self.replace_week(days)

    def __repr__(self):
        return f"WeeklyAvailability({self.days_with_availability()} days, {self.total_minutes()} min)"

    def __eq__(self, other):
        if not isinstance(other, WeeklyAvailability):
            return NotImplemented
        return self.days() == other.days()

    def day(self, weekday: DayKey) -> DayAvailability:
        weekday = as_weekday(weekday)
        return self._days.get(weekday) or DayAvailability(day=weekday)

    def days(self) -> List[DayAvailability]:
        """All seven days in Monday..Sunday order."""
        return [self.day(weekday) for weekday in WEEKDAYS]

    def copy(self) -> "WeeklyAvailability":
        week = WeeklyAvailability()
        week._days = dict(self._days)
        return week

    # ==========================================
    # WHOLESALE WRITES
    # ==========================================

    def replace_day(self, day: DayAvailability) -> None:
        violations = interval_set.validate(day)
        if violations:
            logger.warning(f"Rejected {day.day.value}: {violations}")
            raise ValidationError(f"{day.day.value} is not valid", violations)
        self._days[day.day] = day

    def replace_week(self, days: Mapping[DayKey, DayAvailability]) -> None:
        """
        Replace the whole week.

        All days are validated before any is applied; a single bad day rejects
        the write and leaves the week as it was. Days missing from the mapping
        become empty.
        """
        violations = []
        incoming: Dict[Weekday, DayAvailability] = {}

        for key, day in days.items():
            try:
                weekday = as_weekday(key)
            except ValidationError as e:
                violations.extend(e.violations)
                continue
            if day.day != weekday:
                violations.append(f"{weekday.value}: entry describes {day.day.value}")
                continue
            violations.extend(interval_set.validate(day))
            incoming[weekday] = day

        if violations:
            logger.warning(f"Rejected week update: {violations}")
            raise ValidationError("Week is not valid", violations)

        self._days = incoming

    # ==========================================
    # ADDRESSED DAY EDITS
    # ==========================================

    def insert_interval(self, weekday: DayKey, interval: TimeInterval) -> DayAvailability:
        self.replace_day(interval_set.insert(self.day(weekday), interval))
        return self.day(weekday)

    def remove_interval(self, weekday: DayKey, interval_id: str) -> DayAvailability:
        self.replace_day(interval_set.remove(self.day(weekday), interval_id))
        return self.day(weekday)

    def resize_interval_start(self, weekday: DayKey, interval_id: str, new_start: TimeOfDay) -> DayAvailability:
        self.replace_day(interval_set.resize_start(self.day(weekday), interval_id, new_start))
        return self.day(weekday)

    def resize_interval_end(self, weekday: DayKey, interval_id: str, new_end: TimeOfDay) -> DayAvailability:
        self.replace_day(interval_set.resize_end(self.day(weekday), interval_id, new_end))
        return self.day(weekday)

    def resize_interval(
        self,
        weekday: DayKey,
        interval_id: str,
        new_start: Optional[TimeOfDay] = None,
        new_end: Optional[TimeOfDay] = None,
    ) -> DayAvailability:
        self.replace_day(interval_set.resize(self.day(weekday), interval_id, new_start, new_end))
        return self.day(weekday)

    def set_note(self, weekday: DayKey, text: str) -> DayAvailability:
        self.replace_day(interval_set.set_note(self.day(weekday), text))
        return self.day(weekday)

    # ==========================================
    # REPORTING
    # ==========================================

    def intervals(self) -> Iterable[TimeInterval]:
        for day in self.days():
            yield from day.intervals

    def total_minutes(self) -> int:
        return sum(interval.duration_minutes for interval in self.intervals())

    def total_label(self) -> str:
        return format_duration(self.total_minutes())

    def days_with_availability(self) -> int:
        return sum(1 for day in self.days() if day.has_intervals)
