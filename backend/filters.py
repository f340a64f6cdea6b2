# backend/filters.py
"""
Query helpers for the scheduler review screen and the export download.

All filters accept "all" to mean no filtering. Time buckets look at an
interval's start hour only, so 11:00-13:00 counts as morning.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Union

from .errors import ValidationError
from .intervals import DayAvailability, TimeInterval, Weekday
from .time_utils import format_time
from .weekly import WeeklyAvailability, as_weekday

ALL = "all"


class TimeBucket(str, Enum):
    MORNING = "morning"      # start hour < 12
    AFTERNOON = "afternoon"  # 12 <= start hour < 18
    EVENING = "evening"      # start hour >= 18
    ALL = "all"


@dataclass(frozen=True)
class TeacherAvailability:
    teacher_id: str
    name: str
    email: str
    week: WeeklyAvailability


@dataclass(frozen=True)
class ExportRow:
    teacher_id: str
    teacher_name: str
    teacher_email: str
    day: str
    start: str
    end: str
    note: str


def by_teacher(teachers: Iterable[TeacherAvailability], teacher_id: str = ALL) -> List[TeacherAvailability]:
    if teacher_id == ALL:
        return list(teachers)
    return [t for t in teachers if t.teacher_id == teacher_id]


def by_day(days: Iterable[DayAvailability], day: Union[Weekday, str] = ALL) -> List[DayAvailability]:
    if day == ALL:
        return list(days)
    weekday = as_weekday(day)
    return [d for d in days if d.day == weekday]


def as_bucket(value: Union[TimeBucket, str]) -> TimeBucket:
    try:
        return TimeBucket(value)
    except ValueError:
        raise ValidationError(f"Unknown time bucket: {value!r}", [f"unknown time bucket {value!r}"])


def in_bucket(interval: TimeInterval, bucket: Union[TimeBucket, str]) -> bool:
    bucket = as_bucket(bucket)
    hour = interval.start.hour
    if bucket == TimeBucket.MORNING:
        return hour < 12
    if bucket == TimeBucket.AFTERNOON:
        return 12 <= hour < 18
    if bucket == TimeBucket.EVENING:
        return hour >= 18
    return True


def by_time_bucket(
    intervals: Iterable[TimeInterval], bucket: Union[TimeBucket, str] = TimeBucket.ALL
) -> List[TimeInterval]:
    bucket = as_bucket(bucket)
    return [interval for interval in intervals if in_bucket(interval, bucket)]


def export_rows(
    teachers: Iterable[TeacherAvailability],
    teacher_id: str = ALL,
    day: Union[Weekday, str] = ALL,
    bucket: Union[TimeBucket, str] = TimeBucket.ALL,
) -> List[ExportRow]:
    """Flatten filtered availability into one row per interval."""
    rows = []
    for teacher in by_teacher(teachers, teacher_id):
        for day_availability in by_day(teacher.week.days(), day):
            for interval in by_time_bucket(day_availability.intervals, bucket):
                rows.append(ExportRow(
                    teacher_id=teacher.teacher_id,
                    teacher_name=teacher.name,
                    teacher_email=teacher.email,
                    day=day_availability.day.value,
                    start=format_time(interval.start),
                    end=format_time(interval.end),
                    note=day_availability.note,
                ))
    return rows
