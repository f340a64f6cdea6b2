# backend/schemas.py
"""
Request/response models shared by the availability and scheduler routers,
plus the conversions between them and the domain types.

Times travel as "HH:MM" strings and are parsed with time_utils, so a malformed
value surfaces as FormatError rather than a pydantic error.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel

from .filters import ExportRow
from .intervals import DayAvailability, TimeInterval, Weekday, new_interval, sort_intervals
from .time_utils import format_time
from .weekly import WeeklyAvailability


# ==========================================
# PYDANTIC MODELS
# ==========================================

class IntervalIn(BaseModel):
    """A block sent by an editor. Omit id for a new block."""
    id: Optional[str] = None
    start: str
    end: str


class IntervalOut(BaseModel):
    id: str
    start: str
    end: str
    duration_minutes: int


class IntervalResize(BaseModel):
    """Drag one edge (or both) of an existing block."""
    start: Optional[str] = None
    end: Optional[str] = None


class NoteIn(BaseModel):
    note: str = ""


class DayIn(BaseModel):
    intervals: List[IntervalIn] = []
    note: str = ""


class DayOut(BaseModel):
    day: Weekday
    intervals: List[IntervalOut]
    note: str


class WeekIn(BaseModel):
    """Whole-week replacement. Days left out are cleared."""
    days: Dict[Weekday, DayIn] = {}


class WeekOut(BaseModel):
    teacher_id: str
    days: List[DayOut]
    total_minutes: int
    total_label: str  # "Xh Ym"
    days_with_availability: int


class GridIn(BaseModel):
    """Selected slot starts per day, as produced by the grid editor."""
    days: Dict[Weekday, List[str]] = {}


class GridOut(BaseModel):
    teacher_id: str
    granularity_minutes: int
    slots: List[str]
    days: Dict[Weekday, Dict[str, bool]]
    # Blocks the grid cannot show exactly; saving from the grid snaps them to slots
    unaligned_intervals: Dict[Weekday, List[IntervalOut]]


class ExportRowOut(BaseModel):
    teacher_id: str
    teacher_name: str
    teacher_email: str
    day: str
    start: str
    end: str
    note: str


# ==========================================
# CONVERSIONS
# ==========================================

def interval_from_schema(payload: IntervalIn) -> TimeInterval:
    return new_interval(payload.start, payload.end, payload.id)


def interval_to_schema(interval: TimeInterval) -> IntervalOut:
    return IntervalOut(
        id=interval.id,
        start=format_time(interval.start),
        end=format_time(interval.end),
        duration_minutes=interval.duration_minutes,
    )


def day_from_schema(day: Weekday, payload: DayIn) -> DayAvailability:
    return DayAvailability(
        day=day,
        intervals=sort_intervals([interval_from_schema(i) for i in payload.intervals]),
        note=payload.note,
    )


def day_to_schema(day: DayAvailability) -> DayOut:
    return DayOut(
        day=day.day,
        intervals=[interval_to_schema(i) for i in day.intervals],
        note=day.note,
    )


def week_from_schema(payload: WeekIn) -> WeeklyAvailability:
    return WeeklyAvailability({
        day: day_from_schema(day, day_payload) for day, day_payload in payload.days.items()
    })


def week_to_schema(teacher_id: str, week: WeeklyAvailability) -> WeekOut:
    return WeekOut(
        teacher_id=teacher_id,
        days=[day_to_schema(day) for day in week.days()],
        total_minutes=week.total_minutes(),
        total_label=week.total_label(),
        days_with_availability=week.days_with_availability(),
    )


def row_to_schema(row: ExportRow) -> ExportRowOut:
    return ExportRowOut(**row.__dict__)
