# backend/repository.py
"""
Load and store weekly availability.

A save replaces the teacher's whole week in one transaction: existing day rows
are deleted and the new ones inserted. Interval ids are written with each block
and read back unchanged.
"""

import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import NotFoundError, PersistenceError
from .filters import TeacherAvailability
from .intervals import DayAvailability, Weekday, new_interval, sort_intervals
from .models import ROLE_TEACHER, AvailabilityDay, Teacher, TimeBlock
from .time_utils import format_time
from .weekly import WeeklyAvailability

logger = logging.getLogger(__name__)


def get_teacher(db: Session, teacher_id: str) -> Teacher:
    teacher = db.query(Teacher).filter_by(id=teacher_id).first()
    if not teacher:
        raise NotFoundError(f"Teacher '{teacher_id}' not found")
    return teacher


def _day_from_record(record: AvailabilityDay) -> DayAvailability:
    return DayAvailability(
        day=Weekday(record.day),
        intervals=sort_intervals([
            new_interval(block.start_time, block.end_time, block.interval_id)
            for block in record.blocks
        ]),
        note=record.note or "",
    )


def week_from_records(records: List[AvailabilityDay]) -> WeeklyAvailability:
    return WeeklyAvailability({Weekday(r.day): _day_from_record(r) for r in records})


def load_week(db: Session, teacher_id: str) -> WeeklyAvailability:
    teacher = get_teacher(db, teacher_id)
    return week_from_records(teacher.availability_days)


def save_week(db: Session, teacher_id: str, week: WeeklyAvailability) -> WeeklyAvailability:
    """
    Store a week, replacing whatever the teacher had before.

    Days with neither intervals nor a note are not stored. Database failures are
    rolled back and raised as PersistenceError.
    """
    teacher = get_teacher(db, teacher_id)

    try:
        teacher.availability_days.clear()
        # Old rows must be gone before the unique (teacher_id, day) rows come back
        db.flush()

        for day in week.days():
            if not day.intervals and not day.note:
                continue
            teacher.availability_days.append(AvailabilityDay(
                day=day.day.value,
                note=day.note,
                blocks=[
                    TimeBlock(
                        interval_id=interval.id,
                        start_time=format_time(interval.start),
                        end_time=format_time(interval.end),
                    )
                    for interval in day.intervals
                ],
            ))

        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error saving availability for {teacher_id}: {e}")
        raise PersistenceError("Failed to update availability") from e

    logger.info(
        f"Saved availability for {teacher_id}: "
        f"{week.days_with_availability()} days, {week.total_label()}"
    )
    return week


def list_teachers(db: Session, active_only: bool = True) -> List[TeacherAvailability]:
    """All teacher accounts with their weeks, ordered by name."""
    query = db.query(Teacher).filter(Teacher.role == ROLE_TEACHER)
    if active_only:
        query = query.filter(Teacher.active == True)  # noqa: E712

    return [
        TeacherAvailability(
            teacher_id=teacher.id,
            name=teacher.name,
            email=teacher.email,
            week=week_from_records(teacher.availability_days),
        )
        for teacher in query.order_by(Teacher.name).all()
    ]
