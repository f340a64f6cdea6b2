"""
Availability endpoints for the two editors (interval list and slot grid).
A teacher may read and write only their own week; a scheduler may use these
endpoints for any teacher.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from backend.auth import ensure_can_edit, get_current_user
from backend.grid import GridParams, unaligned_intervals, week_from_grid, week_to_grid
from backend.intervals import Weekday
from backend.models import Teacher, get_db
from backend.repository import load_week, save_week
from backend.schemas import (
    DayIn,
    DayOut,
    GridIn,
    GridOut,
    IntervalIn,
    IntervalResize,
    NoteIn,
    WeekIn,
    WeekOut,
    day_from_schema,
    day_to_schema,
    interval_from_schema,
    interval_to_schema,
    week_from_schema,
    week_to_schema,
)
from backend.time_utils import format_time, parse_time

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/teachers", tags=["availability"])

GRID_PARAMS = GridParams.from_env()


# ==========================================
# WHOLE WEEK
# ==========================================

@router.get("/{teacher_id}/availability", response_model=WeekOut)
def get_availability(
    teacher_id: str,
    current_user: Teacher = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a teacher's week with totals."""
    ensure_can_edit(current_user, teacher_id)
    return week_to_schema(teacher_id, load_week(db, teacher_id))


@router.put("/{teacher_id}/availability", response_model=WeekOut)
def replace_availability(
    teacher_id: str,
    payload: WeekIn,
    current_user: Teacher = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Replace the whole week. Either every day is accepted or nothing changes.
    Days missing from the payload are cleared.
    """
    ensure_can_edit(current_user, teacher_id)
    week = week_from_schema(payload)
    save_week(db, teacher_id, week)
    logger.info(f"{current_user.id} replaced the week of {teacher_id}")
    return week_to_schema(teacher_id, week)


# ==========================================
# SINGLE DAY
# ==========================================

@router.put("/{teacher_id}/availability/{day}", response_model=DayOut)
def replace_day(
    teacher_id: str,
    day: Weekday,
    payload: DayIn,
    current_user: Teacher = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Replace one day's blocks and note."""
    ensure_can_edit(current_user, teacher_id)
    week = load_week(db, teacher_id)
    week.replace_day(day_from_schema(day, payload))
    save_week(db, teacher_id, week)
    return day_to_schema(week.day(day))


@router.post(
    "/{teacher_id}/availability/{day}/intervals",
    response_model=DayOut,
    status_code=status.HTTP_201_CREATED
)
def add_interval(
    teacher_id: str,
    day: Weekday,
    payload: IntervalIn,
    current_user: Teacher = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Add a block. Overlapping an existing block is rejected with 409."""
    ensure_can_edit(current_user, teacher_id)
    week = load_week(db, teacher_id)
    updated = week.insert_interval(day, interval_from_schema(payload))
    save_week(db, teacher_id, week)
    return day_to_schema(updated)


@router.patch("/{teacher_id}/availability/{day}/intervals/{interval_id}", response_model=DayOut)
def resize_interval(
    teacher_id: str,
    day: Weekday,
    interval_id: str,
    payload: IntervalResize,
    current_user: Teacher = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Move a block's start and/or end. Both edges are applied before the
    overlap check. A start past the end pushes the end one hour later; an end at
    or before the start is ignored.
    """
    ensure_can_edit(current_user, teacher_id)
    week = load_week(db, teacher_id)
    new_start = parse_time(payload.start) if payload.start is not None else None
    new_end = parse_time(payload.end) if payload.end is not None else None
    updated = week.resize_interval(day, interval_id, new_start, new_end)
    save_week(db, teacher_id, week)
    return day_to_schema(updated)


@router.delete("/{teacher_id}/availability/{day}/intervals/{interval_id}", response_model=DayOut)
def delete_interval(
    teacher_id: str,
    day: Weekday,
    interval_id: str,
    current_user: Teacher = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    ensure_can_edit(current_user, teacher_id)
    week = load_week(db, teacher_id)
    updated = week.remove_interval(day, interval_id)
    save_week(db, teacher_id, week)
    return day_to_schema(updated)


@router.put("/{teacher_id}/availability/{day}/note", response_model=DayOut)
def update_note(
    teacher_id: str,
    day: Weekday,
    payload: NoteIn,
    current_user: Teacher = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    ensure_can_edit(current_user, teacher_id)
    week = load_week(db, teacher_id)
    updated = week.set_note(day, payload.note)
    save_week(db, teacher_id, week)
    return day_to_schema(updated)


# ==========================================
# GRID EDITOR
# ==========================================

@router.get("/{teacher_id}/grid", response_model=GridOut)
def get_grid(
    teacher_id: str,
    current_user: Teacher = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Get the week as slot booleans.
    unaligned_intervals lists blocks that saving from the grid would snap to slots.
    """
    ensure_can_edit(current_user, teacher_id)
    week = load_week(db, teacher_id)
    grids = week_to_grid(week, GRID_PARAMS)

    return GridOut(
        teacher_id=teacher_id,
        granularity_minutes=GRID_PARAMS.granularity_minutes,
        slots=[format_time(slot) for slot in GRID_PARAMS.slot_starts()],
        days={
            day: {format_time(slot): selected for slot, selected in grid.items()}
            for day, grid in grids.items()
        },
        unaligned_intervals={
            day.day: [interval_to_schema(i) for i in unaligned_intervals(day, GRID_PARAMS)]
            for day in week.days()
        },
    )


@router.put("/{teacher_id}/grid", response_model=WeekOut)
def save_grid(
    teacher_id: str,
    payload: GridIn,
    current_user: Teacher = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Replace the week from grid selections. Contiguous slots merge into one block;
    notes are kept.
    """
    ensure_can_edit(current_user, teacher_id)
    previous = load_week(db, teacher_id)
    selected = {
        day: [parse_time(slot) for slot in slots]
        for day, slots in payload.days.items()
    }
    week = week_from_grid(selected, GRID_PARAMS, previous)
    save_week(db, teacher_id, week)
    logger.info(f"{current_user.id} saved the grid of {teacher_id}")
    return week_to_schema(teacher_id, week)
