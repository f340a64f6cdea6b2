"""
Scheduler endpoints: review every teacher's availability, filter it, export it,
and create teacher accounts.
These require scheduler authentication.
"""

import csv
import io
import logging
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, EmailStr
from sqlalchemy.orm import Session

from backend.auth import hash_password, require_scheduler
from backend.filters import ALL, TimeBucket, export_rows
from backend.models import ROLE_SCHEDULER, ROLE_TEACHER, Teacher, get_db
from backend.repository import list_teachers
from backend.schemas import ExportRowOut, row_to_schema
from backend.weekly import as_weekday

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/scheduler", tags=["scheduler"])

EXPORT_COLUMNS = ["teacher_id", "teacher_name", "teacher_email", "day", "start", "end", "note"]


# ==========================================
# PYDANTIC MODELS
# ==========================================

class TeacherCreate(BaseModel):
    """Model for creating a portal account"""
    id: str
    name: str
    email: EmailStr
    password: str
    role: str = ROLE_TEACHER


class TeacherSummary(BaseModel):
    """A teacher with their weekly totals"""
    id: str
    name: str
    email: str
    total_minutes: int
    total_label: str
    days_with_availability: int


def _check_day_filter(day: str) -> str:
    if day == ALL:
        return day
    return as_weekday(day).value


def _filtered_rows(db: Session, teacher_id: str, day: str, bucket: TimeBucket):
    return export_rows(list_teachers(db), teacher_id, _check_day_filter(day), bucket)


# ==========================================
# ENDPOINTS
# ==========================================

@router.get("/teachers", response_model=List[TeacherSummary])
def get_teachers(
    scheduler: Teacher = Depends(require_scheduler),
    db: Session = Depends(get_db)
):
    """All active teachers with total available time and number of available days."""
    return [
        TeacherSummary(
            id=teacher.teacher_id,
            name=teacher.name,
            email=teacher.email,
            total_minutes=teacher.week.total_minutes(),
            total_label=teacher.week.total_label(),
            days_with_availability=teacher.week.days_with_availability(),
        )
        for teacher in list_teachers(db)
    ]


@router.post("/teachers", response_model=TeacherSummary, status_code=status.HTTP_201_CREATED)
def create_teacher(
    teacher_data: TeacherCreate,
    scheduler: Teacher = Depends(require_scheduler),
    db: Session = Depends(get_db)
):
    """
    Create an account. The new teacher starts with an empty week.
    """
    if teacher_data.role not in (ROLE_TEACHER, ROLE_SCHEDULER):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid role. Must be one of: {ROLE_TEACHER}, {ROLE_SCHEDULER}"
        )

    if db.query(Teacher).filter_by(id=teacher_data.id).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Teacher with ID {teacher_data.id} already exists"
        )

    email = teacher_data.email.lower()
    if db.query(Teacher).filter_by(email=email).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Email {email} already in use"
        )

    if len(teacher_data.password) < 8:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Password must be at least 8 characters"
        )

    new_teacher = Teacher(
        id=teacher_data.id,
        name=teacher_data.name,
        email=email,
        role=teacher_data.role,
        password_hash=hash_password(teacher_data.password),
        active=True,
    )
    db.add(new_teacher)
    db.commit()
    logger.info(f"{scheduler.id} created {teacher_data.role} account {new_teacher.id}")

    return TeacherSummary(
        id=new_teacher.id,
        name=new_teacher.name,
        email=new_teacher.email,
        total_minutes=0,
        total_label="0h 0m",
        days_with_availability=0,
    )


@router.get("/availability", response_model=List[ExportRowOut])
def get_availability_rows(
    teacher_id: str = ALL,
    day: str = ALL,
    bucket: TimeBucket = TimeBucket.ALL,
    scheduler: Teacher = Depends(require_scheduler),
    db: Session = Depends(get_db)
):
    """
    One row per block, filtered by teacher, day and time of day.
    The time-of-day bucket is decided by each block's start hour.
    """
    return [row_to_schema(row) for row in _filtered_rows(db, teacher_id, day, bucket)]


@router.get("/availability.csv", response_class=PlainTextResponse)
def export_availability_csv(
    teacher_id: str = ALL,
    day: str = ALL,
    bucket: TimeBucket = TimeBucket.ALL,
    scheduler: Teacher = Depends(require_scheduler),
    db: Session = Depends(get_db)
):
    """
    Export the same rows as CSV:
    teacher_id,teacher_name,teacher_email,day,start,end,note
    """
    rows = _filtered_rows(db, teacher_id, day, bucket)

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(EXPORT_COLUMNS)
    for row in rows:
        writer.writerow([
            row.teacher_id,
            row.teacher_name,
            row.teacher_email,
            row.day,
            row.start,
            row.end,
            row.note,
        ])

    headers = {
        "Content-Disposition": f'attachment; filename="availability_report_{date.today().isoformat()}.csv"'
    }
    return PlainTextResponse(output.getvalue(), headers=headers)
