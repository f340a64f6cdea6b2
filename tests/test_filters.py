"""
Unit tests for scheduler-side filters and export rows.
"""

import pytest

from backend.errors import ValidationError
from backend.filters import (
    ALL,
    TeacherAvailability,
    TimeBucket,
    by_day,
    by_teacher,
    by_time_bucket,
    export_rows,
)
from backend.intervals import DayAvailability, Weekday, new_interval
from backend.weekly import WeeklyAvailability


def week_of(**days):
    return WeeklyAvailability({
        Weekday(name): DayAvailability(
            day=Weekday(name),
            intervals=[new_interval(start, end) for start, end in ranges],
            note=note,
        )
        for name, (ranges, note) in days.items()
    })


@pytest.fixture
def teachers():
    return [
        TeacherAvailability(
            teacher_id="T001",
            name="Ana Torres",
            email="ana@example.com",
            week=week_of(
                Monday=([("08:00", "10:00"), ("13:00", "15:00")], "Remote only"),
                Wednesday=([("19:00", "21:00")], ""),
            ),
        ),
        TeacherAvailability(
            teacher_id="T002",
            name="Bruno Diaz",
            email="bruno@example.com",
            week=week_of(Monday=([("11:30", "12:30")], "")),
        ),
    ]


class TestByTeacher:

    def test_all(self, teachers):
        assert len(by_teacher(teachers, ALL)) == 2

    def test_one(self, teachers):
        assert [t.teacher_id for t in by_teacher(teachers, "T002")] == ["T002"]

    def test_unknown(self, teachers):
        assert by_teacher(teachers, "T999") == []


class TestByDay:

    def test_all(self, teachers):
        assert len(by_day(teachers[0].week.days(), ALL)) == 7

    def test_one(self, teachers):
        days = by_day(teachers[0].week.days(), Weekday.WEDNESDAY)
        assert [d.day for d in days] == [Weekday.WEDNESDAY]

    def test_day_name(self, teachers):
        assert len(by_day(teachers[0].week.days(), "Monday")) == 1

    def test_unknown_day(self, teachers):
        with pytest.raises(ValidationError):
            by_day(teachers[0].week.days(), "Someday")


class TestByTimeBucket:

    @pytest.fixture
    def intervals(self):
        return [
            new_interval("08:00", "09:00"),
            new_interval("11:59", "13:00"),
            new_interval("12:00", "13:00"),
            new_interval("17:59", "19:00"),
            new_interval("18:00", "20:00"),
        ]

    def starts(self, intervals):
        return [str(i.start) for i in intervals]

    def test_morning(self, intervals):
        assert self.starts(by_time_bucket(intervals, TimeBucket.MORNING)) == ["08:00", "11:59"]

    def test_afternoon(self, intervals):
        assert self.starts(by_time_bucket(intervals, "afternoon")) == ["12:00", "17:59"]

    def test_evening(self, intervals):
        assert self.starts(by_time_bucket(intervals, TimeBucket.EVENING)) == ["18:00"]

    def test_all(self, intervals):
        assert len(by_time_bucket(intervals, TimeBucket.ALL)) == 5

    def test_unknown_bucket(self, intervals):
        with pytest.raises(ValidationError):
            by_time_bucket(intervals, "night")

    def test_classified_by_start_only(self):
        spanning = [new_interval("11:00", "19:00")]
        assert by_time_bucket(spanning, TimeBucket.MORNING) == spanning
        assert by_time_bucket(spanning, TimeBucket.EVENING) == []


class TestExportRows:

    def test_all_rows(self, teachers):
        rows = export_rows(teachers)
        assert [(r.teacher_id, r.day, r.start, r.end) for r in rows] == [
            ("T001", "Monday", "08:00", "10:00"),
            ("T001", "Monday", "13:00", "15:00"),
            ("T001", "Wednesday", "19:00", "21:00"),
            ("T002", "Monday", "11:30", "12:30"),
        ]

    def test_row_carries_teacher_and_note(self, teachers):
        row = export_rows(teachers, teacher_id="T001", day="Monday")[0]
        assert row.teacher_name == "Ana Torres"
        assert row.teacher_email == "ana@example.com"
        assert row.note == "Remote only"

    def test_combined_filters(self, teachers):
        rows = export_rows(teachers, day=Weekday.MONDAY, bucket=TimeBucket.MORNING)
        assert [(r.teacher_id, r.start) for r in rows] == [("T001", "08:00"), ("T002", "11:30")]

    def test_no_matches(self, teachers):
        assert export_rows(teachers, teacher_id="T002", bucket=TimeBucket.EVENING) == []
