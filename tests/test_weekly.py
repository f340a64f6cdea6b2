"""
Unit tests for the weekly aggregate.
"""

import pytest

from backend.errors import NotFoundError, OverlapError, ValidationError
from backend.intervals import DayAvailability, TimeInterval, Weekday, new_interval, validate
from backend.time_utils import TimeOfDay, parse_time
from backend.weekly import WeeklyAvailability


def day_with(day, *ranges, note=""):
    return DayAvailability(
        day=day,
        intervals=[new_interval(start, end) for start, end in ranges],
        note=note,
    )


def overlapping_day(day):
    return DayAvailability(
        day=day,
        intervals=[
            TimeInterval("a", TimeOfDay(9, 0), TimeOfDay(11, 0)),
            TimeInterval("b", TimeOfDay(10, 0), TimeOfDay(12, 0)),
        ],
    )


class TestTotals:

    def test_total_minutes(self):
        week = WeeklyAvailability({
            Weekday.MONDAY: day_with(Weekday.MONDAY, ("08:00", "10:00")),
            Weekday.TUESDAY: day_with(Weekday.TUESDAY, ("14:00", "14:30")),
        })
        assert week.total_minutes() == 150
        assert week.total_label() == "2h 30m"

    def test_days_with_availability(self):
        week = WeeklyAvailability({
            Weekday.MONDAY: day_with(Weekday.MONDAY, ("08:00", "10:00"), ("11:00", "12:00")),
            Weekday.WEDNESDAY: day_with(Weekday.WEDNESDAY, note="No blocks, just a note"),
            Weekday.FRIDAY: day_with(Weekday.FRIDAY, ("18:00", "20:00")),
        })
        assert week.days_with_availability() == 2

    def test_empty_week(self):
        week = WeeklyAvailability()
        assert week.total_minutes() == 0
        assert week.days_with_availability() == 0
        assert len(week.days()) == 7

    def test_missing_day_reads_as_empty(self):
        day = WeeklyAvailability().day(Weekday.SUNDAY)
        assert day.day == Weekday.SUNDAY
        assert day.intervals == ()
        assert day.note == ""


class TestReplaceDay:

    def test_replace_day(self):
        week = WeeklyAvailability()
        week.replace_day(day_with(Weekday.MONDAY, ("08:00", "09:00")))
        assert week.total_minutes() == 60

    def test_invalid_day_rejected(self):
        week = WeeklyAvailability({Weekday.MONDAY: day_with(Weekday.MONDAY, ("08:00", "09:00"))})
        with pytest.raises(ValidationError) as exc_info:
            week.replace_day(overlapping_day(Weekday.MONDAY))
        assert exc_info.value.violations
        assert week.total_minutes() == 60

    def test_accepts_day_names(self):
        week = WeeklyAvailability()
        week.replace_day(day_with(Weekday.MONDAY, ("08:00", "09:00")))
        assert week.day("Monday").intervals


class TestReplaceWeek:

    def test_one_bad_day_rejects_whole_week(self):
        week = WeeklyAvailability({Weekday.MONDAY: day_with(Weekday.MONDAY, ("08:00", "09:00"))})
        before = week.copy()

        with pytest.raises(ValidationError):
            week.replace_week({
                Weekday.MONDAY: day_with(Weekday.MONDAY, ("13:00", "17:00")),
                Weekday.TUESDAY: day_with(Weekday.TUESDAY, ("08:00", "12:00")),
                Weekday.WEDNESDAY: overlapping_day(Weekday.WEDNESDAY),
            })

        assert week == before
        assert week.day(Weekday.TUESDAY).intervals == ()

    def test_missing_days_are_cleared(self):
        week = WeeklyAvailability({
            Weekday.MONDAY: day_with(Weekday.MONDAY, ("08:00", "09:00")),
            Weekday.TUESDAY: day_with(Weekday.TUESDAY, ("08:00", "09:00")),
        })
        week.replace_week({Weekday.FRIDAY: day_with(Weekday.FRIDAY, ("10:00", "11:00"))})
        assert week.day(Weekday.MONDAY).intervals == ()
        assert week.days_with_availability() == 1

    def test_mismatched_key_rejected(self):
        with pytest.raises(ValidationError):
            WeeklyAvailability({Weekday.MONDAY: day_with(Weekday.TUESDAY, ("08:00", "09:00"))})

    def test_unknown_day_rejected(self):
        with pytest.raises(ValidationError):
            WeeklyAvailability({"Funday": day_with(Weekday.MONDAY)})


class TestAddressedEdits:

    def test_insert_and_remove(self):
        week = WeeklyAvailability()
        interval = new_interval("09:00", "10:00")
        week.insert_interval(Weekday.MONDAY, interval)
        assert week.total_minutes() == 60
        week.remove_interval(Weekday.MONDAY, interval.id)
        assert week.total_minutes() == 0

    def test_insert_overlap_leaves_week_unchanged(self):
        week = WeeklyAvailability({Weekday.MONDAY: day_with(Weekday.MONDAY, ("09:00", "10:00"))})
        with pytest.raises(OverlapError):
            week.insert_interval(Weekday.MONDAY, new_interval("09:30", "10:30"))
        assert week.total_minutes() == 60

    def test_adjacent_insert_allowed(self):
        week = WeeklyAvailability({Weekday.MONDAY: day_with(Weekday.MONDAY, ("09:00", "10:00"))})
        week.insert_interval(Weekday.MONDAY, new_interval("10:00", "11:00"))
        assert len(week.day(Weekday.MONDAY).intervals) == 2

    def test_resize_end_below_start_is_a_no_op(self):
        week = WeeklyAvailability({Weekday.MONDAY: day_with(Weekday.MONDAY, ("09:00", "10:00"))})
        interval_id = week.day(Weekday.MONDAY).intervals[0].id
        day = week.resize_interval_end(Weekday.MONDAY, interval_id, parse_time("08:30"))
        assert (str(day.intervals[0].start), str(day.intervals[0].end)) == ("09:00", "10:00")

    def test_resize_start(self):
        week = WeeklyAvailability({Weekday.MONDAY: day_with(Weekday.MONDAY, ("09:00", "10:00"))})
        interval_id = week.day(Weekday.MONDAY).intervals[0].id
        day = week.resize_interval_start(Weekday.MONDAY, interval_id, parse_time("11:00"))
        assert (str(day.intervals[0].start), str(day.intervals[0].end)) == ("11:00", "12:00")

    def test_remove_unknown(self):
        with pytest.raises(NotFoundError):
            WeeklyAvailability().remove_interval(Weekday.MONDAY, "missing")

    def test_set_note(self):
        week = WeeklyAvailability()
        week.set_note(Weekday.THURSDAY, "Prefers mornings")
        assert week.day(Weekday.THURSDAY).note == "Prefers mornings"

    def test_copy_is_independent(self):
        week = WeeklyAvailability()
        snapshot = week.copy()
        week.set_note(Weekday.MONDAY, "changed")
        assert snapshot.day(Weekday.MONDAY).note == ""


class TestStoredDays:

    def test_caller_list_cannot_change_stored_day(self):
        blocks = [new_interval("09:00", "10:00")]
        week = WeeklyAvailability()
        week.replace_day(DayAvailability(day=Weekday.MONDAY, intervals=blocks))

        blocks.append(new_interval("09:30", "10:30"))

        assert week.total_minutes() == 60
        assert validate(week.day(Weekday.MONDAY)) == []

    def test_returned_day_cannot_be_edited_in_place(self):
        week = WeeklyAvailability({Weekday.MONDAY: day_with(Weekday.MONDAY, ("09:00", "10:00"))})
        with pytest.raises(AttributeError):
            week.day(Weekday.MONDAY).intervals.append(new_interval("12:00", "13:00"))

    def test_snapshot_unaffected_by_later_edits(self):
        week = WeeklyAvailability({Weekday.MONDAY: day_with(Weekday.MONDAY, ("09:00", "10:00"))})
        snapshot = week.copy()
        week.insert_interval(Weekday.MONDAY, new_interval("12:00", "13:00"))
        assert snapshot.total_minutes() == 60
        assert week.total_minutes() == 120

    def test_resize_both_edges(self):
        week = WeeklyAvailability({
            Weekday.MONDAY: day_with(Weekday.MONDAY, ("09:00", "10:00"), ("11:00", "12:00")),
        })
        interval_id = week.day(Weekday.MONDAY).intervals[0].id
        day = week.resize_interval(Weekday.MONDAY, interval_id, parse_time("10:30"), parse_time("10:55"))
        assert [(str(i.start), str(i.end)) for i in day.intervals] == [("10:30", "10:55"), ("11:00", "12:00")]
