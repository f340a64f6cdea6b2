# backend/grid.py
"""
Conversion between interval lists and the fixed-slot grid editor.

The grid splits the schedulable day into equal slots (45 minutes from 08:15 to
23:15 by default). A slot is on when its start time falls inside an interval.
Going back, contiguous selected slots merge into one interval.

The conversion is lossy. Intervals that do not start and end on slot boundaries
come back snapped to whole slots, and adjacent intervals come back merged.
unaligned_intervals() reports which intervals a grid save would change, so the
editor can warn before it happens.
"""

import logging
import os
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional

from .errors import RangeError
from .intervals import WEEKDAYS, DayAvailability, TimeInterval, Weekday, new_interval_id
from .time_utils import (
    LAST_MINUTE,
    TimeOfDay,
    add_minutes,
    from_minutes,
    parse_time,
    to_minutes,
)
from .weekly import WeeklyAvailability, as_weekday

logger = logging.getLogger(__name__)

GRID_GRANULARITY_MINUTES = int(os.getenv("GRID_GRANULARITY_MINUTES", "45"))
GRID_WINDOW_START = os.getenv("GRID_WINDOW_START", "08:15")
GRID_WINDOW_END = os.getenv("GRID_WINDOW_END", "23:15")

DayGrid = Dict[TimeOfDay, bool]


@dataclass(frozen=True)
class GridParams:
    granularity_minutes: int = 45
    window_start: TimeOfDay = TimeOfDay(8, 15)
    window_end: TimeOfDay = TimeOfDay(23, 15)  # start of the last slot

    def __post_init__(self):
        if self.granularity_minutes <= 0:
            raise RangeError(f"Granularity must be positive, got {self.granularity_minutes}")
        if self.window_end < self.window_start:
            raise RangeError(f"Grid window {self.window_start}-{self.window_end} is inverted")
        if to_minutes(self.window_end) >= LAST_MINUTE:
            raise RangeError("The last grid slot must start before 23:59")

    @classmethod
    def from_env(cls) -> "GridParams":
        return cls(
            granularity_minutes=GRID_GRANULARITY_MINUTES,
            window_start=parse_time(GRID_WINDOW_START),
            window_end=parse_time(GRID_WINDOW_END),
        )

    def slot_starts(self) -> List[TimeOfDay]:
        slots = []
        minute = to_minutes(self.window_start)
        last = to_minutes(self.window_end)
        while minute <= last:
            slots.append(from_minutes(minute))
            minute += self.granularity_minutes
        return slots

    def slot_end(self, slot: TimeOfDay) -> TimeOfDay:
        """End of a slot; the grid never runs past 23:59."""
        return add_minutes(slot, self.granularity_minutes)


# ==========================================
# DAY CONVERSION
# ==========================================

def to_grid(day: DayAvailability, params: GridParams) -> DayGrid:
    """Mark each slot whose start lies in some [start, end) interval of the day."""
    return {
        slot: any(interval.start <= slot < interval.end for interval in day.intervals)
        for slot in params.slot_starts()
    }


def from_grid(
    selected_slots: Iterable[TimeOfDay],
    params: GridParams,
    existing: Optional[Iterable[TimeInterval]] = None,
) -> List[TimeInterval]:
    """
    Merge selected slots into intervals.

    Slots are scanned in ascending order. A gap of more than one slot width
    between two selected slots closes the current run; each run ends one slot
    width after its last slot. Intervals in `existing` with the same start and
    end keep their ids.
    """
    valid = set(params.slot_starts())
    slots = sorted(set(selected_slots))
    for slot in slots:
        if slot not in valid:
            raise RangeError(f"{slot} is not a slot on the {params.granularity_minutes}-minute grid")

    runs = []
    run_start = previous = None
    for slot in slots:
        if run_start is None:
            run_start = slot
        elif to_minutes(slot) - to_minutes(previous) > params.granularity_minutes:
            runs.append((run_start, previous))
            run_start = slot
        previous = slot
    if run_start is not None:
        runs.append((run_start, previous))

    known_ids = {(i.start, i.end): i.id for i in existing or []}
    result = []
    for start, last in runs:
        end = params.slot_end(last)
        result.append(TimeInterval(id=known_ids.get((start, end)) or new_interval_id(), start=start, end=end))
    return result


def selected_slots(grid: DayGrid) -> List[TimeOfDay]:
    return [slot for slot, selected in grid.items() if selected]


def unaligned_intervals(day: DayAvailability, params: GridParams) -> List[TimeInterval]:
    """Intervals that would not survive a round trip through the grid unchanged."""
    changed = []
    for interval in day.intervals:
        alone = DayAvailability(day=day.day, intervals=[interval])
        back = from_grid(selected_slots(to_grid(alone, params)), params)
        if [(i.start, i.end) for i in back] != [(interval.start, interval.end)]:
            changed.append(interval)
    return changed


# ==========================================
# BULK SLOT EDITS
# ==========================================

def select_all_day(params: GridParams) -> DayGrid:
    return {slot: True for slot in params.slot_starts()}


def clear_day(params: GridParams) -> DayGrid:
    return {slot: False for slot in params.slot_starts()}


def toggle_slot(grid: DayGrid, slot: TimeOfDay) -> DayGrid:
    if slot not in grid:
        raise RangeError(f"{slot} is not a slot on this grid")
    toggled = dict(grid)
    toggled[slot] = not grid[slot]
    return toggled


# ==========================================
# WEEK CONVERSION
# ==========================================

def week_to_grid(week: WeeklyAvailability, params: GridParams) -> Dict[Weekday, DayGrid]:
    return {weekday: to_grid(week.day(weekday), params) for weekday in WEEKDAYS}


def week_from_grid(
    selected_by_day: Mapping[Weekday, Iterable[TimeOfDay]],
    params: GridParams,
    previous: Optional[WeeklyAvailability] = None,
) -> WeeklyAvailability:
    """
    Build a week from per-day slot selections.

    Days missing from the mapping end up empty. Notes and, where the interval is
    unchanged, interval ids are carried over from `previous`.
    """
    previous = previous or WeeklyAvailability()
    selected = {as_weekday(day): list(slots) for day, slots in selected_by_day.items()}

    days = {}
    for weekday in WEEKDAYS:
        before = previous.day(weekday)
        days[weekday] = DayAvailability(
            day=weekday,
            intervals=from_grid(selected.get(weekday, []), params, before.intervals),
            note=before.note,
        )

    week = WeeklyAvailability(days)
    logger.debug(f"Converted grid selection to {week!r}")
    return week
