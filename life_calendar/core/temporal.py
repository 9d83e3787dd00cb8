"""Temporal calculus for the life grid — pure date <-> week logic.

Life-Year model: week 0 starts on the birth date, week w starts on
birth_date + 7w days, and every row holds exactly 52 weeks. Rows drift away
from the real birthday by a day or two per year; in exchange the grid is a
perfect 52-column rectangle.

No I/O: this module only transforms data. All arithmetic is done on
calendar days, so daylight-saving transitions cannot shift a week.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta

WEEKS_PER_YEAR = 52
_WEEK = timedelta(days=7)


@dataclass(frozen=True)
class WeekRange:
    """Start and end day of one week. end is the next week's start."""

    start: date
    end: date


@dataclass(frozen=True)
class GridPosition:
    year: int
    week_of_year: int


def to_day(value: date | datetime) -> date:
    """Drop the time of day, keeping the local calendar date."""
    if isinstance(value, datetime):
        return value.date()
    return value


def total_weeks(life_expectancy: int) -> int:
    return life_expectancy * WEEKS_PER_YEAR


def week_range(birth_date: date | datetime, week_index: int) -> WeekRange:
    """Return the start and end day of a week of life.

    No upper bound is enforced here; callers clamp to the grid.
    """
    start = to_day(birth_date) + timedelta(days=7 * week_index)
    return WeekRange(start=start, end=start + _WEEK)


def week_index_of(birth_date: date | datetime, day: date | datetime) -> int:
    """Return the week index a date falls into.

    Counts complete 7-day periods since the birth date. Dates before the
    birth date give a negative index.
    """
    delta = to_day(day) - to_day(birth_date)
    return delta.days // 7


def position_of(week_index: int) -> GridPosition:
    """Convert a week index to its (year, week_of_year) cell."""
    return GridPosition(
        year=week_index // WEEKS_PER_YEAR,
        week_of_year=week_index % WEEKS_PER_YEAR,
    )


def index_of(year: int, week_of_year: int) -> int:
    """Inverse of position_of."""
    return year * WEEKS_PER_YEAR + week_of_year


def is_date_in_week(day: date | datetime, week_start: date, week_end: date) -> bool:
    """Check if a date falls within [week_start, week_end]."""
    return week_start <= to_day(day) <= week_end


def is_past(week_end: date, now: date | datetime) -> bool:
    """A week is past once its end lies before today."""
    return week_end < to_day(now)


def is_current(week_start: date, week_end: date, now: date | datetime) -> bool:
    """Check if today falls inside the week, both ends inclusive.

    On the day one week ends and the next begins, both count as current.
    """
    return is_date_in_week(now, week_start, week_end)


def era_active_in_week(
    era_start: date,
    era_end: date | None,
    week_start: date,
    week_end: date,
) -> bool:
    """Check if an era overlaps a week (closed intervals).

    An era without an end date is ongoing and never ends before a week.
    """
    if era_start > week_end:
        return False
    if era_end is not None and era_end < week_start:
        return False
    return True


def week_indices_for_era(
    birth_date: date | datetime,
    era_start: date,
    era_end: date | None,
    today: date | datetime,
) -> list[int]:
    """Return the week indices an era covers.

    An ongoing era is taken to run until today. The start is clamped to
    week 0; the end is not clamped, callers cut it to the grid.
    """
    start_index = max(0, week_index_of(birth_date, era_start))
    end_day = era_end if era_end is not None else to_day(today)
    end_index = week_index_of(birth_date, end_day)
    return list(range(start_index, end_index + 1))
