"""Tests for life_calendar.core.temporal — pure week arithmetic."""

from datetime import date, datetime, timedelta

import pytest

from life_calendar.core.temporal import (
    WEEKS_PER_YEAR,
    GridPosition,
    WeekRange,
    era_active_in_week,
    index_of,
    is_current,
    is_date_in_week,
    is_past,
    position_of,
    to_day,
    total_weeks,
    week_index_of,
    week_indices_for_era,
    week_range,
)

BIRTH = date(2000, 1, 1)


class TestToDay:
    def test_datetime_drops_time(self):
        assert to_day(datetime(2000, 1, 1, 23, 59)) == date(2000, 1, 1)

    def test_date_unchanged(self):
        assert to_day(date(1999, 12, 31)) == date(1999, 12, 31)


class TestWeekRange:
    def test_week_zero_starts_on_birth_date(self):
        assert week_range(BIRTH, 0) == WeekRange(date(2000, 1, 1), date(2000, 1, 8))

    def test_week_n_starts_seven_n_days_later(self):
        rng = week_range(BIRTH, 10)
        assert rng.start == BIRTH + timedelta(days=70)
        assert rng.end == rng.start + timedelta(days=7)

    def test_birth_time_of_day_ignored(self):
        assert week_range(datetime(2000, 1, 1, 18, 30), 1).start == date(2000, 1, 8)

    def test_no_upper_bound(self):
        rng = week_range(BIRTH, 10_000)
        assert rng.start == BIRTH + timedelta(weeks=10_000)

    def test_consecutive_weeks_touch(self):
        assert week_range(BIRTH, 41).end == week_range(BIRTH, 42).start

    def test_spans_dst_transition(self):
        # Late March has a DST switch in many zones; day arithmetic is unaffected
        rng = week_range(date(2021, 3, 25), 0)
        assert (rng.end - rng.start).days == 7


class TestWeekIndexOf:
    def test_same_day(self):
        assert week_index_of(BIRTH, BIRTH) == 0

    def test_day_six_still_week_zero(self):
        assert week_index_of(BIRTH, date(2000, 1, 7)) == 0

    def test_day_seven_is_week_one(self):
        assert week_index_of(BIRTH, date(2000, 1, 8)) == 1

    def test_concrete_scenario(self):
        assert week_index_of(BIRTH, date(2000, 1, 10)) == 1

    def test_before_birth_is_negative(self):
        assert week_index_of(BIRTH, date(1999, 12, 31)) == -1
        assert week_index_of(BIRTH, date(1999, 12, 1)) < 0

    def test_times_ignored(self):
        assert week_index_of(
            datetime(2000, 1, 1, 23, 0), datetime(2000, 1, 8, 0, 30),
        ) == 1

    def test_inverse_of_week_range(self):
        for w in (0, 1, 51, 52, 1234, 4159):
            assert week_index_of(BIRTH, week_range(BIRTH, w).start) == w


class TestPosition:
    def test_first_cell(self):
        assert position_of(0) == GridPosition(year=0, week_of_year=0)

    def test_last_cell_of_80_years(self):
        assert position_of(4159) == GridPosition(year=79, week_of_year=51)

    def test_row_wraps_at_52(self):
        assert position_of(52) == GridPosition(year=1, week_of_year=0)

    def test_index_of_is_inverse(self):
        for w in (0, 51, 52, 777, 4159):
            pos = position_of(w)
            assert index_of(pos.year, pos.week_of_year) == w

    def test_total_weeks(self):
        assert WEEKS_PER_YEAR == 52
        assert total_weeks(80) == 4160
        assert total_weeks(120) == 6240


class TestPastAndCurrent:
    def test_week_ended_before_today_is_past(self):
        assert is_past(date(2026, 10, 17), date(2026, 10, 18)) is True

    def test_week_ending_today_is_not_past(self):
        assert is_past(date(2026, 10, 18), datetime(2026, 10, 18, 20, 0)) is False

    def test_current_inclusive_start(self):
        assert is_current(date(2026, 10, 18), date(2026, 10, 25), date(2026, 10, 18)) is True

    def test_current_inclusive_end(self):
        assert is_current(date(2026, 10, 11), date(2026, 10, 18), date(2026, 10, 18)) is True

    def test_not_current_outside(self):
        assert is_current(date(2026, 10, 19), date(2026, 10, 26), date(2026, 10, 18)) is False

    def test_date_in_week(self):
        assert is_date_in_week(date(2000, 1, 3), date(2000, 1, 1), date(2000, 1, 8)) is True
        assert is_date_in_week(date(2000, 1, 9), date(2000, 1, 1), date(2000, 1, 8)) is False


class TestEraActiveInWeek:
    WEEK_START = date(2000, 1, 8)
    WEEK_END = date(2000, 1, 15)

    def test_era_covering_week(self):
        assert era_active_in_week(date(1999, 1, 1), date(2001, 1, 1), self.WEEK_START, self.WEEK_END)

    def test_era_starting_after_week(self):
        assert not era_active_in_week(date(2000, 1, 16), None, self.WEEK_START, self.WEEK_END)

    def test_era_ending_before_week(self):
        assert not era_active_in_week(date(1999, 1, 1), date(2000, 1, 7), self.WEEK_START, self.WEEK_END)

    def test_era_starting_on_week_end_touches(self):
        assert era_active_in_week(self.WEEK_END, None, self.WEEK_START, self.WEEK_END)

    def test_era_ending_on_week_start_touches(self):
        assert era_active_in_week(date(1999, 1, 1), self.WEEK_START, self.WEEK_START, self.WEEK_END)

    def test_ongoing_era_never_ends(self):
        assert era_active_in_week(date(1999, 1, 1), None, date(2080, 1, 1), date(2080, 1, 8))


class TestWeekIndicesForEra:
    def test_closed_era(self):
        assert week_indices_for_era(BIRTH, BIRTH, date(2000, 1, 14), date(2026, 1, 1)) == [0, 1]

    def test_ongoing_era_runs_until_today(self):
        indices = week_indices_for_era(BIRTH, date(2000, 1, 8), None, date(2000, 1, 29))
        assert indices == [1, 2, 3, 4]

    def test_start_clamped_to_zero(self):
        indices = week_indices_for_era(BIRTH, date(1990, 1, 1), date(2000, 1, 8), date(2026, 1, 1))
        assert indices == [0, 1]

    @pytest.mark.parametrize("end", [date(1999, 6, 1), date(1989, 1, 1)])
    def test_era_before_birth_is_empty(self, end):
        assert week_indices_for_era(BIRTH, date(1989, 1, 1), end, date(2026, 1, 1)) == []
