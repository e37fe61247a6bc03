"""
Tests for daily schedules and the rolling weekly window.
"""

from datetime import date, timedelta

import pytest

from barstatus.engine import (
    InvalidTimeError, WeeklySchedule, build_window, current_window, format_time_of_day,
    needs_rollover, parse_time_of_day, rollover, todays_schedule, update_day,
    window_from_weekday_hours, window_problems
)

from conftest import MONDAY, make_day

FRIDAY = 4


def friday_only(today: date) -> WeeklySchedule:
    return window_from_weekday_hours({FRIDAY: (True, "20:00", "03:00")}, today)


class TestTimeOfDay:
    @pytest.mark.parametrize("value, minutes", [
        ("00:00", 0), ("02:00", 120), ("9:30", 570), ("18:00", 1080), ("23:59", 1439), (" 18:05 ", 1085),
    ])
    def test_parse(self, value, minutes):
        assert parse_time_of_day(value) == minutes

    @pytest.mark.parametrize("value", ["", "18", "24:00", "12:60", "12:5", "ab:cd", "18:00:00", None, 1080])
    def test_parse_rejects(self, value):
        with pytest.raises(InvalidTimeError):
            parse_time_of_day(value)

    def test_format(self):
        assert format_time_of_day(0) == "00:00"
        assert format_time_of_day(1085) == "18:05"


class TestDailySchedule:
    def test_defaults_match_a_closed_evening_bar(self):
        day = make_day(MONDAY, is_open=False)
        assert day.open_time == "18:00"
        assert day.close_time == "02:00"
        assert day.display_text == "Closed"

    def test_display_helpers(self):
        day = make_day(MONDAY, "18:00", "02:00")
        assert day.day_name == "Monday"
        assert day.short_day_name == "Mon"
        assert day.display_date == "Oct 19"
        assert day.display_text == "6:00 PM - 2:00 AM"
        assert day.is_overnight
        assert day.is_today(MONDAY)
        assert not day.is_today(MONDAY + timedelta(days=1))

    def test_display_text_keeps_unparseable_times(self):
        day = make_day(MONDAY, "noonish", "13:30")
        assert day.display_text == "noonish - 1:30 PM"
        assert not day.has_valid_times

    def test_with_hours_returns_new_record(self):
        day = make_day(MONDAY, is_open=False)
        edited = day.with_hours(True, "12:00", "13:00")
        assert not day.is_open
        assert edited.is_open and edited.date == day.date


class TestBuildWindow:
    def test_seven_consecutive_closed_days(self):
        window = build_window(MONDAY)
        assert len(window.days) == 7
        assert [day.date for day in window.days] == [MONDAY + timedelta(days=i) for i in range(7)]
        assert not any(day.is_open for day in window.days)
        assert window_problems(window) == []

    def test_default_day_applies_to_every_entry(self):
        window = build_window(MONDAY, default=make_day(MONDAY, "16:00", "23:00"))
        assert all(day.is_open and day.open_time == "16:00" for day in window.days)

    def test_from_weekday_hours(self):
        window = friday_only(MONDAY)
        open_days = [day for day in window.days if day.is_open]
        assert len(open_days) == 1
        assert open_days[0].date == date(2026, 10, 23)
        assert open_days[0].close_time == "03:00"


class TestRollover:
    def test_needs_rollover(self):
        window = build_window(MONDAY)
        assert not needs_rollover(window, MONDAY)
        assert needs_rollover(window, MONDAY + timedelta(days=1))
        assert needs_rollover(WeeklySchedule(), MONDAY)

    def test_preserves_weekday_settings(self):
        later = MONDAY + timedelta(days=3)
        rolled = rollover(friday_only(MONDAY), later)

        assert rolled.days[0].date == later
        assert [day.date for day in rolled.days] == [later + timedelta(days=i) for i in range(7)]
        open_days = [day for day in rolled.days if day.is_open]
        assert len(open_days) == 1
        assert open_days[0].date.weekday() == FRIDAY
        assert open_days[0].date == date(2026, 10, 23)

    def test_preserves_settings_after_many_weeks(self):
        later = MONDAY + timedelta(days=30)
        rolled = rollover(friday_only(MONDAY), later)
        open_days = [day for day in rolled.days if day.is_open]
        assert [day.date.weekday() for day in open_days] == [FRIDAY]

    def test_idempotent(self):
        later = MONDAY + timedelta(days=3)
        once = rollover(friday_only(MONDAY), later)
        assert not needs_rollover(once, later)
        assert current_window(once, later) is once
        assert rollover(once, later) == once

    def test_truncated_window_keeps_closed_defaults(self):
        # Only Monday (open) and Tuesday survived
        partial = WeeklySchedule(days=[
            make_day(MONDAY, "17:00", "23:00"),
            make_day(MONDAY + timedelta(days=1), is_open=False),
        ])
        rolled = rollover(partial, MONDAY + timedelta(days=2))

        assert len(rolled.days) == 7
        by_weekday = {day.date.weekday(): day for day in rolled.days}
        assert by_weekday[0].is_open and by_weekday[0].open_time == "17:00"
        assert not any(day.is_open for weekday, day in by_weekday.items() if weekday != 0)

    def test_todays_schedule_rolls_lazily(self):
        window = friday_only(MONDAY)
        friday = date(2026, 10, 30)
        today = todays_schedule(window, friday)
        assert today.date == friday
        assert today.is_open


class TestUpdateDay:
    def test_replaces_matching_date_only(self):
        window = build_window(MONDAY)
        edited = update_day(window, MONDAY + timedelta(days=2), True, "19:00", "01:00")
        assert edited.days[2].is_open and edited.days[2].open_time == "19:00"
        assert not window.days[2].is_open
        assert sum(day.is_open for day in edited.days) == 1

    def test_unknown_date_is_noop(self):
        window = build_window(MONDAY)
        assert update_day(window, MONDAY - timedelta(days=1), True, "19:00", "01:00") == window


class TestWindowProblems:
    def test_short_window(self):
        window = WeeklySchedule(days=build_window(MONDAY).days[:5])
        assert window_problems(window) == ["expected 7 days, found 5"]

    def test_gap_in_dates(self):
        days = list(build_window(MONDAY).days)
        days[3] = make_day(MONDAY + timedelta(days=10), is_open=False)
        assert len(window_problems(WeeklySchedule(days=days))) == 2

    def test_unparseable_hours_only_matter_on_open_days(self):
        days = list(build_window(MONDAY).days)
        days[1] = make_day(days[1].date, "late", "02:00", is_open=False)
        assert window_problems(WeeklySchedule(days=days)) == []

        days[1] = make_day(days[1].date, "late", "02:00", is_open=True)
        assert len(window_problems(WeeklySchedule(days=days))) == 1
