import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Optional

from barstatus.constants import (
    DEFAULT_OPEN_TIME, DEFAULT_CLOSE_TIME, DISPLAY_TIME_FORMAT, TIME_FORMAT, WINDOW_DAYS
)

logger = logging.getLogger(__name__)


class InvalidTimeError(ValueError):
    """Raised when a time-of-day string is not a valid 24-hour "HH:MM" value."""


def parse_time_of_day(value: str) -> int:
    """Parse an "HH:MM" 24-hour string into minutes since midnight."""
    if not isinstance(value, str):
        raise InvalidTimeError(f"Expected an HH:MM string, got {value!r}")

    parts = value.strip().split(':')
    if len(parts) != 2:
        raise InvalidTimeError(f"Invalid time of day: {value!r}")

    hours, minutes = parts
    if not (hours.isascii() and hours.isdigit() and 1 <= len(hours) <= 2):
        raise InvalidTimeError(f"Invalid hour in time of day: {value!r}")
    if not (minutes.isascii() and minutes.isdigit() and len(minutes) == 2):
        raise InvalidTimeError(f"Invalid minute in time of day: {value!r}")

    hours, minutes = int(hours), int(minutes)
    if hours > 23 or minutes > 59:
        raise InvalidTimeError(f"Time of day out of range: {value!r}")

    return hours * 60 + minutes


def format_time_of_day(minutes: int) -> str:
    """Format minutes since midnight as an "HH:MM" string."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def format_display_time(value: str) -> str:
    """Turn "18:00" into "6:00 PM"; unparseable values are returned as-is."""
    try:
        parsed = datetime.strptime(value, TIME_FORMAT)
    except (TypeError, ValueError):
        return value
    return parsed.strftime(DISPLAY_TIME_FORMAT).lstrip('0')


@dataclass(frozen=True)
class DailySchedule:
    date: date
    is_open: bool = False
    open_time: str = DEFAULT_OPEN_TIME
    close_time: str = DEFAULT_CLOSE_TIME

    @property
    def open_minutes(self) -> int:
        return parse_time_of_day(self.open_time)

    @property
    def close_minutes(self) -> int:
        return parse_time_of_day(self.close_time)

    @property
    def is_overnight(self) -> bool:
        """True when closing happens after local midnight."""
        return self.close_minutes < self.open_minutes

    @property
    def has_valid_times(self) -> bool:
        try:
            parse_time_of_day(self.open_time)
            parse_time_of_day(self.close_time)
        except InvalidTimeError:
            return False
        return True

    @property
    def day_name(self) -> str:
        return self.date.strftime('%A')

    @property
    def short_day_name(self) -> str:
        return self.date.strftime('%a')

    @property
    def display_date(self) -> str:
        return f"{self.date.strftime('%b')} {self.date.day}"

    @property
    def display_text(self) -> str:
        if not self.is_open:
            return "Closed"
        return f"{format_display_time(self.open_time)} - {format_display_time(self.close_time)}"

    def is_today(self, today: date) -> bool:
        return self.date == today

    def with_hours(self, is_open: bool, open_time: str, close_time: str) -> 'DailySchedule':
        return replace(self, is_open=is_open, open_time=open_time, close_time=close_time)

    def copy_hours_from(self, other: 'DailySchedule') -> 'DailySchedule':
        return self.with_hours(other.is_open, other.open_time, other.close_time)


@dataclass(frozen=True)
class WeeklySchedule:
    """Sliding 7-day view of a bar's hours, index 0 being "today"."""

    days: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, 'days', tuple(self.days))

    @property
    def anchor_date(self) -> Optional[date]:
        return self.days[0].date if self.days else None

    def day_for(self, on: date) -> Optional[DailySchedule]:
        for day in self.days:
            if day.date == on:
                return day
        return None


def build_window(today: date, default: Optional[DailySchedule] = None) -> WeeklySchedule:
    """Build a fresh window anchored at `today`.

    Every entry is closed with the stock hours unless a `default` day is
    given, in which case its hours are applied to all seven entries.
    """
    days = []
    for offset in range(WINDOW_DAYS):
        day = DailySchedule(date=today + timedelta(days=offset))
        if default is not None:
            day = day.copy_hours_from(default)
        days.append(day)
    return WeeklySchedule(days=days)


def window_from_weekday_hours(hours_by_weekday: dict, today: date) -> WeeklySchedule:
    """Build a window from hours keyed by weekday (0=Monday, 6=Sunday).

    Values are `(is_open, open_time, close_time)` tuples. Weekdays missing
    from the mapping stay closed.
    """
    days = []
    for day in build_window(today).days:
        hours = hours_by_weekday.get(day.date.weekday())
        if hours is not None:
            is_open, open_time, close_time = hours
            day = day.with_hours(bool(is_open), open_time, close_time)
        days.append(day)
    return WeeklySchedule(days=days)


def needs_rollover(window: WeeklySchedule, today: date) -> bool:
    return not window.days or window.days[0].date != today


def rollover(window: WeeklySchedule, today: date) -> WeeklySchedule:
    """Re-anchor the window at `today`, carrying hours over by weekday.

    Each new day takes the hours of the old entry falling on the same
    weekday. New days with no counterpart in a truncated old window keep
    the closed default.
    """
    old_by_weekday = {}
    for old_day in window.days:
        old_by_weekday.setdefault(old_day.date.weekday(), old_day)

    days = []
    for day in build_window(today).days:
        old_day = old_by_weekday.get(day.date.weekday())
        days.append(day.copy_hours_from(old_day) if old_day is not None else day)

    logger.debug(f"Rolled schedule window from {window.anchor_date} to {today}")
    return WeeklySchedule(days=days)


def current_window(window: WeeklySchedule, today: date) -> WeeklySchedule:
    """Return the window re-anchored at `today`, rolling it only when needed."""
    if needs_rollover(window, today):
        return rollover(window, today)
    return window


def todays_schedule(window: WeeklySchedule, today: date) -> DailySchedule:
    return current_window(window, today).days[0]


def weekday_entry(window: WeeklySchedule, weekday: int) -> Optional[DailySchedule]:
    """First entry of the window falling on `weekday`, or None."""
    for day in window.days:
        if day.date.weekday() == weekday:
            return day
    return None


def has_valid_shape(window: WeeklySchedule) -> bool:
    """True when the window holds exactly seven consecutive dates."""
    if len(window.days) != WINDOW_DAYS:
        return False
    return all(
        current.date == previous.date + timedelta(days=1)
        for previous, current in zip(window.days, window.days[1:])
    )


def update_day(window: WeeklySchedule, on: date, is_open: bool,
               open_time: str, close_time: str) -> WeeklySchedule:
    """Replace the hours of the entry dated `on`; unknown dates leave the window unchanged."""
    days = [
        day.with_hours(is_open, open_time, close_time) if day.date == on else day
        for day in window.days
    ]
    return WeeklySchedule(days=days)


def window_problems(window: WeeklySchedule) -> list:
    """List what is wrong with a stored window. An empty list means it is well-formed."""
    problems = []
    if len(window.days) != WINDOW_DAYS:
        problems.append(f"expected {WINDOW_DAYS} days, found {len(window.days)}")

    for previous, current in zip(window.days, window.days[1:]):
        if current.date != previous.date + timedelta(days=1):
            problems.append(f"{current.date} does not follow {previous.date}")

    for day in window.days:
        if day.is_open and not day.has_valid_times:
            problems.append(f"unparseable hours on {day.date}: {day.open_time!r}-{day.close_time!r}")

    return problems
