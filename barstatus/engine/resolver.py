import logging
from datetime import date, datetime, timedelta

from barstatus.constants import TRANSITION_WINDOW
from barstatus.engine.schedule import DailySchedule, InvalidTimeError
from barstatus.engine.status import BarStatus

logger = logging.getLogger(__name__)


def get_open_close_instants(day: DailySchedule, opens_on: date) -> tuple:
    """Get the open and close instants of the span that opens on `opens_on`.

    When the bar closes after midnight the close instant falls on the
    following calendar date.
    """
    open_minutes = day.open_minutes
    close_minutes = day.close_minutes

    midnight = datetime.combine(opens_on, datetime.min.time())
    open_instant = midnight + timedelta(minutes=open_minutes)
    close_instant = midnight + timedelta(minutes=close_minutes)

    if close_minutes < open_minutes:
        close_instant += timedelta(days=1)

    return open_instant, close_instant


def carries_past_midnight(day: DailySchedule, now: datetime) -> bool:
    """True when `now` falls in the after-midnight tail of an overnight span."""
    if not (day.is_open and day.has_valid_times and day.is_overnight):
        return False
    return now.hour * 60 + now.minute < day.close_minutes


def resolve_span(day: DailySchedule, now: datetime, opens_on: date) -> BarStatus:
    """Status at `now` of the span `day` describes, opening on `opens_on`."""
    if not day.is_open:
        return BarStatus.CLOSED

    try:
        open_instant, close_instant = get_open_close_instants(day, opens_on)
    except InvalidTimeError as e:
        logger.warning(f"Treating {day.date} as closed: {e}")
        return BarStatus.CLOSED

    opening_soon_instant = open_instant - TRANSITION_WINDOW
    closing_soon_instant = close_instant - TRANSITION_WINDOW

    if now < opening_soon_instant or now >= close_instant:
        return BarStatus.CLOSED
    # Closing soon wins where both windows overlap on very short days
    if now >= closing_soon_instant:
        return BarStatus.CLOSING_SOON
    if now < open_instant:
        return BarStatus.OPENING_SOON
    return BarStatus.OPEN


def resolve(day: DailySchedule, now: datetime) -> BarStatus:
    """Compute the status a day's schedule implies at `now`.

    Pure: the same day and instant always give the same status. The span
    opens on `now`'s date, except that an instant past midnight but before
    an overnight close belongs to the span that opened the evening before.
    A day with unparseable hours resolves to Closed.
    """
    opens_on = now.date()
    if carries_past_midnight(day, now):
        opens_on -= timedelta(days=1)
    return resolve_span(day, now, opens_on)
