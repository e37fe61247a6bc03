"""Per-bar override and auto-transition state.

A bar either follows its weekly schedule or is overridden by the owner with
a manual status. Independently, the owner can queue an auto-transition that
becomes a manual override once its fire time has passed.

Every command here takes a `BarState` and returns a new one; nothing is
mutated in place.
"""
import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from typing import Optional

from barstatus.constants import SOURCE_MANUAL, SOURCE_SCHEDULE
from barstatus.engine.resolver import carries_past_midnight, resolve_span
from barstatus.engine.schedule import (
    WeeklySchedule, current_window, todays_schedule, weekday_entry
)
from barstatus.engine.status import BarStatus, OPEN_NOW_STATUSES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AutoTransition:
    fire_at: Optional[datetime] = None
    target_status: Optional[BarStatus] = None
    is_active: bool = False

    def is_due(self, now: datetime) -> bool:
        return (
            self.is_active
            and self.fire_at is not None
            and self.target_status is not None
            and self.fire_at <= now
        )


NO_TRANSITION = AutoTransition()


@dataclass(frozen=True)
class BarState:
    """The per-bar aggregate the engine reads and returns."""

    id: str
    schedule: WeeklySchedule = field(default_factory=WeeklySchedule)
    is_following_schedule: bool = True
    manual_status: Optional[BarStatus] = None
    auto_transition: AutoTransition = NO_TRANSITION
    # Last recorded effective status; None until the first reconciliation
    status: Optional[BarStatus] = None
    last_updated: Optional[datetime] = None
    name: str = ""
    address: str = ""
    description: str = ""

    @property
    def is_overridden(self) -> bool:
        return not self.is_following_schedule

    @property
    def status_source(self) -> str:
        return SOURCE_SCHEDULE if self.is_following_schedule else SOURCE_MANUAL


def schedule_status(bar: BarState, now: datetime) -> BarStatus:
    """Status implied by the bar's (lazily rolled) window at `now`.

    Past midnight, the previous weekday's overnight hours are still running
    until their close time; otherwise today's entry decides.
    """
    window = current_window(bar.schedule, now.date())
    yesterday = now.date() - timedelta(days=1)
    carried = weekday_entry(window, yesterday.weekday())
    if carried is not None and carries_past_midnight(carried, now):
        return resolve_span(carried, now, yesterday)
    return resolve_span(window.days[0], now, now.date())


def effective_status(bar: BarState, now: datetime) -> BarStatus:
    if bar.is_overridden and bar.manual_status is not None:
        return bar.manual_status
    return schedule_status(bar, now)


def has_conflict(bar: BarState, now: datetime) -> bool:
    """True when an overridden bar's manual status disagrees with its schedule.

    Advisory only, it never changes the bar's state.
    """
    if bar.is_following_schedule or bar.manual_status is None:
        return False
    return bar.manual_status != schedule_status(bar, now)


def set_override(bar: BarState, status: BarStatus) -> BarState:
    return replace(
        bar,
        is_following_schedule=False,
        manual_status=status,
        auto_transition=NO_TRANSITION,
    )


def return_to_schedule(bar: BarState) -> BarState:
    return replace(
        bar,
        is_following_schedule=True,
        manual_status=None,
        auto_transition=NO_TRANSITION,
    )


def stop_following_schedule(bar: BarState, now: datetime) -> BarState:
    """Switch to manual control, keeping whatever the schedule says right now."""
    if bar.is_overridden and bar.manual_status is not None:
        return bar
    return set_override(bar, schedule_status(bar, now))


def start_auto_transition_at(bar: BarState, target_status: BarStatus, fire_at: datetime) -> BarState:
    transition = AutoTransition(fire_at=fire_at, target_status=target_status, is_active=True)
    return replace(bar, auto_transition=transition)


def start_auto_transition(bar: BarState, target_status: BarStatus,
                          after_minutes: int, now: datetime) -> BarState:
    """Queue a change to `target_status` in `after_minutes`; negative delays fire immediately."""
    delay = timedelta(minutes=max(after_minutes, 0))
    return start_auto_transition_at(bar, target_status, now + delay)


def cancel_auto_transition(bar: BarState) -> BarState:
    if bar.auto_transition == NO_TRANSITION:
        return bar
    return replace(bar, auto_transition=NO_TRANSITION)


def fire_due_transition(bar: BarState, now: datetime) -> tuple:
    """Apply the pending auto-transition if its fire time has passed.

    Returns `(bar, fired)`. Firing turns the target into a manual override
    and clears the transition; calling again afterwards is a no-op.
    """
    transition = bar.auto_transition
    if not transition.is_due(now):
        return bar, False

    logger.info(f"Auto-transition for bar {bar.id} fired: -> {transition.target_status.value}")
    return set_override(bar, transition.target_status), True


def update_schedule(bar: BarState, schedule: WeeklySchedule) -> BarState:
    """Replace the bar's window; override and transition state are left alone."""
    return replace(bar, schedule=schedule)


def time_remaining_text(bar: BarState, now: datetime) -> Optional[str]:
    """Countdown until the pending auto-transition, e.g. "1h 5m" or "12m"."""
    transition = bar.auto_transition
    if not transition.is_active or transition.fire_at is None:
        return None

    remaining = int((transition.fire_at - now).total_seconds())
    if remaining <= 0:
        return "Now"

    hours = remaining // 3600
    minutes = (remaining % 3600) // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def is_open_today(bar: BarState, today: date) -> bool:
    return todays_schedule(bar.schedule, today).is_open


def bars_open_now(bars: list) -> list:
    return [bar for bar in bars if bar.status in OPEN_NOW_STATUSES]


def bars_open_today(bars: list, today: date) -> list:
    return [bar for bar in bars if is_open_today(bar, today)]
