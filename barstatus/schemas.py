import logging
import uuid
from datetime import datetime
from typing import Optional

from fastapi import HTTPException, status
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from barstatus.constants import DATE_FORMAT, DEFAULT_OPEN_TIME, DEFAULT_CLOSE_TIME
from barstatus.engine import (
    AutoTransition, BarState, BarStatus, DailySchedule, InvalidTimeError, NO_TRANSITION,
    WeeklySchedule, current_window, effective_status, has_conflict, parse_time_of_day,
    time_remaining_text
)
from barstatus.models import Bar

logger = logging.getLogger(__name__)


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class BarId(BaseModel):
    bar_id: str

    @classmethod
    def validate_bar_id(cls, bar_id: str):
        try:
            uuid.UUID(bar_id)
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid bar_id. Must be a valid UUID."
            )
        return bar_id


# Stored document shapes

class DailyScheduleDoc(WireModel):
    date: str
    is_open: bool = Field(alias='isOpen')
    open_time: str = Field(alias='openTime')
    close_time: str = Field(alias='closeTime')


class AutoTransitionDoc(WireModel):
    fire_at: Optional[datetime] = Field(None, alias='fireAt')
    target_status: Optional[BarStatus] = Field(None, alias='targetStatus')
    is_active: bool = Field(False, alias='isActive')


# API requests

class BarCreate(WireModel):
    name: str = Field(min_length=1)
    address: str = ''
    description: str = ''


class DayHoursUpdate(WireModel):
    date: str
    is_open: bool = Field(alias='isOpen')
    open_time: str = Field(DEFAULT_OPEN_TIME, alias='openTime')
    close_time: str = Field(DEFAULT_CLOSE_TIME, alias='closeTime')


class ScheduleUpdate(WireModel):
    days: list[DayHoursUpdate]

    def validate_hours(self):
        """Reject dates and times that would not survive a round trip through the store."""
        for day in self.days:
            try:
                datetime.strptime(day.date, DATE_FORMAT)
                parse_time_of_day(day.open_time)
                parse_time_of_day(day.close_time)
            except (ValueError, InvalidTimeError) as e:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Invalid hours for {day.date}: {e}"
                )
        return self


class OverrideRequest(WireModel):
    status: BarStatus


class AutoTransitionRequest(WireModel):
    target_status: BarStatus = Field(alias='targetStatus')
    after_minutes: int = Field(alias='afterMinutes')


# API responses

class DayOut(WireModel):
    date: str
    day_name: str = Field(alias='dayName')
    is_open: bool = Field(alias='isOpen')
    open_time: str = Field(alias='openTime')
    close_time: str = Field(alias='closeTime')
    display_text: str = Field(alias='displayText')


class BarOut(WireModel):
    id: str
    name: str
    address: str
    description: str
    status: BarStatus
    status_display: str = Field(alias='statusDisplay')
    status_source: str = Field(alias='statusSource')
    is_following_schedule: bool = Field(alias='isFollowingSchedule')
    manual_status: Optional[BarStatus] = Field(None, alias='manualStatus')
    conflict: bool
    auto_transition: Optional[AutoTransitionDoc] = Field(None, alias='autoTransition')
    time_remaining: Optional[str] = Field(None, alias='timeRemaining')
    todays_hours: str = Field(alias='todaysHours')
    weekly_schedule: list[DayOut] = Field(alias='weeklySchedule')
    last_updated: Optional[datetime] = Field(None, alias='lastUpdated')


class TickOut(WireModel):
    changed: list[str]
    fired: list[str]
    flagged: list[str]


# Conversion between stored documents and engine aggregates

def daily_from_doc(data: dict) -> Optional[DailySchedule]:
    """Decode one stored day; entries that cannot be decoded are dropped."""
    try:
        doc = DailyScheduleDoc.model_validate(data)
        day_date = datetime.strptime(doc.date, DATE_FORMAT).date()
    except (ValidationError, ValueError, TypeError) as e:
        logger.warning(f"Dropping unreadable schedule entry {data!r}: {e}")
        return None
    return DailySchedule(date=day_date, is_open=doc.is_open, open_time=doc.open_time, close_time=doc.close_time)


def window_from_doc(data: Optional[dict]) -> WeeklySchedule:
    entries = (data or {}).get('days') or []
    days = [day for day in (daily_from_doc(entry) for entry in entries) if day is not None]
    return WeeklySchedule(days=days)


def window_to_doc(window: WeeklySchedule) -> dict:
    return {
        'days': [
            DailyScheduleDoc(
                date=day.date.strftime(DATE_FORMAT), is_open=day.is_open,
                open_time=day.open_time, close_time=day.close_time
            ).model_dump(by_alias=True)
            for day in window.days
        ]
    }


def transition_from_doc(data: Optional[dict]) -> AutoTransition:
    if not data:
        return NO_TRANSITION
    try:
        doc = AutoTransitionDoc.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Ignoring unreadable auto-transition {data!r}: {e}")
        return NO_TRANSITION
    if not doc.is_active:
        return NO_TRANSITION
    return AutoTransition(fire_at=doc.fire_at, target_status=doc.target_status, is_active=True)


def transition_to_doc(transition: AutoTransition) -> Optional[dict]:
    if transition == NO_TRANSITION:
        return None
    return AutoTransitionDoc(
        fire_at=transition.fire_at, target_status=transition.target_status, is_active=transition.is_active
    ).model_dump(by_alias=True, mode='json')


def bar_to_state(bar: Bar) -> BarState:
    manual_status = BarStatus.from_token(bar.manual_status)
    is_following_schedule = bar.is_following_schedule if bar.is_following_schedule is not None else True
    return BarState(
        id=bar.id,
        name=bar.name,
        address=bar.address or '',
        description=bar.description or '',
        schedule=window_from_doc(bar.weekly_schedule),
        is_following_schedule=is_following_schedule,
        manual_status=None if is_following_schedule else manual_status,
        auto_transition=transition_from_doc(bar.auto_transition),
        status=BarStatus.from_token(bar.status),
        last_updated=bar.last_updated,
    )


def apply_state(bar: Bar, state: BarState) -> Bar:
    """Copy an engine aggregate back onto its database row."""
    bar.name = state.name
    bar.address = state.address
    bar.description = state.description
    bar.weekly_schedule = window_to_doc(state.schedule)
    bar.is_following_schedule = state.is_following_schedule
    bar.manual_status = state.manual_status.value if state.manual_status else None
    bar.auto_transition = transition_to_doc(state.auto_transition)
    bar.status = state.status.value if state.status else None
    bar.last_updated = state.last_updated
    return bar


def bar_out(state: BarState, now: datetime) -> BarOut:
    window = current_window(state.schedule, now.date())
    transition = state.auto_transition
    current_status = effective_status(state, now)
    return BarOut(
        id=state.id,
        name=state.name,
        address=state.address,
        description=state.description,
        status=current_status,
        status_display=current_status.display_name,
        status_source=state.status_source,
        is_following_schedule=state.is_following_schedule,
        manual_status=state.manual_status,
        conflict=has_conflict(state, now),
        auto_transition=AutoTransitionDoc(
            fire_at=transition.fire_at, target_status=transition.target_status, is_active=True
        ) if transition.is_active else None,
        time_remaining=time_remaining_text(state, now),
        todays_hours=window.days[0].display_text,
        weekly_schedule=[
            DayOut(
                date=day.date.strftime(DATE_FORMAT), day_name=day.day_name, is_open=day.is_open,
                open_time=day.open_time, close_time=day.close_time, display_text=day.display_text
            )
            for day in window.days
        ],
        last_updated=state.last_updated,
    )
