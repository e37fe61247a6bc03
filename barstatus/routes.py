from datetime import datetime
from functools import reduce

from fastapi import APIRouter, status, Depends
from sqlalchemy.orm import Session

from barstatus.constants import DATE_FORMAT
from barstatus.dependencies import get_db, get_now
from barstatus.engine import (
    bars_open_now, bars_open_today, cancel_auto_transition, current_window, return_to_schedule,
    set_override, start_auto_transition, stop_following_schedule, update_day, update_schedule
)
from barstatus.schemas import (
    AutoTransitionRequest, BarCreate, BarId, BarOut, OverrideRequest, ScheduleUpdate, TickOut, bar_out
)
from barstatus.utils import apply_command, create_bar, reconcile_all

app_router = APIRouter(
    prefix=''
)


@app_router.get("/bars", status_code=status.HTTP_200_OK, response_model=list[BarOut])
async def list_bars(db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    return [bar_out(state, now) for state in reconcile_all(db, now).bars]


@app_router.get("/bars/open_now", status_code=status.HTTP_200_OK, response_model=list[BarOut])
async def list_bars_open_now(db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    states = reconcile_all(db, now).bars
    return [bar_out(state, now) for state in bars_open_now(states)]


@app_router.get("/bars/open_today", status_code=status.HTTP_200_OK, response_model=list[BarOut])
async def list_bars_open_today(db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    states = reconcile_all(db, now).bars
    return [bar_out(state, now) for state in bars_open_today(states, now.date())]


@app_router.post("/bars", status_code=status.HTTP_201_CREATED, response_model=BarOut)
async def add_bar(data: BarCreate, db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    return bar_out(create_bar(db, data, now), now)


@app_router.get("/bars/{bar_id}", status_code=status.HTTP_200_OK, response_model=BarOut)
async def get_bar_status(bar_id: str, db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    BarId.validate_bar_id(bar_id)
    return bar_out(apply_command(db, bar_id, lambda bar: bar, now), now)


@app_router.put("/bars/{bar_id}/schedule", status_code=status.HTTP_200_OK, response_model=BarOut)
async def put_schedule(bar_id: str, data: ScheduleUpdate,
                       db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    BarId.validate_bar_id(bar_id)
    data.validate_hours()

    def edit(bar):
        window = reduce(
            lambda window, day: update_day(
                window, datetime.strptime(day.date, DATE_FORMAT).date(),
                day.is_open, day.open_time, day.close_time
            ),
            data.days,
            current_window(bar.schedule, now.date()),
        )
        return update_schedule(bar, window)

    return bar_out(apply_command(db, bar_id, edit, now), now)


@app_router.post("/bars/{bar_id}/override", status_code=status.HTTP_200_OK, response_model=BarOut)
async def override_status(bar_id: str, data: OverrideRequest,
                          db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    BarId.validate_bar_id(bar_id)
    state = apply_command(db, bar_id, lambda bar: set_override(bar, data.status), now)
    return bar_out(state, now)


@app_router.post("/bars/{bar_id}/follow_schedule", status_code=status.HTTP_200_OK, response_model=BarOut)
async def follow_schedule(bar_id: str, db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    BarId.validate_bar_id(bar_id)
    return bar_out(apply_command(db, bar_id, return_to_schedule, now), now)


@app_router.post("/bars/{bar_id}/stop_following", status_code=status.HTTP_200_OK, response_model=BarOut)
async def stop_following(bar_id: str, db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    BarId.validate_bar_id(bar_id)
    state = apply_command(db, bar_id, lambda bar: stop_following_schedule(bar, now), now)
    return bar_out(state, now)


@app_router.post("/bars/{bar_id}/auto_transition", status_code=status.HTTP_200_OK, response_model=BarOut)
async def schedule_auto_transition(bar_id: str, data: AutoTransitionRequest,
                                   db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    BarId.validate_bar_id(bar_id)
    state = apply_command(
        db, bar_id, lambda bar: start_auto_transition(bar, data.target_status, data.after_minutes, now), now
    )
    return bar_out(state, now)


@app_router.delete("/bars/{bar_id}/auto_transition", status_code=status.HTTP_200_OK, response_model=BarOut)
async def delete_auto_transition(bar_id: str, db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    BarId.validate_bar_id(bar_id)
    return bar_out(apply_command(db, bar_id, cancel_auto_transition, now), now)


@app_router.post("/reconcile", status_code=status.HTTP_200_OK, response_model=TickOut)
async def trigger_reconcile(db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    result = reconcile_all(db, now)
    return TickOut(changed=result.changed, fired=result.fired, flagged=result.flagged)
