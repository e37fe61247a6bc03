import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Callable

import pytz
from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from barstatus.config import LOCAL_TIMEZONE
from barstatus.engine import BarState, TickResult, build_window, reconcile_bar, tick
from barstatus.models import Bar
from barstatus.schemas import BarCreate, apply_state, bar_to_state

logger = logging.getLogger(__name__)


def local_now(timezone_str: str = LOCAL_TIMEZONE) -> datetime:
    """Current wall-clock time in the configured zone, as a naive datetime."""
    return datetime.now(pytz.timezone(timezone_str)).replace(tzinfo=None)


def get_bar(db: Session, bar_id: str) -> Bar:
    bar = db.query(Bar).filter(Bar.id == bar_id).first()
    if not bar:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Bar not found."
        )
    return bar


def save_state(db: Session, bar: Bar, state: BarState, now: datetime) -> BarState:
    """Persist an aggregate the engine reported as changed, stamping it with `now`."""
    state = replace(state, last_updated=now)
    apply_state(bar, state)
    db.commit()
    return state


def create_bar(db: Session, data: BarCreate, now: datetime) -> BarState:
    """Create a bar that follows a fresh, all-closed window anchored today."""
    state = BarState(
        id=str(uuid.uuid4()),
        name=data.name,
        address=data.address,
        description=data.description,
        schedule=build_window(now.date()),
    )
    state, _, _, _ = reconcile_bar(state, now)

    bar = Bar(id=state.id)
    db.add(bar)
    state = save_state(db, bar, state, now)

    logger.info(f"Created bar {bar.id} ({bar.name})")
    return state


def apply_command(db: Session, bar_id: str, command: Callable, now: datetime) -> BarState:
    """Run an engine command against one stored bar and persist the outcome.

    `command` takes a `BarState` and returns the new one. The result is
    reconciled at `now` so the recorded status reflects the command, and is
    only written back when something actually changed.
    """
    bar = get_bar(db, bar_id)
    state = bar_to_state(bar)

    updated, _, _, _ = reconcile_bar(command(state), now)
    if updated == state:
        return state

    return save_state(db, bar, updated, now)


def reconcile_all(db: Session, now: datetime) -> TickResult:
    """Run one reconciliation tick over every stored bar and persist the changed ones."""
    bars = {bar.id: bar for bar in db.query(Bar).order_by(Bar.name).all()}
    result = tick([bar_to_state(bar) for bar in bars.values()], now)

    changed = set(result.changed)
    for index, state in enumerate(result.bars):
        if state.id in changed:
            result.bars[index] = replace(state, last_updated=now)
            apply_state(bars[state.id], result.bars[index])

    if changed:
        db.commit()

    return result
