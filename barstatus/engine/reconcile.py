import logging
from dataclasses import dataclass, field, replace
from datetime import datetime

from barstatus.engine.override import BarState, effective_status, fire_due_transition
from barstatus.engine.schedule import has_valid_shape, needs_rollover, rollover, window_problems
from barstatus.engine.status import BarStatus

logger = logging.getLogger(__name__)


@dataclass
class TickResult:
    bars: list = field(default_factory=list)
    changed: list = field(default_factory=list)
    fired: list = field(default_factory=list)
    flagged: list = field(default_factory=list)

    def bar(self, bar_id: str) -> BarState:
        for bar in self.bars:
            if bar.id == bar_id:
                return bar
        raise KeyError(bar_id)


def reconcile_bar(bar: BarState, now: datetime) -> tuple:
    """Run one reconciliation step for a single bar.

    Returns `(bar, changed, fired, problems)`. `changed` is True whenever
    the returned bar has to be persisted.

    A window with the wrong number of days or a date gap is recorded as
    Closed on the tick that finds it. The rebuilt window is persisted and
    resolves normally from the next tick on.
    """
    problems = window_problems(bar.schedule)
    malformed = not has_valid_shape(bar.schedule)

    schedule = bar.schedule
    # A malformed window is rebuilt the same way a stale one is
    if problems or needs_rollover(schedule, now.date()):
        schedule = rollover(schedule, now.date())
    rolled = schedule != bar.schedule
    if rolled:
        bar = replace(bar, schedule=schedule)

    bar, fired = fire_due_transition(bar, now)

    status = BarStatus.CLOSED if malformed else effective_status(bar, now)
    status_changed = status != bar.status
    if status_changed:
        bar = replace(bar, status=status)

    return bar, rolled or fired or status_changed, fired, problems


def tick(bars: list, now: datetime) -> TickResult:
    """Re-evaluate every bar at `now`.

    A bar that cannot be evaluated is reported as Closed and flagged; it
    never stops the other bars from being reconciled. Calling again with
    the same `now` changes nothing.
    """
    result = TickResult()

    for bar in bars:
        try:
            updated, changed, fired, problems = reconcile_bar(bar, now)
        except Exception as e:
            logger.exception(f"Failed to reconcile bar {bar.id}: {e}")
            updated = replace(bar, status=BarStatus.CLOSED)
            changed, fired, problems = bar.status != BarStatus.CLOSED, False, [str(e)]

        if problems:
            logger.warning(f"Bar {bar.id} has a malformed schedule: {'; '.join(problems)}")
            result.flagged.append(bar.id)
        if fired:
            result.fired.append(bar.id)
        if changed:
            result.changed.append(bar.id)
        result.bars.append(updated)

    logger.info(
        f"Reconciled {len(result.bars)} bars at {now}: {len(result.changed)} changed, "
        f"{len(result.fired)} transitions fired, {len(result.flagged)} flagged"
    )
    return result
