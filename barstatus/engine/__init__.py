from barstatus.engine.status import BarStatus, OPEN_NOW_STATUSES
from barstatus.engine.schedule import (
    DailySchedule, WeeklySchedule, InvalidTimeError, parse_time_of_day, format_time_of_day,
    build_window, window_from_weekday_hours, needs_rollover, rollover, current_window,
    todays_schedule, weekday_entry, has_valid_shape, update_day, window_problems
)
from barstatus.engine.resolver import (
    get_open_close_instants, carries_past_midnight, resolve_span, resolve
)
from barstatus.engine.override import (
    AutoTransition, NO_TRANSITION, BarState, schedule_status, effective_status, has_conflict,
    set_override, return_to_schedule, stop_following_schedule, start_auto_transition,
    start_auto_transition_at, cancel_auto_transition, fire_due_transition, update_schedule,
    time_remaining_text, is_open_today, bars_open_now, bars_open_today
)
from barstatus.engine.reconcile import TickResult, reconcile_bar, tick
