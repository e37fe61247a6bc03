"""Create bars from a CSV of weekly opening hours.

One row per bar and weekday: `bar_name, address, day, open_time, close_time`
where `day` is 0=Monday .. 6=Sunday. Rows with no times mark the bar as
closed that day; weekdays without a row stay closed too.

    python -m barstatus.scripts.bar_hours_script [path/to/bar hours.csv]
"""
import logging
import sys
import uuid
from datetime import datetime
from pathlib import Path

import pandas as pd

from barstatus.constants import BAR_HOURS_CSV, DEFAULT_OPEN_TIME, DEFAULT_CLOSE_TIME
from barstatus.engine import BarState, reconcile_bar, window_from_weekday_hours
from barstatus.models import Bar
from barstatus.schemas import apply_state
from barstatus.scripts.scripts_db import get_scripts_db
from barstatus.utils import local_now

logger = logging.getLogger(__name__)

BATCH_SIZE = 10000
csv_file_path = Path(__file__).resolve().parent.parent / 'data' / BAR_HOURS_CSV


def read_weekly_hours(path) -> dict:
    """Read the CSV into `{(bar_name, address): {weekday: (is_open, open_time, close_time)}}`."""
    hours = {}
    for chunk in pd.read_csv(path, chunksize=BATCH_SIZE, dtype=str, keep_default_na=False):
        chunk['address'] = chunk.get('address', '')
        chunk['open_time'] = chunk['open_time'].str.strip()
        chunk['close_time'] = chunk['close_time'].str.strip()

        for index, row in chunk.iterrows():
            if row['open_time'] and row['close_time']:
                day_hours = (True, row['open_time'], row['close_time'])
            else:
                day_hours = (False, DEFAULT_OPEN_TIME, DEFAULT_CLOSE_TIME)
            key = (row['bar_name'].strip(), row['address'].strip())
            hours.setdefault(key, {})[int(row['day'])] = day_hours
    return hours


def import_bar_hours(session, path, now: datetime) -> list:
    """Insert one bar per distinct name/address in the CSV and return their ids."""
    bars = []
    for (name, address), weekday_hours in read_weekly_hours(path).items():
        state = BarState(
            id=str(uuid.uuid4()),
            name=name,
            address=address,
            schedule=window_from_weekday_hours(weekday_hours, now.date()),
            last_updated=now,
        )
        state, _, _, _ = reconcile_bar(state, now)
        bars.append(apply_state(Bar(id=state.id), state))

    session.add_all(bars)
    session.commit()
    return [bar.id for bar in bars]


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    path = sys.argv[1] if len(sys.argv) > 1 else csv_file_path
    with get_scripts_db() as session:
        bar_ids = import_bar_hours(session, path, local_now())
    logger.info(f"Inserted {len(bar_ids)} bars with weekly hours from {path}.")
