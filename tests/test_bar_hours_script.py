from datetime import datetime

from barstatus.models import Bar
from barstatus.schemas import bar_to_state
from barstatus.scripts.bar_hours_script import import_bar_hours, read_weekly_hours
from barstatus.scripts.scripts_db import get_scripts_db

CSV = """bar_name,address,day,open_time,close_time
The Underground,"789 Shinjuku, Tokyo",4,20:00,03:00
The Underground,"789 Shinjuku, Tokyo",5,20:00,03:00
The Underground,"789 Shinjuku, Tokyo",6,,
Harbor Lights,"321 Minato, Tokyo",0,17:00,23:00
"""

# Monday evening
NOW = datetime(2026, 10, 19, 18, 0)


def write_csv(tmp_path):
    path = tmp_path / "bar hours.csv"
    path.write_text(CSV)
    return path


def test_read_weekly_hours(tmp_path):
    hours = read_weekly_hours(write_csv(tmp_path))

    underground = hours[("The Underground", "789 Shinjuku, Tokyo")]
    assert underground[4] == (True, "20:00", "03:00")
    assert underground[6] == (False, "18:00", "02:00")
    assert set(underground) == {4, 5, 6}
    assert hours[("Harbor Lights", "321 Minato, Tokyo")] == {0: (True, "17:00", "23:00")}


def test_import_creates_bars_with_weekday_hours(tmp_path, session_factory):
    with get_scripts_db(session_factory) as session:
        bar_ids = import_bar_hours(session, write_csv(tmp_path), NOW)

    assert len(bar_ids) == 2

    session = session_factory()
    try:
        bars = {bar.name: bar_to_state(bar) for bar in session.query(Bar).all()}
    finally:
        session.close()

    underground = bars["The Underground"]
    open_weekdays = sorted(day.date.weekday() for day in underground.schedule.days if day.is_open)
    assert open_weekdays == [4, 5]
    assert underground.schedule.days[0].date == NOW.date()
    assert underground.status.value == "closed"
    assert underground.last_updated == NOW

    harbor = bars["Harbor Lights"]
    assert harbor.address == "321 Minato, Tokyo"
    assert harbor.status.value == "open"
