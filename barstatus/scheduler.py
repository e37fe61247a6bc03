"""Background reconciliation: one tick over every bar each TICK_INTERVAL_SECONDS."""
import logging

from apscheduler.schedulers.background import BackgroundScheduler

from barstatus.config import TICK_INTERVAL_SECONDS
from barstatus.db import Session
from barstatus.utils import local_now, reconcile_all

logger = logging.getLogger(__name__)


def run_reconcile_job() -> None:
    db = Session()
    try:
        result = reconcile_all(db, local_now())
        if result.changed:
            logger.info(f"Status changed for bars: {', '.join(result.changed)}")
    finally:
        db.close()


def build_scheduler(interval_seconds: int = TICK_INTERVAL_SECONDS) -> BackgroundScheduler:
    scheduler = BackgroundScheduler()
    # A missed run is caught up by the next tick
    scheduler.add_job(
        run_reconcile_job, "interval", seconds=interval_seconds,
        id="bar_status_reconcile", max_instances=1, coalesce=True,
    )
    return scheduler
