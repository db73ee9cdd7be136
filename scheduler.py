"""APScheduler wrapper for periodic price refreshes."""

import logging
import signal
import sys
from datetime import datetime

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.schedulers.blocking import BlockingScheduler

from aggregator import AggregationRunner
from config import REFRESH_INTERVAL_MINUTES

logger = logging.getLogger(__name__)

JOB_ID = "price_refresh"


def _refresh_job(runner: AggregationRunner):
    """Job function called by scheduler."""
    logger.info("=== Scheduled refresh starting ===")
    try:
        snapshot = runner.run()
        if snapshot is not None:
            logger.info(f"=== Scheduled refresh done. {len(snapshot.items)} prices published ===")
    except Exception as e:
        logger.error(f"Scheduled refresh failed: {e}")


def add_refresh_job(
    scheduler: BaseScheduler,
    runner: AggregationRunner,
    interval_minutes: int = REFRESH_INTERVAL_MINUTES,
):
    """Run once right away, then every interval. Never two at once."""
    scheduler.add_job(
        _refresh_job,
        "interval",
        args=[runner],
        minutes=interval_minutes,
        next_run_time=datetime.now(),
        max_instances=1,
        coalesce=True,
        id=JOB_ID,
        name="Price Refresh",
        replace_existing=True,
    )


def start_background_scheduler(runner: AggregationRunner) -> BackgroundScheduler:
    """Start a scheduler thread alongside the API."""
    scheduler = BackgroundScheduler()
    add_refresh_job(scheduler, runner)
    scheduler.start()
    logger.info(f"Scheduler started. Refreshing every {REFRESH_INTERVAL_MINUTES} minutes.")
    return scheduler


def run_scheduler(runner: AggregationRunner):
    """Start the blocking scheduler (worker mode, no API)."""
    scheduler = BlockingScheduler()
    add_refresh_job(scheduler, runner)

    def shutdown(signum, frame):
        logger.info("Shutting down scheduler...")
        scheduler.shutdown(wait=False)
        sys.exit(0)

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    logger.info(
        f"Scheduler started. Refreshing every {REFRESH_INTERVAL_MINUTES} minutes. "
        "Press Ctrl+C to stop."
    )
    scheduler.start()
