"""Nightly refresh daemon.

Recomputes missed counts and republishes the snapshot on a cron schedule,
so display surfaces see fresh data without the app running.
"""

import logging

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from .config import Config, load_config, setup_logging
from .workflows import get_snapshot_sink, get_store, refresh_all

logger = logging.getLogger(__name__)


def run_refresh(config: Config) -> None:
    """One refresh pass; failures are logged so the scheduler keeps running."""
    try:
        tasks = refresh_all(get_store(config), get_snapshot_sink(config))
        logger.info(f"Nightly refresh done ({len(tasks)} tasks)")
    except Exception as e:
        logger.error(f"Nightly refresh failed: {e}")


def setup_scheduler(config: Config | None = None) -> BlockingScheduler:
    """Set up the scheduled refresh job."""
    if config is None:
        config = load_config()

    if config.timezone:
        scheduler = BlockingScheduler(timezone=config.timezone)
    else:
        scheduler = BlockingScheduler()

    try:
        hour, minute = map(int, config.refresh_time.split(":"))
        scheduler.add_job(
            run_refresh,
            CronTrigger(hour=hour, minute=minute),
            args=[config],
            id="nightly_refresh",
        )
        logger.info(f"Scheduled nightly refresh at {hour:02d}:{minute:02d}")
    except ValueError:
        logger.warning(f"Invalid refresh time format: {config.refresh_time}")

    return scheduler


def run_refresh_daemon(config: Config | None = None) -> None:
    """Refresh once now, then block running the nightly schedule."""
    if config is None:
        config = load_config()
    setup_logging(config)

    scheduler = setup_scheduler(config)
    run_refresh(config)
    logger.info("Starting refresh scheduler...")
    scheduler.start()
