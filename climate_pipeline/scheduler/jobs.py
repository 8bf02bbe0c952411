"""
climate_pipeline/scheduler/jobs.py

APScheduler wiring for continuous refresh mode.

Lifecycle
----------
``build_scheduler()`` returns a configured ``BlockingScheduler`` with one
interval job that fires immediately and then every ``interval_minutes``.
Calling ``.start()`` blocks the process until it is interrupted. The job
wrapper logs every failure and returns, so one bad iteration never stops the
loop.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from apscheduler.schedulers.blocking import BlockingScheduler

from climate_pipeline.errors import IncompleteDatasetError
from climate_pipeline.services.update_service import ClimateUpdateService, UpdateRunResult

logger = logging.getLogger(__name__)

UPDATE_JOB_ID = "climate_update"


# ---------------------------------------------------------------------------
# Job: dataset refresh
# ---------------------------------------------------------------------------


def run_update_job(service: ClimateUpdateService) -> UpdateRunResult | None:
    """
    Run one refresh and swallow its failure after logging it.
    """
    logger.info("Scheduler: climate_update starting")
    try:
        result = service.run()
    except IncompleteDatasetError as exc:
        logger.error(
            "Scheduler: climate_update produced an incomplete dataset empty_series=%s",
            ", ".join(exc.empty_series),
        )
        return None
    except Exception as exc:  # noqa: BLE001
        logger.exception("Scheduler: climate_update failed: %s", exc)
        return None

    for warning in result.map_warnings:
        logger.warning("Scheduler: climate_update map warning: %s", warning)
    logger.info(
        "Scheduler: climate_update complete path=%s series=%s",
        result.output_path,
        len(result.artifact.series),
    )
    return result


# ---------------------------------------------------------------------------
# Scheduler factory
# ---------------------------------------------------------------------------


def build_scheduler(job: Callable[[], Any], interval_minutes: float) -> BlockingScheduler:
    """
    Register `job` on a fixed interval, first run immediately.

    Returns a configured but *not yet started* ``BlockingScheduler``.
    Overlapping runs are never started; missed runs collapse into one.
    """
    if interval_minutes <= 0:
        raise ValueError("interval_minutes must be positive")

    scheduler = BlockingScheduler(timezone="UTC")
    scheduler.add_job(
        job,
        trigger="interval",
        minutes=interval_minutes,
        id=UPDATE_JOB_ID,
        name="Climate dataset refresh",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=max(60, int(interval_minutes * 60)),
        next_run_time=datetime.now(timezone.utc),
    )
    return scheduler
