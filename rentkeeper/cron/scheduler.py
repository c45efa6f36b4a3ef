import logging
from datetime import date, datetime, timedelta
from typing import Optional

import httpx
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from ..core.settings import Settings
from ..models.worker import CycleReport
from ..services.recurring_rent_service import process_recurring_rents
from ..services.reminder_service import process_rent_reminders
from ..services.rent_dates import local_now

logger = logging.getLogger(__name__)

RENT_WORKER_JOB_ID = "rent-worker"


async def run_worker_cycle(
  client: httpx.AsyncClient, settings: Settings, today: Optional[date] = None
) -> CycleReport:
  report = CycleReport(startedAt=local_now(settings.worker_timezone).isoformat())
  logger.info("[RentWorker] Running rent worker...")
  try:
    report.reminders = await process_rent_reminders(client, settings, today=today)
    logger.info("[RentWorker] Rent reminders processed: %s", report.reminders.summary())

    report.recurring = await process_recurring_rents(client, settings, today=today)
    logger.info("[RentWorker] Recurring rents processed: %s", report.recurring.summary())
  except Exception as exc:
    logger.exception("[RentWorker] Error in rent worker")
    report.error = str(exc) or exc.__class__.__name__
  report.finishedAt = local_now(settings.worker_timezone).isoformat()
  return report


def create_scheduler(settings: Settings, http_client: httpx.AsyncClient) -> Optional[AsyncIOScheduler]:
  if not settings.worker_active:
    return None
  scheduler = AsyncIOScheduler(timezone=settings.worker_timezone)
  interval = timedelta(seconds=settings.worker_interval_seconds)

  async def rent_worker_job():
    try:
      return await run_worker_cycle(http_client, settings)
    finally:
      # The next cycle starts one interval after this one ends, whatever the outcome.
      scheduler.modify_job(RENT_WORKER_JOB_ID, next_run_time=datetime.now(scheduler.timezone) + interval)

  # First cycle runs immediately.
  scheduler.add_job(
    rent_worker_job,
    IntervalTrigger(seconds=settings.worker_interval_seconds, timezone=settings.worker_timezone),
    id=RENT_WORKER_JOB_ID,
    next_run_time=datetime.now(scheduler.timezone),
    max_instances=1,
    coalesce=True,
    misfire_grace_time=None,
    replace_existing=True,
  )
  return scheduler
