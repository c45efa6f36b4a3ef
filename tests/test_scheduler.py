import asyncio
from datetime import date, datetime, timedelta, timezone

import pytest

from rentkeeper.core.settings import Settings
from rentkeeper.cron import scheduler as scheduler_module
from rentkeeper.cron.scheduler import RENT_WORKER_JOB_ID, create_scheduler, run_worker_cycle
from rentkeeper.models.worker import BatchResult


@pytest.fixture
def enabled_settings():
  return Settings(
    SUPABASE_URL="https://demo.supabase.co",
    SUPABASE_SERVICE_KEY="service-key",
    WORKER_ENABLED=True,
  )


def test_scheduler_disabled_returns_none(settings):
  assert create_scheduler(settings, None) is None


def test_worker_enabled_by_default_when_store_configured():
  configured = Settings(SUPABASE_URL="https://demo.supabase.co", SUPABASE_SERVICE_KEY="key", WORKER_ENABLED=None)
  unconfigured = Settings(SUPABASE_URL=None, SUPABASE_SERVICE_KEY=None, WORKER_ENABLED=None)
  assert configured.worker_active is True
  assert unconfigured.worker_active is False


def test_scheduler_runs_hourly_starting_now(enabled_settings):
  scheduler = create_scheduler(enabled_settings, None)

  job = scheduler.get_job(RENT_WORKER_JOB_ID)
  assert job is not None
  assert job.trigger.interval == timedelta(hours=1)
  assert job.next_run_time is not None
  assert job.max_instances == 1
  assert job.coalesce is True


async def test_cycle_runs_reminders_then_recurring(monkeypatch, settings, client):
  calls = []

  async def fake_reminders(client, settings, today=None):
    calls.append(("reminders", today))
    return BatchResult(success=True, processedCount=2, succeeded=2)

  async def fake_recurring(client, settings, today=None):
    calls.append(("recurring", today))
    return BatchResult(success=True, processedCount=1, skipped=1)

  monkeypatch.setattr(scheduler_module, "process_rent_reminders", fake_reminders)
  monkeypatch.setattr(scheduler_module, "process_recurring_rents", fake_recurring)

  report = await run_worker_cycle(client, settings, today=date(2026, 10, 19))

  assert calls == [("reminders", date(2026, 10, 19)), ("recurring", date(2026, 10, 19))]
  assert report.reminders.succeeded == 2
  assert report.recurring.skipped == 1
  assert report.error is None
  assert report.finishedAt is not None


async def test_cycle_swallows_errors_and_job_stays_scheduled(monkeypatch, enabled_settings, client):
  async def exploding(client, settings, today=None):
    raise RuntimeError("store unreachable")

  async def fake_recurring(client, settings, today=None):  # pragma: no cover - never reached
    raise AssertionError("recurring should not run after a failed reminders step")

  monkeypatch.setattr(scheduler_module, "process_rent_reminders", exploding)
  monkeypatch.setattr(scheduler_module, "process_recurring_rents", fake_recurring)
  scheduler = create_scheduler(enabled_settings, client)
  job = scheduler.get_job(RENT_WORKER_JOB_ID)
  started = datetime.now(timezone.utc)

  report = await job.func()

  assert report.error == "store unreachable"
  assert report.recurring is None
  assert scheduler.get_job(RENT_WORKER_JOB_ID) is job
  assert started + timedelta(hours=1) <= job.next_run_time <= datetime.now(timezone.utc) + timedelta(hours=1)


async def test_running_scheduler_runs_again_after_failed_cycle(monkeypatch):
  fast_settings = Settings(
    SUPABASE_URL="https://demo.supabase.co",
    SUPABASE_SERVICE_KEY="service-key",
    WORKER_ENABLED=True,
    WORKER_INTERVAL_SECONDS=1,
  )
  cycles = []

  async def flaky_reminders(client, settings, today=None):
    cycles.append("reminders")
    if len(cycles) == 1:
      raise RuntimeError("store unreachable")
    return BatchResult(success=True)

  async def fake_recurring(client, settings, today=None):
    return BatchResult(success=True)

  monkeypatch.setattr(scheduler_module, "process_rent_reminders", flaky_reminders)
  monkeypatch.setattr(scheduler_module, "process_recurring_rents", fake_recurring)
  scheduler = create_scheduler(fast_settings, None)
  scheduler.start()
  try:
    for _ in range(60):
      if len(cycles) >= 2:
        break
      await asyncio.sleep(0.1)
  finally:
    scheduler.shutdown(wait=False)

  assert len(cycles) >= 2
