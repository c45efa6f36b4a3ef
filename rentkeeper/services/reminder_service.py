import logging
from datetime import date, datetime
from typing import List, Optional

import httpx

from ..core.settings import Settings
from ..core.supabase import eq, insert_row, select_rows, update_rows
from ..models.notification import NotificationRecord
from ..models.reminder import ReminderSchedule
from ..models.worker import BatchResult, RowResult
from .rent_dates import local_now, next_reminder_date

logger = logging.getLogger(__name__)

REMINDERS_TABLE = "rent_reminders"
RENTS_TABLE = "rents"
NOTIFICATIONS_TABLE = "whatsapp_messages"
DUE_REMINDER_SELECT = "*,tenant:tenants(name,phone),rent:rents(flat:flats(name))"


async def fetch_due_reminder_rows(client: httpx.AsyncClient, settings: Settings, on_date: date) -> List[dict]:
  return await select_rows(
    client,
    settings,
    REMINDERS_TABLE,
    select=DUE_REMINDER_SELECT,
    filters={"is_active": eq(True), "next_reminder_date": eq(on_date)},
  )


async def due_reminders(client: httpx.AsyncClient, settings: Settings, on_date: date) -> List[ReminderSchedule]:
  rows = await fetch_due_reminder_rows(client, settings, on_date)
  return [ReminderSchedule.model_validate(row) for row in rows]


async def dispatch_reminder(
  client: httpx.AsyncClient,
  settings: Settings,
  reminder: ReminderSchedule,
  today: date,
  now: datetime,
) -> RowResult:
  message = None
  phone = reminder.tenant_phone
  if phone:
    record = NotificationRecord(
      tenant_id=reminder.tenant_id,
      rent_id=reminder.rent_id,
      message=reminder.message_template,
      recipient_phone=phone,
      sent_at=now,
      included_payment_link=False,
      status="sent",
    )
    await insert_row(client, settings, NOTIFICATIONS_TABLE, record.to_insert())
  else:
    message = "tenant has no phone number, notification skipped"

  next_date = next_reminder_date(today, reminder.reminder_day)
  await update_rows(
    client,
    settings,
    REMINDERS_TABLE,
    filters={"id": eq(reminder.id)},
    body={"next_reminder_date": next_date.isoformat()},
  )
  await update_rows(
    client,
    settings,
    RENTS_TABLE,
    filters={"id": eq(reminder.rent_id)},
    body={"last_reminder_date": today.isoformat()},
  )
  return RowResult(id=reminder.id, status="processed", message=message)


async def process_rent_reminders(
  client: httpx.AsyncClient,
  settings: Settings,
  today: Optional[date] = None,
  now: Optional[datetime] = None,
) -> BatchResult:
  """Send every active reminder due today and move each schedule to next month.

  Rows are handled one at a time; a failing row is recorded in the result and
  the batch goes on. Only a failing fetch aborts the run.
  """
  now = now or local_now(settings.worker_timezone)
  today = today or now.date()
  try:
    rows = await fetch_due_reminder_rows(client, settings, today)
  except Exception as exc:
    logger.exception("[Reminders] Failed to fetch reminders due %s", today)
    return BatchResult.fatal(str(exc))

  results: List[RowResult] = []
  for row in rows:
    row_id = str(row.get("id"))
    try:
      reminder = ReminderSchedule.model_validate(row)
      results.append(await dispatch_reminder(client, settings, reminder, today, now))
    except Exception as exc:
      logger.exception("[Reminders] Failed to process reminder %s", row_id)
      results.append(RowResult(id=row_id, status="failed", message=str(exc)))

  batch = BatchResult.from_rows(results)
  logger.info("[Reminders] %s: %s", today, batch.summary())
  return batch
