import logging
from datetime import date
from typing import List, Optional

import httpx

from ..core.settings import Settings
from ..core.supabase import eq, gte, insert_row, lt, select_rows
from ..models.rent import RentObligation
from ..models.worker import BatchResult, RowResult
from .message_templates import recurring_rent_message, reminder_message_template
from .rent_dates import clamp_day, current_period_reminder_date, first_of_month, first_of_next_month, local_today

logger = logging.getLogger(__name__)

RENTS_TABLE = "rents"
REMINDERS_TABLE = "rent_reminders"
STALE_RENT_SELECT = "*,tenant:tenants(name,phone),flat:flats(name)"


async def fetch_stale_monthly_rows(client: httpx.AsyncClient, settings: Settings, today: date) -> List[dict]:
  return await select_rows(
    client,
    settings,
    RENTS_TABLE,
    select=STALE_RENT_SELECT,
    filters={"payment_frequency": eq("monthly"), "due_date": lt(first_of_month(today))},
    order="due_date.desc",
  )


async def find_period_rent(
  client: httpx.AsyncClient, settings: Settings, rent: RentObligation, today: date
) -> Optional[dict]:
  filters = {
    "tenant_id": eq(rent.tenant_id),
    "payment_frequency": eq("monthly"),
    "and": f"(due_date.{gte(first_of_month(today))},due_date.{lt(first_of_next_month(today))})",
  }
  if rent.flat_id:
    filters["flat_id"] = eq(rent.flat_id)
  rows = await select_rows(client, settings, RENTS_TABLE, select="id", filters=filters, limit=1)
  return rows[0] if rows else None


async def generate_period_rent(
  client: httpx.AsyncClient,
  settings: Settings,
  rent: RentObligation,
  today: date,
) -> RowResult:
  existing = await find_period_rent(client, settings, rent, today)
  if existing:
    return RowResult(
      id=rent.id,
      status="skipped",
      message=f"rent for {today.strftime('%B %Y')} already exists",
      createdId=str(existing.get("id")),
    )

  due_day = rent.reminder_day or settings.default_reminder_day
  new_rent = await insert_row(
    client,
    settings,
    RENTS_TABLE,
    {
      "tenant_id": rent.tenant_id,
      "flat_id": rent.flat_id,
      "amount": rent.amount,
      "due_date": clamp_day(today.year, today.month, due_day).isoformat(),
      "is_paid": False,
      "whatsapp_sent": False,
      "custom_message": recurring_rent_message(today),
      "payment_frequency": "monthly",
      "reminder_day": rent.reminder_day,
    },
  )
  new_rent_id = str(new_rent.get("id"))

  if rent.reminder_day:
    try:
      await insert_row(
        client,
        settings,
        REMINDERS_TABLE,
        {
          "rent_id": new_rent_id,
          "tenant_id": rent.tenant_id,
          "next_reminder_date": current_period_reminder_date(today, rent.reminder_day).isoformat(),
          "reminder_day": rent.reminder_day,
          "is_active": True,
          "amount": rent.amount,
          "message_template": reminder_message_template(
            rent.tenant.name if rent.tenant else None,
            rent.amount,
            rent.flat.name if rent.flat else None,
          ),
        },
      )
    except Exception as exc:
      logger.exception("[RecurringRents] Rent %s created for %s but its reminder failed", new_rent_id, rent.id)
      return RowResult(id=rent.id, status="failed", message=f"reminder not created: {exc}", createdId=new_rent_id)

  return RowResult(id=rent.id, status="processed", createdId=new_rent_id)


async def process_recurring_rents(
  client: httpx.AsyncClient,
  settings: Settings,
  today: Optional[date] = None,
) -> BatchResult:
  """Create this month's rent (and reminder) for every monthly rent due before this month.

  Rows come newest first, so the latest amount and reminder day of a
  tenant/flat pair carry forward. A pair that already has a monthly rent
  due this month is skipped, so running twice in the same month creates
  nothing new.
  """
  today = today or local_today(settings.worker_timezone)
  try:
    rows = await fetch_stale_monthly_rows(client, settings, today)
  except Exception as exc:
    logger.exception("[RecurringRents] Failed to fetch monthly rents due before %s", first_of_month(today))
    return BatchResult.fatal(str(exc))

  results: List[RowResult] = []
  for row in rows:
    row_id = str(row.get("id"))
    try:
      rent = RentObligation.model_validate(row)
      results.append(await generate_period_rent(client, settings, rent, today))
    except Exception as exc:
      logger.exception("[RecurringRents] Failed to process recurring rent %s", row_id)
      results.append(RowResult(id=row_id, status="failed", message=str(exc)))

  batch = BatchResult.from_rows(results)
  logger.info("[RecurringRents] %s: %s", today.strftime("%Y-%m"), batch.summary())
  return batch
