from datetime import date
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from ..core.settings import Settings, get_settings
from ..core.supabase import eq, insert_row, select_rows, update_rows
from ..models.reminder import DueReminder, ReminderCreate, ReminderSchedule
from ..models.rent import RentObligation
from ..services.message_templates import rent_reminder_message
from ..services.reminder_service import REMINDERS_TABLE, RENTS_TABLE, due_reminders
from ..services.rent_dates import current_period_reminder_date, local_today

router = APIRouter(prefix="/api/reminders", tags=["reminders"])


def get_client(request: Request) -> httpx.AsyncClient:
  return request.app.state.http_client


def to_due_reminder(reminder: ReminderSchedule) -> DueReminder:
  return DueReminder(
    id=reminder.id,
    rentId=reminder.rent_id,
    tenantId=reminder.tenant_id,
    tenantName=reminder.tenant.name if reminder.tenant else None,
    tenantPhone=reminder.tenant_phone,
    flatName=reminder.flat_name,
    amount=reminder.amount,
    reminderDay=reminder.reminder_day,
    nextReminderDate=reminder.next_reminder_date.isoformat(),
    messageTemplate=reminder.message_template,
  )


@router.get("/due", response_model=list[DueReminder])
async def list_due_reminders(
  request: Request,
  on: Optional[date] = Query(None, alias="date"),
  settings: Settings = Depends(get_settings),
):
  on_date = on or local_today(settings.worker_timezone)
  reminders = await due_reminders(get_client(request), settings, on_date)
  return [to_due_reminder(reminder) for reminder in reminders]


@router.post("", response_model=ReminderSchedule, status_code=status.HTTP_201_CREATED)
async def create_reminder(
  payload: ReminderCreate,
  request: Request,
  settings: Settings = Depends(get_settings),
):
  client = get_client(request)
  rows = await select_rows(
    client,
    settings,
    RENTS_TABLE,
    select="*,tenant:tenants(name,phone),flat:flats(name)",
    filters={"id": eq(payload.rentId)},
    limit=1,
  )
  if not rows:
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Rent not found.")
  rent = RentObligation.model_validate(rows[0])
  template = payload.messageTemplate.strip() if payload.messageTemplate else ""
  if not template:
    template = rent_reminder_message(
      rent.tenant.name if rent.tenant else None,
      rent.flat.name if rent.flat else None,
      rent.amount,
      rent.due_date,
    )
  today = local_today(settings.worker_timezone)
  created = await insert_row(
    client,
    settings,
    REMINDERS_TABLE,
    {
      "rent_id": rent.id,
      "tenant_id": rent.tenant_id,
      "next_reminder_date": current_period_reminder_date(today, payload.reminderDay).isoformat(),
      "reminder_day": payload.reminderDay,
      "is_active": True,
      "amount": rent.amount,
      "message_template": template,
    },
  )
  await update_rows(client, settings, RENTS_TABLE, filters={"id": eq(rent.id)}, body={"reminder_day": payload.reminderDay})
  return ReminderSchedule.model_validate(created)


@router.post("/{reminder_id}/deactivate", response_model=ReminderSchedule)
async def deactivate_reminder(
  reminder_id: str,
  request: Request,
  settings: Settings = Depends(get_settings),
):
  updated = await update_rows(
    get_client(request),
    settings,
    REMINDERS_TABLE,
    filters={"id": eq(reminder_id)},
    body={"is_active": False},
  )
  if not updated:
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reminder not found.")
  return ReminderSchedule.model_validate(updated[0])
