from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Request

from ..core.settings import Settings, get_settings
from ..core.supabase import eq, select_rows
from ..models.notification import NotificationOut, NotificationRecord
from ..services.message_templates import whatsapp_link
from ..services.reminder_service import NOTIFICATIONS_TABLE

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


def get_client(request: Request) -> httpx.AsyncClient:
  return request.app.state.http_client


def to_notification_out(record: NotificationRecord) -> NotificationOut:
  return NotificationOut(
    id=record.id,
    tenantId=record.tenant_id,
    rentId=record.rent_id,
    recipientPhone=record.recipient_phone,
    message=record.message,
    sentAt=record.sent_at.isoformat() if record.sent_at else None,
    includedPaymentLink=record.included_payment_link,
    whatsappLink=whatsapp_link(record.recipient_phone, record.message),
  )


@router.get("", response_model=list[NotificationOut])
async def list_notifications(
  request: Request,
  tenantId: Optional[str] = None,
  limit: int = 50,
  settings: Settings = Depends(get_settings),
):
  filters = {"tenant_id": eq(tenantId)} if tenantId else None
  rows = await select_rows(
    get_client(request),
    settings,
    NOTIFICATIONS_TABLE,
    filters=filters,
    order="sent_at.desc.nullslast",
    limit=max(1, min(100, limit)),
  )
  return [to_notification_out(NotificationRecord.model_validate(row)) for row in rows]
