from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class NotificationRecord(BaseModel):
  model_config = ConfigDict(extra="ignore")

  id: Optional[str] = None
  tenant_id: Optional[str] = None
  rent_id: Optional[str] = None
  flat_id: Optional[str] = None
  message: str
  recipient_phone: str
  sent_at: Optional[datetime] = None
  included_payment_link: bool = False
  status: Optional[str] = None

  def to_insert(self) -> dict:
    payload = self.model_dump(mode="json", exclude_none=True)
    payload.pop("id", None)
    return payload


class NotificationOut(BaseModel):
  id: Optional[str] = None
  tenantId: Optional[str] = None
  rentId: Optional[str] = None
  recipientPhone: str
  message: str
  sentAt: Optional[str] = None
  includedPaymentLink: bool = False
  whatsappLink: str
