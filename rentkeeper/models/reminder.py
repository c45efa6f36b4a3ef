from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .rent import FlatRef, TenantRef


class RentFlatRef(BaseModel):
  model_config = ConfigDict(extra="ignore")

  flat: Optional[FlatRef] = None


class ReminderSchedule(BaseModel):
  model_config = ConfigDict(extra="ignore")

  id: str
  rent_id: str
  tenant_id: str
  next_reminder_date: date
  reminder_day: int = Field(ge=1, le=31)
  is_active: bool = True
  amount: float
  message_template: str
  tenant: Optional[TenantRef] = None
  rent: Optional[RentFlatRef] = None

  @property
  def tenant_phone(self) -> Optional[str]:
    if not self.tenant or not self.tenant.phone:
      return None
    return self.tenant.phone.strip() or None

  @property
  def flat_name(self) -> Optional[str]:
    if self.rent and self.rent.flat:
      return self.rent.flat.name
    return None


class ReminderCreate(BaseModel):
  rentId: str
  reminderDay: int = Field(ge=1, le=31)
  messageTemplate: Optional[str] = None


class DueReminder(BaseModel):
  id: str
  rentId: str
  tenantId: str
  tenantName: Optional[str] = None
  tenantPhone: Optional[str] = None
  flatName: Optional[str] = None
  amount: float
  reminderDay: int
  nextReminderDate: str
  messageTemplate: str
