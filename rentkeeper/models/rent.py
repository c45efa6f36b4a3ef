from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator

PaymentFrequency = Literal["monthly", "one_time"]


class TenantRef(BaseModel):
  model_config = ConfigDict(extra="ignore")

  name: Optional[str] = None
  phone: Optional[str] = None


class FlatRef(BaseModel):
  model_config = ConfigDict(extra="ignore")

  name: Optional[str] = None


class RentObligation(BaseModel):
  model_config = ConfigDict(extra="ignore")

  id: str
  tenant_id: str
  flat_id: Optional[str] = None
  amount: float
  due_date: date
  is_paid: bool = False
  paid_on: Optional[date] = None
  whatsapp_sent: bool = False
  custom_message: Optional[str] = None
  payment_frequency: Optional[PaymentFrequency] = None
  reminder_day: Optional[int] = None
  last_reminder_date: Optional[date] = None
  tenant: Optional[TenantRef] = None
  flat: Optional[FlatRef] = None

  @field_validator("is_paid", "whatsapp_sent", mode="before")
  @classmethod
  def null_is_false(cls, value):
    return bool(value) if value is not None else False
