import functools
from typing import List, Optional

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(value: Optional[str]) -> List[str]:
  if not value:
    return []
  return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
  model_config = SettingsConfigDict(env_file=".env", extra="ignore")

  port: int = Field(4000, alias="PORT")
  client_origin: str = Field("http://localhost:3000", alias="CLIENT_ORIGIN")
  log_level: str = Field("INFO", alias="LOG_LEVEL")

  supabase_url: Optional[AnyHttpUrl] = Field(None, alias="SUPABASE_URL")
  supabase_service_key: Optional[str] = Field(None, alias="SUPABASE_SERVICE_KEY")
  supabase_schema: str = Field("public", alias="SUPABASE_SCHEMA")
  store_timeout_seconds: float = Field(15, alias="STORE_TIMEOUT_SECONDS")

  worker_enabled: Optional[bool] = Field(None, alias="WORKER_ENABLED")
  worker_interval_seconds: int = Field(60 * 60, alias="WORKER_INTERVAL_SECONDS")
  worker_timezone: str = Field("UTC", alias="WORKER_TIMEZONE")
  default_reminder_day: int = Field(1, alias="DEFAULT_REMINDER_DAY")

  allowed_origins: List[str] = Field(default_factory=list)

  @field_validator("allowed_origins", mode="before")
  @classmethod
  def fill_origins(cls, value, info):
    if value:
      return value
    client_origin = info.data.get("client_origin") or "http://localhost:3000"
    return _split_csv(client_origin)

  @field_validator("worker_enabled", mode="before")
  @classmethod
  def normalize_bool(cls, value):
    if value is None:
      return None
    if isinstance(value, bool):
      return value
    normalized = str(value).strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
      return True
    if normalized in {"0", "false", "no", "off"}:
      return False
    return None

  @field_validator("worker_interval_seconds")
  @classmethod
  def positive_interval(cls, value: int) -> int:
    return max(1, int(value))

  @field_validator("default_reminder_day")
  @classmethod
  def validate_day(cls, value: int) -> int:
    return max(1, min(31, int(value)))

  @property
  def store_configured(self) -> bool:
    return bool(self.supabase_url and self.supabase_service_key)

  @property
  def worker_active(self) -> bool:
    if self.worker_enabled is None:
      return self.store_configured
    return self.worker_enabled


@functools.lru_cache
def get_settings() -> Settings:
  return Settings()  # type: ignore[arg-type]
