import calendar
from datetime import date, datetime
from zoneinfo import ZoneInfo


def days_in_month(year: int, month: int) -> int:
  return calendar.monthrange(year, month)[1]


def clamp_day(year: int, month: int, day: int) -> date:
  """Return ``day`` of the given month, or the month's last day when it is shorter.

  Reminder days above the month length are clamped, never rolled over into
  the following month: a reminder day of 31 lands on 28/29 February.
  """
  if day < 1:
    raise ValueError(f"day must be >= 1, got {day}")
  return date(year, month, min(day, days_in_month(year, month)))


def add_months_safe(dt: date, months: int) -> date:
  month = dt.month - 1 + months
  year = dt.year + month // 12
  month = month % 12 + 1
  return clamp_day(year, month, dt.day)


def first_of_month(dt: date) -> date:
  return dt.replace(day=1)


def first_of_next_month(dt: date) -> date:
  return add_months_safe(first_of_month(dt), 1)


def next_reminder_date(today: date, reminder_day: int) -> date:
  target = add_months_safe(first_of_month(today), 1)
  return clamp_day(target.year, target.month, reminder_day)


def current_period_reminder_date(today: date, reminder_day: int) -> date:
  reminder = clamp_day(today.year, today.month, reminder_day)
  if reminder <= today:
    following = first_of_next_month(today)
    reminder = clamp_day(following.year, following.month, reminder_day)
  return reminder


def local_now(timezone_name: str = "UTC") -> datetime:
  return datetime.now(ZoneInfo(timezone_name))


def local_today(timezone_name: str = "UTC") -> date:
  return local_now(timezone_name).date()
