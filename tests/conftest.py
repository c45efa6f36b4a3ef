import itertools
import os

os.environ.setdefault("WORKER_ENABLED", "false")

import httpx
import pytest

from rentkeeper.core.settings import Settings
from rentkeeper.core.supabase import StoreError


def _render(value):
  if isinstance(value, bool):
    return "true" if value else "false"
  if value is None:
    return "null"
  return str(value)


def _matches(row, column, expression):
  op, _, expected = expression.partition(".")
  actual = row.get(column)
  if op == "eq":
    return _render(actual) == expected
  if actual is None:
    return False
  if op == "lt":
    return str(actual) < expected
  if op == "gte":
    return str(actual) >= expected
  raise AssertionError(f"unsupported filter {expression}")


def _apply_filters(rows, filters):
  for key, expression in (filters or {}).items():
    if key == "and":
      for clause in expression.strip("()").split(","):
        column, _, sub_expression = clause.partition(".")
        rows = [row for row in rows if _matches(row, column, sub_expression)]
    else:
      rows = [row for row in rows if _matches(row, key, expression)]
  return rows


class FakeStore:
  """In-memory stand-in for the PostgREST verbs used by the services."""

  def __init__(self):
    self.tables = {"rents": [], "rent_reminders": [], "whatsapp_messages": [], "tenants": [], "flats": []}
    self.calls = []
    self.failures = []
    self._ids = itertools.count(1)

  def add(self, table, **row):
    row.setdefault("id", f"{table}-{next(self._ids)}")
    self.tables[table].append(row)
    return row

  def fail(self, op, table, when=lambda payload: True, message="boom"):
    self.failures.append((op, table, when, message))

  def _check(self, op, table, payload):
    for fail_op, fail_table, when, message in self.failures:
      if fail_op == op and fail_table == table and when(payload):
        raise StoreError(message, remote_status=500)

  def _find(self, table, row_id):
    return next((row for row in self.tables[table] if row["id"] == row_id), None)

  def _embed(self, row, select):
    result = dict(row)
    if "tenant:tenants" in select:
      tenant = self._find("tenants", row.get("tenant_id"))
      result["tenant"] = {"name": tenant.get("name"), "phone": tenant.get("phone")} if tenant else None
    if "rent:rents" in select:
      rent = self._find("rents", row.get("rent_id"))
      flat = self._find("flats", rent.get("flat_id")) if rent else None
      result["rent"] = {"flat": {"name": flat["name"]} if flat else None} if rent else None
    elif "flat:flats" in select:
      flat = self._find("flats", row.get("flat_id"))
      result["flat"] = {"name": flat["name"]} if flat else None
    return result

  async def select_rows(self, client, settings, table, select="*", filters=None, order=None, limit=None):
    self.calls.append(("select", table, filters))
    self._check("select", table, filters)
    rows = _apply_filters(self.tables[table], filters)
    if order:
      column, _, direction = order.partition(".")
      rows = sorted(rows, key=lambda row: str(row.get(column) or ""), reverse=direction.startswith("desc"))
    if limit is not None:
      rows = rows[:limit]
    return [self._embed(row, select) for row in rows]

  async def insert_row(self, client, settings, table, body):
    self.calls.append(("insert", table, body))
    self._check("insert", table, body)
    return dict(self.add(table, **dict(body)))

  async def update_rows(self, client, settings, table, filters, body):
    self.calls.append(("update", table, filters, body))
    self._check("update", table, {"filters": filters, "body": body})
    updated = []
    for row in _apply_filters(self.tables[table], filters):
      row.update(body)
      updated.append(dict(row))
    return updated

  def install(self, monkeypatch):
    from rentkeeper.api import notifications, reminders
    from rentkeeper.services import recurring_rent_service, reminder_service

    for module in (reminder_service, recurring_rent_service, reminders, notifications):
      for name in ("select_rows", "insert_row", "update_rows"):
        if hasattr(module, name):
          monkeypatch.setattr(module, name, getattr(self, name))
    return self


@pytest.fixture
def settings():
  return Settings(
    SUPABASE_URL="https://demo.supabase.co",
    SUPABASE_SERVICE_KEY="service-key",
    WORKER_ENABLED=False,
  )


@pytest.fixture
def store(monkeypatch):
  return FakeStore().install(monkeypatch)


@pytest.fixture
async def client():
  async with httpx.AsyncClient() as http_client:
    yield http_client
