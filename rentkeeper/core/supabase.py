from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

import httpx
from fastapi import HTTPException, status

from .settings import Settings


class StoreError(HTTPException):
  def __init__(self, detail: str, remote_status: Optional[int] = None):
    super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)
    self.remote_status = remote_status

  def __str__(self) -> str:
    return self.detail


def _render(value: Any) -> str:
  if isinstance(value, bool):
    return "true" if value else "false"
  if value is None:
    return "null"
  if isinstance(value, (date, datetime)):
    return value.isoformat()
  return str(value)


def eq(value: Any) -> str:
  return f"eq.{_render(value)}"


def lt(value: Any) -> str:
  return f"lt.{_render(value)}"


def gte(value: Any) -> str:
  return f"gte.{_render(value)}"


def build_rest_url(settings: Settings, table: str) -> str:
  if not settings.supabase_url:
    raise StoreError("Supabase is not configured.")
  base = str(settings.supabase_url).rstrip("/")
  return f"{base}/rest/v1/{table}"


def build_headers(settings: Settings, prefer: Optional[str] = None) -> Dict[str, str]:
  key = settings.supabase_service_key or ""
  headers = {
    "apikey": key,
    "Authorization": f"Bearer {key}",
    "Accept-Profile": settings.supabase_schema,
    "Content-Profile": settings.supabase_schema,
  }
  if prefer:
    headers["Prefer"] = prefer
  return headers


async def supabase_request(
  client: httpx.AsyncClient,
  settings: Settings,
  table: str,
  method: str = "GET",
  params: Optional[Dict[str, Any]] = None,
  body: Optional[Any] = None,
  prefer: Optional[str] = None,
) -> Tuple[int, Any]:
  url = build_rest_url(settings, table)
  response = await client.request(
    method,
    url,
    params=params,
    json=body,
    headers=build_headers(settings, prefer),
    timeout=settings.store_timeout_seconds,
  )
  if response.status_code >= 400:
    raise StoreError(
      f"Supabase error {response.status_code} on {table}: {response.text}",
      remote_status=response.status_code,
    )
  if response.status_code == status.HTTP_204_NO_CONTENT or not response.text:
    return response.status_code, None
  return response.status_code, response.json()


async def select_rows(
  client: httpx.AsyncClient,
  settings: Settings,
  table: str,
  select: str = "*",
  filters: Optional[Dict[str, str]] = None,
  order: Optional[str] = None,
  limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
  params: Dict[str, Any] = {"select": select, **(filters or {})}
  if order:
    params["order"] = order
  if limit is not None:
    params["limit"] = limit
  _, data = await supabase_request(client, settings, table, params=params)
  return data if isinstance(data, list) else []


async def insert_row(
  client: httpx.AsyncClient,
  settings: Settings,
  table: str,
  body: Dict[str, Any],
) -> Dict[str, Any]:
  _, data = await supabase_request(
    client, settings, table, method="POST", body=body, prefer="return=representation"
  )
  if isinstance(data, list):
    if not data:
      raise StoreError(f"Supabase returned no row for insert into {table}.")
    return data[0]
  return data or {}


async def update_rows(
  client: httpx.AsyncClient,
  settings: Settings,
  table: str,
  filters: Dict[str, str],
  body: Dict[str, Any],
) -> List[Dict[str, Any]]:
  if not filters:
    raise ValueError("update_rows requires at least one filter")
  _, data = await supabase_request(
    client, settings, table, method="PATCH", params=filters, body=body, prefer="return=representation"
  )
  return data if isinstance(data, list) else []


async def delete_rows(
  client: httpx.AsyncClient,
  settings: Settings,
  table: str,
  filters: Dict[str, str],
) -> List[Dict[str, Any]]:
  if not filters:
    raise ValueError("delete_rows requires at least one filter")
  _, data = await supabase_request(
    client, settings, table, method="DELETE", params=filters, prefer="return=representation"
  )
  return data if isinstance(data, list) else []
