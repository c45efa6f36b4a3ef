from datetime import date
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Request

from ..core.settings import Settings, get_settings
from ..cron.scheduler import run_worker_cycle
from ..models.worker import CycleReport

router = APIRouter(prefix="/api/worker", tags=["worker"])


def get_client(request: Request) -> httpx.AsyncClient:
  return request.app.state.http_client


@router.post("/run", response_model=CycleReport)
async def run_worker_now(
  request: Request,
  today: Optional[date] = None,
  settings: Settings = Depends(get_settings),
):
  return await run_worker_cycle(get_client(request), settings, today=today)
