import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import notifications, reminders, worker
from .core.logging_utils import configure_logging
from .core.settings import get_settings
from .cron.scheduler import create_scheduler


def create_app() -> FastAPI:
  settings = get_settings()
  configure_logging(settings.log_level)
  app = FastAPI(title="Rentkeeper API", version="1.0.0")

  app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
  )

  http_client = httpx.AsyncClient(timeout=settings.store_timeout_seconds)
  app.state.http_client = http_client
  app.state.scheduler = None

  @app.on_event("startup")
  async def startup_event():
    scheduler = create_scheduler(settings, http_client)
    if scheduler:
      scheduler.start()
      app.state.scheduler = scheduler

  @app.on_event("shutdown")
  async def shutdown_event():
    scheduler = getattr(app.state, "scheduler", None)
    if scheduler:
      scheduler.shutdown(wait=False)
    await http_client.aclose()

  app.include_router(worker.router)
  app.include_router(reminders.router)
  app.include_router(notifications.router)

  @app.get("/api/health")
  async def health():
    return {"status": "ok", "worker": app.state.scheduler is not None}

  return app


app = create_app()


if __name__ == "__main__":  # pragma: no cover
  import uvicorn

  settings = get_settings()
  uvicorn.run("rentkeeper.main:app", host="0.0.0.0", port=settings.port, reload=True)
