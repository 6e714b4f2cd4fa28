import os
from typing import Optional

import uvicorn
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from app.config import settings
from app.dependencies import get_notifier
from app.logging_config import get_logger, setup_logging
from app.routers import line_webhook, monitor
from app.services.monitor_service import create_monitor_scheduler

setup_logging(settings.log_level)

app = FastAPI(
    title="toyutoyu-suporter",
    description="URL monitoring and LINE support bot for toyutoyu",
    version="1.0.0",
)

app.include_router(line_webhook.router)
app.include_router(monitor.router)

logger = get_logger("main")
_scheduler: Optional[AsyncIOScheduler] = None


def _is_monitor_enabled() -> bool:
    if os.environ.get("PYTEST_CURRENT_TEST"):
        return False
    return settings.monitor_enabled


@app.on_event("startup")
async def start_monitor_scheduler() -> None:
    global _scheduler
    targets = settings.target_url_list
    logger.info(
        "Starting",
        extra={"context": {"port": settings.port, "cron": settings.cron_schedule, "targets": targets}},
    )
    if not _is_monitor_enabled():
        return
    if _scheduler is None:
        _scheduler = create_monitor_scheduler(
            settings.cron_schedule,
            settings.cron_timezone,
            targets,
            settings.timeout_seconds,
            get_notifier(),
        )
        _scheduler.start()
        logger.info("Monitor scheduler started")


@app.on_event("shutdown")
async def stop_monitor_scheduler() -> None:
    global _scheduler
    if _scheduler is None:
        return
    _scheduler.shutdown(wait=False)
    _scheduler = None


@app.get("/healthz")
async def healthz():
    return {"ok": True}


@app.get("/", response_class=PlainTextResponse)
async def root():
    return "toyutoyu-suporter is running\n"


def run() -> None:
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
