"""Scheduled reachability monitoring and failure reporting."""

from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from app.logging_config import get_logger
from app.services.checker_service import CheckSummary, ProbeResult, check_all
from app.services.notifier import Notifier

logger = get_logger("monitor_service")

REPORT_PREFIX = "[toyutoyu-suporter]"
DEFAULT_TIMEZONE = "Asia/Tokyo"
MONITOR_JOB_ID = "url_monitor"


def now_string(tz_name: str = DEFAULT_TIMEZONE, now: Optional[datetime] = None) -> str:
    current = now or datetime.now(ZoneInfo(tz_name))
    return current.astimezone(ZoneInfo(tz_name)).strftime("%Y/%m/%d %H:%M:%S")


def time_label(tz_name: str = DEFAULT_TIMEZONE) -> str:
    return "JST" if tz_name == DEFAULT_TIMEZONE else tz_name


def format_failures(failures: list[ProbeResult]) -> str:
    lines = []
    for failure in failures:
        if failure.error:
            lines.append(f"- {failure.url} ERROR: {failure.error}")
        else:
            lines.append(f"- {failure.url} HTTP {failure.status} {failure.status_text or ''}".strip())
    return "\n".join(lines)


def build_failure_report(failures: list[ProbeResult], tz_name: str = DEFAULT_TIMEZONE) -> str:
    return "\n".join(
        [
            f"{REPORT_PREFIX} 疎通確認エラー",
            f"時刻({time_label(tz_name)}): {now_string(tz_name)}",
            "対象:",
            format_failures(failures),
        ]
    )


def build_monitor_crash_report(error: BaseException, tz_name: str = DEFAULT_TIMEZONE) -> str:
    return "\n".join(
        [
            f"{REPORT_PREFIX} 監視処理自体が例外",
            f"時刻({time_label(tz_name)}): {now_string(tz_name)}",
            f"ERROR: {str(error) or error.__class__.__name__}",
        ]
    )


async def run_check_once(
    urls: list[str],
    timeout_seconds: float,
    notifier: Notifier,
    tz_name: str = DEFAULT_TIMEZONE,
) -> CheckSummary:
    """Probe every URL once and notify if any probe failed."""
    summary = await check_all(urls, timeout_seconds)
    logger.info(
        "Monitor pass finished",
        extra={"context": {"targets": len(summary.results), "failures": len(summary.failures)}},
    )

    if summary.failures:
        await notifier.notify(build_failure_report(summary.failures, tz_name))
    return summary


async def run_monitor_tick(
    urls: list[str],
    timeout_seconds: float,
    notifier: Notifier,
    tz_name: str = DEFAULT_TIMEZONE,
) -> Optional[CheckSummary]:
    """Scheduler entry point. Never raises: a crash in the pass becomes a notification."""
    try:
        return await run_check_once(urls, timeout_seconds, notifier, tz_name)
    except Exception as e:
        logger.error("Monitor pass crashed", extra={"context": {"error": str(e)}}, exc_info=True)
        await notifier.notify(build_monitor_crash_report(e, tz_name))
        return None


def create_monitor_scheduler(
    cron_schedule: str,
    tz_name: str,
    urls: list[str],
    timeout_seconds: float,
    notifier: Notifier,
) -> AsyncIOScheduler:
    """Build (but do not start) the scheduler that runs the monitor on a cron expression."""
    scheduler = AsyncIOScheduler(timezone=tz_name)
    scheduler.add_job(
        run_monitor_tick,
        trigger=CronTrigger.from_crontab(cron_schedule, timezone=tz_name),
        args=[urls, timeout_seconds, notifier, tz_name],
        id=MONITOR_JOB_ID,
        name="URL reachability monitor",
        replace_existing=True,
        # Ticks share no state, so a slow pass may overlap the next one.
        max_instances=3,
        coalesce=False,
    )
    return scheduler
