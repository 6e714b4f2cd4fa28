"""Admin endpoint to run one monitoring pass on demand."""

from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status

from app.config import settings
from app.dependencies import get_notifier
from app.schemas.monitor import MonitorRunResponse, ProbeResultSchema
from app.services.monitor_service import run_check_once
from app.services.notifier import Notifier

router = APIRouter()


def _require_admin_token(provided: Optional[str]) -> None:
    expected = settings.monitor_admin_token
    if not expected:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="MONITOR_ADMIN_TOKEN not configured",
        )
    if not provided or provided != expected:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid admin token")


@router.post("/monitor/run", response_model=MonitorRunResponse)
async def monitor_run(
    x_admin_token: Optional[str] = Header(default=None, alias="X-Admin-Token"),
    notifier: Notifier = Depends(get_notifier),
):
    _require_admin_token(x_admin_token)
    summary = await run_check_once(
        settings.target_url_list,
        settings.timeout_seconds,
        notifier,
        settings.cron_timezone,
    )
    return MonitorRunResponse(
        ok=not summary.failures,
        checked=len(summary.results),
        failures=len(summary.failures),
        results=[ProbeResultSchema(**result.to_dict()) for result in summary.results],
    )
