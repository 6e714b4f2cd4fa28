"""Reachability probes for the monitored URLs."""

import asyncio
from dataclasses import asdict, dataclass, field
from typing import Optional

import httpx

from app.logging_config import get_logger

logger = get_logger("checker_service")

PROBE_HEADERS = {
    "user-agent": "toyutoyu-suporter/1.0 (+https://toyutoyu.com)",
    "accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}

ABORTED_STATUS_TEXT = "aborted"


@dataclass
class ProbeResult:
    url: str
    ok: bool
    status: Optional[int] = None
    status_text: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CheckSummary:
    results: list[ProbeResult] = field(default_factory=list)
    failures: list[ProbeResult] = field(default_factory=list)


def is_ok_status(status_code: int) -> bool:
    # 404 is expected on some monitored paths and does not mean the site is down.
    return 200 <= status_code < 300 or status_code == 404


def _error_message(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


async def _probe(client: httpx.AsyncClient, url: str, timeout_seconds: float) -> ProbeResult:
    try:
        response = await asyncio.wait_for(
            client.get(url, headers=PROBE_HEADERS, follow_redirects=True),
            timeout=timeout_seconds,
        )
    except (asyncio.TimeoutError, httpx.TimeoutException):
        # Our own deadline fired: stop waiting, but do not report the site as down.
        logger.info(f"Probe aborted by timeout: {url}")
        return ProbeResult(url=url, ok=True, status=None, status_text=ABORTED_STATUS_TEXT)
    except Exception as e:
        logger.warning(f"Probe failed: {url}: {e!r}")
        return ProbeResult(url=url, ok=False, error=_error_message(e))

    return ProbeResult(
        url=url,
        ok=is_ok_status(response.status_code),
        status=response.status_code,
        status_text=response.reason_phrase,
    )


async def check_url(
    url: str,
    timeout_seconds: float,
    client: Optional[httpx.AsyncClient] = None,
) -> ProbeResult:
    """Probe a single URL. Passing a client lets several probes share a connection pool."""
    if client is not None:
        return await _probe(client, url, timeout_seconds)

    async with httpx.AsyncClient(timeout=timeout_seconds) as own_client:
        return await _probe(own_client, url, timeout_seconds)


async def check_all(
    urls: list[str],
    timeout_seconds: float,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> CheckSummary:
    """Probe all URLs concurrently. Results keep the input order."""
    async with httpx.AsyncClient(timeout=timeout_seconds, transport=transport) as client:
        results = await asyncio.gather(*(check_url(url, timeout_seconds, client=client) for url in urls))

    results = list(results)
    failures = [result for result in results if not result.ok]
    return CheckSummary(results=results, failures=failures)
