"""Client for the toyutoyu WordPress REST endpoints (auth-check, user-points)."""

import json
from dataclasses import dataclass
from typing import Any, Optional, Union

import httpx

from app.logging_config import get_logger

logger = get_logger("backend_api")

AUTH_CHECK_PATH = "/wp-json/toyutoyu/v1/auth-check"
USER_POINTS_PATH = "/wp-json/toyutoyu/v1/user-points"


class BackendApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


@dataclass
class AuthCheckResult:
    success: bool
    user_id: Optional[str] = None
    message: Optional[str] = None


def _parse_json(text: str) -> Any:
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return None


def _raise_for_response(name: str, response: httpx.Response) -> Any:
    text = response.text or ""
    data = _parse_json(text)

    if response.status_code // 100 != 2:
        if isinstance(data, dict) and "message" in data:
            message = str(data["message"])
        else:
            message = text or f"{response.status_code} {response.reason_phrase}"
        raise BackendApiError(
            f"{name} failed: {response.status_code} {message}".strip(),
            status_code=response.status_code,
            body=data if data is not None else text,
        )

    if not isinstance(data, dict):
        raise BackendApiError(f"{name} returned non-json response", status_code=response.status_code, body=text)

    return data


class ToyutoyuApiClient:
    def __init__(
        self,
        base_url: str,
        *,
        webhook_secret: Optional[str] = None,
        timeout_seconds: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.webhook_secret = webhook_secret
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout_seconds, transport=self._transport)

    async def auth_check(self, email: str, password: str) -> AuthCheckResult:
        """Check credentials. Non-2xx (401 for bad credentials) raises BackendApiError."""
        headers = {"content-type": "application/json"}
        # The secret is optional depending on the WordPress side configuration.
        if self.webhook_secret:
            headers["x-toyutoyu-webhook-secret"] = self.webhook_secret

        async with self._client() as client:
            response = await client.post(AUTH_CHECK_PATH, headers=headers, json={"email": email, "password": password})

        data = _raise_for_response("auth-check", response)
        user_id = data.get("user_id")
        result = AuthCheckResult(
            success=data.get("success") is True,
            user_id=str(user_id) if user_id is not None else None,
            message=data.get("message"),
        )
        logger.info("auth-check completed", extra={"context": {"success": result.success}})
        return result

    async def get_user_points(self, email: str) -> Union[int, float, str]:
        async with self._client() as client:
            response = await client.get(USER_POINTS_PATH, params={"email": email}, headers={"accept": "application/json"})

        data = _raise_for_response("user-points", response)
        if "points" not in data or data["points"] is None:
            raise BackendApiError("user-points response has no points", status_code=response.status_code, body=data)
        return data["points"]
