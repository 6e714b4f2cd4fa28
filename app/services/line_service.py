from typing import Optional

import httpx

from app.logging_config import get_logger

logger = get_logger("line_service")

LINE_API_BASE_URL = "https://api.line.me/v2/bot/message"

# LINE accepts at most 5 message objects per reply/push/broadcast call.
MAX_MESSAGES_PER_CALL = 5
MAX_TEXT_LENGTH = 5000


class LineApiError(Exception):
    def __init__(self, action: str, status_code: int, reason: str = "", body: str = ""):
        self.action = action
        self.status_code = status_code
        self.reason = reason
        self.body = body
        super().__init__(f"LINE {action} failed: {status_code} {reason} {body}".strip())


def text_message(text: str) -> dict:
    if len(text) > MAX_TEXT_LENGTH:
        text = text[: MAX_TEXT_LENGTH - 1] + "…"
    return {"type": "text", "text": text}


def image_message(url: str) -> dict:
    return {"type": "image", "originalContentUrl": url, "previewImageUrl": url}


def build_messages(text: str, image_urls: Optional[list[str]] = None) -> list[dict]:
    """One text message followed by one image message per URL, in order."""
    messages = [text_message(text)]
    messages.extend(image_message(url) for url in image_urls or [])
    return messages


def chunk_messages(messages: list[dict], size: int = MAX_MESSAGES_PER_CALL) -> list[list[dict]]:
    if size < 1:
        raise ValueError("size must be positive")
    return [messages[i : i + size] for i in range(0, len(messages), size)]


class LineMessagingClient:
    """Client for the LINE Messaging API (reply, push, broadcast)."""

    def __init__(
        self,
        channel_access_token: str,
        *,
        base_url: str = LINE_API_BASE_URL,
        timeout_seconds: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.channel_access_token = channel_access_token
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.channel_access_token)

    async def _post(self, action: str, payload: dict) -> None:
        url = f"{self.base_url}/{action}"
        async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
            response = await client.post(
                url,
                headers={
                    "content-type": "application/json",
                    "authorization": f"Bearer {self.channel_access_token}",
                },
                json=payload,
            )

        if response.status_code // 100 != 2:
            logger.error(
                "LINE API error",
                extra={"context": {"action": action, "status": response.status_code, "body": response.text[:500]}},
            )
            raise LineApiError(action, response.status_code, response.reason_phrase, response.text)

    async def reply(self, reply_token: str, messages: list[dict]) -> None:
        await self._post("reply", {"replyToken": reply_token, "messages": messages})

    async def push(self, to: str, messages: list[dict]) -> None:
        await self._post("push", {"to": to, "messages": messages})

    async def broadcast(self, messages: list[dict]) -> None:
        await self._post("broadcast", {"messages": messages})

    async def reply_text(self, reply_token: str, text: str) -> None:
        await self.reply(reply_token, [text_message(text)])

    async def push_text(self, to: str, text: str) -> None:
        await self.push(to, [text_message(text)])

    async def broadcast_text(self, text: str) -> None:
        await self.broadcast([text_message(text)])


async def reply_with_images(
    line: LineMessagingClient,
    user_id: str,
    reply_token: str,
    text: str,
    image_urls: Optional[list[str]] = None,
) -> int:
    """Send text + images, first batch as the reply, the rest as pushes.

    A reply token is single-use, so every batch after the first has to go
    through push. Returns the number of API calls made.
    """
    batches = chunk_messages(build_messages(text, image_urls))
    await line.reply(reply_token, batches[0])
    for batch in batches[1:]:
        await line.push(user_id, batch)
    return len(batches)
