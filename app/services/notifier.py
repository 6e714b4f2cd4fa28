"""Notification fan-out: always to the log, optionally to LINE."""

from typing import Optional

from app.logging_config import get_logger
from app.services.line_service import LineApiError, LineMessagingClient

logger = get_logger("notifier")


class Notifier:
    def __init__(
        self,
        line: Optional[LineMessagingClient] = None,
        *,
        to: Optional[str] = None,
        broadcast: bool = False,
    ):
        self.line = line
        self.to = to
        self.broadcast = broadcast

    @property
    def line_enabled(self) -> bool:
        return self.line is not None and self.line.is_configured

    async def notify(self, text: str) -> bool:
        """Send text to the log sink and LINE. Returns True if LINE delivery succeeded.

        Delivery failures are logged, never raised.
        """
        logger.warning("Notification", extra={"context": {"text": text}})

        if not self.line_enabled:
            return False

        try:
            if self.broadcast:
                await self.line.broadcast_text(text)
                return True
            if self.to:
                await self.line.push_text(self.to, text)
                return True
        except LineApiError as e:
            logger.error(f"Failed to deliver notification: {e}")
            return False
        except Exception as e:
            logger.error(f"Failed to deliver notification: {e!r}")
            return False

        logger.warning("LINE notification skipped: neither LINE_BROADCAST nor LINE_TO configured")
        return False
