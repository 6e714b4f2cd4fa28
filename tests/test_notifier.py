import asyncio
from unittest.mock import AsyncMock, patch

from app.services.line_service import LineApiError
from app.services.notifier import Notifier


class TestNotifier:
    def test_broadcast(self, line):
        notifier = Notifier(line, to="U123", broadcast=True)

        delivered = asyncio.run(notifier.notify("site down"))

        assert delivered is True
        assert line.calls == [("broadcast", {"messages": [{"type": "text", "text": "site down"}]})]

    def test_push_to_recipient(self, line):
        notifier = Notifier(line, to="U123")

        delivered = asyncio.run(notifier.notify("site down"))

        assert delivered is True
        action, payload = line.calls[0]
        assert action == "push"
        assert payload["to"] == "U123"

    def test_without_token_only_logs(self, line):
        line.channel_access_token = ""
        notifier = Notifier(line, to="U123", broadcast=True)

        with patch("app.services.notifier.logger") as mock_logger:
            delivered = asyncio.run(notifier.notify("site down"))

        assert delivered is False
        assert line.calls == []
        mock_logger.warning.assert_any_call("Notification", extra={"context": {"text": "site down"}})

    def test_without_line_client(self):
        assert asyncio.run(Notifier(None).notify("site down")) is False

    def test_no_recipient_configured(self, line):
        notifier = Notifier(line)

        delivered = asyncio.run(notifier.notify("site down"))

        assert delivered is False
        assert line.calls == []

    def test_delivery_error_is_contained(self, line):
        line.push_text = AsyncMock(side_effect=LineApiError("push", 500, "Internal Server Error"))
        notifier = Notifier(line, to="U123")

        assert asyncio.run(notifier.notify("site down")) is False

    def test_unexpected_error_is_contained(self, line):
        line.broadcast_text = AsyncMock(side_effect=RuntimeError("network"))
        notifier = Notifier(line, broadcast=True)

        assert asyncio.run(notifier.notify("site down")) is False
