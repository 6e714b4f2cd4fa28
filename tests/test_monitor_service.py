import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock, patch

import pytest
from apscheduler.triggers.cron import CronTrigger

from app.services.checker_service import CheckSummary, ProbeResult
from app.services.monitor_service import (
    MONITOR_JOB_ID,
    build_failure_report,
    build_monitor_crash_report,
    create_monitor_scheduler,
    format_failures,
    now_string,
    run_check_once,
    run_monitor_tick,
)

URLS = ["https://example.com/ok", "https://example.com/down"]
DOWN = ProbeResult(url="https://example.com/down", ok=False, error="connection refused")
ERROR = ProbeResult(url="https://example.com/error", ok=False, status=503, status_text="Service Unavailable")
OK = ProbeResult(url="https://example.com/ok", ok=True, status=200, status_text="OK")


@pytest.fixture
def notifier():
    mock = Mock()
    mock.notify = AsyncMock(return_value=True)
    return mock


class TestFormatting:
    def test_format_failures(self):
        text = format_failures([DOWN, ERROR])
        assert text == (
            "- https://example.com/down ERROR: connection refused\n"
            "- https://example.com/error HTTP 503 Service Unavailable"
        )

    def test_format_failure_without_status_text(self):
        failure = ProbeResult(url="https://example.com/x", ok=False, status=500)
        assert format_failures([failure]) == "- https://example.com/x HTTP 500"

    def test_now_string_uses_timezone(self):
        now = datetime(2024, 1, 1, 0, 0, 0, tzinfo=timezone.utc)
        assert now_string("Asia/Tokyo", now=now) == "2024/01/01 09:00:00"

    def test_failure_report_layout(self):
        lines = build_failure_report([DOWN]).split("\n")
        assert lines[0] == "[toyutoyu-suporter] 疎通確認エラー"
        assert lines[1].startswith("時刻(JST): ")
        assert lines[2] == "対象:"
        assert lines[3] == "- https://example.com/down ERROR: connection refused"

    def test_report_label_follows_timezone(self):
        lines = build_failure_report([DOWN], "UTC").split("\n")
        assert lines[1].startswith("時刻(UTC): ")

    def test_crash_report_label_defaults_to_jst(self):
        lines = build_monitor_crash_report(RuntimeError("boom")).split("\n")
        assert lines[1].startswith("時刻(JST): ")
        assert lines[2] == "ERROR: boom"


class TestRunCheckOnce:
    @patch("app.services.monitor_service.check_all")
    def test_no_failures_no_notification(self, mock_check_all, notifier):
        mock_check_all.return_value = CheckSummary(results=[OK], failures=[])

        summary = asyncio.run(run_check_once(URLS, 1.0, notifier))

        assert summary.results == [OK]
        notifier.notify.assert_not_awaited()

    @patch("app.services.monitor_service.check_all")
    def test_failures_are_notified(self, mock_check_all, notifier):
        mock_check_all.return_value = CheckSummary(results=[OK, DOWN], failures=[DOWN])

        asyncio.run(run_check_once(URLS, 1.0, notifier))

        notifier.notify.assert_awaited_once()
        text = notifier.notify.await_args[0][0]
        assert "疎通確認エラー" in text
        assert "https://example.com/down ERROR: connection refused" in text
        assert "https://example.com/ok" not in text

    @patch("app.services.monitor_service.check_all")
    def test_passes_urls_and_timeout(self, mock_check_all, notifier):
        mock_check_all.return_value = CheckSummary()

        asyncio.run(run_check_once(URLS, 2.5, notifier))

        mock_check_all.assert_awaited_once_with(URLS, 2.5)


class TestRunMonitorTick:
    @patch("app.services.monitor_service.check_all")
    def test_crash_becomes_notification(self, mock_check_all, notifier):
        mock_check_all.side_effect = RuntimeError("unexpected bug")

        result = asyncio.run(run_monitor_tick(URLS, 1.0, notifier))

        assert result is None
        text = notifier.notify.await_args[0][0]
        assert "監視処理自体が例外" in text
        assert "ERROR: unexpected bug" in text

    @patch("app.services.monitor_service.check_all")
    def test_successful_tick_returns_summary(self, mock_check_all, notifier):
        mock_check_all.return_value = CheckSummary(results=[OK], failures=[])

        result = asyncio.run(run_monitor_tick(URLS, 1.0, notifier))

        assert result.results == [OK]
        notifier.notify.assert_not_awaited()


class TestCreateMonitorScheduler:
    def test_registers_cron_job(self, notifier):
        scheduler = create_monitor_scheduler("0 * * * *", "Asia/Tokyo", URLS, 10.0, notifier)

        job = scheduler.get_job(MONITOR_JOB_ID)
        assert job is not None
        assert isinstance(job.trigger, CronTrigger)
        assert job.max_instances > 1
        assert job.args[0] == URLS

    def test_invalid_cron_expression_raises(self, notifier):
        with pytest.raises(ValueError):
            create_monitor_scheduler("not a cron", "Asia/Tokyo", URLS, 10.0, notifier)
