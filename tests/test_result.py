from app.services.result import Result


class TestResultSuccess:
    def test_success_creates_ok_result(self):
        result = Result.success("test value")
        assert result.ok is True
        assert result.value == "test value"
        assert result.error is None


class TestResultFailure:
    def test_failure_creates_not_ok_result(self):
        result = Result.failure("AI unavailable", "ai_error")
        assert result.ok is False
        assert result.error == "AI unavailable"
        assert result.error_code == "ai_error"
        assert result.value is None

    def test_failure_default_code(self):
        result = Result.failure("Error message")
        assert result.error_code == "unknown"

    def test_from_exception_uses_message(self):
        result = Result.from_exception(RuntimeError("boom"), "ai_error")
        assert result.ok is False
        assert result.error == "boom"
        assert result.error_code == "ai_error"

    def test_from_exception_falls_back_to_class_name(self):
        result = Result.from_exception(TimeoutError())
        assert result.error == "TimeoutError"

