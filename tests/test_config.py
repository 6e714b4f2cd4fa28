from app.config import DEFAULT_TARGET_URLS, Settings, parse_target_urls


class TestParseTargetUrls:
    def test_empty_uses_defaults(self):
        assert parse_target_urls("") == DEFAULT_TARGET_URLS
        assert parse_target_urls(None) == DEFAULT_TARGET_URLS

    def test_splits_and_trims(self):
        assert parse_target_urls(" https://a.example/ , ,https://b.example/ ") == [
            "https://a.example/",
            "https://b.example/",
        ]


class TestSettings:
    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("TIMEOUT_MS", "2500")
        monkeypatch.setenv("TARGET_URLS", "https://a.example/")
        monkeypatch.setenv("LINE_BROADCAST", "true")

        settings = Settings(_env_file=None)

        assert settings.timeout_seconds == 2.5
        assert settings.target_url_list == ["https://a.example/"]
        assert settings.line_broadcast is True

    def test_defaults(self, monkeypatch):
        for name in ("TIMEOUT_MS", "CRON_SCHEDULE", "LOGIN_FLOW_TTL_SECONDS", "OPENAI_MODEL"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.cron_schedule == "0 * * * *"
        assert settings.timeout_seconds == 10.0
        assert settings.login_flow_ttl_seconds == 600
        assert settings.openai_model == "gpt-4o-mini"
