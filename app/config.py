from pydantic_settings import BaseSettings

DEFAULT_TARGET_URLS = ["https://toyutoyu.com/app/", "https://toyutoyu.com/"]


def parse_target_urls(value: str | None) -> list[str]:
    raw = (value or "").strip()
    if not raw:
        return list(DEFAULT_TARGET_URLS)
    return [url.strip() for url in raw.split(",") if url.strip()]


class Settings(BaseSettings):
    port: int = 8080
    log_level: str = "INFO"

    # Monitoring
    target_urls: str = ""
    timeout_ms: int = 10000
    cron_schedule: str = "0 * * * *"
    cron_timezone: str = "Asia/Tokyo"
    monitor_enabled: bool = True
    monitor_admin_token: str = ""

    # LINE
    line_channel_secret: str = ""
    line_channel_access_token: str = ""
    line_to: str = ""
    line_broadcast: bool = False

    # toyutoyu backend
    toyutoyu_base_url: str = "https://toyutoyu.com"
    toyutoyu_webhook_secret: str = ""
    backend_timeout_ms: int = 10000

    # Sessions
    login_flow_ttl_seconds: int = 10 * 60
    logged_in_ttl_seconds: int = 60 * 60

    # AI
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"

    faq_image_base_url: str = "https://toyutoyu.com/wp-content/uploads/line-faq"

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def target_url_list(self) -> list[str]:
        return parse_target_urls(self.target_urls)

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    @property
    def backend_timeout_seconds(self) -> float:
        return self.backend_timeout_ms / 1000


settings = Settings()
