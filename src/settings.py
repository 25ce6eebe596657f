"""Settings for the application."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings for the application."""

    model_config = SettingsConfigDict(env_prefix="NOTICE_BOT_", env_file=".env", extra="ignore")

    api_name: str = Field("notice_bot", description="The name of the API")
    api_version: str = Field("0.1.0", description="The version of the API")

    telegram_token: str = Field(..., description="Telegram bot token.")

    notice_feed_url: str = Field(
        "https://ajou-notice.asitis.workers.dev",
        description="Base URL of the upstream notice worker",
    )
    notice_feed_timeout: float = Field(10.0, description="Timeout for notice feed requests in seconds")

    subscriptions_db_path: str = Field("storage/subscriptions.db", description="SQLite file with subscriptions")

    dispatch_interval_minutes: int = Field(10, description="Minutes between notice dispatch runs")
    scheduler_timezone: str = Field("Asia/Seoul", description="Timezone used by the scheduler")

    log_serialize: bool = Field(default=False, description="Emit JSON log lines instead of the develop format")
