from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings

from portfolio_dashboard.contracts.snapshots import Period

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]


class Settings(BaseSettings):
    app_name: str = "Portfolio Dashboard Gateway"
    contract_version: str = "v1"
    portfolio_api_base_url: str = Field(default="http://127.0.0.1:8000")
    portfolio_api_timeout_seconds: float | None = Field(default=None)
    display_timezone: str = Field(default="America/New_York")
    default_period: Period = Field(default="5D")
    discard_stale_responses: bool = Field(default=True)
    max_sessions: int = Field(default=1000)
    log_level: LogLevel = Field(default="INFO")


settings = Settings()
