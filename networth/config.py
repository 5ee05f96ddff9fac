from pathlib import Path
from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

# Load .env from repo root for local development and scripts.
ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
load_dotenv(dotenv_path=ENV_PATH)

class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=True)
    db_path: str = Field(default="./data/app.db", alias="DB_PATH")
    local_tz: str = Field(default="Europe/London", alias="LOCAL_TZ")
    daily_cutover: str = Field(default="00:00", alias="DAILY_CUTOVER")
    http_timeout_seconds: float = Field(default=30.0, alias="HTTP_TIMEOUT_SECONDS")
    http_retry_attempts: int = Field(default=3, alias="HTTP_RETRY_ATTEMPTS")
    http_retry_backoff_seconds: float = Field(default=1.0, alias="HTTP_RETRY_BACKOFF_SECONDS")
    yf_enable: int = Field(default=1, alias="YF_ENABLE")
    yahoo_chart_enable: int = Field(default=1, alias="YAHOO_CHART_ENABLE")
    yahoo_chart_base_url: str = Field(
        default="https://query1.finance.yahoo.com/v8/finance/chart",
        alias="YAHOO_CHART_BASE_URL",
    )
    price_fetch_workers: int = Field(default=4, alias="PRICE_FETCH_WORKERS")
    price_fetch_timeout_seconds: float = Field(default=20.0, alias="PRICE_FETCH_TIMEOUT_SECONDS")
    request_time_budget_seconds: float = Field(default=60.0, alias="REQUEST_TIME_BUDGET_SECONDS")
    axis_fill_calendar: int = Field(default=1, alias="AXIS_FILL_CALENDAR")

settings = Settings()
