import json
from pathlib import Path
from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

# Load .env from repo root for local development and scripts.
ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
load_dotenv(dotenv_path=ENV_PATH)

DEFAULT_FX_RATES = {"GBP": 1.0, "EUR": 0.85, "USD": 0.79}

class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=True)
    base_currency: str = Field(default="GBP", alias="BASE_CURRENCY")
    fx_rates: dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_FX_RATES), alias="FX_RATES")
    fx_rates_path: str | None = Field(default=None, alias="FX_RATES_PATH")
    iht_threshold: float = Field(default=2_000_000.0, alias="IHT_THRESHOLD")
    iht_effective_rate: float = Field(default=0.20, alias="IHT_EFFECTIVE_RATE")
    minority_discount_factor: float = Field(default=0.70, alias="MINORITY_DISCOUNT_FACTOR")
    event_days_in_month: int = Field(default=30, alias="EVENT_DAYS_IN_MONTH")
    event_avg_days_per_month: float = Field(default=2.0, alias="EVENT_AVG_DAYS_PER_MONTH")
    cash_buffer_warning: float = Field(default=50_000.0, alias="CASH_BUFFER_WARNING")
    ltv_warning_pct: float = Field(default=60.0, alias="LTV_WARNING_PCT")
    ltv_critical_pct: float = Field(default=75.0, alias="LTV_CRITICAL_PCT")
    local_tz: str = Field(default="Europe/London", alias="LOCAL_TZ")
    db_path: str = Field(default="./data/estate.db", alias="DB_PATH")
    aggregate_workers: int = Field(default=1, alias="AGGREGATE_WORKERS")
    accrual_lock_ttl_seconds: int = Field(default=600, alias="ACCRUAL_LOCK_TTL_SECONDS")

    def rate_table(self) -> dict[str, float]:
        """FX factors into the base currency; a file at FX_RATES_PATH wins over FX_RATES."""
        if self.fx_rates_path:
            path = Path(self.fx_rates_path)
            with path.open() as fh:
                return {str(k).upper(): float(v) for k, v in json.load(fh).items()}
        return {str(k).upper(): float(v) for k, v in self.fx_rates.items()}

settings = Settings()

def reload_settings() -> Settings:
    global settings
    load_dotenv(dotenv_path=ENV_PATH, override=True)
    settings = Settings()
    return settings
