from functools import lru_cache
from typing import List

from pydantic import AnyHttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from emicalc.models.constants import DEFAULT_BASE_CURRENCY

ALLOWED_RATE_PROVIDERS = {"static", "exchangerate-api"}


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG,
    BASE_CURRENCY, EXCHANGE_RATE_PROVIDER, EXCHANGE_API_KEY).
    """

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore"
    )

    # Basic app metadata
    app_name: str = "Loan EMI Calculator"
    debug: bool = False
    version: str = "0.1.0"

    # Exchange rates
    base_currency: str = DEFAULT_BASE_CURRENCY
    # Allowed: 'static' (built-in table), 'exchangerate-api' (live HTTP provider)
    exchange_rate_provider: str = "static"
    exchange_api_base_url: AnyHttpUrl = "https://v6.exchangerate-api.com/v6"
    exchange_api_key: str = ""
    http_timeout_seconds: float = 5.0
    http_retries: int = 2
    http_backoff_seconds: float = 0.5
    refresh_on_startup: bool = True

    # Unknown currency codes convert at parity unless strict
    strict_currency_codes: bool = False

    # Pagination choices offered to the UI
    schedule_page_sizes: List[int] = [12, 24, 36, 60]
    rates_page_sizes: List[int] = [10, 25, 50, 100]

    @field_validator("base_currency")
    @classmethod
    def normalize_base_currency(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("base_currency cannot be empty")
        return v

    @field_validator("exchange_rate_provider")
    @classmethod
    def valid_provider(cls, v: str) -> str:
        if v not in ALLOWED_RATE_PROVIDERS:
            raise ValueError(
                f"Unsupported exchange_rate_provider '{v}'. Allowed: {sorted(ALLOWED_RATE_PROVIDERS)}"
            )
        return v

    @field_validator("http_retries")
    @classmethod
    def non_negative_retries(cls, v: int) -> int:
        if v < 0:
            raise ValueError("http_retries must be >= 0")
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
