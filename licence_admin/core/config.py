from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., API_BASE_URL,
    HTTP_RETRIES, HTTP_BACKOFF_MS, DEBUG).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "Licence Applications Admin"
    debug: bool = False
    version: str = "0.1.0"

    # Backend API. No default: the embedding application must supply it.
    api_base_url: str = ""
    http_timeout_seconds: float = 10.0
    http_retries: int = 3
    http_backoff_ms: int = 1000

    # Reference backend seed size
    seed_applications: int = 25

    @field_validator("api_base_url")
    @classmethod
    def strip_base_url(cls, v: str) -> str:
        return v.strip()

    @field_validator("http_retries")
    @classmethod
    def retries_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("http_retries must be at least 1")
        return v

    @field_validator("http_backoff_ms", "seed_applications")
    @classmethod
    def not_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must not be negative")
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
