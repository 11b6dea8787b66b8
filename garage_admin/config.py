from functools import lru_cache
from typing import List

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    app_name: str = Field(default="Garage Admin Service")
    cors_origins: List[AnyHttpUrl] = Field(
        default_factory=lambda: [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:8080",
            "http://127.0.0.1:8080",
        ]
    )
    backend_base_url: AnyHttpUrl | None = Field(
        default=None
    )
    backend_timeout: float = Field(
        default=10.0
    )
    backend_token: str | None = Field(
        default=None
    )
    use_mock_data: bool = Field(
        default=True
    )
    currency: str = Field(
        default="LKR"
    )
    display_timezone: str = Field(
        default="Asia/Colombo"
    )
    notification_poll_enabled: bool = Field(
        default=True
    )
    notification_poll_seconds: int = Field(
        default=30
    )
    query_cache_ttl_seconds: int = Field(
        default=15
    )
    host: str = Field(
        default="127.0.0.1"
    )
    port: int = Field(
        default=8000
    )

    model_config = SettingsConfigDict(env_prefix="GARAGE_", case_sensitive=False)

    @field_validator("cors_origins", mode="before")
    def _split_origins(cls, value):
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("notification_poll_seconds")
    def _positive_interval(cls, value: int) -> int:
        if value < 1:
            raise ValueError("notification_poll_seconds must be at least 1")
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()
