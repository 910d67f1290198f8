"""Configuration settings for cashflow insights."""

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Flat settings read from environment variables or a .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Gemini
    gemini_api_key: SecretStr | None = Field(default=None, validation_alias="GEMINI_API_KEY")
    gemini_model: str = Field(default="gemini-2.5-flash", validation_alias="GEMINI_MODEL")
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/models",
        validation_alias="GEMINI_BASE_URL",
    )
    gemini_timeout: float = Field(default=60.0, validation_alias="GEMINI_TIMEOUT")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", validation_alias="LOG_LEVEL"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", validation_alias="LOG_FORMAT"
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


@dataclass(frozen=True)
class AnalyzerConfig:
    """Immutable configuration handed to the analysis client and service.

    Built once from settings; nothing below the service reads the environment.
    """

    api_key: str | None = field(repr=False)
    endpoint_url: str
    timeout: float = 60.0

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "AnalyzerConfig":
        settings = settings or get_settings()
        api_key = (
            settings.gemini_api_key.get_secret_value() if settings.gemini_api_key else None
        )
        return cls(
            api_key=api_key or None,
            endpoint_url=(
                f"{settings.gemini_base_url.rstrip('/')}/"
                f"{settings.gemini_model}:generateContent"
            ),
            timeout=settings.gemini_timeout,
        )
