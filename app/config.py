"""Application configuration management."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralised application settings derived from environment variables."""

    openrouter_api_key: SecretStr | None = Field(
        default=None,
        description="OpenRouter API key. When absent the service only serves fallback messages.",
    )
    openrouter_base_url: str = Field(default="https://openrouter.ai/api/v1")
    openrouter_model: str = Field(
        default="meta-llama/llama-3.3-70b-instruct:free",
        description="Default model identifier (a free tier keeps cost at zero).",
    )
    openrouter_timeout_ms: int = Field(default=30_000, ge=1)
    openrouter_max_retries: int = Field(default=3, ge=1)
    openrouter_cache_ttl_ms: int = Field(default=15 * 60 * 1000, ge=0)
    openrouter_app_url: str = Field(default="https://astrorunner.app")
    openrouter_app_title: str = Field(default="AstroRunner Activity Logger")

    enable_ai_motivation: bool = Field(
        default=True,
        description="Feature flag. When false every request is answered by the fallback policy.",
    )
    motivation_cache_max_entries: int = Field(default=1000, ge=1)

    database_url: str = Field(
        default="sqlite:///./data/activities.db",
        description="SQLAlchemy-compatible database URL.",
    )
    app_host: str = Field(default="0.0.0.0")
    app_port: int = Field(default=8000, ge=1, le=65535)

    debug: bool = Field(default=False)

    log_level: str = Field(default="INFO")
    log_dir: Path = Field(default=Path("logs"))

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("openrouter_api_key")
    @classmethod
    def blank_key_is_missing(cls, value: SecretStr | None) -> SecretStr | None:
        """Treat an empty OPENROUTER_API_KEY the same as an unset one."""

        if value is None or not value.get_secret_value().strip():
            return None
        return value

    @field_validator("openrouter_base_url")
    @classmethod
    def normalize_base_url(cls, value: str) -> str:
        stripped = value.strip().rstrip("/")
        if not stripped:
            raise ValueError("OPENROUTER_BASE_URL must not be empty")
        return stripped

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        valid = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
        upper = value.upper()
        if upper not in valid:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(sorted(valid))}")
        return upper

    @property
    def ai_motivation_available(self) -> bool:
        """True when the feature flag is on and a credential is configured."""

        return self.enable_ai_motivation and self.openrouter_api_key is not None


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance so it can be reused across the app."""

    settings = Settings()
    settings.log_dir.mkdir(parents=True, exist_ok=True)
    return settings
