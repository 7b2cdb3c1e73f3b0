"""Application configuration using environment variables."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, AnyHttpUrl, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the project root once so that `.env` is discovered regardless of CWD
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    """Load configuration from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(
        default="127.0.0.1",
        validation_alias=AliasChoices("HOST", "host"),
    )
    port: int = Field(
        default=7591,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("PORT", "port"),
    )

    openrouter_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("OPENROUTER_API_KEY", "openrouter_api_key"),
    )
    openrouter_base_url: AnyHttpUrl = Field(
        default_factory=lambda: AnyHttpUrl("https://openrouter.ai/api/v1"),
        validation_alias=AliasChoices("OPENROUTER_BASE_URL", "openrouter_base_url"),
    )
    openrouter_app_url: Optional[AnyHttpUrl] = Field(
        default=None,
        validation_alias=AliasChoices(
            "OPENROUTER_APP_URL",
            "HTTP_REFERER",
            "http_referer",
        ),
    )
    openrouter_app_name: Optional[str] = Field(
        default="VoiceForge",
        validation_alias=AliasChoices(
            "OPENROUTER_APP_TITLE",
            "X_TITLE",
            "x_title",
        ),
    )
    request_timeout: float = Field(
        default=30.0,
        validation_alias=AliasChoices("OPENROUTER_TIMEOUT", "timeout"),
        ge=1,
    )

    elevenlabs_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("ELEVENLABS_API_KEY", "elevenlabs_api_key"),
    )
    elevenlabs_base_url: AnyHttpUrl = Field(
        default_factory=lambda: AnyHttpUrl("https://api.elevenlabs.io/v1"),
        validation_alias=AliasChoices("ELEVENLABS_BASE_URL", "elevenlabs_base_url"),
    )
    elevenlabs_timeout: float = Field(
        default=30.0,
        ge=1,
        validation_alias=AliasChoices("ELEVENLABS_TIMEOUT", "elevenlabs_timeout"),
    )

    # Streamer.bot HTTP server (DoAction endpoint)
    streamerbot_url: Optional[AnyHttpUrl] = Field(
        default_factory=lambda: AnyHttpUrl("http://127.0.0.1:7474"),
        validation_alias=AliasChoices("STREAMERBOT_URL", "streamerbot_url"),
    )
    streamerbot_timeout: float = Field(
        default=5.0,
        ge=0.1,
        validation_alias=AliasChoices("STREAMERBOT_TIMEOUT", "streamerbot_timeout"),
    )

    app_settings_path: Path = Field(
        default_factory=lambda: Path("data/app_settings.json"),
        validation_alias=AliasChoices("APP_SETTINGS_PATH", "app_settings_path"),
    )
    history_log_dir: Path = Field(
        default_factory=lambda: Path("logs/history"),
        validation_alias=AliasChoices("HISTORY_LOG_DIR", "history_log_dir"),
    )
    log_dir: Path = Field(
        default_factory=lambda: Path("logs/app"),
        validation_alias=AliasChoices("LOG_DIR", "log_dir"),
    )
    logging_settings_path: Path = Field(
        default_factory=lambda: Path("logging_settings.conf"),
        validation_alias=AliasChoices("LOGGING_SETTINGS_PATH", "logging_settings_path"),
    )

    @property
    def moderation_available(self) -> bool:
        return bool(
            self.openrouter_api_key and self.openrouter_api_key.get_secret_value()
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached `Settings` instance."""

    return Settings()  # pyright: ignore[reportCallIssue]


__all__ = ["PROJECT_ROOT", "Settings", "get_settings"]
