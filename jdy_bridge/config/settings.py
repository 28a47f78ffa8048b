"""Typed runtime settings with dotenv support and startup validation."""

from typing import Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SettingsLoadError(RuntimeError):
    """Raised when runtime settings cannot be loaded or validated."""


class AppSettings(BaseSettings):
    """Application settings for the API runtime and JianDaoYun access.

    Environment variable names map directly to field names in uppercase.
    Example: `jiandaoyun_app_key` reads from `JIANDAOYUN_APP_KEY`.

    Attributes:
        environment_name: Runtime environment label.
        application_host: Host interface for web server binding.
        application_port: Web server port.
        log_level: Root logging level name.
        jiandaoyun_app_key: Default API key; tool calls may override it.
        jiandaoyun_app_id: Default application id; tool calls may override it.
        jiandaoyun_base_url: API origin.
        jiandaoyun_request_timeout_seconds: HTTP request timeout.
        metadata_failure_policy: `passthrough` degrades metadata failures to
            pass-through behavior, `fail` turns them into errors.
        form_handle_fast_path_enabled: Whether 24-character hex identifiers are
            trusted as form handles without any lookup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment_name: str = Field(default="development")
    application_host: str = Field(default="0.0.0.0")
    application_port: int = Field(default=8000, ge=1, le=65535)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    jiandaoyun_app_key: str | None = Field(default=None)
    jiandaoyun_app_id: str | None = Field(default=None)
    jiandaoyun_base_url: str = Field(default="https://api.jiandaoyun.com")
    jiandaoyun_request_timeout_seconds: float = Field(default=30.0, gt=0)
    metadata_failure_policy: Literal["passthrough", "fail"] = Field(default="passthrough")
    form_handle_fast_path_enabled: bool = Field(default=True)

    @field_validator("jiandaoyun_app_key", "jiandaoyun_app_id")
    @classmethod
    def _normalize_optional_credential(cls, value: str | None) -> str | None:
        if value is None:
            return None
        stripped_value = value.strip()
        return stripped_value or None

    @field_validator("jiandaoyun_base_url")
    @classmethod
    def _validate_base_url(cls, value: str) -> str:
        stripped_value = value.strip().rstrip("/")
        if not stripped_value:
            raise ValueError("value must not be blank")
        if not stripped_value.startswith(("http://", "https://")):
            raise ValueError("value must be an http(s) URL")
        return stripped_value

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value


def config_load_settings() -> AppSettings:
    """Load and validate runtime settings from environment and dotenv.

    Returns:
        AppSettings: Validated runtime settings object.

    Raises:
        SettingsLoadError: Raised when settings are invalid.
    """

    try:
        return AppSettings()
    except ValidationError as error:
        raise SettingsLoadError(
            f"Startup configuration validation failed. Update .env or environment variables. Details: {error}"
        ) from error
