"""Typed settings loader for the city weather app."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from babel import Locale, UnknownLocaleError
from pydantic import AnyUrl, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError

DEFAULT_ICON_URL_TEMPLATE = "https://openweathermap.org/img/wn/{icon_code}@2x.png"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_env: Literal["dev", "staging", "prod"] = Field(default="dev", alias="APP_ENV")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", alias="LOG_LEVEL"
    )

    openweather_api_key: str = Field(alias="OPENWEATHER_API_KEY", repr=False)
    openweather_base_url: AnyUrl = Field(
        default=AnyUrl("https://api.openweathermap.org"),
        alias="OPENWEATHER_BASE_URL",
    )
    openweather_icon_url_template: str = Field(
        default=DEFAULT_ICON_URL_TEMPLATE,
        alias="OPENWEATHER_ICON_URL_TEMPLATE",
    )
    weather_timeout_seconds: float = Field(default=5.0, alias="WEATHER_TIMEOUT_SECONDS")

    viewport_narrow_threshold: int = Field(default=600, alias="VIEWPORT_NARROW_THRESHOLD")
    guard_stale_responses: bool = Field(default=False, alias="GUARD_STALE_RESPONSES")
    banner_text: str = Field(
        default="Thanks for checking the weather! Have a great day.",
        alias="BANNER_TEXT",
    )
    # Empty means the environment locale (LC_ALL, LC_TIME, LANG).
    display_locale: str | None = Field(default=None, alias="DISPLAY_LOCALE")

    journal_enabled: bool = Field(default=False, alias="JOURNAL_ENABLED")
    journal_dir: Path = Field(default=Path("./data/journal"), alias="JOURNAL_DIR")
    raw_payload_dir: Path = Field(default=Path("./data/raw"), alias="RAW_PAYLOAD_DIR")

    @field_validator("openweather_api_key", mode="before")
    @classmethod
    def strip_api_key(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("display_locale", mode="before")
    @classmethod
    def blank_locale_means_environment(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip() or None
        return value

    @model_validator(mode="after")
    def validate_values(self) -> Settings:
        """Validate cross-field and range constraints."""
        if not self.openweather_api_key:
            raise ValueError("OPENWEATHER_API_KEY must not be empty.")
        if "{icon_code}" not in self.openweather_icon_url_template:
            raise ValueError("OPENWEATHER_ICON_URL_TEMPLATE must include '{icon_code}'.")
        if self.weather_timeout_seconds <= 0:
            raise ValueError("WEATHER_TIMEOUT_SECONDS must be > 0.")
        if self.viewport_narrow_threshold <= 0:
            raise ValueError("VIEWPORT_NARROW_THRESHOLD must be > 0.")
        if self.display_locale is not None:
            try:
                Locale.parse(self.display_locale.replace("-", "_"))
            except (UnknownLocaleError, ValueError) as exc:
                raise ValueError(
                    f"DISPLAY_LOCALE {self.display_locale!r} is not a known locale."
                ) from exc
        return self

    @property
    def base_url(self) -> str:
        return str(self.openweather_base_url).rstrip("/")

    def safe_summary(self) -> dict[str, Any]:
        """Return config summary safe for journaling (no credentials)."""
        return {
            "app_env": self.app_env,
            "base_url": self.base_url,
            "weather_timeout_seconds": self.weather_timeout_seconds,
            "viewport_narrow_threshold": self.viewport_narrow_threshold,
            "guard_stale_responses": self.guard_stale_responses,
            "display_locale": self.display_locale,
            "journal_enabled": self.journal_enabled,
        }


def load_settings() -> Settings:
    """Load and validate settings, raising ConfigError on failure."""
    try:
        settings = Settings()
    except ValidationError as exc:
        # Rendered without input values so the credential never reaches logs.
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'settings'}: {error['msg']}"
            for error in exc.errors(include_input=False, include_url=False)
        )
        raise ConfigError(f"Invalid configuration: {details}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed reading environment/.env: {exc}") from exc
    return settings
