"""Configuration management for the notification action menu."""

import shlex
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Menu settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="NOTIMENU_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Browser Configuration
    browser: str = Field(
        default="firefox -new-tab", description="Browser command, URL is appended"
    )

    # Chooser Configuration
    dmenu: str = Field(default="dmenu -p dunst:", description="Interactive chooser command")
    chooser_timeout: Optional[float] = Field(
        default=300.0, description="Seconds to wait for a selection (None waits forever)"
    )
    chooser_max_line: int = Field(
        default=1023, description="Maximum bytes read back from the chooser"
    )

    # Feedback Configuration
    notify_on_no_match: bool = Field(
        default=False, description="Show a desktop notification for unmatched selections"
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("browser", "dmenu")
    @classmethod
    def _require_command(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("command must not be empty")
        try:
            shlex.split(value)
        except ValueError as e:
            raise ValueError(f"cannot parse command {value!r}: {e}") from e
        return value

    @field_validator("chooser_timeout")
    @classmethod
    def _positive_timeout(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value <= 0:
            raise ValueError("chooser_timeout must be positive")
        return value

    @field_validator("chooser_max_line")
    @classmethod
    def _positive_length(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("chooser_max_line must be positive")
        return value

    @property
    def dmenu_command(self) -> List[str]:
        """Get chooser command as an argv list."""
        return shlex.split(self.dmenu)

    @property
    def browser_command(self) -> List[str]:
        """Get browser command as an argv list (without the URL)."""
        return shlex.split(self.browser)


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Reload settings from environment (useful for testing)."""
    global _settings
    _settings = Settings()
    return _settings
