"""Configuration management service with Pydantic Settings.

This module provides centralized configuration for the auction messaging
engine, loading and validating ``AUCTIONS_*`` environment variables (or a
``.env`` file) on first use.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Section sign used by the chat client for colour and format codes
COLOR_CODE_CHAR = "§"


class Settings(BaseSettings):
    """Messaging settings.

    Every value is read at the time a message is formatted, so a reloaded
    settings object takes effect on the next dispatch.

    Example:
        ```python
        from auction_messaging.config import get_settings

        settings = get_settings()
        print(settings.truncate_numbers)
        print(settings.item_format)
        ```
    """

    model_config = SettingsConfigDict(
        env_prefix="AUCTIONS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    tax_percent: float = Field(
        default=0.0,
        ge=0.0,
        le=100.0,
        description="Percentage of the winning bid taken as tax",
    )
    truncate_numbers: bool = Field(
        default=False,
        description="Render monetary values as 1.23M instead of 1,234,567",
    )
    item_format: str = Field(
        default="&b[itemName]",
        description="Display format used for the [item] placeholder",
    )
    color_char: str = Field(
        default="&",
        description="Alternate character used for colour codes in templates",
    )
    queue_maxsize: int = Field(
        default=0,
        ge=0,
        description="Maximum pending dispatch requests (0 means unbounded)",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    @field_validator("item_format")
    @classmethod
    def validate_item_format(cls, v: str) -> str:
        """Reject an empty item format."""
        if not v:
            raise ValueError("item_format must not be empty")
        return v

    @field_validator("color_char")
    @classmethod
    def validate_color_char(cls, v: str) -> str:
        """Validate the alternate colour code character."""
        if len(v) != 1:
            raise ValueError("color_char must be a single character")
        if v == COLOR_CODE_CHAR:
            raise ValueError("color_char must differ from the section sign")
        return v

    def get_logging_level(self) -> int:
        """Get the numeric logging level."""
        level: int = getattr(logging, self.log_level)
        return level

    def summary(self) -> dict[str, str]:
        """Get a printable summary of the settings."""
        return {
            "tax_percent": str(self.tax_percent),
            "truncate_numbers": str(self.truncate_numbers),
            "item_format": self.item_format,
            "color_char": self.color_char,
            "queue_maxsize": str(self.queue_maxsize) if self.queue_maxsize else "(unbounded)",
            "log_level": self.log_level,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Uses LRU cache to ensure settings are loaded only once and
    reused across the application.

    Returns:
        The Settings instance.

    Raises:
        ValidationError: If an environment variable has an invalid value.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Useful for testing when you need to reload settings with
    different environment variables.
    """
    get_settings.cache_clear()
