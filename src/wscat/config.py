"""Ambient settings using pydantic-settings.

Session parameters (URL, files, success string) come only from the
command line. These settings tune how the tool behaves around a session:
logging verbosity and transport limits.

Usage:
    from wscat.config import settings
    print(settings.max_message_size)
"""

import logging
from typing import Self

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_MAX_MESSAGE_SIZE = 32 << 20


class Settings(BaseSettings):
    """Settings loaded from ``WSCAT_*`` environment variables."""

    model_config = SettingsConfigDict(extra="ignore")

    # ==========================================================================
    # LOGGING
    # ==========================================================================

    log_level: str = Field(
        default="WARNING",
        validation_alias="WSCAT_LOG_LEVEL",
        description="Log level used when --verbose is not given",
    )

    # ==========================================================================
    # TRANSPORT
    # ==========================================================================

    max_message_size: int = Field(
        default=DEFAULT_MAX_MESSAGE_SIZE,
        ge=0,
        validation_alias="WSCAT_MAX_MESSAGE_SIZE",
        description="Largest inbound message in bytes (0 = unlimited)",
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level: {value!r}")
        return level

    @model_validator(mode="after")
    def warn_unlimited_messages(self) -> Self:
        if self.max_message_size == 0:
            logger.warning("WSCAT_MAX_MESSAGE_SIZE=0: inbound message size is unlimited")
        return self

    @property
    def max_size(self) -> int | None:
        """Message limit in the form ``websockets`` expects."""
        return self.max_message_size or None


# Singleton instance
settings = Settings()
