# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Process configuration.

Settings come from ``TAKTILE_*`` environment variables (or a ``.env``
file) and are built once per process by ``get_settings()``.  The default
host identifier is computed there and handed explicitly to whatever needs
it; core functions never read settings on their own.

    TAKTILE_COT_URL=tcp://takserver.local:8087
    TAKTILE_HOST_ID=taktile@sensor-7
    TAKTILE_STALE=300
"""

from __future__ import annotations

import socket
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from taktile.comms.cot import DEFAULT_COT_STALE, DEFAULT_COT_TYPE, MAX_STALE
from taktile.comms.locator import DEFAULT_COT_URL, Locator, resolve
from taktile.log import LOG_LEVELS

HOST_ID_PREFIX = "taktile@"


def default_host_id() -> str:
    """``taktile@<hostname>``, the default CoT uid for this process."""
    return HOST_ID_PREFIX + socket.gethostname()


class TaktileSettings(BaseSettings):
    """Settings loaded from the environment."""

    model_config = SettingsConfigDict(
        env_prefix="TAKTILE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    cot_url: str = DEFAULT_COT_URL
    host_id: str = Field(default_factory=default_host_id)
    stale: int = Field(default=DEFAULT_COT_STALE, ge=0, le=MAX_STALE)
    cot_type: str = Field(default=DEFAULT_COT_TYPE, min_length=1)

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None

    @field_validator("cot_url")
    @classmethod
    def validate_cot_url(cls, value: str) -> str:
        """Reject locators the resolver cannot handle."""
        resolve(value)
        return value

    @field_validator("host_id")
    @classmethod
    def validate_host_id(cls, value: str) -> str:
        if not value:
            raise ValueError("host_id must not be empty.")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value}")
        return normalized

    @property
    def locator(self) -> Locator:
        return resolve(self.cot_url)


@lru_cache(maxsize=1)
def get_settings() -> TaktileSettings:
    """Build the process settings on first call and reuse them afterwards."""
    return TaktileSettings()
