"""
Runtime configuration for the live log writers and the event stream.

Values come from the environment (a ``.env`` file in the working directory
is loaded first; variables already set win). Intervals are in milliseconds.
"""

from __future__ import annotations

import os
import uuid
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from ..logger.levels import LogLevel

ENV_PREFIX = "LIVELOG_"

_ENV_FIELDS = {
    "level": "LEVEL",
    "spinner_interval_ms": "SPINNER_INTERVAL_MS",
    "throttle_ms": "THROTTLE_MS",
    "flash_duration_ms": "FLASH_DURATION_MS",
    "flush_interval_ms": "FLUSH_INTERVAL_MS",
    "max_batch_size": "MAX_BATCH_SIZE",
    "platform_url": "PLATFORM_URL",
    "client_auth_token": "AUTH_TOKEN",
    "session_id": "SESSION_ID",
}


class LiveLogConfig(BaseModel):
    """Settings shared by the fullscreen writer and the buffered event stream."""

    level: LogLevel = Field(default=LogLevel.info, description="Terminal severity threshold")
    spinner_interval_ms: int = Field(default=60, description="Spinner tick interval")
    throttle_ms: int = Field(
        default=600, description="Live-stream burst window and catch-up delay"
    )
    flash_duration_ms: int = Field(default=2000, description="How long flash messages stay up")
    flush_interval_ms: int = Field(default=3000, description="Event stream flush interval")
    max_batch_size: int = Field(default=200, description="Records per periodic flush")
    platform_url: Optional[str] = Field(
        default=None, description="Event collector base URL; batches are only printed when unset"
    )
    client_auth_token: Optional[str] = Field(default=None, description="Collector auth token")
    session_id: str = Field(
        default_factory=lambda: uuid.uuid4().hex, description="Id sent with every batch"
    )

    @field_validator("level", mode="before")
    @classmethod
    def _parse_level(cls, value: Any) -> LogLevel:
        return LogLevel.parse(value)

    @field_validator(
        "spinner_interval_ms",
        "throttle_ms",
        "flash_duration_ms",
        "flush_interval_ms",
        "max_batch_size",
    )
    @classmethod
    def _positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    @field_validator("platform_url")
    @classmethod
    def _strip_trailing_slash(cls, value: Optional[str]) -> Optional[str]:
        return value.rstrip("/") if value else None

    @classmethod
    def from_env(cls, **overrides: Any) -> "LiveLogConfig":
        """
        Build a config from ``LIVELOG_*`` environment variables.

        Args:
            **overrides: Values that take precedence over the environment
                (``None`` values are ignored)

        Raises:
            pydantic.ValidationError: If a value cannot be parsed
        """
        load_dotenv()
        values: Dict[str, Any] = {}
        for field_name, suffix in _ENV_FIELDS.items():
            raw = os.environ.get(ENV_PREFIX + suffix)
            if raw not in (None, ""):
                values[field_name] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


_default_config: Optional[LiveLogConfig] = None


def get_config() -> LiveLogConfig:
    """Return the process-wide config, loading it from the environment once."""
    global _default_config
    if _default_config is None:
        _default_config = LiveLogConfig.from_env()
    return _default_config
