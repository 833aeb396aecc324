"""
Process-wide settings.

Values are read from ``SQLLOG_*`` environment variables once at import time.
"""

from __future__ import annotations

import os
from typing import Optional

from pydantic import BaseModel, Field

ENV_PREFIX = "SQLLOG_"


class Settings(BaseModel):
    """Ambient settings for logging and CLI defaults."""

    LOG_LEVEL: str = Field("INFO", description="Root logging level")
    LOG_FORMAT: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="logging.basicConfig format string",
    )
    LOG_FILE: Optional[str] = Field(None, description="Optional log file path")

    DEFAULT_ROW_COUNT: int = Field(
        100_000, ge=1, description="Rows generated when -r is absent or invalid"
    )
    DEFAULT_OUTPUT_PATH: str = Field("sql_logs.tsv", description="Output file")
    SINK_BUFFER_SIZE: int = Field(
        50_000, ge=1, description="Rows buffered before a background flush"
    )

    @classmethod
    def from_env(cls, environ: Optional[dict[str, str]] = None) -> "Settings":
        """Build settings from environment variables (``SQLLOG_<FIELD>``)."""
        env = os.environ if environ is None else environ
        values = {
            name: env[f"{ENV_PREFIX}{name}"]
            for name in cls.model_fields
            if f"{ENV_PREFIX}{name}" in env
        }
        return cls.model_validate(values)


settings = Settings.from_env()
