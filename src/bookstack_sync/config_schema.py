"""Unified configuration schema for bookstack_sync.

Defines Pydantic models for the YAML config file, with dedicated sections
for the BookStack connection and logging.  Values from the
``bookstack`` section become fallbacks for ``config.load_config()``.

Usage:
    from bookstack_sync.config_schema import build_config

    raw = load_hierarchical_config()
    unified = build_config(raw)
    fallbacks = unified.bookstack.model_dump(exclude_none=True)
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class BookStackConfig(BaseModel):
    """BookStack server connection settings.

    All fields are optional so env vars and CLI args can supply them at
    runtime instead.
    """

    url: str | None = Field(default=None, description="BookStack server URL")
    token_id: str | None = Field(default=None, description="API token id")
    token_secret: str | None = Field(
        default=None, description="API token secret"
    )
    insecure: bool = Field(
        default=False,
        description="Disable SSL verification (development only)",
    )
    debug: bool = Field(default=False, description="Enable debug logging")
    timeout: float | None = Field(
        default=None,
        gt=0,
        description="Request timeout in seconds (unset: no timeout)",
    )

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Optional log file path.
    """

    level: str = Field(default="INFO", description="Log level")
    file: str | None = Field(default=None, description="Log file path")

    model_config = {"frozen": True}


class UnifiedConfig(BaseModel):
    """Top-level configuration; ``UnifiedConfig()`` is always valid."""

    bookstack: BookStackConfig = Field(default_factory=BookStackConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}


def build_config(raw_data: dict) -> UnifiedConfig:
    """Construct a ``UnifiedConfig`` from the merged YAML dict.

    Missing sections get defaults.
    """
    if not raw_data:
        return UnifiedConfig()

    return UnifiedConfig(**raw_data)
