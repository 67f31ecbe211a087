# src/chatmock/config.py
"""Configuration schema and loading for the chatmock server.

Uses Pydantic for validation with frozen (immutable) models.
Configuration precedence: CLI > YAML file > defaults.

The reply text itself is deliberately not configurable.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

from chatmock.config_loader import load_layered_config

DEFAULT_FINGERPRINT = "fp_44709d6fcb"


class ServerConfig(BaseModel):
    """Server binding configuration."""

    model_config = {"frozen": True, "extra": "forbid"}

    host: str = Field(
        default="0.0.0.0",
        description="Host address to bind to",
    )
    port: int = Field(
        default=5000,
        gt=0,
        le=65535,
        description="Port to listen on",
    )


class StreamConfig(BaseModel):
    """Pacing and framing of streamed responses."""

    model_config = {"frozen": True, "extra": "forbid"}

    chunk_chars: int = Field(
        default=2,
        gt=0,
        description="Unicode code points carried by each content frame",
    )
    interval_ms: int = Field(
        default=50,
        ge=0,
        description="Pause after each content frame in milliseconds",
    )
    fingerprint: str = Field(
        default=DEFAULT_FINGERPRINT,
        min_length=1,
        description="system_fingerprint repeated on every chunk",
    )


class FaultConfig(BaseModel):
    """Fault injection settings for the rand_* routes.

    Percentages are 0-100 (e.g., 50.0 means half of the requests).
    """

    model_config = {"frozen": True, "extra": "forbid"}

    max_delay_ms: int = Field(
        default=5000,
        ge=0,
        description="Upper bound (exclusive) of the random delay in milliseconds",
    )
    failure_pct: float = Field(
        default=50.0,
        ge=0.0,
        le=100.0,
        description="Chance that the rand_fail route answers 500",
    )
    combined_failure_pct: float = Field(
        default=50.0,
        ge=0.0,
        le=100.0,
        description="Chance that rand_all takes the failure path instead of the delay path",
    )


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = {"frozen": True, "extra": "forbid"}

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root log level",
    )
    json_output: bool = Field(
        default=False,
        description="Emit JSON lines instead of console-formatted logs",
    )


class ChatMockConfig(BaseModel):
    """Top-level chatmock server configuration.

    Configuration precedence (highest to lowest):
    1. CLI flags
    2. YAML config file
    3. Built-in defaults
    """

    model_config = {"frozen": True, "extra": "forbid"}

    server: ServerConfig = Field(
        default_factory=ServerConfig,
        description="Server binding configuration",
    )
    stream: StreamConfig = Field(
        default_factory=StreamConfig,
        description="Streaming response configuration",
    )
    faults: FaultConfig = Field(
        default_factory=FaultConfig,
        description="Fault injection configuration",
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration",
    )


def load_config(
    *,
    config_file: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> ChatMockConfig:
    """Load chatmock configuration with precedence handling.

    Precedence (highest to lowest):
    1. cli_overrides - Direct overrides from CLI flags
    2. config_file - User's YAML configuration file
    3. defaults - Built-in Pydantic defaults
    """
    return load_layered_config(
        ChatMockConfig,
        config_file=config_file,
        cli_overrides=cli_overrides,
    )
