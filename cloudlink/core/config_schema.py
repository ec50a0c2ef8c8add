"""
Configuration Schemas.

Pydantic models defining the expected structure of each YAML config file.
Used by AppConfig to validate configuration at load time. If a YAML file
has missing keys, wrong types, or unknown fields, a clear ValidationError
is raised at startup instead of a cryptic KeyError deep in application code.

Each top-level class corresponds to one file in config/settings/:
    CloudLinkSchema    → cloudlink.yaml
    LoggingSchema      → logging.yaml
"""

import logging

from pydantic import BaseModel, ConfigDict, Field, field_validator

LOG_LEVEL_NAMES = frozenset({
    "NOTSET",
    "DEBUG",
    "INFO",
    "WARNING",
    "ERROR",
    "CRITICAL",
    "OFF",
    "NONE",
})
"""
Accepted log level names. OFF and NONE disable HTTP logging entirely.
"""


def normalize_log_level(value: str) -> str:
    """Upper-case a log level name and reject unknown names."""
    level = value.strip().upper()
    if level not in LOG_LEVEL_NAMES:
        raise ValueError(
            f"Unknown log level '{value}', expected one of {sorted(LOG_LEVEL_NAMES)}"
        )
    return level


def log_level_value(level: str) -> int:
    """Numeric value of a level name, with OFF/NONE above CRITICAL."""
    if level in ("OFF", "NONE"):
        return logging.CRITICAL + 10
    return logging.getLevelName(level)


class _StrictBase(BaseModel):
    """Base with extra='forbid' so unknown YAML keys are caught immediately."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# cloudlink.yaml
# =============================================================================


class CloudLinkSchema(_StrictBase):
    hostname: str = Field(min_length=1)
    log_level: str = "WARNING"
    timeout: float = Field(default=30.0, gt=0)

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        return normalize_log_level(value)


# =============================================================================
# logging.yaml
# =============================================================================


class ConsoleHandlerSchema(_StrictBase):
    enabled: bool


class FileHandlerSchema(_StrictBase):
    enabled: bool
    path: str
    max_bytes: int
    backup_count: int


class HandlersSchema(_StrictBase):
    console: ConsoleHandlerSchema
    file: FileHandlerSchema


class LoggingSchema(_StrictBase):
    level: str
    format: str
    handlers: HandlersSchema
