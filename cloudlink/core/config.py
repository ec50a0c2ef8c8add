"""
Configuration Management.

The client itself is configured with a CloudLinkClientConfig value. For
applications and the CLI, that value can also be assembled from files:

Secrets (.env or environment):
    CLOUDLINK_SERVER_KEY

Settings (YAML):
    cloudlink.yaml     - Hostname, HTTP log level, transport timeout
    logging.yaml       - Logging configuration, read by cloudlink.core.logging
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cloudlink.core.config_schema import (
    CloudLinkSchema,
    normalize_log_level,
)
from cloudlink.core.exceptions import ConfigurationError


def find_project_root() -> Path:
    """Find project root by looking for .project_root marker file."""
    current = Path.cwd()
    while current != current.parent:
        if (current / ".project_root").exists():
            return current
        current = current.parent
    raise RuntimeError("Project root not found. Ensure .project_root file exists.")


def load_yaml_config(filename: str) -> dict[str, Any]:
    """Load a YAML configuration file from config/settings/."""
    project_root = find_project_root()
    config_path = project_root / "config" / "settings" / filename

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


def normalize_hostname(hostname: str) -> str:
    """
    Ensure the hostname carries a protocol prefix.

    https:// is prepended unless the value already starts with http://
    or https://. Trailing slashes are removed.
    """
    value = hostname.strip()
    if not value.lower().startswith(("http://", "https://")):
        value = f"https://{value}"
    return value.rstrip("/")


class CloudLinkClientConfig(BaseModel):
    """
    Immutable client configuration.

    Attributes:
        hostname: CloudLink host, with or without protocol prefix
        server_key: Server key used to authenticate every request
        log_level: Standard level name controlling HTTP log detail
        timeout: Transport timeout in seconds
    """

    hostname: str = Field(min_length=1)
    server_key: str = Field(min_length=1, repr=False)
    log_level: str = "WARNING"
    timeout: float = Field(default=30.0, gt=0)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        return normalize_log_level(value)

    @property
    def base_url(self) -> str:
        """Normalized hostname with the REST API version path."""
        return f"{normalize_hostname(self.hostname)}/3"


class Settings(BaseSettings):
    """Secrets loaded from config/.env or CLOUDLINK_* environment variables."""

    server_key: str

    model_config = SettingsConfigDict(
        env_prefix="CLOUDLINK_",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


def _load_validated(schema_cls: type, filename: str) -> Any:
    """Load YAML and validate against schema. Returns typed model instance."""
    raw = load_yaml_config(filename)
    try:
        return schema_cls(**raw)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration in {filename}:\n{e}"
        ) from e


class AppConfig:
    """
    Application configuration loaded from YAML files.

    Each YAML file is validated against its Pydantic schema at load time.
    Properties return typed Pydantic model instances with attribute access.
    """

    def __init__(self) -> None:
        self._cloudlink = _load_validated(CloudLinkSchema, "cloudlink.yaml")

    @property
    def cloudlink(self) -> CloudLinkSchema:
        """CloudLink connection settings."""
        return self._cloudlink


@lru_cache
def get_settings() -> Settings:
    """Get cached secrets instance. Resolves .env path from project root."""
    try:
        env_path = find_project_root() / "config" / ".env"
    except RuntimeError:
        env_path = None
    try:
        return Settings(_env_file=str(env_path) if env_path else None)
    except ValidationError as e:
        raise ConfigurationError(
            "CLOUDLINK_SERVER_KEY is not set in the environment or config/.env"
        ) from e


@lru_cache
def get_app_config() -> AppConfig:
    """Get cached application configuration."""
    return AppConfig()


def get_client_config(**overrides: Any) -> CloudLinkClientConfig:
    """
    Assemble a client configuration from cloudlink.yaml and secrets.

    Keyword arguments whose value is not None replace the loaded values.
    cloudlink.yaml is only read when no hostname is given, the secrets
    only when no server_key is given.

    Returns:
        Validated CloudLinkClientConfig
    """
    values = {key: value for key, value in overrides.items() if value is not None}

    if "hostname" not in values:
        try:
            schema = get_app_config().cloudlink
        except (FileNotFoundError, RuntimeError) as e:
            raise ConfigurationError(f"No hostname given: {e}") from e
        values["hostname"] = schema.hostname
        values.setdefault("log_level", schema.log_level)
        values.setdefault("timeout", schema.timeout)

    if "server_key" not in values:
        values["server_key"] = get_settings().server_key

    try:
        return CloudLinkClientConfig(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid client configuration:\n{e}") from e
