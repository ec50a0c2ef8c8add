"""
Centralized Logging Configuration.

All modules must use this logging setup. Do not create standalone loggers.
Configuration is loaded from config/settings/logging.yaml.

Structured fields in every JSON log record:
    timestamp   - ISO 8601 UTC timestamp
    level       - Log level (debug, info, warning, error, critical)
    logger      - Module path (e.g., cloudlink.http.binding)
    event       - Log message
    func_name   - Function that emitted the log
    lineno      - Line number in source file
    source      - Origin context, set explicitly (sdk, cli)

Additional fields are passed as keyword arguments or structlog context binding.

Usage:
    from cloudlink.core.logging import get_logger, setup_logging

    # Setup at application start (loads from logging.yaml)
    setup_logging()

    # Override config values if needed
    setup_logging(level="DEBUG", format_type="console")

    # Get logger in modules
    logger = get_logger(__name__)

    # Explicit source
    log_with_source(logger, "sdk", "info", "Object stored", object_id="abc")

The SDK never calls setup_logging itself. Its loggers sit on top of stdlib
loggers, so an application that never configures logging gets the stdlib
defaults (INFO records dropped, warnings on stderr).
"""

import enum
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError
from structlog.typing import Processor

from cloudlink.core.config import find_project_root, load_yaml_config
from cloudlink.core.config_schema import LoggingSchema, log_level_value, normalize_log_level
from cloudlink.core.exceptions import ConfigurationError

VALID_SOURCES = frozenset({
    "sdk",
    "cli",
    "internal",
    "unknown",
})
"""
Recognized log source values, for documentation and validation.
Source is always set explicitly by the caller. Never guessed from logger names.
"""

_logging_config: dict[str, Any] | None = None

_FALLBACK_CONFIG: dict[str, Any] = {
    "level": "WARNING",
    "format": "console",
    "handlers": {"console": {"enabled": True}, "file": {"enabled": False}},
}


class HttpLogLevel(enum.IntEnum):
    """How much of each HTTP exchange the binding logs."""

    NONE = 0
    BASIC = 1
    HEADERS = 2
    FULL = 3


def http_log_level_for(level: str) -> HttpLogLevel:
    """
    Map a standard log level name onto HTTP log detail.

    DEBUG and below log full exchanges, INFO adds headers to the basic
    request line, anything up to CRITICAL logs the request line only and
    OFF/NONE disables HTTP logging.
    """
    value = log_level_value(normalize_log_level(level))
    if value <= logging.DEBUG:
        return HttpLogLevel.FULL
    if value <= logging.INFO:
        return HttpLogLevel.HEADERS
    if value <= logging.CRITICAL:
        return HttpLogLevel.BASIC
    return HttpLogLevel.NONE


def _load_logging_config() -> dict[str, Any]:
    """
    Load and validate logging configuration from config/settings/logging.yaml.

    Returns:
        Dictionary containing logging configuration

    Raises:
        FileNotFoundError: If logging.yaml does not exist
        ConfigurationError: If logging.yaml does not match LoggingSchema
    """
    global _logging_config
    if _logging_config is None:
        try:
            schema = LoggingSchema(**load_yaml_config("logging.yaml"))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration in logging.yaml:\n{e}") from e
        _logging_config = schema.model_dump()
    return _logging_config


def _resolve_log_path(configured_path: str) -> Path:
    """Resolve the log file path relative to project root."""
    project_root = find_project_root()
    return project_root / configured_path


def setup_logging(
    level: str | None = None,
    format_type: str | None = None,
    enable_console: bool | None = None,
    enable_file_logging: bool | None = None,
) -> None:
    """
    Configure structured logging for the application.

    Configuration is loaded from config/settings/logging.yaml.
    Parameters passed to this function override the YAML configuration.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Overrides config.
        format_type: Output format ('json' or 'console'). Overrides config.
        enable_console: Whether to enable console output. Overrides config.
        enable_file_logging: Whether to write to JSONL file. Overrides config.
    """
    # logging.yaml is optional when the caller decides everything and skips the file
    fully_overridden = (
        None not in (level, format_type, enable_console)
        and enable_file_logging is False
    )
    config = _FALLBACK_CONFIG if fully_overridden else _load_logging_config()

    effective_level = level if level is not None else config["level"]
    effective_format = format_type if format_type is not None else config["format"]

    handlers_config = config["handlers"]
    console_config = handlers_config["console"]
    file_config = handlers_config["file"]

    effective_console_enabled = (
        enable_console if enable_console is not None
        else console_config["enabled"]
    )
    effective_file_enabled = (
        enable_file_logging if enable_file_logging is not None
        else file_config["enabled"]
    )

    log_level = log_level_value(normalize_log_level(effective_level))

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
        ),
    ]

    json_formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.processors.JSONRenderer(),
        foreign_pre_chain=shared_processors,
    )

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if effective_format == "console":
        console_formatter = structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=True),
            foreign_pre_chain=shared_processors,
        )
    else:
        console_formatter = json_formatter

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if effective_console_enabled:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(console_formatter)
        root_logger.addHandler(console_handler)

    if effective_file_enabled:
        log_path = _resolve_log_path(file_config["path"])
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            filename=str(log_path),
            maxBytes=file_config["max_bytes"],
            backupCount=file_config["backup_count"],
            encoding="utf-8",
        )
        file_handler.setFormatter(json_formatter)
        root_logger.addHandler(file_handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str) -> Any:
    """
    Get a logger instance for the given name.

    Args:
        name: Logger name, typically __name__

    Returns:
        structlog logger bound to the stdlib logger of the same name
    """
    return structlog.wrap_logger(
        logging.getLogger(name),
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def log_with_source(logger: Any, source: str, level: str, message: str, **kwargs: Any) -> None:
    """
    Log a message with an explicit source.

    Args:
        logger: The logger instance
        source: Log source (sdk, cli, internal)
        level: Log level (debug, info, warning, error, critical)
        message: Log message
        **kwargs: Additional context fields

    Raises:
        AttributeError: If level is not a valid log level

    Example:
        log_with_source(logger, "sdk", "info", "Object removed", object_id="abc")
    """
    log_method = getattr(logger, level.lower())
    log_method(message, source=source, **kwargs)
