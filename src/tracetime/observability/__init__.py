"""Public observability primitives: JSON-lines logging and structlog routing."""

from tracetime.observability.logging import (
    LoggingConfig,
    LoggingHandle,
    configure_structlog,
    get_active_logging_handle,
    logging_config_from,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    "LoggingConfig",
    "LoggingHandle",
    "configure_structlog",
    "get_active_logging_handle",
    "logging_config_from",
    "setup_logging",
    "shutdown_logging",
]
