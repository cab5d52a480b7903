"""Public observability primitives: structured JSON-lines logging."""

from valuestore.observability.logging import (
    ROOT_LOGGER_NAME,
    LoggingConfig,
    LoggingHandle,
    setup_structured_logging,
    shutdown_logging,
)

__all__ = [
    "LoggingConfig",
    "LoggingHandle",
    "ROOT_LOGGER_NAME",
    "setup_structured_logging",
    "shutdown_logging",
]
