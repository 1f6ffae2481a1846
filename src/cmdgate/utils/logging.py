"""Logging setup utilities for cmdgate.

Configures logging for the whole application based on the logging
configuration settings, and keeps health probes out of the access log.
"""

from __future__ import annotations

import logging
import sys

from cmdgate.config.settings import LoggingConfig


class HealthCheckFilter(logging.Filter):
    """Drops uvicorn access-log lines for ``GET /`` health probes."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name != "uvicorn.access":
            return True
        # uvicorn passes (client, method, path, http_version, status)
        args = record.args
        if isinstance(args, tuple) and len(args) >= 3:
            return not (args[1] == "GET" and args[2] == "/")
        return True


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Configure logging for the cmdgate application.

    Sets up the package logger with the specified level, format, and
    optional file handler.

    Args:
        config: Logging configuration. If None, uses defaults
                (INFO level, stderr output).
    """
    if config is None:
        config = LoggingConfig()

    root_logger = logging.getLogger("cmdgate")
    root_logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))

    formatter = logging.Formatter(config.format)

    # Console handler
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # File handler (optional)
    if config.file:
        file_handler = logging.FileHandler(config.file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    logging.getLogger("uvicorn.access").addFilter(HealthCheckFilter())

    root_logger.info("Logging initialized at %s level", config.level)
