"""Public entry point for configuring gateway logging."""

from __future__ import annotations

import logging
import logging.config
import os
from typing import Any

from .formatter import SERVICE_NAME


def configure_logging(level: str | None = None) -> None:
    """Configure structured logging for the gateway.

    ``level`` overrides ``LOG_LEVEL``; the remaining settings come from the
    environment (``LOG_JSON``, ``LOG_FILE``).
    """

    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    json_enabled = os.getenv("LOG_JSON", "true").lower() in {"1", "true", "yes", "on"}
    log_file = os.getenv("LOG_FILE")

    formatter_name = "json" if json_enabled else "plain"

    formatters: dict[str, dict[str, Any]] = {
        "json": {
            "()": "corsgate.logging.formatter.ECSJsonFormatter",
            "service_name": SERVICE_NAME,
        },
        "plain": {
            "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        },
    }

    filters = {
        "context": {"()": "corsgate.logging.filters.RequestContextFilter"},
    }

    handlers: dict[str, dict[str, Any]] = {
        "stdout": {
            "class": "logging.StreamHandler",
            "level": log_level,
            "formatter": formatter_name,
            "filters": ["context"],
            "stream": "ext://sys.stdout",
        }
    }
    root_handlers = ["stdout"]

    if log_file:
        abs_path = os.path.abspath(log_file)
        os.makedirs(os.path.dirname(abs_path) or ".", exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.WatchedFileHandler",
            "level": log_level,
            "formatter": formatter_name,
            "filters": ["context"],
            "filename": abs_path,
            "delay": True,
        }
        root_handlers.append("file")

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "filters": filters,
        "handlers": handlers,
        "root": {
            "level": log_level,
            "handlers": root_handlers,
        },
        "loggers": {
            "uvicorn": {"level": "INFO", "handlers": [], "propagate": True},
            "uvicorn.error": {"level": "INFO", "handlers": [], "propagate": True},
            "uvicorn.access": {"level": "INFO", "handlers": [], "propagate": True},
            "corsgate.cors": {"level": log_level, "handlers": [], "propagate": True},
        },
    }

    logging.config.dictConfig(logging_config)
    logging.captureWarnings(True)
