"""Logging configuration.

Application modules keep using ``logging.getLogger(__name__)``; records are
rendered by structlog's ProcessorFormatter as JSON lines or console text.
"""

import logging.config
from typing import Any

import structlog

# Applied to every stdlib record before rendering
_PRE_CHAIN: list[Any] = [
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
]


def build_formatter(log_format: str = "json") -> structlog.stdlib.ProcessorFormatter:
    """Return the formatter for "json" or plain console output."""
    if log_format.lower() == "json":
        processors = [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.dev.ConsoleRenderer(colors=False),
        ]
    return structlog.stdlib.ProcessorFormatter(processors=processors, foreign_pre_chain=_PRE_CHAIN)


def configure_logging(log_level: str = "INFO", log_format: str = "json") -> None:
    """Configure root logging once at application startup.

    Args:
        log_level: Minimum level name (DEBUG, INFO, WARNING, ERROR)
        log_format: "json" for structured output, anything else for console text

    """
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"()": build_formatter, "log_format": log_format},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "root": {
                "level": log_level.upper(),
                "handlers": ["console"],
            },
        }
    )
