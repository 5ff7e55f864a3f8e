"""
Logging setup for the API process.

Application loggers live under ``rosterdesk``; uvicorn's access log goes
through its own handler so health-check traffic can be dropped.
"""

import logging
import logging.config
from typing import Any, Dict

HEALTH_PATHS = ("/api/health", "/healthz")

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"


class HealthCheckFilter(logging.Filter):
    """Drop uvicorn access lines for the health endpoints."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name != "uvicorn.access":
            return True
        message = record.getMessage()
        return not any(f"GET {path} " in message for path in HEALTH_PATHS)


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """
    Build a dictConfig mapping.

    Args:
        level: Level for the rosterdesk loggers and the root logger
    """
    level = level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"skip_health": {"()": HealthCheckFilter}},
        "formatters": {
            "console": {"format": LOG_FORMAT},
            "access": {"format": "%(asctime)s %(message)s"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "console",
                "stream": "ext://sys.stderr",
            },
            "access": {
                "class": "logging.StreamHandler",
                "formatter": "access",
                "stream": "ext://sys.stdout",
                "filters": ["skip_health"],
            },
        },
        "loggers": {
            "rosterdesk": {"level": level},
            "uvicorn": {"level": "INFO"},
            "uvicorn.access": {"handlers": ["access"], "level": "INFO", "propagate": False},
        },
        "root": {"level": level, "handlers": ["console"]},
    }


def configure_logging(level: str = "INFO") -> None:
    """Apply the logging configuration to the running process."""
    logging.config.dictConfig(get_logging_config(level))
