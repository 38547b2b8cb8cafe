"""
Logging configuration.

Two output styles, selected by LOG_FORMAT:
- console: human-readable lines (default, development)
- json: one JSON object per line, for log aggregation
"""
import json
import logging
import logging.config
from datetime import datetime, UTC


class JsonFormatter(logging.Formatter):
    """Render log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def get_logging_config(level: str = "INFO", fmt: str = "console") -> dict:
    formatter = "json" if fmt == "json" else "console"
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {
                "format": "[{asctime}] {levelname} {name} {message}",
                "style": "{",
            },
            "json": {
                "()": "crm.core.logging.JsonFormatter",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": formatter,
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "crm": {"handlers": ["console"], "level": level.upper(), "propagate": False},
            "uvicorn": {"handlers": ["console"], "level": "INFO", "propagate": False},
        },
    }


def configure_logging(level: str = "INFO", fmt: str = "console") -> None:
    logging.config.dictConfig(get_logging_config(level, fmt))
