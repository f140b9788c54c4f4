"""
Logging configuration: JSON lines in deployed environments, plain text locally.
"""
import logging
import sys
from typing import Any

from pythonjsonlogger.json import JsonFormatter

from cookite.server.core.config import settings


class ServiceJsonFormatter(JsonFormatter):
    """JSON formatter that stamps every record with the service name."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["service"] = settings.SERVICE_NAME
        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)


def setup_logging() -> None:
    if settings.LOG_JSON:
        formatter: logging.Formatter = ServiceJsonFormatter(
            fmt="%(timestamp)s %(level)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logging.info(
        "Logging configured",
        extra={"log_level": settings.LOG_LEVEL, "json_logging": settings.LOG_JSON},
    )
