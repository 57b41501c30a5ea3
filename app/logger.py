"""
Service logger

Handlers receive a ServiceLogger through FastAPI's dependency injection so
tests can swap in a recording logger instead of capturing stdout.
"""

import logging
import sys
from typing import Any, Mapping

from pythonjsonlogger.json import JsonFormatter

from app.config import get_settings

LOGGER_NAME = "websites_arena"


# =========================
# JSON formatting
# =========================

class CustomJsonFormatter(JsonFormatter):
    """Renames levelname/asctime to what the log collector expects"""

    def __init__(self, *args: Any, level_name: str = "severity", **kwargs: Any):
        super().__init__(
            *args,
            **kwargs,
            rename_fields={"levelname": level_name, "asctime": "time"},
        )


def configure_logging() -> None:
    settings = get_settings()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        CustomJsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            level_name=settings.log_level_name,
        )
    )

    root = logging.getLogger(LOGGER_NAME)
    root.handlers = [handler]
    root.setLevel(settings.log_level)
    root.propagate = False


# =========================
# Injected logger
# =========================

def _to_level(level: int | str) -> int:
    if isinstance(level, int):
        return level

    value = logging.getLevelName(level.upper())

    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")

    return value


class ServiceLogger:

    def __init__(self, logger: logging.Logger | None = None):
        self._logger = logger or logging.getLogger(LOGGER_NAME)

    def log(
        self,
        level: int | str,
        message: str,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        self._logger.log(
            _to_level(level),
            message,
            extra={"context": dict(context or {})},
        )


def get_logger() -> ServiceLogger:
    return ServiceLogger()
