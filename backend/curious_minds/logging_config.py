import logging
from logging.config import dictConfig
from typing import Optional

from .config import Settings, get_settings

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _level(name: str, fallback: str) -> str:
    candidate = name.strip().upper()
    return candidate if isinstance(logging.getLevelName(candidate), int) else fallback


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure process logging from the CURIOUS_* settings.

    The cache's own loggers follow ``CURIOUS_LOG_LEVEL``. Remote traffic
    (httpx/httpcore) stays at WARNING unless ``CURIOUS_DEBUG_HTTP`` is set,
    and SQL statements from the local store follow ``CURIOUS_SQL_LOG_LEVEL``.
    """
    settings = settings or get_settings()
    level = _level(settings.log_level, "INFO")
    http_level = "DEBUG" if settings.debug_http else "WARNING"

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": DEFAULT_LOG_FORMAT,
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "loggers": {
                "curious_minds": {"level": level},
                "httpx": {"level": http_level},
                "httpcore": {"level": http_level},
                "sqlalchemy.engine": {"level": _level(settings.sql_log_level, "WARNING")},
                "alembic": {"level": "INFO"},
            },
            "root": {
                "handlers": ["default"],
                "level": level,
            },
        }
    )
