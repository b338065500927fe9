from __future__ import annotations

import logging

from curious_minds.config import Settings
from curious_minds.logging_config import configure_logging


def _settings(**env: str) -> Settings:
    return Settings(**env)  # type: ignore[arg-type]


def test_library_loggers_follow_settings() -> None:
    configure_logging(
        _settings(CURIOUS_LOG_LEVEL="debug", CURIOUS_DEBUG_HTTP="1", CURIOUS_SQL_LOG_LEVEL="INFO")
    )

    assert logging.getLogger("curious_minds").level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.DEBUG
    assert logging.getLogger("httpcore").level == logging.DEBUG
    assert logging.getLogger("sqlalchemy.engine").level == logging.INFO


def test_quiet_defaults_and_unknown_levels() -> None:
    configure_logging(_settings(CURIOUS_LOG_LEVEL="chatty"))

    assert logging.getLogger("curious_minds").level == logging.INFO
    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
