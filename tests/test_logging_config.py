from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

import pytest

from internal_poller.config import LogLevel
from internal_poller.logging_config import (
    LOG_FILE_NAME,
    NOISY_LOGGERS,
    ROOT_LOGGER_NAME,
    SDK_LOGGER_NAME,
    get_logger,
    setup_logging,
)


@pytest.fixture(autouse=True)
def restore_loggers():
    """setup_logging() verändert globale Logger – danach zurücksetzen."""
    saved = {}
    for name in (ROOT_LOGGER_NAME, SDK_LOGGER_NAME, *NOISY_LOGGERS):
        lg = logging.getLogger(name)
        saved[name] = (lg.level, lg.handlers[:], lg.propagate)
    yield
    for name, (level, handlers, propagate) in saved.items():
        lg = logging.getLogger(name)
        for handler in lg.handlers:
            if handler not in handlers:
                handler.close()
        lg.setLevel(level)
        lg.handlers[:] = handlers
        lg.propagate = propagate


def test_level_comes_from_settings(make_settings) -> None:
    setup_logging(make_settings(log_level=LogLevel.WARNING))

    app_logger = logging.getLogger(ROOT_LOGGER_NAME)
    assert app_logger.level == logging.WARNING
    assert [type(h) for h in app_logger.handlers] == [logging.StreamHandler]


def test_log_dir_adds_rotating_file(make_settings, tmp_path) -> None:
    log_dir = tmp_path / "logs"
    setup_logging(make_settings(log_dir=log_dir, log_level=LogLevel.INFO))

    get_logger("scheduler").info("Schedule-Polling abgeschlossen")
    for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
        handler.flush()

    app_logger = logging.getLogger(ROOT_LOGGER_NAME)
    assert any(isinstance(h, RotatingFileHandler) for h in app_logger.handlers)
    content = (log_dir / LOG_FILE_NAME).read_text(encoding="utf-8")
    assert "internal_poller.scheduler" in content
    assert "Schedule-Polling abgeschlossen" in content


def test_sdk_diagnostics_only_from_error(make_settings) -> None:
    setup_logging(make_settings(log_level=LogLevel.DEBUG))

    sdk_logger = logging.getLogger(SDK_LOGGER_NAME)
    assert sdk_logger.level == logging.ERROR
    assert sdk_logger.propagate is False
    assert sdk_logger.handlers == logging.getLogger(ROOT_LOGGER_NAME).handlers

    exporter_logger = logging.getLogger("opentelemetry.sdk.trace.export")
    assert not exporter_logger.isEnabledFor(logging.WARNING)
    assert exporter_logger.isEnabledFor(logging.ERROR)


def test_noisy_libraries_are_quieted(make_settings) -> None:
    setup_logging(make_settings(log_level=LogLevel.DEBUG))

    assert logging.getLogger("httpx").level == logging.WARNING


def test_repeated_setup_replaces_handlers(make_settings) -> None:
    settings = make_settings()
    setup_logging(settings)
    setup_logging(settings)

    assert len(logging.getLogger(ROOT_LOGGER_NAME).handlers) == 1
