"""Logging für den Internal Poller.

Alle Komponenten loggen unter `internal_poller.{component}`, damit die
externe Log-Senke nach Komponente filtern kann.  Die Diagnose-Meldungen
des OpenTelemetry-SDKs (Exporter-Fehler, verworfene Spans) landen in
denselben Handlern, aber erst ab ERROR – sonst fluten Export-Retries
bei nicht erreichbarem Collector das Log.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from internal_poller.config import Settings

ROOT_LOGGER_NAME = "internal_poller"
SDK_LOGGER_NAME = "opentelemetry"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_NAME = "poller.log"

# Libraries, die auf INFO/DEBUG pro Request loggen
NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn", "uvicorn.access", "nicegui")


def _build_handlers(settings: Settings) -> list[logging.Handler]:
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if settings.log_dir is not None:
        try:
            settings.log_dir.mkdir(parents=True, exist_ok=True)
            handlers.append(
                RotatingFileHandler(
                    settings.log_dir / LOG_FILE_NAME,
                    maxBytes=5 * 1024 * 1024,
                    backupCount=3,
                    encoding="utf-8",
                )
            )
        except OSError as e:
            print(f"Log-Verzeichnis nicht beschreibbar: {e} – nur stdout aktiv", file=sys.stderr)

    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logging(settings: Settings) -> None:
    """Konfiguriert Anwendungs- und SDK-Logger aus den Settings.

    Erneuter Aufruf ersetzt die Handler (z.B. in Tests).
    """
    handlers = _build_handlers(settings)

    app_logger = logging.getLogger(ROOT_LOGGER_NAME)
    app_logger.setLevel(settings.log_level.value)
    app_logger.handlers[:] = handlers

    # SDK-Diagnose: eigene Handler, nicht über den Root-Logger doppelt ausgeben
    sdk_logger = logging.getLogger(SDK_LOGGER_NAME)
    sdk_logger.setLevel(logging.ERROR)
    sdk_logger.handlers[:] = handlers
    sdk_logger.propagate = False

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(component: str) -> logging.Logger:
    """Logger `internal_poller.{component}`.

    Komponenten: app, bootstrap, scheduler, trigger, telemetry.
    """
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{component}")
