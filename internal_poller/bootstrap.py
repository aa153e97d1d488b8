"""Bootstrap des Host-Prozesses: Telemetrie initialisieren, Poller starten.

Die Laufzeitumgebung (server / edge / client) wird einmalig aufgelöst und
an dispatch() übergeben.  Nur die Server-Laufzeit initialisiert das
Tracing-SDK und startet – falls aktiviert – den Internal Poller.

Statt eines modulweiten Singletons liefert register() einen AppContext
zurück, den der Host-Prozess hält und beim Shutdown wieder übergibt.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from opentelemetry.sdk.trace import TracerProvider

from internal_poller.config import Runtime, Settings, get_settings
from internal_poller.logging_config import get_logger
from internal_poller.scheduler.poller import InternalPoller
from internal_poller.telemetry import initialize_telemetry, shutdown_telemetry

logger = get_logger("bootstrap")

PollerFactory = Callable[[], InternalPoller]


@dataclass
class AppContext:
    """Laufzeit-Objekte eines Prozesses, vom Bootstrap erzeugt."""
    settings: Settings
    runtime: Runtime
    tracer_provider: TracerProvider | None = None
    poller: InternalPoller | None = None


def resolve_runtime(settings: Settings) -> Runtime:
    """Löst die Laufzeitumgebung einmalig auf.

    Ohne APP_RUNTIME gilt der Prozess als Server-Laufzeit.
    """
    runtime = settings.app_runtime
    logger.debug("Laufzeitumgebung: %s", runtime.value)
    return runtime


def dispatch(
    runtime: Runtime,
    settings: Settings,
    poller_factory: PollerFactory = InternalPoller,
) -> AppContext:
    """Führt die Instrumentierung für die gegebene Laufzeit aus."""
    context = AppContext(settings=settings, runtime=runtime)

    if runtime is Runtime.SERVER:
        logger.info("Lade Server-Instrumentierung...")
        _register_server(context, poller_factory)
    elif runtime is Runtime.EDGE:
        logger.info("Edge-Laufzeit: keine Server-Instrumentierung, kein Poller")
    else:
        logger.info("Client-Laufzeit: nichts zu instrumentieren")

    return context


def _register_server(context: AppContext, poller_factory: PollerFactory) -> None:
    settings = context.settings
    context.tracer_provider = initialize_telemetry(settings)

    if not settings.polling_enabled:
        logger.info(
            "Polling nicht aktiviert (APP_ENV=%s, ENABLE_POLLING=%s)",
            settings.app_env.value,
            settings.enable_polling,
        )
        return

    try:
        poller = poller_factory()
        poller.start()
    except Exception as exc:
        # Poller-Fehler darf den Host-Prozess nicht stoppen
        logger.error("Internal Poller konnte nicht gestartet werden: %s", exc, exc_info=True)
        return

    context.poller = poller
    logger.info("Internal Poller registriert")


def register(settings: Settings | None = None) -> AppContext:
    """Einstiegspunkt für den Host-Prozess.

    Muss im laufenden Event-Loop aufgerufen werden, da der Poller
    seine Timer dort anlegt.
    """
    settings = settings or get_settings()
    return dispatch(resolve_runtime(settings), settings)


def shutdown(context: AppContext) -> None:
    """Stoppt den Poller und fährt die Telemetrie herunter."""
    if context.poller is not None:
        context.poller.stop()
        context.poller = None

    shutdown_telemetry(context.tracer_provider)
    context.tracer_provider = None
