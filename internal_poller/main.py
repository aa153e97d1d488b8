"""Einstiegspunkt des Internal Pollers.

Startet den NiceGUI-Server mit Health-Check-Endpoint.  NiceGUI bringt
FastAPI/Uvicorn mit – kein separater Server nötig.

Lifecycle:
1. startup()        – Config-Validierung, Logging (synchron)
2. async_startup()  – Bootstrap: Telemetrie, Poller starten
3. ... Server läuft ...
4. shutdown()       – Poller stoppen, Telemetrie herunterfahren
"""

import sys
from typing import Any

from nicegui import app, ui

import internal_poller.state as state
from internal_poller import __version__, bootstrap
from internal_poller.config import get_settings
from internal_poller.health import collect_health
from internal_poller.logging_config import get_logger, setup_logging

logger = get_logger("app")


@app.get("/health")
async def health_check() -> dict[str, Any]:
    """Health-Check-Endpoint für Docker und Monitoring.

    Gibt HTTP 200 zurück solange der Prozess läuft.  Ein fehlendes
    CRON_SECRET oder eine nicht erreichbare App machen den Status
    'degraded', nicht 'unhealthy' – der Poller überspringt dann nur.
    'unhealthy' nur, wenn die Server-Laufzeit einen Poller erwartet,
    der nicht läuft.
    """
    return await collect_health(get_settings(), state.get_context())


# --- Startup / Shutdown ---

def startup() -> None:
    """Initialisiert Logging und prüft Config.

    Synchroner Handler: Läuft vor async_startup().
    """
    try:
        settings = get_settings()
    except Exception as e:
        # Ohne gültige Config kann der Container nicht starten
        print(f"FATAL: Konfigurationsfehler – {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(settings)

    logger.info("=" * 60)
    logger.info("Internal Poller v%s startet", __version__)
    logger.info("=" * 60)
    logger.info("App-URL: %s", settings.app_base_url)
    logger.info("Umgebung: %s", settings.app_env.value)
    logger.info("Laufzeit: %s", settings.app_runtime.value)
    logger.info("ENABLE_POLLING: %s", settings.enable_polling)
    logger.info("Log-Level: %s", settings.log_level.value)


async def async_startup() -> None:
    """Bootstrap im laufenden Event-Loop.

    Fehler hier sind nicht fatal – der Prozess läuft weiter, der
    Health-Check zeigt den Zustand an.
    """
    try:
        state.context = bootstrap.register(get_settings())
    except Exception as exc:
        logger.error("Bootstrap fehlgeschlagen: %s", exc, exc_info=True)


async def shutdown() -> None:
    """Graceful Shutdown beim Container-Stop (SIGTERM)."""
    logger.info("Shutdown eingeleitet...")

    if state.context is not None:
        try:
            bootstrap.shutdown(state.context)
        except Exception as exc:
            logger.error("Fehler beim Shutdown: %s", exc)
        state.context = None

    logger.info("Internal Poller beendet")


app.on_startup(startup)
app.on_startup(async_startup)
app.on_shutdown(shutdown)


def main() -> None:
    """Startet den NiceGUI-Server."""
    settings = get_settings()
    ui.run(
        host=settings.host,
        port=settings.port,
        title="Internal Poller",
        # Kein automatisches Browser-Öffnen im Container
        show=False,
        reload=False,
        favicon=None,
    )


if __name__ == "__main__":
    main()
