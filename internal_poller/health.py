"""Health-Check-Funktionen für Subsystem-Prüfungen.

Seiteneffekt-frei: wird vom Health-Check-Endpoint in main.py importiert.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import httpx

from internal_poller import __version__
from internal_poller.config import Runtime, Settings

if TYPE_CHECKING:
    from internal_poller.bootstrap import AppContext


async def check_app_reachable(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, Any]:
    """Prüft ob die App mit den Trigger-Endpoints erreichbar ist.

    Kein harter Fehler – der Poller versucht es beim nächsten Tick erneut.
    """
    try:
        async with httpx.AsyncClient(
            timeout=5.0, follow_redirects=True, transport=transport,
        ) as client:
            response = await client.get(settings.app_base_url)
            if response.status_code < 500:
                return {"status": "ok", "url": settings.app_base_url}
            return {
                "status": "error",
                "url": settings.app_base_url,
                "http_status": response.status_code,
            }
    except httpx.RequestError as e:
        return {"status": "unreachable", "url": settings.app_base_url, "error": str(e)}


def check_cron_secret_present(settings: Settings) -> dict[str, Any]:
    """Prüft nur das Vorhandensein von CRON_SECRET, nicht die Gültigkeit."""
    if settings.cron_secret:
        return {"status": "ok"}
    return {"status": "not_configured"}


def check_poller(context: AppContext | None) -> dict[str, Any]:
    """Status des Internal Pollers."""
    if context is None or context.poller is None:
        return {"status": "not_started"}

    status = context.poller.status
    return {
        "status": status.state.value,
        "started_at": status.started_at.isoformat() if status.started_at else None,
        "recurring_timers": status.recurring_timers,
        "runs_in_flight": status.runs_in_flight,
    }


def check_telemetry(context: AppContext | None) -> dict[str, Any]:
    """Ob das Tracing-SDK initialisiert wurde."""
    if context is None or context.tracer_provider is None:
        return {"status": "disabled"}
    return {"status": "ok", "endpoint": context.settings.telemetry_endpoint}


def poller_required(settings: Settings, context: AppContext | None) -> bool:
    """Nur die Server-Laufzeit startet einen Poller – und nur wenn aktiviert."""
    runtime = context.runtime if context is not None else settings.app_runtime
    return runtime is Runtime.SERVER and settings.polling_enabled


async def collect_health(
    settings: Settings,
    context: AppContext | None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, Any]:
    """Fasst alle Checks zu einem Gesamtstatus zusammen.

    - unhealthy: Poller erforderlich, läuft aber nicht
    - degraded:  App nicht erreichbar oder CRON_SECRET fehlt
    - healthy:   sonst
    """
    target = await check_app_reachable(settings, transport=transport)
    secret = check_cron_secret_present(settings)
    poller = check_poller(context)
    telemetry = check_telemetry(context)

    if poller_required(settings, context) and poller["status"] != "running":
        overall = "unhealthy"
    elif target["status"] == "ok" and secret["status"] == "ok":
        overall = "healthy"
    else:
        overall = "degraded"

    return {
        "status": overall,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": __version__,
        "checks": {
            "app": target,
            "cron_secret": secret,
            "poller": poller,
            "telemetry": telemetry,
        },
    }
