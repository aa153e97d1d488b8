"""Laufzeit-Zustand des Host-Prozesses.

Hält nur die Referenz auf den AppContext, den main.async_startup()
vom Bootstrap erhält.  Keine Seiteneffekte beim Import – kein Logging,
kein NiceGUI, keine Registrierungen.

Hintergrund: `internal_poller.main` wird als `__main__` geladen.
Ein späterer `from internal_poller.main import ...` würde das Modul
erneut ausführen und die Startup-Hooks doppelt registrieren.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from internal_poller.bootstrap import AppContext

context: AppContext | None = None


def get_context() -> AppContext | None:
    """Gibt den AppContext zurück (None vor dem Startup)."""
    return context
