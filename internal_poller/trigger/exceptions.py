"""Spezifische Fehler für den Trigger-Client.

Hierarchie:
    TriggerError (Basis)
    ├── TriggerConfigError       – Konfiguration fehlt (kein Auth-Token)
    ├── TriggerTransportError    – Netzwerkfehler, DNS, Verbindungsabbruch
    ├── TriggerRejectedError     – Nicht-2xx-Antwort des Endpoints
    └── TriggerPayloadError      – 2xx-Antwort, aber kein gültiges JSON

Der Client wirft diese Fehler nicht nach außen, sondern liefert sie
im TriggerResult zurück.  Die Poll-Tasks entscheiden anhand des Typs
über das Log-Level.
"""

from __future__ import annotations


class TriggerError(Exception):
    """Basisklasse für alle Trigger-Fehler."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class TriggerConfigError(TriggerError):
    """Konfiguration fehlt – kein transienter Fehler, kein Netzwerk-Call."""

    def __init__(self, setting: str) -> None:
        self.setting = setting
        super().__init__(f"{setting} nicht konfiguriert")


class TriggerTransportError(TriggerError):
    """Endpoint nicht erreichbar (Verbindung, DNS, Timeout)."""
    pass


class TriggerRejectedError(TriggerError):
    """Endpoint hat mit einem Nicht-2xx-Status geantwortet."""

    def __init__(self, status_code: int, reason: str) -> None:
        self.reason = reason
        super().__init__(f"HTTP {status_code} {reason}".rstrip(), status_code=status_code)


class TriggerPayloadError(TriggerError):
    """Antwort-Body ließ sich nicht als JSON dekodieren."""
    pass
