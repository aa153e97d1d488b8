"""Datenmodelle rund um einen Trigger-Aufruf.

- TriggerConfig: Ziel und Token eines Aufrufs, pro Durchlauf neu gelesen
- TriggerResult: Rohergebnis des Clients (Payload oder Fehler)
- PollTaskResult: Interpretiertes Ergebnis eines Poll-Durchlaufs
- ScheduleExecuteResponse / OutlookPollResponse: Antwort-Bodies der Endpoints

Unbekannte Felder in den Antworten werden ignoriert, fehlende
Zählerfelder gelten als 0.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from internal_poller.trigger.exceptions import TriggerError

if TYPE_CHECKING:
    from internal_poller.config import Settings


@dataclass(frozen=True)
class TriggerConfig:
    """Ziel eines einzelnen Trigger-Aufrufs."""
    base_url: str
    auth_token: str | None
    path: str

    @property
    def url(self) -> str:
        return f"{self.base_url.rstrip('/')}{self.path}"

    @classmethod
    def from_settings(cls, settings: Settings, path: str) -> TriggerConfig:
        return cls(
            base_url=settings.app_base_url,
            auth_token=settings.cron_secret,
            path=path,
        )


@dataclass
class TriggerResult:
    """Ergebnis von TriggerClient.invoke().

    Bei ok=True enthält payload den dekodierten JSON-Body,
    bei ok=False ist error gesetzt.
    """
    ok: bool
    payload: Any = None
    error: TriggerError | None = None


@dataclass
class PollTaskResult:
    """Ergebnis eines Poll-Durchlaufs, wird direkt geloggt und verworfen.

    idle markiert einen Durchlauf ohne Arbeit (Zähler 0) – der wird
    nur auf DEBUG geloggt.
    """
    ok: bool
    summary: str | None = None
    error: TriggerError | None = None
    idle: bool = False


class ScheduleExecuteResponse(BaseModel):
    """Antwort von GET /api/schedules/execute."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    executed_count: int = Field(default=0, alias="executedCount")


class OutlookPollResponse(BaseModel):
    """Antwort von GET /api/webhooks/poll/outlook."""
    model_config = ConfigDict(extra="ignore")

    total: int = 0
    successful: int = 0
