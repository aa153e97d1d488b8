"""Poll-Tasks: ein Trigger-Aufruf pro Durchlauf, Ergebnis wird geloggt.

Zwei Instanzen:
- SchedulePollTask: GET /api/schedules/execute  → {executedCount}
- OutlookPollTask:  GET /api/webhooks/poll/outlook → {total, successful}

poll_once() ist der eigentliche Ablauf und darf fehlschlagen.
run() ist der Einstiegspunkt für den Scheduler und wirft nie –
der @guarded-Decorator fängt und loggt alles, damit kein Fehler
eines Durchlaufs die Timer des Pollers beendet.
"""

from __future__ import annotations

import asyncio
import functools
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable

from internal_poller.config import Settings
from internal_poller.logging_config import get_logger
from internal_poller.trigger.client import TriggerClient
from internal_poller.trigger.exceptions import TriggerConfigError
from internal_poller.trigger.models import (
    OutlookPollResponse,
    PollTaskResult,
    ScheduleExecuteResponse,
    TriggerConfig,
)

logger = get_logger("scheduler")

ConfigLoader = Callable[[str], TriggerConfig]

SCHEDULE_EXECUTE_PATH = "/api/schedules/execute"
OUTLOOK_POLL_PATH = "/api/webhooks/poll/outlook"


def load_trigger_config(path: str) -> TriggerConfig:
    """Liest die Umgebung bei jedem Aufruf neu ein (kein Caching).

    Änderungen an APP_BASE_URL oder CRON_SECRET greifen damit ab dem
    nächsten Durchlauf ohne Neustart.
    """
    return TriggerConfig.from_settings(Settings(), path)


def guarded(
    func: Callable[..., Awaitable[Any]],
) -> Callable[..., Awaitable[None]]:
    """Fehlergrenze für Poll-Tasks: jede Exception wird geloggt, nie weitergereicht."""

    @functools.wraps(func)
    async def wrapper(self: PollTask, *args: Any, **kwargs: Any) -> None:
        try:
            await func(self, *args, **kwargs)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.exception("Unerwarteter Fehler bei %s: %s", self.label, exc)

    return wrapper


class PollTask(ABC):
    """Basisklasse für einen Poll-Task.

    Unterklassen setzen name, label und path und implementieren
    interpret() für ihren Antwort-Body.

    Args:
        client: TriggerClient für den HTTP-Aufruf (Default: neuer Client).
        config_loader: Liefert pro Durchlauf die TriggerConfig für einen Pfad.
    """

    name: str = ""
    label: str = ""
    path: str = ""

    def __init__(
        self,
        client: TriggerClient | None = None,
        config_loader: ConfigLoader = load_trigger_config,
    ) -> None:
        self._client = client or TriggerClient()
        self._config_loader = config_loader

    async def poll_once(self) -> PollTaskResult:
        """Ein Durchlauf: Config lesen, Endpoint aufrufen, Antwort interpretieren."""
        config = self._config_loader(self.path)
        logger.debug("%s: Polling...", self.label)
        result = await self._client.invoke(config)
        if not result.ok:
            return PollTaskResult(ok=False, error=result.error)
        return self.interpret(result.payload)

    @abstractmethod
    def interpret(self, payload: Any) -> PollTaskResult:
        """Wertet den dekodierten Antwort-Body aus."""

    @guarded
    async def run(self) -> None:
        """Einstiegspunkt für den Scheduler – wirft nie."""
        result = await self.poll_once()
        self._log_result(result)

    def _log_result(self, result: PollTaskResult) -> None:
        if result.error is not None:
            if isinstance(result.error, TriggerConfigError):
                # Fehlende Konfiguration ist kein Fehler des Endpoints
                logger.warning(
                    "%s – %s wird übersprungen", result.error, self.label,
                )
            else:
                logger.error("%s fehlgeschlagen: %s", self.label, result.error)
            return

        if result.idle:
            logger.debug("%s abgeschlossen: %s", self.label, result.summary)
        else:
            logger.info("%s abgeschlossen: %s", self.label, result.summary)


class SchedulePollTask(PollTask):
    """Stößt die Ausführung fälliger Workflow-Schedules an."""

    name = "schedules"
    label = "Schedule-Polling"
    path = SCHEDULE_EXECUTE_PATH

    def interpret(self, payload: Any) -> PollTaskResult:
        data = ScheduleExecuteResponse.model_validate(payload)
        if data.executed_count > 0:
            return PollTaskResult(
                ok=True,
                summary=f"{data.executed_count} Workflow(s) ausgeführt",
            )
        return PollTaskResult(ok=True, summary="keine fälligen Workflows", idle=True)


class OutlookPollTask(PollTask):
    """Lässt die Outlook-Webhooks auf neue E-Mails prüfen."""

    name = "outlook"
    label = "Outlook-Polling"
    path = OUTLOOK_POLL_PATH

    def interpret(self, payload: Any) -> PollTaskResult:
        data = OutlookPollResponse.model_validate(payload)
        if data.total > 0:
            return PollTaskResult(
                ok=True,
                summary=(
                    f"{data.total} Webhook(s) geprüft, "
                    f"{data.successful} erfolgreich"
                ),
            )
        return PollTaskResult(ok=True, summary="keine aktiven Webhooks", idle=True)
