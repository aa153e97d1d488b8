"""Asynchroner HTTP-Client für die internen Trigger-Endpoints.

Ein Aufruf = ein GET mit Bearer-Token.  Kein Retry, kein Backoff,
kein eigener Timeout (es gilt der httpx-Default).  Fehler werden
nicht geworfen, sondern als TriggerResult zurückgegeben, damit der
Aufrufer zwischen fehlender Konfiguration, Netzwerkfehler und
Ablehnung durch den Endpoint unterscheiden kann.
"""

from __future__ import annotations

import httpx

from internal_poller.logging_config import get_logger
from internal_poller.trigger.exceptions import (
    TriggerConfigError,
    TriggerError,
    TriggerPayloadError,
    TriggerRejectedError,
    TriggerTransportError,
)
from internal_poller.trigger.models import TriggerConfig, TriggerResult

logger = get_logger("trigger")


class TriggerClient:
    """Ruft einen Trigger-Endpoint auf und liefert den dekodierten Body.

    Verwendung:
        client = TriggerClient()
        result = await client.invoke(config)
        if result.ok:
            ...

    Args:
        transport: Optionaler httpx-Transport (z.B. httpx.MockTransport in Tests).
    """

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._transport = transport

    async def invoke(self, config: TriggerConfig) -> TriggerResult:
        """Führt den GET-Request für die übergebene Konfiguration aus."""
        try:
            payload = await self._get(config)
        except TriggerError as exc:
            return TriggerResult(ok=False, error=exc)
        return TriggerResult(ok=True, payload=payload)

    async def _get(self, config: TriggerConfig) -> object:
        """GET mit Bearer-Token, wirft TriggerError bei jedem Fehlschlag."""
        if not config.auth_token:
            # Kein Netzwerk-Call ohne Token
            raise TriggerConfigError("CRON_SECRET")

        logger.debug("GET %s", config.url)

        try:
            async with httpx.AsyncClient(transport=self._transport) as http:
                response = await http.get(
                    config.url,
                    headers={"Authorization": f"Bearer {config.auth_token}"},
                )
        except httpx.RequestError as exc:
            detail = str(exc) or "keine Details"
            raise TriggerTransportError(f"{type(exc).__name__}: {detail}") from exc

        self._raise_for_status(response)

        try:
            return response.json()
        except ValueError as exc:
            raise TriggerPayloadError(
                f"Antwort ist kein gültiges JSON: {response.text[:200]!r}",
                status_code=response.status_code,
            ) from exc

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        """Wirft TriggerRejectedError bei Nicht-2xx-Status."""
        if response.is_success:
            return
        raise TriggerRejectedError(response.status_code, response.reason_phrase)
