"""Trigger-Client für die internen HTTP-Endpoints.

Öffentliche API:
    TriggerClient    – Bearer-authentifizierter GET, Ergebnis als TriggerResult
    TriggerConfig    – Ziel-URL und Token eines Aufrufs
    TriggerResult, PollTaskResult, ScheduleExecuteResponse, OutlookPollResponse

Exceptions:
    TriggerError, TriggerConfigError, TriggerTransportError,
    TriggerRejectedError, TriggerPayloadError
"""

from internal_poller.trigger.client import TriggerClient
from internal_poller.trigger.exceptions import (
    TriggerConfigError,
    TriggerError,
    TriggerPayloadError,
    TriggerRejectedError,
    TriggerTransportError,
)
from internal_poller.trigger.models import (
    OutlookPollResponse,
    PollTaskResult,
    ScheduleExecuteResponse,
    TriggerConfig,
    TriggerResult,
)

__all__ = [
    # Client
    "TriggerClient",
    # Modelle
    "OutlookPollResponse",
    "PollTaskResult",
    "ScheduleExecuteResponse",
    "TriggerConfig",
    "TriggerResult",
    # Exceptions
    "TriggerConfigError",
    "TriggerError",
    "TriggerPayloadError",
    "TriggerRejectedError",
    "TriggerTransportError",
]
