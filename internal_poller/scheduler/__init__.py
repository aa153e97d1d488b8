"""Scheduler – periodisches Anstoßen der internen Trigger-Endpoints.

Öffentliche API:
- InternalPoller: Zwei unabhängige Intervall-Timer + versetzte Startläufe
- PollerState / PollerStatus / PollerTimings
- PollTask, SchedulePollTask, OutlookPollTask: Ein Trigger-Aufruf pro Lauf
"""

from internal_poller.scheduler.poller import (
    InternalPoller,
    PollerState,
    PollerStatus,
    PollerTimings,
)
from internal_poller.scheduler.tasks import (
    OutlookPollTask,
    PollTask,
    SchedulePollTask,
    guarded,
    load_trigger_config,
)

__all__ = [
    "InternalPoller",
    "OutlookPollTask",
    "PollTask",
    "PollerState",
    "PollerStatus",
    "PollerTimings",
    "SchedulePollTask",
    "guarded",
    "load_trigger_config",
]
