"""Interner Poller: stößt Schedules und Outlook-Webhooks periodisch an.

Läuft im Event-Loop des Host-Prozesses, ohne eigene Threads.  Jeder
Poll-Task hat einen eigenen, unabhängigen Intervall-Timer.  Zusätzlich
wird jeder Task kurz nach dem Start einmalig ausgeführt, versetzt
(Schedules nach 5s, Outlook nach 10s), damit die beiden Aufrufe beim
Kaltstart nicht gleichzeitig auf die App treffen.

Bewusste Einschränkungen:
- Startup-Lauf und erster Intervall-Lauf werden nicht zusammengelegt.
- Überlappende Läufe desselben Tasks werden nicht verhindert (kein
  Single-Flight).  Die Endpoints müssen doppelte Aufrufe vertragen.
- stop() bricht laufende HTTP-Aufrufe nicht ab, sondern verhindert
  nur weitere Auslösungen.

start() und stop() sind synchron und müssen aus dem Thread des
Event-Loops aufgerufen werden.
"""

from __future__ import annotations

import asyncio
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING

from internal_poller.logging_config import get_logger
from internal_poller.scheduler.tasks import OutlookPollTask, SchedulePollTask

if TYPE_CHECKING:
    from internal_poller.scheduler.tasks import PollTask

logger = get_logger("scheduler")

SCHEDULE_SLOT = "schedule"
OUTLOOK_SLOT = "outlook"


@dataclass(frozen=True)
class PollerTimings:
    """Intervalle und Startverzögerungen in Sekunden."""
    schedule_interval: float = 60.0
    outlook_interval: float = 60.0
    schedule_initial_delay: float = 5.0
    outlook_initial_delay: float = 10.0


class PollerState(str, Enum):
    """Mögliche Zustände des Pollers."""
    STOPPED = "stopped"
    RUNNING = "running"


@dataclass
class PollerStatus:
    """Momentaufnahme für Health-Check und Logs."""
    state: PollerState
    started_at: datetime | None
    recurring_timers: int
    runs_in_flight: int


class InternalPoller:
    """Zwei unabhängige Intervall-Timer für Schedule- und Outlook-Polling.

    Verwendung:
        poller = InternalPoller()
        poller.start()   # im laufenden Event-Loop
        ...
        poller.stop()

    Args:
        schedule_task: Poll-Task für Schedules (Default: SchedulePollTask()).
        outlook_task: Poll-Task für Outlook (Default: OutlookPollTask()).
        timings: Intervalle und Startverzögerungen.
        loop: Event-Loop für die Timer.  None = beim start() laufender Loop.
    """

    def __init__(
        self,
        schedule_task: PollTask | None = None,
        outlook_task: PollTask | None = None,
        timings: PollerTimings | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.timings = timings or PollerTimings()
        self._tasks: dict[str, tuple[PollTask, float]] = {
            SCHEDULE_SLOT: (
                schedule_task or SchedulePollTask(),
                self.timings.schedule_interval,
            ),
            OUTLOOK_SLOT: (
                outlook_task or OutlookPollTask(),
                self.timings.outlook_interval,
            ),
        }
        self._loop = loop
        self._active_loop: asyncio.AbstractEventLoop | None = None

        self._state = PollerState.STOPPED
        self._started_at: datetime | None = None
        # Intervall-Timer je Slot; leer genau dann, wenn gestoppt
        self._handles: dict[str, asyncio.TimerHandle] = {}
        self._startup_handles: list[asyncio.TimerHandle] = []
        # Starke Referenzen, sonst kann der GC laufende Tasks einsammeln
        self._runs: set[asyncio.Task[None]] = set()

    # --- Steuerung ---

    def start(self) -> None:
        """Startet beide Intervall-Timer und die versetzten Startläufe.

        Mehrfaches Aufrufen erzeugt keine zusätzlichen Timer.

        Raises:
            RuntimeError: Wenn weder ein Loop übergeben wurde noch einer läuft.
        """
        if self._state is PollerState.RUNNING:
            logger.warning("Internal Poller läuft bereits – start() ignoriert")
            return

        loop = self._loop or asyncio.get_running_loop()
        logger.info("Internal Poller wird gestartet...")

        self._active_loop = loop
        self._state = PollerState.RUNNING
        self._started_at = datetime.now(timezone.utc)

        now = loop.time()
        for slot, (_, interval) in self._tasks.items():
            self._arm(slot, now + interval)

        schedule_task = self._tasks[SCHEDULE_SLOT][0]
        outlook_task = self._tasks[OUTLOOK_SLOT][0]
        self._startup_handles = [
            loop.call_later(
                self.timings.schedule_initial_delay, self._fire_once, schedule_task,
            ),
            loop.call_later(
                self.timings.outlook_initial_delay, self._fire_once, outlook_task,
            ),
        ]

        logger.info("Internal Poller gestartet")
        logger.info("- Schedule-Polling: alle %gs", self.timings.schedule_interval)
        logger.info("- Outlook-Polling: alle %gs", self.timings.outlook_interval)
        logger.debug(
            "Startläufe: Schedules in %gs, Outlook in %gs",
            self.timings.schedule_initial_delay,
            self.timings.outlook_initial_delay,
        )

    def stop(self) -> None:
        """Stoppt alle Timer.  Laufende Poll-Aufrufe laufen zu Ende."""
        if self._state is PollerState.STOPPED:
            logger.debug("InternalPoller.stop() aufgerufen, aber Poller ist gestoppt")
            return

        logger.info("Internal Poller wird gestoppt...")

        for handle in self._handles.values():
            handle.cancel()
        self._handles.clear()

        for handle in self._startup_handles:
            handle.cancel()
        self._startup_handles.clear()

        self._state = PollerState.STOPPED
        self._started_at = None
        logger.info("Internal Poller gestoppt")

    # --- Status ---

    @property
    def is_running(self) -> bool:
        return self._state is PollerState.RUNNING

    @property
    def schedule_handle(self) -> asyncio.TimerHandle | None:
        return self._handles.get(SCHEDULE_SLOT)

    @property
    def outlook_handle(self) -> asyncio.TimerHandle | None:
        return self._handles.get(OUTLOOK_SLOT)

    @property
    def status(self) -> PollerStatus:
        return PollerStatus(
            state=self._state,
            started_at=self._started_at,
            recurring_timers=len(self._handles),
            runs_in_flight=len(self._runs),
        )

    # --- Timer-Callbacks ---

    @property
    def _event_loop(self) -> asyncio.AbstractEventLoop:
        if self._active_loop is None:
            raise RuntimeError("InternalPoller wurde noch nicht gestartet")
        return self._active_loop

    def _next_deadline(self, deadline: float, interval: float) -> float:
        """Nächste Auslösung nach deadline, die noch in der Zukunft liegt.

        Stand der Loop länger als ein Intervall, werden die verpassten
        Ticks übersprungen statt nacheinander nachgeholt.
        """
        next_deadline = deadline + interval
        now = self._event_loop.time()
        if next_deadline <= now:
            missed = math.floor((now - deadline) / interval)
            next_deadline = deadline + (missed + 1) * interval
            logger.debug("%d verpasste(r) Tick(s) übersprungen", missed)
        return next_deadline

    def _arm(self, slot: str, deadline: float) -> None:
        """Plant die nächste Auslösung eines Intervall-Timers."""
        self._handles[slot] = self._event_loop.call_at(
            deadline, self._on_tick, slot, deadline,
        )

    def _on_tick(self, slot: str, deadline: float) -> None:
        if self._state is not PollerState.RUNNING:
            return
        task, interval = self._tasks[slot]
        # Erst neu planen, dann ausführen – ein hängender Lauf verzögert
        # den nächsten Tick nicht
        self._arm(slot, self._next_deadline(deadline, interval))
        self._spawn(task)

    def _fire_once(self, task: PollTask) -> None:
        if self._state is not PollerState.RUNNING:
            return
        self._spawn(task)

    def _spawn(self, task: PollTask) -> None:
        run = self._event_loop.create_task(task.run(), name=f"poll-{task.name}")
        self._runs.add(run)
        run.add_done_callback(self._on_run_done)

    def _on_run_done(self, run: asyncio.Task[None]) -> None:
        """Callback für Poll-Läufe: loggt Fehler, die run() doch entkommen."""
        self._runs.discard(run)
        if run.cancelled():
            return
        exc = run.exception()
        if exc is not None:
            logger.error(
                "Poll-Lauf %s unerwartet beendet: %s: %s",
                run.get_name(), type(exc).__name__, exc,
            )
