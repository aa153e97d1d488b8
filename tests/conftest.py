"""Gemeinsame Fixtures: virtuelle Uhr, Stub-Tasks, saubere Umgebung."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

import httpx
import pytest

from internal_poller.config import Settings

# Variablen, die Settings() aus der Umgebung lesen würde
ENV_VARS = (
    "APP_BASE_URL",
    "CRON_SECRET",
    "ENABLE_POLLING",
    "APP_ENV",
    "APP_RUNTIME",
    "TELEMETRY_ENDPOINT",
    "TELEMETRY_DISABLED",
    "TELEMETRY_SERVER_SIDE_ENABLED",
    "TELEMETRY_SAMPLE_RATIO",
    "LOG_LEVEL",
    "LOG_DIR",
)


class FakeTimer:
    """Ersatz für asyncio.TimerHandle auf der virtuellen Uhr."""

    def __init__(self, when: float, callback: Callable[..., Any], args: tuple) -> None:
        self._when = when
        self._callback = callback
        self._args = args
        self._cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled

    def when(self) -> float:
        return self._when

    def fire(self) -> None:
        self.fired = True
        self._callback(*self._args)


class FakeLoop:
    """Event-Loop-Stellvertreter mit virtueller Uhr.

    Timer werden erst durch advance() ausgelöst.  Erzeugte Tasks laufen
    im echten Event-Loop des Tests.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self.timers: list[FakeTimer] = []

    def time(self) -> float:
        return self.now

    def call_at(self, when: float, callback: Callable[..., Any], *args: Any) -> FakeTimer:
        timer = FakeTimer(when, callback, args)
        self.timers.append(timer)
        return timer

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> FakeTimer:
        return self.call_at(self.now + delay, callback, *args)

    def create_task(self, coro: Any, *, name: str | None = None) -> asyncio.Task:
        return asyncio.get_running_loop().create_task(coro, name=name)

    @property
    def pending(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.fired and not t.cancelled()]

    async def advance(self, seconds: float) -> None:
        """Lässt die Uhr vorlaufen und löst fällige Timer in Reihenfolge aus."""
        target = self.now + seconds
        while True:
            due = sorted(
                (t for t in self.pending if t.when() <= target),
                key=lambda t: t.when(),
            )
            if not due:
                break
            timer = due[0]
            self.now = max(self.now, timer.when())
            timer.fire()
        self.now = target
        # Gestartete Läufe einen Moment arbeiten lassen
        for _ in range(10):
            await asyncio.sleep(0)

    def stall(self, seconds: float) -> None:
        """Blockierter Loop: die Uhr läuft weiter, ohne Timer auszulösen."""
        self.now += seconds


class CountingTask:
    """Poll-Task-Stub, der nur seine Aufrufe zählt."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.label = name
        self.calls = 0

    async def run(self) -> None:
        self.calls += 1


@pytest.fixture
def fake_loop() -> FakeLoop:
    return FakeLoop()


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Any) -> None:
    """Entfernt alle relevanten Variablen und eine eventuelle .env."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Settings lesen .env aus dem Arbeitsverzeichnis
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def make_settings(clean_env: None) -> Callable[..., Settings]:
    """Settings ohne Umgebung und ohne .env, nur mit den übergebenen Werten."""

    def _make(**overrides: Any) -> Settings:
        overrides.setdefault("telemetry_disabled", True)
        return Settings(_env_file=None, **overrides)

    return _make


@pytest.fixture
def poller_logs(caplog: pytest.LogCaptureFixture) -> pytest.LogCaptureFixture:
    caplog.set_level(logging.DEBUG, logger="internal_poller")
    return caplog


@pytest.fixture
def counting_task() -> type[CountingTask]:
    return CountingTask


@pytest.fixture
def mock_transport() -> Callable[..., httpx.MockTransport]:
    """Baut einen MockTransport, der alle Requests in calls mitschreibt."""

    def _make(
        handler: Callable[[httpx.Request], httpx.Response],
        calls: list[httpx.Request] | None = None,
    ) -> httpx.MockTransport:
        def _handle(request: httpx.Request) -> httpx.Response:
            if calls is not None:
                calls.append(request)
            return handler(request)

        return httpx.MockTransport(_handle)

    return _make
