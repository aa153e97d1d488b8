from __future__ import annotations

import logging

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ParentBased

from internal_poller import telemetry
from internal_poller.telemetry import (
    SERVICE_NAMESPACE,
    TelemetryConfig,
    initialize_telemetry,
    shutdown_telemetry,
)


@pytest.fixture
def providers():
    created: list[TracerProvider] = []
    yield created
    for provider in created:
        provider.shutdown()


def test_disabled_returns_none(make_settings, caplog) -> None:
    caplog.set_level(logging.INFO, logger="internal_poller")

    assert initialize_telemetry(make_settings(telemetry_disabled=True)) is None
    assert any("TELEMETRY_DISABLED" in r.getMessage() for r in caplog.records)


def test_server_side_disabled_returns_none(make_settings) -> None:
    settings = make_settings(telemetry_disabled=False, telemetry_server_side_enabled=False)

    assert initialize_telemetry(settings) is None


def test_provider_is_configured_from_settings(make_settings, providers) -> None:
    settings = make_settings(
        telemetry_disabled=False,
        telemetry_endpoint="http://collector:4318/v1/traces",
        app_env="production",
    )

    provider = initialize_telemetry(settings, register_global=False)
    assert provider is not None
    providers.append(provider)

    attributes = provider.resource.attributes
    assert attributes["service.name"] == "sim-studio"
    assert attributes["service.version"] == "0.1.0"
    assert attributes["service.namespace"] == SERVICE_NAMESPACE
    assert attributes["deployment.environment"] == "production"

    assert isinstance(provider.sampler, ParentBased)

    span_processors = getattr(provider._active_span_processor, "_span_processors", ())
    assert any(isinstance(p, BatchSpanProcessor) for p in span_processors)


def test_config_carries_batch_defaults(make_settings) -> None:
    config = TelemetryConfig.from_settings(make_settings())

    assert config.sample_ratio == 0.1
    assert config.batch.max_queue_size == 2048
    assert config.batch.max_export_batch_size == 512
    assert config.batch.scheduled_delay_millis == 5000
    assert config.batch.export_timeout_millis == 30000


def test_initialization_error_is_logged_not_raised(make_settings, monkeypatch, caplog) -> None:
    caplog.set_level(logging.ERROR, logger="internal_poller")

    def broken(config):
        raise ValueError("ungültiger Endpoint")

    monkeypatch.setattr(telemetry, "build_tracer_provider", broken)

    assert initialize_telemetry(make_settings(telemetry_disabled=False)) is None
    assert any("ungültiger Endpoint" in r.getMessage() for r in caplog.records)


def test_shutdown_of_missing_provider_is_noop() -> None:
    shutdown_telemetry(None)


def test_shutdown_calls_provider_shutdown() -> None:
    class Provider:
        calls = 0

        def shutdown(self) -> None:
            self.calls += 1

    provider = Provider()
    shutdown_telemetry(provider)

    assert provider.calls == 1
