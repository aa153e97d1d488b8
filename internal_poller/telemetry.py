"""OpenTelemetry-Initialisierung für den Server-Prozess.

Konfiguriert nur das SDK (Exporter, Batch-Processor, Sampler, Resource);
Export und Batching selbst übernimmt die Library.  Fehler bei der
Initialisierung sind nie fatal – der Prozess läuft dann ohne Traces.
"""

from __future__ import annotations

from dataclasses import dataclass

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased

from internal_poller.config import Settings
from internal_poller.logging_config import get_logger

logger = get_logger("telemetry")

SERVICE_NAMESPACE = "sim-ai-platform"


@dataclass(frozen=True)
class BatchSettings:
    """Parameter des BatchSpanProcessors."""
    max_queue_size: int = 2048
    max_export_batch_size: int = 512
    scheduled_delay_millis: int = 5000
    export_timeout_millis: int = 30000


@dataclass(frozen=True)
class TelemetryConfig:
    endpoint: str
    service_name: str
    service_version: str
    environment: str
    sample_ratio: float
    batch: BatchSettings = BatchSettings()

    @classmethod
    def from_settings(cls, settings: Settings) -> TelemetryConfig:
        return cls(
            endpoint=settings.telemetry_endpoint,
            service_name=settings.service_name,
            service_version=settings.service_version,
            environment=settings.app_env.value,
            sample_ratio=settings.telemetry_sample_ratio,
        )


def build_tracer_provider(config: TelemetryConfig) -> TracerProvider:
    """Baut den TracerProvider mit OTLP/HTTP-Exporter und Batch-Processor."""
    resource = Resource.create(
        {
            "service.name": config.service_name,
            "service.version": config.service_version,
            "service.namespace": SERVICE_NAMESPACE,
            "deployment.environment": config.environment,
        }
    )
    # Root-Spans werden gesampelt, Kind-Spans folgen der Entscheidung des Parents
    sampler = ParentBased(root=TraceIdRatioBased(config.sample_ratio))

    exporter = OTLPSpanExporter(
        endpoint=config.endpoint,
        timeout=config.batch.export_timeout_millis / 1000,
    )
    processor = BatchSpanProcessor(
        exporter,
        max_queue_size=config.batch.max_queue_size,
        max_export_batch_size=config.batch.max_export_batch_size,
        schedule_delay_millis=config.batch.scheduled_delay_millis,
        export_timeout_millis=config.batch.export_timeout_millis,
    )

    provider = TracerProvider(resource=resource, sampler=sampler)
    provider.add_span_processor(processor)
    return provider


def initialize_telemetry(
    settings: Settings,
    register_global: bool = True,
) -> TracerProvider | None:
    """Initialisiert das Tracing-SDK, falls nicht abgeschaltet.

    Args:
        settings: Anwendungseinstellungen.
        register_global: Provider global bei OpenTelemetry registrieren.
            Tests setzen False, weil der globale Provider nur einmal
            gesetzt werden kann.

    Returns:
        Der TracerProvider, oder None wenn deaktiviert oder fehlgeschlagen.
    """
    if settings.telemetry_disabled:
        logger.info("OpenTelemetry deaktiviert über TELEMETRY_DISABLED")
        return None

    if not settings.telemetry_server_side_enabled:
        logger.info("Serverseitiges OpenTelemetry in der Konfiguration deaktiviert")
        return None

    try:
        provider = build_tracer_provider(TelemetryConfig.from_settings(settings))
        if register_global:
            trace.set_tracer_provider(provider)
    except Exception as exc:
        logger.error("OpenTelemetry-Initialisierung fehlgeschlagen: %s", exc, exc_info=True)
        return None

    logger.info(
        "OpenTelemetry initialisiert: Endpoint=%s, Sampling=%.2f",
        settings.telemetry_endpoint,
        settings.telemetry_sample_ratio,
    )
    return provider


def shutdown_telemetry(provider: TracerProvider | None) -> None:
    """Exportiert ausstehende Spans und fährt den Provider herunter."""
    if provider is None:
        return
    try:
        provider.shutdown()
        logger.info("OpenTelemetry SDK heruntergefahren")
    except Exception as exc:
        logger.error("Fehler beim Herunterfahren des OpenTelemetry SDK: %s", exc)
