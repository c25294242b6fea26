"""OpenTelemetry adapter for query metrics."""

import logging
from dataclasses import dataclass
from importlib import import_module
from typing import Any

from mmrag.application.ports.telemetry_port import TelemetryPort

logger = logging.getLogger(__name__)


@dataclass
class OtelConfig:
    """Configuration for OpenTelemetry."""

    service_name: str = "mmrag-query"
    otlp_endpoint: str | None = None  # e.g., "http://localhost:4317"
    environment: str = "production"
    enable_console: bool = False  # Debug: print metrics to console


class OpenTelemetryAdapter(TelemetryPort):
    """OpenTelemetry adapter for query metrics.

    Metrics recorded by the query pipeline:
    - rag.queries.total (counter), tagged with the outcome
    - rag.query.latency_ms (histogram)
    - rag.fragments.retrieved (histogram)

    Metrics become no-ops when opentelemetry-sdk is not installed.
    """

    def __init__(self, cfg: OtelConfig) -> None:
        self._cfg = cfg
        self._meter: Any | None = None
        self._counters: dict[str, Any] = {}
        self._histograms: dict[str, Any] = {}
        self._init_otel()

    @property
    def enabled(self) -> bool:
        return self._meter is not None

    def _init_otel(self) -> None:
        """Set up a meter provider with OTLP and/or console readers."""
        try:
            otel_sdk = import_module("opentelemetry.sdk.metrics")
            otel_export = import_module("opentelemetry.sdk.metrics.export")
            otel_metrics = import_module("opentelemetry.metrics")
            otel_resources = import_module("opentelemetry.sdk.resources")
        except ImportError:
            logger.info("opentelemetry-sdk not installed; metrics disabled")
            self._meter = None
            return

        resource = otel_resources.Resource.create(
            {
                "service.name": self._cfg.service_name,
                "deployment.environment": self._cfg.environment,
            }
        )

        readers = []
        if self._cfg.otlp_endpoint:
            otel_otlp = import_module("opentelemetry.exporter.otlp.proto.grpc.metric_exporter")
            exporter = otel_otlp.OTLPMetricExporter(endpoint=self._cfg.otlp_endpoint)
            readers.append(otel_export.PeriodicExportingMetricReader(exporter))
        if self._cfg.enable_console:
            exporter = otel_export.ConsoleMetricExporter()
            readers.append(otel_export.PeriodicExportingMetricReader(exporter))

        provider = otel_sdk.MeterProvider(resource=resource, metric_readers=readers)
        otel_metrics.set_meter_provider(provider)
        self._meter = otel_metrics.get_meter(__name__)

    def incr(self, name: str, tags: dict) -> None:
        """Increment a counter metric.

        Examples:
            - incr("rag.queries.total", {"status": "success"})
            - incr("rag.queries.total", {"status": "RetrievalUnavailable"})
        """
        if self._meter is None:
            return
        try:
            if name not in self._counters:
                self._counters[name] = self._meter.create_counter(
                    name=name,
                    description=f"Counter for {name}",
                )
            self._counters[name].add(1, attributes=tags)
        except Exception as ex:  # noqa: BLE001
            # never fail a query because of metrics
            logger.warning("Failed to record counter %s: %s", name, ex)

    def observe(self, name: str, value: float, tags: dict) -> None:
        """Record a value on a histogram.

        Examples:
            - observe("rag.query.latency_ms", 123.45, {"status": "success"})
            - observe("rag.fragments.retrieved", 5, {"status": "success"})
        """
        if self._meter is None:
            return
        try:
            if name not in self._histograms:
                self._histograms[name] = self._meter.create_histogram(
                    name=name,
                    description=f"Histogram for {name}",
                )
            self._histograms[name].record(value, attributes=tags)
        except Exception as ex:  # noqa: BLE001
            logger.warning("Failed to record histogram %s: %s", name, ex)
