"""Prometheus metrics for the database gateway."""

from __future__ import annotations

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    Info,
    start_http_server,
    REGISTRY,
    CollectorRegistry,
)

from db_gateway.infrastructure.config import ObservabilityConfig


class MetricsRegistry:
    """Registry of all database gateway metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Operation metrics
        self.operations_total = Counter(
            "db_gateway_operations_total",
            "Total number of public operations executed",
            ["operation", "status"],  # status: success, error
            registry=self._registry,
        )

        self.operation_latency_seconds = Histogram(
            "db_gateway_operation_latency_seconds",
            "Operation body latency in seconds",
            ["operation"],  # exec, run, insert, query, ...
            buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 5.0),
            registry=self._registry,
        )

        self.operation_errors_total = Counter(
            "db_gateway_operation_errors_total",
            "Total failed operations by error kind",
            ["kind"],  # open_failed, bind_failed, query_failed, decode_failed, unexpected
            registry=self._registry,
        )

        # Session metrics
        self.connections_opened_total = Counter(
            "db_gateway_connections_opened_total",
            "Total connections opened",
            registry=self._registry,
        )

        self.sessions_active = Gauge(
            "db_gateway_sessions_active",
            "Number of statement sessions currently open",
            registry=self._registry,
        )

        # Queue metrics
        self.queue_pending = Gauge(
            "db_gateway_queue_pending",
            "Operations submitted to the default queue and not yet finished",
            registry=self._registry,
        )

        # Schema lifecycle metrics
        self.schema_events_total = Counter(
            "db_gateway_schema_events_total",
            "Schema lifecycle callbacks invoked",
            ["event"],  # create, upgrade, open, error
            registry=self._registry,
        )

        self.schema_version = Gauge(
            "db_gateway_schema_version",
            "Last schema version persisted by the gate",
            registry=self._registry,
        )

        # Gateway info
        self.info = Info(
            "db_gateway",
            "Database gateway information",
            registry=self._registry,
        )


# Global metrics registry
_metrics: MetricsRegistry | None = None


def setup_metrics(port: int = 8001, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up Prometheus metrics server.

    Args:
        port: Port for the metrics HTTP server
        registry: Optional custom registry

    Returns:
        The metrics registry
    """
    global _metrics
    if registry is not None or _metrics is None:
        _metrics = MetricsRegistry(registry)

    from db_gateway import __version__
    _metrics.info.info({
        "version": __version__,
    })

    start_http_server(port, registry=registry or REGISTRY)

    return _metrics


def setup_metrics_from(
    config: ObservabilityConfig, registry: CollectorRegistry | None = None
) -> MetricsRegistry:
    """Set up metrics from an observability config section.

    The HTTP server is only started when ``metrics_port`` is set.
    """
    if config.metrics_port is None:
        return get_metrics() if registry is None else MetricsRegistry(registry)
    return setup_metrics(config.metrics_port, registry)


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
