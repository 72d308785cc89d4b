"""One-call setup of logging, tracing and metrics from configuration."""

from __future__ import annotations

from prometheus_client import CollectorRegistry

from db_gateway.infrastructure.config import ObservabilityConfig
from db_gateway.infrastructure.logging import get_logger, setup_logging_from
from db_gateway.infrastructure.metrics import MetricsRegistry, setup_metrics_from
from db_gateway.infrastructure.tracing import setup_tracing_from


def setup_observability(
    config: ObservabilityConfig,
    registry: CollectorRegistry | None = None,
) -> MetricsRegistry:
    """
    Apply an observability config section.

    Logging is always configured. Tracing is exported only when
    ``otel_endpoint`` is set, and the metrics HTTP server only starts when
    ``metrics_port`` is set.

    Args:
        config: The ``observability`` section of the gateway config
        registry: Optional custom Prometheus registry

    Returns:
        The metrics registry operations should report to
    """
    setup_logging_from(config)
    tracer = setup_tracing_from(config)
    metrics = setup_metrics_from(config, registry)

    get_logger(__name__).info(
        "observability_configured",
        log_level=config.log_level,
        tracing=tracer is not None,
        metrics_port=config.metrics_port,
    )
    return metrics
