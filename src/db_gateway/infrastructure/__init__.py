"""Infrastructure layer - cross-cutting concerns."""

from db_gateway.infrastructure.config import Config, get_config
from db_gateway.infrastructure.logging import setup_logging, setup_logging_from, get_logger
from db_gateway.infrastructure.metrics import (
    setup_metrics,
    setup_metrics_from,
    get_metrics,
    MetricsRegistry,
)
from db_gateway.infrastructure.tracing import setup_tracing, setup_tracing_from, get_tracer, trace_span
from db_gateway.infrastructure.observability import setup_observability

__all__ = [
    "Config",
    "get_config",
    "setup_logging",
    "setup_logging_from",
    "get_logger",
    "setup_metrics",
    "setup_metrics_from",
    "get_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "setup_tracing_from",
    "get_tracer",
    "trace_span",
    "setup_observability",
]
