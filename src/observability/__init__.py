"""
Observability module for agent selection.

Provides Prometheus metrics and OpenTelemetry tracing helpers.
"""

from .tracing import (
    setup_tracing,
    create_span,
    get_current_span,
    get_tracer,
    shutdown_tracing,
)
from .metrics import (
    record_selection,
    record_routing_decision,
    track_time,
    export_metrics,
)

__all__ = [
    'setup_tracing',
    'create_span',
    'get_current_span',
    'get_tracer',
    'shutdown_tracing',
    'record_selection',
    'record_routing_decision',
    'track_time',
    'export_metrics',
]
