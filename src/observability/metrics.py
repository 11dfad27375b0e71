"""Prometheus Metrics for Agent Selection

This module exports Prometheus metrics for selector latency, selection
outcomes, embedding cache behaviour and conversation routing decisions.
"""

from prometheus_client import (
    Counter,
    Histogram,
    Gauge,
    generate_latest,
    REGISTRY,
)
import asyncio
import time
from functools import wraps


# ============================================================================
# SELECTION METRICS
# ============================================================================

selection_requests_total = Counter(
    "agent_selection_requests_total",
    "Total number of agent selection calls",
    ["selector", "outcome"],  # outcome: matched/fallback/low_confidence/empty/single
)

selection_latency = Histogram(
    "agent_selection_latency_seconds",
    "Time to select an agent",
    ["selector"],
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)

selection_confidence = Histogram(
    "agent_selection_confidence",
    "Confidence score of selected agents",
    ["selector"],
    buckets=[0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0],
)

# ============================================================================
# EMBEDDING CACHE METRICS
# ============================================================================

embedding_cache_operations_total = Counter(
    "agent_selection_embedding_cache_operations_total",
    "Agent embedding cache lookups",
    ["result"],  # hit/miss
)

embedding_cache_size = Gauge(
    "agent_selection_embedding_cache_size",
    "Number of agent embeddings currently cached across all selectors",
)

embedding_batch_requests_total = Counter(
    "agent_selection_embedding_batch_requests_total",
    "Batch embedding calls made to populate the agent cache",
)

# ============================================================================
# ROUTING METRICS
# ============================================================================

routing_decisions_total = Counter(
    "agent_selection_routing_decisions_total",
    "Conversation routing decisions",
    ["decision"],  # forced/first_turn/kept/switched/empty
)


# ============================================================================
# HELPER FUNCTIONS & DECORATORS
# ============================================================================


def record_selection(selector: str, result, outcome: str) -> None:
    """
    Record the outcome of a selection call.

    Args:
        selector: Selector label (keyword, embedding, hybrid)
        result: SelectionResult returned by the selector
        outcome: Outcome label
    """
    selection_requests_total.labels(selector=selector, outcome=outcome).inc()
    if result.selected_agent is not None:
        selection_confidence.labels(selector=selector).observe(result.confidence_score)


def record_routing_decision(decision: str) -> None:
    routing_decisions_total.labels(decision=decision).inc()


def track_time(histogram, **labels):
    """
    Decorator to record execution time of sync or async functions.

    Args:
        histogram: Prometheus Histogram to record time
        **labels: Label values applied to the histogram

    Example:
        @track_time(selection_latency, selector="keyword")
        async def select_agent(...):
            ...
    """
    target = histogram.labels(**labels) if labels else histogram

    def decorator(func):
        if asyncio.iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                start_time = time.perf_counter()
                try:
                    return await func(*args, **kwargs)
                finally:
                    target.observe(time.perf_counter() - start_time)

            return async_wrapper

        @wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                target.observe(time.perf_counter() - start_time)

        return wrapper

    return decorator


def export_metrics() -> bytes:
    """Render all registered metrics in Prometheus text format"""
    return generate_latest(REGISTRY)
