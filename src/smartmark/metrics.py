"""Prometheus metrics for bookmark classification and migration.

Uses the `smartmark_*` prefix for all metrics.
"""

import logging

from prometheus_client import Counter, Histogram

logger = logging.getLogger("smartmark.metrics")

__all__ = [
    "cache_events_total",
    "classifier_latency_seconds",
    "classifier_requests_total",
    "classifier_suggestions",
    "context_optimizations_total",
    "migration_moves_total",
    "migration_proposals_total",
    "record_cache_event",
    "record_classification",
    "record_context_optimization",
    "record_migration_move",
    "record_proposals",
]

# =============================================================================
# PROMETHEUS METRICS
# =============================================================================

classifier_requests_total = Counter(
    "smartmark_classifier_requests_total",
    "Total classification requests",
    ["provider", "status"],
)

classifier_latency_seconds = Histogram(
    "smartmark_classifier_latency_seconds",
    "Classification latency",
    ["provider"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
)

classifier_suggestions = Histogram(
    "smartmark_classifier_suggestions",
    "Suggestions returned per classification",
    ["provider"],
    buckets=[0, 1, 2, 3, 4, 5],
)

# outcome: full, truncated, dropped, empty
context_optimizations_total = Counter(
    "smartmark_context_optimizations_total",
    "Folder context optimization outcomes",
    ["outcome"],
)

# event: hit, miss, stale_fallback, empty_fallback, invalidate
cache_events_total = Counter(
    "smartmark_taxonomy_cache_events_total",
    "Taxonomy cache events",
    ["event"],
)

migration_moves_total = Counter(
    "smartmark_migration_moves_total",
    "Executed migration moves",
    ["status"],
)

migration_proposals_total = Counter(
    "smartmark_migration_proposals_total",
    "Migration proposals generated",
)

# =============================================================================
# HELPER FUNCTIONS
# =============================================================================


def record_classification(
    provider: str,
    success: bool,
    latency_seconds: float,
    suggestion_count: int = 0,
):
    """Record a classification event.

    Args:
        provider: Provider name (gemini, ollama, ...)
        success: True if the provider returned a parseable response
        latency_seconds: Time taken end to end
        suggestion_count: Number of validated suggestions (success only)

    Example:
        >>> record_classification("ollama", True, 1.23, suggestion_count=3)
    """
    status = "success" if success else "error"

    classifier_requests_total.labels(provider=provider, status=status).inc()
    classifier_latency_seconds.labels(provider=provider).observe(latency_seconds)

    if success:
        classifier_suggestions.labels(provider=provider).observe(suggestion_count)

    logger.debug(
        "classification_recorded",
        extra={
            "provider": provider,
            "success": success,
            "latency_seconds": latency_seconds,
            "suggestion_count": suggestion_count,
        },
    )


def record_context_optimization(outcome: str):
    """Record how the folder context was fitted to the token budget."""
    context_optimizations_total.labels(outcome=outcome).inc()


def record_cache_event(event: str):
    """Record a taxonomy cache event."""
    cache_events_total.labels(event=event).inc()


def record_migration_move(success: bool):
    """Record the outcome of one migration move."""
    migration_moves_total.labels(status="success" if success else "failed").inc()


def record_proposals(count: int):
    """Record the number of migration proposals generated."""
    if count > 0:
        migration_proposals_total.inc(count)
