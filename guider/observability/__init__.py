"""Observability module for metrics and monitoring."""

from guider.observability.metrics import (
    MetricsMiddleware,
    PrometheusObserver,
    PrometheusUsageSink,
    get_metrics,
    track_fallback_exhausted,
    track_guard_verdict,
    track_llm_request,
    track_tier_attempt,
)

__all__ = [
    "MetricsMiddleware",
    "PrometheusObserver",
    "PrometheusUsageSink",
    "get_metrics",
    "track_fallback_exhausted",
    "track_guard_verdict",
    "track_llm_request",
    "track_tier_attempt",
]
