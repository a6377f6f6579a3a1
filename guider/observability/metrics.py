"""Prometheus metrics for the completion pipeline.

Provides metrics instrumentation for:
- HTTP request latency and counts
- LLM request latency and token usage
- Fallback tier attempts and exhaustion
- Content guard verdicts
- Usage cost
"""

import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from guider.guard.content_guard import GuardVerdict
from guider.hooks import UsageRecord
from guider.llm.models import TierAttempt
from guider.logging_config import get_logger

logger = get_logger(__name__)

# HTTP Request Metrics
HTTP_REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint", "status_code"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

HTTP_REQUEST_TOTAL = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

# LLM Metrics
LLM_REQUEST_DURATION = Histogram(
    "llm_request_duration_seconds",
    "LLM request duration in seconds",
    ["model", "status"],
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
)

LLM_TOKENS_TOTAL = Counter(
    "llm_tokens_total",
    "Total LLM tokens used",
    ["model", "type"],  # "type" label values: prompt, completion
)

LLM_REQUEST_TOTAL = Counter(
    "llm_requests_total",
    "Total LLM requests",
    ["model", "status"],
)

LLM_COST_TOTAL = Counter(
    "llm_cost_credits_total",
    "Total upstream cost in credits",
    ["model"],
)

# Fallback Metrics
FALLBACK_ATTEMPTS_TOTAL = Counter(
    "fallback_attempts_total",
    "Fallback tier attempts",
    ["tier", "outcome"],
)

FALLBACK_EXHAUSTED_TOTAL = Counter(
    "fallback_exhausted_total",
    "Turns where every tier failed",
)

# Guard Metrics
GUARD_VERDICTS_TOTAL = Counter(
    "guard_verdicts_total",
    "Content guard verdicts",
    ["direction", "kind"],
)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to collect HTTP request metrics."""

    def __init__(self, app: ASGIApp) -> None:
        """Initialize the middleware."""
        super().__init__(app)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Process request and collect metrics."""
        # Skip metrics endpoint to avoid recursion
        if request.url.path == "/metrics":
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        endpoint = self._normalize_endpoint(request.url.path)

        HTTP_REQUEST_DURATION.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).observe(duration)

        HTTP_REQUEST_TOTAL.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).inc()

        return response

    def _normalize_endpoint(self, path: str) -> str:
        """Normalize endpoint path to reduce cardinality."""
        if path.startswith("/health"):
            return "/health"
        # Drop conversation ids
        if path.startswith("/api/v1/"):
            parts = path.split("/")
            if len(parts) >= 4:
                return f"/api/v1/{parts[3]}"
        return path


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    """Get the content type for metrics response."""
    return CONTENT_TYPE_LATEST


def track_llm_request(
    model: str,
    duration: float,
    prompt_tokens: int,
    completion_tokens: int,
    success: bool = True,
    cost: float = 0.0,
) -> None:
    """Track LLM request metrics.

    Args:
        model: Model that served (or was asked for) the request.
        duration: Request duration in seconds.
        prompt_tokens: Number of prompt tokens.
        completion_tokens: Number of completion tokens.
        success: Whether the request succeeded.
        cost: Upstream cost in credits.
    """
    status = "success" if success else "error"

    LLM_REQUEST_DURATION.labels(model=model, status=status).observe(duration)
    LLM_REQUEST_TOTAL.labels(model=model, status=status).inc()

    if success:
        LLM_TOKENS_TOTAL.labels(model=model, type="prompt").inc(prompt_tokens)
        LLM_TOKENS_TOTAL.labels(model=model, type="completion").inc(completion_tokens)
        if cost > 0:
            LLM_COST_TOTAL.labels(model=model).inc(cost)


def track_tier_attempt(tier: str, success: bool, error_code: str | None = None) -> None:
    """Track one fallback tier attempt.

    Args:
        tier: Tier name.
        success: Whether the attempt produced a completion.
        error_code: Error code of a failed attempt.
    """
    outcome = "success" if success else (error_code or "error")
    FALLBACK_ATTEMPTS_TOTAL.labels(tier=tier, outcome=outcome).inc()


def track_fallback_exhausted() -> None:
    """Track a turn where every tier failed."""
    FALLBACK_EXHAUSTED_TOTAL.inc()


def track_guard_verdict(direction: str, kind: str) -> None:
    """Track a content guard verdict.

    Args:
        direction: "input" or "output".
        kind: Verdict kind value.
    """
    GUARD_VERDICTS_TOTAL.labels(direction=direction, kind=kind).inc()


class PrometheusObserver:
    """Pipeline observer that feeds the Prometheus metrics."""

    def on_attempt(self, attempt: TierAttempt) -> None:
        track_tier_attempt(attempt.tier, attempt.succeeded, attempt.error_code)
        if not attempt.succeeded:
            LLM_REQUEST_TOTAL.labels(model=attempt.model, status="error").inc()
            LLM_REQUEST_DURATION.labels(model=attempt.model, status="error").observe(
                attempt.duration_ms / 1000
            )

    def on_verdict(self, direction: str, verdict: GuardVerdict) -> None:
        track_guard_verdict(direction, verdict.kind.value)

    def on_exhausted(self, attempts: list[TierAttempt]) -> None:
        track_fallback_exhausted()
        logger.debug(
            "Fallback exhaustion recorded",
            extra={"attempts": len(attempts)},
        )


class PrometheusUsageSink:
    """Usage sink that turns usage records into token and cost metrics."""

    def record(self, record: UsageRecord) -> None:
        track_llm_request(
            model=record.model_used,
            duration=record.processing_time_ms / 1000,
            prompt_tokens=record.prompt_tokens,
            completion_tokens=record.completion_tokens,
            cost=record.cost_credits,
        )
