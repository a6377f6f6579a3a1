"""FastAPI application entry point.

Configures the application with logging, exception handling, metrics,
health checks and the completion routes.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from guider import __version__
from guider.api.routes import router
from guider.config import get_settings
from guider.context.archive import ArchivePersonaResolver
from guider.context.sources import ConversationStore
from guider.exceptions import ErrorCode, GuiderError
from guider.guard.content_guard import ContentGuard
from guider.llm.client import OpenRouterClient
from guider.logging_config import get_logger, setup_logging
from guider.observability.metrics import (
    MetricsMiddleware,
    PrometheusObserver,
    PrometheusUsageSink,
    get_metrics,
    get_metrics_content_type,
)
from guider.pipeline.completion import CompletionPipeline
from guider.pipeline.factory import build_pipeline

logger = get_logger(__name__)

_STATUS_BY_CODE: dict[str, int] = {
    ErrorCode.VALIDATION_ERROR.value: 400,
    ErrorCode.CONVERSATION_NOT_FOUND.value: 404,
    ErrorCode.LLM_RATE_LIMIT.value: 429,
    ErrorCode.FALLBACK_EXHAUSTED.value: 503,
    ErrorCode.LLM_TIMEOUT.value: 504,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Wires the pipeline when a conversation store is attached and none was
    injected. A missing API key aborts startup.
    """
    # Startup
    settings = get_settings()
    setup_logging(level=settings.log_level)
    logger.info(
        "Starting Guider",
        extra={
            "version": __version__,
            "environment": settings.environment.value,
        },
    )

    owned: list[OpenRouterClient | ArchivePersonaResolver] = []
    store: ConversationStore | None = app.state.store
    if app.state.pipeline is None and store is not None:
        client = OpenRouterClient(settings.llm)
        resolver = ArchivePersonaResolver(settings.archive)
        owned.extend([client, resolver])
        app.state.llm_client = client
        app.state.pipeline = build_pipeline(
            store,
            settings,
            persona_resolver=resolver,
            usage_sink=PrometheusUsageSink(),
            observer=PrometheusObserver(),
            client=client,
        )
    elif app.state.pipeline is None:
        logger.warning("No conversation store attached, completion routes disabled")

    try:
        yield
    finally:
        # Shutdown
        for resource in owned:
            await resource.close()
        logger.info("Shutting down Guider")


def create_app(
    store: ConversationStore | None = None,
    pipeline: CompletionPipeline | None = None,
    llm_client: OpenRouterClient | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        store: Conversation store; the pipeline is built from it at startup.
        pipeline: Ready pipeline, used as is.
        llm_client: Upstream client reported by readiness and the models route.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="Guider",
        description="Guarded career-guidance completion pipeline with tiered model fallback",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.store = store
    app.state.pipeline = pipeline
    app.state.llm_client = llm_client
    app.state.guard = ContentGuard()

    # Register exception handlers
    app.add_exception_handler(GuiderError, guider_exception_handler)

    app.add_middleware(MetricsMiddleware)

    # Register routes
    app.add_api_route("/health", health_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/health/ready", readiness_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/health/live", liveness_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/metrics", metrics_endpoint, methods=["GET"], tags=["Observability"])
    app.include_router(router)

    return app


async def guider_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle GuiderError exceptions.

    Converts exceptions to structured JSON responses.
    """
    if not isinstance(exc, GuiderError):
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": ErrorCode.INTERNAL_ERROR.value,
                    "message": str(exc),
                    "details": {},
                }
            },
        )

    logger.error(
        f"Request failed: {exc.message}",
        extra={
            "error_code": exc.code.value,
            "path": request.url.path,
            "details": exc.details,
        },
    )

    return JSONResponse(
        status_code=_get_status_code(exc.code.value),
        content=exc.to_dict(),
    )


def _get_status_code(error_code: str) -> int:
    """Map error code to HTTP status code."""
    return _STATUS_BY_CODE.get(error_code, 500)


async def health_check() -> dict[str, Any]:
    """Basic health check endpoint.

    Returns:
        Health status with version and timestamp.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.now(UTC).isoformat(),
    }


async def readiness_check(request: Request) -> dict[str, Any]:
    """Kubernetes readiness probe.

    Returns:
        Readiness status with component checks.
    """
    checks: dict[str, str] = {
        "config": "ok",
        "pipeline": "ok" if request.app.state.pipeline is not None else "not_configured",
    }

    all_ok = all(v == "ok" for v in checks.values())

    result: dict[str, Any] = {
        "status": "ready" if all_ok else "not_ready",
        "checks": checks,
        "timestamp": datetime.now(UTC).isoformat(),
    }

    llm_client: OpenRouterClient | None = request.app.state.llm_client
    if llm_client is not None:
        result["upstream"] = llm_client.health_status()

    return result


async def liveness_check() -> dict[str, str]:
    """Kubernetes liveness probe.

    Returns:
        Liveness status.
    """
    return {"status": "alive"}


async def metrics_endpoint() -> Response:
    """Prometheus scrape endpoint."""
    return Response(content=get_metrics(), media_type=get_metrics_content_type())


# Create the application instance
app = create_app()
