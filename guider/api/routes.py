"""API routes for conversation completions."""

from typing import Any, Literal

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, Field

from guider.guard.content_guard import ContentGuard, GuardVerdict
from guider.llm.client import OpenRouterClient
from guider.logging_config import get_logger
from guider.pipeline.completion import CompletionPipeline
from guider.pipeline.models import PipelineResult

logger = get_logger(__name__)


# Create router
router = APIRouter(prefix="/api/v1", tags=["Completions"])


class CompletionRequestBody(BaseModel):
    """Request body for a conversation turn."""

    content: str = Field(min_length=1, description="User message")
    user_id: str | None = Field(default=None, description="End user id")
    message_id: str | None = Field(default=None, description="Assistant message id")


class IntroductionRequestBody(BaseModel):
    """Request body for the introduction turn of a new conversation."""

    persona: dict[str, Any] = Field(description="Persona supplied at creation")
    user_id: str | None = Field(default=None, description="End user id")
    message_id: str | None = Field(default=None, description="Assistant message id")


class CompletionResponse(BaseModel):
    """Assistant reply for one turn."""

    content: str = Field(description="Response text")
    model: str | None = Field(description="Model that served the turn")
    tier: str | None = Field(description="Fallback tier that served the turn")
    usage: dict[str, Any] = Field(description="Token usage and cost")
    processing_time_ms: int = Field(description="Upstream processing time")
    guard_corrected: bool = Field(description="Output replaced by a substitute")
    verdict: str = Field(description="Deciding guard verdict")


class IntroductionResponse(CompletionResponse):
    """Introduction reply with the greeting shown as the user turn."""

    greeting: str = Field(description="User-visible greeting text")


class ModelListResponse(BaseModel):
    """Models available upstream."""

    models: list[dict[str, Any]] = Field(description="Upstream model entries")


class GuardCheckRequest(BaseModel):
    """Request body for a standalone guard check."""

    text: str = Field(description="Text to classify")
    direction: Literal["input", "output"] = Field(
        default="input",
        description="Check as user input or as model output",
    )


class GuardCheckResponse(BaseModel):
    """Guard verdict for a text."""

    kind: str = Field(description="Verdict kind")
    allowed: bool = Field(description="Whether the text passed")
    matched_rules: list[str] = Field(description="Matched rule ids")
    substitute: str | None = Field(description="Substitute response text")


def get_pipeline(request: Request) -> CompletionPipeline:
    """Resolve the configured pipeline.

    Raises:
        HTTPException: 503 when no pipeline is configured.
    """
    pipeline: CompletionPipeline | None = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        logger.warning("Completion pipeline not configured")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "error": "Completion pipeline not configured",
                "message": "The pipeline requires an upstream API key and a conversation store",
            },
        )
    return pipeline


def get_guard(request: Request) -> ContentGuard:
    """Resolve the content guard."""
    guard: ContentGuard | None = getattr(request.app.state, "guard", None)
    return guard or ContentGuard()


def get_llm_client(request: Request) -> OpenRouterClient:
    """Resolve the upstream client.

    Raises:
        HTTPException: 503 when no client is configured.
    """
    client: OpenRouterClient | None = getattr(request.app.state, "llm_client", None)
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"error": "Upstream client not configured"},
        )
    return client


@router.post(
    "/conversations/{conversation_id}/completions",
    response_model=CompletionResponse,
)
async def completion_endpoint(
    conversation_id: str,
    body: CompletionRequestBody,
    pipeline: CompletionPipeline = Depends(get_pipeline),
) -> CompletionResponse:
    """Generate the assistant reply for a user turn."""
    result = await pipeline.generate(
        conversation_id,
        body.content,
        user_id=body.user_id,
        message_id=body.message_id,
    )
    return pipeline_result_to_response(result)


@router.post(
    "/conversations/{conversation_id}/introduction",
    response_model=IntroductionResponse,
)
async def introduction_endpoint(
    conversation_id: str,
    body: IntroductionRequestBody,
    pipeline: CompletionPipeline = Depends(get_pipeline),
) -> IntroductionResponse:
    """Generate the introduction turn for a new conversation."""
    result = await pipeline.introduce(
        conversation_id,
        body.persona,
        user_id=body.user_id,
        message_id=body.message_id,
    )
    return IntroductionResponse(
        **pipeline_result_to_response(result).model_dump(),
        greeting=pipeline.introduction_greeting,
    )


@router.get("/models", response_model=ModelListResponse)
async def models_endpoint(
    client: OpenRouterClient = Depends(get_llm_client),
) -> ModelListResponse:
    """List the models available upstream."""
    return ModelListResponse(models=await client.list_models())


@router.post("/guard/check", response_model=GuardCheckResponse)
async def guard_check_endpoint(
    body: GuardCheckRequest,
    guard: ContentGuard = Depends(get_guard),
) -> GuardCheckResponse:
    """Classify a text with the content guard."""
    if body.direction == "output":
        verdict = guard.check_output(body.text)
    else:
        verdict = guard.check_input(body.text)
    return verdict_to_response(verdict)


def pipeline_result_to_response(result: PipelineResult) -> CompletionResponse:
    """Convert internal PipelineResult to API CompletionResponse."""
    return CompletionResponse(
        content=result.content,
        model=result.model,
        tier=result.tier,
        usage=result.usage.model_dump(),
        processing_time_ms=result.processing_time_ms,
        guard_corrected=result.guard_corrected,
        verdict=result.verdict.kind.value,
    )


def verdict_to_response(verdict: GuardVerdict) -> GuardCheckResponse:
    """Convert GuardVerdict to API GuardCheckResponse."""
    return GuardCheckResponse(
        kind=verdict.kind.value,
        allowed=verdict.allowed,
        matched_rules=list(verdict.matched_rules),
        substitute=verdict.substitute,
    )
