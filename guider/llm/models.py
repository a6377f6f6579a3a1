"""LLM data models."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Message role in a conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """A message in a conversation.

    Attributes:
        role: The role of the message sender.
        content: The message content.
    """

    model_config = ConfigDict(frozen=True)

    role: Role = Field(description="Message role")
    content: str = Field(description="Message content")


class GenerationParams(BaseModel):
    """Sampling parameters shared by every attempt of one turn."""

    model_config = ConfigDict(frozen=True)

    max_tokens: int = Field(default=1000, ge=1, description="Maximum tokens in response")
    temperature: float = Field(default=0.7, ge=0.0, description="Sampling temperature")
    stop: tuple[str, ...] | None = Field(default=None, description="Stop sequences")
    top_p: float | None = Field(default=None, description="Nucleus sampling")
    top_k: int | None = Field(default=None, description="Top-k sampling")
    frequency_penalty: float | None = Field(default=None, description="Frequency penalty")
    presence_penalty: float | None = Field(default=None, description="Presence penalty")


class CompletionRequest(BaseModel):
    """One attempt against one model. Built fresh per attempt.

    Attributes:
        messages: Ordered turns sent upstream.
        model: Model identifier to call.
        params: Sampling parameters.
        user: End-user id forwarded for provider-side tracking.
        tools: Never sent upstream; the client strips it.
    """

    model_config = ConfigDict(frozen=True)

    messages: tuple[Message, ...] = Field(description="Ordered turns")
    model: str = Field(description="Model identifier")
    params: GenerationParams = Field(default_factory=GenerationParams)
    user: str | None = Field(default=None, description="End-user id")
    tools: list[dict[str, Any]] | None = Field(default=None, description="Ignored")


class TokenUsage(BaseModel):
    """Token accounting for one completion."""

    model_config = ConfigDict(frozen=True)

    prompt_tokens: int = Field(default=0, description="Prompt token count")
    completion_tokens: int = Field(default=0, description="Completion token count")
    total_tokens: int = Field(default=0, description="Total token count")
    cost: float = Field(default=0.0, description="Monetary cost in provider credits")
    is_free_model: bool = Field(default=False, description="Served by a free-tier model")


class CompletionResult(BaseModel):
    """Result of a successful attempt.

    Attributes:
        content: The generated text.
        model: Model that served the request, as reported upstream.
        requested_model: Model identifier that was asked for.
        usage: Token usage and cost.
        processing_time_ms: Wall-clock time of the attempt.
        finish_reason: Normalized finish reason.
        native_finish_reason: Provider-native finish reason.
    """

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="Generated text")
    model: str = Field(description="Model used")
    requested_model: str = Field(description="Model requested")
    usage: TokenUsage = Field(default_factory=TokenUsage)
    processing_time_ms: int = Field(default=0, description="Attempt duration in ms")
    finish_reason: str | None = Field(default=None, description="Finish reason")
    native_finish_reason: str | None = Field(default=None, description="Native finish reason")


class TierAttempt(BaseModel):
    """Outcome of one tier within a fallback run.

    Attributes:
        tier: Tier position attempted.
        model: Model identifier requested.
        succeeded: Whether the attempt produced a result.
        error_code: Structured error code if the attempt failed.
        error_message: Error message if the attempt failed.
        duration_ms: Attempt duration in milliseconds.
    """

    model_config = ConfigDict(frozen=True)

    tier: str = Field(description="Tier position")
    model: str = Field(description="Model requested")
    succeeded: bool = Field(description="Attempt outcome")
    error_code: str | None = Field(default=None, description="Failure code")
    error_message: str | None = Field(default=None, description="Failure reason")
    duration_ms: int = Field(default=0, description="Attempt duration in ms")
