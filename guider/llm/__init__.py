"""Upstream completion module."""

from guider.llm.client import CompletionClient, OpenRouterClient
from guider.llm.models import (
    CompletionRequest,
    CompletionResult,
    GenerationParams,
    Message,
    Role,
    TierAttempt,
    TokenUsage,
)
from guider.llm.tiers import ModelTier, TierName, build_tiers, is_free_model

__all__ = [
    "CompletionClient",
    "CompletionRequest",
    "CompletionResult",
    "GenerationParams",
    "Message",
    "ModelTier",
    "OpenRouterClient",
    "Role",
    "TierAttempt",
    "TierName",
    "TokenUsage",
    "build_tiers",
    "is_free_model",
]
