"""Pipeline data models."""

from pydantic import BaseModel, ConfigDict, Field

from guider.guard.content_guard import GuardVerdict
from guider.llm.models import TierAttempt, TokenUsage


class PipelineResult(BaseModel):
    """Outcome of one user turn.

    Attributes:
        content: Text to show the user.
        model: Model reported by upstream, None when no call was made.
        tier: Tier the fallback policy succeeded on.
        usage: Token usage of the upstream call (zero without a call).
        processing_time_ms: Duration of the successful upstream attempt.
        total_time_ms: Duration of the whole turn.
        guard_corrected: Model output was replaced by a substitute.
        verdict: Deciding guard verdict (input verdict when rejected).
        attempts: Fallback attempt log.
        finish_reason: Upstream finish reason.
    """

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="Response text")
    model: str | None = Field(default=None, description="Serving model")
    tier: str | None = Field(default=None, description="Serving tier")
    usage: TokenUsage = Field(default_factory=TokenUsage)
    processing_time_ms: int = Field(default=0, description="Upstream attempt time")
    total_time_ms: int = Field(default=0, description="Whole turn time")
    guard_corrected: bool = Field(default=False, description="Output was substituted")
    verdict: GuardVerdict = Field(description="Deciding guard verdict")
    attempts: tuple[TierAttempt, ...] = Field(default=(), description="Attempt log")
    finish_reason: str | None = Field(default=None, description="Finish reason")

    @property
    def rejected(self) -> bool:
        """Input was refused before any upstream call."""
        return self.model is None and not self.verdict.allowed
