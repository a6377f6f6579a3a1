"""Injected sinks for usage accounting and pipeline telemetry.

The pipeline never touches process-wide counters directly; it reports
through these interfaces.
"""

from datetime import UTC, datetime
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field

from guider.guard.content_guard import GuardVerdict
from guider.llm.models import TierAttempt


class UsageRecord(BaseModel):
    """Append-only accounting entry for one upstream completion."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    conversation_id: str = Field(description="Conversation the turn belongs to")
    message_id: str | None = Field(default=None, description="Assistant message id")
    model_used: str = Field(description="Model reported by upstream")
    requested_model: str | None = Field(default=None, description="Model the tier asked for")
    tier: str = Field(description="Tier the fallback policy called")
    prompt_tokens: int = Field(default=0)
    completion_tokens: int = Field(default=0)
    total_tokens: int = Field(default=0)
    cost_credits: float = Field(default=0.0)
    is_free_model: bool = Field(default=False)
    processing_time_ms: int = Field(default=0)
    guard_corrected: bool = Field(default=False)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class UsageSink(Protocol):
    """Receives one record per completed upstream call."""

    def record(self, record: UsageRecord) -> None: ...


class PipelineObserver(Protocol):
    """Receives telemetry events from the pipeline and fallback policy."""

    def on_attempt(self, attempt: TierAttempt) -> None: ...

    def on_verdict(self, direction: str, verdict: GuardVerdict) -> None: ...

    def on_exhausted(self, attempts: list[TierAttempt]) -> None: ...


class NullObserver:
    """Observer that discards every event."""

    def on_attempt(self, attempt: TierAttempt) -> None:
        pass

    def on_verdict(self, direction: str, verdict: GuardVerdict) -> None:
        pass

    def on_exhausted(self, attempts: list[TierAttempt]) -> None:
        pass


class InMemoryUsageSink:
    """List-backed usage sink for development and tests."""

    def __init__(self) -> None:
        self.records: list[UsageRecord] = []

    def record(self, record: UsageRecord) -> None:
        self.records.append(record)
