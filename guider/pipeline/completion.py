"""Completion pipeline orchestrator."""

import time
from typing import Any

from guider.context.assembler import ContextAssembler
from guider.exceptions import ValidationError
from guider.guard.content_guard import ContentGuard
from guider.hooks import NullObserver, PipelineObserver, UsageRecord, UsageSink
from guider.llm.fallback import FallbackOutcome, FallbackPolicy
from guider.llm.tiers import TierName
from guider.logging_config import get_logger, turn_context
from guider.pipeline.models import PipelineResult
from guider.prompts.library import PromptKey

logger = get_logger(__name__)


class CompletionPipeline:
    """Runs one user turn end to end.

    Input is guarded before any upstream call; output is guarded after
    every successful call, whatever the input verdict was. Fallback
    exhaustion propagates as FallbackExhaustedError.
    """

    def __init__(
        self,
        guard: ContentGuard,
        assembler: ContextAssembler,
        policy: FallbackPolicy,
        usage_sink: UsageSink | None = None,
        observer: PipelineObserver | None = None,
        default_tier: TierName = TierName.PRIMARY,
    ) -> None:
        """Initialize the pipeline.

        Args:
            guard: Input/output content guard.
            assembler: Builds upstream context.
            policy: Tiered completion execution.
            usage_sink: Receives one UsageRecord per upstream completion.
            observer: Telemetry sink for guard verdicts.
            default_tier: Tier each turn starts on.
        """
        self._guard = guard
        self._assembler = assembler
        self._policy = policy
        self._usage_sink = usage_sink
        self._observer = observer or NullObserver()
        self._default_tier = default_tier

    @property
    def introduction_greeting(self) -> str:
        """User-visible text of the scripted first turn."""
        return self._guard.library.text(PromptKey.INITIAL_GREETING_DISPLAY)

    async def generate(
        self,
        conversation_id: str,
        user_text: str,
        *,
        user_id: str | None = None,
        message_id: str | None = None,
    ) -> PipelineResult:
        """Produce the assistant reply for one user turn.

        Args:
            conversation_id: Conversation the turn belongs to.
            user_text: Raw user input.
            user_id: End user, forwarded upstream and used for persona lookup.
            message_id: Assistant message id for the usage record.

        Returns:
            PipelineResult with the reply or a guard substitute.

        Raises:
            ValidationError: If the user text is empty.
            ConversationNotFoundError: If the conversation does not exist.
            FallbackExhaustedError: If every tier failed.
        """
        text = (user_text or "").strip()
        if not text:
            raise ValidationError(
                "Message content is required",
                details={"conversation_id": conversation_id},
            )

        with turn_context(conversation_id=conversation_id, user_id=user_id):
            start = time.perf_counter()

            verdict = self._guard.check_input(text)
            self._observer.on_verdict("input", verdict)
            if not verdict.allowed:
                logger.warning(
                    "User input rejected before upstream call",
                    extra={
                        "verdict": verdict.kind.value,
                        "rules": verdict.matched_rules,
                    },
                )
                return PipelineResult(
                    content=verdict.substitute or "",
                    verdict=verdict,
                    total_time_ms=_elapsed_ms(start),
                )

            topic = self._guard.classify_topic(text)
            if topic:
                logger.info(
                    "Career guidance question detected",
                    extra={"topic": topic},
                )

            turns = await self._assembler.build(conversation_id, text, user_id=user_id)
            outcome = await self._policy.execute(turns, self._default_tier, user=user_id)

            return self._finish(conversation_id, outcome, message_id, start)

    async def introduce(
        self,
        conversation_id: str,
        persona: dict[str, Any],
        *,
        user_id: str | None = None,
        message_id: str | None = None,
    ) -> PipelineResult:
        """Produce the introduction turn for a newly created conversation.

        Args:
            conversation_id: The new conversation.
            persona: Persona supplied at creation.
            user_id: End user.
            message_id: Assistant message id for the usage record.

        Raises:
            FallbackExhaustedError: If every tier failed.
        """
        with turn_context(conversation_id=conversation_id, user_id=user_id):
            start = time.perf_counter()
            turns = self._assembler.build_introduction(persona)
            outcome = await self._policy.execute(turns, self._default_tier, user=user_id)
            return self._finish(conversation_id, outcome, message_id, start)

    def _finish(
        self,
        conversation_id: str,
        outcome: FallbackOutcome,
        message_id: str | None,
        start: float,
    ) -> PipelineResult:
        """Guard the completion, record usage and build the result."""
        result = outcome.result

        verdict = self._guard.check_output(result.content)
        self._observer.on_verdict("output", verdict)
        corrected = not verdict.allowed
        content = verdict.substitute if corrected and verdict.substitute else result.content

        if self._usage_sink is not None:
            self._usage_sink.record(
                UsageRecord(
                    conversation_id=conversation_id,
                    message_id=message_id,
                    model_used=result.model,
                    requested_model=result.requested_model,
                    tier=outcome.tier.value,
                    prompt_tokens=result.usage.prompt_tokens,
                    completion_tokens=result.usage.completion_tokens,
                    total_tokens=result.usage.total_tokens,
                    cost_credits=result.usage.cost,
                    is_free_model=result.usage.is_free_model,
                    processing_time_ms=result.processing_time_ms,
                    guard_corrected=corrected,
                )
            )

        total_time_ms = _elapsed_ms(start)
        logger.info(
            "Turn completed",
            extra={
                "conversation_id": conversation_id,
                "message_id": message_id,
                "model": result.model,
                "requested_model": result.requested_model,
                "tier": outcome.tier.value,
                "verdict": verdict.kind.value,
                "attempts": len(outcome.attempts),
                "duration_ms": total_time_ms,
            },
        )

        return PipelineResult(
            content=content,
            model=result.model,
            tier=outcome.tier.value,
            usage=result.usage,
            processing_time_ms=result.processing_time_ms,
            total_time_ms=total_time_ms,
            guard_corrected=corrected,
            verdict=verdict,
            attempts=outcome.attempts,
            finish_reason=result.finish_reason,
        )


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)
