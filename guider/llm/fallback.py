"""Fallback policy: linear walk over the configured model tiers.

States advance strictly Primary -> Fallback1 -> Fallback2 -> Fallback3 ->
Exhausted on any upstream error. No state is skipped or revisited, so one
turn makes at most four upstream calls.
"""

import time
from collections.abc import Sequence
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from guider.exceptions import (
    ConfigurationError,
    ErrorCode,
    FallbackExhaustedError,
    UpstreamError,
)
from guider.hooks import NullObserver, PipelineObserver
from guider.llm.client import CompletionClient
from guider.llm.models import (
    CompletionRequest,
    CompletionResult,
    GenerationParams,
    Message,
    TierAttempt,
)
from guider.llm.tiers import TIER_ORDER, ModelTier, TierName
from guider.logging_config import get_logger

logger = get_logger(__name__)


class FallbackState(str, Enum):
    """Fallback state machine states."""

    PRIMARY = "primary"
    FALLBACK_1 = "fallback_1"
    FALLBACK_2 = "fallback_2"
    FALLBACK_3 = "fallback_3"
    EXHAUSTED = "exhausted"


_TRANSITIONS: dict[FallbackState, FallbackState] = {
    FallbackState.PRIMARY: FallbackState.FALLBACK_1,
    FallbackState.FALLBACK_1: FallbackState.FALLBACK_2,
    FallbackState.FALLBACK_2: FallbackState.FALLBACK_3,
    FallbackState.FALLBACK_3: FallbackState.EXHAUSTED,
}


def next_state(state: FallbackState) -> FallbackState:
    """State entered after a failure in ``state``."""
    if state == FallbackState.EXHAUSTED:
        return state
    return _TRANSITIONS[state]


class FallbackOutcome(BaseModel):
    """Successful fallback run.

    Attributes:
        result: Completion from the tier that succeeded.
        tier: Tier that succeeded.
        attempts: One entry per tier visited, in order.
    """

    model_config = ConfigDict(frozen=True)

    result: CompletionResult = Field(description="Successful completion")
    tier: TierName = Field(description="Tier that served the turn")
    attempts: tuple[TierAttempt, ...] = Field(description="Attempt log")


class FallbackPolicy:
    """Runs a completion across the ordered tiers until one succeeds."""

    def __init__(
        self,
        client: CompletionClient,
        tiers: Sequence[ModelTier],
        params: GenerationParams | None = None,
        free_tier_only: bool = False,
        observer: PipelineObserver | None = None,
    ) -> None:
        """Initialize the policy.

        Args:
            client: Executes single attempts.
            tiers: Exactly one ModelTier per TierName.
            params: Default sampling parameters.
            free_tier_only: Refuse to call tiers not classified free.
            observer: Telemetry sink for attempts and exhaustion.

        Raises:
            ConfigurationError: If the tiers do not cover every position once.
        """
        names = [tier.name for tier in tiers]
        if sorted(names, key=TIER_ORDER.index) != list(TIER_ORDER):
            raise ConfigurationError(
                "Fallback policy needs exactly one tier per position",
                details={"tiers": [name.value for name in names]},
            )

        self._client = client
        self._tiers = {tier.name: tier for tier in tiers}
        self._params = params or GenerationParams()
        self._free_tier_only = free_tier_only
        self._observer = observer or NullObserver()

    @property
    def tiers(self) -> tuple[ModelTier, ...]:
        """Tiers in fallback order."""
        return tuple(self._tiers[name] for name in TIER_ORDER)

    async def execute(
        self,
        messages: Sequence[Message],
        initial_tier: TierName = TierName.PRIMARY,
        *,
        params: GenerationParams | None = None,
        user: str | None = None,
    ) -> FallbackOutcome:
        """Attempt the completion tier by tier.

        Every attempt receives the same messages and parameters. Task
        cancellation propagates immediately and abandons remaining tiers.

        Args:
            messages: Context turns, sent unmodified to every tier.
            initial_tier: State to start in.
            params: Sampling parameters override.
            user: End-user id forwarded upstream.

        Returns:
            FallbackOutcome for the first tier that succeeds.

        Raises:
            FallbackExhaustedError: If every remaining tier failed.
        """
        turns = tuple(messages)
        params = params or self._params
        state = FallbackState(initial_tier.value)
        attempts: list[TierAttempt] = []
        last_error: UpstreamError | None = None

        while state != FallbackState.EXHAUSTED:
            tier = self._tiers[TierName(state.value)]
            start = time.perf_counter()

            try:
                result = await self._attempt(tier, turns, params, user)
            except UpstreamError as e:
                attempt = TierAttempt(
                    tier=tier.name.value,
                    model=tier.model,
                    succeeded=False,
                    error_code=e.code.value,
                    error_message=e.message,
                    duration_ms=_elapsed_ms(start),
                )
                attempts.append(attempt)
                self._observer.on_attempt(attempt)
                last_error = e

                state = next_state(state)
                logger.warning(
                    f"Tier {tier.name.value} failed, advancing to {state.value}",
                    extra={
                        "tier": tier.name.value,
                        "model": tier.model,
                        "error_code": e.code.value,
                    },
                )
                continue

            attempt = TierAttempt(
                tier=tier.name.value,
                model=tier.model,
                succeeded=True,
                duration_ms=_elapsed_ms(start),
            )
            attempts.append(attempt)
            self._observer.on_attempt(attempt)

            return FallbackOutcome(result=result, tier=tier.name, attempts=tuple(attempts))

        logger.error(
            "All model tiers failed",
            extra={
                "error_code": last_error.code.value if last_error else None,
                "tier": initial_tier.value,
            },
        )
        self._observer.on_exhausted(attempts)
        raise FallbackExhaustedError(
            "All model tiers failed"
            + (f". Last error: {last_error.message}" if last_error else ""),
            last_error=last_error,
            attempts=attempts,
        )

    async def _attempt(
        self,
        tier: ModelTier,
        turns: tuple[Message, ...],
        params: GenerationParams,
        user: str | None,
    ) -> CompletionResult:
        if self._free_tier_only and not tier.is_free:
            raise UpstreamError(
                f"Tier {tier.name.value} is not free and free-tier-only mode is on",
                code=ErrorCode.LLM_TIER_NOT_ALLOWED,
                details={"tier": tier.name.value, "model": tier.model},
            )

        request = CompletionRequest(messages=turns, model=tier.model, params=params, user=user)
        return await self._client.execute(request)


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)
