"""Content guard: classifies user input and model output against rule tables."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from guider.logging_config import get_logger
from guider.prompts.library import PromptKey, PromptLibrary, default_prompt_library
from guider.prompts.rules import TOPIC_PATTERNS, GuardRule, RuleCategory

logger = get_logger(__name__)


class VerdictKind(str, Enum):
    """Outcome of a guard check."""

    ALLOWED = "allowed"
    INJECTION_DETECTED = "injection_detected"
    DATA_ACCESS_ATTEMPT = "data_access_attempt"
    ROLE_DEVIATION_DETECTED = "role_deviation_detected"


class GuardVerdict(BaseModel):
    """Tagged result of a guard check.

    Attributes:
        kind: Verdict tag.
        matched_rules: Ids of the rules that matched, for audit logging.
        substitute: Text returned instead of model output for violations.
    """

    model_config = ConfigDict(frozen=True)

    kind: VerdictKind = Field(description="Verdict tag")
    matched_rules: tuple[str, ...] = Field(default=(), description="Matched rule ids")
    substitute: str | None = Field(default=None, description="Substitute response text")

    @property
    def allowed(self) -> bool:
        """Whether the text passed the guard."""
        return self.kind == VerdictKind.ALLOWED


ALLOWED = GuardVerdict(kind=VerdictKind.ALLOWED)


class ContentGuard:
    """Protects the fixed assistant role.

    Input is checked for data-access attempts first, then prompt injection;
    data access wins when both match. Output is checked for role deviation
    only. Checks are pure functions of the text and the library.
    """

    def __init__(self, library: PromptLibrary | None = None) -> None:
        """Initialize the guard.

        Args:
            library: Prompt library supplying rule tables and substitutes.
        """
        self._library = library or default_prompt_library()

    @property
    def library(self) -> PromptLibrary:
        """The prompt library backing this guard."""
        return self._library

    def check_input(self, text: str) -> GuardVerdict:
        """Classify user-supplied text.

        Args:
            text: Raw user input.

        Returns:
            DATA_ACCESS_ATTEMPT, INJECTION_DETECTED or ALLOWED.
        """
        data_hits = _matching(self._library.rules_for(RuleCategory.DATA_ACCESS), text)
        if data_hits:
            logger.error(
                "Data access attempt detected",
                extra={"rules": data_hits, "severity": "HIGH"},
            )
            return GuardVerdict(
                kind=VerdictKind.DATA_ACCESS_ATTEMPT,
                matched_rules=data_hits,
                substitute=self._library.text(PromptKey.DATA_ACCESS_DENIAL_RESPONSE),
            )

        injection_hits = _matching(
            self._library.rules_for(RuleCategory.PROMPT_INJECTION), text
        )
        if injection_hits:
            logger.warning(
                "Prompt injection attempt detected",
                extra={"rules": injection_hits, "severity": "MEDIUM"},
            )
            return GuardVerdict(
                kind=VerdictKind.INJECTION_DETECTED,
                matched_rules=injection_hits,
                substitute=self._library.text(PromptKey.PROMPT_INJECTION_RESPONSE),
            )

        return ALLOWED

    def check_output(self, text: str) -> GuardVerdict:
        """Classify model-generated text.

        Args:
            text: Completion content returned by the model.

        Returns:
            ROLE_DEVIATION_DETECTED or ALLOWED.
        """
        hits = _matching(self._library.rules_for(RuleCategory.ROLE_DEVIATION), text)
        if hits:
            logger.warning(
                "Model output deviated from role, substituting fallback response",
                extra={"rules": hits, "severity": "MEDIUM"},
            )
            return GuardVerdict(
                kind=VerdictKind.ROLE_DEVIATION_DETECTED,
                matched_rules=hits,
                substitute=self._library.text(PromptKey.FALLBACK_RESPONSE),
            )
        return ALLOWED

    @staticmethod
    def classify_topic(text: str) -> str | None:
        """Detect the career-guidance question type, for audit logs only."""
        for topic, pattern in TOPIC_PATTERNS:
            if pattern.search(text):
                return topic
        return None


def _matching(rules: tuple[GuardRule, ...], text: str) -> tuple[str, ...]:
    return tuple(rule.id for rule in rules if rule.matches(text))
