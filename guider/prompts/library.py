"""Prompt library: immutable registry of instruction texts and guard rules."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from types import MappingProxyType

from guider.exceptions import ConfigurationError
from guider.prompts import texts
from guider.prompts.rules import (
    DATA_ACCESS_RULES,
    PROMPT_INJECTION_RULES,
    ROLE_DEVIATION_RULES,
    GuardRule,
    RuleCategory,
)


class PromptKey(str, Enum):
    """Lookup keys for fixed texts."""

    CAREER_GUIDER = "career_guider"
    GENERAL_CAREER = "general_career"
    ROLE_REINFORCEMENT = "role_reinforcement"
    INITIAL_CONVERSATION = "initial_conversation"
    INITIAL_GREETING = "initial_greeting"
    INITIAL_GREETING_DISPLAY = "initial_greeting_display"
    FALLBACK_RESPONSE = "fallback_response"
    PROMPT_INJECTION_RESPONSE = "prompt_injection_response"
    DATA_ACCESS_DENIAL_RESPONSE = "data_access_denial_response"
    PERSONA_HEADER = "persona_header"
    ARCHIVE_PERSONA_HEADER = "archive_persona_header"
    INTRODUCTION_PERSONA_HEADER = "introduction_persona_header"


@dataclass(frozen=True)
class PromptLibrary:
    """Fixed texts plus the three ordered guard tables.

    Read-only after construction. Every PromptKey must have a text and
    rule ids must be unique across all tables.

    Attributes:
        texts: Instruction and substitute texts by key.
        data_access_rules: Checked first on user input.
        prompt_injection_rules: Checked second on user input.
        role_deviation_rules: Checked on model output only.
    """

    texts: Mapping[PromptKey, str]
    data_access_rules: tuple[GuardRule, ...] = field(default=())
    prompt_injection_rules: tuple[GuardRule, ...] = field(default=())
    role_deviation_rules: tuple[GuardRule, ...] = field(default=())

    def __post_init__(self) -> None:
        missing = [key.value for key in PromptKey if key not in self.texts]
        if missing:
            raise ConfigurationError(
                "Prompt library is missing texts",
                details={"missing": missing},
            )

        for category in RuleCategory:
            for rule in self.rules_for(category):
                if rule.category != category:
                    raise ConfigurationError(
                        f"Rule {rule.id} is filed under the wrong table",
                        details={"rule": rule.id, "table": category.value},
                    )

        ids = [rule.id for rule in self.all_rules()]
        duplicates = sorted({rule_id for rule_id in ids if ids.count(rule_id) > 1})
        if duplicates:
            raise ConfigurationError(
                "Duplicate guard rule ids",
                details={"duplicates": duplicates},
            )

        object.__setattr__(self, "texts", MappingProxyType(dict(self.texts)))
        object.__setattr__(self, "data_access_rules", tuple(self.data_access_rules))
        object.__setattr__(self, "prompt_injection_rules", tuple(self.prompt_injection_rules))
        object.__setattr__(self, "role_deviation_rules", tuple(self.role_deviation_rules))

    def text(self, key: PromptKey) -> str:
        """Look up a fixed text."""
        return self.texts[key]

    def rules_for(self, category: RuleCategory) -> tuple[GuardRule, ...]:
        """Return the ordered table for a category."""
        if category == RuleCategory.DATA_ACCESS:
            return self.data_access_rules
        if category == RuleCategory.PROMPT_INJECTION:
            return self.prompt_injection_rules
        return self.role_deviation_rules

    def all_rules(self) -> tuple[GuardRule, ...]:
        """Every rule in priority order: data access, injection, role deviation."""
        return self.data_access_rules + self.prompt_injection_rules + self.role_deviation_rules

    def system_prompt_for(self, context_type: str | None) -> str:
        """Role definition for a conversation context type.

        Career-guidance conversations get the Guider identity; anything else
        falls back to the general counselor prompt.
        """
        if context_type == "career_guidance":
            return self.texts[PromptKey.CAREER_GUIDER]
        return self.texts[PromptKey.GENERAL_CAREER]


@lru_cache
def default_prompt_library() -> PromptLibrary:
    """Production library with the built-in texts and rule tables."""
    return PromptLibrary(
        texts={
            PromptKey.CAREER_GUIDER: texts.CAREER_GUIDER,
            PromptKey.GENERAL_CAREER: texts.GENERAL_CAREER,
            PromptKey.ROLE_REINFORCEMENT: texts.ROLE_REINFORCEMENT,
            PromptKey.INITIAL_CONVERSATION: texts.INITIAL_CONVERSATION,
            PromptKey.INITIAL_GREETING: texts.INITIAL_GREETING,
            PromptKey.INITIAL_GREETING_DISPLAY: texts.INITIAL_GREETING_DISPLAY,
            PromptKey.FALLBACK_RESPONSE: texts.FALLBACK_RESPONSE,
            PromptKey.PROMPT_INJECTION_RESPONSE: texts.PROMPT_INJECTION_RESPONSE,
            PromptKey.DATA_ACCESS_DENIAL_RESPONSE: texts.DATA_ACCESS_DENIAL_RESPONSE,
            PromptKey.PERSONA_HEADER: texts.PERSONA_HEADER,
            PromptKey.ARCHIVE_PERSONA_HEADER: texts.ARCHIVE_PERSONA_HEADER,
            PromptKey.INTRODUCTION_PERSONA_HEADER: texts.INTRODUCTION_PERSONA_HEADER,
        },
        data_access_rules=DATA_ACCESS_RULES,
        prompt_injection_rules=PROMPT_INJECTION_RULES,
        role_deviation_rules=ROLE_DEVIATION_RULES,
    )
