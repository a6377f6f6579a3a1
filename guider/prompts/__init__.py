"""Prompt texts and guard rule tables."""

from guider.prompts.library import PromptKey, PromptLibrary, default_prompt_library
from guider.prompts.rules import GuardRule, RuleCategory

__all__ = [
    "GuardRule",
    "PromptKey",
    "PromptLibrary",
    "RuleCategory",
    "default_prompt_library",
]
