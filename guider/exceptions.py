"""Application exception hierarchy.

All custom exceptions inherit from GuiderError.
Each exception has an error code for structured error handling.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error handling."""

    # General errors (1xxx)
    INTERNAL_ERROR = "GDR-1000"
    CONFIGURATION_ERROR = "GDR-1001"
    VALIDATION_ERROR = "GDR-1002"

    # Conversation errors (2xxx)
    CONVERSATION_NOT_FOUND = "GDR-2000"

    # Persona errors (3xxx)
    PERSONA_RESOLUTION_ERROR = "GDR-3000"

    # Upstream errors (5xxx)
    LLM_SERVICE_ERROR = "GDR-5000"
    LLM_TIMEOUT = "GDR-5001"
    LLM_RATE_LIMIT = "GDR-5002"
    LLM_MALFORMED_RESPONSE = "GDR-5003"
    LLM_TIER_NOT_ALLOWED = "GDR-5004"

    # Fallback errors (51xx)
    FALLBACK_EXHAUSTED = "GDR-5100"


class GuiderError(Exception):
    """Base exception for all Guider errors.

    Attributes:
        message: Human-readable error message.
        code: Structured error code.
        details: Additional error context.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details,
            }
        }


class ConfigurationError(GuiderError):
    """Configuration or environment error. Fatal at startup."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR, details)


class ValidationError(GuiderError):
    """Input validation error."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details)


class ConversationNotFoundError(GuiderError):
    """Conversation lookup returned nothing."""

    def __init__(
        self,
        conversation_id: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            f"Conversation not found: {conversation_id}",
            ErrorCode.CONVERSATION_NOT_FOUND,
            {"conversation_id": conversation_id, **(details or {})},
        )


class PersonaResolutionError(GuiderError):
    """Persona lookup failed. Recovered by proceeding without persona."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.PERSONA_RESOLUTION_ERROR, details)


class UpstreamError(GuiderError):
    """A single upstream attempt failed.

    Covers network failure, timeout, non-2xx status and malformed bodies.
    Recovered by the fallback policy unless raised on the last tier.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.LLM_SERVICE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class FallbackExhaustedError(GuiderError):
    """Every configured tier failed for one turn.

    Attributes:
        last_error: The error raised by the final attempted tier.
        attempts: Attempt log, one entry per tier visited.
    """

    def __init__(
        self,
        message: str,
        last_error: UpstreamError | None = None,
        attempts: list[Any] | None = None,
    ) -> None:
        self.last_error = last_error
        self.attempts = attempts or []
        details: dict[str, Any] = {"attempted_tiers": len(self.attempts)}
        if last_error is not None:
            details["last_error"] = last_error.message
            details["last_error_code"] = last_error.code.value
        super().__init__(message, ErrorCode.FALLBACK_EXHAUSTED, details)
