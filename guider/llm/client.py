"""Completion client interface and the OpenRouter implementation."""

import time
from abc import ABC, abstractmethod
from typing import Any

import httpx
import pydantic

from guider.config import LLMSettings, get_settings
from guider.exceptions import ErrorCode, UpstreamError
from guider.llm.models import CompletionRequest, CompletionResult, TokenUsage
from guider.llm.tiers import is_free_model
from guider.logging_config import get_logger

logger = get_logger(__name__)

# Outbound fields that would enable paid tool calling
FORBIDDEN_PAYLOAD_FIELDS = ("tools", "tool_choice", "functions", "function_call")


class CompletionClient(ABC):
    """Abstract base class for completion clients.

    Executes exactly one request/response cycle per call.
    """

    @abstractmethod
    async def execute(self, request: CompletionRequest) -> CompletionResult:
        """Execute one completion attempt.

        Args:
            request: The attempt to execute.

        Returns:
            CompletionResult for a well-formed response.

        Raises:
            UpstreamError: On timeout, transport failure, non-2xx status or
                malformed response body.
        """
        ...


class OpenRouterClient(CompletionClient):
    """Client for OpenRouter's OpenAI-compatible chat completions API.

    Text-to-text only: tool calling is never forwarded upstream.
    """

    def __init__(
        self,
        settings: LLMSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Upstream configuration.
            client: HTTP client (for testing).

        Raises:
            ConfigurationError: If no API key is configured.
        """
        self._settings = settings or get_settings().llm
        self._api_key = self._settings.require_api_key()
        self._client = client
        self._owns_client = client is None

        logger.info(
            "OpenRouter client initialized",
            extra={"model": self._settings.primary_model},
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._settings.timeout,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": self._settings.http_referer,
            "X-Title": self._settings.x_title,
        }

    def build_payload(self, request: CompletionRequest) -> dict[str, Any]:
        """Build the outbound JSON body for a request.

        Optional sampling fields are only included when set. Tool-calling
        fields are removed unconditionally.
        """
        params = request.params
        payload: dict[str, Any] = {
            "model": request.model,
            "messages": [
                {"role": msg.role.value, "content": msg.content} for msg in request.messages
            ],
            "max_tokens": params.max_tokens,
            "temperature": params.temperature,
            "user": request.user,
            "usage": {"include": True},
        }

        if params.stop:
            payload["stop"] = list(params.stop)
        if params.top_p is not None:
            payload["top_p"] = params.top_p
        if params.top_k is not None:
            payload["top_k"] = params.top_k
        if params.frequency_penalty is not None:
            payload["frequency_penalty"] = params.frequency_penalty
        if params.presence_penalty is not None:
            payload["presence_penalty"] = params.presence_penalty

        if request.tools:
            logger.error(
                "Tools requested for a completion, stripping from payload",
                extra={"model": request.model, "user_id": request.user},
            )

        for name in FORBIDDEN_PAYLOAD_FIELDS:
            payload.pop(name, None)

        return payload

    async def execute(self, request: CompletionRequest) -> CompletionResult:
        """Execute one chat completion against the requested model."""
        client = await self._get_client()
        url = f"{self._settings.base_url}/chat/completions"
        payload = self.build_payload(request)

        logger.info(
            "Requesting completion",
            extra={"model": request.model, "user_id": request.user},
        )

        start = time.perf_counter()
        try:
            response = await client.post(url, json=payload, headers=self._headers())
            response.raise_for_status()

        except httpx.TimeoutException as e:
            logger.error(f"Completion request timed out: {e}", extra={"model": request.model})
            raise UpstreamError(
                "Completion request timed out",
                code=ErrorCode.LLM_TIMEOUT,
                details={"model": request.model, "timeout": self._settings.timeout},
            ) from e

        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(
                f"Completion request failed: {status}", extra={"model": request.model}
            )

            if status == 429:
                raise UpstreamError(
                    "Rate limit exceeded",
                    code=ErrorCode.LLM_RATE_LIMIT,
                    details={"model": request.model, "status_code": status},
                ) from e

            raise UpstreamError(
                f"Completion service returned {status}",
                code=ErrorCode.LLM_SERVICE_ERROR,
                details={"model": request.model, "status_code": status},
            ) from e

        except httpx.RequestError as e:
            logger.error(f"Completion connection error: {e}", extra={"model": request.model})
            raise UpstreamError(
                f"Failed to connect to completion service: {e}",
                code=ErrorCode.LLM_SERVICE_ERROR,
                details={"model": request.model, "url": url},
            ) from e

        processing_time_ms = int((time.perf_counter() - start) * 1000)

        try:
            data = response.json()
        except ValueError as e:
            raise _malformed(request.model, "response body is not JSON") from e

        return self._parse(data, request, processing_time_ms)

    def _parse(
        self,
        data: Any,
        request: CompletionRequest,
        processing_time_ms: int,
    ) -> CompletionResult:
        """Validate the response shape and normalize it."""
        if not isinstance(data, dict):
            raise _malformed(request.model, "missing data")

        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            raise _malformed(request.model, "missing or empty choices array")

        choice = choices[0]
        message = choice.get("message") if isinstance(choice, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str) or not content:
            raise _malformed(request.model, "missing message content")

        served_model = data.get("model") or request.model
        if not isinstance(served_model, str):
            raise _malformed(request.model, "model is not a string")

        usage = data.get("usage") or {}
        if not isinstance(usage, dict):
            raise _malformed(request.model, "usage is not an object")

        allowlist = self._settings.free_model_allowlist
        free = is_free_model(request.model, allowlist) or is_free_model(served_model, allowlist)

        try:
            result = CompletionResult(
                content=content,
                model=served_model,
                requested_model=request.model,
                usage=TokenUsage(
                    prompt_tokens=usage.get("prompt_tokens") or 0,
                    completion_tokens=usage.get("completion_tokens") or 0,
                    total_tokens=usage.get("total_tokens") or 0,
                    cost=0.0 if free else float(usage.get("cost") or 0),
                    is_free_model=free,
                ),
                processing_time_ms=processing_time_ms,
                finish_reason=choice.get("finish_reason"),
                native_finish_reason=choice.get("native_finish_reason"),
            )
        except (pydantic.ValidationError, TypeError, ValueError) as e:
            raise _malformed(request.model, f"invalid field types: {e}") from e

        if served_model != request.model:
            logger.warning(
                "Upstream served a different model than requested",
                extra={"model": served_model, "requested_model": request.model},
            )

        logger.info(
            "Completion generated",
            extra={"model": served_model, "duration_ms": processing_time_ms},
        )
        return result

    async def list_models(self) -> list[dict[str, Any]]:
        """Fetch the models available upstream.

        Raises:
            UpstreamError: If the listing cannot be fetched.
        """
        client = await self._get_client()
        try:
            response = await client.get(
                f"{self._settings.base_url}/models", headers=self._headers()
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to fetch available models: {e}")
            raise UpstreamError(
                "Failed to fetch available models",
                code=ErrorCode.LLM_SERVICE_ERROR,
            ) from e

        if isinstance(data, dict):
            return list(data.get("data", []))
        return list(data)

    def health_status(self) -> dict[str, Any]:
        """Describe the client configuration for readiness checks."""
        return {
            "service": "openrouter",
            "base_url": self._settings.base_url,
            "primary_model": self._settings.primary_model,
            "use_free_models_only": self._settings.use_free_models_only,
            "timeout": self._settings.timeout,
        }


def _malformed(model: str, reason: str) -> UpstreamError:
    logger.error(f"Invalid completion response: {reason}", extra={"model": model})
    return UpstreamError(
        f"Invalid response: {reason}",
        code=ErrorCode.LLM_MALFORMED_RESPONSE,
        details={"model": model},
    )
