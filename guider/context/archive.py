"""Archive service client used as the persona fallback source."""

from typing import Any

import httpx

from guider.config import ArchiveSettings, get_settings
from guider.exceptions import PersonaResolutionError
from guider.logging_config import get_logger

logger = get_logger(__name__)


class ArchivePersonaResolver:
    """Looks up the persona from a user's latest completed assessment."""

    LATEST_RESULTS_PATH = "/archive/results/results"

    def __init__(
        self,
        settings: ArchiveSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            settings: Archive service configuration.
            client: HTTP client (for testing).
        """
        self._settings = settings or get_settings().archive
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._settings.url,
                timeout=self._settings.timeout,
                headers={
                    "Content-Type": "application/json",
                    "X-Internal-Service": "true",
                    "X-Service-Key": self._settings.service_key.get_secret_value(),
                },
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def latest_assessment(self, user_id: str) -> dict[str, Any] | None:
        """Fetch the user's most recent completed assessment.

        Args:
            user_id: User whose assessment to fetch.

        Returns:
            The assessment result, or None when the user has none.

        Raises:
            PersonaResolutionError: On transport failure or non-2xx status.
        """
        client = await self._get_client()
        try:
            response = await client.get(
                self.LATEST_RESULTS_PATH,
                params={
                    "page": 1,
                    "limit": 1,
                    "status": "completed",
                    "sort": "created_at",
                    "order": "desc",
                },
                headers={"X-User-ID": user_id},
            )
            response.raise_for_status()
            data = response.json()

        except httpx.HTTPStatusError as e:
            raise PersonaResolutionError(
                f"Archive service returned {e.response.status_code}",
                details={"user_id": user_id, "status_code": e.response.status_code},
            ) from e

        except (httpx.RequestError, ValueError) as e:
            raise PersonaResolutionError(
                f"Failed to reach archive service: {e}",
                details={"user_id": user_id},
            ) from e

        results: list[dict[str, Any]] = []
        if isinstance(data, dict) and data.get("success"):
            results = (data.get("data") or {}).get("results") or []

        if not results:
            logger.info("No completed assessments found", extra={"user_id": user_id})
            return None

        latest = results[0]
        if latest.get("user_id") != user_id:
            logger.warning(
                "Latest assessment does not belong to user",
                extra={"user_id": user_id},
            )
            return None

        return latest

    async def resolve_persona(self, user_id: str) -> dict[str, Any] | None:
        """Persona profile from the latest assessment, if any."""
        assessment = await self.latest_assessment(user_id)
        if assessment is None:
            return None
        return assessment.get("persona_profile") or None
