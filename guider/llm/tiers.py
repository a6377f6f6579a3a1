"""Model tiers: the fixed fallback order."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from guider.config import LLMSettings
from guider.exceptions import ConfigurationError

FREE_MODEL_SUFFIX = ":free"


class TierName(str, Enum):
    """Tier positions, in fallback order."""

    PRIMARY = "primary"
    FALLBACK_1 = "fallback_1"
    FALLBACK_2 = "fallback_2"
    FALLBACK_3 = "fallback_3"


TIER_ORDER: tuple[TierName, ...] = (
    TierName.PRIMARY,
    TierName.FALLBACK_1,
    TierName.FALLBACK_2,
    TierName.FALLBACK_3,
)


class ModelTier(BaseModel):
    """One upstream model configuration.

    Attributes:
        name: Position in the fallback order.
        model: Upstream model identifier.
        is_free: Whether the model is classified free-tier.
    """

    model_config = ConfigDict(frozen=True)

    name: TierName = Field(description="Tier position")
    model: str = Field(description="Model identifier")
    is_free: bool = Field(default=False, description="Free-tier classification")


def is_free_model(model: str, allowlist: tuple[str, ...] | list[str] = ()) -> bool:
    """Classify a model identifier as free-tier.

    Args:
        model: Upstream model identifier.
        allowlist: Extra identifiers treated as free.

    Returns:
        True when the identifier carries the free suffix or is allow-listed.
    """
    return model.endswith(FREE_MODEL_SUFFIX) or model in allowlist


def build_tiers(settings: LLMSettings) -> tuple[ModelTier, ...]:
    """Build the ordered tier tuple from configuration.

    Args:
        settings: Upstream provider settings.

    Returns:
        Four tiers in fallback order.

    Raises:
        ConfigurationError: If an identifier is blank or repeated.
    """
    identifiers = [
        model.strip()
        for model in (
            settings.primary_model,
            settings.fallback_model,
            settings.emergency_fallback_model,
            settings.additional_fallback_model,
        )
    ]

    blank = [name.value for name, model in zip(TIER_ORDER, identifiers) if not model]
    if blank:
        raise ConfigurationError(
            "Model tier identifiers must not be empty",
            details={"tiers": blank},
        )

    if len(set(identifiers)) != len(identifiers):
        raise ConfigurationError(
            "Model tier identifiers must be distinct",
            details={"models": identifiers},
        )

    return tuple(
        ModelTier(
            name=name,
            model=model,
            is_free=is_free_model(model, settings.free_model_allowlist),
        )
        for name, model in zip(TIER_ORDER, identifiers)
    )
