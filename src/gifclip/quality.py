"""Quality tier to encoder parameter mapping.

The encoder follows the NeuQuant convention: the parameter is the pixel
sampling step used when building a palette, so lower means higher fidelity.
"""

from __future__ import annotations

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class QualityTier(Enum):
    """Named quality tiers accepted from the boundary layer."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


QUALITY_PARAMETERS: dict[QualityTier, int] = {
    QualityTier.HIGH: 1,
    QualityTier.MEDIUM: 10,
    QualityTier.LOW: 20,
}

DEFAULT_QUALITY_TIER = QualityTier.MEDIUM


def quality_parameter(tier: QualityTier | str | None) -> int:
    """Return the encoder quality parameter for *tier*.

    Unknown tiers map to the medium value instead of failing so that newer
    tiers coming from a client are still accepted.

    Args:
        tier: A QualityTier or its string value (case-insensitive)

    Returns:
        Encoder quality parameter (1 = best)
    """
    if isinstance(tier, str):
        try:
            tier = QualityTier(tier.strip().lower())
        except ValueError:
            logger.debug(f"Unknown quality tier {tier!r}, using {DEFAULT_QUALITY_TIER.value}")
            tier = DEFAULT_QUALITY_TIER

    return QUALITY_PARAMETERS.get(tier, QUALITY_PARAMETERS[DEFAULT_QUALITY_TIER])
