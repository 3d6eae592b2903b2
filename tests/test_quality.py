"""Tests for gifclip.quality module."""

import pytest

from gifclip.quality import QUALITY_PARAMETERS, QualityTier, quality_parameter


class TestQualityParameter:
    """Tests for quality_parameter function."""

    @pytest.mark.parametrize(
        "tier, expected",
        [
            (QualityTier.HIGH, 1),
            (QualityTier.MEDIUM, 10),
            (QualityTier.LOW, 20),
            ("high", 1),
            ("medium", 10),
            ("low", 20),
            ("HIGH", 1),
            (" low ", 20),
        ],
    )
    def test_known_tiers(self, tier, expected):
        assert quality_parameter(tier) == expected

    @pytest.mark.parametrize("tier", ["ultra", "", "best", None])
    def test_unknown_tiers_use_medium(self, tier):
        assert quality_parameter(tier) == 10

    def test_lower_is_better(self):
        assert (
            QUALITY_PARAMETERS[QualityTier.HIGH]
            < QUALITY_PARAMETERS[QualityTier.MEDIUM]
            < QUALITY_PARAMETERS[QualityTier.LOW]
        )
