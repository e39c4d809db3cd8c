"""Tests for observation model settings schema."""

import pytest
from pydantic import ValidationError

from rtmodelingsuite.schema.observation import (
    FamilyEnum,
    ObservationModelConfig,
    ScaleSpec,
    default_obs_model_settings,
)


class TestScaleSpec:
    """Tests for ScaleSpec."""

    def test_empty_scale_is_inactive(self):
        assert ScaleSpec().active is False

    def test_complete_scale_is_active(self):
        scale = ScaleSpec(mean=0.4, sd=0.05)
        assert scale.active is True

    def test_incomplete_scale_rejected(self):
        """Test that a mean without an sd is rejected."""
        with pytest.raises(ValidationError, match="incomplete scale specification"):
            ScaleSpec(mean=0.4)


class TestObservationModelConfig:
    """Tests for ObservationModelConfig."""

    def test_defaults(self):
        config = ObservationModelConfig(**default_obs_model_settings())
        assert config.family == FamilyEnum.negbin
        assert config.week_effect is True
        assert config.weight == 1.0
        assert config.scale.active is False

    def test_poisson(self):
        assert ObservationModelConfig(family="poisson").family == FamilyEnum.poisson

    def test_unknown_family_rejected(self):
        with pytest.raises(ValidationError):
            ObservationModelConfig(family="binomial")

    def test_negative_weight_rejected(self):
        with pytest.raises(ValidationError):
            ObservationModelConfig(weight=-1)
