"""Tests for Rt settings schema."""

import pytest
from pydantic import ValidationError

from rtmodelingsuite.schema.rt import FuturePolicyEnum, RtConfig, default_rt_settings, disabled_rt_settings


class TestRtConfig:
    """Tests for RtConfig."""

    def test_defaults_validate(self):
        config = RtConfig(**default_rt_settings())
        assert config.use_rt is True
        assert config.use_breakpoints is True
        assert config.future_policy == FuturePolicyEnum.latest
        assert config.prior.mean == 1.0

    def test_random_walk_forces_breakpoints(self):
        """Test that a positive random walk step switches breakpoints on."""
        config = RtConfig(random_walk_step=7, use_breakpoints=False)
        assert config.use_breakpoints is True

    def test_integer_future_policy(self):
        config = RtConfig(future_policy=-3)
        assert config.future_policy == -3

    def test_unknown_future_policy_rejected(self):
        with pytest.raises(ValidationError):
            RtConfig(future_policy="sometimes")

    def test_negative_random_walk_rejected(self):
        with pytest.raises(ValidationError):
            RtConfig(random_walk_step=-1)

    def test_non_positive_prior_rejected(self):
        with pytest.raises(ValidationError):
            RtConfig(prior={"mean": 0, "sd": 1})

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            RtConfig(gp=True)


class TestDisabledRtSettings:
    """Tests for disabled_rt_settings."""

    def test_disabled_settings(self):
        config = RtConfig(**disabled_rt_settings())
        assert config.use_rt is False
        assert config.use_breakpoints is False
        assert config.future_policy == FuturePolicyEnum.project
