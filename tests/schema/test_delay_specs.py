"""Tests for delay and generation time specifications."""

import pytest
from pydantic import ValidationError

from rtmodelingsuite.schema.common import DelaySpec, GenerationTimeSpec


class TestDelaySpec:
    """Tests for DelaySpec."""

    def test_scalar_spec(self):
        spec = DelaySpec(mean=1.6, sd=0.5, max=15)
        assert spec.mean_sd == 0.0
        assert spec.length == 1

    def test_vectorised_spec_length(self):
        """Test that sequence components set the expanded length."""
        spec = DelaySpec(mean=[1.0, 1.2, 1.4], sd=0.5, max=[10, 12, 14])
        assert spec.length == 3

    def test_inconsistent_lengths_rejected(self):
        with pytest.raises(ValidationError, match="inconsistent lengths"):
            DelaySpec(mean=[1.0, 1.2], sd=[0.5, 0.5, 0.5], max=10)

    def test_negative_sd_rejected(self):
        with pytest.raises(ValidationError, match="non-negative"):
            DelaySpec(mean=1.0, sd=-0.1, max=10)

    def test_zero_max_rejected(self):
        with pytest.raises(ValidationError, match="at least 1 day"):
            DelaySpec(mean=1.0, sd=0.5, max=0)

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            DelaySpec(mean=1.0, sd=0.5, max=10, shape=2)

    def test_frozen(self):
        spec = DelaySpec(mean=1.0, sd=0.5, max=10)
        with pytest.raises(ValidationError):
            spec.mean = 2.0


class TestGenerationTimeSpec:
    """Tests for GenerationTimeSpec."""

    def test_defaults(self):
        spec = GenerationTimeSpec(mean=3.6, sd=3.1)
        assert spec.max == 15
        assert spec.mean_sd == 0.0

    def test_non_positive_mean_rejected(self):
        with pytest.raises(ValidationError):
            GenerationTimeSpec(mean=0, sd=3.1)
