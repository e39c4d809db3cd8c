"""Tests for inference engine argument schema."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from rtmodelingsuite.schema.sampler import SamplerArguments, SamplerMethodEnum


class TestSamplerArguments:
    """Tests for SamplerArguments."""

    def test_defaults(self):
        args = SamplerArguments(seed=1)
        assert args.method == SamplerMethodEnum.sampling
        assert args.chains == 4
        assert args.warmup == 250
        assert args.iter == 500
        assert args.adapt_delta == 0.98
        assert args.max_treedepth == 15

    def test_iter_derived_from_samples(self):
        """Test that sampling iterations are ceil(samples / chains) + warmup."""
        args = SamplerArguments(samples=1000, chains=3, warmup=100, seed=1)
        assert args.iter == 334 + 100
        assert args.draws_per_chain == 334

    def test_user_iter_is_recomputed(self):
        args = SamplerArguments(samples=100, chains=4, warmup=10, iter=5, seed=1)
        assert args.iter == 35

    def test_vb_iter_default(self):
        args = SamplerArguments(method="vb", samples=200, seed=1)
        assert args.iter == 10_000
        assert args.draws_per_chain == 200

    def test_vb_iter_override(self):
        assert SamplerArguments(method="vb", iter=500, seed=1).iter == 500

    def test_random_seed_when_not_given(self):
        assert SamplerArguments().seed >= 1

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("30m", timedelta(minutes=30)), (90, timedelta(seconds=90)), (None, None)],
    )
    def test_max_time_parsing(self, value, expected):
        assert SamplerArguments(max_time=value, seed=1).max_time == expected

    def test_invalid_adapt_delta(self):
        with pytest.raises(ValidationError):
            SamplerArguments(adapt_delta=1.0, seed=1)

    def test_unknown_method(self):
        with pytest.raises(ValidationError):
            SamplerArguments(method="optimizing", seed=1)
