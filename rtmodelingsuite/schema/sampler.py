"""Schema for arguments passed to the inference engine."""

import math
from datetime import timedelta
from enum import Enum
from typing import Any

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..utils import parse_timedelta


class SamplerMethodEnum(str, Enum):
    """Inference algorithm family."""

    sampling = "sampling"
    vb = "vb"


def _random_seed() -> int:
    return int(np.random.default_rng().integers(1, 100_000_000))


class SamplerArguments(BaseModel):
    """
    Algorithm parameters for a single region fit.

    For ``method='sampling'`` ``iter`` is the per-chain iteration count including
    warmup, ``ceil(samples / chains) + warmup``. For ``method='vb'`` it is the
    maximum number of optimisation iterations and ``samples`` is the number of
    approximate posterior draws to return.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    method: SamplerMethodEnum = Field(SamplerMethodEnum.sampling, description="Inference algorithm family.")
    samples: int = Field(1000, ge=1, description="Total number of posterior draws to keep across chains.")
    chains: int = Field(4, ge=1, description="Number of chains.")
    cores: int = Field(4, ge=1, description="Maximum number of chains run concurrently.")
    warmup: int = Field(250, ge=0, description="Warmup iterations per chain.")
    iter: int = Field(description="Iterations per chain (sampling) or optimisation iterations (vb).")
    adapt_delta: float = Field(0.98, gt=0, lt=1, description="Target acceptance rate during adaptation.")
    max_treedepth: int = Field(15, ge=1, description="Maximum tree depth.")
    trials: int = Field(10, ge=1, description="Number of attempts for variational inference.")
    seed: int = Field(default_factory=_random_seed, description="Random seed; drawn at random when not given.")
    max_time: timedelta | None = Field(None, description="Optional wall-clock limit handed to the engine.")

    @model_validator(mode="before")
    @classmethod
    def fill_iterations(cls, data: Any) -> Any:
        """Derive sampling ``iter`` from samples, chains and warmup; default vb ``iter`` to 10000."""
        if not isinstance(data, dict):
            return data
        method = data.get("method", SamplerMethodEnum.sampling)
        if method in (SamplerMethodEnum.vb, SamplerMethodEnum.vb.value):
            return data if data.get("iter") is not None else {**data, "iter": 10_000}
        samples = data.get("samples", 1000)
        chains = data.get("chains", 4)
        warmup = data.get("warmup", 250)
        try:
            return {**data, "iter": math.ceil(samples / chains) + warmup}
        except (TypeError, ZeroDivisionError):
            # Left to field validation to report.
            return data

    @field_validator("max_time", mode="before")
    @classmethod
    def parse_max_time(cls, v: Any) -> Any:
        """
        Parse ``max_time`` given as a duration string ('30m', '2H') or seconds.
        """
        if isinstance(v, str):
            return parse_timedelta(v)
        if isinstance(v, (int, float)):
            return timedelta(seconds=v)
        return v

    @property
    def draws_per_chain(self) -> int:
        """Posterior draws each chain contributes after warmup."""
        if self.method == SamplerMethodEnum.vb:
            return self.samples
        return self.iter - self.warmup
