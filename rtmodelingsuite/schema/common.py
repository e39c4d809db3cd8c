"""Shared schema classes used across configuration sections."""

import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..utils.common import as_list


class Meta(BaseModel):
    """General metadata section."""

    description: str | None = Field(None, description="Description of the estimation run / configurations.")
    author: str | None = Field(None, description="Author of the estimation run / configurations.")
    version: str | float | None = Field(None, description="Version of the estimation run / configurations.")
    date: datetime.date | datetime.datetime | None = Field(
        default_factory=lambda: datetime.datetime.now(tz=datetime.timezone.utc), description="Date of work"
    )


class DelaySpec(BaseModel):
    """
    Lognormal delay distribution with uncertain parameters.

    ``mean`` and ``sd`` are on the log scale; ``mean_sd`` and ``sd_sd`` are the
    standard deviations of the normal priors placed on them. Each component may
    be a scalar or a sequence (e.g. one entry per posterior sample of a fitted
    delay). Sequences must share one length; scalars broadcast to it.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    mean: float | list[float] = Field(description="Log-scale mean of the delay.")
    mean_sd: float | list[float] = Field(0.0, description="Standard deviation of the log-scale mean.")
    sd: float | list[float] = Field(description="Log-scale standard deviation of the delay.")
    sd_sd: float | list[float] = Field(0.0, description="Standard deviation of the log-scale sd.")
    max: int | list[int] = Field(description="Maximum delay in days.")

    @field_validator("mean_sd", "sd", "sd_sd")
    @classmethod
    def check_non_negative(cls, v: float | list[float]) -> float | list[float]:
        """Scales must not be negative."""
        assert all(x >= 0 for x in as_list(v)), "Delay standard deviations must be non-negative."
        return v

    @field_validator("max")
    @classmethod
    def check_max(cls, v: int | list[int]) -> int | list[int]:
        """Maximum delays must be at least one day."""
        assert all(x >= 1 for x in as_list(v)), "Maximum delay must be at least 1 day."
        return v

    @model_validator(mode="after")
    def check_lengths(self: "DelaySpec") -> "DelaySpec":
        """Vectorized components share one length; the rest have length 1."""
        lengths = {len(as_list(getattr(self, name))) for name in ("mean", "mean_sd", "sd", "sd_sd", "max")}
        lengths.discard(1)
        assert len(lengths) <= 1, f"Delay components have inconsistent lengths: {sorted(lengths)}."
        assert 0 not in lengths, "Delay components must not be empty."
        return self

    @property
    def length(self) -> int:
        """Number of delay entries this specification expands to."""
        return max(len(as_list(getattr(self, name))) for name in ("mean", "mean_sd", "sd", "sd_sd", "max"))


class GenerationTimeSpec(BaseModel):
    """Generation time distribution with uncertain mean and sd (linear scale, days)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    mean: float = Field(gt=0, description="Mean generation time.")
    mean_sd: float = Field(0.0, ge=0, description="Standard deviation of the mean.")
    sd: float = Field(gt=0, description="Standard deviation of the generation time.")
    sd_sd: float = Field(0.0, ge=0, description="Standard deviation of the sd.")
    max: int = Field(15, ge=1, description="Maximum generation time in days.")
