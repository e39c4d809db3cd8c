"""Schema for the reporting / observation model."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class FamilyEnum(str, Enum):
    """Count likelihood for reported cases."""

    poisson = "poisson"
    negbin = "negbin"


class ScaleSpec(BaseModel):
    """Optional prior on the fraction of infections that are reported."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    mean: float | None = Field(None, gt=0, description="Prior mean of the scaling factor.")
    sd: float | None = Field(None, ge=0, description="Prior standard deviation of the scaling factor.")

    @model_validator(mode="after")
    def check_complete(self: "ScaleSpec") -> "ScaleSpec":
        """Mean and sd are given together or not at all."""
        assert (self.mean is None) == (self.sd is None), (
            "incomplete scale specification: both mean and sd are required."
        )
        return self

    @property
    def active(self) -> bool:
        """Whether observation scaling is in use."""
        return self.mean is not None


class ObservationModelConfig(BaseModel):
    """Observation model settings after default resolution."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    family: FamilyEnum = Field(FamilyEnum.negbin, description="Count likelihood.")
    weight: float = Field(1.0, ge=0, description="Weight given to observed data in the log density.")
    week_effect: bool = Field(True, description="Estimate a day-of-week reporting effect.")
    scale: ScaleSpec = Field(default_factory=ScaleSpec, description="Optional scaling of reported cases.")


def default_obs_model_settings() -> dict[str, Any]:
    """
    Return the default observation model settings table.
    """
    return {"family": FamilyEnum.negbin, "weight": 1.0, "week_effect": True, "scale": {}}
