"""Schema for the approximate Gaussian process prior on log-Rt."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class KernelEnum(str, Enum):
    """Covariance kernels accepted by the GP builder."""

    se = "se"
    matern = "matern"


class GPConfig(BaseModel):
    """Approximate Gaussian process settings after default resolution."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    basis_prop: float = Field(0.3, gt=0, le=1, description="Number of basis functions as a proportion of time.")
    boundary_scale: float = Field(2.0, gt=0, description="Boundary scale of the approximate GP.")
    ls_mean: float = Field(gt=0, description="Mean of the length-scale prior (days).")
    ls_sd: float = Field(gt=0, description="Standard deviation of the length-scale prior (days).")
    ls_min: float = Field(3.0, ge=0, description="Lower bound of the length scale (days).")
    ls_max: float = Field(gt=0, description="Upper bound of the length scale (days).")
    alpha_sd: float = Field(0.1, gt=0, description="Standard deviation of the GP magnitude prior.")
    kernel: KernelEnum = Field(KernelEnum.matern, description="Covariance kernel.")
    matern_order: float = Field(1.5, description="Order of the Matern kernel. Only 3/2 is supported.")
    stationary: bool = Field(False, description="Use a stationary GP on log-Rt rather than on its differences.")

    @field_validator("matern_order")
    @classmethod
    def check_matern_order(cls, v: float) -> float:
        """Only the Matern 3/2 kernel is implemented."""
        assert v == 1.5, f"Unsupported Matern order {v}; only 3/2 is supported."
        return v

    @model_validator(mode="after")
    def check_length_scale_bounds(self: "GPConfig") -> "GPConfig":
        """Length-scale prior mean must sit within its bounds."""
        assert self.ls_min <= self.ls_mean <= self.ls_max, (
            f"Length scale bounds must satisfy ls_min <= ls_mean <= ls_max "
            f"(got {self.ls_min}, {self.ls_mean}, {self.ls_max})."
        )
        return self


def default_gp_settings(available_time: int) -> dict[str, Any]:
    """
    Return the default GP settings table for a given estimation span.

    Parameters
    ----------
    available_time : int
        Days available for estimation, ``t - seeding_time - horizon``.

    Returns
    -------
    dict[str, Any]
        Default settings with length-scale values capped at ``available_time``.
    """
    ls_mean = min(available_time, 21)
    return {
        "basis_prop": 0.3,
        "boundary_scale": 2.0,
        "ls_mean": ls_mean,
        "ls_sd": ls_mean / 3,
        "ls_min": 3.0,
        "ls_max": min(available_time, 63),
        "alpha_sd": 0.1,
        "kernel": KernelEnum.matern,
        "matern_order": 1.5,
        "stationary": False,
    }
