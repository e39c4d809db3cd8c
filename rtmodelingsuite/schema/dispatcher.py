"""Schema definitions for workflow dispatcher."""

from collections.abc import Callable
from datetime import date
from enum import Enum
from typing import Any

import numpy as np
import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .sampler import SamplerArguments

_INT_ARRAYS = ("day_of_week", "cases", "breakpoints", "max_delay")
_FLOAT_ARRAYS = ("shifted_cases", "delay_mean_mean", "delay_mean_sd", "delay_sd_mean", "delay_sd_sd")


class ModelInputData(BaseModel):
    """
    Numeric payload consumed by the inference engine for one region.

    Time-indexed arrays cover the padded series of length ``t``: ``shifted_cases``
    spans all ``t`` days, ``day_of_week`` and ``breakpoints`` span the
    ``t - seeding_time`` modelled days, and ``cases`` spans the
    ``t - seeding_time - horizon`` observed days. Arrays are read-only.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    # Case series
    t: int = Field(description="Length of the padded series including seeding and forecast days.")
    seeding_time: int = Field(ge=0, description="Days of seeding before estimation starts (mean delay shift).")
    horizon: int = Field(ge=0, description="Forecast horizon in days.")
    cases: np.ndarray = Field(description="Observed reported cases in the estimation window.")
    shifted_cases: np.ndarray = Field(description="Delay-shifted smoothed cases used as back-calculation prior.")
    day_of_week: np.ndarray = Field(description="Day of week (1 = Monday) for each modelled day.")
    burn_in: int = Field(0, ge=0, description="Days excluded from the likelihood at the start of the series.")
    prior_infections: float = Field(description="Log of mean cases in the first observed week.")
    prior_growth: float = Field(description="Log-linear growth rate in the first observed week.")

    # Generation time
    gt_mean_mean: float
    gt_mean_sd: float
    gt_sd_mean: float
    gt_sd_sd: float
    max_gt: int

    # Delays
    delays: int = Field(ge=0, description="Number of delay distributions.")
    delay_mean_mean: np.ndarray
    delay_mean_sd: np.ndarray
    delay_sd_mean: np.ndarray
    delay_sd_sd: np.ndarray
    max_delay: np.ndarray

    # Rt
    r_mean: float
    r_sd: float
    estimate_r: int
    bp_n: int
    breakpoints: np.ndarray
    future_fixed: int
    fixed_from: int

    # Gaussian process
    fixed: int
    stationary: int
    M: int
    L: float
    ls_meanlog: float
    ls_sdlog: float
    ls_min: float
    ls_max: float
    alpha_sd: float
    gp_type: int

    # Observation model
    model_type: int
    week_effect: int
    obs_weight: float
    obs_scale: int
    obs_scale_mean: float
    obs_scale_sd: float

    @field_validator(*_INT_ARRAYS, mode="before")
    @classmethod
    def freeze_int_array(cls, v: Any) -> np.ndarray:
        """Copy into a read-only integer array."""
        arr = np.array(v, dtype=int).reshape(-1)
        arr.setflags(write=False)
        return arr

    @field_validator(*_FLOAT_ARRAYS, mode="before")
    @classmethod
    def freeze_float_array(cls, v: Any) -> np.ndarray:
        """Copy into a read-only float array."""
        arr = np.array(v, dtype=float).reshape(-1)
        arr.setflags(write=False)
        return arr

    @model_validator(mode="after")
    def check_invariants(self: "ModelInputData") -> "ModelInputData":
        """
        Ensure cross-field numeric invariants hold.
        """
        assert self.seeding_time < self.t, f"seeding_time ({self.seeding_time}) must be less than t ({self.t})."
        modelled = self.t - self.seeding_time
        assert self.horizon < modelled, f"horizon ({self.horizon}) leaves no observed days to estimate from."
        assert len(self.cases) == modelled - self.horizon, "cases must span t - seeding_time - horizon days."
        assert len(self.shifted_cases) == self.t, "shifted_cases must span t days."
        assert len(self.day_of_week) == modelled, "day_of_week must span t - seeding_time days."
        assert len(self.breakpoints) == modelled, "breakpoints must span t - seeding_time days."
        assert self.bp_n == int(self.breakpoints.sum()), "bp_n must equal the number of flagged breakpoints."
        for name in ("delay_mean_mean", "delay_mean_sd", "delay_sd_mean", "delay_sd_sd", "max_delay"):
            assert len(getattr(self, name)) == self.delays, f"{name} must have one entry per delay ({self.delays})."
        if self.fixed == 0:
            assert self.M >= 1, "At least one GP basis function is required."
            assert self.ls_min <= self.ls_max, "GP length scale bounds are inverted."
        return self

    def to_dict(self) -> dict[str, Any]:
        """
        Return the payload as a plain mapping for an inference engine.
        """
        return self.model_dump()


class RegionStatus(str, Enum):
    """Lifecycle state of one region's estimation."""

    pending = "pending"
    running = "running"
    succeeded = "succeeded"
    failed = "failed"
    timed_out = "timed_out"


class RegionTask(BaseModel):
    """A region's model input, its initial-value generator and the algorithm arguments."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    region: str = Field(description="Region identifier.")
    data: ModelInputData = Field(description="Numeric model input.")
    initial_conditions: Callable[[], dict[str, np.ndarray]] = Field(
        description="Zero-argument generator of one set of starting values per chain."
    )
    sampler: SamplerArguments = Field(description="Inference engine arguments.")
    dates: list[date] = Field(description="Calendar date of each modelled day (t - seeding_time entries).")

    @model_validator(mode="after")
    def check_dates(self: "RegionTask") -> "RegionTask":
        """One date per modelled day."""
        assert len(self.dates) == self.data.t - self.data.seeding_time, "dates must span t - seeding_time days."
        return self


class RegionResult(BaseModel):
    """Outcome of fitting one region."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    region: str = Field(description="Region identifier.")
    status: RegionStatus = Field(RegionStatus.pending, description="Final state of the region.")
    draws: dict[str, np.ndarray] | None = Field(None, description="Posterior draws per parameter from kept chains.")
    samples: pd.DataFrame | None = Field(None, description="Tidy posterior sample table.")
    summarised: pd.DataFrame | None = Field(None, description="Posterior summary per parameter and date.")
    summary: pd.DataFrame | None = Field(None, description="Headline reporting table.")
    error_message: str | None = Field(None, description="Captured error for failed or timed-out regions.")
    elapsed_time: float = Field(0.0, ge=0, description="Wall-clock seconds spent on the region.")
    n_chains: int = Field(0, ge=0, description="Number of chains that completed.")

    @property
    def usable(self) -> bool:
        """Whether the region contributes to aggregate summaries."""
        return self.status in (RegionStatus.succeeded, RegionStatus.timed_out) and self.n_chains > 0


class AggregateSummary(BaseModel):
    """Cross-region reporting table plus optional per-region numeric detail."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    table: pd.DataFrame = Field(description="One row per usable region with formatted headline measures.")
    numeric: pd.DataFrame | None = Field(None, description="Numeric point/lower/upper per region and measure.")
    top_regions: list[str] = Field(default_factory=list, description="Regions with most recent reports.")
    failed: dict[str, str] = Field(default_factory=dict, description="Failed regions and their error messages.")


class RegionalOutput(BaseModel):
    """Results of a multi-region estimation call."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    results: list[RegionResult] = Field(description="Per-region results in caller-supplied region order.")
    samples: pd.DataFrame | None = Field(None, description="Combined tidy samples with a region column.")
    summarised: pd.DataFrame | None = Field(None, description="Combined summaries with a region column.")
    summary: AggregateSummary | None = Field(None, description="Cross-region summary.")

    @property
    def ledger(self) -> dict[str, RegionStatus]:
        """Final status of every region."""
        return {result.region: result.status for result in self.results}
