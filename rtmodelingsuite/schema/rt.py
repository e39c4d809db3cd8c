"""Schema for the reproduction number (Rt) representation."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class FuturePolicyEnum(str, Enum):
    """How Rt is extended beyond the last fully informed estimate."""

    project = "project"
    latest = "latest"
    estimate = "estimate"


class RtPrior(BaseModel):
    """Linear-scale prior on the initial reproduction number."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    mean: float = Field(1.0, gt=0, description="Prior mean of Rt.")
    sd: float = Field(1.0, gt=0, description="Prior standard deviation of Rt.")


class RtConfig(BaseModel):
    """Reproduction number settings after default resolution."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    prior: RtPrior = Field(default_factory=RtPrior, description="Prior on the initial Rt.")
    use_rt: bool = Field(True, description="Generate infections from Rt rather than back-calculation.")
    random_walk_step: int = Field(
        0,
        ge=0,
        description="Length in days of each step of a random walk on Rt. 0 disables the random walk.",
    )
    use_breakpoints: bool = Field(True, description="Allow step changes in Rt at flagged breakpoints.")
    future_policy: FuturePolicyEnum | int = Field(
        FuturePolicyEnum.latest,
        description=(
            "Rt beyond the estimation window: 'project' keeps evolving, 'latest' holds the last estimate, "
            "'estimate' holds the estimate one mean delay back, an integer holds the estimate at that offset."
        ),
    )

    @model_validator(mode="before")
    @classmethod
    def force_breakpoints_for_random_walk(cls, data: Any) -> Any:
        """A random walk is encoded as regular breakpoints, so it switches breakpoints on."""
        if isinstance(data, dict) and (data.get("random_walk_step") or 0) > 0:
            data = {**data, "use_breakpoints": True}
        return data


def default_rt_settings() -> dict[str, Any]:
    """
    Return the default Rt settings table.
    """
    return {
        "prior": {"mean": 1.0, "sd": 1.0},
        "use_rt": True,
        "random_walk_step": 0,
        "use_breakpoints": True,
        "future_policy": FuturePolicyEnum.latest,
    }


def disabled_rt_settings() -> dict[str, Any]:
    """
    Return the settings synthesized when the Rt feature is switched off.
    """
    return {
        "prior": {"mean": 1.0, "sd": 1.0},
        "use_rt": False,
        "random_walk_step": 0,
        "use_breakpoints": False,
        "future_policy": FuturePolicyEnum.project,
    }
