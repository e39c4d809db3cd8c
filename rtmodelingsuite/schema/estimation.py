"""Root schema for an Rt estimation configuration file."""

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..errors import ConfigurationError
from ..utils import to_seconds
from .common import DelaySpec, GenerationTimeSpec, Meta
from .output import OutputConfiguration

logger = logging.getLogger(__name__)


class BackcalcConfig(BaseModel):
    """Settings for the delay-shifted case series used as a back-calculation prior."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    smoothing_window: int = Field(7, ge=1, description="Width in days of the rolling mean applied to shifted cases.")


class RegionalConfiguration(BaseModel):
    """How regions are scheduled."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_workers: int = Field(1, ge=1, description="Maximum number of regions fitted concurrently. 1 is sequential.")
    timeout: float | None = Field(
        None,
        description="Per-region wall-clock limit in seconds, or a duration string such as '30m'. None disables it.",
    )
    regions: list[str] | None = Field(None, description="Regions to estimate, in output order. Defaults to all.")

    @field_validator("timeout", mode="before")
    @classmethod
    def parse_timeout(cls, v: Any) -> float | None:
        """Accept seconds, duration strings or timedeltas."""
        seconds = to_seconds(v)
        assert seconds is None or seconds > 0, "Region timeout must be positive."
        return seconds


class EstimationConfiguration(BaseModel):
    """
    Settings for one estimation call.

    ``rt``, ``gp``, ``obs_model`` and ``sampler`` hold user overrides only; they
    are resolved against their defaults and validated when model inputs are
    built. Setting ``rt`` or ``gp`` to ``null`` switches that feature off.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    meta: Meta | None = Field(None, description="General metadata.")
    horizon: int = Field(7, ge=0, description="Days to forecast beyond the last observation.")
    samples: int = Field(1000, ge=1, description="Number of posterior draws to keep.")
    zero_threshold: float = Field(
        50.0,
        ge=0,
        description="Zeros preceded by a 7-day average above this are treated as missing and imputed.",
    )
    generation_time: GenerationTimeSpec = Field(description="Generation time distribution.")
    delays: list[DelaySpec] = Field(default_factory=list, description="Ordered delays from infection to report.")
    rt: dict[str, Any] | None = Field(default_factory=dict, description="Rt overrides, or null to disable Rt.")
    gp: dict[str, Any] | None = Field(default_factory=dict, description="GP overrides, or null to disable the GP.")
    obs_model: dict[str, Any] = Field(default_factory=dict, description="Observation model overrides.")
    backcalc: BackcalcConfig = Field(default_factory=BackcalcConfig, description="Back-calculation settings.")
    sampler: dict[str, Any] = Field(default_factory=dict, description="Inference engine argument overrides.")
    regional: RegionalConfiguration = Field(default_factory=RegionalConfiguration, description="Region scheduling.")
    output: OutputConfiguration = Field(default_factory=OutputConfiguration, description="Output settings.")


class EstimationConfig(BaseModel):
    """Root configuration model."""

    estimation: EstimationConfiguration = Field(description="Estimation settings.")


def validate_estimation(config: dict) -> EstimationConfig:
    """
    Validate the given configuration against the schema.

    Parameters
    ----------
    config : dict
        The configuration dictionary to validate.

    Returns
    -------
    EstimationConfig
        The validated configuration.

    Raises
    ------
    ConfigurationError
        If the configuration does not match the schema.
    """
    try:
        root = EstimationConfig(**config)
        logger.info("Estimation configuration validated successfully.")
    except Exception as e:
        msg = f"Configuration validation error: {e}"
        raise ConfigurationError(msg) from e
    return root
