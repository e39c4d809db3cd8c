from pydantic import BaseModel, ConfigDict, Field, field_validator


def get_default_CrIs() -> list[float]:
    """
    Return the default credible interval levels.
    """
    return [0.2, 0.5, 0.9]


def get_default_time_varying() -> list[str]:
    """
    Return the time-varying parameters summarised by default.
    """
    return ["R", "infections", "growth_rate", "reported_cases"]


class SummaryOutput(BaseModel):
    """Settings for headline and cross-region summaries."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    time_window: int = Field(7, ge=1, description="Trailing window in days used to rank regions by reports.")
    top_regions: int = Field(6, ge=1, description="Number of regions with most reports to highlight.")
    return_numeric: bool = Field(False, description="Keep numeric point/lower/upper columns in headline tables.")


class OutputConfiguration(BaseModel):
    """Specifications for posterior summaries and tidy outputs."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    CrIs: list[float] = Field(
        default_factory=get_default_CrIs,
        description="Credible interval levels, each in (0, 1). Level p maps to quantiles (0.5 - p/2, 0.5 + p/2).",
    )
    time_varying: list[str] = Field(
        default_factory=get_default_time_varying,
        description="Posterior parameters indexed by time to include in tidy outputs.",
    )
    return_samples: bool = Field(True, description="Keep the tidy posterior sample table in region results.")
    summary: SummaryOutput = Field(default_factory=SummaryOutput, description="Summary table settings.")

    @field_validator("CrIs")
    @classmethod
    def check_CrIs(cls, v: list[float]) -> list[float]:
        """Levels lie strictly between 0 and 1; duplicates are dropped and levels sorted."""
        assert v, "At least one credible interval level is required."
        assert all(0 < p < 1 for p in v), "Credible interval levels must lie in (0, 1)."
        return sorted(set(v))
