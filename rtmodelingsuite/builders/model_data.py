"""Assembly of the numeric model input for one region."""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

import numpy as np
import pandas as pd
import scipy.stats
from pydantic import ValidationError

from ..errors import ConfigurationError, DataError
from ..schema.common import DelaySpec, GenerationTimeSpec
from ..schema.dispatcher import ModelInputData
from ..telemetry import ExecutionTelemetry
from .delays import create_delay_data, create_generation_time_data
from .gp import create_gp_data
from .observation import create_obs_model
from .rt import create_rt_data

logger = logging.getLogger(__name__)


def _fit_growth(first_week: np.ndarray) -> float:
    """Slope of log cases against a 1-based day index, using positive days only."""
    t = np.arange(1, len(first_week) + 1)
    informative = np.isfinite(first_week) & (first_week > 0)
    if informative.sum() < 2:
        msg = f"Only {int(informative.sum())} informative days in the first week."
        raise DataError(msg)
    slope = scipy.stats.linregress(t[informative], np.log(first_week[informative])).slope
    if not np.isfinite(slope):
        msg = "Log-linear trend of the first week is undefined."
        raise DataError(msg)
    return float(slope)


def _fallback(message: str) -> None:
    logger.warning("BUILDER: %s", message)
    telemetry = ExecutionTelemetry.get_current()
    if telemetry:
        telemetry.record_warning(message)


def estimate_first_week_priors(cases: Sequence[float] | np.ndarray, seeding_time: int) -> tuple[float, float]:
    """
    Priors on initial log infections and growth from the first observed week.

    Parameters
    ----------
    cases : array-like
        Observed cases in the estimation window.
    seeding_time : int
        Seeding days; the growth prior is only fitted when this exceeds 1.

    Returns
    -------
    tuple[float, float]
        ``(prior_infections, prior_growth)``. Each falls back to 0 when the first
        week cannot support it.

    Examples
    --------
    >>> estimate_first_week_priors([0, 0, 0], seeding_time=5)
    (0.0, 0.0)
    """
    first_week = np.asarray(cases, dtype=float)[: min(7, len(cases))]

    prior_infections = 0.0
    observed = first_week[np.isfinite(first_week)]
    if len(observed) and observed.mean() > 0:
        prior_infections = float(np.log(observed.mean()))
    else:
        _fallback("No positive counts in the first week; initial infections prior set to 0.")

    prior_growth = 0.0
    if seeding_time > 1:
        try:
            prior_growth = _fit_growth(first_week)
        except DataError as e:
            _fallback(f"{e} Initial growth prior set to 0.")
    return prior_infections, prior_growth


def create_model_data(
    reported_cases: pd.DataFrame,
    shifted_cases: Sequence[float] | np.ndarray,
    *,
    seeding_time: int,
    horizon: int,
    generation_time: GenerationTimeSpec,
    delays: DelaySpec | Sequence[DelaySpec] | None,
    rt: Mapping[str, Any] | None,
    gp: Mapping[str, Any] | None,
    obs_model: Mapping[str, Any] | None,
) -> ModelInputData:
    """
    Combine a prepared case series and model settings into validated model input.

    Parameters
    ----------
    reported_cases : pd.DataFrame
        Single-region series padded with ``seeding_time`` leading days and
        extended by ``horizon`` forecast days. Columns ``confirm`` and
        ``day_of_week`` are required, ``breakpoint`` is optional.
    shifted_cases : array-like
        Back-calculation prior with one value per row of ``reported_cases``.
    seeding_time : int
        Seeding days, the mean delay shift.
    horizon : int
        Forecast horizon in days.
    generation_time : GenerationTimeSpec
        Generation time distribution.
    delays : DelaySpec | Sequence[DelaySpec] | None
        Ordered delay distributions.
    rt : Mapping[str, Any] | None
        Rt overrides, or ``None`` to switch Rt off.
    gp : Mapping[str, Any] | None
        GP overrides, or ``None`` to switch the GP off.
    obs_model : Mapping[str, Any] | None
        Observation model overrides.

    Returns
    -------
    ModelInputData
        Immutable model input.

    Raises
    ------
    DataError
        If the series is too short or has missing observed counts.
    ConfigurationError
        If settings are invalid or the assembled input violates an invariant.
    """
    t = len(reported_cases)
    if seeding_time >= t:
        msg = f"Seeding time ({seeding_time}) must be shorter than the series ({t} days)."
        raise DataError(msg)
    if horizon >= t - seeding_time:
        msg = f"Horizon ({horizon}) leaves no observed days after {seeding_time} seeding days in {t} days."
        raise DataError(msg)

    confirm = reported_cases["confirm"].to_numpy(dtype=float)
    cases = confirm[seeding_time : t - horizon]
    if np.isnan(cases).any():
        msg = "Observed case counts must not be missing within the estimation window."
        raise DataError(msg)

    if "day_of_week" in reported_cases.columns:
        day_of_week = reported_cases["day_of_week"].to_numpy()[seeding_time:]
    else:
        day_of_week = (pd.to_datetime(reported_cases["date"]).dt.dayofweek + 1).to_numpy()[seeding_time:]
    if "breakpoint" in reported_cases.columns:
        breakpoints = reported_cases["breakpoint"].fillna(0).to_numpy(dtype=int)[seeding_time:]
    else:
        breakpoints = np.zeros(t - seeding_time, dtype=int)

    prior_infections, prior_growth = estimate_first_week_priors(cases, seeding_time)

    data: dict[str, Any] = {
        "t": t,
        "seeding_time": seeding_time,
        "horizon": horizon,
        "cases": cases.astype(int),
        "shifted_cases": np.asarray(shifted_cases, dtype=float),
        "day_of_week": day_of_week,
        "burn_in": 0,
        "prior_infections": prior_infections,
        "prior_growth": prior_growth,
        **create_generation_time_data(generation_time),
        **create_delay_data(delays),
        **create_rt_data(rt, breakpoints, delay=seeding_time, horizon=horizon),
        **create_gp_data(gp, t=t, seeding_time=seeding_time, horizon=horizon),
        **create_obs_model(obs_model),
    }

    if data["obs_scale"] == 1:
        data["shifted_cases"] = data["shifted_cases"] / data["obs_scale_mean"]
        data["prior_infections"] = float(np.log(np.exp(data["prior_infections"]) / data["obs_scale_mean"]))

    try:
        model_data = ModelInputData(**data)
    except ValidationError as e:
        msg = f"Invalid model input data: {e}"
        raise ConfigurationError(msg) from e

    logger.info(
        "BUILDER: assembled model data (t=%d, seeding_time=%d, horizon=%d, delays=%d, breakpoints=%d).",
        t,
        seeding_time,
        horizon,
        model_data.delays,
        model_data.bp_n,
    )
    return model_data
