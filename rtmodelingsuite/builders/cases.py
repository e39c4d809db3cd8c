"""Preparation of reported case series: cleaning, padding and delay-shifted priors."""

import logging

import numpy as np
import pandas as pd
import scipy.stats

from ..errors import DataError

logger = logging.getLogger(__name__)


def _clean_region(frame: pd.DataFrame, horizon: int, zero_threshold: float) -> pd.DataFrame:
    frame = frame.sort_values("date")
    last_observed = frame["date"].max()
    grid = pd.date_range(frame["date"].min(), last_observed + pd.Timedelta(days=horizon), freq="D", name="date")
    out = frame.set_index("date").reindex(grid).reset_index()

    observed = out["date"] <= last_observed
    out.loc[observed, "confirm"] = out.loc[observed, "confirm"].fillna(0)
    out["breakpoint"] = out["breakpoint"].fillna(0).astype(int) if "breakpoint" in out else 0

    started = out["confirm"].fillna(0).cumsum() > 0
    if not started.any():
        return out.iloc[0:0]
    out = out.loc[started].reset_index(drop=True)
    observed = out["date"] <= last_observed

    # Mean of the 7 days before each day; the day itself is zero when imputed.
    average_7 = out["confirm"].rolling(window=8, min_periods=8).sum() / 7
    impute = observed & (out["confirm"] == 0) & (average_7 > zero_threshold)
    if impute.any():
        logger.debug("BUILDER: imputing %d zero counts from the trailing 7-day average.", int(impute.sum()))
        out.loc[impute, "confirm"] = average_7[impute].round()

    out["day_of_week"] = out["date"].dt.dayofweek + 1
    return out


def create_clean_reported_cases(
    reported_cases: pd.DataFrame, horizon: int = 0, zero_threshold: float = 50.0
) -> pd.DataFrame:
    """
    Clean a reported case series ahead of model data assembly.

    For each region (or the whole frame when there is no ``region`` column):

    - completes the daily date grid and extends it ``horizon`` days past the last
      report, leaving ``confirm`` missing on forecast days;
    - fills missing counts on observed days, and missing breakpoints, with 0;
    - drops days before the first positive count;
    - replaces a zero whose trailing 7-day average exceeds ``zero_threshold``
      with the rounded average;
    - adds ``day_of_week`` (1 = Monday).

    Regions without any positive count are dropped.

    Parameters
    ----------
    reported_cases : pd.DataFrame
        Columns ``date`` and ``confirm``, optionally ``region`` and ``breakpoint``.
    horizon : int
        Days to extend the series by.
    zero_threshold : float
        Average above which a zero is treated as a missed report.

    Returns
    -------
    pd.DataFrame
        Cleaned series with ``date``, ``confirm``, ``breakpoint``, ``day_of_week``
        and, when given, ``region``.

    Raises
    ------
    DataError
        If required columns are missing.
    """
    missing = {"date", "confirm"} - set(reported_cases.columns)
    if missing:
        msg = f"Reported cases are missing columns: {sorted(missing)}"
        raise DataError(msg)

    frame = reported_cases.copy()
    frame["date"] = pd.to_datetime(frame["date"]).dt.normalize()
    frame["confirm"] = pd.to_numeric(frame["confirm"], errors="coerce").astype(float)

    if "region" not in frame.columns:
        return _clean_region(frame, horizon, zero_threshold)

    cleaned = []
    for region, group in frame.groupby("region", sort=False):
        out = _clean_region(group.drop(columns="region"), horizon, zero_threshold)
        if out.empty:
            logger.warning("BUILDER: region %s has no positive case counts and was dropped.", region)
            continue
        out.insert(0, "region", region)
        cleaned.append(out)
    if not cleaned:
        return frame.iloc[0:0]
    return pd.concat(cleaned, ignore_index=True)


def pad_reported_cases(reported_cases: pd.DataFrame, mean_shift: int) -> pd.DataFrame:
    """
    Prepend ``mean_shift`` zero-count days to a single-region series.

    The padded days are the seeding period: infections there produce the reports
    on the first observed days.
    """
    if mean_shift <= 0:
        return reported_cases.reset_index(drop=True)
    start = reported_cases["date"].min()
    dates = pd.date_range(end=start - pd.Timedelta(days=1), periods=mean_shift, freq="D")
    padding = pd.DataFrame({"date": dates, "confirm": 0.0, "breakpoint": 0, "day_of_week": dates.dayofweek + 1})
    if "region" in reported_cases.columns:
        padding.insert(0, "region", reported_cases["region"].iloc[0])
    return pd.concat([padding, reported_cases], ignore_index=True)[reported_cases.columns]


def _log_linear_fit(values: np.ndarray) -> tuple[float, float]:
    """Intercept and slope of ``log(values)`` against a 1-based index."""
    t = np.arange(1, len(values) + 1)
    if len(values) < 2:
        return (float(np.log(values[0])) if len(values) else 0.0), 0.0
    fit = scipy.stats.linregress(t, np.log(values))
    return float(fit.intercept), float(fit.slope)


def create_shifted_cases(
    reported_cases: pd.DataFrame, mean_shift: int, smoothing_window: int, horizon: int
) -> np.ndarray:
    """
    Delay-shifted, smoothed reports used as the prior on infections.

    Reports are moved ``mean_shift`` days earlier and smoothed with a
    right-aligned rolling mean of ``smoothing_window`` days. The final
    ``mean_shift + horizon`` days, which have no shifted reports, are extrapolated
    from a log-linear trend fitted to the last week of smoothed values. Values are
    rounded up and are at least 1.

    Parameters
    ----------
    reported_cases : pd.DataFrame
        Single-region series with ``confirm``, padded and including forecast days.
    mean_shift : int
        Mean delay in days.
    smoothing_window : int
        Rolling mean width in days.
    horizon : int
        Forecast days at the end of the series.

    Returns
    -------
    np.ndarray
        One value per row of ``reported_cases``.

    Raises
    ------
    DataError
        If the series is too short for the shift and horizon.
    """
    confirm = reported_cases["confirm"].to_numpy(dtype=float)
    padded = pd.Series(np.concatenate([np.zeros(smoothing_window), confirm]))
    end = len(padded) - horizon - mean_shift
    if end <= smoothing_window:
        msg = f"Series of {len(confirm)} days is too short for a {mean_shift}-day shift and {horizon}-day horizon."
        raise DataError(msg)

    smoothed = padded.shift(-mean_shift).rolling(window=smoothing_window, min_periods=smoothing_window).mean()
    smoothed = smoothed.fillna(1.0).replace(0.0, 1.0).to_numpy(copy=True)

    final_week = smoothed[max(0, end - 7) : end]
    intercept, slope = _log_linear_fit(final_week)
    offset = end - len(final_week)
    t = np.arange(end, len(smoothed)) - offset + 1
    smoothed[end:] = np.exp(intercept + slope * t)

    return np.ceil(smoothed)[smoothing_window:]
