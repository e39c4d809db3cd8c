"""Output stage: tidy posterior samples, credible intervals and headline summaries."""

import logging
import math
from collections.abc import Sequence
from datetime import date

import numpy as np
import pandas as pd

from ..schema.dispatcher import AggregateSummary, RegionalOutput, RegionResult, RegionStatus, RegionTask
from ..schema.output import OutputConfiguration, get_default_CrIs, get_default_time_varying
from ..telemetry import ExecutionTelemetry
from ..utils.formatting import signif

logger = logging.getLogger(__name__)

SAMPLE_COLUMNS = ["parameter", "draw_id", "time", "date", "stratum", "value", "type"]
SUMMARY_KEYS = ["parameter", "time", "date", "stratum", "type"]

MEASURES = [
    "New confirmed cases by infection date",
    "Expected change in daily cases",
    "Effective reproduction no.",
    "Rate of growth",
    "Doubling/halving time (days)",
]


# ===== Tidy samples =====


def _estimate_type(dates: pd.DatetimeIndex, last_observed: pd.Timestamp, seeding_time: int) -> np.ndarray:
    partial_from = last_observed - pd.Timedelta(days=seeding_time)
    return np.where(
        dates > last_observed,
        "forecast",
        np.where(dates > partial_from, "estimate based on partial data", "estimate"),
    )


def format_samples(
    draws: dict[str, np.ndarray],
    dates: Sequence[date],
    horizon: int,
    seeding_time: int = 0,
    time_varying: Sequence[str] | None = None,
) -> pd.DataFrame:
    """
    Convert posterior draws into a tidy long table.

    Time-varying parameters are aligned to ``dates`` from the right, so a
    parameter with fewer (or more) time points than dates ends on the last date.
    Other two-dimensional parameters are indexed by ``stratum``.

    Parameters
    ----------
    draws : dict[str, np.ndarray]
        Draws per parameter, first axis indexing draws.
    dates : Sequence[date]
        Date of each modelled day; the last ``horizon`` are forecast days.
    horizon : int
        Forecast horizon in days.
    seeding_time : int
        Observed days before the last observation whose estimates rely on partial data.
    time_varying : Sequence[str] | None
        Names of time-indexed parameters. Defaults to R, infections, growth_rate
        and reported_cases.

    Returns
    -------
    pd.DataFrame
        Columns ``parameter``, ``draw_id``, ``time``, ``date``, ``stratum``, ``value``
        and ``type`` ("estimate", "estimate based on partial data" or "forecast"
        for time-varying parameters).
    """
    time_varying = set(get_default_time_varying() if time_varying is None else time_varying)
    end_date = pd.Timestamp(dates[-1])
    last_observed = end_date - pd.Timedelta(days=horizon)

    frames = []
    for name, values in draws.items():
        arr = np.asarray(values, dtype=float)
        arr = arr.reshape(arr.shape[0], -1)
        n_draws, width = arr.shape
        draw_id = np.repeat(np.arange(1, n_draws + 1), width)
        index = np.tile(np.arange(1, width + 1), n_draws)
        frame = pd.DataFrame({"parameter": name, "draw_id": draw_id, "value": arr.ravel()})
        if name in time_varying:
            offsets = pd.to_timedelta(width - index, unit="D")
            frame_dates = pd.DatetimeIndex(end_date - offsets)
            frame["time"] = index
            frame["date"] = frame_dates
            frame["stratum"] = np.nan
            frame["type"] = _estimate_type(frame_dates, last_observed, seeding_time)
        else:
            frame["time"] = np.nan
            frame["date"] = pd.NaT
            frame["stratum"] = index if width > 1 else np.nan
            frame["type"] = None
        frames.append(frame[SAMPLE_COLUMNS])

    if not frames:
        return pd.DataFrame(columns=SAMPLE_COLUMNS)
    return pd.concat(frames, ignore_index=True)


# ===== Credible intervals =====


def _level_name(level: float) -> str:
    return str(int(round(level * 100)))


def calc_CrI(values: Sequence[float] | np.ndarray, CrI: float) -> tuple[float, float]:
    """
    Equal-tailed credible interval from draws.

    Level ``p`` maps to the quantiles ``(0.5 - p/2, 0.5 + p/2)`` by linear
    interpolation between order statistics.

    Examples
    --------
    >>> calc_CrI(range(1, 11), 0.9)
    (1.45, 9.55)
    """
    lower, upper = np.quantile(np.asarray(values, dtype=float), [0.5 - CrI / 2, 0.5 + CrI / 2])
    return float(lower), float(upper)


def calc_CrIs(
    samples: pd.DataFrame, summarise_by: Sequence[str] | None = None, CrIs: Sequence[float] | None = None
) -> pd.DataFrame:
    """
    Credible intervals of ``value`` per group.

    Returns
    -------
    pd.DataFrame
        The grouping columns plus ``lower_XX`` and ``upper_XX`` per level, where
        ``XX`` is the level in percent.
    """
    summarise_by = list(SUMMARY_KEYS if summarise_by is None else summarise_by)
    CrIs = list(CrIs or get_default_CrIs())
    columns = [f"{bound}_{_level_name(level)}" for level in CrIs for bound in ("lower", "upper")]

    records = []
    for keys, values in samples.groupby(summarise_by, dropna=False, sort=False)["value"]:
        intervals = [bound for level in CrIs for bound in calc_CrI(values, level)]
        records.append([*keys, *intervals])
    return pd.DataFrame(records, columns=[*summarise_by, *columns])


def calc_summary_measures(
    samples: pd.DataFrame, summarise_by: Sequence[str] | None = None, CrIs: Sequence[float] | None = None
) -> pd.DataFrame:
    """
    Posterior summary of ``value`` per group.

    Returns
    -------
    pd.DataFrame
        The grouping columns plus ``median``, ``mean``, ``sd`` and ``lower_XX``/``upper_XX``
        per credible interval level.
    """
    summarise_by = list(SUMMARY_KEYS if summarise_by is None else summarise_by)
    grouped = samples.groupby(summarise_by, dropna=False, sort=False)["value"]
    measures = pd.DataFrame(
        [[*keys, values.median(), values.mean(), values.std()] for keys, values in grouped],
        columns=[*summarise_by, "median", "mean", "sd"],
    )
    intervals = calc_CrIs(samples, summarise_by, CrIs)
    return pd.concat([measures, intervals.drop(columns=summarise_by)], axis=1)


# ===== Headline summary =====


def map_prob_change(prob_control: float) -> str:
    """
    Label the expected change in daily cases from P(Rt <= 1).

    Examples
    --------
    >>> map_prob_change(0.02)
    'Increasing'
    >>> map_prob_change(0.5)
    'Unsure'
    >>> map_prob_change(0.99)
    'Decreasing'
    """
    if prob_control < 0.05:
        return "Increasing"
    if prob_control < 0.4:
        return "Likely increasing"
    if prob_control < 0.6:
        return "Unsure"
    if prob_control < 0.95:
        return "Likely decreasing"
    return "Decreasing"


def make_conf(median: float, lower: float, upper: float, digits: int | None = None) -> str:
    """
    Format a point estimate with its credible interval.

    Examples
    --------
    >>> make_conf(1.234, 0.91, 1.56, digits=1)
    '1.2 (0.9–1.6)'
    >>> make_conf(1500.2, 1200.7, 1800.1)
    '1500 (1201–1800)'
    """

    def fmt(value: float) -> str:
        if digits is None or digits == 0:
            return str(int(round(value))) if math.isfinite(value) else str(value)
        return f"{value:.{digits}f}"

    return f"{fmt(median)} ({fmt(lower)}–{fmt(upper)})"


def _latest_estimate(summarised: pd.DataFrame, parameter: str, level: str) -> pd.Series:
    rows = summarised[(summarised["parameter"] == parameter) & (summarised["type"] != "forecast")]
    if rows.empty:
        msg = f"No non-forecast estimates of {parameter} to summarise."
        raise ValueError(msg)
    latest = rows.loc[rows["date"] == rows["date"].max()].iloc[0]
    return pd.Series({"median": latest["median"], "lower": latest[f"lower_{level}"], "upper": latest[f"upper_{level}"]})


def report_summary(
    summarised_estimates: pd.DataFrame,
    rt_samples: pd.DataFrame | Sequence[float] | np.ndarray,
    CrI: float | None = None,
    return_numeric: bool = False,
) -> pd.DataFrame:
    """
    Headline reporting table at the latest non-forecast date.

    Rows are new infections, the expected-change label, Rt, the growth rate and
    the doubling time ``ln(2) / r``. When the median growth rate is negative the
    last row reports a halving time, ``-ln(2) / r``.

    Parameters
    ----------
    summarised_estimates : pd.DataFrame
        Output of :func:`calc_summary_measures` for one region.
    rt_samples : pd.DataFrame | array-like
        Rt draws at the latest date, or tidy samples from which they are taken.
    CrI : float | None
        Credible interval level to report; defaults to the widest level present.
    return_numeric : bool
        Keep ``point``, ``lower`` and ``upper`` numeric columns.

    Returns
    -------
    pd.DataFrame
        Columns ``measure`` and ``estimate`` (plus numeric columns on request).
    """
    if CrI is None:
        levels = [int(c.split("_")[1]) for c in summarised_estimates.columns if c.startswith("lower_")]
        level = str(max(levels))
    else:
        level = _level_name(CrI)

    infections = _latest_estimate(summarised_estimates, "infections", level)
    rt = _latest_estimate(summarised_estimates, "R", level)
    growth = _latest_estimate(summarised_estimates, "growth_rate", level)

    if isinstance(rt_samples, pd.DataFrame):
        rt_rows = rt_samples[(rt_samples["parameter"] == "R") & (rt_samples["type"] != "forecast")]
        rt_values = rt_rows.loc[rt_rows["date"] == rt_rows["date"].max(), "value"].to_numpy()
    else:
        rt_values = np.asarray(rt_samples, dtype=float)
    prob_control = signif(float(np.mean(rt_values <= 1)), 2)

    with np.errstate(divide="ignore"):
        if growth["median"] < 0:
            doubling_label = "Halving time (days)"
            doubling = -np.log(2) / growth[["median", "lower", "upper"]].to_numpy(dtype=float)
        else:
            doubling_label = "Doubling time (days)"
            doubling = np.log(2) / growth[["median", "upper", "lower"]].to_numpy(dtype=float)
    doubling = np.round(doubling, 1)

    table = pd.DataFrame(
        {
            "measure": [*MEASURES[:4], doubling_label],
            "estimate": [
                make_conf(*infections),
                map_prob_change(prob_control),
                make_conf(*rt, digits=1),
                make_conf(*growth, digits=2),
                make_conf(*doubling, digits=1),
            ],
        }
    )
    if return_numeric:
        for i, bound in enumerate(("median", "lower", "upper")):
            column = "point" if bound == "median" else bound
            table[column] = [
                round(infections[bound]),
                prob_control if bound == "median" else np.nan,
                round(rt[bound], 1),
                round(growth[bound], 2),
                doubling[i],
            ]
    return table


# ===== Regional aggregation =====


def get_regional_results(results: Sequence[RegionResult], table: str = "summarised") -> pd.DataFrame | None:
    """
    Combine a per-region table across usable regions with a leading ``region`` column.

    Parameters
    ----------
    results : Sequence[RegionResult]
        Region results in output order.
    table : str
        ``"samples"``, ``"summarised"`` or ``"summary"``.

    Returns
    -------
    pd.DataFrame | None
        Combined table, or None when no region has one.
    """
    frames = []
    for result in results:
        frame = getattr(result, table)
        if result.usable and frame is not None:
            frames.append(frame.assign(region=result.region)[["region", *frame.columns]])
    if not frames:
        return None
    return pd.concat(frames, ignore_index=True)


def get_regions_with_most_reports(
    reported_cases: pd.DataFrame, time_window: int = 7, no_regions: int = 6
) -> list[str]:
    """
    Regions ranked by cases reported in their own trailing window.

    The window runs from ``time_window`` days before each region's latest date
    up to that date, both ends included.

    Returns
    -------
    list[str]
        At most ``no_regions`` region identifiers, most reports first.
    """
    if "region" not in reported_cases.columns or reported_cases.empty:
        return []
    frame = reported_cases.assign(date=pd.to_datetime(reported_cases["date"]))
    cutoff = frame.groupby("region")["date"].transform("max") - pd.Timedelta(days=time_window)
    recent = frame[frame["date"] >= cutoff]
    totals = recent.groupby("region", sort=False)["confirm"].sum().sort_values(ascending=False, kind="stable")
    return [str(region) for region in totals.index[:no_regions]]


def summarise_regions(
    results: Sequence[RegionResult],
    reported_cases: pd.DataFrame | None = None,
    time_window: int = 7,
    no_regions: int = 6,
) -> AggregateSummary:
    """
    Cross-region headline table from regions with a usable fit.

    Returns
    -------
    AggregateSummary
        One row per usable region, numeric detail, the regions with most recent
        reports, and failed regions with their messages.
    """
    rows = []
    numeric = []
    for result in results:
        if not result.usable or result.summary is None:
            continue
        summary = result.summary
        halving = summary["measure"].iloc[-1].startswith("Halving")
        rows.append(
            {
                "region": result.region,
                **dict(zip(MEASURES, summary["estimate"], strict=True)),
                "Doubling or halving": "halving" if halving else "doubling",
            }
        )
        if {"point", "lower", "upper"} <= set(summary.columns):
            numeric.append(summary.assign(region=result.region)[["region", "measure", "point", "lower", "upper"]])

    failed = {
        result.region: result.error_message or "unknown error"
        for result in results
        if result.status == RegionStatus.failed or (result.status == RegionStatus.timed_out and not result.usable)
    }
    top_regions = []
    if reported_cases is not None:
        top_regions = get_regions_with_most_reports(reported_cases, time_window, no_regions)
    return AggregateSummary(
        table=pd.DataFrame(rows, columns=["region", *MEASURES, "Doubling or halving"]),
        numeric=pd.concat(numeric, ignore_index=True) if numeric else None,
        top_regions=top_regions,
        failed=failed,
    )


def summarise_region(result: RegionResult, task: RegionTask, output: OutputConfiguration) -> None:
    """
    Fill the tidy samples, summary measures and headline table of a usable region in place.
    """
    samples = format_samples(
        result.draws,
        task.dates,
        horizon=task.data.horizon,
        seeding_time=task.data.seeding_time,
        time_varying=output.time_varying,
    )
    summarised = calc_summary_measures(samples, CrIs=output.CrIs)
    result.summary = report_summary(summarised, samples, return_numeric=output.summary.return_numeric)
    result.summarised = summarised
    result.samples = samples if output.return_samples else None


def dispatch_output(
    tasks: Sequence[RegionTask],
    results: Sequence[RegionResult],
    reported_cases: pd.DataFrame | None = None,
    output: OutputConfiguration | None = None,
) -> RegionalOutput:
    """
    Summarise every usable region and aggregate across regions.

    A region whose draws cannot be summarised is marked failed; other regions are unaffected.

    Parameters
    ----------
    tasks : Sequence[RegionTask]
        Built tasks, used for dates and window lengths.
    results : Sequence[RegionResult]
        Region results in output order.
    reported_cases : pd.DataFrame | None
        Raw reports, used to rank regions by recent reports.
    output : OutputConfiguration | None
        Output settings.

    Returns
    -------
    RegionalOutput
        Results, combined tables and the aggregate summary.
    """
    output = output or OutputConfiguration()
    telemetry = ExecutionTelemetry.get_current()
    if telemetry:
        telemetry.enter_output()
    logger.info("OUTPUT: summarising %d regions.", sum(r.usable for r in results))

    task_by_region = {task.region: task for task in tasks}
    for result in results:
        if not result.usable:
            continue
        try:
            summarise_region(result, task_by_region[result.region], output)
        except Exception as e:
            logger.warning("OUTPUT: could not summarise region %s: %s", result.region, e)
            result.status = RegionStatus.failed
            result.error_message = f"Summarising failed: {e}"

    regional = RegionalOutput(
        results=list(results),
        samples=get_regional_results(results, "samples"),
        summarised=get_regional_results(results, "summarised"),
        summary=summarise_regions(
            results, reported_cases, output.summary.time_window, output.summary.top_regions
        ),
    )

    if telemetry:
        for name in ("samples", "summarised"):
            frame = getattr(regional, name)
            if frame is not None:
                telemetry.capture_table(name, len(frame))
        telemetry.capture_table("summary", len(regional.summary.table))
        telemetry.exit_output()
    logger.info("OUTPUT: completed with %d regions summarised.", len(regional.summary.table))
    return regional
