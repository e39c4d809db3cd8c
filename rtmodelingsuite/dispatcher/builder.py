"""Builder stage: prepare model input and initial-value generators per region."""

import logging

import pandas as pd

from ..builders import (
    calculate_mean_shift,
    create_clean_reported_cases,
    create_initial_conditions,
    create_model_data,
    create_sampler_args,
    create_shifted_cases,
    pad_reported_cases,
)
from ..errors import ConfigurationError, DataError
from ..schema.dispatcher import RegionResult, RegionStatus, RegionTask
from ..schema.estimation import EstimationConfiguration
from ..schema.sampler import SamplerArguments
from ..telemetry import ExecutionTelemetry

logger = logging.getLogger(__name__)

DEFAULT_REGION = "all"


def build_region_task(
    region: str,
    reported_cases: pd.DataFrame,
    config: EstimationConfiguration,
    sampler: SamplerArguments | None = None,
) -> RegionTask:
    """
    Build the model input for one region from its cleaned case series.

    Parameters
    ----------
    region : str
        Region identifier.
    reported_cases : pd.DataFrame
        Output of :func:`create_clean_reported_cases` for this region.
    config : EstimationConfiguration
        Estimation settings.
    sampler : SamplerArguments | None
        Resolved engine arguments; resolved from ``config`` when not given.

    Returns
    -------
    RegionTask
        Model input, initial-value generator, engine arguments and dates.

    Raises
    ------
    DataError
        If the region's series cannot support estimation.
    ConfigurationError
        If settings are invalid.
    """
    if sampler is None:
        sampler = create_sampler_args(config.samples, config.sampler)

    mean_shift = calculate_mean_shift(config.delays)
    padded = pad_reported_cases(reported_cases, mean_shift)
    shifted_cases = create_shifted_cases(padded, mean_shift, config.backcalc.smoothing_window, config.horizon)
    data = create_model_data(
        padded,
        shifted_cases,
        seeding_time=mean_shift,
        horizon=config.horizon,
        generation_time=config.generation_time,
        delays=config.delays,
        rt=config.rt,
        gp=config.gp,
        obs_model=config.obs_model,
    )
    return RegionTask(
        region=region,
        data=data,
        initial_conditions=create_initial_conditions(data, seed=sampler.seed),
        sampler=sampler,
        dates=padded["date"].iloc[mean_shift:].dt.date.tolist(),
    )


def region_order(reported_cases: pd.DataFrame, regions: list | None) -> list[str]:
    """Requested regions as strings, else regions in order of first appearance, else a single default region."""
    if regions:
        return [str(r) for r in regions]
    if "region" in reported_cases.columns:
        return [str(r) for r in pd.unique(reported_cases["region"])]
    return [DEFAULT_REGION]


def dispatch_builder(
    reported_cases: pd.DataFrame,
    config: EstimationConfiguration,
    regions: list[str] | None = None,
) -> tuple[list[RegionTask], list[RegionResult]]:
    """
    Build region tasks for every requested region.

    Regions whose data cannot support estimation, or whose build fails
    unexpectedly, are returned as failed results instead of raising; invalid
    settings raise before any region is built.

    Parameters
    ----------
    reported_cases : pd.DataFrame
        Columns ``date`` and ``confirm``, optionally ``region`` and ``breakpoint``.
    config : EstimationConfiguration
        Estimation settings.
    regions : list[str] | None
        Regions to build, in output order. Identifiers are compared as strings.
        Defaults to ``config.regional.regions`` and then to the order regions
        first appear in ``reported_cases``.

    Returns
    -------
    tuple[list[RegionTask], list[RegionResult]]
        Built tasks and failed results.

    Raises
    ------
    ConfigurationError
        If settings are invalid.
    """
    telemetry = ExecutionTelemetry.get_current()
    order = region_order(reported_cases, regions or config.regional.regions)
    sampler = create_sampler_args(config.samples, config.sampler)

    if telemetry:
        telemetry.enter_builder(
            order,
            horizon=config.horizon,
            samples=config.samples,
            method=sampler.method.value,
            chains=sampler.chains,
            random_seed=sampler.seed,
        )
    logger.info("BUILDER: dispatched for %d regions.", len(order))

    if "region" in reported_cases.columns:
        reported_cases = reported_cases.assign(region=reported_cases["region"].astype(str))
    cleaned = create_clean_reported_cases(reported_cases, config.horizon, config.zero_threshold)

    tasks: list[RegionTask] = []
    failed: list[RegionResult] = []
    for region in order:
        if "region" in cleaned.columns:
            region_cases = cleaned[cleaned["region"] == region].drop(columns="region").reset_index(drop=True)
        else:
            region_cases = cleaned
        try:
            if region_cases.empty:
                msg = f"No positive case counts for region {region}."
                raise DataError(msg)
            tasks.append(build_region_task(region, region_cases, config, sampler))
            logger.info("BUILDER: built model input for region %s.", region)
        except ConfigurationError:
            raise
        except DataError as e:
            logger.warning("BUILDER: region %s failed: %s", region, e)
            failed.append(RegionResult(region=region, status=RegionStatus.failed, error_message=str(e)))
        except Exception as e:
            logger.exception("BUILDER: unexpected error building region %s.", region)
            failed.append(RegionResult(region=region, status=RegionStatus.failed, error_message=str(e)))

    if telemetry:
        telemetry.exit_builder(n_tasks=len(tasks), n_failed=len(failed))
    logger.info("BUILDER: completed with %d tasks and %d failed regions.", len(tasks), len(failed))
    return tasks, failed
