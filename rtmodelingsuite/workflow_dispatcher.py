"""Top-level workflow: build, run and summarise regional Rt estimates."""

import logging

import pandas as pd

from .dispatcher import dispatch_builder, dispatch_output, dispatch_runner
from .dispatcher.builder import region_order
from .dispatcher.runner import InferenceEngine
from .schema.dispatcher import RegionalOutput
from .schema.estimation import EstimationConfig, EstimationConfiguration
from .telemetry import ExecutionTelemetry

logger = logging.getLogger(__name__)


def run_regional_estimates(
    reported_cases: pd.DataFrame,
    config: EstimationConfig | EstimationConfiguration,
    engine: InferenceEngine,
    regions: list[str] | None = None,
    telemetry: ExecutionTelemetry | None = None,
) -> RegionalOutput:
    """
    Estimate Rt independently for every region and aggregate the results.

    Failed and timed-out regions are recorded in the returned ledger and do not
    stop other regions. Invalid settings raise before any region is fitted.

    Parameters
    ----------
    reported_cases : pd.DataFrame
        Columns ``date`` and ``confirm``, optionally ``region`` and ``breakpoint``.
    config : EstimationConfig | EstimationConfiguration
        Validated estimation settings.
    engine : InferenceEngine
        Inference capability.
    regions : list[str] | None
        Regions to estimate, in output order.
    telemetry : ExecutionTelemetry | None
        Telemetry to record into; a new one is created when not given.

    Returns
    -------
    RegionalOutput
        Per-region results in region order, combined tables and the aggregate summary.

    Raises
    ------
    ConfigurationError
        If settings are invalid.

    Examples
    --------
    >>> config = load_estimation_config_from_file("estimation.yml")  # doctest: +SKIP
    >>> out = run_regional_estimates(cases, config, engine)  # doctest: +SKIP
    >>> out.ledger  # doctest: +SKIP
    {'north': <RegionStatus.succeeded: 'succeeded'>, 'south': <RegionStatus.failed: 'failed'>}
    """
    settings = config.estimation if isinstance(config, EstimationConfig) else config
    telemetry = telemetry or ExecutionTelemetry()

    with telemetry:
        tasks, failed = dispatch_builder(reported_cases, settings, regions)
        results = dispatch_runner(
            tasks,
            engine,
            max_workers=settings.regional.max_workers,
            timeout=settings.regional.timeout,
        )

        by_region = {result.region: result for result in [*results, *failed]}
        order = region_order(reported_cases, regions or settings.regional.regions)
        ordered = [by_region[region] for region in order]

        regional = dispatch_output(tasks, ordered, reported_cases, settings.output)

    logger.info("Regional estimation finished: %s", {r: s.value for r, s in regional.ledger.items()})
    return regional
