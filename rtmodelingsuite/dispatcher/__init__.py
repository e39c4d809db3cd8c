"""Dispatcher stages for regional Rt estimation."""

from .builder import build_region_task, dispatch_builder
from .output import (
    calc_CrI,
    calc_CrIs,
    calc_summary_measures,
    dispatch_output,
    format_samples,
    get_regional_results,
    get_regions_with_most_reports,
    make_conf,
    map_prob_change,
    report_summary,
    summarise_regions,
)
from .runner import InferenceEngine, combine_chains, dispatch_runner, run_chains, run_region

__all__ = [
    # Builder
    "build_region_task",
    "dispatch_builder",
    # Runner
    "InferenceEngine",
    "combine_chains",
    "dispatch_runner",
    "run_chains",
    "run_region",
    # Output
    "calc_CrI",
    "calc_CrIs",
    "calc_summary_measures",
    "dispatch_output",
    "format_samples",
    "get_regional_results",
    "get_regions_with_most_reports",
    "make_conf",
    "map_prob_change",
    "report_summary",
    "summarise_regions",
]
