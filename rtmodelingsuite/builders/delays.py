"""Packaging of delay and generation-time distributions into model arrays."""

import logging
from collections.abc import Sequence
from typing import Any

import numpy as np

from ..errors import ConfigurationError
from ..schema.common import DelaySpec, GenerationTimeSpec
from ..utils import as_list, lognormal_mean

logger = logging.getLogger(__name__)

DELAY_FIELDS = {
    "delay_mean_mean": "mean",
    "delay_mean_sd": "mean_sd",
    "delay_sd_mean": "sd",
    "delay_sd_sd": "sd_sd",
    "max_delay": "max",
}


def allocate_delays(value: Any, count: int) -> np.ndarray:
    """
    Broadcast a delay parameter to one entry per delay.

    Parameters
    ----------
    value : scalar or sequence
        A single value, or one value per delay.
    count : int
        Number of delays.

    Returns
    -------
    np.ndarray
        Array of length ``count``.

    Raises
    ------
    ConfigurationError
        If ``value`` has neither length 1 nor length ``count``.

    Examples
    --------
    >>> allocate_delays(5, 3).tolist()
    [5, 5, 5]
    >>> allocate_delays([1, 2, 3], 3).tolist()
    [1, 2, 3]
    """
    values = as_list(value)
    if len(values) == count:
        return np.asarray(values)
    if len(values) == 1:
        return np.repeat(np.asarray(values), count)
    msg = f"Delay parameter has {len(values)} values but {count} delays were given."
    raise ConfigurationError(msg)


def combine_delays(delays: DelaySpec | Sequence[DelaySpec] | None) -> list[DelaySpec]:
    """
    Normalize delay input to an ordered list of specifications.
    """
    if delays is None:
        return []
    if isinstance(delays, DelaySpec):
        return [delays]
    return list(delays)


def create_delay_data(delays: DelaySpec | Sequence[DelaySpec] | None, no_delays: int | None = None) -> dict[str, Any]:
    """
    Build the per-delay arrays consumed by the model.

    Each specification expands to ``spec.length`` entries with its scalar
    components broadcast; specifications are concatenated in the order given.

    Parameters
    ----------
    delays : DelaySpec | Sequence[DelaySpec] | None
        Ordered delay specifications.
    no_delays : int | None
        Expected number of delay entries. Defaults to the expanded total.

    Returns
    -------
    dict[str, Any]
        ``delays`` plus ``delay_mean_mean``, ``delay_mean_sd``, ``delay_sd_mean``,
        ``delay_sd_sd`` and ``max_delay`` arrays.

    Raises
    ------
    ConfigurationError
        If the expanded number of delays does not match ``no_delays``.
    """
    specs = combine_delays(delays)
    data: dict[str, Any] = {}
    for field, attr in DELAY_FIELDS.items():
        parts = [allocate_delays(getattr(spec, attr), spec.length) for spec in specs]
        dtype = int if attr == "max" else float
        data[field] = np.concatenate(parts).astype(dtype) if parts else np.zeros(0, dtype=dtype)

    total = len(data["delay_mean_mean"])
    if no_delays is not None and no_delays != total:
        for field in DELAY_FIELDS:
            data[field] = allocate_delays(data[field], no_delays)
        total = no_delays
    data["delays"] = total
    return data


def create_generation_time_data(generation_time: GenerationTimeSpec) -> dict[str, Any]:
    """
    Build the generation-time fields consumed by the model.
    """
    return {
        "gt_mean_mean": generation_time.mean,
        "gt_mean_sd": generation_time.mean_sd,
        "gt_sd_mean": generation_time.sd,
        "gt_sd_sd": generation_time.sd_sd,
        "max_gt": generation_time.max,
    }


def calculate_mean_shift(delays: DelaySpec | Sequence[DelaySpec] | None) -> int:
    """
    Whole days of the summed lognormal mean of all delays.

    This is the seeding time: the number of days reports lag infections on average.

    Examples
    --------
    >>> calculate_mean_shift(None)
    0
    """
    data = create_delay_data(delays)
    if data["delays"] == 0:
        return 0
    shift = int(np.sum(lognormal_mean(data["delay_mean_mean"], data["delay_sd_mean"])))
    logger.debug("BUILDER: mean delay shift of %d days from %d delays.", shift, data["delays"])
    return shift
