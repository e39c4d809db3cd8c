"""Approximate Gaussian process representation of log-Rt."""

import logging
import math
from collections.abc import Mapping
from typing import Any

from ..errors import DataError
from ..schema.gp import GPConfig, KernelEnum, default_gp_settings
from ..telemetry import ExecutionTelemetry
from ..utils import convert_to_logmean, convert_to_logsd, resolve_settings, validate_settings

logger = logging.getLogger(__name__)

KERNEL_CODES = {KernelEnum.se: 0, KernelEnum.matern: 1}


def gp_settings(gp: Mapping[str, Any] | None, available_time: int) -> GPConfig:
    """
    Resolve GP overrides against defaults sized to the estimation span.

    ``ls_max`` is capped at ``available_time``.

    Parameters
    ----------
    gp : Mapping[str, Any] | None
        User overrides.
    available_time : int
        Days available for estimation, ``t - seeding_time - horizon``.

    Returns
    -------
    GPConfig
        Immutable, validated settings.

    Raises
    ------
    DataError
        If the series is shorter than the minimum length scale, or capping
        ``ls_max`` leaves it below ``ls_mean``.
    ConfigurationError
        If the resolved settings are invalid.
    """
    settings = resolve_settings(default_gp_settings(available_time), gp)
    if isinstance(settings.get("ls_min"), (int, float)) and settings["ls_min"] > available_time:
        msg = f"Only {available_time} days available for estimation, fewer than ls_min ({settings['ls_min']})."
        raise DataError(msg)
    settings["ls_max"] = min(settings["ls_max"], available_time)
    ls_mean = settings.get("ls_mean")
    requested_max = (gp or {}).get("ls_max")
    if (
        isinstance(ls_mean, (int, float))
        and ls_mean > settings["ls_max"]
        and (requested_max is None or requested_max >= ls_mean)
    ):
        msg = f"Only {available_time} days available for estimation, fewer than ls_mean ({ls_mean})."
        raise DataError(msg)
    return validate_settings(GPConfig, settings, "gp")


def disabled_gp_data() -> dict[str, Any]:
    """
    GP fields when the GP is switched off: a fixed, stationary Rt.
    """
    return {
        "fixed": 1,
        "stationary": 1,
        "M": 0,
        "L": 0.0,
        "ls_meanlog": 0.0,
        "ls_sdlog": 0.0,
        "ls_min": 0.0,
        "ls_max": 0.0,
        "alpha_sd": 0.0,
        "gp_type": 0,
    }


def create_gp_data(gp: Mapping[str, Any] | GPConfig | None, t: int, seeding_time: int, horizon: int) -> dict[str, Any]:
    """
    Build the GP fields of the model input.

    Parameters
    ----------
    gp : Mapping[str, Any] | GPConfig | None
        GP overrides, already resolved settings, or ``None`` to switch the GP off.
    t : int
        Length of the padded series.
    seeding_time : int
        Seeding days before estimation starts.
    horizon : int
        Forecast horizon in days.

    Returns
    -------
    dict[str, Any]
        ``fixed``, ``stationary``, ``M``, ``L``, ``ls_meanlog``, ``ls_sdlog``,
        ``ls_min``, ``ls_max``, ``alpha_sd`` and ``gp_type``.

    Raises
    ------
    DataError
        If no days remain for estimation.
    """
    if gp is None:
        return disabled_gp_data()

    available_time = t - seeding_time - horizon
    if available_time <= 0:
        msg = f"No days available for estimation (t={t}, seeding_time={seeding_time}, horizon={horizon})."
        raise DataError(msg)

    config = gp if isinstance(gp, GPConfig) else gp_settings(gp, available_time)

    if config.kernel != KernelEnum.matern:
        message = f"Only the Matern 3/2 kernel is fully supported; '{config.kernel.value}' may not behave as expected."
        logger.warning("BUILDER: %s", message)
        telemetry = ExecutionTelemetry.get_current()
        if telemetry:
            telemetry.record_warning(message)

    return {
        "fixed": 0,
        "stationary": int(config.stationary),
        "M": math.ceil(available_time * config.basis_prop),
        "L": config.boundary_scale,
        "ls_meanlog": convert_to_logmean(config.ls_mean, config.ls_sd),
        "ls_sdlog": convert_to_logsd(config.ls_mean, config.ls_sd),
        "ls_min": config.ls_min,
        "ls_max": min(config.ls_max, available_time),
        "alpha_sd": config.alpha_sd,
        "gp_type": KERNEL_CODES[config.kernel],
    }
