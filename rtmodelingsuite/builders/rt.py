"""Reproduction number representation: prior, random walk, breakpoints and future extension."""

import logging
from collections.abc import Mapping, Sequence
from typing import Any, NamedTuple

import numpy as np

from ..schema.rt import FuturePolicyEnum, RtConfig, default_rt_settings, disabled_rt_settings
from ..utils import resolve_settings, validate_settings

logger = logging.getLogger(__name__)


class FutureRt(NamedTuple):
    """Resolved future-extension rule."""

    fixed: bool
    offset: int


def rt_settings(rt: Mapping[str, Any] | None = None) -> RtConfig:
    """
    Resolve Rt overrides against the defaults.

    Parameters
    ----------
    rt : Mapping[str, Any] | None
        User overrides. ``None`` switches the Rt feature off.

    Returns
    -------
    RtConfig
        Immutable, validated settings.

    Raises
    ------
    ConfigurationError
        If the resolved settings are invalid.
    """
    if rt is None:
        return validate_settings(RtConfig, disabled_rt_settings(), "rt")
    return validate_settings(RtConfig, resolve_settings(default_rt_settings(), rt), "rt")


def create_future_rt(future_policy: FuturePolicyEnum | str | int, delay: int = 0) -> FutureRt:
    """
    Map a future-extension policy to a (fixed, offset) pair.

    Parameters
    ----------
    future_policy : FuturePolicyEnum | str | int
        'project', 'latest', 'estimate' or an integer offset in days.
    delay : int
        Mean delay in days, used by 'estimate'.

    Returns
    -------
    FutureRt
        Whether Rt is held fixed and the offset from the horizon it is held at.

    Examples
    --------
    >>> create_future_rt("latest")
    FutureRt(fixed=True, offset=0)
    >>> create_future_rt("estimate", delay=5)
    FutureRt(fixed=True, offset=-5)
    >>> create_future_rt(-3)
    FutureRt(fixed=True, offset=-3)
    """
    if isinstance(future_policy, (int, np.integer)) and not isinstance(future_policy, bool):
        return FutureRt(fixed=True, offset=int(future_policy))

    policy = FuturePolicyEnum(future_policy)
    if policy == FuturePolicyEnum.project:
        return FutureRt(fixed=False, offset=0)
    if policy == FuturePolicyEnum.latest:
        return FutureRt(fixed=True, offset=0)
    return FutureRt(fixed=True, offset=-int(delay))


def random_walk_breakpoints(length: int, step: int) -> np.ndarray:
    """
    Breakpoint vector flagging every ``step``-th day (1-indexed).

    Examples
    --------
    >>> np.flatnonzero(random_walk_breakpoints(28, 7)) + 1
    array([ 7, 14, 21, 28])
    """
    return (np.arange(1, length + 1) % step == 0).astype(int)


def create_rt_data(
    rt: Mapping[str, Any] | RtConfig | None,
    breakpoints: Sequence[int] | np.ndarray | None,
    delay: int = 0,
    horizon: int = 0,
) -> dict[str, Any]:
    """
    Build the Rt fields of the model input.

    Parameters
    ----------
    rt : Mapping[str, Any] | RtConfig | None
        Rt overrides, already resolved settings, or ``None`` to switch Rt off.
    breakpoints : Sequence[int] | np.ndarray | None
        Binary breakpoint indicator for each modelled day.
    delay : int
        Mean delay in days (the seeding time).
    horizon : int
        Forecast horizon in days.

    Returns
    -------
    dict[str, Any]
        ``r_mean``, ``r_sd``, ``estimate_r``, ``bp_n``, ``breakpoints``,
        ``future_fixed`` and ``fixed_from``.
    """
    config = rt if isinstance(rt, RtConfig) else rt_settings(rt)
    future_rt = create_future_rt(config.future_policy, delay=delay)
    bps = np.zeros(0, dtype=int) if breakpoints is None else np.asarray(breakpoints, dtype=int).copy()
    use_breakpoints = config.use_breakpoints

    if config.random_walk_step > 0:
        bps = random_walk_breakpoints(len(bps), config.random_walk_step)
        if config.future_policy != FuturePolicyEnum.project:
            max_bps = len(bps) - horizon + future_rt.offset
            if max_bps < len(bps):
                bps[max(max_bps, 0) :] = 0

    if bps.sum() == 0 and use_breakpoints:
        logger.debug("BUILDER: no breakpoints flagged, disabling breakpoints.")
        use_breakpoints = False
    if not use_breakpoints:
        bps = np.zeros_like(bps)

    return {
        "r_mean": config.prior.mean,
        "r_sd": config.prior.sd,
        "estimate_r": int(config.use_rt),
        "bp_n": int(bps.sum()),
        "breakpoints": bps,
        "future_fixed": int(future_rt.fixed),
        "fixed_from": future_rt.offset,
    }
