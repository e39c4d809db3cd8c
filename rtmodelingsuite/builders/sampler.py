"""Inference engine argument resolution."""

from collections.abc import Mapping
from typing import Any

from ..schema.sampler import SamplerArguments
from ..utils import resolve_settings, validate_settings


def create_sampler_args(samples: int = 1000, overrides: Mapping[str, Any] | None = None) -> SamplerArguments:
    """
    Resolve inference engine arguments.

    Parameters
    ----------
    samples : int
        Total number of posterior draws to keep.
    overrides : Mapping[str, Any] | None
        User overrides such as ``{"warmup": 1000}`` or ``{"method": "vb"}``.

    Returns
    -------
    SamplerArguments
        Validated arguments. For sampling, ``iter`` is ``ceil(samples / chains) + warmup``.

    Raises
    ------
    ConfigurationError
        If the resolved arguments are invalid.

    Examples
    --------
    >>> create_sampler_args(1000, {"warmup": 500}).iter
    750
    """
    settings = resolve_settings({"samples": samples}, overrides)
    return validate_settings(SamplerArguments, settings, "sampler")
