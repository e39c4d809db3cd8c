"""Lognormal and truncated-normal helpers shared by builders and initial conditions."""

import numpy as np
import scipy.stats


def convert_to_logmean(mean: float, sd: float) -> float:
    """
    Log-scale mean of a lognormal with the given linear-scale mean and sd.

    Parameters
    ----------
    mean : float
        Linear-scale mean, must be positive.
    sd : float
        Linear-scale standard deviation.

    Returns
    -------
    float
        ``ln(mean^2 / sqrt(sd^2 + mean^2))``
    """
    return float(np.log(mean**2 / np.sqrt(sd**2 + mean**2)))


def convert_to_logsd(mean: float, sd: float) -> float:
    """
    Log-scale sd of a lognormal with the given linear-scale mean and sd.

    Returns
    -------
    float
        ``sqrt(ln(1 + sd^2 / mean^2))``
    """
    return float(np.sqrt(np.log(1 + sd**2 / mean**2)))


def convert_from_logparams(meanlog: float, sdlog: float) -> tuple[float, float]:
    """
    Linear-scale mean and sd of a lognormal from its log-scale parameters.

    This inverts :func:`convert_to_logmean` and :func:`convert_to_logsd`.

    Examples
    --------
    >>> m, s = convert_from_logparams(convert_to_logmean(21, 7), convert_to_logsd(21, 7))
    >>> round(m, 6), round(s, 6)
    (21.0, 7.0)
    """
    mean = np.exp(meanlog + sdlog**2 / 2)
    sd = np.sqrt((np.exp(sdlog**2) - 1) * np.exp(2 * meanlog + sdlog**2))
    return float(mean), float(sd)


def lognormal_mean(meanlog: np.ndarray | float, sdlog: np.ndarray | float) -> np.ndarray | float:
    """Linear-scale mean ``exp(meanlog + sdlog^2 / 2)``, vectorised."""
    return np.exp(np.asarray(meanlog) + np.asarray(sdlog) ** 2 / 2)


def sample_truncated_normal(
    mean: np.ndarray | float,
    sd: np.ndarray | float,
    rng: np.random.Generator,
    lower: float = 0.0,
) -> np.ndarray:
    """
    Draw one value per element from a normal truncated below at ``lower``.

    Elements with ``sd == 0`` are returned as their mean clipped to ``lower``.

    Parameters
    ----------
    mean : array-like
        Location of each normal.
    sd : array-like
        Scale of each normal (non-negative).
    rng : numpy.random.Generator
        Source of randomness.
    lower : float, default=0.0
        Lower truncation bound.

    Returns
    -------
    np.ndarray
        One draw per element of the broadcast ``mean``/``sd``.
    """
    mean_arr, sd_arr = np.broadcast_arrays(np.atleast_1d(np.asarray(mean, dtype=float)), np.asarray(sd, dtype=float))
    out = np.maximum(mean_arr, lower).astype(float)
    positive = sd_arr > 0
    if positive.any():
        a = (lower - mean_arr[positive]) / sd_arr[positive]
        out[positive] = scipy.stats.truncnorm.rvs(
            a, np.inf, loc=mean_arr[positive], scale=sd_arr[positive], random_state=rng
        )
    return out
