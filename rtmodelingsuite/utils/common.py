"""Common utility functions."""

from datetime import timedelta

import pandas as pd
from pandas.tseries.frequencies import to_offset
from pandas.tseries.offsets import Tick, Week


def parse_timedelta(text: str) -> timedelta:
    """
    Convert a pandas-like duration or frequency string to a ``datetime.timedelta``.

    Both Timedelta-style strings ('30m', '1h30m', '45s') and fixed-length
    frequency aliases ('W', '2H', '15T') are accepted.

    Parameters
    ----------
    text : str
        Duration string.

    Returns
    -------
    timedelta
        The parsed duration.

    Raises
    ------
    ValueError
        If the string is not a recognised duration, or names a variable-length
        period (months, quarters, years, business days).

    Examples
    --------
    >>> parse_timedelta('30m')
    datetime.timedelta(seconds=1800)
    >>> parse_timedelta('W')
    datetime.timedelta(days=7)
    """
    s = text.strip()

    try:
        td = pd.to_timedelta(s)
        if pd.isna(td):
            msg = f"Unrecognized duration/frequency: {text!r}"
            raise ValueError(msg)
        return td.to_pytimedelta()
    except (ValueError, TypeError):
        pass

    try:
        off = to_offset(s)
    except Exception as e:
        msg = f"Unrecognized duration/frequency: {text!r}"
        raise ValueError(msg) from e

    if isinstance(off, Tick):
        return pd.Timedelta(off.nanos, unit="ns").to_pytimedelta()
    if isinstance(off, Week):
        return timedelta(weeks=off.n)

    msg = f"Frequency {text!r} is not a fixed-length duration and cannot be represented as a datetime.timedelta."
    raise ValueError(msg)


def to_seconds(value: float | str | timedelta | None) -> float | None:
    """
    Normalize a wall-clock limit to seconds.

    Parameters
    ----------
    value : float | str | timedelta | None
        Seconds, a duration string understood by :func:`parse_timedelta`, or a timedelta.

    Returns
    -------
    float | None
        Number of seconds, or ``None`` when no limit is given.

    Examples
    --------
    >>> to_seconds("2m")
    120.0
    >>> to_seconds(None) is None
    True
    """
    if value is None:
        return None
    if isinstance(value, timedelta):
        return value.total_seconds()
    if isinstance(value, str):
        return parse_timedelta(value).total_seconds()
    return float(value)


def as_list(value: object) -> list:
    """
    Wrap a scalar in a list, passing sequences and arrays through as lists.

    Parameters
    ----------
    value : object
        Scalar, sequence or numpy array.

    Returns
    -------
    list
        A list view of ``value``.
    """
    import numpy as np

    if isinstance(value, np.ndarray):
        return value.ravel().tolist()
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]
