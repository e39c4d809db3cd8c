"""Formatting utilities for human-readable output.

Durations and memory sizes for telemetry, and significant-figure rounding
for headline summaries.
"""

import math


def format_duration(seconds: float) -> str:
    """Format duration in seconds to human-readable string.

    Examples
    --------
    >>> format_duration(3.5)
    '3.5s'
    >>> format_duration(125)
    '2m 5s'
    >>> format_duration(3665)
    '1h 1m 5s'
    """
    if seconds < 60:
        return f"{seconds:.1f}s"

    minutes = int(seconds // 60)
    remaining_seconds = int(seconds % 60)
    if minutes < 60:
        return f"{minutes}m {remaining_seconds}s"

    hours = minutes // 60
    return f"{hours}h {minutes % 60}m {remaining_seconds}s"


def format_memory(megabytes: float, precision: int = 1) -> str:
    """Format a memory amount given in MB, switching to GB above 1024 MB.

    Examples
    --------
    >>> format_memory(512)
    '512.0 MB'
    >>> format_memory(2048)
    '2.0 GB'
    """
    if megabytes >= 1024:
        return f"{megabytes / 1024:.{precision}f} GB"
    return f"{megabytes:.{precision}f} MB"


def signif(value: float, digits: int = 2) -> float:
    """Round ``value`` to ``digits`` significant figures.

    Examples
    --------
    >>> signif(0.123456)
    0.12
    >>> signif(1234, 2)
    1200.0
    >>> signif(0.0)
    0.0
    """
    if value == 0 or not math.isfinite(value):
        return float(value)
    return float(round(value, digits - 1 - int(math.floor(math.log10(abs(value))))))
