"""Utility functions for rtmodelingsuite.

This package contains utility functions organized by category:
- common: Duration parsing and value normalization
- config: Settings resolution and validation
- distributions: Lognormal moment matching and truncated-normal draws
- formatting: Formatting utilities for human-readable output
"""

from .common import as_list, parse_timedelta, to_seconds
from .config import resolve_settings, validate_settings
from .distributions import (
    convert_from_logparams,
    convert_to_logmean,
    convert_to_logsd,
    lognormal_mean,
    sample_truncated_normal,
)
from .formatting import format_duration, format_memory, signif

__all__ = [
    # Common utilities
    "as_list",
    "parse_timedelta",
    "to_seconds",
    # Config utilities
    "resolve_settings",
    "validate_settings",
    # Distribution utilities
    "convert_from_logparams",
    "convert_to_logmean",
    "convert_to_logsd",
    "lognormal_mean",
    "sample_truncated_normal",
    # Formatting utilities
    "format_duration",
    "format_memory",
    "signif",
]
