"""Telemetry output formatters."""

from .base import TelemetryFormatter
from .json import JsonFormatter
from .text import TextFormatter

__all__ = [
    "TelemetryFormatter",
    "TextFormatter",
    "JsonFormatter",
]
