"""Execution telemetry tracking and reporting."""

from .core import ExecutionTelemetry
from .resource_tracker import ResourceTracker

__all__ = [
    "ExecutionTelemetry",
    "ResourceTracker",
]
