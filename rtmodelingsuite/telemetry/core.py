"""Execution telemetry tracking and reporting for regional estimation workflows.

This module tracks timing, resource usage and per-region outcomes through the
builder, runner and output stages, and renders them as text or JSON.
"""

import os
import sys
import threading
from collections import Counter
from contextvars import ContextVar
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ..utils.formatting import format_duration
from .formatters import JsonFormatter, TextFormatter
from .resource_tracker import ResourceTracker

if TYPE_CHECKING:
    from ..schema.dispatcher import RegionResult


def _get_package_version() -> str:
    """Get rtmodelingsuite version."""
    from .. import __version__

    return __version__


class ExecutionTelemetry:
    """Track execution metrics for a regional estimation workflow.

    Optionally available through a ContextVar so builders and runners can record
    into it without threading it through every call.

    Attributes
    ----------
    metadata : dict
        Process and environment metadata
    configuration : dict
        Workflow configuration details
    builder : dict
        Builder stage metrics
    runner : dict
        Runner stage metrics, including one entry per region
    output : dict
        Output stage metrics
    resources : dict
        Overall resource usage metrics
    status : str
        Workflow status ("running", "completed", "failed")
    warnings : list
        Warning messages
    """

    _current: ContextVar["ExecutionTelemetry | None"] = ContextVar("execution_telemetry", default=None)

    @classmethod
    def get_current(cls) -> "ExecutionTelemetry | None":
        """Get the current ExecutionTelemetry from context, if any."""
        return cls._current.get()

    @classmethod
    def set_current(cls, telemetry: "ExecutionTelemetry | None") -> None:
        """Set the current ExecutionTelemetry in context (None clears it)."""
        cls._current.set(telemetry)

    def __enter__(self) -> "ExecutionTelemetry":
        self.set_current(self)
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: Any) -> None:
        if exc_type is not None:
            self.status = "failed"
        self.set_current(None)

    def __init__(self) -> None:
        self.metadata: dict[str, Any] = {
            "process_id": os.getpid(),
            "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
            "rtmodelingsuite_version": _get_package_version(),
        }
        self.configuration: dict[str, Any] = {}
        self.builder: dict[str, Any] = {}
        self.runner: dict[str, Any] = {"regions": [], "errors": []}
        self.output: dict[str, Any] = {}
        self.resources: dict[str, Any] = {}
        self.status = "running"
        self.warnings: list[str] = []

        self._lock = threading.Lock()
        self._resource_tracker = ResourceTracker()

    def _record_stage_end(self, stage_dict: dict[str, Any]) -> None:
        end_time = datetime.now()
        stage_dict["end_time"] = end_time.isoformat()
        start_time = datetime.fromisoformat(stage_dict["start_time"])
        stage_dict["duration_seconds"] = (end_time - start_time).total_seconds()

    def _finish_stage(self) -> None:
        self._resource_tracker.update_peak_memory()
        self.resources = self._resource_tracker.finalize()
        self._calculate_total_duration()

    def enter_builder(self, regions: list[str], **configuration: Any) -> None:
        """Enter the builder stage.

        Parameters
        ----------
        regions : list[str]
            Regions requested, in output order
        **configuration
            Run settings to record (horizon, samples, method, chains, ...)
        """
        self.builder["start_time"] = datetime.now().isoformat()
        self.configuration["regions"] = list(regions)
        self.configuration["n_regions"] = len(regions)
        self.configuration.update({k: v for k, v in configuration.items() if v is not None})
        self._resource_tracker.update_peak_memory()

    def exit_builder(self, n_tasks: int, n_failed: int = 0) -> None:
        """Exit the builder stage.

        Parameters
        ----------
        n_tasks : int
            Regions whose model input was built
        n_failed : int
            Regions that failed during building
        """
        self._record_stage_end(self.builder)
        self.builder["n_tasks"] = n_tasks
        self.builder["n_failed"] = n_failed
        self._resource_tracker.update_peak_memory()
        self.builder["peak_memory_mb"] = self._resource_tracker.get_peak_memory_mb()
        self._finish_stage()

    def enter_runner(self, max_workers: int = 1, timeout: float | None = None) -> None:
        """Enter the runner stage."""
        self.runner["start_time"] = datetime.now().isoformat()
        self.configuration["max_workers"] = max_workers
        if timeout is not None:
            self.configuration["timeout"] = timeout
        self._resource_tracker.update_peak_memory()

    def capture_region(self, result: "RegionResult") -> None:
        """Capture the outcome of one region.

        Parameters
        ----------
        result : RegionResult
            Final result of the region
        """
        region_data: dict[str, Any] = {
            "region": result.region,
            "status": result.status.value,
            "duration_seconds": result.elapsed_time,
            "n_chains": result.n_chains,
        }
        with self._lock:
            if result.error_message:
                region_data["error"] = result.error_message
                self.runner["errors"].append(
                    {"region": result.region, "status": result.status.value, "error": result.error_message}
                )
            self.runner["regions"].append(region_data)
        self._resource_tracker.update_peak_memory()

    def exit_runner(self) -> None:
        """Exit the runner stage and tally region outcomes."""
        self._record_stage_end(self.runner)
        self.runner["status_counts"] = dict(Counter(r["status"] for r in self.runner["regions"]))
        self._resource_tracker.update_peak_memory()
        peak_memory = self._resource_tracker.get_peak_memory_mb()
        if peak_memory > self.builder.get("peak_memory_mb", 0):
            self.runner["peak_memory_mb"] = peak_memory
        usable = any(r["status"] in ("succeeded", "timed_out") for r in self.runner["regions"])
        self.status = "completed" if usable or not self.runner["regions"] else "failed"
        self._finish_stage()

    def enter_output(self) -> None:
        """Enter the output stage."""
        self.output["start_time"] = datetime.now().isoformat()
        self.output["tables"] = []

    def capture_table(self, name: str, n_rows: int) -> None:
        """Capture an output table."""
        self.output["tables"].append({"name": name, "n_rows": n_rows})

    def exit_output(self) -> None:
        """Exit the output stage and finalize the telemetry."""
        self._record_stage_end(self.output)
        self._finish_stage()

    def _calculate_total_duration(self) -> None:
        """Total duration from the earliest stage start to the latest stage end."""
        stages = (self.builder, self.runner, self.output)
        start_times = [datetime.fromisoformat(s["start_time"]) for s in stages if "start_time" in s]
        end_times = [datetime.fromisoformat(s["end_time"]) for s in stages if "end_time" in s]
        if start_times and end_times:
            self.metadata["total_duration_seconds"] = (max(end_times) - min(start_times)).total_seconds()

    def record_warning(self, message: str) -> None:
        """Add a warning message to the summary."""
        with self._lock:
            self.warnings.append(message)

    def to_dict(self) -> dict[str, Any]:
        """Export telemetry as a dictionary."""
        data = {
            "metadata": self.metadata,
            "configuration": self.configuration,
            "builder": self.builder,
            "runner": self.runner,
            "output": self.output,
            "resources": self.resources,
            "status": self.status,
            "warnings": self.warnings,
        }
        if "total_duration_seconds" in self.metadata:
            data["total_duration_seconds"] = self.metadata["total_duration_seconds"]
        return data

    def to_text(self, path: str | Path | None = None) -> str | None:
        """Generate human-readable text summary.

        Parameters
        ----------
        path : str | Path | None, optional
            If provided, write summary to this file path and return None.

        Returns
        -------
        str | None
            Formatted text summary if path is None, otherwise None
        """
        formatter = TextFormatter()
        if path is not None:
            formatter.write(self.to_dict(), path)
            return None
        return formatter.format(self.to_dict())

    def to_json(self, path: str | Path | None = None) -> str | None:
        """Generate structured JSON summary.

        Parameters
        ----------
        path : str | Path | None, optional
            If provided, write summary to this file path and return None.

        Returns
        -------
        str | None
            JSON-formatted summary if path is None, otherwise None
        """
        formatter = JsonFormatter()
        if path is not None:
            formatter.write(self.to_dict(), path)
            return None
        return formatter.format(self.to_dict())

    def __str__(self) -> str:
        return self.to_text()

    def __repr__(self) -> str:
        n_regions = len(self.runner.get("regions", []))
        duration = self.metadata.get("total_duration_seconds")
        if duration is not None:
            return (
                f"ExecutionTelemetry(status='{self.status}', regions={n_regions}, "
                f"duration='{format_duration(duration)}')"
            )
        return f"ExecutionTelemetry(status='{self.status}', regions={n_regions})"
