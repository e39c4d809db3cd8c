"""Resource tracking for telemetry - memory and CPU usage monitoring."""

import os
from typing import Any

import psutil


class ResourceTracker:
    """Track memory and CPU usage of the current process.

    Attributes
    ----------
    _process : psutil.Process
        Handle on the current process
    _baseline_memory : float
        Resident memory in MB at initialization
    _peak_memory_mb : float
        Highest resident memory in MB observed since initialization
    """

    def __init__(self) -> None:
        self._process = psutil.Process(os.getpid())
        self._baseline_memory = self.get_current_memory_mb()
        self._peak_memory_mb = self._baseline_memory

    def get_current_memory_mb(self) -> float:
        """Current resident memory in MB."""
        return self._process.memory_info().rss / (1024 * 1024)

    def update_peak_memory(self) -> None:
        """Record current memory if it exceeds the stored peak."""
        self._peak_memory_mb = max(self._peak_memory_mb, self.get_current_memory_mb())

    def get_peak_memory_mb(self) -> float:
        """Peak resident memory in MB since initialization."""
        return self._peak_memory_mb

    def get_cpu_times(self) -> tuple[float, float]:
        """CPU time (user, system) in seconds, summed over all threads."""
        cpu_times = self._process.cpu_times()
        return cpu_times.user, cpu_times.system

    def finalize(self) -> dict[str, Any]:
        """Get final resource metrics.

        Returns
        -------
        dict
            ``peak_memory_mb``, ``cpu_time_user_seconds`` and ``cpu_time_system_seconds``
        """
        self.update_peak_memory()
        user_time, system_time = self.get_cpu_times()
        return {
            "peak_memory_mb": self._peak_memory_mb,
            "cpu_time_user_seconds": user_time,
            "cpu_time_system_seconds": system_time,
        }
