"""Base class for telemetry output formatters."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any


class TelemetryFormatter(ABC):
    """Abstract base class for telemetry output formatters.

    Formatters turn the dictionary produced by ``ExecutionTelemetry.to_dict()``
    into a string.
    """

    @abstractmethod
    def format(self, telemetry_data: dict[str, Any]) -> str:
        """Format telemetry data to string output.

        Parameters
        ----------
        telemetry_data : dict
            Telemetry data from ExecutionTelemetry.to_dict()

        Returns
        -------
        str
            Formatted output string
        """

    def write(self, telemetry_data: dict[str, Any], path: str | Path) -> None:
        """Write formatted telemetry to ``path``."""
        Path(path).write_text(self.format(telemetry_data))
