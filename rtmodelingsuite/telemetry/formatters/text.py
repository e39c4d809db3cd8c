"""Text formatter for telemetry output."""

from datetime import datetime
from typing import Any

from ...utils.formatting import format_duration, format_memory
from .base import TelemetryFormatter

# Text formatting constants
HEADER_WIDTH = 60
HEADER_SEPARATOR = "=" * HEADER_WIDTH
SECTION_SEPARATOR = "-" * HEADER_WIDTH


class TextFormatter(TelemetryFormatter):
    """Human-readable text summary formatter."""

    def format(self, telemetry_data: dict[str, Any]) -> str:
        """Generate human-readable text summary.

        Parameters
        ----------
        telemetry_data : dict
            Telemetry data from ExecutionTelemetry.to_dict()

        Returns
        -------
        str
            Formatted text summary
        """
        lines: list[str] = []
        self._add_header(lines, telemetry_data)
        self._add_configuration(lines, telemetry_data)
        self._add_builder(lines, telemetry_data)
        self._add_runner(lines, telemetry_data)
        self._add_output(lines, telemetry_data)
        self._add_summary(lines, telemetry_data)
        self._add_warnings(lines, telemetry_data)
        return "\n".join(lines)

    def _add_header(self, lines: list[str], data: dict[str, Any]) -> None:
        lines.append(HEADER_SEPARATOR)
        lines.append("Telemetry Summary")
        lines.append(HEADER_SEPARATOR)
        lines.append(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        lines.append(f"Status: {data.get('status', 'unknown')}")
        lines.append("")

    def _add_configuration(self, lines: list[str], data: dict[str, Any]) -> None:
        config = data.get("configuration", {})
        if not config:
            return

        lines.append("CONFIGURATION")
        lines.append(SECTION_SEPARATOR)
        if "regions" in config:
            lines.append(f"Regions: {config['n_regions']} ({', '.join(config['regions'])})")
        if "horizon" in config:
            lines.append(f"Horizon: {config['horizon']} days")
        if "method" in config:
            chains = config.get("chains", "?")
            samples = config.get("samples", "?")
            lines.append(f"Inference: {config['method']} ({chains} chains, {samples} samples)")
        if "max_workers" in config:
            timeout = config.get("timeout")
            timeout_str = format_duration(timeout) if timeout else "none"
            lines.append(f"Concurrency: {config['max_workers']} region(s) at a time, timeout {timeout_str}")
        lines.append("")

    def _add_builder(self, lines: list[str], data: dict[str, Any]) -> None:
        builder = data.get("builder", {})
        if not builder:
            return

        lines.append("BUILDER STAGE")
        lines.append(SECTION_SEPARATOR)
        if "duration_seconds" in builder:
            lines.append(f"Duration: {format_duration(builder['duration_seconds'])}")
        if "n_tasks" in builder:
            lines.append(f"Regions built: {builder['n_tasks']}")
        if builder.get("n_failed"):
            lines.append(f"Regions failed to build: {builder['n_failed']}")
        if "peak_memory_mb" in builder:
            lines.append(f"Peak memory: {format_memory(builder['peak_memory_mb'])}")
        lines.append("")

    def _add_runner(self, lines: list[str], data: dict[str, Any]) -> None:
        runner = data.get("runner", {})
        if not runner or not runner.get("regions"):
            return

        lines.append("RUNNER STAGE")
        lines.append(SECTION_SEPARATOR)
        if "duration_seconds" in runner:
            lines.append(f"Total duration: {format_duration(runner['duration_seconds'])}")
        lines.append("")

        for region in runner["regions"]:
            duration = format_duration(region["duration_seconds"])
            lines.append(f"{region['region']}: {region['status']} in {duration} ({region['n_chains']} chains)")
            if "error" in region:
                lines.append(f"  ERROR: {region['error']}")
        lines.append("")

        if "peak_memory_mb" in runner:
            lines.append(f"Peak memory: {format_memory(runner['peak_memory_mb'])}")
            lines.append("")

    def _add_output(self, lines: list[str], data: dict[str, Any]) -> None:
        output = data.get("output", {})
        if not output:
            return

        lines.append("OUTPUT STAGE")
        lines.append(SECTION_SEPARATOR)
        if "duration_seconds" in output:
            lines.append(f"Duration: {format_duration(output['duration_seconds'])}")
        if output.get("tables"):
            lines.append(f"Tables generated: {len(output['tables'])}")
            for table in output["tables"]:
                lines.append(f"  - {table['name']} ({table['n_rows']} rows)")
        lines.append("")

    def _add_summary(self, lines: list[str], data: dict[str, Any]) -> None:
        metadata = data.get("metadata", {})
        resources = data.get("resources", {})
        counts = data.get("runner", {}).get("status_counts", {})

        lines.append("SUMMARY")
        lines.append(SECTION_SEPARATOR)
        if counts:
            lines.append("Regions: " + ", ".join(f"{n} {status}" for status, n in counts.items()))
        if "total_duration_seconds" in metadata:
            lines.append(f"Total duration: {format_duration(metadata['total_duration_seconds'])}")
        if "peak_memory_mb" in resources:
            lines.append(f"Peak memory: {format_memory(resources['peak_memory_mb'])}")
        if "cpu_time_user_seconds" in resources:
            user_time = format_duration(resources["cpu_time_user_seconds"])
            system_time = format_duration(resources["cpu_time_system_seconds"])
            lines.append(f"CPU time: {user_time} (user), {system_time} (system)")
        lines.append("")

    def _add_warnings(self, lines: list[str], data: dict[str, Any]) -> None:
        warnings = data.get("warnings", [])
        if not warnings:
            return

        lines.append(f"WARNINGS ({len(warnings)})")
        lines.append(SECTION_SEPARATOR)
        for warning in warnings:
            lines.append(f"- {warning}")
        lines.append("")
