"""End-to-end tests for run_regional_estimates."""

import pytest

import rtmodelingsuite
from rtmodelingsuite.errors import ConfigurationError
from rtmodelingsuite.schema.dispatcher import RegionStatus
from rtmodelingsuite.schema.estimation import EstimationConfig, EstimationConfiguration
from rtmodelingsuite.telemetry import ExecutionTelemetry
from rtmodelingsuite.workflow_dispatcher import run_regional_estimates


def fails_for_south(data):
    return data.cases[0] == 200


class TestRunRegionalEstimates:
    """Tests for run_regional_estimates."""

    def test_failed_region_recorded_in_ledger(self, regional_cases, estimation_config, fake_engine):
        """Test that a failing region is recorded while the others succeed."""
        output = run_regional_estimates(regional_cases, estimation_config, fake_engine(fail_when=fails_for_south))
        assert output.ledger == {
            "north": RegionStatus.succeeded,
            "south": RegionStatus.failed,
            "east": RegionStatus.succeeded,
        }
        assert "divergent transitions" in output.results[1].error_message
        assert output.summary.table["region"].tolist() == ["north", "east"]
        assert list(output.summary.failed) == ["south"]
        assert set(output.samples["region"]) == {"north", "east"}
        assert output.summary.top_regions == ["south", "north", "east"]

    def test_concurrent_regions(self, regional_cases, estimation_settings, fake_engine):
        config = EstimationConfiguration(**estimation_settings, regional={"max_workers": 3})
        output = run_regional_estimates(regional_cases, config, fake_engine(fail_when=fails_for_south))
        assert list(output.ledger.values()) == [RegionStatus.succeeded, RegionStatus.failed, RegionStatus.succeeded]

    def test_root_config_and_region_order(self, regional_cases, estimation_settings, fake_engine):
        config = EstimationConfig(estimation=estimation_settings)
        output = run_regional_estimates(regional_cases, config, fake_engine(), regions=["east", "west", "north"])
        assert list(output.ledger) == ["east", "west", "north"]
        assert output.ledger["west"] == RegionStatus.failed

    def test_timeout_keeps_partial_results(self, regional_cases, estimation_settings, fake_engine):
        config = EstimationConfiguration(**estimation_settings, regional={"timeout": 0.5})
        output = run_regional_estimates(regional_cases, config, fake_engine(slow_chains={2}), regions=["north"])
        result = output.results[0]
        assert result.status == RegionStatus.timed_out
        assert result.n_chains == 1
        assert result.summary is not None
        assert output.summary.table["region"].tolist() == ["north"]

    def test_invalid_settings_abort(self, regional_cases, estimation_settings, fake_engine):
        config = EstimationConfiguration(**{**estimation_settings, "obs_model": {"scale": {"mean": 0.5}}})
        engine = fake_engine()
        with pytest.raises(ConfigurationError, match="incomplete scale specification"):
            run_regional_estimates(regional_cases, config, engine)
        assert engine.calls == []

    def test_telemetry(self, regional_cases, estimation_config, fake_engine):
        telemetry = ExecutionTelemetry()
        run_regional_estimates(
            regional_cases, estimation_config, fake_engine(fail_when=fails_for_south), telemetry=telemetry
        )
        assert telemetry.status == "completed"
        assert telemetry.runner["status_counts"] == {"succeeded": 2, "failed": 1}
        assert ExecutionTelemetry.get_current() is None
        assert "RUNNER STAGE" in telemetry.to_text()


def test_package_exports_entry_points():
    assert rtmodelingsuite.run_regional_estimates is run_regional_estimates
    assert rtmodelingsuite.ConfigurationError is ConfigurationError
    assert callable(rtmodelingsuite.load_estimation_config_from_file)
