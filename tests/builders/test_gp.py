"""Tests for the Gaussian process builder."""

import math

import pytest

from rtmodelingsuite.builders.gp import create_gp_data, disabled_gp_data, gp_settings
from rtmodelingsuite.errors import ConfigurationError, DataError
from rtmodelingsuite.telemetry import ExecutionTelemetry
from rtmodelingsuite.utils import convert_to_logmean, convert_to_logsd


class TestGPSettings:
    """Tests for gp_settings."""

    def test_ls_max_capped(self):
        config = gp_settings({"ls_max": 100}, available_time=30)
        assert config.ls_max == 30

    def test_invalid_override(self):
        with pytest.raises(ConfigurationError, match="Invalid gp settings"):
            gp_settings({"ls_min": 25}, available_time=30)

    def test_length_scale_mean_beyond_capped_max(self):
        with pytest.raises(DataError, match="fewer than ls_mean"):
            gp_settings({"ls_mean": 21, "ls_sd": 7}, available_time=20)

    def test_length_scale_mean_beyond_requested_max(self):
        with pytest.raises(ConfigurationError, match="Invalid gp settings"):
            gp_settings({"ls_mean": 21, "ls_sd": 7, "ls_max": 14}, available_time=30)


class TestCreateGPData:
    """Tests for create_gp_data."""

    def test_defaults(self):
        data = create_gp_data({}, t=42, seeding_time=5, horizon=7)
        assert data["fixed"] == 0
        assert data["stationary"] == 0
        assert data["M"] == math.ceil(30 * 0.3)
        assert data["L"] == 2.0
        assert data["ls_meanlog"] == pytest.approx(convert_to_logmean(21, 7))
        assert data["ls_sdlog"] == pytest.approx(convert_to_logsd(21, 7))
        assert data["ls_min"] == 3.0
        assert data["ls_max"] == 30
        assert data["alpha_sd"] == 0.1
        assert data["gp_type"] == 1

    def test_basis_functions_from_available_time(self):
        """Test that M is the rounded-up proportion of days available for estimation."""
        data = create_gp_data({"basis_prop": 0.25}, t=42, seeding_time=5, horizon=7)
        assert data["M"] == 8

    def test_stationary(self):
        assert create_gp_data({"stationary": True}, t=42, seeding_time=5, horizon=7)["stationary"] == 1

    def test_disabled(self):
        assert create_gp_data(None, t=42, seeding_time=5, horizon=7) == disabled_gp_data()
        assert disabled_gp_data()["fixed"] == 1
        assert disabled_gp_data()["M"] == 0

    def test_no_available_time(self):
        with pytest.raises(DataError, match="No days available"):
            create_gp_data({}, t=10, seeding_time=5, horizon=5)

    def test_se_kernel_records_warning(self):
        """Test that the squared exponential kernel is encoded and flagged."""
        with ExecutionTelemetry() as telemetry:
            data = create_gp_data({"kernel": "se"}, t=42, seeding_time=5, horizon=7)
        assert data["gp_type"] == 0
        assert any("Matern" in warning for warning in telemetry.warnings)

    def test_series_shorter_than_min_length_scale(self):
        with pytest.raises(DataError, match="fewer than ls_min"):
            create_gp_data({}, t=14, seeding_time=5, horizon=7)
