"""Tests for loading configuration and reported cases from files."""

import pandas as pd
import pytest

from rtmodelingsuite.config_loader import load_estimation_config_from_file, load_reported_cases_from_file
from rtmodelingsuite.errors import ConfigurationError, DataError
from rtmodelingsuite.schema.rt import FuturePolicyEnum


class TestLoadEstimationConfig:
    """Tests for load_estimation_config_from_file."""

    @pytest.fixture
    def write_yaml(self, tmp_path):
        def _write(content: str):
            path = tmp_path / "estimation.yml"
            path.write_text(content)
            return path

        return _write

    def test_full_config(self, write_yaml):
        path = write_yaml("""
estimation:
  meta:
    description: Weekly regional Rt
    author: surveillance team
  horizon: 14
  samples: 2000
  generation_time:
    mean: 3.6
    mean_sd: 0.7
    sd: 3.1
    sd_sd: 0.8
    max: 15
  delays:
    - {mean: 1.6, mean_sd: 0.06, sd: 0.5, sd_sd: 0.03, max: 15}
    - {mean: [1.0, 1.1], sd: 0.4, max: 10}
  rt:
    prior: {mean: 2.0, sd: 0.5}
    future_policy: estimate
  gp: null
  obs_model:
    family: poisson
  sampler:
    chains: 2
    max_time: 30m
  regional:
    max_workers: 4
    timeout: 2h
  output:
    CrIs: [0.5, 0.9]
    summary:
      return_numeric: true
""")
        config = load_estimation_config_from_file(path).estimation
        assert config.meta.author == "surveillance team"
        assert config.horizon == 14
        assert len(config.delays) == 2
        assert config.delays[1].length == 2
        assert config.rt["future_policy"] == FuturePolicyEnum.estimate.value
        assert config.gp is None
        assert config.sampler == {"chains": 2, "max_time": "30m"}
        assert config.regional.timeout == 7200.0
        assert config.output.CrIs == [0.5, 0.9]
        assert config.output.summary.return_numeric is True

    def test_invalid_config(self, write_yaml):
        path = write_yaml("""
estimation:
  horizon: -1
  generation_time: {mean: 3.6, sd: 3.1}
""")
        with pytest.raises(ConfigurationError, match="Configuration validation error"):
            load_estimation_config_from_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_estimation_config_from_file(tmp_path / "missing.yml")


class TestLoadReportedCases:
    """Tests for load_reported_cases_from_file."""

    def test_regional_csv(self, tmp_path):
        path = tmp_path / "cases.csv"
        path.write_text("region,date,confirm\n01,2024-01-01,5\n01,2024-01-02,7\n02,2024-01-01,3\n")
        cases = load_reported_cases_from_file(path)
        assert cases["region"].tolist() == ["01", "01", "02"]
        assert pd.api.types.is_datetime64_any_dtype(cases["date"])

    def test_missing_columns(self, tmp_path):
        path = tmp_path / "cases.csv"
        path.write_text("date,cases\n2024-01-01,5\n")
        with pytest.raises(DataError, match="missing columns"):
            load_reported_cases_from_file(path)

    def test_negative_counts(self, tmp_path):
        path = tmp_path / "cases.csv"
        path.write_text("date,confirm\n2024-01-01,5\n2024-01-02,-1\n")
        with pytest.raises(DataError, match="negative counts"):
            load_reported_cases_from_file(path)
