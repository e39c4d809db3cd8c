"""Tests for the output stage."""

from datetime import date, timedelta

import numpy as np
import pandas as pd
import pytest

from rtmodelingsuite.dispatcher.output import (
    MEASURES,
    calc_CrI,
    calc_CrIs,
    calc_summary_measures,
    dispatch_output,
    format_samples,
    get_regional_results,
    get_regions_with_most_reports,
    make_conf,
    map_prob_change,
    report_summary,
    summarise_regions,
)
from rtmodelingsuite.dispatcher.runner import run_region
from rtmodelingsuite.schema.dispatcher import RegionResult, RegionStatus
from rtmodelingsuite.schema.output import OutputConfiguration
from rtmodelingsuite.telemetry import ExecutionTelemetry

DATES = [date(2024, 1, 1) + timedelta(days=i) for i in range(10)]


def constant_draws(r=0.8, growth=-0.1, infections=100.0, n=50, width=10):
    """Draws with no posterior spread."""
    return {
        "R": np.full((n, width), r),
        "growth_rate": np.full((n, width), growth),
        "infections": np.full((n, width), infections),
    }


def summarised_from(draws, horizon=2):
    samples = format_samples(draws, DATES, horizon=horizon, seeding_time=3)
    return samples, calc_summary_measures(samples, CrIs=[0.5, 0.9])


class TestFormatSamples:
    """Tests for format_samples."""

    def test_time_varying_layout(self):
        draws = {"R": np.tile(np.arange(1.0, 6.0), (3, 1))}
        samples = format_samples(draws, DATES[:5], horizon=1, seeding_time=2)
        assert len(samples) == 15
        first = samples[samples["draw_id"] == 1]
        assert first["time"].tolist() == [1, 2, 3, 4, 5]
        assert first["value"].tolist() == [1.0, 2.0, 3.0, 4.0, 5.0]
        assert first["type"].tolist() == [
            "estimate",
            "estimate",
            "estimate based on partial data",
            "estimate based on partial data",
            "forecast",
        ]
        assert first["date"].iloc[0] == pd.Timestamp("2024-01-01")

    def test_right_aligned_dates(self):
        """Test that shorter series end on the last date."""
        samples = format_samples({"R": np.ones((2, 3))}, DATES[:5], horizon=0)
        assert samples["date"].min() == pd.Timestamp("2024-01-03")
        assert samples["date"].max() == pd.Timestamp("2024-01-05")

    def test_static_parameters(self):
        draws = {"rep_phi": np.ones(4), "day_of_week_effect": np.ones((4, 7))}
        samples = format_samples(draws, DATES, horizon=0)
        phi = samples[samples["parameter"] == "rep_phi"]
        assert len(phi) == 4
        assert phi["stratum"].isna().all()
        assert phi["date"].isna().all()
        effect = samples[samples["parameter"] == "day_of_week_effect"]
        assert sorted(effect["stratum"].unique()) == list(range(1, 8))

    def test_empty(self):
        assert format_samples({}, DATES, horizon=0).empty


class TestCredibleIntervals:
    """Tests for calc_CrI, calc_CrIs and calc_summary_measures."""

    def test_calc_CrI(self):
        lower, upper = calc_CrI(range(1, 11), 0.9)
        assert lower == pytest.approx(1.45)
        assert upper == pytest.approx(9.55)

    def test_calc_CrIs(self):
        samples = pd.DataFrame({"parameter": "x", "value": np.arange(1.0, 11.0)})
        intervals = calc_CrIs(samples, summarise_by=["parameter"], CrIs=[0.2, 0.9])
        assert list(intervals.columns) == ["parameter", "lower_20", "upper_20", "lower_90", "upper_90"]
        row = intervals.iloc[0]
        assert row["lower_20"] == pytest.approx(4.6)
        assert row["upper_20"] == pytest.approx(6.4)
        assert row["upper_90"] == pytest.approx(9.55)

    def test_calc_summary_measures(self):
        samples = pd.DataFrame({"parameter": ["x"] * 10 + ["y"] * 2, "value": [*range(1, 11), 3, 3]})
        summary = calc_summary_measures(samples, summarise_by=["parameter"], CrIs=[0.9])
        x = summary[summary["parameter"] == "x"].iloc[0]
        assert x["median"] == 5.5
        assert x["mean"] == 5.5
        assert x["sd"] == pytest.approx(np.std(np.arange(1, 11), ddof=1))
        y = summary[summary["parameter"] == "y"].iloc[0]
        assert y["lower_90"] == 3
        assert y["upper_90"] == 3

    def test_summary_keeps_missing_keys(self):
        samples, summarised = summarised_from({**constant_draws(), "rep_phi": np.ones(50)})
        assert "rep_phi" in summarised["parameter"].tolist()
        assert len(summarised) == 3 * len(DATES) + 1


class TestHeadlineFormatting:
    """Tests for map_prob_change and make_conf."""

    @pytest.mark.parametrize(
        ("prob", "label"),
        [
            (0.0, "Increasing"),
            (0.049, "Increasing"),
            (0.05, "Likely increasing"),
            (0.4, "Unsure"),
            (0.59, "Unsure"),
            (0.6, "Likely decreasing"),
            (0.95, "Decreasing"),
            (1.0, "Decreasing"),
        ],
    )
    def test_map_prob_change(self, prob, label):
        assert map_prob_change(prob) == label

    def test_make_conf(self):
        assert make_conf(1.234, 0.91, 1.56, digits=1) == "1.2 (0.9–1.6)"
        assert make_conf(1500.2, 1200.7, 1800.1) == "1500 (1201–1800)"


class TestReportSummary:
    """Tests for report_summary."""

    def test_declining_epidemic(self):
        """Test that a negative growth rate reports a halving time."""
        samples, summarised = summarised_from(constant_draws(r=0.8, growth=-0.1))
        table = report_summary(summarised, samples)
        assert table["measure"].tolist() == [*MEASURES[:4], "Halving time (days)"]
        assert table["estimate"].tolist() == [
            "100 (100–100)",
            "Decreasing",
            "0.8 (0.8–0.8)",
            "-0.10 (-0.10–-0.10)",
            "6.9 (6.9–6.9)",
        ]

    def test_growing_epidemic(self):
        samples, summarised = summarised_from(constant_draws(r=1.3, growth=0.1))
        table = report_summary(summarised, samples)
        assert table["measure"].iloc[-1] == "Doubling time (days)"
        assert table["estimate"].iloc[1] == "Increasing"
        assert table["estimate"].iloc[-1] == "6.9 (6.9–6.9)"

    def test_latest_non_forecast_date(self):
        """Test that values on forecast days are ignored."""
        draws = constant_draws(r=1.3, growth=0.1)
        draws["R"][:, -2:] = 0.5
        samples, summarised = summarised_from(draws, horizon=2)
        table = report_summary(summarised, samples)
        assert table["estimate"].iloc[2] == "1.3 (1.3–1.3)"

    def test_rt_draws_as_array(self):
        _, summarised = summarised_from(constant_draws())
        table = report_summary(summarised, np.array([0.5, 0.9, 1.1, 1.2]))
        assert table["estimate"].iloc[1] == "Unsure"

    def test_numeric_columns(self):
        samples, summarised = summarised_from(constant_draws(r=1.3, growth=0.1))
        table = report_summary(summarised, samples, CrI=0.5, return_numeric=True)
        assert {"point", "lower", "upper"} <= set(table.columns)
        assert table["point"].iloc[0] == 100
        assert table["point"].iloc[1] == 0.0
        assert np.isnan(table["lower"].iloc[1])
        assert table["point"].iloc[4] == 6.9

    def test_missing_parameter(self):
        samples = format_samples({"R": np.ones((5, 10))}, DATES, horizon=2)
        summarised = calc_summary_measures(samples)
        with pytest.raises(ValueError, match="infections"):
            report_summary(summarised, samples)


class TestRegionalSummaries:
    """Tests for regional aggregation helpers."""

    def test_regions_with_most_reports(self, regional_cases):
        assert get_regions_with_most_reports(regional_cases, time_window=7, no_regions=2) == ["south", "north"]

    def test_regions_with_most_reports_window_includes_cutoff(self):
        dates = pd.date_range("2024-01-01", periods=8, freq="D")
        cases = pd.concat(
            [
                pd.DataFrame({"region": "a", "date": dates, "confirm": [100] + [0] * 7}),
                pd.DataFrame({"region": "b", "date": dates, "confirm": [10] * 8}),
            ],
            ignore_index=True,
        )
        assert get_regions_with_most_reports(cases, time_window=7) == ["a", "b"]

    def test_regions_with_most_reports_without_regions(self, reported_cases):
        assert get_regions_with_most_reports(reported_cases) == []

    @pytest.fixture
    def results(self):
        samples, summarised = summarised_from(constant_draws(r=0.8, growth=-0.1))
        usable = RegionResult(
            region="north",
            status=RegionStatus.succeeded,
            n_chains=2,
            samples=samples,
            summarised=summarised,
            summary=report_summary(summarised, samples, return_numeric=True),
        )
        failed = RegionResult(region="south", status=RegionStatus.failed, error_message="boom")
        return [usable, failed]

    def test_get_regional_results(self, results):
        combined = get_regional_results(results, "summarised")
        assert combined.columns[0] == "region"
        assert combined["region"].unique().tolist() == ["north"]
        assert get_regional_results(results[1:], "summarised") is None

    def test_summarise_regions(self, results, regional_cases):
        summary = summarise_regions(results, regional_cases, no_regions=3)
        assert summary.table["region"].tolist() == ["north"]
        assert summary.table["Doubling or halving"].tolist() == ["halving"]
        assert summary.table[MEASURES[2]].iloc[0] == "0.8 (0.8–0.8)"
        assert summary.failed == {"south": "boom"}
        assert summary.top_regions == ["south", "north", "east"]
        assert summary.numeric["measure"].tolist() == [*MEASURES[:4], "Halving time (days)"]


class TestDispatchOutput:
    """Tests for dispatch_output."""

    def test_summarises_usable_regions(self, region_task, fake_engine):
        result = run_region(region_task, fake_engine())
        with ExecutionTelemetry() as telemetry:
            regional = dispatch_output([region_task], [result], output=OutputConfiguration(CrIs=[0.9]))
        assert result.summary["measure"].iloc[-1] == "Doubling time (days)"
        assert {"lower_90", "upper_90"} <= set(result.summarised.columns)
        assert regional.samples["region"].unique().tolist() == ["north"]
        assert len(regional.summary.table) == 1
        assert [table["name"] for table in telemetry.output["tables"]] == ["samples", "summarised", "summary"]

    def test_samples_can_be_dropped(self, region_task, fake_engine):
        result = run_region(region_task, fake_engine())
        regional = dispatch_output([region_task], [result], output=OutputConfiguration(return_samples=False))
        assert result.samples is None
        assert regional.samples is None
        assert regional.summarised is not None

    def test_unsummarisable_region_marked_failed(self, region_task):
        width = region_task.data.t - region_task.data.seeding_time
        result = RegionResult(
            region="north", status=RegionStatus.succeeded, n_chains=1, draws={"R": np.ones((10, width))}
        )
        regional = dispatch_output([region_task], [result])
        assert regional.ledger == {"north": RegionStatus.failed}
        assert "Summarising failed" in result.error_message
        assert regional.summary.failed == {"north": result.error_message}
        assert regional.summary.table.empty
