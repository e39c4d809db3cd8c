"""Shared fixtures: synthetic case series, estimation settings and a fake inference engine."""

import threading

import numpy as np
import pandas as pd
import pytest

from rtmodelingsuite.builders import create_clean_reported_cases
from rtmodelingsuite.dispatcher.builder import build_region_task
from rtmodelingsuite.schema.estimation import EstimationConfiguration


def make_cases(days: int = 30, start: float = 20.0, growth: float = 0.05, first_date: str = "2024-01-01"):
    """Exponentially growing daily counts."""
    dates = pd.date_range(first_date, periods=days, freq="D")
    confirm = np.round(start * np.exp(growth * np.arange(days)))
    return pd.DataFrame({"date": dates, "confirm": confirm})


class FakeEngine:
    """Inference engine returning random draws for the summarised parameters.

    Parameters
    ----------
    fail_when : callable, optional
        Predicate on the model input; the chain raises when it returns True.
    slow_chains : set[int], optional
        Chain ids that block until signalled to stop.
    """

    def __init__(self, fail_when=None, slow_chains=None):
        self.fail_when = fail_when
        self.slow_chains = slow_chains or set()
        self.calls = []
        self._lock = threading.Lock()

    def sample_chain(self, data, inits, args, *, chain_id, seed, stop_event):
        with self._lock:
            self.calls.append({"chain_id": chain_id, "seed": seed, "inits": inits})
        if self.fail_when is not None and self.fail_when(data):
            raise RuntimeError("divergent transitions")
        if chain_id in self.slow_chains:
            stop_event.wait(10)
        rng = np.random.default_rng(seed)
        n = args.draws_per_chain
        width = data.t - data.seeding_time
        growth = rng.normal(0.05, 0.01, size=(n, width))
        return {
            "R": rng.normal(1.3, 0.1, size=(n, width)),
            "infections": rng.normal(100, 10, size=(n, width)),
            "growth_rate": growth,
            "reported_cases": rng.poisson(80, size=(n, width)),
            "rep_phi": rng.gamma(2.0, 1.0, size=n),
        }


@pytest.fixture
def reported_cases():
    """Thirty days of growing counts for a single region."""
    return make_cases()


@pytest.fixture
def regional_cases():
    """Three regions of thirty days each."""
    frames = [
        make_cases(start=20).assign(region="north"),
        make_cases(start=200, growth=-0.02).assign(region="south"),
        make_cases(start=5).assign(region="east"),
    ]
    return pd.concat(frames, ignore_index=True)[["region", "date", "confirm"]]


@pytest.fixture
def estimation_settings():
    """Raw settings with one delay and a small two-chain sampler."""
    return {
        "horizon": 7,
        "samples": 40,
        "generation_time": {"mean": 3.6, "mean_sd": 0.7, "sd": 3.1, "sd_sd": 0.8, "max": 15},
        "delays": [{"mean": 1.6, "mean_sd": 0.06, "sd": 0.5, "sd_sd": 0.03, "max": 15}],
        "sampler": {"chains": 2, "cores": 2, "seed": 42},
    }


@pytest.fixture
def estimation_config(estimation_settings):
    """Validated settings built from ``estimation_settings``."""
    return EstimationConfiguration(**estimation_settings)


@pytest.fixture
def fake_engine():
    """Factory for fake inference engines."""
    return FakeEngine


@pytest.fixture
def region_task(reported_cases, estimation_config):
    """Built task for the single-region series (t=42, seeding_time=5, horizon=7)."""
    cleaned = create_clean_reported_cases(reported_cases, estimation_config.horizon, estimation_config.zero_threshold)
    return build_region_task("north", cleaned, estimation_config)
