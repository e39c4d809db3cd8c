"""Builders turning settings and case series into model input.

Each builder resolves user overrides against explicit defaults, validates the
result and emits the numeric fields of ``ModelInputData``.
"""

from .cases import create_clean_reported_cases, create_shifted_cases, pad_reported_cases
from .delays import allocate_delays, calculate_mean_shift, create_delay_data, create_generation_time_data
from .gp import create_gp_data, gp_settings
from .initial_conditions import InitialConditionGenerator, create_initial_conditions
from .model_data import create_model_data, estimate_first_week_priors
from .observation import create_obs_model, obs_model_settings
from .rt import FutureRt, create_future_rt, create_rt_data, rt_settings
from .sampler import create_sampler_args

__all__ = [
    # Case series
    "create_clean_reported_cases",
    "create_shifted_cases",
    "pad_reported_cases",
    # Delays
    "allocate_delays",
    "calculate_mean_shift",
    "create_delay_data",
    "create_generation_time_data",
    # Gaussian process
    "create_gp_data",
    "gp_settings",
    # Initial conditions
    "InitialConditionGenerator",
    "create_initial_conditions",
    # Model data
    "create_model_data",
    "estimate_first_week_priors",
    # Observation model
    "create_obs_model",
    "obs_model_settings",
    # Rt
    "FutureRt",
    "create_future_rt",
    "create_rt_data",
    "rt_settings",
    # Sampler
    "create_sampler_args",
]
