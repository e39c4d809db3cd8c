"""Stochastic starting values for inference chains."""

import numpy as np

from ..schema.dispatcher import ModelInputData
from ..utils import convert_to_logmean, convert_to_logsd, sample_truncated_normal

LENGTH_SCALE_EPSILON = 0.001


class InitialConditionGenerator:
    """
    Zero-argument factory of starting values bound to one model input.

    Each call draws one independent, constraint-respecting set of starting
    values, one per sampler chain. Only the generator's own random state changes.

    Parameters
    ----------
    data : ModelInputData
        Model input the starting values must be consistent with.
    seed : int | None
        Seed of the generator's random state.

    Examples
    --------
    >>> init = InitialConditionGenerator(data, seed=42)  # doctest: +SKIP
    >>> inits = [init() for _ in range(4)]  # doctest: +SKIP
    """

    def __init__(self, data: ModelInputData, seed: int | None = None) -> None:
        self.data = data
        self._rng = np.random.default_rng(seed)

    def __call__(self) -> dict[str, np.ndarray]:
        data = self.data
        rng = self._rng
        out: dict[str, np.ndarray] = {}

        if data.delays > 0:
            out["delay_mean"] = sample_truncated_normal(data.delay_mean_mean, data.delay_mean_sd, rng)
            out["delay_sd"] = sample_truncated_normal(data.delay_sd_mean, data.delay_sd_sd, rng)

        if data.fixed == 0:
            out["eta"] = rng.normal(0, 0.1, size=data.M)
            rho = rng.lognormal(data.ls_meanlog, data.ls_sdlog)
            if rho > data.ls_max:
                rho = data.ls_max - LENGTH_SCALE_EPSILON
            elif rho < data.ls_min:
                rho = data.ls_min + LENGTH_SCALE_EPSILON
            out["rho"] = np.array([rho])
            out["alpha"] = sample_truncated_normal(0.0, data.alpha_sd, rng)

        if data.model_type == 1:
            out["rep_phi"] = sample_truncated_normal(0.0, 1.0, rng)

        if data.estimate_r == 1:
            out["initial_infections"] = rng.normal(data.prior_infections, 0.2, size=1)
            if data.seeding_time > 1:
                out["initial_growth"] = rng.normal(data.prior_growth, 0.1, size=1)
            out["log_R"] = rng.normal(
                convert_to_logmean(data.r_mean, data.r_sd), convert_to_logsd(data.r_mean, data.r_sd), size=1
            )
            out["gt_mean"] = sample_truncated_normal(data.gt_mean_mean, data.gt_mean_sd, rng)
            out["gt_sd"] = sample_truncated_normal(data.gt_sd_mean, data.gt_sd_sd, rng)
            if data.bp_n > 0:
                out["bp_sd"] = sample_truncated_normal(0.0, 0.1, rng)
                out["bp_effects"] = rng.normal(0, 0.1, size=data.bp_n)

        if data.obs_scale == 1:
            out["frac_obs"] = sample_truncated_normal(data.obs_scale_mean, data.obs_scale_sd, rng)

        return out


def create_initial_conditions(data: ModelInputData, seed: int | None = None) -> InitialConditionGenerator:
    """
    Build the starting-value generator for a model input.
    """
    return InitialConditionGenerator(data, seed=seed)
