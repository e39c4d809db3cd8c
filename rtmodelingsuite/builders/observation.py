"""Observation model: count family, day-of-week effect and reporting scale."""

from collections.abc import Mapping
from typing import Any

from ..schema.observation import FamilyEnum, ObservationModelConfig, default_obs_model_settings
from ..utils import resolve_settings, validate_settings

FAMILY_CODES = {FamilyEnum.poisson: 0, FamilyEnum.negbin: 1}


def obs_model_settings(obs_model: Mapping[str, Any] | None = None) -> ObservationModelConfig:
    """
    Resolve observation model overrides against the defaults.

    Raises
    ------
    ConfigurationError
        If the resolved settings are invalid, including a scale with only one
        of ``mean`` and ``sd``.
    """
    return validate_settings(
        ObservationModelConfig, resolve_settings(default_obs_model_settings(), obs_model), "observation model"
    )


def create_obs_model(obs_model: Mapping[str, Any] | ObservationModelConfig | None = None) -> dict[str, Any]:
    """
    Build the observation fields of the model input.

    Returns
    -------
    dict[str, Any]
        ``model_type`` (0 poisson, 1 negbin), ``week_effect``, ``obs_weight``,
        ``obs_scale`` and ``obs_scale_mean``/``obs_scale_sd`` (0 when unscaled).
    """
    config = obs_model if isinstance(obs_model, ObservationModelConfig) else obs_model_settings(obs_model)
    scaled = config.scale.active
    return {
        "model_type": FAMILY_CODES[config.family],
        "week_effect": int(config.week_effect),
        "obs_weight": config.weight,
        "obs_scale": int(scaled),
        "obs_scale_mean": config.scale.mean if scaled else 0.0,
        "obs_scale_sd": config.scale.sd if scaled else 0.0,
    }
