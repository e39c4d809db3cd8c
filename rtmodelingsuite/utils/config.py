"""Settings resolution utilities."""

import logging
from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def resolve_settings(defaults: Mapping[str, Any], overrides: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """
    Merge user overrides into a table of default settings.

    The merge is one level deep: every key present in ``overrides`` replaces the
    default value wholesale, including nested mappings. Keys absent from
    ``overrides`` keep their default. Neither input is modified and no
    validation is performed.

    Parameters
    ----------
    defaults : Mapping[str, Any]
        Default settings.
    overrides : Mapping[str, Any] | None
        User supplied settings. ``None`` is treated as empty.

    Returns
    -------
    dict[str, Any]
        A new dictionary with the resolved settings.

    Examples
    --------
    >>> resolve_settings({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"x": 9}})
    {'a': {'x': 9}, 'b': 1}
    """
    merged = dict(defaults)
    if overrides:
        merged.update(overrides)
    return merged


def validate_settings(model_cls: type[ModelT], settings: Mapping[str, Any], label: str) -> ModelT:
    """
    Validate resolved settings against a pydantic model.

    Parameters
    ----------
    model_cls : type[BaseModel]
        Schema to validate against.
    settings : Mapping[str, Any]
        Resolved settings.
    label : str
        Name of the settings group, used in error messages.

    Returns
    -------
    BaseModel
        The validated (immutable) settings object.

    Raises
    ------
    ConfigurationError
        If validation fails.
    """
    try:
        return model_cls(**settings)
    except ValidationError as e:
        msg = f"Invalid {label} settings: {e}"
        raise ConfigurationError(msg) from e
