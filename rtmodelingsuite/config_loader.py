### config_loader.py
# Functions for loading estimation configuration (YAML) and reported cases (CSV).

import logging

import pandas as pd

from .errors import DataError
from .schema.estimation import EstimationConfig, validate_estimation

__all__ = [
    "load_estimation_config_from_file",
    "load_reported_cases_from_file",
]

logger = logging.getLogger(__name__)


def load_estimation_config_from_file(path: str) -> EstimationConfig:
    """
    Load estimation configuration YAML from the given path and validate against the schema.

    Parameters
    ----------
        path: The file path to the YAML configuration file.

    Returns
    -------
        The validated configuration object.
    """
    from pathlib import Path

    import yaml

    with Path(path).open() as f:
        raw = yaml.safe_load(f)

    root = validate_estimation(raw)
    logger.info("Estimation configuration loaded successfully.")
    return root


def load_reported_cases_from_file(path: str) -> pd.DataFrame:
    """
    Load reported cases from a CSV file.

    Parameters
    ----------
        path: CSV with columns ``date`` and ``confirm``, optionally ``region`` and ``breakpoint``.

    Returns
    -------
        Reported cases with parsed dates.

    Raises
    ------
        DataError: If required columns are missing or counts are negative.
    """
    cases = pd.read_csv(path, parse_dates=["date"], dtype={"region": str})
    missing = {"date", "confirm"} - set(cases.columns)
    if missing:
        msg = f"Reported cases file {path} is missing columns: {sorted(missing)}"
        raise DataError(msg)
    if (cases["confirm"].dropna() < 0).any():
        msg = f"Reported cases file {path} contains negative counts."
        raise DataError(msg)
    logger.info("Reported cases loaded successfully (%d rows).", len(cases))
    return cases
