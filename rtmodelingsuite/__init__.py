"""Model-input assembly and regional orchestration for Rt estimation."""

__version__ = "0.1.0"

from .config_loader import load_estimation_config_from_file, load_reported_cases_from_file
from .errors import ConfigurationError, DataError, InferenceError, RtModelingError
from .workflow_dispatcher import run_regional_estimates
