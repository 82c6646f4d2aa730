__version__ = "0.1.0"

from .exceptions import (
    NumericalWarning,
    SamplingExhaustionError,
    SimulationCancelledError,
    UnsupportedModelError,
    ValidationError,
)
from .outcomes import Outcome, Outcomes
from . import config
from .config import (
    get_model_registry,
    register_model_config,
    register_model_config_factory,
)
from .parallel_backends import CancellationToken
from .api import density, dispatch, log_likelihood, sample, validate
from .basic_simulators.simulator_class import Simulator

__all__ = [
    "NumericalWarning",
    "SamplingExhaustionError",
    "SimulationCancelledError",
    "UnsupportedModelError",
    "ValidationError",
    "Outcome",
    "Outcomes",
    "config",
    "get_model_registry",
    "register_model_config",
    "register_model_config_factory",
    "CancellationToken",
    "density",
    "dispatch",
    "log_likelihood",
    "sample",
    "validate",
    "Simulator",
]
