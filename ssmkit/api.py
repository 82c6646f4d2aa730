"""Function-level entry points: resolve a model by name and run one operation.

>>> import ssmkit
>>> spec = ssmkit.validate("ddm", {"v": 1.0, "a": 0.8, "z": 0.5, "t": 0.3})
>>> out = ssmkit.sample("ddm", spec, 1000, random_state=42)
>>> ssmkit.log_likelihood("ddm", spec, out)
"""

from typing import Any

import numpy as np

from ssmkit.config.model_registry import ModelFamily, get_model_registry
from ssmkit.outcomes import Outcomes


def dispatch(model: str) -> ModelFamily:
    """Resolve a registered model name to its validate / sample / density operations.

    Raises
    ------
    UnsupportedModelError
        If ``model`` is not registered.
    """
    return get_model_registry().dispatch(model)


def validate(model: str, raw_params: Any):
    """Validate raw parameters for ``model`` and return the parameter record."""
    return dispatch(model).validate(raw_params)


def sample(
    model: str, spec: Any, n_samples: int, random_state=None, **kwargs
) -> Outcomes:
    """Draw ``n_samples`` outcomes from ``model``.

    ``kwargs`` are passed on to :func:`ssmkit.basic_simulators.simulate_outcomes`.
    """
    return dispatch(model).sample(spec, n_samples, random_state, **kwargs)


def density(model: str, spec: Any, data: Any, log: bool = False, **kwargs):
    """Evaluate the density (or log-density) of ``data`` under ``model``."""
    return dispatch(model).density(spec, data, log, **kwargs)


def log_likelihood(model: str, spec: Any, data: Any, **kwargs) -> float:
    """Summed log-density of all observations in ``data``."""
    return float(np.sum(density(model, spec, data, log=True, **kwargs)))
