"""Global registry for model configurations.

This module provides a centralized registry for complete model configurations,
with support for factory functions to enable lazy loading. Every registered
model can be turned into a :class:`ModelFamily`, the triple of operations
(validate, sample, density) that the rest of the package dispatches to.

Examples
--------
Register a custom model configuration:

>>> from ssmkit.config import get_ddm_config, register_model_config
>>>
>>> my_config = get_ddm_config()
>>> my_config["name"] = "my_ddm"
>>> register_model_config("my_ddm", my_config)

List available models:

>>> from ssmkit.config import get_model_registry
>>> print(get_model_registry().list_models())
['ddm', 'ddm_sdv', 'lba2', 'lba3', 'rdm2', 'rdm3']
"""

import copy
import logging
from dataclasses import dataclass
from typing import Any, Callable

from ssmkit.basic_simulators.sampling import simulate_outcomes
from ssmkit.exceptions import UnsupportedModelError
from ssmkit.likelihoods.likelihood import evaluate_density
from ssmkit.outcomes import Outcomes
from ssmkit.validation import validate_theta

logger = logging.getLogger(__name__)

REQUIRED_CONFIG_KEYS = (
    "name",
    "params",
    "param_domains",
    "nchoices",
    "choices",
    "spec_class",
    "simulator",
    "likelihood",
)


def _check_config(name: str, config: dict) -> None:
    missing = [key for key in REQUIRED_CONFIG_KEYS if key not in config]
    if missing:
        raise ValueError(
            f"Configuration for model '{name}' is missing required keys: {missing}"
        )


@dataclass(frozen=True)
class ModelFamily:
    """The validate / sample / density operations of one model.

    Methods that take a ``spec`` accept either a validated parameter record
    or raw parameters; raw parameters are validated first.
    """

    name: str
    config: dict

    def validate(self, raw_params: Any):
        """Validate raw parameters and return an immutable parameter record."""
        return validate_theta(self.config, raw_params)

    def _as_spec(self, spec):
        if isinstance(spec, self.config["spec_class"]):
            return spec
        return self.validate(spec)

    def sample(self, spec, n_samples: int, random_state=None, **kwargs) -> Outcomes:
        """Draw ``n_samples`` outcomes; see :func:`simulate_outcomes`."""
        return simulate_outcomes(
            self.config, self._as_spec(spec), n_samples, random_state, **kwargs
        )

    def density(self, spec, data, log: bool = False, **kwargs):
        """Evaluate the (log-)density of ``data``; see :func:`evaluate_density`."""
        return evaluate_density(self.config, self._as_spec(spec), data, log, **kwargs)


class ModelConfigRegistry:
    """Global registry for complete model configurations.

    This registry maintains a mapping of model names to their configurations.
    Supports both direct config registration and factory functions for lazy loading.
    """

    def __init__(self):
        """Initialize empty registry."""
        self._configs: dict[str, dict] = {}
        self._factories: dict[str, Callable[[], dict]] = {}

    def _check_free(self, name: str) -> None:
        if name in self._configs or name in self._factories:
            raise ValueError(
                f"Model '{name}' is already registered. "
                f"Use a different name or unregister the existing model first."
            )

    def register_config(self, name: str, config: dict) -> None:
        """Register a model configuration directly.

        Parameters
        ----------
        name : str
            Unique name for the model (e.g., "ddm", "my_custom_model")
        config : dict
            Complete model configuration dictionary, containing at minimum
            the keys listed in ``REQUIRED_CONFIG_KEYS``.

        Raises
        ------
        ValueError
            If name already registered or the configuration is incomplete.
        """
        self._check_free(name)
        _check_config(name, config)
        self._configs[name] = config
        logger.debug("Registered model configuration '%s'", name)

    def register_factory(self, name: str, factory: Callable[[], dict]) -> None:
        """Register a model config factory function.

        The factory is only called when the model is first accessed; the
        returned configuration is checked at that point.

        Raises
        ------
        ValueError
            If name already registered.
        """
        self._check_free(name)
        self._factories[name] = factory
        logger.debug("Registered model configuration factory '%s'", name)

    def unregister(self, name: str) -> None:
        """Remove a model from the registry."""
        if name in self._configs:
            del self._configs[name]
        elif name in self._factories:
            del self._factories[name]
        else:
            raise UnsupportedModelError(name, self.list_models())

    def get(self, name: str) -> dict:
        """Get model configuration by name.

        Returns a deep copy of the configuration to prevent accidental mutation
        of the registered config.

        Raises
        ------
        UnsupportedModelError
            If model name not registered
        """
        if name in self._configs:
            return copy.deepcopy(self._configs[name])

        if name in self._factories:
            config = self._factories[name]()
            _check_config(name, config)
            return config

        raise UnsupportedModelError(name, self.list_models())

    def dispatch(self, name: str) -> ModelFamily:
        """Resolve a model name to its :class:`ModelFamily`."""
        return ModelFamily(name=name, config=self.get(name))

    def has_model(self, name: str) -> bool:
        """Check if model name is registered."""
        return name in self._configs or name in self._factories

    def list_models(self) -> list[str]:
        """List all registered model names, sorted."""
        return sorted(list(self._configs.keys()) + list(self._factories.keys()))

    def __repr__(self) -> str:
        n_configs = len(self._configs)
        n_factories = len(self._factories)
        total = n_configs + n_factories
        return f"ModelConfigRegistry({total} models: {n_configs} direct, {n_factories} factories)"


# Global singleton instance
_GLOBAL_MODEL_REGISTRY = ModelConfigRegistry()


def register_model_config(name: str, config: dict) -> None:
    """Register a model configuration globally.

    Once registered, the model can be used with :func:`ssmkit.dispatch`
    and :class:`ssmkit.Simulator` just like built-in models.

    Raises
    ------
    ValueError
        If name already registered
    """
    _GLOBAL_MODEL_REGISTRY.register_config(name, config)


def register_model_config_factory(name: str, factory: Callable[[], dict]) -> None:
    """Register a model config factory function globally."""
    _GLOBAL_MODEL_REGISTRY.register_factory(name, factory)


def get_model_registry() -> ModelConfigRegistry:
    """Get the global model registry."""
    return _GLOBAL_MODEL_REGISTRY


# Register all built-in models; new entries in _modelconfig/__init__.py
# are picked up automatically.
from ssmkit.config._modelconfig import get_model_config  # noqa: E402

for model_name, model_config in get_model_config().items():
    register_model_config(model_name, model_config)
