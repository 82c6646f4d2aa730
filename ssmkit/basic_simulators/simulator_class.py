"""
Class-based interface for Sequential Sampling Model simulations.

A :class:`Simulator` binds one model configuration (a registered model name
or a full configuration dictionary) to a set of run settings, and exposes
simulation, density evaluation and parameter validation for that model.
"""

from collections.abc import Callable
from copy import deepcopy
from typing import Any

import numpy as np

from ssmkit.config import get_default_simulator_config, merge_simulator_config
from ssmkit.config.model_registry import ModelFamily, _check_config, get_model_registry
from ssmkit.outcomes import Outcomes
from ssmkit.parallel_backends.runner import CancellationToken


class Simulator:
    """Class-based interface for Sequential Sampling Model simulations.

    Examples
    --------
    Basic usage with a pre-defined model:

    >>> sim = Simulator("ddm")
    >>> out = sim.simulate({"v": 1.0, "a": 0.8, "z": 0.5, "t": 0.3}, n_samples=500)

    Swap in a custom simulator function for an existing model:

    >>> sim = Simulator("ddm", simulator_function=my_ddm)

    Change run settings for every call made through this instance:

    >>> sim = Simulator("rdm2", settings={"simulator": {"delta_t": 1e-4}})
    """

    def __init__(
        self,
        model: str | dict,
        simulator_function: Callable | None = None,
        settings: dict | None = None,
        **config_overrides,
    ):
        """Initialize a Simulator instance.

        Parameters
        ----------
        model : str or dict
            Either a registered model name (e.g., "ddm", "lba2") or a full
            configuration dictionary.
        simulator_function : Callable or None
            Replaces the model's simulator. Must accept
            ``(spec, n_samples, rng, **settings)`` and return a dict with
            ``rts``, ``choices`` and ``metadata``.
        settings : dict or None
            Nested run settings merged over the defaults of
            :func:`ssmkit.config.get_default_simulator_config`.
        **config_overrides
            Configuration keys to override (e.g. ``name``, ``default_params``).

        Raises
        ------
        UnsupportedModelError
            If ``model`` is a name that is not registered.
        ValueError
            If the resulting configuration is incomplete.
        """
        if isinstance(model, str):
            config = get_model_registry().get(model)
        elif isinstance(model, dict):
            config = deepcopy(model)
        else:
            raise TypeError(
                f"model must be a model name or a config dict, got {type(model).__name__}"
            )

        config.update(config_overrides)
        if simulator_function is not None:
            config["simulator"] = simulator_function
        _check_config(config.get("name", "<custom>"), config)

        self._config = config
        self._family = ModelFamily(name=config["name"], config=config)
        self._settings = merge_simulator_config(
            get_default_simulator_config(), settings or {}
        )

    def simulate(
        self,
        theta: Any,
        n_samples: int = 1000,
        random_state: int | np.random.Generator | None = None,
        *,
        return_trajectories: bool = False,
        cancel_token: CancellationToken | None = None,
        **overrides,
    ) -> Outcomes:
        """Run a simulation with the given parameters.

        Parameters
        ----------
        theta : dict, pd.Series, pd.DataFrame or parameter record
            Model parameters, validated before any sampling.
        n_samples : int, default=1000
            Number of outcomes to draw.
        random_state : int, np.random.Generator or None
            Seed material; ``None`` draws fresh entropy.
        return_trajectories : bool
            Record evidence paths (diffusion models only).
        cancel_token : CancellationToken or None
            Cooperative cancellation handle.
        **overrides
            Per-call settings such as ``delta_t``, ``max_t``, ``method``,
            ``n_cpus`` or ``chunk_size``.

        Returns
        -------
        Outcomes
        """
        return self._family.sample(
            theta,
            n_samples,
            random_state,
            return_trajectories=return_trajectories,
            settings=self._settings,
            cancel_token=cancel_token,
            **overrides,
        )

    def density(self, theta: Any, data: Any, log: bool = False, **kwargs):
        """Evaluate the (log-)density of ``data`` under ``theta``."""
        kwargs.setdefault("settings", self._settings)
        return self._family.density(theta, data, log, **kwargs)

    def log_likelihood(self, theta: Any, data: Any, **kwargs) -> float:
        """Summed log-density of all observations in ``data``."""
        return float(np.sum(self.density(theta, data, log=True, **kwargs)))

    def validate_params(self, theta: Any):
        """Validate parameter values and return the parameter record.

        Raises
        ------
        ValidationError
            If parameters are invalid
        """
        return self._family.validate(theta)

    @property
    def config(self) -> dict:
        """Get the full model configuration."""
        return deepcopy(self._config)

    @property
    def settings(self) -> dict:
        """Get the run settings used by this instance."""
        return deepcopy(self._settings)
