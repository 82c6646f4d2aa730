"""Exception and warning types raised by ssmkit.

Validation and registry errors propagate to the caller immediately.
Numerical trouble in the likelihoods degrades to a best-effort estimate and is
reported through :class:`NumericalWarning` instead of an exception.
"""

from typing import Any


class ValidationError(ValueError):
    """A parameter set failed validation for a model.

    Attributes
    ----------
    model : str
        Name of the model the parameters were validated against.
    param : str or None
        Name of the offending parameter (None for set-level problems).
    constraint : str
        Human readable description of the violated constraint.
    value : Any
        The offending value (None when the parameter is missing).
    """

    def __init__(
        self,
        model: str,
        param: str | None,
        constraint: str,
        value: Any = None,
        description: str | None = None,
    ):
        self.model = model
        self.param = param
        self.constraint = constraint
        self.value = value
        self.description = description

        if param is None:
            where = f"Invalid parameters for model '{model}'"
        elif description:
            where = f"Parameter '{param}' ({description}) of model '{model}'"
        else:
            where = f"Parameter '{param}' of model '{model}'"

        message = f"{where}: {constraint}"
        if value is not None:
            message += f", got {value!r}"
        super().__init__(message)


class UnsupportedModelError(ValueError):
    """Requested model family is not registered."""

    def __init__(self, model: str, available: list[str] | None = None):
        self.model = model
        self.available = list(available or [])
        message = f"Model '{model}' is not registered."
        if self.available:
            message += f" Available models: {self.available}"
        super().__init__(message)


class SamplingExhaustionError(RuntimeError):
    """A bounded rejection-sampling loop ran out of retries."""

    def __init__(self, model: str, detail: str, n_rounds: int):
        self.model = model
        self.n_rounds = n_rounds
        super().__init__(
            f"Rejection sampling for model '{model}' exhausted after "
            f"{n_rounds} redraw rounds: {detail}"
        )


class SimulationCancelledError(RuntimeError):
    """A chunked simulation or density job was cancelled by its caller."""


class NumericalWarning(RuntimeWarning):
    """A series approximation stopped at its iteration cap before converging."""
