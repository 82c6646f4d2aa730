"""Parameter schema and validation.

Every model configuration declares, for each of its parameters, a
:class:`ParameterDomain`. :func:`validate_theta` checks a raw mapping of
parameter values against those domains and returns the model's immutable
parameter record (a ``typing.NamedTuple``). Invalid input is never clamped or
replaced by defaults; the first violation raises
:class:`~ssmkit.exceptions.ValidationError`.
"""

from collections.abc import Mapping
from typing import Any, NamedTuple

import numpy as np
import pandas as pd

from ssmkit.exceptions import ValidationError


class ParameterDomain(NamedTuple):
    """Admissible interval for a (scalar or per-accumulator) parameter."""

    lower: float = -np.inf
    upper: float = np.inf
    lower_inclusive: bool = False
    upper_inclusive: bool = False
    description: str = ""

    def contains(self, value: float | np.ndarray) -> np.ndarray:
        value = np.asarray(value, dtype=np.float64)
        if self.lower_inclusive:
            above = value >= self.lower
        else:
            above = value > self.lower
        if self.upper_inclusive:
            below = value <= self.upper
        else:
            below = value < self.upper
        return above & below

    def describe(self) -> str:
        """Constraint as a short sentence fragment, e.g. ``must be > 0``."""
        has_lower = np.isfinite(self.lower)
        has_upper = np.isfinite(self.upper)
        if has_lower and has_upper:
            left = "[" if self.lower_inclusive else "("
            right = "]" if self.upper_inclusive else ")"
            return f"must lie in {left}{self.lower:g}, {self.upper:g}{right}"
        if has_lower:
            op = ">=" if self.lower_inclusive else ">"
            return f"must be {op} {self.lower:g}"
        if has_upper:
            op = "<=" if self.upper_inclusive else "<"
            return f"must be {op} {self.upper:g}"
        return "must be a finite number"

    def with_description(self, description: str) -> "ParameterDomain":
        return self._replace(description=description)


REAL = ParameterDomain()
POSITIVE = ParameterDomain(lower=0.0)
NON_NEGATIVE = ParameterDomain(lower=0.0, lower_inclusive=True)
UNIT_OPEN = ParameterDomain(lower=0.0, upper=1.0)


def _as_raw_dict(model: str, spec_class: type, raw_params: Any) -> dict:
    if isinstance(raw_params, spec_class):
        return raw_params._asdict()
    if isinstance(raw_params, pd.DataFrame):
        if len(raw_params) != 1:
            raise ValidationError(
                model,
                None,
                "a DataFrame of parameters must contain exactly one row",
                len(raw_params),
            )
        return raw_params.iloc[0].to_dict()
    if isinstance(raw_params, pd.Series):
        return raw_params.to_dict()
    if isinstance(raw_params, Mapping):
        return dict(raw_params)
    raise ValidationError(
        model,
        None,
        "parameters must be given as a mapping of name to value",
        type(raw_params).__name__,
    )


def _check_value(config: dict, param: str, value: Any, is_optional: bool):
    model = config["name"]
    domain = config["param_domains"][param]
    is_vector = param in config.get("vector_params", ())
    nchoices = config["nchoices"]

    try:
        raw = np.asarray(value)
    except (TypeError, ValueError):
        raw = None
    # Strings and booleans would convert silently; only real numbers pass.
    if raw is None or raw.dtype.kind not in "iuf":
        raise ValidationError(
            model, param, "must be numeric", value, domain.description
        )
    arr = raw.astype(np.float64)

    if is_vector:
        if arr.ndim == 0 and is_optional:
            arr = np.full(nchoices, float(arr))
        if arr.ndim != 1 or arr.shape[0] != nchoices:
            raise ValidationError(
                model,
                param,
                f"must be a vector of length {nchoices} (one entry per accumulator)",
                value,
                domain.description,
            )
    elif arr.ndim != 0:
        if arr.size != 1:
            raise ValidationError(
                model, param, "must be a scalar", value, domain.description
            )
        arr = arr.reshape(())

    if not np.all(np.isfinite(arr)):
        raise ValidationError(
            model, param, "must be finite", value, domain.description
        )

    inside = domain.contains(arr)
    if not np.all(inside):
        if is_vector:
            idx = int(np.flatnonzero(~inside)[0])
            raise ValidationError(
                model,
                f"{param}[{idx}]",
                domain.describe(),
                float(arr[idx]),
                domain.description,
            )
        raise ValidationError(
            model, param, domain.describe(), float(arr), domain.description
        )

    if is_vector:
        return tuple(float(x) for x in arr)
    return float(arr)


def validate_theta(config: dict, raw_params: Any) -> NamedTuple:
    """Validate raw parameter values against a model configuration.

    Parameters
    ----------
    config : dict
        Model configuration (see ``ssmkit.config.get_model_registry``).
    raw_params : Mapping, pd.Series, single-row pd.DataFrame or parameter record
        Parameter name -> value. Vector parameters (e.g. per-accumulator
        drift rates ``v``) take a sequence of length ``config["nchoices"]``.
        Optional parameters that are omitted take their documented default.

    Returns
    -------
    NamedTuple
        Immutable parameter record of type ``config["spec_class"]``.

    Raises
    ------
    ValidationError
        On unknown, missing, non-numeric, non-finite, wrongly shaped or
        out-of-domain parameters.
    """
    model = config["name"]
    spec_class = config["spec_class"]
    raw = _as_raw_dict(model, spec_class, raw_params)

    required = list(config["params"])
    optional = dict(config.get("optional_params", {}))
    known = required + list(optional)

    unknown = [name for name in raw if name not in known]
    if unknown:
        raise ValidationError(
            model,
            str(unknown[0]),
            f"is not a parameter of this model (expected one of {known})",
        )

    for param in required:
        if param not in raw:
            raise ValidationError(
                model,
                param,
                "is required but missing",
                description=config["param_domains"][param].description,
            )

    values = {}
    for param in known:
        is_optional = param in optional
        value = raw[param] if param in raw else optional[param]
        values[param] = _check_value(config, param, value, is_optional)

    return spec_class(**values)
