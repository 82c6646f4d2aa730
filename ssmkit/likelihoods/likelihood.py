"""Batch density evaluation on top of the per-model ``logp_*`` functions."""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

import numpy as np
import pandas as pd

from ssmkit.config.simulator_config import (
    get_default_simulator_config,
    get_nested_config,
)
from ssmkit.outcomes import Outcome, Outcomes
from ssmkit.parallel_backends.runner import CancellationToken, chunk_bounds

logger = logging.getLogger(__name__)

_RT_COLUMNS = (("rt", "response"), ("rts", "choices"))


def _from_columns(data, kind: str) -> tuple[np.ndarray, np.ndarray]:
    for rt_col, choice_col in _RT_COLUMNS:
        if rt_col in data and choice_col in data:
            return (
                np.asarray(data[rt_col], dtype=np.float64).ravel(),
                np.asarray(data[choice_col]).ravel(),
            )
    raise ValueError(
        f"{kind} must provide 'rt' and 'response' (or 'rts' and 'choices') entries"
    )


def as_rts_choices(data: Any) -> tuple[np.ndarray, np.ndarray, bool]:
    """Normalise observed data to ``(rts, choices, is_single)``.

    Accepted inputs: an :class:`Outcome`, an :class:`Outcomes` batch, a
    sequence of ``Outcome``, a ``pandas.DataFrame`` or mapping with
    ``rt``/``response`` (or ``rts``/``choices``) entries, or a tuple
    ``(rts, choices)`` of equally long arrays.
    """
    if isinstance(data, Outcome):
        return (
            np.array([data.rt], dtype=np.float64),
            np.array([data.choice]),
            True,
        )
    if isinstance(data, Outcomes):
        return data.rts.astype(np.float64), data.choices, False
    if isinstance(data, pd.DataFrame):
        rts, choices = _from_columns(data, "DataFrame")
        return rts, choices, False
    if isinstance(data, Mapping):
        rts, choices = _from_columns(data, "Mapping")
        return rts, choices, False
    if isinstance(data, Sequence) and data and all(
        isinstance(d, Outcome) for d in data
    ):
        return (
            np.array([d.rt for d in data], dtype=np.float64),
            np.array([d.choice for d in data]),
            False,
        )
    if isinstance(data, tuple) and len(data) == 2:
        rts = np.asarray(data[0], dtype=np.float64)
        choices = np.asarray(data[1])
        if rts.ndim == 1 and choices.shape == rts.shape:
            return rts, choices, False
    raise ValueError(
        "Unsupported data for density evaluation. Pass an Outcome, Outcomes, "
        "a DataFrame with 'rt' and 'response' columns, or a (rts, choices) "
        "tuple of equally long arrays."
    )


def evaluate_density(
    config: dict,
    spec,
    data: Any,
    log: bool = False,
    *,
    settings: dict | None = None,
    cancel_token: CancellationToken | None = None,
    tolerance: float | None = None,
    max_terms: int | None = None,
    chunk_size: int | None = None,
):
    """Evaluate the (log-)density of observations under a validated spec.

    Observations are evaluated independently, in chunks of ``chunk_size``;
    ``cancel_token`` is checked before each chunk.

    Returns
    -------
    float or np.ndarray
        A float for a single :class:`Outcome`, an array otherwise.
    """
    defaults = get_default_simulator_config()
    settings = settings or defaults
    if tolerance is None:
        tolerance = get_nested_config(
            settings, "likelihood", "tolerance", defaults["likelihood"]["tolerance"]
        )
    if max_terms is None:
        max_terms = get_nested_config(
            settings, "likelihood", "max_terms", defaults["likelihood"]["max_terms"]
        )
    if chunk_size is None:
        chunk_size = get_nested_config(
            settings, "pipeline", "chunk_size", defaults["pipeline"]["chunk_size"]
        )
    if tolerance <= 0:
        raise ValueError(f"tolerance must be > 0, got {tolerance}")
    if max_terms < 1:
        raise ValueError(f"max_terms must be >= 1, got {max_terms}")

    rts, choices, is_single = as_rts_choices(data)
    logp = config["likelihood"]

    out = np.empty(rts.shape, dtype=np.float64)
    for start, stop in chunk_bounds(rts.shape[0], chunk_size):
        if cancel_token is not None:
            cancel_token.raise_if_cancelled("density evaluation")
        out[start:stop] = logp(
            spec,
            rts[start:stop],
            choices[start:stop],
            tolerance=tolerance,
            max_terms=max_terms,
        )

    logger.debug(
        "%s: evaluated %d observation(s)", config["name"], rts.shape[0]
    )

    if not log:
        out = np.exp(out)
    if is_single:
        return float(out[0])
    return out
