"""Linear Ballistic Accumulator simulator.

Each of the ``k`` accumulators starts at a uniform point in ``[0, A)`` and
rises linearly with a drift drawn from ``N(v_j, sv_j)`` until it reaches the
threshold ``b = A + k_offset``. The first accumulator to arrive wins.

Draw order: an (n, k) block of start points (row-major), then an (n, k) block
of drifts. Every non-positive drift is redrawn, in row-major order of the
offending entries, for at most ``max_redraws`` rounds; effectively the drifts
follow a normal distribution truncated to ``(0, inf)``.
"""

import logging

import numpy as np

from ssmkit.config.simulator_config import LBA_MAX_REDRAWS
from ssmkit.exceptions import SamplingExhaustionError

logger = logging.getLogger(__name__)


def _draw_positive_drifts(
    v: np.ndarray,
    sv: np.ndarray,
    n_samples: int,
    rng: np.random.Generator,
    max_redraws: int,
    model: str,
) -> np.ndarray:
    drift = rng.normal(v, sv, size=(n_samples, v.shape[0]))
    bad = drift <= 0.0
    n_rounds = 0
    while np.any(bad):
        if n_rounds >= max_redraws:
            accumulators = sorted(set(np.nonzero(bad)[1].tolist()))
            raise SamplingExhaustionError(
                model,
                f"drift rates of accumulator(s) {accumulators} stayed non-positive "
                f"(v={v[accumulators].tolist()}, sv={sv[accumulators].tolist()}); "
                "a positive drift is too improbable in this parameter region",
                n_rounds,
            )
        rows, cols = np.nonzero(bad)
        drift[rows, cols] = rng.normal(v[cols], sv[cols])
        bad = drift <= 0.0
        n_rounds += 1

    if n_rounds:
        logger.debug("%s: drift redraw needed %d rounds", model, n_rounds)
    return drift


def lba_vanilla(
    spec,
    n_samples: int,
    rng: np.random.Generator,
    *,
    max_redraws: int = LBA_MAX_REDRAWS,
    return_trajectories: bool = False,
    model: str = "lba",
    **kwargs,
) -> dict:
    """Simulate the LBA.

    Parameters
    ----------
    spec : LBAParams
        Validated parameters (v, A, k, t, sv); ``v`` and ``sv`` have one entry
        per accumulator.
    n_samples : int
        Number of draws.
    rng : np.random.Generator
        Source of randomness; consumed in the documented order.
    max_redraws : int
        Cap on redraw rounds for non-positive drifts.

    Returns
    -------
    dict
        ``rts``, ``choices`` (accumulator index) and ``metadata``.

    Raises
    ------
    SamplingExhaustionError
        If some drift is still non-positive after ``max_redraws`` rounds.
    """
    if return_trajectories:
        raise ValueError(
            "Trajectories are only available for diffusion models; "
            "LBA paths are deterministic given start point and drift."
        )

    v = np.asarray(spec.v, dtype=np.float64)
    sv = np.asarray(spec.sv, dtype=np.float64)
    n_acc = v.shape[0]
    b = spec.A + spec.k

    start = rng.uniform(0.0, spec.A, size=(n_samples, n_acc))
    drift = _draw_positive_drifts(v, sv, n_samples, rng, max_redraws, model)

    finish = (b - start) / drift
    choices = np.argmin(finish, axis=1).astype(np.int32)
    rts = finish[np.arange(n_samples), choices] + spec.t

    return {
        "rts": rts,
        "choices": choices,
        "metadata": {
            "simulator": model,
            "n_samples": n_samples,
            "n_truncated": 0,
            "possible_choices": list(range(n_acc)),
            "threshold": b,
        },
    }
