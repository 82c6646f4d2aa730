"""Diffusion Decision Model simulators.

The evidence path starts at ``z * a`` and is advanced by Euler-Maruyama steps

    y <- y + v * delta_t + s * sqrt(delta_t) * xi,    xi ~ N(0, 1)

until it leaves ``[0, a]``. Leaving through the top returns choice ``1``,
through the bottom choice ``-1``; the response time is
``n_steps * delta_t + t``.

Random draws happen in a fixed order so that a seed reproduces a batch:
``ddm_sdv`` first draws one drift per sample (sample order), then every step
draws one standard normal per still-running path, in sample order. With
``smooth_unif`` one uniform per sample is drawn after the last step.

The discrete path can only notice a crossing at grid times and overshoots the
boundary, so decision times are biased upward compared with the continuous
first-passage time. The bias shrinks like ``sqrt(delta_t)``; for
``delta_t=0.001`` it is a few milliseconds for typical parameters.
"""

import numpy as np

from ssmkit.basic_simulators._utils import (
    log_truncated,
    n_max_steps,
    smooth_decision_times,
    stack_history,
)
from ssmkit.config.simulator_config import DELTA_T, MAX_T

DDM_CHOICES = [-1, 1]


def _euler_ddm(
    v: np.ndarray,
    a: float,
    z: float,
    s: float,
    n_samples: int,
    rng: np.random.Generator,
    delta_t: float,
    max_t: float,
    record: bool,
):
    y = np.full(n_samples, z * a, dtype=np.float64)
    steps = np.zeros(n_samples, dtype=np.int64)
    running = np.arange(n_samples)
    sqrt_st = s * np.sqrt(delta_t)
    max_steps = n_max_steps(max_t, delta_t)

    start = y.copy()
    history = []

    step = 0
    while running.size and step < max_steps:
        y_run = (
            y[running]
            + v[running] * delta_t
            + sqrt_st * rng.standard_normal(running.size)
        )
        y[running] = y_run
        step += 1
        steps[running] = step

        if record:
            history.append((running, y_run))

        running = running[(y_run <= a) & (y_run >= 0.0)]

    # Unfinished paths go to the nearer boundary.
    choices = np.where(y >= 0.5 * a, 1, -1).astype(np.int32)
    traj = stack_history(start, history) if record else None
    return choices, steps * delta_t, running.size, traj


def _simulate_ddm(
    model: str,
    v: np.ndarray,
    spec,
    n_samples: int,
    rng: np.random.Generator,
    delta_t: float,
    max_t: float,
    return_trajectories: bool,
    smooth_unif: bool,
) -> dict:
    choices, decision_times, n_truncated, traj = _euler_ddm(
        v,
        spec.a,
        spec.z,
        spec.s,
        n_samples,
        rng,
        delta_t,
        max_t,
        return_trajectories,
    )
    log_truncated(model, n_truncated, n_samples, max_t)

    if smooth_unif:
        decision_times = smooth_decision_times(rng, decision_times, delta_t)

    out = {
        "rts": decision_times + spec.t,
        "choices": choices,
        "metadata": {
            "simulator": model,
            "delta_t": delta_t,
            "max_t": max_t,
            "n_samples": n_samples,
            "n_truncated": n_truncated,
            "possible_choices": list(DDM_CHOICES),
            "boundary": [0.0, spec.a],
        },
    }
    if return_trajectories:
        out["trajectories"] = traj
    return out


def ddm(
    spec,
    n_samples: int,
    rng: np.random.Generator,
    *,
    delta_t: float = DELTA_T,
    max_t: float = MAX_T,
    return_trajectories: bool = False,
    smooth_unif: bool = False,
    **kwargs,
) -> dict:
    """Simulate the basic DDM.

    Parameters
    ----------
    spec : DDMParams
        Validated parameters (v, a, z, t, s).
    n_samples : int
        Number of draws.
    rng : np.random.Generator
        Source of randomness; consumed in the documented order.
    delta_t, max_t : float
        Euler step and maximal decision time.
    return_trajectories : bool
        If True, also return the evidence paths.
    smooth_unif : bool
        Spread decision times uniformly within their Euler step.

    Returns
    -------
    dict
        ``rts``, ``choices``, ``metadata`` and optionally ``trajectories``.
    """
    v = np.full(n_samples, spec.v, dtype=np.float64)
    return _simulate_ddm(
        "ddm",
        v,
        spec,
        n_samples,
        rng,
        delta_t,
        max_t,
        return_trajectories,
        smooth_unif,
    )


def ddm_sdv(
    spec,
    n_samples: int,
    rng: np.random.Generator,
    *,
    delta_t: float = DELTA_T,
    max_t: float = MAX_T,
    return_trajectories: bool = False,
    smooth_unif: bool = False,
    **kwargs,
) -> dict:
    """Simulate the DDM with normally distributed across-trial drift (sd ``sv``)."""
    v = rng.normal(spec.v, spec.sv, size=n_samples)
    return _simulate_ddm(
        "ddm_sdv",
        v,
        spec,
        n_samples,
        rng,
        delta_t,
        max_t,
        return_trajectories,
        smooth_unif,
    )
