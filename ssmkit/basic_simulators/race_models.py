"""Racing Diffusion Model simulator.

Every accumulator ``j`` is an independent Wiener process with drift ``v_j``
and noise ``s`` that starts at a uniform point in ``[0, A)`` and races to the
common threshold ``b = A + k``. The first accumulator to reach it determines
choice and decision time.

Two methods are available:

``"exact"`` (default)
    The first-passage time of a Wiener process over distance ``d`` is
    inverse Gaussian with mean ``d / v`` and shape ``(d / s) ** 2``, so finishing
    times are drawn directly. Draw order: an (n, k) block of start points,
    then an (n, k) block of finishing times (both row-major).

``"euler"``
    Euler-Maruyama paths with step ``delta_t``; used whenever trajectories are
    requested. Draw order: the (n, k) start points, then per step one (m, k)
    block of standard normals for the m still-running races (sample order).
    Carries the same discretisation bias as the DDM simulator.
"""

import logging

import numpy as np

from ssmkit.basic_simulators._utils import (
    log_truncated,
    n_max_steps,
    smooth_decision_times,
    stack_history,
)
from ssmkit.config.simulator_config import DELTA_T, MAX_T

logger = logging.getLogger(__name__)

RACE_METHODS = ("exact", "euler")


def _euler_race(
    start: np.ndarray,
    v: np.ndarray,
    b: float,
    s: float,
    rng: np.random.Generator,
    delta_t: float,
    max_t: float,
    record: bool,
):
    n_samples, n_acc = start.shape
    x = start.copy()
    steps = np.zeros(n_samples, dtype=np.int64)
    running = np.arange(n_samples)
    sqrt_st = s * np.sqrt(delta_t)
    max_steps = n_max_steps(max_t, delta_t)

    history = []

    step = 0
    while running.size and step < max_steps:
        x_run = (
            x[running]
            + v * delta_t
            + sqrt_st * rng.standard_normal((running.size, n_acc))
        )
        x[running] = x_run
        step += 1
        steps[running] = step

        if record:
            history.append((running, x_run))

        running = running[~np.any(x_run >= b, axis=1)]

    # Highest evidence wins; this also resolves ties within one step and
    # races cut off at max_t.
    choices = np.argmax(x, axis=1).astype(np.int32)
    traj = stack_history(start, history) if record else None
    return choices, steps * delta_t, running.size, traj


def racing_diffusion(
    spec,
    n_samples: int,
    rng: np.random.Generator,
    *,
    method: str = "exact",
    delta_t: float = DELTA_T,
    max_t: float = MAX_T,
    return_trajectories: bool = False,
    smooth_unif: bool = False,
    model: str = "rdm",
    **kwargs,
) -> dict:
    """Simulate the Racing Diffusion Model.

    Parameters
    ----------
    spec : RDMParams
        Validated parameters (v, A, k, t, s); ``v`` has one entry per
        accumulator.
    n_samples : int
        Number of draws.
    rng : np.random.Generator
        Source of randomness; consumed in the documented order.
    method : {"exact", "euler"}
        Finishing-time sampler. Trajectories force ``"euler"``.
    delta_t, max_t : float
        Euler step and maximal decision time (``"euler"`` only).
    return_trajectories : bool
        If True, also return every accumulator's evidence path.
    smooth_unif : bool
        Spread Euler decision times uniformly within their step.

    Returns
    -------
    dict
        ``rts``, ``choices`` (accumulator index), ``metadata`` and optionally
        ``trajectories``.
    """
    if method not in RACE_METHODS:
        raise ValueError(f"Unknown method '{method}'. Choose one of {RACE_METHODS}")
    if return_trajectories and method != "euler":
        logger.debug("%s: trajectories requested, switching to euler paths", model)
        method = "euler"

    v = np.asarray(spec.v, dtype=np.float64)
    n_acc = v.shape[0]
    b = spec.A + spec.k

    start = rng.uniform(0.0, spec.A, size=(n_samples, n_acc))

    traj = None
    n_truncated = 0
    if method == "exact":
        distance = b - start
        finish = rng.wald(distance / v, (distance / spec.s) ** 2)
        choices = np.argmin(finish, axis=1).astype(np.int32)
        decision_times = finish[np.arange(n_samples), choices]
    else:
        choices, decision_times, n_truncated, traj = _euler_race(
            start, v, b, spec.s, rng, delta_t, max_t, return_trajectories
        )
        log_truncated(model, n_truncated, n_samples, max_t)
        if smooth_unif:
            decision_times = smooth_decision_times(rng, decision_times, delta_t)

    out = {
        "rts": decision_times + spec.t,
        "choices": choices,
        "metadata": {
            "simulator": model,
            "method": method,
            "delta_t": delta_t,
            "max_t": max_t,
            "n_samples": n_samples,
            "n_truncated": n_truncated,
            "possible_choices": list(range(n_acc)),
            "threshold": b,
        },
    }
    if return_trajectories:
        out["trajectories"] = traj
    return out
