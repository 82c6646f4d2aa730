"""Helpers shared by the discretised-path simulators."""

import logging

import numpy as np

logger = logging.getLogger(__name__)


def n_max_steps(max_t: float, delta_t: float) -> int:
    """Number of Euler steps that fit into ``max_t``."""
    return max(int(np.ceil(max_t / delta_t - 1e-9)), 1)


def stack_history(start: np.ndarray, history: list) -> np.ndarray:
    """Build the trajectory array of shape (n, n_steps + 1, n_particles).

    ``start`` holds the initial evidence, shape (n,) or (n, k). Each history
    entry is ``(running, values)`` for one step: the indices of the paths
    still running and their new evidence. Only those rows are kept while
    simulating; a path is NaN from the step after it terminated.
    """
    start = start.reshape(start.shape[0], -1)
    n, k = start.shape
    traj = np.full((n, len(history) + 1, k), np.nan)
    traj[:, 0] = start
    for step, (running, values) in enumerate(history, start=1):
        traj[running, step] = values.reshape(running.size, k)
    return traj


def smooth_decision_times(
    rng: np.random.Generator, decision_times: np.ndarray, delta_t: float
) -> np.ndarray:
    """Spread Euler decision times uniformly over their step.

    Draws one uniform per sample (in sample order) after all paths have been
    simulated, and shifts each time by ``(0.5 - u) * delta_t``.
    """
    u = rng.uniform(size=decision_times.shape[0])
    return decision_times + (0.5 - u) * delta_t


def log_truncated(model: str, n_truncated: int, n_samples: int, max_t: float) -> None:
    if n_truncated:
        logger.warning(
            "%s: %d of %d paths did not reach a boundary within max_t=%g; "
            "they were assigned the nearest boundary with decision time max_t",
            model,
            n_truncated,
            n_samples,
            max_t,
        )
