"""Wiener first-passage time density.

Density of a Wiener process with drift ``v`` (unit noise) started at ``w * a``
first hitting the lower boundary 0 of ``[0, a]`` at time ``t``, following
Navarro & Fuss (2009):

    p(t | v, a, w) = 1 / a**2 * exp(-v * a * w - v**2 * t / 2) * f(t / a**2 | w)

where ``f(u | w)`` is the zero-drift, unit-boundary density with the two
series representations

    small time:  f = (2 pi u**3) ** -0.5 * sum_{k=-inf}^{inf} (w + 2k) exp(-(w + 2k)**2 / (2u))
    large time:  f = pi * sum_{k=1}^{inf} k exp(-k**2 pi**2 u / 2) sin(k pi w)

Truncation criterion: per observation, the representation needing fewer
terms according to the Navarro-Fuss bounds is chosen. Terms (pairs ``+-k``
for the small-time series) are then accumulated one at a time, and the sum
stops after the first term whose magnitude bound is below
``tolerance * |partial sum|``, once terms have started to decrease
monotonically. The magnitude bound ignores the ``sin`` factor, so a vanishing
sine cannot end the sum early. If ``max_terms`` terms do not meet the
criterion, a :class:`~ssmkit.exceptions.NumericalWarning` is issued and the
partial sum is used. Both series are evaluated with their leading exponential
factored out, so log-densities stay finite where the density underflows.
"""

import warnings

import numpy as np

from ssmkit.config.simulator_config import WFPT_MAX_TERMS, WFPT_TOLERANCE
from ssmkit.exceptions import NumericalWarning

LOG_2PI = np.log(2.0 * np.pi)


def _n_terms_large(u: np.ndarray, tolerance: float) -> np.ndarray:
    lower = 1.0 / (np.pi * np.sqrt(u))
    arg = np.pi * u * tolerance
    with np.errstate(divide="ignore", invalid="ignore"):
        kl = np.sqrt(-2.0 * np.log(arg) / (np.pi**2 * u))
    kl = np.where(arg < 1.0, kl, lower)
    return np.maximum(kl, lower)


def _n_terms_small(u: np.ndarray, tolerance: float) -> np.ndarray:
    arg = 2.0 * np.sqrt(2.0 * np.pi * u) * tolerance
    with np.errstate(divide="ignore", invalid="ignore"):
        ks = 2.0 + np.sqrt(-2.0 * u * np.log(arg))
    ks = np.where(arg < 1.0, ks, 2.0)
    return np.maximum(ks, np.sqrt(u) + 1.0)


def _log_small_time(u, w, tolerance, max_terms):
    total = w.copy()
    active = np.ones(u.shape, dtype=bool)
    k = 0
    while np.any(active) and k < max_terms:
        k += 1
        idx = np.flatnonzero(active)
        ua = u[idx]
        wa = w[idx]
        plus = (wa + 2 * k) * np.exp(-(4 * k * k + 4 * k * wa) / (2 * ua))
        minus = (wa - 2 * k) * np.exp(-(4 * k * k - 4 * k * wa) / (2 * ua))
        total[idx] += plus + minus

        bound = np.abs(plus) + np.abs(minus)
        decreasing = (2 * k - wa) >= np.sqrt(ua)
        done = decreasing & (bound < tolerance * np.abs(total[idx]))
        active[idx[done]] = False

    with np.errstate(divide="ignore", invalid="ignore"):
        log_sum = np.where(total > 0, np.log(total), -np.inf)
    log_f = -0.5 * LOG_2PI - 1.5 * np.log(u) - w**2 / (2 * u) + log_sum
    return log_f, int(np.count_nonzero(active))


def _log_large_time(u, w, tolerance, max_terms):
    total = np.sin(np.pi * w)
    active = np.ones(u.shape, dtype=bool)
    k = 1
    while np.any(active) and k < max_terms:
        k += 1
        idx = np.flatnonzero(active)
        ua = u[idx]
        bound = k * np.exp(-(k * k - 1) * np.pi**2 * ua / 2)
        total[idx] += bound * np.sin(k * np.pi * w[idx])

        decreasing = k >= 1.0 / (np.pi * np.sqrt(ua))
        done = decreasing & (bound < tolerance * np.abs(total[idx]))
        active[idx[done]] = False

    with np.errstate(divide="ignore", invalid="ignore"):
        log_sum = np.where(total > 0, np.log(total), -np.inf)
    log_f = np.log(np.pi) - np.pi**2 * u / 2 + log_sum
    return log_f, int(np.count_nonzero(active))


def log_fpt_normalised(
    u: np.ndarray,
    w: np.ndarray,
    tolerance: float = WFPT_TOLERANCE,
    max_terms: int = WFPT_MAX_TERMS,
) -> np.ndarray:
    """Log of ``f(u | w)``, the zero-drift density on the unit interval.

    Arguments
    ---------
        u (np.ndarray): Normalised decision times ``t / a**2``, all > 0.
        w (np.ndarray): Relative starting points in (0, 1), same shape as u.
        tolerance (float): Relative truncation tolerance.
        max_terms (int): Iteration cap per observation.

    Returns
    -------
        np.ndarray: Log-density, same shape as u.
    """
    u = np.asarray(u, dtype=np.float64)
    w = np.broadcast_to(np.asarray(w, dtype=np.float64), u.shape).copy()
    out = np.empty(u.shape, dtype=np.float64)

    use_small = _n_terms_small(u, tolerance) < _n_terms_large(u, tolerance)
    n_unconverged = 0
    if np.any(use_small):
        out[use_small], missed = _log_small_time(
            u[use_small], w[use_small], tolerance, max_terms
        )
        n_unconverged += missed
    if np.any(~use_small):
        out[~use_small], missed = _log_large_time(
            u[~use_small], w[~use_small], tolerance, max_terms
        )
        n_unconverged += missed

    if n_unconverged:
        warnings.warn(
            f"Wiener first-passage series did not reach relative tolerance "
            f"{tolerance:g} within {max_terms} terms for {n_unconverged} "
            "observation(s); using the partial sums.",
            NumericalWarning,
            stacklevel=3,
        )
    return out


def log_wfpt_lower(
    t: np.ndarray,
    v: np.ndarray,
    a: float,
    w: np.ndarray,
    sv: float = 0.0,
    tolerance: float = WFPT_TOLERANCE,
    max_terms: int = WFPT_MAX_TERMS,
) -> np.ndarray:
    """Log first-passage density at the lower boundary (unit noise).

    With ``sv > 0`` the drift is integrated over ``N(v, sv)`` in closed form:

        log p = log f(t / a**2 | w) - 2 log a
                + ((a w sv)**2 - 2 a v w - v**2 t) / (2 (1 + sv**2 t))
                - log(1 + sv**2 t) / 2

    which reduces to the fixed-drift expression for ``sv = 0``.

    Arguments
    ---------
        t (np.ndarray): Decision times, all > 0.
        v (np.ndarray): Drift rates (broadcast against t).
        a (float): Boundary separation.
        w (np.ndarray): Relative starting points (broadcast against t).
        sv (float): Across-trial drift standard deviation.
    """
    t = np.asarray(t, dtype=np.float64)
    v = np.asarray(v, dtype=np.float64)
    w = np.broadcast_to(np.asarray(w, dtype=np.float64), t.shape)

    log_f = log_fpt_normalised(t / a**2, w, tolerance, max_terms)
    var_term = 1.0 + sv**2 * t
    exponent = ((a * w * sv) ** 2 - 2.0 * a * v * w - v**2 * t) / (2.0 * var_term)
    return log_f - 2.0 * np.log(a) + exponent - 0.5 * np.log(var_term)
