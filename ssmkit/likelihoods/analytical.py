"""Closed-form log-likelihoods for the built-in model families.

Every ``logp_*`` function has the signature

    logp_model(spec, rts, choices, *, tolerance, max_terms) -> np.ndarray

and returns one log-density per observation: the log of the probability of
the choice times the density of the response time given that choice. An
observation with ``rt <= t`` (non-decision time), a non-finite rt or a choice
outside the model's choice set gets ``-inf``.
"""

import numpy as np
from scipy.special import log_ndtr, logsumexp, ndtr

from ssmkit.config.simulator_config import WFPT_MAX_TERMS, WFPT_TOLERANCE
from ssmkit.likelihoods.wfpt import log_wfpt_lower

# Below this start-point range (relative to the threshold) the racing
# diffusion density is evaluated as a plain Wald density.
RDM_MIN_RELATIVE_A = 1e-6

# Upper bound on quadrature panels for the racing diffusion survivor function.
RDM_SF_MAX_PANELS = 64

# Intervals over which the log-integrand changes by less than this are
# integrated by Gauss-Legendre quadrature instead of closed-form differences.
NARROW_SPREAD = 0.5


def _phi(x: np.ndarray) -> np.ndarray:
    return np.exp(-0.5 * x**2) / np.sqrt(2.0 * np.pi)


def _valid_mask(rts, choices, t, possible_choices):
    with np.errstate(invalid="ignore"):
        valid = np.isfinite(rts) & (rts - t > 0)
    return valid & np.isin(choices, possible_choices)


# ---------------------------------------------------------------------------
# DDM
# ---------------------------------------------------------------------------


def _logp_ddm_generic(rts, choices, v, a, z, t, sv, s, tolerance, max_terms):
    rts = np.asarray(rts, dtype=np.float64)
    choices = np.asarray(choices)
    out = np.full(rts.shape, -np.inf)

    valid = _valid_mask(rts, choices, t, [-1, 1])
    if not np.any(valid):
        return out

    # Upper-boundary hits are lower-boundary hits of the mirrored process.
    upper = choices[valid] == 1
    v_eff = np.where(upper, -v, v) / s
    w = np.where(upper, 1.0 - z, z)

    out[valid] = log_wfpt_lower(
        rts[valid] - t,
        v_eff,
        a / s,
        w,
        sv=sv / s,
        tolerance=tolerance,
        max_terms=max_terms,
    )
    return out


def logp_ddm(
    spec,
    rts: np.ndarray,
    choices: np.ndarray,
    *,
    tolerance: float = WFPT_TOLERANCE,
    max_terms: int = WFPT_MAX_TERMS,
    **kwargs,
) -> np.ndarray:
    """Log-density of the DDM for choices in {-1, 1} (1 = upper boundary)."""
    return _logp_ddm_generic(
        rts, choices, spec.v, spec.a, spec.z, spec.t, 0.0, spec.s, tolerance, max_terms
    )


def logp_ddm_sdv(
    spec,
    rts: np.ndarray,
    choices: np.ndarray,
    *,
    tolerance: float = WFPT_TOLERANCE,
    max_terms: int = WFPT_MAX_TERMS,
    **kwargs,
) -> np.ndarray:
    """Log-density of the DDM with across-trial drift variability ``sv``."""
    return _logp_ddm_generic(
        rts,
        choices,
        spec.v,
        spec.a,
        spec.z,
        spec.t,
        spec.sv,
        spec.s,
        tolerance,
        max_terms,
    )


# ---------------------------------------------------------------------------
# Log-space helpers for the race models
# ---------------------------------------------------------------------------

_GL_NODES, _GL_WEIGHTS = np.polynomial.legendre.leggauss(16)
_GL_LOG_HALF_WEIGHTS = np.log(0.5 * _GL_WEIGHTS)


def _log_phi(x: np.ndarray) -> np.ndarray:
    return -0.5 * x**2 - 0.5 * np.log(2.0 * np.pi)


def _log1mexp(x: np.ndarray) -> np.ndarray:
    """``log(1 - exp(x))`` for ``x <= 0``."""
    x = np.minimum(x, 0.0)
    return np.where(x > -np.log(2.0), np.log(-np.expm1(x)), np.log1p(-np.exp(x)))


def _log_ndtr_diff(a, b) -> np.ndarray:
    """``log(Phi(b) - Phi(a))`` for ``a <= b``, using upper tails when ``a > 0``."""
    upper = a > 0
    log_big = np.where(upper, log_ndtr(-a), log_ndtr(b))
    log_small = np.where(upper, log_ndtr(-b), log_ndtr(a))
    return log_big + _log1mexp(log_small - log_big)


def _narrow(lo: np.ndarray, hi: np.ndarray) -> np.ndarray:
    # The log-integrand varies by less than NARROW_SPREAD across the interval.
    return (hi - lo) * (1.0 + np.maximum(np.abs(lo), np.abs(hi))) < NARROW_SPREAD


def _log_gl_mean(log_f, lo: np.ndarray, hi: np.ndarray) -> np.ndarray:
    """Log of the mean of ``exp(log_f)`` over ``[lo, hi]`` (Gauss-Legendre)."""
    mid = 0.5 * (lo + hi)
    half = 0.5 * (hi - lo)
    nodes = mid[:, None] + half[:, None] * _GL_NODES
    return logsumexp(log_f(nodes) + _GL_LOG_HALF_WEIGHTS, axis=-1)


def _log_upper_moment(z, c0: float, c1):
    # log of c0 * Phi(-z) + c1 * phi(z) = int_z^inf (c0 + c1 u) phi(u) du
    if c0 >= 0:
        return np.logaddexp(np.log(c0) + log_ndtr(-z), np.log(c1) + _log_phi(z))
    mills = np.exp(log_ndtr(-z) - _log_phi(z))
    return _log_phi(z) + np.log(c1 + c0 * mills)


def _log_lower_moment(z, h):
    # log of h * Phi(z) + phi(z) = int_-inf^z (h - u) phi(u) du, for z <= h
    mills = np.exp(log_ndtr(z) - _log_phi(z))
    return np.where(
        h > 0,
        np.logaddexp(np.log(np.abs(h)) + log_ndtr(z), _log_phi(z)),
        _log_phi(z) + np.log1p(h * mills),
    )


def _log_tail_moment(lo, hi):
    """``log`` of the integral of ``(hi - u) * phi(u)`` over ``[lo, hi]``."""
    log_hi = _log_lower_moment(hi, hi)
    return log_hi + _log1mexp(_log_lower_moment(lo, hi) - log_hi)


def _log_linear_gauss_integral(lo, hi, c0: float, c1) -> np.ndarray:
    """``log`` of the integral of ``(c0 + c1 * u) * phi(u)`` over ``[lo, hi]``.

    ``c0 + c1 * u`` must be non-negative on the interval and ``c1 > 0``. Narrow
    intervals are integrated by quadrature, intervals in the upper tail as a
    difference of upper moments and all others from below, so the result stays
    finite wherever the integral is representable in log space.
    """
    lo, hi, c1 = (
        np.array(x, dtype=np.float64) for x in np.broadcast_arrays(lo, hi, c1)
    )
    out = np.empty(lo.shape)
    narrow = _narrow(lo, hi)
    upper = ~narrow & (lo >= 0)
    lower = ~(narrow | upper)

    if np.any(narrow):
        l, h, c = lo[narrow], hi[narrow], c1[narrow]
        out[narrow] = np.log(h - l) + _log_gl_mean(
            lambda u: np.log(c0 + c[:, None] * u) + _log_phi(u), l, h
        )
    if np.any(upper):
        l, h, c = lo[upper], hi[upper], c1[upper]
        log_l = _log_upper_moment(l, c0, c)
        out[upper] = log_l + _log1mexp(_log_upper_moment(h, c0, c) - log_l)
    if np.any(lower):
        l, h, c = lo[lower], hi[lower], c1[lower]
        # (c0 + c1 h) * mass - c1 * tail moment; the second term is the smaller
        log_edge = np.log(c0 + c * h)
        log_mass = _log_ndtr_diff(l, h)
        log_moment = np.log(c) + _log_tail_moment(l, h)
        out[lower] = (
            log_edge + log_mass + _log1mexp(log_moment - log_edge - log_mass)
        )
    return out


# ---------------------------------------------------------------------------
# LBA
# ---------------------------------------------------------------------------


def _lba_cdf(t: np.ndarray, v: float, A: float, b: float, sv: float) -> np.ndarray:
    # Brown & Heathcote (2008); tends to Phi(v / sv) as t grows.
    ts = t * sv
    z1 = (b - A - t * v) / ts
    z2 = (b - t * v) / ts
    return (
        1.0
        + (b - A - t * v) / A * ndtr(z1)
        - (b - t * v) / A * ndtr(z2)
        + ts / A * (_phi(z1) - _phi(z2))
    )


def _lba_log_sf(t, z_lo, z_hi, v, A, b, sv, log_positive):
    # log of Phi(v / sv) * P(T > t)
    z0 = -v / sv
    out = np.empty(t.shape)

    narrow = _narrow(z_lo, z_hi)
    if np.any(narrow):
        out[narrow] = _log_gl_mean(
            lambda u: _log_ndtr_diff(z0, u), z_lo[narrow], z_hi[narrow]
        )

    rest = ~narrow
    t_rest, lo, hi = t[rest], z_lo[rest], z_hi[rest]
    cdf = _lba_cdf(t_rest, v, A, b, sv) / np.exp(log_positive)
    log_rest = log_positive + np.log1p(-np.clip(cdf, 0.0, 1.0))

    # Past the median the survivor is built from positive terms only.
    late = ~(cdf <= 0.5)
    if np.any(late):
        lo, hi, t_late = lo[late], hi[late], t_rest[late]
        log_q = np.logaddexp(
            np.log(hi - lo) + _log_ndtr_diff(z0, lo), _log_tail_moment(lo, hi)
        )
        log_rest[late] = np.log(t_late * sv / A) + log_q

    out[rest] = log_rest
    return out


def lba_accumulator_logpdf_logsf(
    t: np.ndarray, v: float, A: float, b: float, sv: float
) -> tuple[np.ndarray, np.ndarray]:
    """Log finishing-time density and log survivor function of one LBA accumulator.

    Drift rates follow a normal distribution truncated to positive values,
    matching the redraw rule of the simulator, so both terms are renormalised
    by ``Phi(v / sv)``. With ``z = (b / t - v) / sv`` the density is
    ``int (v + sv u) phi(u) du / A`` over the start-point range mapped to
    ``[z_lo, z_hi]``, evaluated in log space.
    """
    t = np.asarray(t, dtype=np.float64)
    ts = t * sv
    z_lo = (b - A - t * v) / ts
    z_hi = (b - t * v) / ts
    log_positive = log_ndtr(v / sv)

    with np.errstate(all="ignore"):
        log_pdf = _log_linear_gauss_integral(z_lo, z_hi, v, sv) - np.log(A)
        log_sf = _lba_log_sf(t, z_lo, z_hi, v, A, b, sv, log_positive)
    return log_pdf - log_positive, log_sf - log_positive


def logp_lba(spec, rts: np.ndarray, choices: np.ndarray, **kwargs) -> np.ndarray:
    """Log-density of the LBA; choices are accumulator indices."""
    rts = np.asarray(rts, dtype=np.float64)
    choices = np.asarray(choices)
    n_acc = len(spec.v)
    b = spec.A + spec.k
    out = np.full(rts.shape, -np.inf)

    valid = _valid_mask(rts, choices, spec.t, np.arange(n_acc))
    if not np.any(valid):
        return out

    dt = rts[valid] - spec.t
    winner = choices[valid].astype(np.int64)
    log_dens = np.zeros(dt.shape)
    for j in range(n_acc):
        log_pdf, log_sf = lba_accumulator_logpdf_logsf(
            dt, spec.v[j], spec.A, b, spec.sv[j]
        )
        log_dens += np.where(winner == j, log_pdf, log_sf)

    out[valid] = log_dens
    return out


# ---------------------------------------------------------------------------
# Racing diffusion
# ---------------------------------------------------------------------------


def _log_wald_pdf(t, v, b):
    return np.log(b) - 0.5 * np.log(2.0 * np.pi * t**3) - (b - v * t) ** 2 / (2.0 * t)


def _log_wald_sf(t, v, b):
    # P(T > t) = Phi((b - vt) / sqrt(t)) - exp(2vb) Phi(-(b + vt) / sqrt(t))
    sqrt_t = np.sqrt(t)
    log_direct = log_ndtr((b - v * t) / sqrt_t)
    log_reflected = 2.0 * v * b + log_ndtr(-(v * t + b) / sqrt_t)
    return log_direct + _log1mexp(log_reflected - log_direct)


def _antiderivative_normal_sf(w: np.ndarray) -> np.ndarray:
    # d/dw [w * Phi(-w) - phi(w)] = Phi(-w)
    return w * ndtr(-w) - _phi(w)


def _wald_uniform_cdf(t, v, A, b):
    # Inverse Gaussian cdf averaged over a threshold distance uniform on [b - A, b]
    sqrt_t = np.sqrt(t)
    x_lo = b - A
    x_hi = b
    alpha = (x_lo - v * t) / sqrt_t
    beta = (x_hi - v * t) / sqrt_t

    def _reflected(x):
        return np.exp(2.0 * v * x + log_ndtr(-(x + v * t) / sqrt_t)) + ndtr(
            (x - v * t) / sqrt_t
        )

    return (
        sqrt_t
        * (_antiderivative_normal_sf(beta) - _antiderivative_normal_sf(alpha))
        + (_reflected(x_hi) - _reflected(x_lo)) / (2.0 * v)
    ) / A


def _log_wald_uniform_sf(t, v, A, b):
    # Mean of the Wald survivor over the threshold distance, by panels of
    # Gauss-Legendre quadrature.
    n_panels = int(
        np.clip(np.ceil(v * A + A / np.sqrt(t.min())), 1, RDM_SF_MAX_PANELS)
    )
    edges = np.linspace(b - A, b, n_panels + 1)
    log_means = [
        _log_gl_mean(
            lambda x: _log_wald_sf(t[:, None], v, x),
            np.full(t.shape, x_lo),
            np.full(t.shape, x_hi),
        )
        for x_lo, x_hi in zip(edges[:-1], edges[1:])
    ]
    return logsumexp(log_means, axis=0) - np.log(n_panels)


def wald_accumulator_logpdf_logsf(
    t: np.ndarray, v: float, A: float, b: float, s: float
) -> tuple[np.ndarray, np.ndarray]:
    """Log finishing-time density and log survivor function of one racing
    diffusion accumulator.

    The start point is uniform on ``[0, A]``, so the distance to the threshold
    is uniform on ``[b - A, b]`` and the inverse Gaussian first-passage
    distribution is averaged over it (Logan et al., 2014). For ``A = 0`` this
    is the plain Wald distribution.
    """
    v = v / s
    A = A / s
    b = b / s
    t = np.asarray(t, dtype=np.float64)

    with np.errstate(all="ignore"):
        if A < RDM_MIN_RELATIVE_A * b:
            return _log_wald_pdf(t, v, b), _log_wald_sf(t, v, b)

        sqrt_t = np.sqrt(t)
        log_pdf = _log_linear_gauss_integral(
            (b - A - v * t) / sqrt_t, (b - v * t) / sqrt_t, v, 1.0 / sqrt_t
        ) - np.log(A)

        cdf = _wald_uniform_cdf(t, v, A, b)
        log_sf = np.log1p(-np.clip(cdf, 0.0, 1.0))
        late = ~(cdf <= 0.5)
        if np.any(late):
            log_sf[late] = _log_wald_uniform_sf(t[late], v, A, b)
    return log_pdf, log_sf


def logp_rdm(spec, rts: np.ndarray, choices: np.ndarray, **kwargs) -> np.ndarray:
    """Log-density of the racing diffusion model; choices are accumulator indices."""
    rts = np.asarray(rts, dtype=np.float64)
    choices = np.asarray(choices)
    n_acc = len(spec.v)
    b = spec.A + spec.k
    out = np.full(rts.shape, -np.inf)

    valid = _valid_mask(rts, choices, spec.t, np.arange(n_acc))
    if not np.any(valid):
        return out

    dt = rts[valid] - spec.t
    winner = choices[valid].astype(np.int64)
    log_dens = np.zeros(dt.shape)
    for j in range(n_acc):
        log_pdf, log_sf = wald_accumulator_logpdf_logsf(
            dt, spec.v[j], spec.A, b, spec.s
        )
        log_dens += np.where(winner == j, log_pdf, log_sf)

    out[valid] = log_dens
    return out
