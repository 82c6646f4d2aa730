"""
Statistical consistency tests: the samplers against the closed-form densities.

All tests are marked ``@pytest.mark.statistical`` and are skipped by default.
Run with::

    pytest tests/test_consistency.py --run-statistical -v

Design notes
------------
- For every response, the empirical distribution of sampled RTs is compared
  with the conditional CDF obtained by integrating the density on a fine grid
  (one-sample KS test), and the choice proportions with the integrated
  choice probabilities.
- The DDM and the Euler variant of the racing diffusion sampler discretise
  time; ``delta_t=1e-4`` and a moderate sample size keep the discretisation
  bias well below what the KS test can resolve.
- The LBA and the exact racing diffusion sampler have no discretisation error.
"""

import numpy as np
import pytest
from scipy import integrate, stats

import ssmkit

N_SAMPLES = 2000
SEED = 123

CHOICE_TOL = 0.04  # Max allowed |empirical - integrated| choice probability
KS_P_MIN = 0.001  # Minimum acceptable KS test p-value
MIN_PER_CHOICE = 100  # KS only for responses with enough draws


def _conditional_cdfs(model, spec, choices, max_rt):
    grid = spec.t + np.linspace(1e-6, max_rt, 40_000)
    cdfs = {}
    masses = {}
    for c in choices:
        dens = ssmkit.density(
            model, spec, (grid, np.full(grid.shape, c, dtype=np.int64))
        )
        cum = integrate.cumulative_trapezoid(dens, grid, initial=0.0)
        masses[c] = cum[-1]
        cdfs[c] = (grid, cum / cum[-1])
    return cdfs, masses


def _assert_consistent(model, theta, max_rt, **sample_kwargs):
    spec = ssmkit.validate(model, theta)
    choices = ssmkit.dispatch(model).config["choices"]
    out = ssmkit.sample(model, spec, N_SAMPLES, random_state=SEED, **sample_kwargs)
    cdfs, masses = _conditional_cdfs(model, spec, choices, max_rt)

    total = sum(masses.values())
    assert total == pytest.approx(1.0, abs=0.01)

    for c in choices:
        rts = out.rts[out.choices == c]
        assert rts.size / N_SAMPLES == pytest.approx(masses[c], abs=CHOICE_TOL)
        if rts.size < MIN_PER_CHOICE:
            continue
        grid, cdf = cdfs[c]
        result = stats.kstest(rts, lambda x: np.interp(x, grid, cdf))
        assert result.pvalue > KS_P_MIN, (
            f"{model}: RTs for choice {c} inconsistent with density "
            f"(KS D={result.statistic:.4f}, p={result.pvalue:.2e})"
        )


@pytest.mark.statistical
@pytest.mark.slow
def test_ddm_sampler_matches_density():
    _assert_consistent(
        "ddm",
        {"v": 1.0, "a": 1.2, "z": 0.45, "t": 0.3},
        max_rt=15.0,
        delta_t=1e-4,
    )


@pytest.mark.statistical
@pytest.mark.slow
def test_ddm_sdv_sampler_matches_density():
    _assert_consistent(
        "ddm_sdv",
        {"v": 0.8, "a": 1.0, "z": 0.5, "t": 0.2, "sv": 1.0},
        max_rt=15.0,
        delta_t=1e-4,
    )


@pytest.mark.statistical
@pytest.mark.parametrize(
    "model, theta",
    [
        ("lba2", {"v": [3.0, 2.0], "A": 0.8, "k": 0.2, "t": 0.3, "sv": 0.5}),
        ("lba3", {"v": [2.0, 1.5, 2.5], "A": 0.5, "k": 0.5, "t": 0.1, "sv": 0.6}),
    ],
)
def test_lba_sampler_matches_density(model, theta):
    _assert_consistent(model, theta, max_rt=20.0)


@pytest.mark.statistical
@pytest.mark.parametrize("method", ["exact", "euler"])
def test_rdm_sampler_matches_density(method):
    kwargs = {"method": method}
    if method == "euler":
        kwargs["delta_t"] = 1e-4
    _assert_consistent(
        "rdm2",
        {"v": [2.0, 1.0], "A": 0.5, "k": 1.0, "t": 0.2},
        max_rt=20.0,
        **kwargs,
    )
