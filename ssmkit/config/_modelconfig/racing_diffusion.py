"""Racing Diffusion model configurations."""

from typing import NamedTuple

from ssmkit.basic_simulators import race_models
from ssmkit.likelihoods import analytical
from ssmkit.validation import NON_NEGATIVE, POSITIVE


class RDMParams(NamedTuple):
    """Parameters of the racing diffusion model; ``v`` has one value per accumulator."""

    v: tuple[float, ...]
    A: float
    k: float
    t: float
    s: float = 1.0


def get_rdm_config(n_choices: int):
    """Get configuration for a racing diffusion model with ``n_choices`` accumulators."""
    if n_choices < 2:
        raise ValueError(
            f"A racing diffusion model needs at least 2 accumulators, got {n_choices}"
        )

    return {
        "name": f"rdm{n_choices}",
        "params": ["v", "A", "k", "t"],
        "optional_params": {"s": 1.0},
        "param_domains": {
            "v": POSITIVE.with_description("drift rates ν"),
            "A": NON_NEGATIVE.with_description("start-point range A"),
            "k": POSITIVE.with_description("threshold offset k (b = A + k)"),
            "t": NON_NEGATIVE.with_description("non-decision time τ"),
            "s": POSITIVE.with_description("diffusion noise σ"),
        },
        "default_params": [[1.0] * n_choices, 0.5, 1.0, 1e-3],
        "nchoices": n_choices,
        "choices": list(range(n_choices)),
        "n_particles": n_choices,
        "vector_params": ["v"],
        "supports_trajectories": True,
        "methods": race_models.RACE_METHODS,
        "spec_class": RDMParams,
        "simulator": race_models.racing_diffusion,
        "likelihood": analytical.logp_rdm,
    }


def get_rdm2_config():
    """Get configuration for racing diffusion model with 2 choices."""
    return get_rdm_config(2)


def get_rdm3_config():
    """Get configuration for racing diffusion model with 3 choices."""
    return get_rdm_config(3)
