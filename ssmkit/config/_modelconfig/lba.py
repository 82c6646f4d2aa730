"""LBA (Linear Ballistic Accumulator) model configurations."""

from typing import NamedTuple

from ssmkit.basic_simulators import lba_models
from ssmkit.likelihoods import analytical
from ssmkit.validation import NON_NEGATIVE, POSITIVE, REAL


class LBAParams(NamedTuple):
    """Parameters of the LBA; ``v`` and ``sv`` hold one value per accumulator."""

    v: tuple[float, ...]
    A: float
    k: float
    t: float
    sv: tuple[float, ...]


def get_lba_config(n_choices: int):
    """Get configuration for an LBA with ``n_choices`` accumulators.

    The threshold is ``b = A + k``; drift rates are drawn from
    ``N(v_j, sv_j)`` truncated to positive values.
    """
    if n_choices < 2:
        raise ValueError(f"An LBA needs at least 2 accumulators, got {n_choices}")

    default_v = [round(1.0 - 0.5 * i / (n_choices - 1), 3) for i in range(n_choices)]
    return {
        "name": f"lba{n_choices}",
        "params": ["v", "A", "k", "t"],
        "optional_params": {"sv": 1.0},
        "param_domains": {
            "v": REAL.with_description("mean drift rates ν"),
            "A": POSITIVE.with_description("start-point range A"),
            "k": NON_NEGATIVE.with_description("threshold offset k (b = A + k)"),
            "t": NON_NEGATIVE.with_description("non-decision time τ"),
            "sv": POSITIVE.with_description("drift-rate standard deviation"),
        },
        "default_params": [default_v, 0.5, 0.5, 0.3],
        "nchoices": n_choices,
        "choices": list(range(n_choices)),
        "n_particles": n_choices,
        "vector_params": ["v", "sv"],
        "supports_trajectories": False,
        "spec_class": LBAParams,
        "simulator": lba_models.lba_vanilla,
        "likelihood": analytical.logp_lba,
    }


def get_lba2_config():
    """Get configuration for LBA2 model."""
    return get_lba_config(2)


def get_lba3_config():
    """Get configuration for LBA3 model."""
    return get_lba_config(3)
