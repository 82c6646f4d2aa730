"""DDM model configurations."""

from typing import NamedTuple

from ssmkit.basic_simulators import ddm_models
from ssmkit.likelihoods import analytical
from ssmkit.validation import NON_NEGATIVE, POSITIVE, REAL, UNIT_OPEN


class DDMParams(NamedTuple):
    """Parameters of the basic DDM."""

    v: float
    a: float
    z: float
    t: float
    s: float = 1.0


class DDMSDVParams(NamedTuple):
    """Parameters of the DDM with across-trial drift variability."""

    v: float
    a: float
    z: float
    t: float
    sv: float
    s: float = 1.0


_DDM_DOMAINS = {
    "v": REAL.with_description("drift rate ν"),
    "a": POSITIVE.with_description("boundary separation α"),
    "z": UNIT_OPEN.with_description("relative starting point z"),
    "t": NON_NEGATIVE.with_description("non-decision time τ"),
    "s": POSITIVE.with_description("diffusion noise σ"),
}


def _get_base_ddm_config():
    return {
        "name": "ddm",
        "params": ["v", "a", "z", "t"],
        "optional_params": {"s": 1.0},
        "param_domains": dict(_DDM_DOMAINS),
        "default_params": [0.0, 1.0, 0.5, 1e-3],
        "nchoices": 2,
        "choices": [-1, 1],
        "n_particles": 1,
        "vector_params": [],
        "supports_trajectories": True,
    }


def get_ddm_config():
    """Get the configuration for the DDM model."""
    base_config = _get_base_ddm_config()
    base_config["spec_class"] = DDMParams
    base_config["simulator"] = ddm_models.ddm
    base_config["likelihood"] = analytical.logp_ddm
    return base_config


def get_ddm_sdv_config():
    """Get the configuration for the DDM with drift variability (sv)."""
    base_config = _get_base_ddm_config()
    base_config.update(
        {
            "name": "ddm_sdv",
            "params": ["v", "a", "z", "t", "sv"],
            "default_params": [0.0, 1.0, 0.5, 1e-3, 1.0],
            "spec_class": DDMSDVParams,
            "simulator": ddm_models.ddm_sdv,
            "likelihood": analytical.logp_ddm_sdv,
        }
    )
    base_config["param_domains"]["sv"] = NON_NEGATIVE.with_description(
        "drift-rate standard deviation"
    )
    return base_config
