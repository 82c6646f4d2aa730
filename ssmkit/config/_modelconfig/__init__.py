"""Built-in model configurations."""

from .ddm import DDMParams, DDMSDVParams, get_ddm_config, get_ddm_sdv_config
from .lba import LBAParams, get_lba2_config, get_lba3_config, get_lba_config
from .racing_diffusion import (
    RDMParams,
    get_rdm2_config,
    get_rdm3_config,
    get_rdm_config,
)


def get_model_config():
    """Return all built-in model configurations keyed by model name."""
    return {
        "ddm": get_ddm_config(),
        "ddm_sdv": get_ddm_sdv_config(),
        "lba2": get_lba2_config(),
        "lba3": get_lba3_config(),
        "rdm2": get_rdm2_config(),
        "rdm3": get_rdm3_config(),
    }


__all__ = [
    "DDMParams",
    "DDMSDVParams",
    "LBAParams",
    "RDMParams",
    "get_ddm_config",
    "get_ddm_sdv_config",
    "get_lba_config",
    "get_lba2_config",
    "get_lba3_config",
    "get_rdm_config",
    "get_rdm2_config",
    "get_rdm3_config",
    "get_model_config",
]
