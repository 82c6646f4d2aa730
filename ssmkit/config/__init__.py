from .simulator_config import (
    get_default_simulator_config,
    get_nested_config,
    load_simulator_config,
    merge_simulator_config,
)
from .model_registry import (
    ModelConfigRegistry,
    ModelFamily,
    get_model_registry,
    register_model_config,
    register_model_config_factory,
)
from ._modelconfig import (
    DDMParams,
    DDMSDVParams,
    LBAParams,
    RDMParams,
    get_ddm_config,
    get_ddm_sdv_config,
    get_lba_config,
    get_model_config,
    get_rdm_config,
)

__all__ = [
    "get_default_simulator_config",
    "get_nested_config",
    "load_simulator_config",
    "merge_simulator_config",
    "ModelConfigRegistry",
    "ModelFamily",
    "get_model_registry",
    "register_model_config",
    "register_model_config_factory",
    "DDMParams",
    "DDMSDVParams",
    "LBAParams",
    "RDMParams",
    "get_ddm_config",
    "get_ddm_sdv_config",
    "get_lba_config",
    "get_model_config",
    "get_rdm_config",
]
