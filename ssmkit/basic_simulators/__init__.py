from . import ddm_models
from . import lba_models
from . import race_models
from .sampling import simulate_outcomes

__all__ = [
    "ddm_models",
    "lba_models",
    "race_models",
    "simulate_outcomes",
]
