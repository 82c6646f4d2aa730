"""Likelihood functions for the built-in model families."""

from .analytical import (
    lba_accumulator_logpdf_logsf,
    logp_ddm,
    logp_ddm_sdv,
    logp_lba,
    logp_rdm,
    wald_accumulator_logpdf_logsf,
)
from .likelihood import as_rts_choices, evaluate_density
from .wfpt import log_fpt_normalised, log_wfpt_lower

__all__ = [
    "logp_ddm",
    "logp_ddm_sdv",
    "logp_lba",
    "logp_rdm",
    "lba_accumulator_logpdf_logsf",
    "wald_accumulator_logpdf_logsf",
    "log_fpt_normalised",
    "log_wfpt_lower",
    "as_rts_choices",
    "evaluate_density",
]
