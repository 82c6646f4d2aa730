"""Runtime settings for simulation and likelihood evaluation.

Settings live in a nested dictionary with one section per concern:

    {
        "simulator": {"delta_t": 0.001, "max_t": 20.0, ...},
        "likelihood": {"tolerance": 1e-7, "max_terms": 1000},
        "pipeline": {"n_cpus": 1, "chunk_size": 10000, "progress": False},
    }

Defaults come from :func:`get_default_simulator_config`; a YAML file with the
same layout can override any subset of keys via :func:`load_simulator_config`.
"""

from copy import deepcopy
from pathlib import Path
from typing import Any

import yaml

# Euler step for diffusion paths (seconds). The discretised first-passage time
# overshoots the boundary by about 0.58 * s * sqrt(DELTA_T) in evidence units,
# which biases decision times upward by roughly that distance over the drift.
DELTA_T = 0.001
MAX_T = 20.0

# Relative truncation tolerance and term cap for the Wiener first-passage series.
WFPT_TOLERANCE = 1e-7
WFPT_MAX_TERMS = 1000

# Redraw rounds for non-positive LBA drift rates.
LBA_MAX_REDRAWS = 1000

CHUNK_SIZE = 10_000

_SECTIONS = ("simulator", "likelihood", "pipeline")


def get_default_simulator_config() -> dict:
    """Get the default settings in nested structure.

    Returns
    -------
    dict
        Fresh nested settings dictionary (safe to mutate).
    """
    return {
        "simulator": {
            "delta_t": DELTA_T,
            "max_t": MAX_T,
            "max_redraws": LBA_MAX_REDRAWS,
            "smooth_unif": False,
        },
        "likelihood": {
            "tolerance": WFPT_TOLERANCE,
            "max_terms": WFPT_MAX_TERMS,
        },
        "pipeline": {
            "n_cpus": 1,
            "chunk_size": CHUNK_SIZE,
            "progress": False,
        },
    }


def get_nested_config(config: dict, section: str, key: str, default: Any = None) -> Any:
    """Get a value from the nested settings structure.

    Args:
        config: Settings dictionary
        section: Section name ("simulator", "likelihood", "pipeline")
        key: Key name within the section
        default: Value returned if the key is not present

    Examples:
        >>> config = {"simulator": {"delta_t": 0.0005}}
        >>> get_nested_config(config, "simulator", "delta_t")
        0.0005
        >>> get_nested_config(config, "simulator", "max_t", default=20.0)
        20.0
    """
    if section in config and isinstance(config[section], dict):
        if key in config[section]:
            return config[section][key]
    return default


def merge_simulator_config(base: dict, overrides: dict) -> dict:
    """Return a copy of ``base`` with the sections of ``overrides`` merged in."""
    merged = deepcopy(base)
    for section, values in overrides.items():
        if section not in _SECTIONS:
            raise ValueError(
                f"Unknown settings section '{section}'. "
                f"Valid sections: {list(_SECTIONS)}"
            )
        if not isinstance(values, dict):
            raise ValueError(
                f"Settings section '{section}' must be a mapping, "
                f"got {type(values).__name__}"
            )
        unknown = set(values) - set(merged[section])
        if unknown:
            raise ValueError(
                f"Unknown keys in settings section '{section}': {sorted(unknown)}"
            )
        merged[section].update(values)
    return merged


def load_simulator_config(yaml_config_path: str | Path) -> dict:
    """Load settings from a YAML file on top of the defaults.

    Accepts a path or an open file-like object.
    """
    if hasattr(yaml_config_path, "read"):
        overrides = yaml.safe_load(yaml_config_path)
    else:
        with open(yaml_config_path, "rb") as f:
            overrides = yaml.safe_load(f)

    return merge_simulator_config(get_default_simulator_config(), overrides or {})
