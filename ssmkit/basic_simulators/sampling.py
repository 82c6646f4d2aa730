"""Turn a model configuration and a validated spec into an :class:`Outcomes` batch."""

import logging

import numpy as np

from ssmkit.config.simulator_config import (
    get_default_simulator_config,
    get_nested_config,
)
from ssmkit.outcomes import Outcomes
from ssmkit.parallel_backends.runner import CancellationToken, run_chunked

logger = logging.getLogger(__name__)

SIMULATOR_KEYS = ("delta_t", "max_t", "max_redraws", "smooth_unif")
PIPELINE_KEYS = ("n_cpus", "chunk_size", "progress")


def _resolve_settings(config: dict, settings: dict | None, overrides: dict):
    settings = settings or get_default_simulator_config()
    defaults = get_default_simulator_config()

    sim_kwargs = {
        key: get_nested_config(
            settings, "simulator", key, defaults["simulator"][key]
        )
        for key in SIMULATOR_KEYS
    }
    pipeline = {
        key: get_nested_config(settings, "pipeline", key, defaults["pipeline"][key])
        for key in PIPELINE_KEYS
    }

    for key, value in overrides.items():
        if key in SIMULATOR_KEYS:
            sim_kwargs[key] = value
        elif key in PIPELINE_KEYS:
            pipeline[key] = value
        elif key == "method":
            methods = config.get("methods")
            if not methods:
                raise ValueError(
                    f"Model '{config['name']}' does not offer alternative "
                    "sampling methods"
                )
            if value not in methods:
                raise ValueError(
                    f"Unknown method '{value}' for model '{config['name']}'. "
                    f"Choose one of {list(methods)}"
                )
            sim_kwargs["method"] = value
        else:
            raise TypeError(f"Unexpected simulation setting '{key}'")

    if sim_kwargs["delta_t"] <= 0:
        raise ValueError(f"delta_t must be > 0, got {sim_kwargs['delta_t']}")
    if sim_kwargs["max_t"] <= 0:
        raise ValueError(f"max_t must be > 0, got {sim_kwargs['max_t']}")
    if sim_kwargs["max_redraws"] < 0:
        raise ValueError(
            f"max_redraws must be >= 0, got {sim_kwargs['max_redraws']}"
        )
    return sim_kwargs, pipeline


def _concat_trajectories(parts: list[np.ndarray]) -> np.ndarray:
    n_steps = max(p.shape[1] for p in parts)
    padded = []
    for p in parts:
        if p.shape[1] < n_steps:
            pad = np.full((p.shape[0], n_steps - p.shape[1], p.shape[2]), np.nan)
            p = np.concatenate([p, pad], axis=1)
        padded.append(p)
    return np.concatenate(padded, axis=0)


def simulate_outcomes(
    config: dict,
    spec,
    n_samples: int,
    random_state=None,
    *,
    return_trajectories: bool = False,
    settings: dict | None = None,
    cancel_token: CancellationToken | None = None,
    **overrides,
) -> Outcomes:
    """Draw ``n_samples`` outcomes from the model described by ``config``.

    Parameters
    ----------
    config : dict
        Model configuration.
    spec : NamedTuple
        Parameters already validated against ``config``.
    n_samples : int
        Number of draws (>= 1).
    random_state : int, np.random.Generator, np.random.SeedSequence or None
        Seed material; the same value reproduces the same batch.
    return_trajectories : bool
        Also return evidence paths (diffusion models only). Only running
        paths are kept while simulating, but the returned array is dense:
        ``n_samples * (longest path in steps) * n_particles`` float64 values.
        A batch of 10,000 draws that runs to ``max_t=20`` at
        ``delta_t=0.001`` needs about 1.6 GB, so request paths for small
        batches or lower ``max_t``.
    settings : dict or None
        Nested settings (see ``get_default_simulator_config``).
    cancel_token : CancellationToken or None
        Checked between chunks.
    **overrides
        Individual settings: ``delta_t``, ``max_t``, ``max_redraws``,
        ``smooth_unif``, ``method``, ``n_cpus``, ``chunk_size``, ``progress``.
    """
    if isinstance(n_samples, bool) or not isinstance(n_samples, (int, np.integer)):
        raise TypeError(f"n_samples must be an int, got {type(n_samples).__name__}")
    if n_samples < 1:
        raise ValueError(f"n_samples must be >= 1, got {n_samples}")
    if return_trajectories and not config.get("supports_trajectories", False):
        raise ValueError(
            f"Model '{config['name']}' does not produce trajectories; "
            "only diffusion models do."
        )

    sim_kwargs, pipeline = _resolve_settings(config, settings, overrides)
    sim_kwargs["return_trajectories"] = return_trajectories
    sim_kwargs["model"] = config["name"]

    results = run_chunked(
        config["simulator"],
        spec,
        int(n_samples),
        random_state,
        chunk_size=pipeline["chunk_size"],
        n_cpus=pipeline["n_cpus"],
        cancel_token=cancel_token,
        progress=pipeline["progress"],
        sim_kwargs=sim_kwargs,
    )

    metadata = dict(results[0]["metadata"])
    metadata.update(
        {
            "model": config["name"],
            "params": spec._asdict(),
            "n_samples": int(n_samples),
            "n_truncated": sum(r["metadata"].get("n_truncated", 0) for r in results),
            "n_chunks": len(results),
            "chunk_size": pipeline["chunk_size"],
            "possible_choices": list(config["choices"]),
        }
    )

    trajectories = None
    if return_trajectories:
        trajectories = _concat_trajectories([r["trajectories"] for r in results])

    return Outcomes(
        choices=np.concatenate([r["choices"] for r in results]),
        rts=np.concatenate([r["rts"] for r in results]),
        metadata=metadata,
        trajectories=trajectories,
    )
