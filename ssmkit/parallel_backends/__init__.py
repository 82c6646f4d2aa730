"""
Chunked execution of simulator kernels.

Example:
    from ssmkit.parallel_backends import CancellationToken

    token = CancellationToken()
    out = ssmkit.sample("ddm", spec, 1_000_000, random_state=1, n_cpus=4, cancel_token=token)
    # from another thread: token.cancel()
"""

from ssmkit.parallel_backends.runner import (
    CancellationToken,
    chunk_bounds,
    get_n_cpus,
    make_seed_sequence,
    run_chunked,
)

__all__ = [
    "CancellationToken",
    "chunk_bounds",
    "get_n_cpus",
    "make_seed_sequence",
    "run_chunked",
]
