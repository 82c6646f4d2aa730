"""Chunked, optionally process-parallel execution of simulator kernels.

A request for ``n`` draws is cut into chunks of ``chunk_size`` draws. Chunk
``c`` gets its own ``numpy.random.Generator`` built from child ``c`` of a
``SeedSequence`` derived from the caller's seed, so the output depends on the
seed, ``n`` and ``chunk_size`` only, never on the number of worker processes.
Chunks run in-process for ``n_cpus=1`` and on a pathos process pool
otherwise; results are always reassembled in chunk order.

Cancellation is cooperative: the :class:`CancellationToken` is checked
before each chunk is started or collected. A cancelled job raises
:class:`~ssmkit.exceptions.SimulationCancelledError` and discards every chunk
it has already computed.
"""

import logging
import threading
from typing import Any, Callable

import numpy as np
import psutil
import tqdm
from pathos.multiprocessing import ProcessingPool as Pool

from ssmkit.exceptions import SimulationCancelledError

logger = logging.getLogger(__name__)


class CancellationToken:
    """Thread-safe flag used to cancel a running simulation or density job."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, what: str = "simulation") -> None:
        if self._event.is_set():
            raise SimulationCancelledError(f"{what} was cancelled")


def make_seed_sequence(
    random_state: int | np.random.Generator | np.random.SeedSequence | None,
) -> np.random.SeedSequence:
    """Turn the accepted forms of randomness into a ``SeedSequence``.

    An integer seeds the sequence directly, a ``Generator`` contributes one
    63-bit draw (advancing its state), ``None`` uses fresh OS entropy.
    """
    if isinstance(random_state, np.random.SeedSequence):
        return random_state
    if isinstance(random_state, np.random.Generator):
        return np.random.SeedSequence(int(random_state.integers(0, 2**63)))
    if random_state is None:
        return np.random.SeedSequence()
    if isinstance(random_state, (int, np.integer)) and not isinstance(
        random_state, bool
    ):
        if random_state < 0:
            raise ValueError(f"random_state must be non-negative, got {random_state}")
        return np.random.SeedSequence(int(random_state))
    raise TypeError(
        "random_state must be None, a non-negative int, a numpy Generator or "
        f"a SeedSequence, got {type(random_state).__name__}"
    )


def chunk_bounds(n: int, chunk_size: int) -> list[tuple[int, int]]:
    """Split ``range(n)`` into consecutive ``(start, stop)`` chunks."""
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
    return [(start, min(start + chunk_size, n)) for start in range(0, n, chunk_size)]


def get_n_cpus(n_cpus: int | str) -> int:
    """Resolve the ``n_cpus`` setting ("all" means all physical cores)."""
    if n_cpus == "all":
        return psutil.cpu_count(logical=False) or 1
    n_cpus = int(n_cpus)
    if n_cpus < 1:
        raise ValueError(f"n_cpus must be >= 1 or 'all', got {n_cpus}")
    return n_cpus


def _run_chunk(task: tuple) -> dict:
    simulator, spec, n_samples, seed_seq, sim_kwargs = task
    rng = np.random.default_rng(seed_seq)
    return simulator(spec, n_samples, rng, **sim_kwargs)


def run_chunked(
    simulator: Callable[..., dict],
    spec: Any,
    n_samples: int,
    random_state=None,
    *,
    chunk_size: int = 10_000,
    n_cpus: int | str = 1,
    cancel_token: CancellationToken | None = None,
    progress: bool = False,
    sim_kwargs: dict | None = None,
) -> list[dict]:
    """Run ``simulator`` over all chunks and return the per-chunk results in order."""
    bounds = chunk_bounds(n_samples, chunk_size)
    children = make_seed_sequence(random_state).spawn(len(bounds))
    tasks = [
        (simulator, spec, stop - start, child, dict(sim_kwargs or {}))
        for (start, stop), child in zip(bounds, children)
    ]
    n_cpus = min(get_n_cpus(n_cpus), len(tasks))
    logger.debug(
        "running %d draws in %d chunk(s) on %d process(es)",
        n_samples,
        len(tasks),
        n_cpus,
    )

    def _check():
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

    results = []
    if n_cpus > 1:
        _check()
        with Pool(processes=n_cpus) as pool:
            try:
                for result in tqdm.tqdm(
                    pool.imap(_run_chunk, tasks),
                    total=len(tasks),
                    disable=not progress,
                ):
                    _check()
                    results.append(result)
            except SimulationCancelledError:
                pool.terminate()
                pool.clear()
                raise
    else:
        for task in tqdm.tqdm(tasks, disable=not progress):
            _check()
            results.append(_run_chunk(task))

    return results
