"""Tests for chunked execution, seeding and cancellation."""

import numpy as np
import pytest

import ssmkit
from ssmkit import CancellationToken, Simulator, SimulationCancelledError
from ssmkit.basic_simulators import ddm_models
from ssmkit.parallel_backends import chunk_bounds, get_n_cpus, make_seed_sequence


class TestChunking:
    def test_chunk_bounds(self):
        assert chunk_bounds(10, 4) == [(0, 4), (4, 8), (8, 10)]
        assert chunk_bounds(3, 10) == [(0, 3)]
        with pytest.raises(ValueError):
            chunk_bounds(10, 0)

    def test_get_n_cpus(self):
        assert get_n_cpus(3) == 3
        assert get_n_cpus("all") >= 1
        with pytest.raises(ValueError):
            get_n_cpus(0)

    def test_seed_sequence_from_int_is_stable(self):
        first = make_seed_sequence(5).generate_state(4)
        second = make_seed_sequence(5).generate_state(4)
        np.testing.assert_array_equal(first, second)

    def test_chunked_batch_is_reproducible(self, ddm_spec):
        first = ssmkit.sample("ddm", ddm_spec, 1000, random_state=3, chunk_size=128)
        second = ssmkit.sample("ddm", ddm_spec, 1000, random_state=3, chunk_size=128)
        np.testing.assert_array_equal(first.rts, second.rts)
        assert first.metadata["n_chunks"] == 8


class TestWorkerCount:
    @pytest.mark.slow
    @pytest.mark.parametrize("model", ["ddm", "lba2"])
    def test_output_does_not_depend_on_worker_count(self, model, ddm_spec, lba_spec):
        spec = ddm_spec if model == "ddm" else lba_spec
        sequential = ssmkit.sample(
            model, spec, 2000, random_state=21, chunk_size=500, n_cpus=1
        )
        parallel = ssmkit.sample(
            model, spec, 2000, random_state=21, chunk_size=500, n_cpus=2
        )
        np.testing.assert_array_equal(sequential.rts, parallel.rts)
        np.testing.assert_array_equal(sequential.choices, parallel.choices)


class TestCancellation:
    def test_token(self):
        token = CancellationToken()
        assert not token.cancelled
        token.raise_if_cancelled()
        token.cancel()
        assert token.cancelled
        with pytest.raises(SimulationCancelledError, match="cancelled"):
            token.raise_if_cancelled()

    def test_cancelled_before_start(self, ddm_spec):
        token = CancellationToken()
        token.cancel()
        with pytest.raises(SimulationCancelledError):
            ssmkit.sample("ddm", ddm_spec, 100, random_state=1, cancel_token=token)

    def test_cancel_between_chunks(self):
        token = CancellationToken()
        calls = []

        def cancelling_ddm(spec, n_samples, rng, **kwargs):
            calls.append(n_samples)
            token.cancel()
            return ddm_models.ddm(spec, n_samples, rng, **kwargs)

        sim = Simulator("ddm", simulator_function=cancelling_ddm)
        with pytest.raises(SimulationCancelledError):
            sim.simulate(
                {"v": 1.0, "a": 0.8, "z": 0.5, "t": 0.3},
                n_samples=300,
                random_state=1,
                chunk_size=100,
                cancel_token=token,
            )
        assert calls == [100]

    def test_cancelled_density(self, ddm_spec):
        token = CancellationToken()
        token.cancel()
        with pytest.raises(SimulationCancelledError, match="density"):
            ssmkit.density(
                "ddm",
                ddm_spec,
                (np.array([0.5, 0.6]), np.array([1, -1])),
                cancel_token=token,
            )
