"""Tests for the outcome records."""

import numpy as np
import pytest

from ssmkit import Outcome, Outcomes


@pytest.fixture
def batch():
    return Outcomes(
        choices=np.array([1, -1, 1, 1], dtype=np.int32),
        rts=np.array([0.5, 0.7, 0.4, 1.1]),
        metadata={"possible_choices": [-1, 1]},
    )


def test_length_and_indexing(batch):
    assert len(batch) == 4
    assert batch[1] == Outcome(choice=-1, rt=0.7)
    assert isinstance(batch[0].choice, int)


def test_iteration(batch):
    assert list(batch)[3] == Outcome(1, 1.1)


def test_choice_proportions(batch):
    assert batch.choice_proportions() == {-1: 0.25, 1: 0.75}


def test_choice_proportions_include_unobserved_choices():
    out = Outcomes(
        choices=np.zeros(3, dtype=np.int32),
        rts=np.ones(3),
        metadata={"possible_choices": [0, 1, 2]},
    )
    assert out.choice_proportions() == {0: 1.0, 1: 0.0, 2: 0.0}


def test_to_dataframe(batch):
    frame = batch.to_dataframe()
    assert list(frame.columns) == ["rt", "response"]
    assert frame["response"].tolist() == [1, -1, 1, 1]


def test_shape_mismatch():
    with pytest.raises(ValueError, match="same shape"):
        Outcomes(choices=np.zeros(3), rts=np.zeros(4))


def test_frozen(batch):
    with pytest.raises(AttributeError):
        batch.rts = np.zeros(4)


def test_plain_sequences_are_converted():
    out = Outcomes(choices=[1, -1], rts=[0.5, 0.7])
    assert isinstance(out.rts, np.ndarray)
    assert out.rts.dtype == np.float64
    assert len(out) == 2
    assert out[1] == Outcome(-1, 0.7)


def test_plain_sequences_shape_mismatch():
    with pytest.raises(ValueError, match="same shape"):
        Outcomes(choices=[1, -1, 1], rts=[0.5, 0.7])
