"""Outcome records produced by the simulators and consumed by the likelihoods."""

from dataclasses import dataclass, field
from typing import Iterator, NamedTuple

import numpy as np
import pandas as pd


class Outcome(NamedTuple):
    """A single simulated or observed trial."""

    choice: int
    rt: float


@dataclass(frozen=True)
class Outcomes:
    """A batch of outcomes in struct-of-arrays layout.

    Entry ``i`` of ``choices`` and ``rts`` is draw ``i``; draws are i.i.d. and
    their order is the simulation draw order.

    Attributes
    ----------
    choices : np.ndarray
        Integer choice labels, shape (n,).
    rts : np.ndarray
        Response times in seconds, shape (n,).
    metadata : dict
        Model name, parameters and simulation settings.
    trajectories : np.ndarray or None
        Evidence paths of shape (n, n_steps, n_particles) when requested,
        NaN after each path terminated.
    """

    choices: np.ndarray
    rts: np.ndarray
    metadata: dict = field(default_factory=dict)
    trajectories: np.ndarray | None = None

    def __post_init__(self):
        object.__setattr__(self, "choices", np.asarray(self.choices))
        object.__setattr__(self, "rts", np.asarray(self.rts, dtype=np.float64))
        if self.choices.shape != self.rts.shape:
            raise ValueError(
                f"choices and rts must have the same shape, got "
                f"{self.choices.shape} and {self.rts.shape}"
            )

    def __len__(self) -> int:
        return self.rts.shape[0]

    def __iter__(self) -> Iterator[Outcome]:
        for choice, rt in zip(self.choices, self.rts):
            yield Outcome(int(choice), float(rt))

    def __getitem__(self, idx: int) -> Outcome:
        return Outcome(int(self.choices[idx]), float(self.rts[idx]))

    def choice_proportions(self) -> dict[int, float]:
        """Proportion of draws ending in each of the model's choices."""
        possible = self.metadata.get("possible_choices")
        if possible is None:
            possible = np.unique(self.choices).tolist()
        n = max(len(self), 1)
        return {int(c): float(np.sum(self.choices == c)) / n for c in possible}

    def to_dataframe(self) -> pd.DataFrame:
        """Return the batch as a DataFrame with ``rt`` and ``response`` columns."""
        return pd.DataFrame({"rt": self.rts, "response": self.choices})
