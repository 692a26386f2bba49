"""Patient arrival process."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Literal

import numpy as np

from ..contracts.errors import ConfigurationError


@dataclass(frozen=True)
class AccrualProcess:
    """Inter-arrival gaps with mean ``mean_gap``.

    ``exponential`` draws Exponential(mean_gap) gaps, ``uniform`` draws
    Uniform(0, 2 * mean_gap) gaps.
    """

    mean_gap: float
    kind: Literal["uniform", "exponential"] = "uniform"

    def __post_init__(self):
        if self.mean_gap <= 0:
            raise ConfigurationError(f"accrual must be positive, got {self.mean_gap}")
        if self.kind not in ("uniform", "exponential"):
            raise ConfigurationError(f"Unknown enrollment time distribution: {self.kind}")

    def gaps(self, n: int, rng: np.random.Generator) -> np.ndarray:
        if self.kind == "exponential":
            return rng.exponential(self.mean_gap, size=n)
        return rng.uniform(0.0, 2.0 * self.mean_gap, size=n)

    def cohort_times(self, first_arrival: float, n: int, rng: np.random.Generator) -> np.ndarray:
        """Arrival times of a cohort whose first patient arrives at ``first_arrival``."""
        offsets = np.concatenate([[0.0], np.cumsum(self.gaps(n - 1, rng))])
        return first_arrival + offsets

    def next_arrival(self, last_arrival: float, rng: np.random.Generator) -> float:
        return float(last_arrival + self.gaps(1, rng)[0])
