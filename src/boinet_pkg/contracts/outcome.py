"""Outcome model protocol definition."""

from typing import Protocol, Sequence, runtime_checkable

import numpy as np

from .types import EndpointScore, Patient


@runtime_checkable
class OutcomeModel(Protocol):
    """Protocol for the per-design outcome strategies.

    Each design variant supplies one implementation. The trial state machine
    only talks to this interface:

    - ``generate`` draws outcomes and event times for a cohort
    - ``score`` summarises the toxicity and efficacy data available at a dose
      at a given trial time
    """

    tite: bool
    """Whether interim scores use pending data."""

    def generate(self, dose: int, enroll_times: Sequence[float], rng: np.random.Generator) -> list[Patient]:
        """Create patients enrolled at ``dose`` at the given times."""
        ...

    def score(self, patients: Sequence[Patient], at_time: float) -> tuple[EndpointScore, EndpointScore]:
        """Return (toxicity, efficacy) scores of ``patients`` observed at ``at_time``."""
        ...
