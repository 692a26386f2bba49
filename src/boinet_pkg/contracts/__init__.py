"""Core contracts and interfaces."""

from .errors import (
    BoinetError,
    ConfigurationError,
    EstimationError,
)
from .outcome import OutcomeModel
from .types import (
    Boundaries,
    CohortDecision,
    Decision,
    Design,
    EndpointScore,
    Patient,
    SimulationResult,
    StopReason,
    TrialRun,
)

__all__ = [
    "BoinetError",
    "ConfigurationError",
    "EstimationError",
    "OutcomeModel",
    "Boundaries",
    "CohortDecision",
    "Decision",
    "Design",
    "EndpointScore",
    "Patient",
    "SimulationResult",
    "StopReason",
    "TrialRun",
]
