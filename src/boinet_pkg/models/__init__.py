"""Outcome, event-time and accrual models."""

from .accrual import AccrualProcess
from .event_times import UniformEventTime, WeibullEventTime, copula_uniforms, make_marginal
from .outcomes import (
    OUTCOME_MODELS,
    BinaryOutcomes,
    GradedOutcomes,
    TiteBinaryOutcomes,
    TiteGradedOutcomes,
    get_outcome_model,
)

__all__ = [
    "AccrualProcess",
    "UniformEventTime",
    "WeibullEventTime",
    "copula_uniforms",
    "make_marginal",
    "OUTCOME_MODELS",
    "BinaryOutcomes",
    "GradedOutcomes",
    "TiteBinaryOutcomes",
    "TiteGradedOutcomes",
    "get_outcome_model",
]
