"""Trial engine: run context and the per-replication state machine."""

from .context import RunContext, replicate_rng
from .trial import CohortState, TrialStateMachine, prob_rate_above, prob_rate_below

__all__ = [
    "RunContext",
    "replicate_rng",
    "CohortState",
    "TrialStateMachine",
    "prob_rate_above",
    "prob_rate_below",
]
