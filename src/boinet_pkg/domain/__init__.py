"""Domain objects: ground truth scenario, boundaries and resolved design."""

from .boundaries import (
    ResolvedTargets,
    UtilityThresholds,
    compute_boundaries,
    resolve_targets,
    resolve_utility_thresholds,
)
from .scenario import DoseLevel, Scenario, build_scenario, normalized_equivalent_score
from .design import TrialDesign, resolve_design

__all__ = [
    "ResolvedTargets",
    "UtilityThresholds",
    "compute_boundaries",
    "resolve_targets",
    "resolve_utility_thresholds",
    "DoseLevel",
    "Scenario",
    "build_scenario",
    "normalized_equivalent_score",
    "TrialDesign",
    "resolve_design",
]
