"""Boundary calculator for the BOIN-ET decision rule.

The boundaries minimise the probability of an incorrect dose-transition
decision when the observed rate is compared against the three point
hypotheses (sub-therapeutic, target, overly toxic) under a beta-binomial
model with equal prior weight on each hypothesis. For each pair of adjacent
hypotheses the optimal cut-off is the rate at which both likelihoods agree.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import math

from ..config.constants import DELTA1_RATIO, PHI1_RATIO, PHI2_RATIO
from ..contracts.errors import ConfigurationError
from ..contracts.types import Boundaries


@dataclass(frozen=True)
class ResolvedTargets:
    """Targets with every derived default filled in."""

    phi: float
    phi1: float
    phi2: float
    delta: float
    delta1: float


@dataclass(frozen=True)
class UtilityThresholds:
    """Thresholds of the truncated linear utility."""

    plow_ast: float
    pupp_ast: float
    qlow_ast: float
    qupp_ast: float


def _optimal_cutoff(low: float, high: float) -> float:
    """Rate where the binomial likelihoods under ``low`` and ``high`` coincide."""
    return math.log((1 - low) / (1 - high)) / math.log(high * (1 - low) / (low * (1 - high)))


def resolve_targets(
    phi: float,
    delta: float,
    phi1: Optional[float] = None,
    phi2: Optional[float] = None,
    delta1: Optional[float] = None,
) -> ResolvedTargets:
    """Fill in phi1=0.1*phi, phi2=1.4*phi and delta1=0.6*delta when unset."""
    return ResolvedTargets(
        phi=phi,
        phi1=PHI1_RATIO * phi if phi1 is None else phi1,
        phi2=PHI2_RATIO * phi if phi2 is None else phi2,
        delta=delta,
        delta1=DELTA1_RATIO * delta if delta1 is None else delta1,
    )


def compute_boundaries(targets: ResolvedTargets) -> Boundaries:
    """Derive (lambda1, lambda2, eta1) from resolved targets.

    Raises:
        ConfigurationError: If phi1 >= phi, phi2 <= phi, delta1 >= delta, or
            a rate falls outside (0, 1)
    """
    rates = {
        "phi": targets.phi,
        "phi1": targets.phi1,
        "phi2": targets.phi2,
        "delta": targets.delta,
        "delta1": targets.delta1,
    }
    outside = {name: v for name, v in rates.items() if not 0.0 < v < 1.0}
    if outside:
        raise ConfigurationError("Target rates must lie strictly between 0 and 1", details=outside)
    if targets.phi1 >= targets.phi:
        raise ConfigurationError(
            f"phi1 ({targets.phi1}) must be below phi ({targets.phi})"
        )
    if targets.phi2 <= targets.phi:
        raise ConfigurationError(
            f"phi2 ({targets.phi2}) must be above phi ({targets.phi})"
        )
    if targets.delta1 >= targets.delta:
        raise ConfigurationError(
            f"delta1 ({targets.delta1}) must be below delta ({targets.delta})"
        )

    return Boundaries(
        lambda1=_optimal_cutoff(targets.phi1, targets.phi),
        lambda2=_optimal_cutoff(targets.phi, targets.phi2),
        eta1=_optimal_cutoff(targets.delta1, targets.delta),
    )


def resolve_utility_thresholds(
    targets: ResolvedTargets,
    plow_ast: Optional[float] = None,
    pupp_ast: Optional[float] = None,
    qlow_ast: Optional[float] = None,
    qupp_ast: Optional[float] = None,
) -> UtilityThresholds:
    """Default thresholds: plow=phi1, pupp=phi2, qlow=delta1/2, qupp=delta."""
    thresholds = UtilityThresholds(
        plow_ast=targets.phi1 if plow_ast is None else plow_ast,
        pupp_ast=targets.phi2 if pupp_ast is None else pupp_ast,
        qlow_ast=targets.delta1 / 2 if qlow_ast is None else qlow_ast,
        qupp_ast=targets.delta if qupp_ast is None else qupp_ast,
    )
    if thresholds.plow_ast >= thresholds.pupp_ast:
        raise ConfigurationError("plow.ast must be below pupp.ast")
    if thresholds.qlow_ast >= thresholds.qupp_ast:
        raise ConfigurationError("qlow.ast must be below qupp.ast")
    return thresholds
