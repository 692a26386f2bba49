"""Resolved, immutable trial design consumed by the simulation engine."""

from __future__ import annotations
from dataclasses import dataclass

from ..config.model import EventTimeConfig, SelectionConfig, TrialConfig
from ..contracts.errors import ConfigurationError
from ..contracts.types import Boundaries, Design
from .boundaries import (
    ResolvedTargets,
    UtilityThresholds,
    compute_boundaries,
    resolve_targets,
    resolve_utility_thresholds,
)
from .scenario import Scenario, build_scenario


@dataclass(frozen=True)
class TrialDesign:
    """Everything a replication needs, with defaults resolved.

    ``start_dose`` is zero-based.
    """

    design: Design
    n_dose: int
    start_dose: int
    size_cohort: int
    n_cohort: int
    scenario: Scenario
    targets: ResolvedTargets
    boundaries: Boundaries
    event_time: EventTimeConfig
    stopping_npts: int
    stopping_prob_t: float
    stopping_prob_e: float
    selection: SelectionConfig
    utility: UtilityThresholds

    @property
    def max_patients(self) -> int:
        return self.size_cohort * self.n_cohort

    @property
    def evaluation_window(self) -> float:
        """Time needed to complete both assessment windows."""
        return max(self.event_time.tau_t, self.event_time.tau_e)


def resolve_design(config: TrialConfig) -> TrialDesign:
    """Turn a validated configuration into a ``TrialDesign``.

    Raises:
        ConfigurationError: If the configuration is internally inconsistent
    """
    geometry = config.geometry
    if not 1 <= geometry.start_dose <= geometry.n_dose:
        raise ConfigurationError(
            f"start.dose={geometry.start_dose} outside [1, {geometry.n_dose}]"
        )

    et = config.event_time
    if et.tau_t <= 0 or et.tau_e <= 0:
        raise ConfigurationError("Assessment windows tau.T and tau.E must be positive")
    if et.accrual <= 0:
        raise ConfigurationError("accrual must be positive")
    if not -1.0 <= et.te_corr <= 1.0:
        raise ConfigurationError(f"te.corr={et.te_corr} outside [-1, 1]")

    scenario = build_scenario(
        config.scenario.toxprob,
        config.scenario.effprob,
        n_dose=geometry.n_dose,
        graded=config.design.is_graded,
        sev_weight=config.scenario.sev_weight,
        res_weight=config.scenario.res_weight,
    )

    t = config.targets
    targets = resolve_targets(t.phi, t.delta, phi1=t.phi1, phi2=t.phi2, delta1=t.delta1)
    boundaries = compute_boundaries(targets)

    sel = config.selection
    utility = resolve_utility_thresholds(
        targets,
        plow_ast=sel.plow_ast,
        pupp_ast=sel.pupp_ast,
        qlow_ast=sel.qlow_ast,
        qupp_ast=sel.qupp_ast,
    )

    npts = config.stopping.npts
    if npts is None:
        npts = geometry.max_patients
    if npts <= 0:
        raise ConfigurationError("stopping.npts must be positive")

    return TrialDesign(
        design=config.design,
        n_dose=geometry.n_dose,
        start_dose=geometry.start_dose - 1,
        size_cohort=geometry.size_cohort,
        n_cohort=geometry.n_cohort,
        scenario=scenario,
        targets=targets,
        boundaries=boundaries,
        event_time=et,
        stopping_npts=npts,
        stopping_prob_t=config.stopping.prob_t,
        stopping_prob_e=config.stopping.prob_e,
        selection=sel,
        utility=utility,
    )
