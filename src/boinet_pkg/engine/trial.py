"""Cohort-by-cohort BOIN-ET trial controller.

One replication moves through these states::

    Enrolling(d) -> Evaluating(d) -> {Escalate, Stay, Deescalate, Eliminate(d)} -> Enrolling(d')
                                  -> {StopSafety, StopFutility, StopMaxEnrolled}

Each cohort's decision uses every earlier cohort's data, so a replication is
strictly sequential. Decisions never raise: every combination of scores maps
to exactly one next state.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np
from scipy.special import betainc

from ..contracts.types import (
    CohortDecision,
    Decision,
    EndpointScore,
    Patient,
    StopReason,
    TrialRun,
)
from ..domain.design import TrialDesign
from ..estimation.selection import ObdSelector
from ..models.accrual import AccrualProcess
from ..models.outcomes import get_outcome_model


def prob_rate_above(score: EndpointScore, threshold: float) -> float:
    """P(rate > threshold) under the Beta(score + 1, n - score + 1) posterior."""
    s, n = score.score, score.n_effective
    return float(1.0 - betainc(s + 1.0, n - s + 1.0, threshold))


def prob_rate_below(score: EndpointScore, threshold: float) -> float:
    """P(rate < threshold) under the Beta(score + 1, n - score + 1) posterior."""
    s, n = score.score, score.n_effective
    return float(betainc(s + 1.0, n - s + 1.0, threshold))


@dataclass
class CohortState:
    """Accumulated data at one dose."""

    patients: List[Patient] = field(default_factory=list)
    eliminated: bool = False
    tox: EndpointScore = field(default_factory=lambda: EndpointScore(0.0, 0.0))
    eff: EndpointScore = field(default_factory=lambda: EndpointScore(0.0, 0.0))

    @property
    def n(self) -> int:
        return len(self.patients)


@dataclass(frozen=True)
class _Step:
    decision: Decision
    next_dose: Optional[int] = None
    eliminated: Tuple[int, ...] = ()
    stop_reason: Optional[StopReason] = None


class TrialStateMachine:
    """Runs single replications of a resolved design."""

    def __init__(self, design: TrialDesign):
        self.design = design
        self.outcomes = get_outcome_model(design)
        self.accrual = AccrualProcess(design.event_time.accrual, design.event_time.gen_enroll_time)
        self.selector = ObdSelector(design.targets.phi, design.selection, design.utility)

    # ------------------------------------------------------------------
    # rule components

    def is_unsafe(self, tox: EndpointScore) -> bool:
        return prob_rate_above(tox, self.design.targets.phi) > self.design.stopping_prob_t

    def is_futile(self, eff: EndpointScore) -> bool:
        return prob_rate_below(eff, self.design.targets.delta1) > self.design.stopping_prob_e

    def _is_open(self, states: Sequence[CohortState], j: int) -> bool:
        return not states[j].eliminated and states[j].n < self.design.stopping_npts

    def _next_admissible(self, states: Sequence[CohortState], start: int, step: int) -> Optional[int]:
        j = start
        while 0 <= j < len(states):
            if not states[j].eliminated:
                return j
            j += step
        return None

    def _next_open(self, states: Sequence[CohortState], start: int, step: int) -> Optional[int]:
        j = start
        while 0 <= j < len(states):
            if self._is_open(states, j):
                return j
            j += step
        return None

    def _refresh(
        self,
        states: Sequence[CohortState],
        j: int,
        at_time: float,
    ) -> Tuple[EndpointScore, EndpointScore]:
        """Re-score dose ``j`` with the data available at ``at_time``."""
        state = states[j]
        state.tox, state.eff = self.outcomes.score(state.patients, at_time)
        return state.tox, state.eff

    def _best_neighbour(
        self,
        dose: int,
        states: Sequence[CohortState],
        at_time: float,
        rng: np.random.Generator,
    ) -> int:
        """Dose among d-1, d, d+1 with the highest efficacy estimate; an untried d+1 wins."""
        candidates = [
            j for j in (dose - 1, dose, dose + 1)
            if 0 <= j < len(states) and not states[j].eliminated
        ]
        if dose + 1 in candidates and states[dose + 1].n == 0:
            return dose + 1

        for j in candidates:
            self._refresh(states, j, at_time)
        effs = np.array([states[j].eff.estimate for j in candidates])
        best = np.flatnonzero(effs == effs.max())
        if best.size == 1:
            return candidates[int(best[0])]
        return candidates[int(rng.choice(best))]

    @staticmethod
    def _move(dose: int, target: int) -> Decision:
        if target > dose:
            return Decision.ESCALATE
        if target < dose:
            return Decision.DEESCALATE
        return Decision.STAY

    # ------------------------------------------------------------------
    # decision rule

    def decide(
        self,
        dose: int,
        tox: EndpointScore,
        eff: EndpointScore,
        states: Sequence[CohortState],
        at_time: float,
        rng: np.random.Generator,
    ) -> _Step:
        """Apply elimination and transition rules for the current dose.

        Safety is checked before futility; a dose failing both is eliminated
        for safety together with every higher dose. A de-escalation required
        at the lowest remaining dose stops the trial for safety.
        """
        b = self.design.boundaries

        if self.is_unsafe(tox):
            eliminated = tuple(j for j in range(dose, len(states)) if not states[j].eliminated)
            for j in eliminated:
                states[j].eliminated = True
            if self._next_admissible(states, dose - 1, -1) is None:
                return _Step(Decision.STOP_SAFETY, eliminated=eliminated, stop_reason=StopReason.SAFETY)
            target = self._next_open(states, dose - 1, -1)
            if target is None:
                return _Step(Decision.STOP_MAX_ENROLLED, eliminated=eliminated)
            return _Step(Decision.ELIMINATE, next_dose=target, eliminated=eliminated)

        if self.is_futile(eff):
            states[dose].eliminated = True
            eliminated = (dose,)
            if all(s.eliminated for s in states):
                return _Step(Decision.STOP_FUTILITY, eliminated=eliminated, stop_reason=StopReason.FUTILITY)
            step = 1 if tox.estimate < b.lambda2 else -1
            target = self._next_open(states, dose + step, step)
            if target is None:
                target = self._next_open(states, dose - step, -step)
            if target is None:
                return _Step(Decision.STOP_MAX_ENROLLED, eliminated=eliminated)
            return _Step(Decision.ELIMINATE, next_dose=target, eliminated=eliminated)

        p, q = tox.estimate, eff.estimate
        if p <= b.lambda1 and q <= b.eta1:
            direction = 1
        elif p < b.lambda2 and q > b.eta1:
            direction = 0
        elif p >= b.lambda2:
            if self._next_admissible(states, dose - 1, -1) is None:
                return _Step(Decision.STOP_SAFETY, stop_reason=StopReason.SAFETY)
            direction = -1
        else:
            direction = int(np.sign(self._best_neighbour(dose, states, at_time, rng) - dose))

        target = dose
        if direction != 0:
            neighbour = self._next_admissible(states, dose + direction, direction)
            if neighbour is not None:
                target = neighbour
            else:
                direction = 0

        if self._is_open(states, target):
            return _Step(self._move(dose, target), next_dose=target)

        # dose closed at stopping.npts: keep moving the same way, else end enrollment
        if direction != 0:
            target = self._next_open(states, target + direction, direction)
            if target is not None:
                return _Step(self._move(dose, target), next_dose=target)
        return _Step(Decision.STOP_MAX_ENROLLED)

    # ------------------------------------------------------------------
    # replication

    def run(self, rng: np.random.Generator) -> TrialRun:
        """Simulate one trial with the given random stream."""
        d = self.design
        states = [CohortState() for _ in range(d.n_dose)]
        run = TrialRun(design=d.design)

        dose = d.start_dose
        first_arrival = 0.0
        decision_time = 0.0
        step = _Step(Decision.STOP_MAX_ENROLLED)

        for cohort in range(d.n_cohort):
            times = self.accrual.cohort_times(first_arrival, d.size_cohort, rng)
            patients = self.outcomes.generate(dose, times, rng)
            states[dose].patients.extend(patients)
            run.patients.extend(patients)

            if self.outcomes.tite:
                decision_time = self.accrual.next_arrival(float(times[-1]), rng)
            else:
                decision_time = float(times[-1]) + d.evaluation_window

            tox, eff = self._refresh(states, dose, decision_time)

            if cohort == d.n_cohort - 1:
                step = _Step(Decision.STOP_MAX_ENROLLED)
            else:
                step = self.decide(dose, tox, eff, states, decision_time, rng)

            run.decisions.append(
                CohortDecision(
                    cohort=cohort,
                    dose=dose,
                    time=decision_time,
                    n_patients=states[dose].n,
                    tox_estimate=tox.estimate,
                    eff_estimate=eff.estimate,
                    decision=step.decision,
                    next_dose=step.next_dose,
                    eliminated=step.eliminated,
                )
            )
            if step.decision.is_terminal:
                break
            dose = step.next_dose
            first_arrival = decision_time

        return self._finish(run, states, step, decision_time)

    def _finish(
        self,
        run: TrialRun,
        states: List[CohortState],
        step: _Step,
        stop_time: float,
    ) -> TrialRun:
        """Final complete-data analysis and OBD selection."""
        d = self.design
        run.n_patient = np.array([s.n for s in states])
        run.n_tox = np.array([sum(p.tox_grade > 0 for p in s.patients) for s in states])
        run.n_eff = np.array([sum(p.eff_grade > 0 for p in s.patients) for s in states])

        if step.stop_reason is not None:
            run.eliminated = np.array([s.eliminated for s in states])
            run.obd = None
            run.stop_reason = step.stop_reason
            run.duration = stop_time
            return run

        final_time = max(p.enroll_time for p in run.patients) + d.evaluation_window
        run.duration = final_time

        tox_obs = np.zeros(d.n_dose)
        eff_obs = np.zeros(d.n_dose)
        for j, s in enumerate(states):
            if s.n == 0:
                continue
            tox, eff = self._refresh(states, j, final_time)
            tox_obs[j], eff_obs[j] = tox.estimate, eff.estimate
            if s.eliminated:
                continue
            if self.is_unsafe(tox):
                for k in range(j, d.n_dose):
                    states[k].eliminated = True
            elif self.is_futile(eff):
                s.eliminated = True

        run.eliminated = np.array([s.eliminated for s in states])
        estimates = self.selector.estimate(run.n_patient, tox_obs, eff_obs, run.eliminated)
        run.obd = self.selector.select(estimates)
        if run.obd is None:
            run.stop_reason = StopReason.NO_ADMISSIBLE_DOSE
        return run
