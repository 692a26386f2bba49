"""Outcome strategies for the four BOIN-ET design variants.

All variants draw the same random numbers per patient, in the same order:
one copula pair for the event indicators and times, then one uniform pair
for the grades. A graded design with two categories and weights (0, 1)
therefore reproduces the binary design draw for draw.
"""

from __future__ import annotations
from typing import Dict, List, Sequence, Tuple, Type

import numpy as np

from ..contracts.outcome import OutcomeModel
from ..contracts.types import Design, EndpointScore, Patient
from ..domain.design import TrialDesign
from ..domain.scenario import Scenario
from .event_times import EventTimeMarginal, copula_uniforms, make_marginal


class _CategoricalOutcomes:
    """Shared generation and scoring; subclasses fix grading and pending-data use."""

    tite: bool = False

    def __init__(self, design: TrialDesign):
        et = design.event_time
        scenario: Scenario = design.scenario
        self.te_corr = et.te_corr
        self.tau_t = et.tau_t
        self.tau_e = et.tau_e
        self.tox_weight = scenario.tox_norm_weight
        self.eff_weight = scenario.eff_norm_weight
        self._tox_marginals: List[EventTimeMarginal] = [
            make_marginal(d.tox_event_prob, et.tau_t, et.alpha_t1, et.gen_event_time)
            for d in scenario.doses
        ]
        self._eff_marginals: List[EventTimeMarginal] = [
            make_marginal(d.eff_event_prob, et.tau_e, et.alpha_e1, et.gen_event_time)
            for d in scenario.doses
        ]
        self._tox_grade_cdf = [self._conditional_cdf(d.tox_probs) for d in scenario.doses]
        self._eff_grade_cdf = [self._conditional_cdf(d.eff_probs) for d in scenario.doses]

    @staticmethod
    def _conditional_cdf(probs: np.ndarray) -> np.ndarray:
        """Cumulative distribution of the grade given an event (categories >= 1)."""
        upper = probs[1:]
        total = upper.sum()
        if total <= 0:
            return np.ones(len(upper))
        cdf = np.cumsum(upper) / total
        cdf[-1] = 1.0
        return cdf

    def _grades(self, has_event: np.ndarray, cdf: np.ndarray, g: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def generate(self, dose: int, enroll_times: Sequence[float], rng: np.random.Generator) -> List[Patient]:
        n = len(enroll_times)
        u = copula_uniforms(n, self.te_corr, rng)
        g = rng.random((n, 2))

        tox_times = self._tox_marginals[dose].event_times(u[:, 0])
        eff_times = self._eff_marginals[dose].event_times(u[:, 1])
        tox_grades = self._grades(np.isfinite(tox_times), self._tox_grade_cdf[dose], g[:, 0])
        eff_grades = self._grades(np.isfinite(eff_times), self._eff_grade_cdf[dose], g[:, 1])

        return [
            Patient(
                enroll_time=float(enroll_times[i]),
                dose=dose,
                tox_grade=int(tox_grades[i]),
                eff_grade=int(eff_grades[i]),
                tox_time=float(tox_times[i]),
                eff_time=float(eff_times[i]),
            )
            for i in range(n)
        ]

    def _endpoint_score(
        self,
        weights: np.ndarray,
        event_times: np.ndarray,
        follow_up: np.ndarray,
        tau: float,
    ) -> EndpointScore:
        if not self.tite:
            return EndpointScore(score=float(weights.sum()), n_effective=float(len(weights)))

        # complete patients keep their grade weight, including a non-zero grade 0
        observed = (event_times <= follow_up) | (follow_up >= tau)
        pending = ~observed
        fraction = np.where(pending, np.clip(follow_up, 0.0, None) / tau, 1.0)
        return EndpointScore(
            score=float(np.sum(np.where(observed, weights, 0.0))),
            n_effective=float(fraction.sum()),
            n_pending=int(pending.sum()),
        )

    def score(self, patients: Sequence[Patient], at_time: float) -> Tuple[EndpointScore, EndpointScore]:
        if not patients:
            empty = EndpointScore(score=0.0, n_effective=0.0)
            return empty, empty

        follow_up = at_time - np.array([p.enroll_time for p in patients])
        tox = self._endpoint_score(
            self.tox_weight[[p.tox_grade for p in patients]],
            np.array([p.tox_time for p in patients]),
            follow_up,
            self.tau_t,
        )
        eff = self._endpoint_score(
            self.eff_weight[[p.eff_grade for p in patients]],
            np.array([p.eff_time for p in patients]),
            follow_up,
            self.tau_e,
        )
        return tox, eff


class BinaryOutcomes(_CategoricalOutcomes):
    """BOIN-ET: binary toxicity and efficacy, fully observed before each decision."""

    def _grades(self, has_event, cdf, g):
        return has_event.astype(int)


class TiteBinaryOutcomes(BinaryOutcomes):
    """TITE-BOIN-ET: binary outcomes scored with pending data."""

    tite = True


class GradedOutcomes(_CategoricalOutcomes):
    """gBOIN-ET: ordinal outcomes converted to normalised equivalent scores."""

    def _grades(self, has_event, cdf, g):
        grade = 1 + np.searchsorted(cdf, g, side="right")
        return np.where(has_event, np.minimum(grade, len(cdf)), 0)


class TiteGradedOutcomes(GradedOutcomes):
    """TITE-gBOIN-ET: ordinal outcomes scored with pending data."""

    tite = True


OUTCOME_MODELS: Dict[Design, Type[_CategoricalOutcomes]] = {
    Design.BOINET: BinaryOutcomes,
    Design.TITE_BOINET: TiteBinaryOutcomes,
    Design.GBOINET: GradedOutcomes,
    Design.TITE_GBOINET: TiteGradedOutcomes,
}


def get_outcome_model(design: TrialDesign) -> OutcomeModel:
    """Instantiate the outcome strategy for the design variant."""
    return OUTCOME_MODELS[design.design](design)
