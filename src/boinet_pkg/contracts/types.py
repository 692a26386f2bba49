"""Type definitions shared across the simulation engine."""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple
import math

import numpy as np
import pandas as pd


class Design(str, Enum):
    """The four members of the BOIN-ET design family."""

    BOINET = "boinet"
    TITE_BOINET = "tite.boinet"
    GBOINET = "gboinet"
    TITE_GBOINET = "tite.gboinet"

    @property
    def is_tite(self) -> bool:
        """True when interim decisions use pending (partially followed) data."""
        return self in (Design.TITE_BOINET, Design.TITE_GBOINET)

    @property
    def is_graded(self) -> bool:
        """True when outcomes are ordinal categories with severity weights."""
        return self in (Design.GBOINET, Design.TITE_GBOINET)


class Decision(str, Enum):
    """Outcome of one cohort evaluation."""

    ESCALATE = "escalate"
    STAY = "stay"
    DEESCALATE = "de-escalate"
    ELIMINATE = "eliminate-current-dose"
    STOP_SAFETY = "stop-safety"
    STOP_FUTILITY = "stop-futility"
    STOP_MAX_ENROLLED = "stop-max-enrolled"

    @property
    def is_terminal(self) -> bool:
        return self in (Decision.STOP_SAFETY, Decision.STOP_FUTILITY, Decision.STOP_MAX_ENROLLED)


class StopReason(str, Enum):
    """Why a replication ended without an OBD."""

    SAFETY = "safety"
    FUTILITY = "futility"
    NO_ADMISSIBLE_DOSE = "no_admissible_dose"


@dataclass(frozen=True)
class Boundaries:
    """Decision thresholds of the BOIN-ET rule."""

    lambda1: float
    """Toxicity escalation boundary"""

    lambda2: float
    """Toxicity de-escalation boundary"""

    eta1: float
    """Efficacy boundary"""


@dataclass(frozen=True)
class Patient:
    """One enrolled patient. Event times are ``inf`` when no event occurs in the window."""

    enroll_time: float
    dose: int
    tox_grade: int
    eff_grade: int
    tox_time: float = math.inf
    eff_time: float = math.inf


@dataclass(frozen=True)
class EndpointScore:
    """Running score of one endpoint at one dose."""

    score: float
    """Sum of normalised weights of matured events"""

    n_effective: float
    """Sum of follow-up fractions (1 for complete patients)"""

    n_pending: int = 0

    @property
    def estimate(self) -> float:
        if self.n_effective <= 0:
            return 0.0
        return self.score / self.n_effective


@dataclass(frozen=True)
class CohortDecision:
    """Record of one pass through the decision rule."""

    cohort: int
    dose: int
    time: float
    n_patients: int
    tox_estimate: float
    eff_estimate: float
    decision: Decision
    next_dose: Optional[int] = None
    eliminated: Tuple[int, ...] = ()


@dataclass
class TrialRun:
    """Complete history and terminal state of a single replication.

    Dose indices are zero-based throughout the engine.
    """

    design: Design
    decisions: List[CohortDecision] = field(default_factory=list)
    patients: List[Patient] = field(default_factory=list)
    n_patient: Optional[np.ndarray] = None
    n_tox: Optional[np.ndarray] = None
    n_eff: Optional[np.ndarray] = None
    eliminated: Optional[np.ndarray] = None
    obd: Optional[int] = None
    stop_reason: Optional[StopReason] = None
    duration: float = 0.0

    @property
    def stopped(self) -> bool:
        """True when the replication ended without selecting an OBD."""
        return self.obd is None

    @property
    def total_patients(self) -> int:
        return len(self.patients)


@dataclass(frozen=True)
class SimulationResult:
    """Operating characteristics aggregated over all replications."""

    design: Design
    toxprob: np.ndarray
    effprob: np.ndarray
    n_ets: np.ndarray
    n_ees: np.ndarray
    boundaries: Boundaries
    phi: float
    delta: float
    n_patient: np.ndarray
    prop_select: np.ndarray
    prop_stop: float
    duration: float
    n_sim: int
    tau_t: Optional[float] = None
    tau_e: Optional[float] = None
    accrual: Optional[float] = None
    n_tox: Optional[np.ndarray] = None
    n_eff: Optional[np.ndarray] = None
    prop_stop_reasons: Mapping[str, float] = field(default_factory=dict)
    settings: Mapping[str, Any] = field(default_factory=dict)

    @property
    def lambda1(self) -> float:
        return self.boundaries.lambda1

    @property
    def lambda2(self) -> float:
        return self.boundaries.lambda2

    @property
    def eta1(self) -> float:
        return self.boundaries.eta1

    @property
    def n_dose(self) -> int:
        return len(self.prop_select)

    def to_frame(self) -> pd.DataFrame:
        """Per-dose operating characteristics table."""
        index = pd.Index(np.arange(1, self.n_dose + 1), name="dose")
        data: Dict[str, Any] = {
            "n_ets": self.n_ets,
            "n_ees": self.n_ees,
            "n_patient": self.n_patient,
            "prop_select": self.prop_select,
        }
        if self.n_tox is not None:
            data["n_tox"] = self.n_tox
        if self.n_eff is not None:
            data["n_eff"] = self.n_eff
        return pd.DataFrame(data, index=index)

    def as_dict(self) -> Dict[str, Any]:
        """Plain-Python view suitable for JSON export."""
        return {
            "design": self.design.value,
            "toxprob": np.asarray(self.toxprob).tolist(),
            "effprob": np.asarray(self.effprob).tolist(),
            "nETS": self.n_ets.tolist(),
            "nEES": self.n_ees.tolist(),
            "phi": self.phi,
            "delta": self.delta,
            "lambda1": self.lambda1,
            "lambda2": self.lambda2,
            "eta1": self.eta1,
            "tau.T": self.tau_t,
            "tau.E": self.tau_e,
            "accrual": self.accrual,
            "n.patient": self.n_patient.tolist(),
            "prop.select": self.prop_select.tolist(),
            "prop.stop": self.prop_stop,
            "prop.stop.reasons": dict(self.prop_stop_reasons),
            "duration": self.duration,
            "n.sim": self.n_sim,
        }
