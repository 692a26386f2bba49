"""Ground truth dose levels and equivalent scores."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union
import numpy as np

from ..config.constants import PROB_SUM_TOL
from ..contracts.errors import ConfigurationError

BINARY_WEIGHTS = (0.0, 1.0)


@dataclass(frozen=True)
class DoseLevel:
    """True outcome distribution at one dose (zero-based ``index``)."""

    index: int
    tox_probs: np.ndarray
    eff_probs: np.ndarray
    n_ets: float
    n_ees: float

    @property
    def level(self) -> int:
        return self.index + 1

    @property
    def tox_event_prob(self) -> float:
        """Probability of any toxicity above category 0."""
        return float(1.0 - self.tox_probs[0])

    @property
    def eff_event_prob(self) -> float:
        """Probability of any response above category 0."""
        return float(1.0 - self.eff_probs[0])


@dataclass(frozen=True)
class Scenario:
    """Immutable ground truth for one simulation run.

    ``toxprob`` and ``effprob`` have one row per category and one column per
    dose. Binary inputs are stored as two-category matrices with weights
    ``(0, 1)``.
    """

    toxprob: np.ndarray
    effprob: np.ndarray
    sev_weight: np.ndarray
    res_weight: np.ndarray
    doses: Tuple[DoseLevel, ...]

    @property
    def n_dose(self) -> int:
        return len(self.doses)

    @property
    def n_ets(self) -> np.ndarray:
        return np.array([d.n_ets for d in self.doses])

    @property
    def n_ees(self) -> np.ndarray:
        return np.array([d.n_ees for d in self.doses])

    @property
    def tox_norm_weight(self) -> np.ndarray:
        """Severity weights scaled to [0, 1]."""
        return self.sev_weight / self.sev_weight.max()

    @property
    def eff_norm_weight(self) -> np.ndarray:
        """Response weights scaled to [0, 1]."""
        return self.res_weight / self.res_weight.max()


def normalized_equivalent_score(probs: np.ndarray, weights: np.ndarray) -> np.ndarray:
    """Expected weight per dose divided by the maximum attainable weight.

    Args:
        probs: Category probabilities, one row per category, one column per dose
        weights: Category weights

    Returns:
        Normalised equivalent score per dose, on the [0, 1] scale
    """
    probs = np.atleast_2d(np.asarray(probs, dtype=float))
    weights = np.asarray(weights, dtype=float)
    return weights @ probs / weights.max()


def _as_category_matrix(
    values: Union[Sequence[float], Sequence[Sequence[float]]],
    graded: bool,
    n_dose: int,
    endpoint: str,
) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    if not np.all(np.isfinite(arr)):
        raise ConfigurationError(f"{endpoint} probabilities must be finite")

    if graded:
        if arr.ndim != 2:
            raise ConfigurationError(
                f"{endpoint} must be a category-by-dose matrix for graded designs",
                details={"shape": arr.shape},
            )
        matrix = arr
    else:
        if arr.ndim != 1:
            raise ConfigurationError(
                f"{endpoint} must be a vector of per-dose probabilities for binary designs",
                details={"shape": arr.shape},
            )
        if np.any(arr < 0) or np.any(arr > 1):
            raise ConfigurationError(f"{endpoint} probabilities must lie in [0, 1]")
        matrix = np.vstack([1.0 - arr, arr])

    if matrix.shape[1] != n_dose:
        raise ConfigurationError(
            f"{endpoint} has {matrix.shape[1]} doses, expected n.dose={n_dose}"
        )
    if matrix.shape[0] < 2:
        raise ConfigurationError(f"{endpoint} needs at least two outcome categories")
    if np.any(matrix < 0):
        raise ConfigurationError(f"{endpoint} probabilities must be non-negative")

    sums = matrix.sum(axis=0)
    bad = np.flatnonzero(np.abs(sums - 1.0) > PROB_SUM_TOL)
    if bad.size:
        raise ConfigurationError(
            f"{endpoint} category probabilities must sum to 1 at every dose",
            details={"doses": (bad + 1).tolist(), "sums": sums[bad].tolist()},
        )
    return matrix


def _as_weight_vector(weights: Optional[Sequence[float]], n_categories: int, endpoint: str) -> np.ndarray:
    if weights is None:
        if n_categories != 2:
            raise ConfigurationError(f"{endpoint} weights are required for {n_categories} categories")
        return np.array(BINARY_WEIGHTS)

    w = np.asarray(weights, dtype=float)
    if w.ndim != 1 or len(w) != n_categories:
        raise ConfigurationError(
            f"{endpoint} weight vector length {w.size} does not match {n_categories} categories"
        )
    if np.any(w < 0):
        raise ConfigurationError(f"{endpoint} weights must be non-negative")
    if np.any(np.diff(w) < 0):
        raise ConfigurationError(f"{endpoint} weights must be non-decreasing")
    if w.max() <= 0:
        raise ConfigurationError(f"{endpoint} weights need a positive maximum")
    return w


def build_scenario(
    toxprob: Union[Sequence[float], Sequence[Sequence[float]]],
    effprob: Union[Sequence[float], Sequence[Sequence[float]]],
    n_dose: int,
    graded: bool = False,
    sev_weight: Optional[Sequence[float]] = None,
    res_weight: Optional[Sequence[float]] = None,
) -> Scenario:
    """Validate ground truth inputs and derive the true nETS/nEES.

    Raises:
        ConfigurationError: On malformed probabilities or weights
    """
    tox = _as_category_matrix(toxprob, graded, n_dose, "toxprob")
    eff = _as_category_matrix(effprob, graded, n_dose, "effprob")

    if graded:
        sev = _as_weight_vector(sev_weight, tox.shape[0], "sev.weight")
        res = _as_weight_vector(res_weight, eff.shape[0], "res.weight")
    else:
        sev = np.array(BINARY_WEIGHTS)
        res = np.array(BINARY_WEIGHTS)

    n_ets = normalized_equivalent_score(tox, sev)
    n_ees = normalized_equivalent_score(eff, res)

    doses = tuple(
        DoseLevel(
            index=j,
            tox_probs=tox[:, j].copy(),
            eff_probs=eff[:, j].copy(),
            n_ets=float(n_ets[j]),
            n_ees=float(n_ees[j]),
        )
        for j in range(n_dose)
    )
    return Scenario(toxprob=tox, effprob=eff, sev_weight=sev, res_weight=res, doses=doses)
