"""Dose-response estimation and optimal biological dose selection."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import numpy as np
import structlog

from ..config.constants import PSI_NO_TOX_EFF, PSI_TOX_NO_EFF
from ..config.model import SelectionConfig
from ..contracts.errors import EstimationError
from ..domain.boundaries import UtilityThresholds
from .fractional_polynomial import fit_fp_logistic
from .isotonic import pava, unimodal_isotonic

logger = structlog.get_logger()


@dataclass(frozen=True)
class DoseEstimates:
    """Per-dose estimates at the end of a trial; ``nan`` where a dose was never tried."""

    n: np.ndarray
    tox: np.ndarray
    eff: np.ndarray
    eliminated: np.ndarray
    mtd: Optional[int]

    @property
    def tried(self) -> np.ndarray:
        return self.n > 0

    @property
    def admissible(self) -> np.ndarray:
        """Tried, not eliminated, and not above the estimated MTD."""
        ok = self.tried & ~self.eliminated
        if self.mtd is None:
            return np.zeros_like(ok)
        return ok & (np.arange(len(ok)) <= self.mtd)


def estimate_efficacy(
    method: str,
    observed: np.ndarray,
    n: np.ndarray,
) -> np.ndarray:
    """Efficacy estimates for tried doses under ``estpt.method``.

    Falls back to observed rates if the fractional polynomial fit fails.
    """
    tried = np.flatnonzero(n > 0)
    est = np.full(len(n), np.nan)
    if tried.size == 0:
        return est

    y = observed[tried]
    if method == "obs.prob":
        est[tried] = y
    elif method == "multi.iso":
        est[tried] = unimodal_isotonic(y, n[tried])
    elif method == "fp.logistic":
        if tried.size < 2:
            est[tried] = y
            return est
        try:
            fit = fit_fp_logistic(tried + 1, y, n[tried])
        except EstimationError as e:
            logger.warning("fp.logistic fit failed, using observed rates", error=e.message)
            est[tried] = y
        else:
            est[tried] = fit.predict(tried + 1)
    else:
        raise ValueError(f"Unknown estpt.method: {method}")
    return est


def estimate_doses(
    n: np.ndarray,
    tox_observed: np.ndarray,
    eff_observed: np.ndarray,
    eliminated: np.ndarray,
    phi: float,
    estpt_method: str = "obs.prob",
) -> DoseEstimates:
    """Smooth toxicity with PAVA, efficacy per ``estpt_method``, and locate the MTD.

    The MTD is the tried, non-eliminated dose whose isotonic toxicity estimate
    is closest to ``phi``; ties go to the lower dose.
    """
    n = np.asarray(n, dtype=float)
    eliminated = np.asarray(eliminated, dtype=bool)
    tried = np.flatnonzero(n > 0)

    tox = np.full(len(n), np.nan)
    if tried.size:
        tox[tried] = pava(np.asarray(tox_observed, dtype=float)[tried], n[tried])
    eff = estimate_efficacy(estpt_method, np.asarray(eff_observed, dtype=float), n)

    candidates = np.flatnonzero((n > 0) & ~eliminated)
    mtd = None
    if candidates.size:
        mtd = int(candidates[np.argmin(np.abs(tox[candidates] - phi))])

    return DoseEstimates(n=n, tox=tox, eff=eff, eliminated=eliminated, mtd=mtd)


def _truncated_linear(p: np.ndarray, q: np.ndarray, t: UtilityThresholds) -> np.ndarray:
    tox_part = np.clip((t.pupp_ast - p) / (t.pupp_ast - t.plow_ast), 0.0, 1.0)
    eff_part = np.clip((q - t.qlow_ast) / (t.qupp_ast - t.qlow_ast), 0.0, 1.0)
    return tox_part * eff_part


def _scoring(p: np.ndarray, q: np.ndarray, psi00: float, psi11: float) -> np.ndarray:
    return (
        PSI_NO_TOX_EFF * (1 - p) * q
        + psi11 * p * q
        + psi00 * (1 - p) * (1 - q)
        + PSI_TOX_NO_EFF * p * (1 - q)
    )


def utility(
    method: str,
    tox: np.ndarray,
    eff: np.ndarray,
    selection: SelectionConfig,
    thresholds: UtilityThresholds,
) -> np.ndarray:
    """Utility of each dose under ``obd.method``."""
    methods: Dict[str, Callable[[], np.ndarray]] = {
        "max.effprob": lambda: np.asarray(eff, dtype=float),
        "utility.weighted": lambda: selection.w1 * eff - selection.w2 * tox,
        "utility.truncated.linear": lambda: _truncated_linear(tox, eff, thresholds),
        "utility.scoring": lambda: _scoring(tox, eff, selection.psi00, selection.psi11),
    }
    try:
        return methods[method]()
    except KeyError:
        raise ValueError(f"Unknown obd.method: {method}") from None


def select_obd(
    estimates: DoseEstimates,
    method: str,
    selection: SelectionConfig,
    thresholds: UtilityThresholds,
) -> Optional[int]:
    """Admissible dose with the highest utility, lowest dose on ties; None if none admissible."""
    admissible = np.flatnonzero(estimates.admissible)
    if admissible.size == 0:
        return None
    u = utility(method, estimates.tox[admissible], estimates.eff[admissible], selection, thresholds)
    return int(admissible[int(np.argmax(u))])


class ObdSelector:
    """Estimation and selection bound to one design's settings."""

    def __init__(self, phi: float, selection: SelectionConfig, thresholds: UtilityThresholds):
        self.phi = phi
        self.selection = selection
        self.thresholds = thresholds

    def estimate(
        self,
        n: np.ndarray,
        tox_observed: np.ndarray,
        eff_observed: np.ndarray,
        eliminated: np.ndarray,
    ) -> DoseEstimates:
        return estimate_doses(
            n, tox_observed, eff_observed, eliminated, self.phi, self.selection.estpt_method
        )

    def select(self, estimates: DoseEstimates) -> Optional[int]:
        return select_obd(estimates, self.selection.obd_method, self.selection, self.thresholds)
