"""First-degree fractional polynomial logistic regression.

Efficacy is modelled as ``logit(q) = b0 + b1 * x^p`` with ``x`` the dose
level and ``p`` from the conventional FP power set (``p = 0`` means
``log(x)``). The power with the smallest binomial deviance is kept.
Graded designs pass normalised scores, so the fit is quasi-binomial.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence
import warnings

import numpy as np
import statsmodels.api as sm
from statsmodels.tools.sm_exceptions import (
    ConvergenceWarning,
    PerfectSeparationError,
    PerfectSeparationWarning,
)

from ..config.constants import FP_POWERS
from ..contracts.errors import EstimationError


def fp_transform(x: np.ndarray, power: float) -> np.ndarray:
    x = np.asarray(x, dtype=float)
    if power == 0:
        return np.log(x)
    return x ** power


@dataclass(frozen=True)
class FPFit:
    """Selected fractional polynomial and its coefficients."""

    power: float
    params: np.ndarray
    deviance: float

    def predict(self, x: Sequence[float]) -> np.ndarray:
        eta = self.params[0] + self.params[1] * fp_transform(np.asarray(x, dtype=float), self.power)
        return 1.0 / (1.0 + np.exp(-eta))


def fit_fp_logistic(
    dose_level: Sequence[float],
    rate: Sequence[float],
    n: Sequence[float],
    powers: Sequence[float] = FP_POWERS,
) -> FPFit:
    """Fit the best FP1 logistic curve to per-dose rates.

    Args:
        dose_level: Positive dose levels with data
        rate: Observed rate or normalised score per dose
        n: Number of patients per dose (binomial denominators)

    Raises:
        EstimationError: With fewer than two doses or when no power converges
    """
    x = np.asarray(dose_level, dtype=float)
    y = np.clip(np.asarray(rate, dtype=float), 0.0, 1.0)
    n_arr = np.asarray(n, dtype=float)
    if x.size < 2:
        raise EstimationError("fp.logistic needs at least two doses with data")
    if np.any(x <= 0):
        raise EstimationError("fp.logistic needs positive dose levels")

    best = None
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", PerfectSeparationWarning)
        warnings.simplefilter("ignore", ConvergenceWarning)
        warnings.simplefilter("ignore", RuntimeWarning)
        for power in powers:
            design = sm.add_constant(fp_transform(x, power), has_constant="add")
            try:
                res = sm.GLM(y, design, family=sm.families.Binomial(), var_weights=n_arr).fit()
            except (PerfectSeparationError, np.linalg.LinAlgError, ValueError):
                continue
            params = np.asarray(res.params, dtype=float)
            if not np.all(np.isfinite(params)) or not np.isfinite(res.deviance):
                continue
            if best is None or res.deviance < best.deviance - 1e-10:
                best = FPFit(power=float(power), params=params, deviance=float(res.deviance))

    if best is None:
        raise EstimationError("fp.logistic failed for every power", details={"powers": list(powers)})
    return best
