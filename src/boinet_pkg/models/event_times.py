"""Correlated toxicity/efficacy event times.

A bivariate Gaussian copula with correlation ``te_corr`` couples the two
endpoints. Each endpoint's marginal has total mass ``p`` (the probability of
any event) inside the assessment window ``tau``; patients whose copula
uniform exceeds ``p`` have no event in the window and are censored at ``tau``.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Literal, Union
import math

import numpy as np
from scipy import stats

from ..config.constants import EVENT_PROB_EPS
from ..contracts.errors import ConfigurationError


@dataclass(frozen=True)
class WeibullEventTime:
    """Weibull marginal calibrated by F(tau) = p and F(tau / 2) = alpha1 * p."""

    prob: float
    tau: float
    alpha1: float
    shape: float = field(init=False)
    scale: float = field(init=False)

    def __post_init__(self):
        p = min(max(self.prob, EVENT_PROB_EPS), 1.0 - EVENT_PROB_EPS)
        h_full = -math.log1p(-p)
        h_half = -math.log1p(-self.alpha1 * p)
        shape = math.log(h_full / h_half) / math.log(2.0)
        scale = self.tau / h_full ** (1.0 / shape)
        object.__setattr__(self, "shape", shape)
        object.__setattr__(self, "scale", scale)

    def cdf(self, t: Union[float, np.ndarray]) -> np.ndarray:
        t = np.asarray(t, dtype=float)
        return 1.0 - np.exp(-(np.clip(t, 0.0, None) / self.scale) ** self.shape)

    def event_times(self, u: np.ndarray) -> np.ndarray:
        """Map copula uniforms to event times, ``inf`` for no event in window."""
        u = np.asarray(u, dtype=float)
        event = u <= self.prob
        if not event.any():
            return np.full(u.shape, np.inf)
        q = np.minimum(u, self.prob)
        t = self.scale * (-np.log1p(-q)) ** (1.0 / self.shape)
        return np.where(event, np.minimum(t, self.tau), np.inf)


@dataclass(frozen=True)
class UniformEventTime:
    """Event times uniform over the window given an event."""

    prob: float
    tau: float

    def cdf(self, t: Union[float, np.ndarray]) -> np.ndarray:
        t = np.asarray(t, dtype=float)
        return self.prob * np.clip(t / self.tau, 0.0, 1.0)

    def event_times(self, u: np.ndarray) -> np.ndarray:
        u = np.asarray(u, dtype=float)
        event = u <= self.prob
        if self.prob <= 0:
            return np.full(u.shape, np.inf)
        return np.where(event, self.tau * u / self.prob, np.inf)


EventTimeMarginal = Union[WeibullEventTime, UniformEventTime]


def make_marginal(
    prob: float,
    tau: float,
    alpha1: float,
    kind: Literal["weibull", "uniform"] = "weibull",
) -> EventTimeMarginal:
    """Build the event-time marginal for one endpoint at one dose."""
    if tau <= 0:
        raise ConfigurationError(f"Assessment window must be positive, got {tau}")
    if kind == "weibull":
        return WeibullEventTime(prob=prob, tau=tau, alpha1=alpha1)
    if kind == "uniform":
        return UniformEventTime(prob=prob, tau=tau)
    raise ConfigurationError(f"Unknown event time distribution: {kind}")


def copula_uniforms(n: int, te_corr: float, rng: np.random.Generator) -> np.ndarray:
    """Draw ``n`` uniform pairs from a bivariate Gaussian copula.

    Returns:
        Array of shape (n, 2); column 0 is toxicity, column 1 efficacy
    """
    if not -1.0 <= te_corr <= 1.0:
        raise ConfigurationError(f"te.corr={te_corr} outside [-1, 1]")
    z = rng.standard_normal((n, 2))
    z_eff = te_corr * z[:, 0] + math.sqrt(1.0 - te_corr ** 2) * z[:, 1]
    return stats.norm.cdf(np.column_stack([z[:, 0], z_eff]))
