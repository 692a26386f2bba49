"""Isotonic and unimodal least-squares regression."""

from __future__ import annotations
from typing import Optional, Sequence

import numpy as np


def pava(y: Sequence[float], w: Optional[Sequence[float]] = None) -> np.ndarray:
    """Weighted non-decreasing isotonic regression (pool adjacent violators).

    Args:
        y: Observations in dose order
        w: Positive weights, defaults to ones

    Returns:
        Fitted non-decreasing values, same length as ``y``
    """
    y = np.asarray(y, dtype=float)
    if y.size == 0:
        return y.copy()
    w = np.ones_like(y) if w is None else np.asarray(w, dtype=float)

    # each block: [weighted mean, total weight, number of points]
    means: list = []
    weights: list = []
    counts: list = []
    for yi, wi in zip(y, w):
        means.append(yi)
        weights.append(wi)
        counts.append(1)
        while len(means) > 1 and means[-2] > means[-1]:
            w_new = weights[-2] + weights[-1]
            m_new = (means[-2] * weights[-2] + means[-1] * weights[-1]) / w_new
            c_new = counts[-2] + counts[-1]
            del means[-1], weights[-1], counts[-1]
            means[-1], weights[-1], counts[-1] = m_new, w_new, c_new

    return np.repeat(means, counts)


def antitonic(y: Sequence[float], w: Optional[Sequence[float]] = None) -> np.ndarray:
    """Weighted non-increasing regression."""
    y = np.asarray(y, dtype=float)
    w_arr = None if w is None else np.asarray(w, dtype=float)[::-1]
    return pava(y[::-1], w_arr)[::-1]


def unimodal_isotonic(y: Sequence[float], w: Optional[Sequence[float]] = None) -> np.ndarray:
    """Least-squares fit that increases up to a mode and decreases after it.

    Every split of the sequence into an increasing prefix and a decreasing
    suffix yields a unimodal fit, and the best unimodal fit is one of them,
    so the split with the smallest weighted squared error is returned. Ties
    favour the earliest split.
    """
    y = np.asarray(y, dtype=float)
    w = np.ones_like(y) if w is None else np.asarray(w, dtype=float)
    if y.size <= 2:
        return y.copy()

    best_fit = None
    best_sse = np.inf
    for split in range(y.size + 1):
        fit = np.concatenate([pava(y[:split], w[:split]), antitonic(y[split:], w[split:])])
        sse = float(np.sum(w * (y - fit) ** 2))
        if sse < best_sse - 1e-12:
            best_fit, best_sse = fit, sse
    return best_fit
