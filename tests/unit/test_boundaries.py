"""Tests for the boundary calculator."""

import math

import pytest

from boinet_pkg.contracts import ConfigurationError
from boinet_pkg.domain import compute_boundaries, resolve_targets, resolve_utility_thresholds


def _log_likelihood_gap(rate, low, high):
    """Per-patient binomial log-likelihood difference between ``high`` and ``low`` at ``rate``."""
    return rate * math.log(high / low) + (1 - rate) * math.log((1 - high) / (1 - low))


class TestTargets:

    def test_defaults(self):
        t = resolve_targets(0.3, 0.6)
        assert t.phi1 == pytest.approx(0.03)
        assert t.phi2 == pytest.approx(0.42)
        assert t.delta1 == pytest.approx(0.36)

    def test_explicit_values_kept(self):
        t = resolve_targets(0.3, 0.6, phi1=0.2, phi2=0.4, delta1=0.4)
        assert (t.phi1, t.phi2, t.delta1) == (0.2, 0.4, 0.4)


class TestBoundaries:

    def test_default_values(self):
        b = compute_boundaries(resolve_targets(0.3, 0.6))
        assert b.lambda1 == pytest.approx(0.1241, abs=1e-3)
        assert b.lambda2 == pytest.approx(0.3585, abs=1e-3)
        assert b.eta1 == pytest.approx(0.4792, abs=1e-3)

    @pytest.mark.parametrize("phi, delta", [(0.3, 0.6), (0.25, 0.5), (0.4, 0.8), (0.33, 0.7)])
    def test_boundaries_equalise_likelihoods(self, phi, delta):
        t = resolve_targets(phi, delta)
        b = compute_boundaries(t)
        assert _log_likelihood_gap(b.lambda1, t.phi1, t.phi) == pytest.approx(0.0, abs=1e-12)
        assert _log_likelihood_gap(b.lambda2, t.phi, t.phi2) == pytest.approx(0.0, abs=1e-12)
        assert _log_likelihood_gap(b.eta1, t.delta1, t.delta) == pytest.approx(0.0, abs=1e-12)

    @pytest.mark.parametrize("phi, delta", [(0.3, 0.6), (0.1, 0.2), (0.45, 0.9)])
    def test_ordering(self, phi, delta):
        t = resolve_targets(phi, delta)
        b = compute_boundaries(t)
        assert t.phi1 < b.lambda1 < t.phi < b.lambda2 < t.phi2
        assert t.delta1 < b.eta1 < t.delta

    def test_phi1_above_phi(self):
        with pytest.raises(ConfigurationError, match="phi1"):
            compute_boundaries(resolve_targets(0.3, 0.6, phi1=0.35))

    def test_delta1_above_delta(self):
        with pytest.raises(ConfigurationError, match="delta1"):
            compute_boundaries(resolve_targets(0.3, 0.6, delta1=0.6))

    def test_derived_limit_outside_unit_interval(self):
        # phi2 = 1.4 * 0.8 > 1
        with pytest.raises(ConfigurationError, match="strictly between"):
            compute_boundaries(resolve_targets(0.8, 0.6))


class TestUtilityThresholds:

    def test_defaults(self):
        th = resolve_utility_thresholds(resolve_targets(0.3, 0.6))
        assert th.plow_ast == pytest.approx(0.03)
        assert th.pupp_ast == pytest.approx(0.42)
        assert th.qlow_ast == pytest.approx(0.18)
        assert th.qupp_ast == pytest.approx(0.6)

    def test_inverted_thresholds(self):
        with pytest.raises(ConfigurationError, match="qlow.ast"):
            resolve_utility_thresholds(resolve_targets(0.3, 0.6), qlow_ast=0.7)
