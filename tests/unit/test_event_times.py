"""Tests for event-time marginals and the Gaussian copula."""

import numpy as np
import pytest

from boinet_pkg.contracts import ConfigurationError
from boinet_pkg.models import UniformEventTime, WeibullEventTime, copula_uniforms, make_marginal


class TestWeibullEventTime:

    @pytest.mark.parametrize("prob, alpha1", [(0.3, 0.5), (0.05, 0.7), (0.8, 0.3)])
    def test_calibration(self, prob, alpha1):
        m = WeibullEventTime(prob=prob, tau=30.0, alpha1=alpha1)
        assert float(m.cdf(30.0)) == pytest.approx(prob, rel=1e-9)
        assert float(m.cdf(15.0)) == pytest.approx(alpha1 * prob, rel=1e-9)

    def test_event_times(self):
        m = WeibullEventTime(prob=0.4, tau=30.0, alpha1=0.5)
        u = np.array([0.05, 0.2, 0.4, 0.41, 0.9])
        t = m.event_times(u)
        assert np.all(np.isfinite(t[:3]))
        assert np.all(np.isinf(t[3:]))
        assert np.all(np.diff(t[:3]) > 0)
        assert t[2] == pytest.approx(30.0)
        np.testing.assert_allclose(m.cdf(t[:3]), u[:3])

    def test_zero_probability_never_has_events(self):
        m = WeibullEventTime(prob=0.0, tau=30.0, alpha1=0.5)
        assert np.all(np.isinf(m.event_times(np.array([0.01, 0.5]))))


class TestUniformEventTime:

    def test_event_times(self):
        m = UniformEventTime(prob=0.5, tau=40.0)
        t = m.event_times(np.array([0.1, 0.5, 0.6]))
        np.testing.assert_allclose(t[:2], [8.0, 40.0])
        assert np.isinf(t[2])

    def test_cdf(self):
        m = UniformEventTime(prob=0.5, tau=40.0)
        assert float(m.cdf(20.0)) == pytest.approx(0.25)
        assert float(m.cdf(80.0)) == pytest.approx(0.5)


class TestMakeMarginal:

    def test_kinds(self):
        assert isinstance(make_marginal(0.2, 30.0, 0.5, "weibull"), WeibullEventTime)
        assert isinstance(make_marginal(0.2, 30.0, 0.5, "uniform"), UniformEventTime)

    def test_unknown_kind(self):
        with pytest.raises(ConfigurationError, match="Unknown event time distribution"):
            make_marginal(0.2, 30.0, 0.5, "gamma")

    def test_non_positive_window(self):
        with pytest.raises(ConfigurationError, match="must be positive"):
            make_marginal(0.2, 0.0, 0.5)


class TestCopula:

    def test_shape_and_range(self, rng):
        u = copula_uniforms(500, 0.3, rng)
        assert u.shape == (500, 2)
        assert np.all((u > 0) & (u < 1))

    def test_perfect_correlation(self, rng):
        u = copula_uniforms(50, 1.0, rng)
        np.testing.assert_allclose(u[:, 0], u[:, 1])

    def test_positive_dependence(self, rng):
        u = copula_uniforms(4000, 0.8, rng)
        assert np.corrcoef(u[:, 0], u[:, 1])[0, 1] > 0.6

    def test_invalid_correlation(self, rng):
        with pytest.raises(ConfigurationError):
            copula_uniforms(5, -1.2, rng)
