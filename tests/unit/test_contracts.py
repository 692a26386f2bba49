"""Tests for shared contracts."""

import math

import numpy as np
import pytest

from boinet_pkg.contracts import (
    BoinetError,
    ConfigurationError,
    Decision,
    Design,
    EndpointScore,
    EstimationError,
    Patient,
    TrialRun,
)
from boinet_pkg.contracts.types import Boundaries, SimulationResult, StopReason


class TestDesign:
    """Test the design family enum."""

    @pytest.mark.parametrize(
        "design, tite, graded",
        [
            (Design.BOINET, False, False),
            (Design.TITE_BOINET, True, False),
            (Design.GBOINET, False, True),
            (Design.TITE_GBOINET, True, True),
        ],
    )
    def test_flags(self, design, tite, graded):
        assert design.is_tite is tite
        assert design.is_graded is graded

    def test_from_string(self):
        assert Design("tite.gboinet") is Design.TITE_GBOINET

    def test_terminal_decisions(self):
        assert Decision.STOP_SAFETY.is_terminal
        assert Decision.STOP_FUTILITY.is_terminal
        assert Decision.STOP_MAX_ENROLLED.is_terminal
        assert not Decision.ELIMINATE.is_terminal
        assert not Decision.STAY.is_terminal


class TestEndpointScore:

    def test_estimate(self):
        assert EndpointScore(score=1.0, n_effective=4.0).estimate == pytest.approx(0.25)

    def test_estimate_without_data(self):
        assert EndpointScore(score=0.0, n_effective=0.0).estimate == 0.0


class TestTrialRun:

    def test_patient_defaults_to_no_event(self):
        p = Patient(enroll_time=0.0, dose=0, tox_grade=0, eff_grade=0)
        assert math.isinf(p.tox_time)
        assert math.isinf(p.eff_time)

    def test_stopped_without_obd(self):
        run = TrialRun(design=Design.BOINET)
        assert run.stopped
        run.obd = 2
        assert not run.stopped
        assert run.total_patients == 0


class TestSimulationResult:

    def _result(self):
        return SimulationResult(
            design=Design.BOINET,
            toxprob=np.array([0.1, 0.2]),
            effprob=np.array([0.3, 0.5]),
            n_ets=np.array([0.1, 0.2]),
            n_ees=np.array([0.3, 0.5]),
            boundaries=Boundaries(lambda1=0.12, lambda2=0.36, eta1=0.48),
            phi=0.3,
            delta=0.6,
            n_patient=np.array([12.0, 18.0]),
            prop_select=np.array([40.0, 50.0]),
            prop_stop=10.0,
            duration=300.0,
            n_sim=10,
        )

    def test_boundary_properties(self):
        result = self._result()
        assert result.lambda1 == 0.12
        assert result.lambda2 == 0.36
        assert result.eta1 == 0.48
        assert result.n_dose == 2

    def test_to_frame(self):
        frame = self._result().to_frame()
        assert list(frame.index) == [1, 2]
        assert frame.loc[2, "prop_select"] == 50.0
        assert "n_tox" not in frame.columns

    def test_as_dict(self):
        data = self._result().as_dict()
        assert data["design"] == "boinet"
        assert data["prop.select"] == [40.0, 50.0]
        assert data["lambda2"] == 0.36


class TestErrors:

    def test_details_default(self):
        err = BoinetError("boom")
        assert err.message == "boom"
        assert err.details == {}

    def test_hierarchy(self):
        assert issubclass(ConfigurationError, BoinetError)
        assert issubclass(EstimationError, BoinetError)
        assert StopReason("safety") is StopReason.SAFETY
