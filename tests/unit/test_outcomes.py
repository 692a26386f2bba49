"""Tests for the per-design outcome strategies."""

import math

import numpy as np
import pytest

from boinet_pkg.config import TrialConfig, build_config
from boinet_pkg.contracts import Design, OutcomeModel, Patient
from boinet_pkg.domain import resolve_design
from boinet_pkg.models import (
    BinaryOutcomes,
    GradedOutcomes,
    TiteBinaryOutcomes,
    TiteGradedOutcomes,
    get_outcome_model,
)

INF = math.inf


def _design(design="boinet", **sections):
    return resolve_design(build_config({"design": design, **sections}))


class TestModelSelection:

    @pytest.mark.parametrize(
        "design, cls",
        [
            ("boinet", BinaryOutcomes),
            ("tite.boinet", TiteBinaryOutcomes),
        ],
    )
    def test_binary_variants(self, design, cls):
        model = get_outcome_model(_design(design))
        assert type(model) is cls
        assert isinstance(model, OutcomeModel)
        assert model.tite is Design(design).is_tite

    def test_graded_variants(self, cart_config):
        model = get_outcome_model(resolve_design(cart_config))
        assert type(model) is TiteGradedOutcomes
        gmodel = get_outcome_model(resolve_design(cart_config.model_copy(update={"design": Design.GBOINET})))
        assert type(gmodel) is GradedOutcomes
        assert not gmodel.tite


class TestGenerate:

    def test_binary_patients(self, rng):
        model = get_outcome_model(_design())
        patients = model.generate(2, [0.0, 4.0, 9.0], rng)

        assert [p.enroll_time for p in patients] == [0.0, 4.0, 9.0]
        assert all(p.dose == 2 for p in patients)
        for p in patients:
            assert p.tox_grade == int(math.isfinite(p.tox_time))
            assert p.eff_grade == int(math.isfinite(p.eff_time))
            assert p.tox_time <= 30.0 or math.isinf(p.tox_time)
            assert p.eff_time <= 45.0 or math.isinf(p.eff_time)

    def test_event_rate_matches_truth(self):
        model = get_outcome_model(_design())
        patients = model.generate(4, np.zeros(4000), np.random.default_rng(3))
        tox_rate = np.mean([p.tox_grade for p in patients])
        eff_rate = np.mean([p.eff_grade for p in patients])
        assert tox_rate == pytest.approx(0.30, abs=0.03)
        assert eff_rate == pytest.approx(0.50, abs=0.03)

    def test_graded_category_frequencies(self, cart_config):
        model = get_outcome_model(resolve_design(cart_config))
        patients = model.generate(3, np.zeros(6000), np.random.default_rng(5))
        freq = np.bincount([p.tox_grade for p in patients], minlength=4) / len(patients)
        np.testing.assert_allclose(freq, [0.52, 0.18, 0.15, 0.15], atol=0.025)
        assert all((p.eff_grade > 0) == math.isfinite(p.eff_time) for p in patients)

    def test_two_category_graded_matches_binary(self):
        tox = [0.05, 0.1, 0.2]
        eff = [0.2, 0.35, 0.5]
        geometry = {"n_dose": 3}
        binary = get_outcome_model(_design(
            "boinet", geometry=geometry, scenario={"toxprob": tox, "effprob": eff},
        ))
        graded = get_outcome_model(_design(
            "gboinet",
            geometry=geometry,
            scenario={
                "toxprob": [[1 - p for p in tox], tox],
                "effprob": [[1 - q for q in eff], eff],
                "sev_weight": [0, 1],
                "res_weight": [0, 1],
            },
        ))
        times = np.arange(12) * 2.0
        assert binary.generate(1, times, np.random.default_rng(9)) == graded.generate(
            1, times, np.random.default_rng(9)
        )


class TestScore:

    def test_complete_data(self):
        model = get_outcome_model(_design())
        patients = [
            Patient(0.0, 0, 1, 0, tox_time=5.0),
            Patient(1.0, 0, 0, 1, eff_time=40.0),
            Patient(2.0, 0, 0, 0),
        ]
        tox, eff = model.score(patients, at_time=3.0)
        assert (tox.score, tox.n_effective, tox.n_pending) == (1.0, 3.0, 0)
        assert (eff.score, eff.n_effective) == (1.0, 3.0)

    def test_pending_data(self):
        model = get_outcome_model(_design("tite.boinet"))
        patients = [
            Patient(0.0, 0, 1, 0, tox_time=10.0),
            Patient(0.0, 0, 0, 0),
            Patient(20.0, 0, 1, 0, tox_time=15.0),
            Patient(25.0, 0, 0, 0),
        ]
        tox, eff = model.score(patients, at_time=30.0)

        # matured event, complete non-event, then two pending patients at 10/30 and 5/30
        assert tox.score == pytest.approx(1.0)
        assert tox.n_effective == pytest.approx(2.5)
        assert tox.n_pending == 2
        assert tox.estimate == pytest.approx(0.4)

        assert eff.score == 0.0
        assert eff.n_effective == pytest.approx(75.0 / 45.0)
        assert eff.n_pending == 4

    def test_pending_matured_efficacy(self):
        model = get_outcome_model(_design("tite.boinet"))
        patients = [Patient(0.0, 0, 0, 1, eff_time=12.0), Patient(10.0, 0, 0, 1, eff_time=12.0)]
        _, eff = model.score(patients, at_time=15.0)
        # the first response has matured, the second is still pending at 5/45
        assert eff.score == pytest.approx(1.0)
        assert eff.n_effective == pytest.approx(1.0 + 5.0 / 45.0)

    def test_graded_weights(self, cart_config):
        model = get_outcome_model(resolve_design(cart_config.model_copy(update={"design": Design.GBOINET})))
        patients = [Patient(0.0, 0, 3, 2, tox_time=1.0, eff_time=1.0), Patient(0.0, 0, 1, 3, tox_time=1.0, eff_time=1.0)]
        tox, eff = model.score(patients, at_time=500.0)
        assert tox.score == pytest.approx(1.0 + 1 / 3)
        assert eff.score == pytest.approx(1 / 3 + 1.0)

    def test_empty(self):
        tox, eff = get_outcome_model(_design()).score([], at_time=10.0)
        assert tox.n_effective == 0.0
        assert eff.estimate == 0.0

    @pytest.mark.parametrize("design", ["gboinet", "tite.gboinet"])
    def test_nonzero_lowest_weight_after_full_follow_up(self, design):
        model = get_outcome_model(_design(
            design,
            geometry={"n_dose": 1},
            scenario={
                "toxprob": [[0.7], [0.3]],
                "effprob": [[0.5], [0.5]],
                "sev_weight": [0.5, 1.0],
                "res_weight": [0.0, 1.0],
            },
        ))
        patients = [Patient(float(i), 0, 0, 0) for i in range(3)]
        tox, _ = model.score(patients, at_time=100.0)
        assert tox.estimate == pytest.approx(0.5)
        assert tox.n_pending == 0

    def test_nonzero_lowest_weight_pending_scores_zero(self):
        model = get_outcome_model(_design(
            "tite.gboinet",
            geometry={"n_dose": 1},
            scenario={
                "toxprob": [[0.7], [0.3]],
                "effprob": [[0.5], [0.5]],
                "sev_weight": [0.5, 1.0],
                "res_weight": [0.0, 1.0],
            },
        ))
        # one complete grade-0 patient, one pending at 15/30
        patients = [Patient(0.0, 0, 0, 0), Patient(25.0, 0, 0, 0)]
        tox, _ = model.score(patients, at_time=40.0)
        assert tox.score == pytest.approx(0.5)
        assert tox.n_effective == pytest.approx(1.5)
