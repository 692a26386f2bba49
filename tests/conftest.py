"""Pytest configuration and fixtures."""

import sys
import tempfile
from pathlib import Path
from typing import Dict, Any

SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

import numpy as np
import pytest

from boinet_pkg.config import TrialConfig, build_config
from boinet_pkg.domain import resolve_design


@pytest.fixture
def temp_dir():
    """Temporary directory for test artifacts."""
    with tempfile.TemporaryDirectory() as tmp:
        yield Path(tmp)


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(2024)


@pytest.fixture
def sample_config() -> TrialConfig:
    """Default binary configuration."""
    return TrialConfig()


@pytest.fixture
def sample_design(sample_config):
    """Resolved default design: phi=0.3, delta=0.6, five doses."""
    return resolve_design(sample_config)


@pytest.fixture
def small_config_dict() -> Dict[str, Any]:
    """Binary scenario with few replications for end-to-end runs."""
    return {
        "design": "boinet",
        "geometry": {"n_dose": 5, "start_dose": 1, "size_cohort": 3, "n_cohort": 10},
        "scenario": {
            "toxprob": [0.02, 0.06, 0.12, 0.20, 0.30],
            "effprob": [0.12, 0.20, 0.30, 0.40, 0.50],
        },
        "targets": {"phi": 0.3, "delta": 0.6},
        "event_time": {"tau_t": 30.0, "tau_e": 45.0, "accrual": 10.0, "te_corr": 0.2},
        "run": {"n_sim": 30, "seed_sim": 100},
    }


@pytest.fixture
def cart_config_dict() -> Dict[str, Any]:
    """Graded CAR-T style scenario with four toxicity and four efficacy categories."""
    return {
        "design": "tite.gboinet",
        "geometry": {"n.dose": 4, "start.dose": 1, "size.cohort": 6, "n.cohort": 8},
        "scenario": {
            "toxprob": [
                [0.83, 0.77, 0.62, 0.52],
                [0.10, 0.10, 0.15, 0.18],
                [0.05, 0.08, 0.13, 0.15],
                [0.02, 0.05, 0.10, 0.15],
            ],
            "effprob": [
                [0.60, 0.40, 0.20, 0.20],
                [0.20, 0.25, 0.30, 0.30],
                [0.15, 0.25, 0.30, 0.30],
                [0.05, 0.10, 0.20, 0.20],
            ],
            "sev.weight": [0.0, 0.5, 1.0, 1.5],
            "res.weight": [0.0, 0.25, 1.0, 3.0],
        },
        "targets": {"phi": 0.40, "delta": 0.80},
        "event_time": {
            "tau.T": 84.0,
            "tau.E": 168.0,
            "te.corr": 0.4,
            "accrual": 14.0,
            "gen.event.time": "weibull",
            "gen.enroll.time": "uniform",
        },
        "selection": {"estpt.method": "obs.prob", "obd.method": "utility.weighted"},
        "run": {"n.sim": 40, "seed.sim": 100},
    }


@pytest.fixture
def cart_config(cart_config_dict) -> TrialConfig:
    return build_config(cart_config_dict)


@pytest.fixture
def sample_toml_config(temp_dir: Path) -> Path:
    """Sample TOML configuration file."""
    config_content = """
design = "tite.boinet"

[geometry]
n_dose = 5
start_dose = 1
size_cohort = 3
n_cohort = 8

[scenario]
toxprob = [0.02, 0.06, 0.12, 0.20, 0.30]
effprob = [0.12, 0.20, 0.30, 0.40, 0.50]

[targets]
phi = 0.3
delta = 0.6

[event_time]
tau_t = 30.0
tau_e = 45.0
accrual = 10.0
gen_event_time = "uniform"

[selection]
estpt_method = "fp.logistic"
obd_method = "utility.truncated.linear"

[run]
n_sim = 20
seed_sim = 7
"""

    config_file = temp_dir / "test_config.toml"
    config_file.write_text(config_content)
    return config_file
