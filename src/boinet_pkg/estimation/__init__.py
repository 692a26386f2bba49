"""Dose-response estimation and OBD selection."""

from .isotonic import antitonic, pava, unimodal_isotonic
from .fractional_polynomial import FPFit, fit_fp_logistic
from .selection import (
    DoseEstimates,
    ObdSelector,
    estimate_doses,
    estimate_efficacy,
    select_obd,
    utility,
)

__all__ = [
    "antitonic",
    "pava",
    "unimodal_isotonic",
    "FPFit",
    "fit_fp_logistic",
    "DoseEstimates",
    "ObdSelector",
    "estimate_doses",
    "estimate_efficacy",
    "select_obd",
    "utility",
]
