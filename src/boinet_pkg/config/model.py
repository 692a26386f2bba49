"""Configuration data models."""

from __future__ import annotations
from typing import Any, Dict, List, Literal, Optional, Union
from pathlib import Path
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..contracts.types import Design

ProbabilityInput = Union[List[float], List[List[float]]]


class _Section(BaseModel):
    """Base for config sections; accepts both ``tau_t`` and ``tau.T`` style keys."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class GeometryConfig(_Section):
    """Dose grid and cohort layout."""

    n_dose: int = Field(5, gt=0, alias="n.dose", description="Number of dose levels")
    start_dose: int = Field(1, alias="start.dose", description="Starting dose level (1-based)")
    size_cohort: int = Field(3, gt=0, alias="size.cohort", description="Patients per cohort")
    n_cohort: int = Field(10, gt=0, alias="n.cohort", description="Maximum number of cohorts")

    @property
    def max_patients(self) -> int:
        return self.size_cohort * self.n_cohort


class ScenarioConfig(_Section):
    """Ground truth outcome distributions.

    Binary designs take one probability per dose. Graded designs take a
    matrix with one row per ordinal category and one column per dose.
    """

    toxprob: ProbabilityInput = Field(default_factory=lambda: [0.02, 0.06, 0.12, 0.20, 0.30])
    effprob: ProbabilityInput = Field(default_factory=lambda: [0.12, 0.20, 0.30, 0.40, 0.50])
    sev_weight: Optional[List[float]] = Field(None, alias="sev.weight", description="Toxicity severity weights")
    res_weight: Optional[List[float]] = Field(None, alias="res.weight", description="Efficacy response weights")


class TargetConfig(_Section):
    """Target rates and their tolerance limits."""

    phi: float = Field(0.3, description="Target toxicity rate")
    phi1: Optional[float] = Field(None, description="Highest toxicity rate deemed sub-therapeutic")
    phi2: Optional[float] = Field(None, description="Lowest toxicity rate deemed overly toxic")
    delta: float = Field(0.6, description="Target efficacy rate")
    delta1: Optional[float] = Field(None, description="Minimum efficacy rate of interest")

    @field_validator("phi", "phi1", "phi2", "delta", "delta1")
    @classmethod
    def validate_rate(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and not 0.0 < v < 1.0:
            raise ValueError("target rates must lie strictly between 0 and 1")
        return v


class EventTimeConfig(_Section):
    """Assessment windows, event-time and enrollment-time generation."""

    alpha_t1: float = Field(0.5, alias="alpha.T1", description="Share of toxicity events in the first half of the window")
    alpha_e1: float = Field(0.5, alias="alpha.E1", description="Share of efficacy events in the first half of the window")
    tau_t: float = Field(30.0, alias="tau.T", description="Toxicity assessment window")
    tau_e: float = Field(45.0, alias="tau.E", description="Efficacy assessment window")
    te_corr: float = Field(0.2, alias="te.corr", description="Gaussian copula correlation")
    gen_event_time: Literal["weibull", "uniform"] = Field("weibull", alias="gen.event.time")
    accrual: float = Field(10.0, description="Mean gap between patient arrivals")
    gen_enroll_time: Literal["uniform", "exponential"] = Field("uniform", alias="gen.enroll.time")

    @field_validator("alpha_t1", "alpha_e1")
    @classmethod
    def validate_alpha(cls, v: float) -> float:
        if not 0.0 < v < 1.0:
            raise ValueError("alpha must lie strictly between 0 and 1")
        return v


class StoppingConfig(_Section):
    """Dose elimination and local stopping thresholds."""

    npts: Optional[int] = Field(None, alias="stopping.npts", description="Patients at which a dose closes")
    prob_t: float = Field(0.95, alias="stopping.prob.T")
    prob_e: float = Field(0.99, alias="stopping.prob.E")

    @field_validator("prob_t", "prob_e")
    @classmethod
    def validate_prob(cls, v: float) -> float:
        if not 0.0 < v <= 1.0:
            raise ValueError("stopping probabilities must lie in (0, 1]")
        return v


class SelectionConfig(_Section):
    """Dose-response estimation and OBD selection."""

    estpt_method: Literal["obs.prob", "fp.logistic", "multi.iso"] = Field("obs.prob", alias="estpt.method")
    obd_method: Literal[
        "max.effprob", "utility.weighted", "utility.truncated.linear", "utility.scoring"
    ] = Field("max.effprob", alias="obd.method")
    w1: float = 0.33
    w2: float = 1.09
    plow_ast: Optional[float] = Field(None, alias="plow.ast")
    pupp_ast: Optional[float] = Field(None, alias="pupp.ast")
    qlow_ast: Optional[float] = Field(None, alias="qlow.ast")
    qupp_ast: Optional[float] = Field(None, alias="qupp.ast")
    psi00: float = 40.0
    psi11: float = 60.0


class RunConfig(_Section):
    """Replication settings."""

    n_sim: int = Field(1000, ge=1, alias="n.sim", description="Number of simulated trials")
    seed_sim: int = Field(100, ge=0, alias="seed.sim", description="Base seed for replication streams")
    n_jobs: int = Field(1, description="Worker processes for replications (-1 for all cores)")

    @field_validator("n_jobs")
    @classmethod
    def validate_n_jobs(cls, v: int) -> int:
        if v == 0:
            raise ValueError("n_jobs must be non-zero")
        return v


class TrialConfig(_Section):
    """Complete simulation configuration."""

    design: Design = Design.BOINET
    geometry: GeometryConfig = Field(default_factory=GeometryConfig)
    scenario: ScenarioConfig = Field(default_factory=ScenarioConfig)
    targets: TargetConfig = Field(default_factory=TargetConfig)
    event_time: EventTimeConfig = Field(default_factory=EventTimeConfig)
    stopping: StoppingConfig = Field(default_factory=StoppingConfig)
    selection: SelectionConfig = Field(default_factory=SelectionConfig)
    run: RunConfig = Field(default_factory=RunConfig)

    def model_dump_toml(self) -> str:
        """Export configuration as TOML string."""
        try:
            import tomli_w
        except ImportError:
            raise ImportError("tomli_w required for TOML export")
        data: Dict[str, Any] = self.model_dump(mode="json", exclude_none=True)
        return tomli_w.dumps(data)

    @classmethod
    def from_toml_file(cls, path: Union[Path, str]) -> "TrialConfig":
        """Load configuration from TOML file."""
        try:
            import tomllib
        except ImportError:
            import tomli as tomllib

        with open(path, "rb") as f:
            data = tomllib.load(f)
        return cls.model_validate(data)
