"""Main API facade for the BOIN-ET simulation package.

The CLI and library users go through these functions. Configuration errors
are raised as ``ConfigurationError`` before any replication starts.
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union
import structlog

from .config.load import build_config, default_config, load_config
from .config.model import TrialConfig
from .config.validation import validate_config
from .contracts.errors import ConfigurationError
from .contracts.types import Boundaries, Design, SimulationResult
from .domain.boundaries import compute_boundaries, resolve_targets
from .domain.design import TrialDesign
from .simulation.orchestrator import simulate_design

logger = structlog.get_logger()


def get_default_config() -> TrialConfig:
    """Get default configuration."""
    return default_config()


def load_config_from_file(path: Union[str, Path]) -> TrialConfig:
    """Load configuration from file.

    Only field-level checks run here; call ``validate_configuration`` or
    ``simulate`` for the design-level ones.

    Raises:
        ConfigurationError: If configuration cannot be loaded or has invalid fields
    """
    return load_config(path)


def validate_configuration(config: TrialConfig) -> TrialDesign:
    """Validate configuration and return the resolved design.

    Raises:
        ConfigurationError: If configuration has errors
    """
    return validate_config(config)


def apply_run_overrides(config: TrialConfig, **overrides: Any) -> TrialConfig:
    """Return a copy of ``config`` with ``run`` settings replaced, re-validated.

    ``None`` values are ignored.

    Raises:
        ConfigurationError: If an override is invalid
    """
    updates = {key: value for key, value in overrides.items() if value is not None}
    if not updates:
        return config
    data = config.model_dump()
    data["run"].update(updates)
    return build_config(data)


def simulate(
    config: Union[TrialConfig, Mapping[str, Any]],
    run_id: Optional[str] = None,
) -> SimulationResult:
    """Run all replications of a configuration and return operating characteristics.

    Args:
        config: Configuration model or nested mapping of sections
        run_id: Optional identifier bound to log records

    Returns:
        Aggregated simulation result
    """
    if not isinstance(config, TrialConfig):
        config = build_config(config)
    design = validate_config(config)
    return simulate_design(
        design,
        n_sim=config.run.n_sim,
        seed_sim=config.run.seed_sim,
        n_jobs=config.run.n_jobs,
        run_id=run_id,
    )


def boundaries(
    phi: float,
    delta: float,
    phi1: Optional[float] = None,
    phi2: Optional[float] = None,
    delta1: Optional[float] = None,
) -> Boundaries:
    """Decision boundaries for the given targets, filling in default limits."""
    return compute_boundaries(resolve_targets(phi, delta, phi1=phi1, phi2=phi2, delta1=delta1))


def _flat_field_index() -> Dict[str, Tuple[str, str]]:
    """Map every field name and alias to its (section, field) location."""
    index: Dict[str, Tuple[str, str]] = {}
    for section, info in TrialConfig.model_fields.items():
        if section == "design":
            continue
        for name, field in info.annotation.model_fields.items():
            index[name] = (section, name)
            if field.alias:
                index[field.alias] = (section, name)
    return index


def config_from_arguments(design: Union[Design, str], **arguments: Any) -> TrialConfig:
    """Build a configuration from flat keyword arguments.

    Both ``tau_t=28`` and ``**{"tau.T": 28}`` spellings are accepted.

    Raises:
        ConfigurationError: On unknown argument names or invalid values
    """
    index = _flat_field_index()
    sections: Dict[str, Dict[str, Any]] = {}
    unknown = []
    for key, value in arguments.items():
        if key not in index:
            unknown.append(key)
            continue
        section, name = index[key]
        sections.setdefault(section, {})[name] = value
    if unknown:
        raise ConfigurationError(f"Unknown arguments: {', '.join(sorted(unknown))}")
    return build_config({"design": Design(design), **sections})


def _run_design(design: Design, run_id: Optional[str], arguments: Dict[str, Any]) -> SimulationResult:
    return simulate(config_from_arguments(design, **arguments), run_id=run_id)


def boinet(run_id: Optional[str] = None, **arguments: Any) -> SimulationResult:
    """BOIN-ET with binary toxicity and efficacy."""
    return _run_design(Design.BOINET, run_id, arguments)


def tite_boinet(run_id: Optional[str] = None, **arguments: Any) -> SimulationResult:
    """TITE-BOIN-ET: binary outcomes with time-to-event pending data."""
    return _run_design(Design.TITE_BOINET, run_id, arguments)


def gboinet(run_id: Optional[str] = None, **arguments: Any) -> SimulationResult:
    """gBOIN-ET: ordinal graded outcomes."""
    return _run_design(Design.GBOINET, run_id, arguments)


def tite_gboinet(run_id: Optional[str] = None, **arguments: Any) -> SimulationResult:
    """TITE-gBOIN-ET: ordinal graded outcomes with pending data."""
    return _run_design(Design.TITE_GBOINET, run_id, arguments)
