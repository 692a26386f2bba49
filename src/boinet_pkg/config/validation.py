"""Configuration validation utilities."""

from typing import List
import structlog

from ..contracts.errors import ConfigurationError
from ..domain.design import TrialDesign, resolve_design
from .constants import MIN_RECOMMENDED_N_SIM
from .model import TrialConfig

logger = structlog.get_logger()


def validate_config(config: TrialConfig) -> TrialDesign:
    """Validate configuration and resolve it into a trial design.

    Args:
        config: Configuration to validate

    Returns:
        The resolved design

    Raises:
        ConfigurationError: If configuration is invalid
    """
    try:
        design = resolve_design(config)
    except ConfigurationError:
        raise
    except (ValueError, TypeError) as e:
        # ragged probability matrices surface from numpy as ValueError
        raise ConfigurationError(f"Configuration validation failed: {e}") from e

    warnings: List[str] = []
    _check_replications(config, warnings)
    _check_stopping(design, warnings)
    _check_windows(config, warnings)

    for warning in warnings:
        logger.warning(warning, design=config.design.value)

    return design


def _check_replications(config: TrialConfig, warnings: List[str]) -> None:
    if config.run.n_sim < MIN_RECOMMENDED_N_SIM:
        warnings.append(
            f"n.sim={config.run.n_sim} gives noisy operating characteristics"
        )


def _check_stopping(design: TrialDesign, warnings: List[str]) -> None:
    if design.stopping_npts < design.size_cohort:
        warnings.append(
            f"stopping.npts={design.stopping_npts} is below one cohort; doses close after first use"
        )
    if design.stopping_npts > design.max_patients:
        warnings.append(
            f"stopping.npts={design.stopping_npts} exceeds the maximum sample size and never triggers"
        )


def _check_windows(config: TrialConfig, warnings: List[str]) -> None:
    et = config.event_time
    if config.design.is_tite and et.accrual * config.geometry.size_cohort > max(et.tau_t, et.tau_e):
        warnings.append(
            "cohorts accrue slower than the assessment windows; pending data rarely occurs"
        )

