"""Operating-characteristics simulator for the BOIN-ET dose-finding design family."""

__version__ = "0.1.0"

from .app_api import (
    boinet,
    boundaries,
    gboinet,
    simulate,
    tite_boinet,
    tite_gboinet,
)
from .contracts import ConfigurationError, Design, SimulationResult

__all__ = [
    "boinet",
    "boundaries",
    "gboinet",
    "simulate",
    "tite_boinet",
    "tite_gboinet",
    "ConfigurationError",
    "Design",
    "SimulationResult",
]
