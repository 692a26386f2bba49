"""Configuration system with lazy attribute loading to avoid circular imports."""

from __future__ import annotations

from importlib import import_module
from typing import Any, Dict, Tuple

from . import constants as _constants
from .constants import *  # noqa: F401,F403 - re-export constants

constants = _constants

_LAZY_ATTRS: Dict[str, Tuple[str, str]] = {
    # Configuration models
    "TrialConfig": (".model", "TrialConfig"),
    "GeometryConfig": (".model", "GeometryConfig"),
    "ScenarioConfig": (".model", "ScenarioConfig"),
    "TargetConfig": (".model", "TargetConfig"),
    "EventTimeConfig": (".model", "EventTimeConfig"),
    "StoppingConfig": (".model", "StoppingConfig"),
    "SelectionConfig": (".model", "SelectionConfig"),
    "RunConfig": (".model", "RunConfig"),
    # Configuration helpers
    "load_config": (".load", "load_config"),
    "build_config": (".load", "build_config"),
    "default_config": (".load", "default_config"),
    "validate_config": (".validation", "validate_config"),
}

_CONSTANT_NAMES = [name for name in dir(_constants) if not name.startswith("_")]
__all__ = sorted(set(["constants", *_CONSTANT_NAMES, *_LAZY_ATTRS.keys()]))


def __getattr__(name: str) -> Any:
    """Lazily load configuration helpers and models on first access."""

    try:
        module_name, attr_name = _LAZY_ATTRS[name]
    except KeyError as exc:
        raise AttributeError(f"module {__name__} has no attribute {name}") from exc

    module = import_module(module_name, __name__)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    """Expose constants and lazily loaded attributes to dir()."""

    return list(__all__)
