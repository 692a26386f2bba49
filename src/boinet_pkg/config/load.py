"""Configuration loading utilities."""

from __future__ import annotations
import os
from pathlib import Path
from typing import Dict, Any, Mapping, Union, Optional

from pydantic import ValidationError as PydanticValidationError

from ..contracts.errors import ConfigurationError
from .model import TrialConfig

ENV_PREFIX = "BOINET_"


def default_config() -> TrialConfig:
    """Create default configuration."""
    return TrialConfig()


def build_config(data: Optional[Mapping[str, Any]] = None, **sections: Any) -> TrialConfig:
    """Build a configuration from a nested mapping.

    Pydantic validation failures are reported as ``ConfigurationError`` so
    callers only ever see the package error hierarchy.
    """
    payload: Dict[str, Any] = dict(data or {})
    payload.update(sections)
    try:
        return TrialConfig.model_validate(payload)
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration: {e.error_count()} error(s)",
            details={"errors": e.errors(include_url=False)},
        ) from e


def load_config(path: Optional[Union[str, Path]] = None) -> TrialConfig:
    """Load configuration from file or environment.

    Args:
        path: Path to configuration file. If None, looks for:
              - BOINET_CONFIG environment variable
              - boinet.toml in current directory

    Returns:
        Loaded configuration

    Raises:
        ConfigurationError: If configuration file is invalid or not found
    """
    if path is None:
        path = _find_config_file()

    if path is None:
        return _apply_env_overrides(default_config())

    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    try:
        config = TrialConfig.from_toml_file(path)
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Failed to load config from {path}: {e.error_count()} validation error(s)",
            details={"errors": e.errors(include_url=False)},
        ) from e
    except Exception as e:
        raise ConfigurationError(f"Failed to load config from {path}: {e}") from e

    return _apply_env_overrides(config)


def _find_config_file() -> Optional[Path]:
    """Find configuration file using standard search paths."""

    env_path = os.environ.get("BOINET_CONFIG")
    if env_path:
        return Path(env_path)

    cwd_config = Path("boinet.toml")
    if cwd_config.exists():
        return cwd_config

    return None


def _apply_env_overrides(config: TrialConfig) -> TrialConfig:
    """Apply environment variable overrides to configuration.

    Environment variables follow pattern: BOINET_<SECTION>_<KEY>
    Examples:
        BOINET_RUN_N_SIM=2000
        BOINET_EVENT_TIME_TAU_T=28
        BOINET_SELECTION_OBD_METHOD=utility.scoring
    """
    sections = sorted(
        (name for name, info in TrialConfig.model_fields.items() if name != "design"),
        key=len,
        reverse=True,
    )
    overrides: Dict[str, Dict[str, Any]] = {}

    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX) or key == "BOINET_CONFIG":
            continue

        remainder = key[len(ENV_PREFIX):].lower()
        for section in sections:
            if remainder.startswith(section + "_"):
                field = remainder[len(section) + 1:]
                overrides.setdefault(section, {})[field] = _convert_env_value(value)
                break

    if not overrides:
        return config

    config_dict = config.model_dump()
    for section, fields in overrides.items():
        config_dict[section].update(fields)

    try:
        return TrialConfig.model_validate(config_dict)
    except PydanticValidationError as e:
        raise ConfigurationError(
            "Invalid environment override",
            details={"overrides": overrides, "errors": e.errors(include_url=False)},
        ) from e


def _convert_env_value(value: str) -> Any:
    """Convert string environment variable to appropriate type."""
    if value.lower() in ("true", "false"):
        return value.lower() == "true"

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    return value
