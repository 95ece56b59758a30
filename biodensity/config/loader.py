"""
Analysis configuration loader.

Reads config/analysis_rulebook.yml (or the file named by BIODENSITY_CONFIG),
applies environment overrides and validates the result into an AnalysisConfig.

Expected YAML structure:
    version: "1.0"
    globals:
      buffer_distance_km: 0.1
      density_breakpoints: [0, 1, 5, 15, 40, 100]
      top_n: 5
"""

from __future__ import annotations

import functools
import logging
import pathlib
from typing import Any, Dict, Optional

import yaml

from biodensity.core.pipeline import AnalysisConfig
from biodensity.utils.constants import (
    BUFFER_DISTANCE_ENV,
    CONFIG_PATH_ENV,
    DEFAULT_BUFFER_DISTANCE_KM,
    DEFAULT_CONFIG_PATH,
    DEFAULT_DENSITY_BREAKPOINTS,
    DEFAULT_TOP_N,
)
from biodensity.utils.env import env_float, env_str
from biodensity.utils.error_handling import ConfigurationError

logger = logging.getLogger(__name__)


def resolve_config_path(path: Optional[str] = None) -> pathlib.Path:
    """Explicit path, then BIODENSITY_CONFIG, then the default rulebook location."""
    return pathlib.Path(path or env_str(CONFIG_PATH_ENV, DEFAULT_CONFIG_PATH))


@functools.lru_cache(maxsize=8)
def _load_yaml(path: str) -> Dict[str, Any]:
    """Load rulebook YAML (cached per path). Missing file gives an empty mapping."""
    p = pathlib.Path(path)
    if not p.exists():
        logger.info(f"No rulebook at {p}; using built-in defaults")
        return {}
    logger.info(f"Loading rulebook from {p}")
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Could not parse rulebook {p}: {e}")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Could not read rulebook {p}: {e}")
    if not isinstance(data, dict):
        raise ConfigurationError(f"Rulebook {p} must be a mapping, got {type(data).__name__}")
    return data


def version(path: Optional[str] = None) -> str:
    """Get rulebook version."""
    data = _load_yaml(str(resolve_config_path(path)))
    return str(data.get("version", "unversioned"))


def load_analysis_config(path: Optional[str] = None) -> AnalysisConfig:
    """
    Build a validated AnalysisConfig.

    Precedence: BUFFER_DISTANCE_KM environment variable, then rulebook
    globals, then built-in defaults.

    Raises:
        ConfigurationError: If the resulting values are invalid
    """
    data = _load_yaml(str(resolve_config_path(path)))
    globals_cfg = data.get("globals") or {}
    if not isinstance(globals_cfg, dict):
        raise ConfigurationError("Rulebook 'globals' must be a mapping")

    buffer_km = globals_cfg.get("buffer_distance_km", DEFAULT_BUFFER_DISTANCE_KM)
    try:
        buffer_km = env_float(BUFFER_DISTANCE_ENV, buffer_km)
    except ValueError as e:
        raise ConfigurationError(str(e))

    breakpoints = globals_cfg.get("density_breakpoints", DEFAULT_DENSITY_BREAKPOINTS)
    if not isinstance(breakpoints, (list, tuple)):
        raise ConfigurationError(
            f"density_breakpoints must be a list, got {type(breakpoints).__name__}"
        )

    config = AnalysisConfig(
        buffer_distance_km=buffer_km,
        density_breakpoints=tuple(breakpoints),
        top_n=globals_cfg.get("top_n", DEFAULT_TOP_N),
    )
    return config.validate()


def clear_cache() -> None:
    """Drop cached rulebooks (tests and config reloads)."""
    _load_yaml.cache_clear()
