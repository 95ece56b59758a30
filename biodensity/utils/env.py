"""
Environment variable helpers for configuration overrides.
"""
import os
from typing import Optional


def env_str(name: str, default: str = "") -> str:
    """Get environment variable as string with default."""
    v = os.getenv(name)
    return v if v is not None else default


def env_float(name: str, default: Optional[float] = None) -> Optional[float]:
    """
    Parse environment variable as float; unset or blank gives the default.

    Raises:
        ValueError: If the variable is set to a non-numeric value
    """
    v = os.getenv(name)
    if v is None or not v.strip():
        return default
    try:
        return float(v)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {v!r}")
