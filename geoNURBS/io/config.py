"""
Numeric configuration for geoNURBS.

Every numerical operation reads its tolerances and iteration caps from a
NumericSettings instance. Operations accept an optional ``settings``
argument and fall back to DEFAULT_SETTINGS, so nothing process-wide is
ever mutated.

Settings can be loaded from a JSON file:

    {
      "numeric": {
        "epsilon": 1e-10,
        "max_tolerance": 1e-6,
        "min_tolerance": 1e-3,
        "gauss_points": 24,
        "max_iterations": 100
      }
    }
"""

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Dict, Any, Optional, Union

from ..errors import ConfigurationError


@dataclass(frozen=True)
class NumericSettings:
    """
    Tolerances and limits shared by the numerical routines.

    Attributes:
        epsilon: Tight tolerance for equality and degeneracy checks
        max_tolerance: Tolerance for geometric approximations (root finding)
        min_tolerance: Loose tolerance for coarse geometric comparisons
        gauss_points: Gauss-Legendre points per knot span for arc length
        max_iterations: Iteration cap for every iterative procedure
    """
    epsilon: float = 1e-10
    max_tolerance: float = 1e-6
    min_tolerance: float = 1e-3
    gauss_points: int = 24
    max_iterations: int = 100

    def __post_init__(self):
        for name in ("epsilon", "max_tolerance", "min_tolerance"):
            if not getattr(self, name) > 0.0:
                raise ConfigurationError(f"{name} must be positive")
        if self.gauss_points < 1:
            raise ConfigurationError("gauss_points must be at least 1")
        if self.max_iterations < 1:
            raise ConfigurationError("max_iterations must be at least 1")

    def with_overrides(self, **kwargs) -> 'NumericSettings':
        """Return a copy with some fields replaced."""
        return replace(self, **kwargs)


DEFAULT_SETTINGS = NumericSettings()


def resolve_settings(settings: Optional[NumericSettings]) -> NumericSettings:
    """Return ``settings`` or the module defaults."""
    return DEFAULT_SETTINGS if settings is None else settings


def settings_from_dict(data: Dict[str, Any]) -> NumericSettings:
    """
    Build NumericSettings from a mapping.

    Missing keys keep their default value; unknown keys are rejected.

    Parameters:
        data: Mapping of field name -> value

    Returns:
        NumericSettings instance
    """
    known = {f.name for f in fields(NumericSettings)}
    unknown = set(data) - known
    if unknown:
        raise ConfigurationError(
            f"Unknown numeric setting(s): {', '.join(sorted(unknown))}"
        )
    return NumericSettings(**data)


def load_config(filename: Union[str, Path]) -> NumericSettings:
    """
    Load numeric settings from a JSON file.

    Parameters:
        filename: Path to a JSON file with an optional "numeric" section

    Returns:
        NumericSettings instance
    """
    with open(filename, 'r') as f:
        config = json.load(f)

    if not isinstance(config, dict):
        raise ConfigurationError("Configuration root must be a JSON object")

    return settings_from_dict(config.get("numeric", {}))
