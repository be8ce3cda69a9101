"""Configuration models and I/O for random field generation.

Pydantic models for the grid specification and generator settings with
YAML/JSON I/O. The output root under which cache files live is part of the
configuration rather than process-wide state.
"""

from __future__ import annotations

import json
import math
from enum import Enum
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import ConfigError
from .types import MAX_COUNT, SUPPORTED_DIMS, Corner, GridCounts, Periodicity


class CachePolicyKind(str, Enum):
    """How a cache header that disagrees with the request is treated."""

    TRUST = "trust"
    STRICT = "strict"


class GridSpec(BaseModel):
    """Grid geometry and spectral truncation for one generator.

    Per-dimension fields share the spatial dimension, which must be 1, 2 or 3.
    """

    model_config = ConfigDict(frozen=True)

    lower_corner: Corner = Field(description="Lower domain bound per axis")
    upper_corner: Corner = Field(description="Upper domain bound per axis")
    num_grid_pts: GridCounts = Field(description="Grid resolution per axis")
    periodicity: Periodicity = Field(description="Whether each axis wraps around")
    num_eigenvalues: int = Field(description="Truncation order of the spectral expansion")
    length_scale: float = Field(description="Correlation length of the covariance kernel")

    @field_validator("num_eigenvalues")
    @classmethod
    def validate_num_eigenvalues(cls, v: int) -> int:
        """Require at least one retained eigenpair."""
        if v < 1:
            raise ValueError(f"num_eigenvalues must be at least 1, got {v}")
        if v > MAX_COUNT:
            raise ValueError(f"num_eigenvalues must not exceed {MAX_COUNT}, got {v}")
        return v

    @field_validator("length_scale")
    @classmethod
    def validate_length_scale(cls, v: float) -> float:
        """Require a finite positive correlation length."""
        if not math.isfinite(v) or v <= 0:
            raise ValueError(f"length_scale must be finite and positive, got {v}")
        return v

    @model_validator(mode="after")
    def validate_grid(self) -> GridSpec:
        """Check per-dimension lengths, bounds and the eigenvalue count."""
        dim = len(self.lower_corner)
        if dim not in SUPPORTED_DIMS:
            raise ValueError(f"Spatial dimension must be 1, 2 or 3, got {dim}")

        lengths = {
            "upper_corner": len(self.upper_corner),
            "num_grid_pts": len(self.num_grid_pts),
            "periodicity": len(self.periodicity),
        }
        for name, length in lengths.items():
            if length != dim:
                raise ValueError(f"{name} has {length} entries, expected {dim}")

        for axis, (lo, hi) in enumerate(zip(self.lower_corner, self.upper_corner)):
            if not (math.isfinite(lo) and math.isfinite(hi)):
                raise ValueError(f"Bounds on axis {axis} must be finite, got ({lo}, {hi})")
            if not lo < hi:
                raise ValueError(f"lower_corner[{axis}]={lo} must be below upper_corner[{axis}]={hi}")

        if any(n < 1 for n in self.num_grid_pts):
            raise ValueError(f"num_grid_pts entries must be at least 1, got {self.num_grid_pts}")
        if any(n > MAX_COUNT for n in self.num_grid_pts):
            raise ValueError(
                f"num_grid_pts entries must not exceed {MAX_COUNT}, got {self.num_grid_pts}"
            )

        if self.num_eigenvalues > self.total_grid_points:
            raise ValueError(
                f"num_eigenvalues ({self.num_eigenvalues}) exceeds the number of grid points "
                f"({self.total_grid_points})"
            )
        return self

    @property
    def dim(self) -> int:
        return len(self.lower_corner)

    @property
    def total_grid_points(self) -> int:
        return math.prod(self.num_grid_pts)

    @property
    def widths(self) -> Corner:
        return tuple(hi - lo for lo, hi in zip(self.lower_corner, self.upper_corner))


class GeneratorConfig(BaseModel):
    """Complete generator configuration."""

    grid: GridSpec = Field(description="Grid and spectral parameters")
    output_root: Path = Field(
        default=Path("output"), description="Directory under which CachedRandomFields/ lives"
    )
    cache_policy: CachePolicyKind = Field(
        default=CachePolicyKind.TRUST, description="Treatment of disagreeing cache headers"
    )
    seed: int | None = Field(default=None, description="Seed for field sampling")


def load_config(path: str | Path) -> GeneratorConfig:
    """Load configuration from a YAML or JSON file.

    Args:
        path: Path to configuration file

    Returns:
        Validated GeneratorConfig

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigError: If the file cannot be parsed or fails validation
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        try:
            if path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigError(f"Failed to parse config {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must contain a mapping, got {type(data).__name__}")

    try:
        return GeneratorConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {path}: {e}") from e


def save_config(cfg: GeneratorConfig, path: str | Path) -> None:
    """Save configuration to a YAML or JSON file chosen by suffix."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = cfg.model_dump(mode="json")

    with open(path, "w", encoding="utf-8") as f:
        if path.suffix.lower() in [".yaml", ".yml"]:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
        else:
            json.dump(data, f, indent=2)


def round_trip_config(cfg: GeneratorConfig) -> GeneratorConfig:
    """Serialize a configuration through YAML and back."""
    data = cfg.model_dump(mode="json")
    yaml_str = yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
    return GeneratorConfig(**yaml.safe_load(yaml_str))


__all__ = [
    "CachePolicyKind",
    "GridSpec",
    "GeneratorConfig",
    "load_config",
    "save_config",
    "round_trip_config",
]
