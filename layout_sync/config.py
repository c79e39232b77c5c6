"""Configuration for layout synchronization."""

from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Dict, Tuple, Union

import yaml

from .constants import (
    DEFAULT_MIN_GAP, GRID_COLUMNS, GRID_SPACING, GRID_ORIGIN,
    CLOSING_DIRECTIVE, REGION_BEGIN, REGION_END,
)


@dataclass
class SyncConfig:
    """
    Layout synchronization configuration.

    Synthesis:
        min_gap: Displacement (px) at or below which a pair gets no constraint
    Seed grid (initialize_from_text):
        grid_columns: Entities per grid row
        grid_spacing: (x, y) distance between grid cells
        grid_origin: (x, y) of the first cell
    Document structure:
        closing_directive: Line the constraint region is inserted before
        region_begin / region_end: Sentinel comments delimiting the region
    """
    min_gap: float = DEFAULT_MIN_GAP
    grid_columns: int = GRID_COLUMNS
    grid_spacing: Tuple[float, float] = GRID_SPACING
    grid_origin: Tuple[float, float] = GRID_ORIGIN
    closing_directive: str = CLOSING_DIRECTIVE
    region_begin: str = REGION_BEGIN
    region_end: str = REGION_END

    def __post_init__(self):
        if self.min_gap < 0:
            raise ValueError(f"min_gap must be >= 0, got {self.min_gap}")
        if self.grid_columns < 1:
            raise ValueError(f"grid_columns must be >= 1, got {self.grid_columns}")
        if self.region_begin == self.region_end:
            raise ValueError("region_begin and region_end sentinels must differ")
        self.grid_spacing = tuple(float(v) for v in self.grid_spacing)
        self.grid_origin = tuple(float(v) for v in self.grid_origin)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SyncConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        return cls(**data)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "SyncConfig":
        """Load config from a YAML mapping; missing keys keep their defaults."""
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        return cls.from_dict(data)
