"""Data structures shared by the extractor, synthesizer and patcher."""

import math
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Tuple

from .constants import ENTITY_KINDS, AXES, DIRECTIONS


@dataclass
class Entity:
    """A declared diagram element."""
    id: str
    label: str
    kind: str  # One of ENTITY_KINDS

    def to_dict(self) -> dict:
        return {"id": self.id, "label": self.label, "kind": self.kind}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Entity":
        kind = str(data.get("kind", "unknown")).lower()
        if kind not in ENTITY_KINDS:
            kind = "unknown"
        entity_id = str(data["id"])
        return cls(id=entity_id, label=str(data.get("label") or entity_id), kind=kind)


@dataclass(frozen=True)
class Position:
    """Canvas position in pixels (y grows downwards)."""
    x: float
    y: float

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}

    @classmethod
    def coerce(cls, value: Any) -> "Position":
        """
        Build a Position from what the canvas hands over.

        Accepts a Position, an (x, y) pair or a {"x": .., "y": ..} mapping.

        Raises:
            ValueError: If the value has none of these shapes or is not numeric
        """
        if isinstance(value, Position):
            return value
        try:
            if isinstance(value, Mapping):
                return cls(float(value["x"]), float(value["y"]))
            if isinstance(value, (list, tuple)) and len(value) == 2:
                return cls(float(value[0]), float(value[1]))
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid position {value!r}: {e}") from e
        raise ValueError(f"Invalid position {value!r}: expected (x, y) or {{'x', 'y'}}")


@dataclass(frozen=True)
class Constraint:
    """Relative ordering of two entities along one axis."""
    from_id: str
    to_id: str
    axis: str  # "horizontal" | "vertical"
    direction: str = "before"  # "before" | "after"

    def __post_init__(self):
        if self.axis not in AXES:
            raise ValueError(f"Invalid axis '{self.axis}'. Must be one of {AXES}")
        if self.direction not in DIRECTIONS:
            raise ValueError(f"Invalid direction '{self.direction}'. Must be one of {DIRECTIONS}")

    def sort_key(self) -> Tuple[str, str, str]:
        return (self.from_id, self.to_id, self.axis)

    def to_dict(self) -> dict:
        return {"from": self.from_id, "to": self.to_id, "axis": self.axis, "direction": self.direction}


@dataclass
class LayoutNode:
    """Entity with its seed position on the canvas."""
    entity: Entity
    position: Position

    def to_dict(self) -> dict:
        result = self.entity.to_dict()
        result["position"] = self.position.to_dict()
        return result


@dataclass
class PatchResult:
    """Patched document text plus any structural warnings raised on the way."""
    text: str
    warnings: List[str] = field(default_factory=list)

    @property
    def has_structural_warning(self) -> bool:
        return bool(self.warnings)

    def to_dict(self) -> dict:
        return {"text": self.text, "warnings": list(self.warnings)}
