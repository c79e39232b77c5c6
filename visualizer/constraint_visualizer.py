"""Constraint visualizer: canvas positions with synthesized ordering constraints drawn on top."""

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from layout_sync import Constraint, Entity, Position


@dataclass
class ConstraintVisualizationConfig:
    """Configuration for constraint plots.

    Attributes:
        figure_size: Matplotlib figure size in inches
        dpi: Output resolution
        node_color: Fill colour of entity markers
        axis_colors: Arrow colour per constraint axis
        show_unplaced: List entities without a position in the title
    """
    figure_size: Tuple[float, float] = (10.0, 7.0)
    dpi: int = 100
    node_color: str = "#4f46e5"
    axis_colors: Dict[str, str] = field(default_factory=lambda: {
        "horizontal": "#dc2626",  # Red
        "vertical": "#16a34a",    # Green
    })
    show_unplaced: bool = True


class ConstraintVisualizer:
    """Plot entities at their canvas positions and the constraints between them.

    The y axis is inverted so the plot reads like the canvas.

    Example:
        >>> viz = ConstraintVisualizer()
        >>> viz.plot(entities, positions, constraints)
        >>> viz.save("layout.png")
    """

    def __init__(self, config: Optional[ConstraintVisualizationConfig] = None):
        self.config = config or ConstraintVisualizationConfig()
        self._figure = None

    def plot(
        self,
        entities: List[Entity],
        positions: Mapping[str, Any],
        constraints: List[Constraint],
        title: str = "Layout constraints"
    ) -> "ConstraintVisualizer":
        """Draw the plot; returns self for chaining."""
        coords = {e.id: Position.coerce(positions[e.id]) for e in entities if e.id in positions}
        unplaced = [e.id for e in entities if e.id not in coords]

        fig, ax = plt.subplots(figsize=self.config.figure_size, dpi=self.config.dpi)
        if coords:
            points = np.array([[p.x, p.y] for p in coords.values()])
            ax.scatter(points[:, 0], points[:, 1], s=400, c=self.config.node_color, alpha=0.85, zorder=3)
            for entity in entities:
                if entity.id in coords:
                    pos = coords[entity.id]
                    ax.annotate(f"{entity.kind}: {entity.label}", (pos.x, pos.y),
                                textcoords="offset points", xytext=(0, 14), ha="center", fontsize=9)

        for c in constraints:
            if c.from_id not in coords or c.to_id not in coords:
                continue
            start, end = coords[c.from_id], coords[c.to_id]
            if c.direction == "after":
                start, end = end, start
            ax.annotate("", xy=(end.x, end.y), xytext=(start.x, start.y),
                        arrowprops=dict(arrowstyle="->", color=self.config.axis_colors[c.axis], lw=1.5),
                        zorder=2)

        if self.config.show_unplaced and unplaced:
            title = f"{title} (unplaced: {', '.join(unplaced)})"
        ax.set_title(title)
        ax.invert_yaxis()
        ax.set_aspect("equal", adjustable="datalim")
        ax.grid(True, alpha=0.3)

        if self._figure is not None:
            plt.close(self._figure)
        self._figure = fig
        return self

    def save(self, path: Union[str, Path]) -> Path:
        """Write the current plot to an image file."""
        if self._figure is None:
            raise RuntimeError("Nothing to save; call plot() first")
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self._figure.savefig(path, bbox_inches="tight")
        return path

    def close(self) -> None:
        if self._figure is not None:
            plt.close(self._figure)
            self._figure = None
