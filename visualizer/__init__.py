"""
Visualizer package for inspecting synthesized layout constraints.
"""

from .constraint_visualizer import ConstraintVisualizer, ConstraintVisualizationConfig

__all__ = [
    "ConstraintVisualizer",
    "ConstraintVisualizationConfig",
]
