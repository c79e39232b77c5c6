"""Layout synchronization pipeline: text → entities → constraints → patched text."""

import logging
from typing import Any, List, Mapping, Optional

from .schema import Entity, Position, LayoutNode, PatchResult
from .config import SyncConfig
from .extractor import extract_entities
from .synthesizer import ConstraintSynthesizer, validate_constraints
from .patcher import SourcePatcher

logger = logging.getLogger(__name__)


def grid_position(index: int, config: SyncConfig) -> Position:
    """Seed position of the index-th entity on a row-major grid."""
    col = index % config.grid_columns
    row = index // config.grid_columns
    return Position(
        x=col * config.grid_spacing[0] + config.grid_origin[0],
        y=row * config.grid_spacing[1] + config.grid_origin[1],
    )


class LayoutSynchronizer:
    """
    Bridge between PlantUML text and canvas positions.

    Usage:
        sync = LayoutSynchronizer()
        nodes = sync.initialize_from_text(code)          # seed the canvas
        new_code = sync.apply_layout(code, positions)    # after dragging
    """

    def __init__(self, config: Optional[SyncConfig] = None):
        """
        Args:
            config: Thresholds, seed grid and region sentinels (defaults if None)
        """
        self.config = config or SyncConfig()
        self.synthesizer = ConstraintSynthesizer(self.config.min_gap)
        self.patcher = SourcePatcher(self.config)

    def extract(self, text: str) -> List[Entity]:
        return extract_entities(text)

    def initialize_from_text(self, text: str) -> List[LayoutNode]:
        """Extract entities and place them on the default grid."""
        entities = extract_entities(text)
        return [LayoutNode(entity=e, position=grid_position(i, self.config)) for i, e in enumerate(entities)]

    def apply_layout_with_report(self, text: str, positions: Mapping[str, Any]) -> PatchResult:
        """
        Fold a position snapshot back into the text.

        Args:
            text: Current document text
            positions: Entity id -> position (Position, (x, y) or {"x", "y"})

        Returns:
            PatchResult with the new text and structural warnings
        """
        entities = extract_entities(text)
        constraints = self.synthesizer.synthesize(entities, dict(positions))
        validate_constraints(constraints, entities)

        logger.info(f"Synthesized {len(constraints)} constraints for {len(entities)} entities "
                    f"({sum(1 for e in entities if e.id in positions)} placed)")
        return self.patcher.patch_with_report(text, constraints)

    def apply_layout(self, text: str, positions: Mapping[str, Any]) -> str:
        """Fold a position snapshot back into the text and return the new text."""
        result = self.apply_layout_with_report(text, positions)
        for warning in result.warnings:
            logger.warning(f"Structural warning while applying layout: {warning}")
        return result.text


def initialize_from_text(text: str, config: Optional[SyncConfig] = None) -> List[LayoutNode]:
    """Seed canvas nodes for a document."""
    return LayoutSynchronizer(config).initialize_from_text(text)


def apply_layout(text: str, positions: Mapping[str, Any], config: Optional[SyncConfig] = None) -> str:
    """Run extract → synthesize → patch on a document."""
    return LayoutSynchronizer(config).apply_layout(text, positions)
