"""
Layout Sync Module

Keeps PlantUML text and a dragged canvas layout in step. PlantUML lays
diagrams out automatically, so canvas positions are folded back into the
text as hidden-link ordering directives.

Design:
    Text → extract entities → canvas positions → synthesize constraints → patch text

Components:
    - schema: Data structures (Entity, Position, Constraint, PatchResult)
    - constants: Keywords, link tokens, region sentinels, defaults
    - config: SyncConfig dataclass and YAML loading
    - extractor: Entity declarations from source text
    - synthesizer: Minimal acyclic ordering constraints from positions
    - patcher: Constraint region replacement
    - pipeline: End-to-end synchronization
    - encoding: PlantUML server URLs
"""

from .schema import Entity, Position, Constraint, LayoutNode, PatchResult
from .config import SyncConfig
from .extractor import extract_entities, parse_declaration
from .synthesizer import (
    ConstraintSynthesizer,
    ConstraintInvariantError,
    synthesize,
    break_cycles,
    transitive_reduction,
    validate_constraints,
)
from .patcher import SourcePatcher, patch, patch_with_report, render_constraint
from .pipeline import LayoutSynchronizer, initialize_from_text, apply_layout
from .encoding import encode_plantuml, diagram_url
from .constants import ENTITY_KINDS, AXES, DIRECTIONS

__all__ = [
    # Schema
    "Entity",
    "Position",
    "Constraint",
    "LayoutNode",
    "PatchResult",
    "SyncConfig",
    # Extraction
    "extract_entities",
    "parse_declaration",
    # Synthesis
    "ConstraintSynthesizer",
    "ConstraintInvariantError",
    "synthesize",
    "break_cycles",
    "transitive_reduction",
    "validate_constraints",
    # Patching
    "SourcePatcher",
    "patch",
    "patch_with_report",
    "render_constraint",
    # Pipeline
    "LayoutSynchronizer",
    "initialize_from_text",
    "apply_layout",
    # Rendering handoff
    "encode_plantuml",
    "diagram_url",
    # Constants
    "ENTITY_KINDS",
    "AXES",
    "DIRECTIONS",
]
