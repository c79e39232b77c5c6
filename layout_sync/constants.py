"""Constants for layout synchronization: DSL keywords, link tokens, region sentinels and defaults."""

from typing import Dict, Tuple, List

# Declaration keywords recognised at the start of a line
ENTITY_KINDS: List[str] = [
    "class", "actor", "participant", "usecase",
    "component", "interface", "object",
    "unknown",  # Not a keyword: fallback for entities supplied by collaborators
]

DECLARATION_KEYWORDS: List[str] = [kind for kind in ENTITY_KINDS if kind != "unknown"]

# Relation/link tokens; a line containing one (outside quotes) is never a declaration
RELATION_TOKENS: Tuple[str, ...] = ("--", "..", "->", "<-", "-[")
HIDDEN_LINK_MARKER: str = "[hidden]"

# Constraint vocabulary
AXES: List[str] = ["horizontal", "vertical"]
DIRECTIONS: List[str] = ["before", "after"]

# (axis, direction) -> PlantUML hidden-link direction keyword
LINK_DIRECTIONS: Dict[Tuple[str, str], str] = {
    ("horizontal", "before"): "right",   # from is left of to
    ("horizontal", "after"): "left",     # from is right of to
    ("vertical", "before"): "down",      # from is above to
    ("vertical", "after"): "up",         # from is below to
}

# Document structure
CLOSING_DIRECTIVE: str = "@enduml"
REGION_BEGIN: str = "' @layout-constraints begin"
REGION_END: str = "' @layout-constraints end"

# Structural warning codes reported by the patcher
WARN_MISSING_CLOSING_DIRECTIVE: str = "missing_closing_directive"
WARN_UNTERMINATED_REGION: str = "unterminated_constraint_region"

# Synthesis: displacement (px) at or below which two entities count as aligned
DEFAULT_MIN_GAP: float = 10.0

# Seed grid for entities that have not been placed on the canvas yet
GRID_COLUMNS: int = 3
GRID_SPACING: Tuple[float, float] = (250.0, 150.0)
GRID_ORIGIN: Tuple[float, float] = (50.0, 50.0)

# Render collaborator
PLANTUML_SERVER: str = "https://www.plantuml.com/plantuml"
RENDER_FORMATS: List[str] = ["svg", "png"]
