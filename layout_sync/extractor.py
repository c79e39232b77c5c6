"""Entity extraction from PlantUML source text."""

import logging
import re
from typing import Callable, List, Optional, Set, Tuple

from .schema import Entity
from .constants import DECLARATION_KEYWORDS, RELATION_TOKENS, HIDDEN_LINK_MARKER

logger = logging.getLogger(__name__)

_IDENT = r"[A-Za-z0-9_]+"

# "kind <rest>" with the keyword matched case-insensitively
_KEYWORD_PATTERN = re.compile(
    r"^\s*(" + "|".join(DECLARATION_KEYWORDS) + r")\s+(.*)$",
    re.IGNORECASE
)
_QUOTED_PATTERN = re.compile(r'"[^"]*"')

# Declaration forms, tried in this order; each is anchored at the start of <rest>
_LABEL_AS_ID = re.compile(r'^"([^"]+)"\s+as\s+(' + _IDENT + r')', re.IGNORECASE)
_ID_AS_LABEL = re.compile(r'^(' + _IDENT + r')\s+as\s+"([^"]+)"', re.IGNORECASE)
_BARE_ID = re.compile(r'^(' + _IDENT + r')')

# What may follow a declaration form: stereotype, colour, body brace, whitespace
_TAIL_PATTERN = re.compile(r'^(?:$|[\s{<#])')


def has_link_token(line: str) -> bool:
    """Check whether a line carries a relation or hidden-link token outside quoted text."""
    unquoted = _QUOTED_PATTERN.sub('""', line).lower()
    if HIDDEN_LINK_MARKER in unquoted:
        return True
    return any(token in unquoted for token in RELATION_TOKENS)


def _match_label_as_id(rest: str) -> Optional[Tuple[str, str]]:
    match = _LABEL_AS_ID.match(rest)
    if match and _TAIL_PATTERN.match(rest[match.end():]):
        return match.group(2), match.group(1)
    return None


def _match_id_as_label(rest: str) -> Optional[Tuple[str, str]]:
    match = _ID_AS_LABEL.match(rest)
    if match and _TAIL_PATTERN.match(rest[match.end():]):
        return match.group(1), match.group(2)
    return None


def _match_bare_id(rest: str) -> Optional[Tuple[str, str]]:
    match = _BARE_ID.match(rest)
    if match and _TAIL_PATTERN.match(rest[match.end():]):
        return match.group(1), match.group(1)
    return None


# Priority order: first form that matches wins
_DECLARATION_FORMS: List[Callable[[str], Optional[Tuple[str, str]]]] = [
    _match_label_as_id,
    _match_id_as_label,
    _match_bare_id,
]


def is_candidate_declaration(line: str) -> bool:
    """A keyword line that carries no relation or constraint token."""
    return bool(_KEYWORD_PATTERN.match(line)) and not has_link_token(line)


def parse_declaration(line: str) -> Optional[Entity]:
    """
    Parse one line as an entity declaration.

    Recognised forms (checked independently, in priority order):
        kind "Label" as id
        kind id as "Label"
        kind id

    Args:
        line: A single line of PlantUML source

    Returns:
        Entity, or None if the line is not a well-formed declaration
    """
    if has_link_token(line):
        return None
    match = _KEYWORD_PATTERN.match(line)
    if not match:
        return None

    kind = match.group(1).lower()
    rest = match.group(2).strip()
    for form in _DECLARATION_FORMS:
        parsed = form(rest)
        if parsed is not None:
            entity_id, label = parsed
            return Entity(id=entity_id, label=label, kind=kind)
    return None


def _iter_code_lines(text: str):
    """Yield (line_number, line) for lines outside PlantUML comments."""
    in_block_comment = False
    for number, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if in_block_comment:
            if "'/" in stripped:
                in_block_comment = False
            continue
        if stripped.startswith("/'"):
            in_block_comment = "'/" not in stripped[2:]
            continue
        if stripped.startswith("'"):
            continue
        yield number, line


def extract_entities(text: str) -> List[Entity]:
    """
    Extract declared entities from PlantUML source.

    Malformed declarations are skipped without aborting the scan. The first
    declaration of an id wins; later ones are ignored.

    Args:
        text: PlantUML document text

    Returns:
        Entities in first-seen order
    """
    entities: List[Entity] = []
    seen: Set[str] = set()

    for number, line in _iter_code_lines(text):
        if not is_candidate_declaration(line):
            continue

        entity = parse_declaration(line)
        if entity is None:
            logger.debug(f"Skipping malformed declaration on line {number}: {line.strip()!r}")
            continue

        if entity.id in seen:
            logger.debug(f"Ignoring re-declaration of '{entity.id}' on line {number}")
            continue

        seen.add(entity.id)
        entities.append(entity)

    return entities
