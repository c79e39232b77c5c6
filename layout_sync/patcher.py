"""
Constraint region patching.

The generated hidden links live between two sentinel comments. Every patch
drops the old region(s) and writes a freshly rendered one; all other lines are
copied through untouched.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from .schema import Entity, Constraint, PatchResult
from .config import SyncConfig
from .synthesizer import validate_constraints
from .constants import (
    LINK_DIRECTIONS, HIDDEN_LINK_MARKER,
    WARN_MISSING_CLOSING_DIRECTIVE, WARN_UNTERMINATED_REGION,
)

logger = logging.getLogger(__name__)


def render_constraint(constraint: Constraint) -> str:
    """Render one constraint as a PlantUML hidden link, e.g. ``A -[hidden]right-> B``."""
    keyword = LINK_DIRECTIONS[(constraint.axis, constraint.direction)]
    return f"{constraint.from_id} -[hidden]{keyword}-> {constraint.to_id}"


def _detect_newline(lines: Sequence[str]) -> str:
    for line in lines:
        if line.endswith("\r\n"):
            return "\r\n"
        if line.endswith("\n"):
            return "\n"
    return "\n"


def _has_line_ending(line: str) -> bool:
    return line.endswith(("\n", "\r"))


class SourcePatcher:
    """Replace the generated constraint region of a document."""

    def __init__(self, config: Optional[SyncConfig] = None):
        self.config = config or SyncConfig()

    def render_region(self, constraints: Iterable[Constraint]) -> List[str]:
        """Sentinel-delimited region lines (without line endings); empty if no constraints."""
        ordered = sorted(set(constraints), key=lambda c: (c.sort_key(), c.direction))
        if not ordered:
            return []
        return [self.config.region_begin] + [render_constraint(c) for c in ordered] + [self.config.region_end]

    def patch_with_report(
        self,
        text: str,
        constraints: Iterable[Constraint],
        entities: Optional[Sequence[Entity]] = None
    ) -> PatchResult:
        """
        Write constraints into the document.

        Args:
            text: Document text
            constraints: Constraints to render
            entities: If given, constraints are checked against these ids first

        Returns:
            PatchResult with the new text and structural warnings

        Raises:
            ConstraintInvariantError: If entities is given and a constraint references an unknown id
        """
        constraints = list(constraints)
        if entities is not None:
            validate_constraints(constraints, entities)

        lines = text.splitlines(keepends=True)
        newline = _detect_newline(lines)
        body, insert_at, warnings = self._strip_regions(lines)

        closing_at = self._closing_index(body)
        if closing_at is None:
            warnings.append(WARN_MISSING_CLOSING_DIRECTIVE)

        region = self.render_region(constraints)
        if region:
            if insert_at is None:
                insert_at = closing_at if closing_at is not None else len(body)
            if insert_at == len(body) and body and not _has_line_ending(body[-1]):
                body[-1] += newline
            body[insert_at:insert_at] = [line + newline for line in region]

        return PatchResult(text="".join(body), warnings=warnings)

    def patch(
        self,
        text: str,
        constraints: Iterable[Constraint],
        entities: Optional[Sequence[Entity]] = None
    ) -> str:
        """Same as patch_with_report, logging warnings and returning only the text."""
        result = self.patch_with_report(text, constraints, entities)
        for warning in result.warnings:
            logger.warning(f"Structural warning while patching: {warning}")
        return result.text

    def _is_begin(self, line: str) -> bool:
        return line.strip() == self.config.region_begin

    def _is_end(self, line: str) -> bool:
        return line.strip() == self.config.region_end

    def _closing_index(self, lines: Sequence[str]) -> Optional[int]:
        directive = self.config.closing_directive.lower()
        for index, line in enumerate(lines):
            if line.strip().lower() == directive:
                return index
        return None

    def _region_end(self, lines: Sequence[str], begin: int) -> Optional[int]:
        """Index of the end sentinel closing the region opened at `begin`."""
        for index in range(begin + 1, len(lines)):
            if self._is_end(lines[index]):
                return index
            if self._is_begin(lines[index]):
                return None
        return None

    def _strip_regions(self, lines: Sequence[str]) -> Tuple[List[str], Optional[int], List[str]]:
        """
        Remove every generated region.

        Returns:
            (remaining lines, index where the first region was, warnings)
        """
        body: List[str] = []
        insert_at: Optional[int] = None
        warnings: List[str] = []

        index = 0
        while index < len(lines):
            if not self._is_begin(lines[index]):
                body.append(lines[index])
                index += 1
                continue

            if insert_at is None:
                insert_at = len(body)
            end = self._region_end(lines, index)
            if end is None:
                # Region lost its end sentinel: take the hidden links right after the begin line
                if WARN_UNTERMINATED_REGION not in warnings:
                    warnings.append(WARN_UNTERMINATED_REGION)
                end = index
                while end + 1 < len(lines) and HIDDEN_LINK_MARKER in lines[end + 1].lower():
                    end += 1
            index = end + 1

        return body, insert_at, warnings


def patch_with_report(
    text: str,
    constraints: Iterable[Constraint],
    entities: Optional[Sequence[Entity]] = None,
    config: Optional[SyncConfig] = None
) -> PatchResult:
    """Patch a document and report structural warnings."""
    return SourcePatcher(config).patch_with_report(text, constraints, entities)


def patch(
    text: str,
    constraints: Iterable[Constraint],
    entities: Optional[Sequence[Entity]] = None,
    config: Optional[SyncConfig] = None
) -> str:
    """Patch a document and return the new text."""
    return SourcePatcher(config).patch(text, constraints, entities)
