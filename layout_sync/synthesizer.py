"""
Constraint synthesis from canvas positions.

Core algorithm:
1. Pairwise displacement → dominant axis per pair (below min_gap → no constraint)
2. Per axis: directed "before" graph, edge weight = displacement along the axis
3. Break cycles (drop the lowest-margin edge), then transitive reduction
4. Merge axes, sort by (from, to, axis)
"""

import logging
import numpy as np
from collections import deque
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from .schema import Entity, Position, Constraint
from .constants import AXES, DEFAULT_MIN_GAP

logger = logging.getLogger(__name__)

Edge = Tuple[str, str]


class ConstraintInvariantError(Exception):
    """Raised when a constraint references an id outside the current entity set."""
    pass


def _adjacency(nodes: Sequence[str], edges: Mapping[Edge, float]) -> Dict[str, List[str]]:
    """Successor lists in deterministic (sorted) order."""
    adjacency: Dict[str, List[str]] = {node: [] for node in nodes}
    for u, v in edges:
        adjacency.setdefault(u, []).append(v)
        adjacency.setdefault(v, [])
    for successors in adjacency.values():
        successors.sort()
    return adjacency


def _find_cycle(nodes: Sequence[str], adjacency: Dict[str, List[str]]) -> Optional[List[Edge]]:
    """Iterative DFS; returns the edges of the first cycle found, or None."""
    white, gray, black = 0, 1, 2
    color = {node: white for node in adjacency}
    parent: Dict[str, str] = {}

    for root in list(nodes) + [n for n in adjacency if n not in nodes]:
        if color[root] != white:
            continue
        color[root] = gray
        stack = [(root, iter(adjacency[root]))]
        while stack:
            node, children = stack[-1]
            for child in children:
                if color[child] == gray:
                    # Walk back from node to child along the DFS tree
                    path = [node]
                    while path[-1] != child:
                        path.append(parent[path[-1]])
                    path.reverse()
                    return [(path[k], path[k + 1]) for k in range(len(path) - 1)] + [(node, child)]
                if color[child] == white:
                    color[child] = gray
                    parent[child] = node
                    stack.append((child, iter(adjacency[child])))
                    break
            else:
                color[node] = black
                stack.pop()
    return None


def break_cycles(nodes: Sequence[str], edges: Mapping[Edge, float]) -> Dict[Edge, float]:
    """
    Make a weighted "before" graph acyclic.

    While a cycle exists, drop its lowest-margin edge (ties broken by the
    edge's (from, to) ids), since that is the least confident ordering.

    Args:
        nodes: Node ids, in the order cycles are searched from
        edges: (from, to) -> margin

    Returns:
        New edge mapping without cycles
    """
    remaining = dict(edges)
    while True:
        cycle = _find_cycle(nodes, _adjacency(nodes, remaining))
        if cycle is None:
            return remaining
        weakest = min(cycle, key=lambda e: (remaining[e], e))
        logger.debug(f"Dropping contradictory ordering {weakest[0]} -> {weakest[1]} "
                     f"(margin {remaining[weakest]:.1f}) from cycle of length {len(cycle)}")
        del remaining[weakest]


def _topological_order(nodes: Sequence[str], adjacency: Dict[str, List[str]]) -> List[str]:
    """Topological sort (Kahn's algorithm)."""
    in_degree = {node: 0 for node in adjacency}
    for successors in adjacency.values():
        for child in successors:
            in_degree[child] += 1

    ordered_nodes = list(nodes) + [n for n in adjacency if n not in nodes]
    queue = deque([node for node in ordered_nodes if in_degree[node] == 0])
    order = []

    while queue:
        current = queue.popleft()
        order.append(current)
        for child in adjacency[current]:
            in_degree[child] -= 1
            if in_degree[child] == 0:
                queue.append(child)

    if len(order) != len(adjacency):
        raise ValueError("Graph contains a cycle; call break_cycles() first")
    return order


def transitive_reduction(nodes: Sequence[str], edges: Mapping[Edge, float]) -> Dict[Edge, float]:
    """
    Drop every edge implied by a longer path.

    An edge (u, v) is redundant when v is reachable from another successor
    of u. The graph must be acyclic.

    Returns:
        New edge mapping holding only the non-redundant edges
    """
    adjacency = _adjacency(nodes, edges)
    order = _topological_order(nodes, adjacency)

    descendants: Dict[str, Set[str]] = {}
    for node in reversed(order):
        reach: Set[str] = set()
        for child in adjacency[node]:
            reach.add(child)
            reach |= descendants[child]
        descendants[node] = reach

    reduced: Dict[Edge, float] = {}
    for (u, v), margin in edges.items():
        if any(v in descendants[w] for w in adjacency[u] if w != v):
            continue
        reduced[(u, v)] = margin
    return reduced


def validate_constraints(constraints: Iterable[Constraint], entities: Iterable[Entity]) -> None:
    """
    Check that constraints only reference known entity ids.

    Raises:
        ConstraintInvariantError: If any constraint names an unknown id
    """
    known = {e.id for e in entities}
    unknown = set()
    for c in constraints:
        for entity_id in (c.from_id, c.to_id):
            if entity_id not in known:
                unknown.add(entity_id)
    if unknown:
        raise ConstraintInvariantError(
            f"Constraints reference ids not in the entity set: {sorted(unknown)}"
        )


class ConstraintSynthesizer:
    """
    Derive a minimal, acyclic set of ordering constraints from canvas positions.

    Stateless apart from its threshold; safe to share between callers.
    """

    def __init__(self, min_gap: float = DEFAULT_MIN_GAP):
        """
        Args:
            min_gap: Displacement (px) at or below which two entities count as aligned
        """
        if min_gap < 0:
            raise ValueError(f"min_gap must be >= 0, got {min_gap}")
        self.min_gap = float(min_gap)

    def synthesize(self, entities: Sequence[Entity], positions: Mapping[str, Any]) -> List[Constraint]:
        """Synthesize constraints for the entities that have a position."""
        placed, coords = self._snapshot(entities, positions)
        if len(placed) < 2:
            return []

        constraints: List[Constraint] = []
        for axis, edges in self._pairwise_edges(placed, coords).items():
            acyclic = break_cycles(placed, edges)
            reduced = transitive_reduction(placed, acyclic)
            logger.debug(f"{axis}: {len(edges)} pairwise orderings reduced to {len(reduced)}")
            constraints.extend(Constraint(u, v, axis, "before") for u, v in reduced)

        constraints.sort(key=Constraint.sort_key)
        return constraints

    def _snapshot(self, entities: Sequence[Entity], positions: Mapping[str, Any]) -> Tuple[List[str], np.ndarray]:
        """Copy positions of placed entities into an (n, 2) array, in entity order."""
        placed: List[str] = []
        rows: List[Tuple[float, float]] = []
        for entity in entities:
            if entity.id not in positions:
                logger.debug(f"Entity '{entity.id}' has no position yet, skipping")
                continue
            pos = Position.coerce(positions[entity.id])
            if not pos.is_finite():
                logger.warning(f"Entity '{entity.id}' has non-finite position ({pos.x}, {pos.y}), skipping")
                continue
            placed.append(entity.id)
            rows.append((pos.x, pos.y))
        return placed, np.array(rows, dtype=float).reshape(-1, 2)

    def _pairwise_edges(self, ids: List[str], coords: np.ndarray) -> Dict[str, Dict[Edge, float]]:
        """Classify every pair by dominant axis; edges point from the earlier entity."""
        # delta[i, j] = coords[j] - coords[i]
        delta = coords[np.newaxis, :, :] - coords[:, np.newaxis, :]
        dx, dy = delta[..., 0], delta[..., 1]
        abs_dx, abs_dy = np.abs(dx), np.abs(dy)

        horizontal = (abs_dx > abs_dy) & (abs_dx > self.min_gap)
        vertical = ~horizontal & (abs_dy > self.min_gap)

        edges: Dict[str, Dict[Edge, float]] = {axis: {} for axis in AXES}
        rows, cols = np.triu_indices(len(ids), k=1)
        for i, j in zip(rows.tolist(), cols.tolist()):
            if horizontal[i, j]:
                u, v = (i, j) if dx[i, j] > 0 else (j, i)
                edges["horizontal"][(ids[u], ids[v])] = float(abs_dx[i, j])
            elif vertical[i, j]:
                u, v = (i, j) if dy[i, j] > 0 else (j, i)
                edges["vertical"][(ids[u], ids[v])] = float(abs_dy[i, j])
        return edges


def synthesize(
    entities: Sequence[Entity],
    positions: Mapping[str, Any],
    min_gap: float = DEFAULT_MIN_GAP
) -> List[Constraint]:
    """Synthesize ordering constraints from a position snapshot."""
    return ConstraintSynthesizer(min_gap).synthesize(entities, positions)
