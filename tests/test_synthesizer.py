"""Tests for constraint synthesis, cycle breaking and transitive reduction."""

import logging

import numpy as np
import pytest

from layout_sync import (
    Constraint,
    ConstraintInvariantError,
    ConstraintSynthesizer,
    Entity,
    Position,
    break_cycles,
    synthesize,
    transitive_reduction,
    validate_constraints,
)


def _entities(*ids: str) -> list:
    return [Entity(i, i, "class") for i in ids]


class TestPairClassification:
    def test_horizontal_before(self) -> None:
        result = synthesize(_entities("A", "B"), {"A": (0, 0), "B": (200, 0)}, min_gap=10)
        assert result == [Constraint("A", "B", "horizontal", "before")]

    def test_direction_follows_sign_not_declaration_order(self) -> None:
        result = synthesize(_entities("A", "B"), {"A": (200, 0), "B": (0, 0)})
        assert result == [Constraint("B", "A", "horizontal", "before")]

    def test_vertical_before(self) -> None:
        result = synthesize(_entities("A", "B"), {"A": (0, 300), "B": (40, 0)})
        assert result == [Constraint("B", "A", "vertical", "before")]

    def test_below_threshold_is_suppressed(self) -> None:
        assert synthesize(_entities("A", "B"), {"A": (0, 0), "B": (2, 1)}, min_gap=10) == []

    def test_dominant_axis_below_threshold_is_suppressed(self) -> None:
        assert synthesize(_entities("A", "B"), {"A": (0, 0), "B": (8, 3)}, min_gap=10) == []

    def test_diagonal_tie_is_vertical(self) -> None:
        result = synthesize(_entities("A", "B"), {"A": (0, 0), "B": (100, 100)})
        assert result == [Constraint("A", "B", "vertical", "before")]

    def test_accepts_position_shapes(self) -> None:
        positions = {"A": Position(0, 0), "B": {"x": 150, "y": 5}}
        assert synthesize(_entities("A", "B"), positions) == [Constraint("A", "B", "horizontal")]


class TestEdgeCases:
    def test_empty_and_singleton(self) -> None:
        assert synthesize([], {}) == []
        assert synthesize(_entities("A"), {"A": (0, 0)}) == []

    def test_unplaced_entity_gets_no_constraints(self) -> None:
        result = synthesize(_entities("A", "B", "C"), {"A": (0, 0), "C": (300, 0)})
        assert result == [Constraint("A", "C", "horizontal")]

    def test_non_finite_position_is_skipped(self, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="layout_sync.synthesizer"):
            result = synthesize(_entities("A", "B"), {"A": (0, 0), "B": (float("nan"), 0)})
        assert result == []
        assert "non-finite" in caplog.text

    def test_invalid_position_raises(self) -> None:
        with pytest.raises(ValueError):
            synthesize(_entities("A", "B"), {"A": (0, 0), "B": "left"})

    def test_negative_gap_rejected(self) -> None:
        with pytest.raises(ValueError):
            ConstraintSynthesizer(min_gap=-1)

    def test_positions_are_not_mutated(self) -> None:
        positions = {"A": [0, 0], "B": [200, 0]}
        synthesize(_entities("A", "B"), positions)
        assert positions == {"A": [0, 0], "B": [200, 0]}


class TestScenarios:
    def test_triangle(self, abc_entities, triangle_positions) -> None:
        assert synthesize(abc_entities, triangle_positions) == [
            Constraint("A", "B", "horizontal", "before"),
            Constraint("A", "C", "vertical", "before"),
            Constraint("B", "C", "vertical", "before"),
        ]

    def test_row_is_transitively_reduced(self) -> None:
        positions = {"A": (0, 0), "B": (100, 20), "C": (200, 40)}
        assert synthesize(_entities("A", "B", "C"), positions) == [
            Constraint("A", "B", "horizontal"),
            Constraint("B", "C", "horizontal"),
        ]

    def test_reduction_only_uses_paths_on_the_same_axis(self) -> None:
        positions = {"A": (0, 0), "B": (100, 0), "C": (200, 0), "D": (100, 200)}
        assert synthesize(_entities("A", "B", "C", "D"), positions) == [
            Constraint("A", "B", "horizontal"),
            Constraint("A", "D", "vertical"),
            Constraint("B", "C", "horizontal"),
            Constraint("B", "D", "vertical"),
            Constraint("C", "D", "vertical"),
        ]

    def test_no_pair_repeated(self) -> None:
        rng = np.random.RandomState(7)
        ids = [f"E{i}" for i in range(12)]
        positions = {i: tuple(rng.uniform(0, 800, size=2)) for i in ids}
        result = synthesize(_entities(*ids), positions)
        pairs = [frozenset((c.from_id, c.to_id)) for c in result]
        assert len(pairs) == len(set(pairs))
        assert result == sorted(result, key=Constraint.sort_key)

    @pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
    def test_acyclic_on_both_axes(self, seed: int) -> None:
        rng = np.random.RandomState(seed)
        ids = [f"N{i}" for i in range(15)]
        # Coarse grid forces many aligned and near-aligned pairs
        positions = {i: tuple(rng.randint(0, 5, size=2) * 40.0) for i in ids}
        result = synthesize(_entities(*ids), positions)
        for axis in ("horizontal", "vertical"):
            edges = {(c.from_id, c.to_id): 1.0 for c in result if c.axis == axis}
            assert break_cycles(ids, edges) == edges
            # Already reduced: reducing again changes nothing
            assert transitive_reduction(ids, edges) == edges


class TestGraphHelpers:
    def test_break_cycles_drops_lowest_margin_edge(self) -> None:
        edges = {("A", "B"): 50.0, ("B", "C"): 30.0, ("C", "A"): 10.0}
        assert break_cycles(["A", "B", "C"], edges) == {("A", "B"): 50.0, ("B", "C"): 30.0}

    def test_break_cycles_tie_broken_by_ids(self) -> None:
        edges = {("A", "B"): 5.0, ("B", "A"): 5.0}
        assert break_cycles(["A", "B"], edges) == {("B", "A"): 5.0}

    def test_break_cycles_leaves_input_untouched(self) -> None:
        edges = {("A", "B"): 1.0, ("B", "A"): 2.0}
        break_cycles(["A", "B"], edges)
        assert len(edges) == 2

    def test_transitive_reduction(self) -> None:
        edges = {("A", "B"): 1.0, ("B", "C"): 1.0, ("A", "C"): 2.0, ("C", "D"): 1.0, ("A", "D"): 3.0}
        assert transitive_reduction(["A", "B", "C", "D"], edges) == {
            ("A", "B"): 1.0, ("B", "C"): 1.0, ("C", "D"): 1.0,
        }

    def test_transitive_reduction_requires_dag(self) -> None:
        with pytest.raises(ValueError):
            transitive_reduction(["A", "B"], {("A", "B"): 1.0, ("B", "A"): 1.0})


class TestValidateConstraints:
    def test_known_ids_pass(self, abc_entities) -> None:
        validate_constraints([Constraint("A", "B", "horizontal")], abc_entities)

    def test_unknown_id_raises(self, abc_entities) -> None:
        with pytest.raises(ConstraintInvariantError, match="Z"):
            validate_constraints([Constraint("A", "Z", "vertical")], abc_entities)

    def test_constraint_rejects_bad_axis(self) -> None:
        with pytest.raises(ValueError):
            Constraint("A", "B", "diagonal")
