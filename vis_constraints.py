#!/usr/bin/env python3
"""
Plot the constraints a position snapshot produces for a PlantUML document.

Usage:
    python vis_constraints.py --input diagram.puml --positions positions.yaml --output layout.png
    python vis_constraints.py --input diagram.puml --output grid.png    # seed grid positions
"""

import argparse
from pathlib import Path

from layout_sync import LayoutSynchronizer, SyncConfig
from visualizer import ConstraintVisualizer
from apply_layout import load_positions


def main():
    parser = argparse.ArgumentParser(description="Visualize synthesized layout constraints")
    parser.add_argument("--input", type=str, required=True, help="PlantUML source file")
    parser.add_argument("--positions", type=str, default=None,
                        help="YAML/JSON positions file (default: seed grid)")
    parser.add_argument("--output", type=str, default="layout_constraints.png", help="Output image")
    parser.add_argument("--min-gap", type=float, default=None, help="Override the alignment threshold (px)")
    args = parser.parse_args()

    config = SyncConfig() if args.min_gap is None else SyncConfig(min_gap=args.min_gap)
    sync = LayoutSynchronizer(config)

    text = Path(args.input).read_text(encoding="utf-8")
    entities = sync.extract(text)
    if args.positions:
        positions = load_positions(Path(args.positions))
    else:
        positions = {n.entity.id: n.position for n in sync.initialize_from_text(text)}
    constraints = sync.synthesizer.synthesize(entities, positions)

    print(f'\n{"="*60}')
    print(f'Entities ({len(entities)}):')
    for entity in entities:
        pos = positions.get(entity.id)
        where = f'({pos.x:.0f}, {pos.y:.0f})' if pos is not None else 'unplaced'
        print(f'  - {entity.kind} {entity.id} "{entity.label}": {where}')
    print(f'\nConstraints ({len(constraints)}):')
    for c in constraints:
        print(f'  - {c.from_id} {c.direction} {c.to_id} [{c.axis}]')
    print(f'{"="*60}')

    viz = ConstraintVisualizer()
    viz.plot(entities, positions, constraints, title=Path(args.input).stem)
    path = viz.save(args.output)
    viz.close()
    print(f'Saved plot -> {path}')


if __name__ == "__main__":
    main()
