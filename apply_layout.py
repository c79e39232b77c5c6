#!/usr/bin/env python3
"""
Apply Layout Script

Fold canvas positions into PlantUML source: positions → hidden-link constraints → patched .puml

Usage:
    python apply_layout.py --input diagram.puml --positions positions.yaml
    python apply_layout.py --input diagrams/ --positions positions.json --output patched/
    python apply_layout.py --input diagram.puml --init > positions.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from tqdm import tqdm

from layout_sync import LayoutSynchronizer, Position, SyncConfig, diagram_url

logger = logging.getLogger(__name__)


def load_positions(path: Path) -> Dict[str, Position]:
    """Load an id -> position map from YAML or JSON ({id: {x:, y:}} or {id: [x, y]})."""
    with open(path, "r", encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Positions file {path} must contain a mapping of id -> position")
    return {str(entity_id): Position.coerce(value) for entity_id, value in data.items()}


def _collect_inputs(input_path: Path) -> List[Path]:
    if input_path.is_dir():
        return sorted(input_path.glob("*.puml"))
    return [input_path]


def _output_path(source: Path, input_path: Path, output: Optional[Path]) -> Path:
    if output is None:
        return source
    if input_path.is_dir():
        return output / source.name
    return output


def apply_to_files(
    sync: LayoutSynchronizer,
    sources: List[Path],
    positions: Dict[str, Position],
    input_path: Path,
    output: Optional[Path],
    print_url: bool = False
) -> int:
    """Patch every source file; returns the number of files with structural warnings."""
    warned = 0
    for source in tqdm(sources, desc="Applying layout", disable=len(sources) < 2):
        text = source.read_text(encoding="utf-8")
        result = sync.apply_layout_with_report(text, positions)
        if result.warnings:
            warned += 1
            logger.warning(f"{source}: {', '.join(result.warnings)}")

        target = _output_path(source, input_path, output)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(result.text, encoding="utf-8")
        logger.info(f"Wrote {target}")

        if print_url:
            print(diagram_url(result.text))
    return warned


def main():
    parser = argparse.ArgumentParser(description="Fold canvas positions into PlantUML hidden-link constraints")
    parser.add_argument("--input", type=str, required=True, help="A .puml file or a directory of them")
    parser.add_argument("--positions", type=str, help="YAML/JSON file mapping entity id to position")
    parser.add_argument("--output", type=str, default=None, help="Output file/directory (default: in place)")
    parser.add_argument("--config", type=str, default=None, help="YAML file with SyncConfig overrides")
    parser.add_argument("--init", action="store_true", help="Print seed grid positions as JSON and exit")
    parser.add_argument("--print-url", action="store_true", help="Print the PlantUML server URL of each result")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    config = SyncConfig.from_yaml(args.config) if args.config else SyncConfig()
    sync = LayoutSynchronizer(config)
    input_path = Path(args.input)

    if args.init:
        if input_path.is_dir():
            parser.error("--init needs a single .puml file")
        nodes = sync.initialize_from_text(input_path.read_text(encoding="utf-8"))
        json.dump({n.entity.id: n.position.to_dict() for n in nodes}, sys.stdout, indent=2)
        print()
        return

    if not args.positions:
        parser.error("--positions is required unless --init is given")

    sources = _collect_inputs(input_path)
    if not sources:
        logger.warning(f"No .puml files found in {input_path}")
        return

    positions = load_positions(Path(args.positions))
    output = Path(args.output) if args.output else None
    warned = apply_to_files(sync, sources, positions, input_path, output, args.print_url)

    print(f"Done! {len(sources)} file(s) patched, {warned} with structural warnings")


if __name__ == "__main__":
    main()
