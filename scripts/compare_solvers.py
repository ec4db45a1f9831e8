#!/usr/bin/env python3
"""Benchmark every solver on mazes from every generator and sort runs by visited count."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mazeviz.base import write_report
from mazeviz.grid import create_grid
from mazeviz.maze import GenerationAlgorithm, SolverAlgorithm, compare_solvers, generate
from mazeviz.maze.evaluator import shortest_path_length


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--rows", type=int, default=25, help="Grid rows (odd values keep the lattice aligned)")
    parser.add_argument("--cols", type=int, default=35, help="Grid columns (odd values keep the lattice aligned)")
    parser.add_argument(
        "--seeds",
        type=int,
        default=5,
        help="Number of seeded mazes per generator",
    )
    parser.add_argument(
        "--generators",
        nargs="+",
        choices=[algorithm.value for algorithm in GenerationAlgorithm],
        default=[algorithm.value for algorithm in GenerationAlgorithm],
    )
    parser.add_argument(
        "--solvers",
        nargs="+",
        choices=[algorithm.value for algorithm in SolverAlgorithm],
        default=[algorithm.value for algorithm in SolverAlgorithm],
    )
    parser.add_argument(
        "--mode",
        choices=["shortest", "fast"],
        default="fast",
        help="'shortest' marks the solution path on each copy, 'fast' only measures it",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("data/compare/report.json"),
        help="Where to write the sorted JSON report",
    )
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args()


def main() -> None:
    args = _parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    if args.seeds < 1:
        raise ValueError("--seeds must be at least 1")

    records: List[dict] = []
    total = len(args.generators) * args.seeds
    index = 0
    for generator_name in args.generators:
        for seed in range(args.seeds):
            index += 1
            grid = generate(create_grid(args.rows, args.cols), generator_name, seed=seed)
            shortest = shortest_path_length(grid)
            stats = compare_solvers(grid, args.solvers, find_optimal_path=args.mode == "shortest")
            for entry in stats:
                record = entry.to_dict()
                record.update(generator=generator_name, seed=seed, shortest_path_length=shortest)
                records.append(record)
            print(f"[{index}/{total}] {generator_name} seed={seed} shortest={shortest}")

    records.sort(key=lambda item: (item["visited"], item["algorithm"], item["generator"], item["seed"]))
    write_report(records, args.output, append=False)
    print(f"Wrote {len(records)} runs to {args.output}")


if __name__ == "__main__":
    main()
