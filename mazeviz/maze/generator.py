"""Maze generation over the odd-coordinate cell lattice of a grid."""

from __future__ import annotations

import argparse
import json
import logging
import time
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set, Tuple, Union

from ..base import AbstractMazeEngine, parse_algorithm
from ..grid import Cell, Coord, Grid, bfs_distances, create_grid, reset_search_state
from ..render import render_grid
from ..steps import Sleeper, StepSink
from .evaluator import carved_connector_count, interior_cell_count, is_perfect, shortest_path_length

logger = logging.getLogger(__name__)

# Carving moves between lattice cells, two steps apart: up, down, left, right.
LATTICE_DIRECTIONS: Tuple[Coord, ...] = ((-2, 0), (2, 0), (0, -2), (0, 2))


class GenerationAlgorithm(str, Enum):
    RECURSIVE = "recursive"
    KRUSKAL = "kruskal"
    PRIM = "prim"
    WILSON = "wilson"
    ELLER = "eller"
    BINARY_TREE = "binarytree"
    SIDEWINDER = "sidewinder"
    ALDOUS_BRODER = "aldousbroder"
    HUNT_AND_KILL = "huntandkill"


class DisjointSets:
    """Union-find over lattice coordinates with path compression and union by rank."""

    def __init__(self) -> None:
        self._parent: Dict[Coord, Coord] = {}
        self._rank: Dict[Coord, int] = {}

    def add(self, item: Coord) -> None:
        self._parent[item] = item
        self._rank[item] = 0

    def find(self, item: Coord) -> Coord:
        root = item
        while self._parent[root] != root:
            root = self._parent[root]
        while self._parent[item] != root:
            self._parent[item], item = root, self._parent[item]
        return root

    def union(self, first: Coord, second: Coord) -> bool:
        root_a, root_b = self.find(first), self.find(second)
        if root_a == root_b:
            return False
        if self._rank[root_a] < self._rank[root_b]:
            root_a, root_b = root_b, root_a
        self._parent[root_b] = root_a
        if self._rank[root_a] == self._rank[root_b]:
            self._rank[root_a] += 1
        return True


class MazeGenerator(AbstractMazeEngine[Grid]):
    """Carve a maze into a grid in place, then guarantee start and end connect."""

    def __init__(
        self,
        *,
        step_sink: Optional[StepSink] = None,
        step_interval_ms: int = 0,
        seed: Optional[int] = None,
        sleep: Sleeper = time.sleep,
    ) -> None:
        super().__init__(step_sink=step_sink, step_interval_ms=step_interval_ms, seed=seed, sleep=sleep)
        self._carvers: Dict[GenerationAlgorithm, Callable[[Grid], None]] = {
            GenerationAlgorithm.RECURSIVE: self._carve_recursive_backtracking,
            GenerationAlgorithm.KRUSKAL: self._carve_kruskal,
            GenerationAlgorithm.PRIM: self._carve_prim,
            GenerationAlgorithm.WILSON: self._carve_wilson,
            GenerationAlgorithm.ELLER: self._carve_eller,
            GenerationAlgorithm.BINARY_TREE: self._carve_binary_tree,
            GenerationAlgorithm.SIDEWINDER: self._carve_sidewinder,
            GenerationAlgorithm.ALDOUS_BRODER: self._carve_aldous_broder,
            GenerationAlgorithm.HUNT_AND_KILL: self._carve_hunt_and_kill,
        }

    def run(self, grid: Grid, algorithm: Union[str, GenerationAlgorithm]) -> Grid:
        return self.generate(grid, algorithm)

    def generate(self, grid: Grid, algorithm: Union[str, GenerationAlgorithm]) -> Grid:
        """Reset ``grid`` to walls, carve it with ``algorithm`` and repair connectivity."""

        selected = parse_algorithm(GenerationAlgorithm, algorithm)
        logger.debug(f"Generating {grid.rows}x{grid.cols} maze with {selected.value}")
        self._reset(grid)
        self.emitter.carve(grid)
        self._carvers[selected](grid)
        repair_connectivity(grid)
        self.emitter.publish(grid)
        return grid

    # ------------------------------------------------------------------

    @staticmethod
    def _reset(grid: Grid) -> None:
        reset_search_state(grid)
        for cell in grid:
            cell.is_wall = not (cell.is_start or cell.is_end)

    def _carve_recursive_backtracking(self, grid: Grid) -> None:
        first = grid.cells[1][1]
        first.is_wall = False
        first.is_visited = True
        stack = [first]
        while stack:
            current = stack[-1]
            options = [cell for cell in _lattice_neighbors(grid, current) if not cell.is_visited]
            if not options:
                stack.pop()
                continue
            chosen = self._rng.choice(options)
            _open_between(grid, current, chosen)
            chosen.is_wall = False
            chosen.is_visited = True
            stack.append(chosen)
            self.emitter.carve(grid)
        _clear_visited(grid)

    def _carve_kruskal(self, grid: Grid) -> None:
        sets = DisjointSets()
        walls: List[Tuple[Coord, Cell, Cell]] = []
        for cell in _lattice_cells(grid):
            sets.add(cell.coord)
            cell.is_wall = False
            if cell.col + 2 < grid.cols - 1:
                walls.append(((cell.row, cell.col + 1), cell, grid.cells[cell.row][cell.col + 2]))
            if cell.row + 2 < grid.rows - 1:
                walls.append(((cell.row + 1, cell.col), cell, grid.cells[cell.row + 2][cell.col]))

        self._rng.shuffle(walls)
        for (row, col), first, second in walls:
            if sets.union(first.coord, second.coord):
                grid.cells[row][col].is_wall = False
                self.emitter.carve(grid)

    def _carve_prim(self, grid: Grid) -> None:
        first = self._rng.choice(_lattice_cells(grid))
        first.is_wall = False
        in_maze: Set[Coord] = {first.coord}
        frontier: List[Tuple[Cell, Cell]] = []

        def add_walls(cell: Cell) -> None:
            for neighbor in _lattice_neighbors(grid, cell):
                if neighbor.coord not in in_maze:
                    wall = grid.cells[(cell.row + neighbor.row) // 2][(cell.col + neighbor.col) // 2]
                    frontier.append((wall, neighbor))

        add_walls(first)
        while frontier:
            index = self._rng.randrange(len(frontier))
            frontier[index], frontier[-1] = frontier[-1], frontier[index]
            wall, far = frontier.pop()
            if far.coord in in_maze:
                continue
            wall.is_wall = False
            far.is_wall = False
            in_maze.add(far.coord)
            add_walls(far)
            self.emitter.carve(grid)

    def _carve_wilson(self, grid: Grid) -> None:
        cells = _lattice_cells(grid)
        for cell in cells:
            cell.is_wall = False
        in_maze: Set[Coord] = {self._rng.choice(cells).coord}
        remaining = [cell for cell in cells if cell.coord not in in_maze]

        while remaining:
            current = self._rng.choice(remaining)
            walk = [current]
            positions = {current.coord: 0}
            while current.coord not in in_maze:
                step = self._rng.choice(_lattice_neighbors(grid, current))
                loop_at = positions.get(step.coord)
                if loop_at is not None:
                    for erased in walk[loop_at + 1:]:
                        del positions[erased.coord]
                    del walk[loop_at + 1:]
                else:
                    positions[step.coord] = len(walk)
                    walk.append(step)
                current = step

            for here, there in zip(walk, walk[1:]):
                _open_between(grid, here, there)
                in_maze.add(here.coord)
                self.emitter.carve(grid, interval_ms=self.emitter.interval_ms / 2)
            remaining = [cell for cell in remaining if cell.coord not in in_maze]

    def _carve_eller(self, grid: Grid) -> None:
        rows = list(range(1, grid.rows - 1, 2))
        cols = list(range(1, grid.cols - 1, 2))
        next_set = 0
        row_sets: Dict[int, int] = {}

        for row in rows:
            last_row = row == rows[-1]
            for col in cols:
                if col not in row_sets:
                    row_sets[col] = next_set
                    next_set += 1
                grid.cells[row][col].is_wall = False

            for left, right in zip(cols, cols[1:]):
                kept, merged = row_sets[left], row_sets[right]
                if kept != merged and (last_row or self._rng.random() < 0.5):
                    grid.cells[row][left + 1].is_wall = False
                    for col, set_id in row_sets.items():
                        if set_id == merged:
                            row_sets[col] = kept
                    self.emitter.carve(grid)

            if last_row:
                break
            below: Dict[int, int] = {}
            dropped: Set[int] = set()
            for col in cols:
                set_id = row_sets[col]
                if set_id not in dropped or self._rng.random() < 0.5:
                    grid.cells[row + 1][col].is_wall = False
                    below[col] = set_id
                    dropped.add(set_id)
                    self.emitter.carve(grid)
            row_sets = below

    def _carve_binary_tree(self, grid: Grid) -> None:
        for cell in _lattice_cells(grid):
            cell.is_wall = False
            options: List[Coord] = []
            if cell.row > 1:
                options.append((-1, 0))
            if cell.col > 1:
                options.append((0, -1))
            if options:
                dr, dc = self._rng.choice(options)
                grid.cells[cell.row + dr][cell.col + dc].is_wall = False
                self.emitter.carve(grid)

    def _carve_sidewinder(self, grid: Grid) -> None:
        cols = list(range(1, grid.cols - 1, 2))
        for row in range(1, grid.rows - 1, 2):
            run: List[int] = []
            for col in cols:
                grid.cells[row][col].is_wall = False
                run.append(col)
                if col < cols[-1] and (row == 1 or self._rng.random() < 0.5):
                    grid.cells[row][col + 1].is_wall = False
                else:
                    north = self._rng.choice(run)
                    if row > 1:
                        grid.cells[row - 1][north].is_wall = False
                    run = []
                self.emitter.carve(grid)

    def _carve_aldous_broder(self, grid: Grid) -> None:
        cells = _lattice_cells(grid)
        for cell in cells:
            cell.is_wall = False
        current = self._rng.choice(cells)
        current.is_visited = True
        unvisited = len(cells) - 1
        while unvisited > 0:
            step = self._rng.choice(_lattice_neighbors(grid, current))
            if not step.is_visited:
                _open_between(grid, current, step)
                step.is_visited = True
                unvisited -= 1
                self.emitter.carve(grid)
            current = step
        _clear_visited(grid)

    def _carve_hunt_and_kill(self, grid: Grid) -> None:
        cells = _lattice_cells(grid)
        for cell in cells:
            cell.is_wall = False
        current: Optional[Cell] = self._rng.choice(cells)
        current.is_visited = True

        while current is not None:
            options = [cell for cell in _lattice_neighbors(grid, current) if not cell.is_visited]
            if options:
                chosen = self._rng.choice(options)
                _open_between(grid, current, chosen)
                chosen.is_visited = True
                current = chosen
                self.emitter.carve(grid)
                continue

            # Hunt: first unvisited cell (row-major) bordering the visited region.
            current = None
            for cell in cells:
                if cell.is_visited:
                    continue
                anchors = [other for other in _lattice_neighbors(grid, cell) if other.is_visited]
                if anchors:
                    _open_between(grid, cell, self._rng.choice(anchors))
                    cell.is_visited = True
                    current = cell
                    self.emitter.carve(grid)
                    break
        _clear_visited(grid)


def repair_connectivity(grid: Grid) -> bool:
    """Carve a straight corridor from start to end if no path joins them.

    The corridor moves along rows first, then along columns. Returns ``True``
    when a corridor had to be carved.
    """

    start = grid.start or grid.cells[1][1]
    end = grid.end or grid.cells[grid.rows - 2][grid.cols - 2]
    if end.coord in bfs_distances(grid, start.coord):
        return False

    row, col = start.coord
    while (row, col) != end.coord:
        if row != end.row:
            row += 1 if row < end.row else -1
        else:
            col += 1 if col < end.col else -1
        grid.cells[row][col].is_wall = False
    logger.info(f"End {end.coord} was unreachable from start {start.coord}; carved a corridor")
    return True


def generate(
    grid: Grid,
    algorithm: Union[str, GenerationAlgorithm],
    step_sink: Optional[StepSink] = None,
    step_interval_ms: int = 0,
    *,
    seed: Optional[int] = None,
    sleep: Sleeper = time.sleep,
) -> Grid:
    """Carve ``grid`` in place with ``algorithm``; see :class:`MazeGenerator`."""

    generator = MazeGenerator(step_sink=step_sink, step_interval_ms=step_interval_ms, seed=seed, sleep=sleep)
    return generator.generate(grid, algorithm)


def _lattice_cells(grid: Grid) -> List[Cell]:
    return [
        grid.cells[row][col]
        for row in range(1, grid.rows - 1, 2)
        for col in range(1, grid.cols - 1, 2)
    ]


def _lattice_neighbors(grid: Grid, cell: Cell) -> List[Cell]:
    result: List[Cell] = []
    for dr, dc in LATTICE_DIRECTIONS:
        row, col = cell.row + dr, cell.col + dc
        if 0 < row < grid.rows - 1 and 0 < col < grid.cols - 1:
            result.append(grid.cells[row][col])
    return result


def _open_between(grid: Grid, first: Cell, second: Cell) -> None:
    grid.cells[(first.row + second.row) // 2][(first.col + second.col) // 2].is_wall = False


def _clear_visited(grid: Grid) -> None:
    for cell in grid:
        cell.is_visited = False


__all__ = [
    "DisjointSets",
    "GenerationAlgorithm",
    "MazeGenerator",
    "generate",
    "repair_connectivity",
]


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a maze and report its structure")
    parser.add_argument("--rows", type=int, default=25)
    parser.add_argument("--cols", type=int, default=35)
    parser.add_argument(
        "--algorithm",
        choices=[algorithm.value for algorithm in GenerationAlgorithm],
        default=GenerationAlgorithm.RECURSIVE.value,
    )
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--cell-size", type=int, default=16)
    parser.add_argument("--output", type=Path, default=None, help="Optional PNG path for the carved maze")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    grid = generate(create_grid(args.rows, args.cols), args.algorithm, seed=args.seed)
    summary = {
        "algorithm": args.algorithm,
        "rows": grid.rows,
        "cols": grid.cols,
        "open_cells": grid.open_cell_count(),
        "interior_cells": interior_cell_count(grid),
        "carved_connectors": carved_connector_count(grid),
        "perfect": is_perfect(grid),
        "shortest_path_length": shortest_path_length(grid),
    }
    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        render_grid(grid, cell_size=args.cell_size).save(args.output)
        summary["image_path"] = args.output.as_posix()
    print(json.dumps(summary, indent=2))


if __name__ == "__main__":
    main()
