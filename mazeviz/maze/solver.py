"""Graph searches from the start cell to the end cell of a carved grid.

Every search publishes one frame per expansion step through the step emitter:
the cells handled in that step are flagged ``is_current`` while the frame is
published, then cleared. A search stops as soon as the end cell is taken off
its frontier (or, for bidirectional BFS, as soon as both frontiers touch).

When ``find_optimal_path`` is set, the parent chain from the end cell back to
the start is marked ``is_path`` one frame at a time; otherwise the chain is
only measured. The flag never changes which cells are explored.
"""

from __future__ import annotations

import argparse
import heapq
import itertools
import json
import logging
import time
from collections import deque
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set, Tuple, Union

from ..base import AbstractMazeEngine, parse_algorithm
from ..grid import Cell, Coord, Grid, create_grid, neighbors4, reset_search_state
from ..render import save_animation
from ..steps import FrameRecorder, Sleeper, StepSink
from .generator import GenerationAlgorithm, generate

logger = logging.getLogger(__name__)


class SolverAlgorithm(str, Enum):
    DFS = "dfs"
    BFS = "bfs"
    DIJKSTRA = "dijkstra"
    ASTAR = "astar"
    GREEDY = "greedy"
    BIDIRECTIONAL = "bidirectional"
    BEST_FIRST = "bestfirst"


class SolverMode(str, Enum):
    SHORTEST = "shortest"
    FAST = "fast"

    @property
    def find_optimal_path(self) -> bool:
        return self is SolverMode.SHORTEST


@dataclass(frozen=True)
class AlgorithmInfo:
    name: str
    optimal: bool
    complete: bool


ALGORITHM_INFO: Dict[SolverAlgorithm, AlgorithmInfo] = {
    SolverAlgorithm.ASTAR: AlgorithmInfo("A* Search", optimal=True, complete=True),
    SolverAlgorithm.DIJKSTRA: AlgorithmInfo("Dijkstra's Algorithm", optimal=True, complete=True),
    SolverAlgorithm.BFS: AlgorithmInfo("Breadth-First Search", optimal=True, complete=True),
    SolverAlgorithm.DFS: AlgorithmInfo("Depth-First Search", optimal=False, complete=True),
    SolverAlgorithm.GREEDY: AlgorithmInfo("Greedy Best-First", optimal=False, complete=False),
    SolverAlgorithm.BIDIRECTIONAL: AlgorithmInfo("Bidirectional BFS", optimal=True, complete=True),
    SolverAlgorithm.BEST_FIRST: AlgorithmInfo("Best-First Search", optimal=False, complete=False),
}


@dataclass
class SolveResult:
    visited: int
    path_length: int

    @property
    def found(self) -> bool:
        return self.path_length > 0

    def to_dict(self) -> dict:
        return {"visited": self.visited, "path_length": self.path_length}


def heuristic(cell: Cell, target: Cell) -> int:
    """Manhattan distance; admissible on a 4-connected unit-cost grid."""

    return abs(cell.row - target.row) + abs(cell.col - target.col)


class _Frontier:
    """Binary heap where equal priorities pop in insertion order."""

    def __init__(self) -> None:
        self._heap: List[Tuple[float, int, Cell]] = []
        self._sequence = itertools.count()

    def __bool__(self) -> bool:
        return bool(self._heap)

    def push(self, priority: float, cell: Cell) -> None:
        heapq.heappush(self._heap, (priority, next(self._sequence), cell))

    def pop(self) -> Cell:
        return heapq.heappop(self._heap)[2]


class MazeSolver(AbstractMazeEngine[SolveResult]):
    """Run one of the search algorithms over a grid, animating its progress."""

    def __init__(
        self,
        *,
        step_sink: Optional[StepSink] = None,
        step_interval_ms: int = 0,
        find_optimal_path: bool = True,
        sleep: Sleeper = time.sleep,
    ) -> None:
        super().__init__(step_sink=step_sink, step_interval_ms=step_interval_ms, sleep=sleep)
        self.find_optimal_path = find_optimal_path
        self._searches: Dict[SolverAlgorithm, Callable[[Grid, Cell, Cell], SolveResult]] = {
            SolverAlgorithm.DFS: self._solve_dfs,
            SolverAlgorithm.BFS: self._solve_bfs,
            SolverAlgorithm.DIJKSTRA: self._solve_dijkstra,
            SolverAlgorithm.ASTAR: self._solve_astar,
            SolverAlgorithm.GREEDY: self._solve_greedy,
            SolverAlgorithm.BIDIRECTIONAL: self._solve_bidirectional,
            SolverAlgorithm.BEST_FIRST: self._solve_greedy,
        }

    def run(self, grid: Grid, algorithm: Union[str, SolverAlgorithm]) -> SolveResult:
        return self.solve(grid, algorithm)

    def solve(self, grid: Grid, algorithm: Union[str, SolverAlgorithm]) -> SolveResult:
        selected = parse_algorithm(SolverAlgorithm, algorithm)
        start, end = grid.start, grid.end
        if start is None or end is None:
            logger.debug("Grid has no start or end cell; nothing to search")
            return SolveResult(visited=0, path_length=0)
        result = self._searches[selected](grid, start, end)
        logger.debug(f"{selected.value}: visited={result.visited} path_length={result.path_length}")
        return result

    # ------------------------------------------------------------------

    def _finish(self, grid: Grid, reached: Cell, visited: int, frame: List[Cell]) -> SolveResult:
        self.emitter.commit(grid, frame)
        if self.find_optimal_path:
            length = self._reconstruct_path(grid, reached)
        else:
            length = _chain_length(grid, reached)
        return SolveResult(visited=visited, path_length=length)

    def _reconstruct_path(self, grid: Grid, reached: Cell) -> int:
        current: Optional[Cell] = reached
        length = 0
        while current is not None and not current.is_start:
            if not current.is_end:
                current.is_path = True
            current.is_current = False
            self.emitter.publish(grid)
            self.emitter.pause()
            current = grid[current.parent] if current.parent is not None else None
            length += 1
        return length

    def _solve_dfs(self, grid: Grid, start: Cell, end: Cell) -> SolveResult:
        stack = [start]
        visited = 0
        while stack:
            current = stack.pop()
            # The same cell may sit on the stack several times.
            if current.is_visited:
                continue
            current.is_visited = True
            current.is_current = True
            visited += 1
            frame = [current]
            if current.is_end:
                return self._finish(grid, current, visited, frame)

            for neighbor in neighbors4(current, grid):
                if not neighbor.is_visited:
                    neighbor.parent = current.coord
                    stack.append(neighbor)
            self.emitter.commit(grid, frame)
        return SolveResult(visited=visited, path_length=0)

    def _solve_bfs(self, grid: Grid, start: Cell, end: Cell) -> SolveResult:
        queue = deque([start])
        start.is_visited = True
        visited = 0
        while queue:
            frame: List[Cell] = []
            for _ in range(len(queue)):
                current = queue.popleft()
                current.is_current = True
                frame.append(current)
                visited += 1
                if current.is_end:
                    return self._finish(grid, current, visited, frame)

                for neighbor in neighbors4(current, grid):
                    if not neighbor.is_visited:
                        neighbor.is_visited = True
                        neighbor.parent = current.coord
                        queue.append(neighbor)
            self.emitter.commit(grid, frame)
        return SolveResult(visited=visited, path_length=0)

    def _solve_dijkstra(self, grid: Grid, start: Cell, end: Cell) -> SolveResult:
        start.distance = 0
        frontier = _Frontier()
        frontier.push(start.distance, start)
        visited = 0
        while frontier:
            current = frontier.pop()
            if current.is_visited:
                continue
            current.is_visited = True
            current.is_current = True
            visited += 1
            frame = [current]
            if current.is_end:
                return self._finish(grid, current, visited, frame)

            # Equal distances pop by expansion, then row-major within one expansion.
            for neighbor in sorted(neighbors4(current, grid), key=lambda cell: cell.coord):
                if neighbor.is_visited:
                    continue
                candidate = current.distance + 1
                if candidate < neighbor.distance:
                    neighbor.distance = candidate
                    neighbor.parent = current.coord
                    frontier.push(candidate, neighbor)
            self.emitter.commit(grid, frame)
        return SolveResult(visited=visited, path_length=0)

    def _solve_astar(self, grid: Grid, start: Cell, end: Cell) -> SolveResult:
        start.distance = 0
        start.heuristic = heuristic(start, end)
        frontier = _Frontier()
        frontier.push(start.distance + start.heuristic, start)
        visited = 0
        while frontier:
            current = frontier.pop()
            if current.is_visited:
                continue
            current.is_visited = True
            current.is_current = True
            visited += 1
            frame = [current]
            if current.is_end:
                return self._finish(grid, current, visited, frame)

            for neighbor in neighbors4(current, grid):
                if neighbor.is_visited:
                    continue
                tentative = current.distance + 1
                if tentative < neighbor.distance:
                    neighbor.parent = current.coord
                    neighbor.distance = tentative
                    neighbor.heuristic = heuristic(neighbor, end)
                    frontier.push(neighbor.distance + neighbor.heuristic, neighbor)
            self.emitter.commit(grid, frame)
        return SolveResult(visited=visited, path_length=0)

    def _solve_greedy(self, grid: Grid, start: Cell, end: Cell) -> SolveResult:
        start.heuristic = heuristic(start, end)
        frontier = _Frontier()
        frontier.push(start.heuristic, start)
        queued: Set[Coord] = {start.coord}
        visited = 0
        while frontier:
            current = frontier.pop()
            queued.discard(current.coord)
            if current.is_visited:
                continue
            current.is_visited = True
            current.is_current = True
            visited += 1
            frame = [current]
            if current.is_end:
                return self._finish(grid, current, visited, frame)

            for neighbor in neighbors4(current, grid):
                if not neighbor.is_visited and neighbor.coord not in queued:
                    neighbor.parent = current.coord
                    neighbor.heuristic = heuristic(neighbor, end)
                    frontier.push(neighbor.heuristic, neighbor)
                    queued.add(neighbor.coord)
            self.emitter.commit(grid, frame)
        return SolveResult(visited=visited, path_length=0)

    def _solve_bidirectional(self, grid: Grid, start: Cell, end: Cell) -> SolveResult:
        from_start = deque([start])
        from_end = deque([end])
        seen_start: Set[Coord] = {start.coord}
        seen_end: Set[Coord] = {end.coord}
        start.is_visited = True
        end.is_visited = True
        visited = 0

        while from_start and from_end:
            frame: List[Cell] = []

            current = from_start.popleft()
            current.is_current = True
            frame.append(current)
            visited += 1
            for neighbor in neighbors4(current, grid):
                if neighbor.coord in seen_end:
                    _splice(grid, neighbor, current)
                    neighbor.is_current = True
                    frame.append(neighbor)
                    return self._finish(grid, end, visited, frame)
                if neighbor.coord not in seen_start:
                    seen_start.add(neighbor.coord)
                    neighbor.is_visited = True
                    neighbor.parent = current.coord
                    from_start.append(neighbor)

            if from_end:
                current = from_end.popleft()
                current.is_current = True
                frame.append(current)
                visited += 1
                for neighbor in neighbors4(current, grid):
                    if neighbor.coord in seen_start:
                        _splice(grid, current, neighbor)
                        neighbor.is_current = True
                        frame.append(neighbor)
                        return self._finish(grid, end, visited, frame)
                    if neighbor.coord not in seen_end:
                        seen_end.add(neighbor.coord)
                        neighbor.is_visited = True
                        neighbor.parent = current.coord
                        from_end.append(neighbor)

            self.emitter.commit(grid, frame)
        return SolveResult(visited=visited, path_length=0)


def _splice(grid: Grid, end_side: Cell, start_side: Cell) -> None:
    """Reverse the end-tree chain from ``end_side`` so it hangs off ``start_side``.

    Afterwards every parent link from the end cell leads back to the start.
    """

    previous: Coord = start_side.coord
    node: Optional[Cell] = end_side
    while node is not None:
        following = grid[node.parent] if node.parent is not None else None
        node.parent = previous
        previous = node.coord
        node = following


def _chain_length(grid: Grid, reached: Cell) -> int:
    current: Optional[Cell] = reached
    length = 0
    while current is not None and not current.is_start:
        length += 1
        current = grid[current.parent] if current.parent is not None else None
    return length


def solve(
    grid: Grid,
    algorithm: Union[str, SolverAlgorithm],
    step_sink: Optional[StepSink] = None,
    step_interval_ms: int = 0,
    find_optimal_path: bool = True,
    *,
    sleep: Sleeper = time.sleep,
) -> SolveResult:
    """Search ``grid`` from its start to its end cell; see :class:`MazeSolver`."""

    solver = MazeSolver(
        step_sink=step_sink,
        step_interval_ms=step_interval_ms,
        find_optimal_path=find_optimal_path,
        sleep=sleep,
    )
    return solver.solve(grid, algorithm)


__all__ = [
    "ALGORITHM_INFO",
    "AlgorithmInfo",
    "MazeSolver",
    "SolveResult",
    "SolverAlgorithm",
    "SolverMode",
    "heuristic",
    "solve",
]


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a maze and search it from start to end")
    parser.add_argument("--rows", type=int, default=25)
    parser.add_argument("--cols", type=int, default=35)
    parser.add_argument(
        "--generator",
        choices=[algorithm.value for algorithm in GenerationAlgorithm],
        default=GenerationAlgorithm.RECURSIVE.value,
    )
    parser.add_argument(
        "--algorithm",
        choices=[algorithm.value for algorithm in SolverAlgorithm],
        default=SolverAlgorithm.ASTAR.value,
    )
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in SolverMode],
        default=SolverMode.SHORTEST.value,
        help="'shortest' animates the reconstructed path, 'fast' only measures it",
    )
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--delay", type=int, default=0, help="Pause between frames in milliseconds")
    parser.add_argument("--cell-size", type=int, default=16)
    parser.add_argument("--gif", type=Path, default=None, help="Optional animated GIF of the search")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    grid = generate(create_grid(args.rows, args.cols), args.generator, seed=args.seed)
    reset_search_state(grid)

    recorder = FrameRecorder() if args.gif is not None else None
    started = time.perf_counter()
    result = solve(
        grid,
        args.algorithm,
        step_sink=recorder,
        step_interval_ms=args.delay,
        find_optimal_path=SolverMode(args.mode).find_optimal_path,
    )
    payload = {
        "algorithm": args.algorithm,
        "generator": args.generator,
        **result.to_dict(),
        "time_ms": round((time.perf_counter() - started) * 1000.0, 3),
        "total_cells": grid.total_cells,
    }
    if recorder is not None and recorder.frames:
        save_animation(recorder.frames, args.gif, cell_size=args.cell_size)
        payload["gif_path"] = args.gif.as_posix()
    print(json.dumps(payload, indent=2))


if __name__ == "__main__":
    main()
