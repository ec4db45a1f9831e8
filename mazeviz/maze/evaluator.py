"""Structural checks for carved mazes and for solver paths."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from ..grid import PATH, Coord, Grid, bfs_distances


@dataclass
class PathEvaluation:
    connected: bool
    touches_goal: bool
    stray_in_walls: bool
    length: int
    message: str

    @property
    def is_valid(self) -> bool:
        return self.connected and self.touches_goal and not self.stray_in_walls

    def to_dict(self) -> dict:
        return {
            "connected": self.connected,
            "touches_goal": self.touches_goal,
            "stray_in_walls": self.stray_in_walls,
            "length": self.length,
            "message": self.message,
        }


def shortest_path_length(grid: Grid) -> int:
    """BFS step count from start to end, or 0 when either is missing or unreachable."""

    start, end = grid.start, grid.end
    if start is None or end is None:
        return 0
    return bfs_distances(grid, start.coord).get(end.coord, 0)


def interior_cell_count(grid: Grid) -> int:
    """Number of odd-coordinate lattice cells a generator carves."""

    return ((grid.rows - 1) // 2) * ((grid.cols - 1) // 2)


def carved_connector_count(grid: Grid) -> int:
    """Open wall slots between horizontally or vertically adjacent lattice cells."""

    walls = grid.to_array()
    horizontal = walls[1:-1:2, 2:-2:2]
    vertical = walls[2:-2:2, 1:-1:2]
    return int(np.count_nonzero(horizontal == PATH) + np.count_nonzero(vertical == PATH))


def is_perfect(grid: Grid) -> bool:
    """True when the carved lattice is a spanning tree of all interior cells."""

    walls = grid.to_array()
    lattice = walls[1:-1:2, 1:-1:2]
    if np.any(lattice != PATH):
        return False
    if carved_connector_count(grid) != interior_cell_count(grid) - 1:
        return False
    reachable = bfs_distances(grid, (1, 1))
    return all(
        (row, col) in reachable
        for row in range(1, grid.rows - 1, 2)
        for col in range(1, grid.cols - 1, 2)
    )


def traced_path(grid: Grid) -> List[Coord]:
    """Follow parent links from the end cell back to the start; start-first order.

    Returns an empty list when the chain does not reach the start cell.
    """

    end = grid.end
    if end is None:
        return []
    path: List[Coord] = []
    seen = set()
    current: Optional[Coord] = end.coord
    while current is not None and current not in seen:
        seen.add(current)
        path.append(current)
        if grid[current].is_start:
            path.reverse()
            return path
        current = grid[current].parent
    return []


def evaluate_path(grid: Grid, path: Sequence[Coord]) -> PathEvaluation:
    """Check that ``path`` walks open cells one step at a time from start to end."""

    cells = [tuple(map(int, coord)) for coord in path]
    start, end = grid.start, grid.end
    stray_in_walls = any(
        not grid.in_bounds(row, col) or grid.cells[row][col].is_wall for row, col in cells
    )
    touches_goal = end is not None and end.coord in cells
    connected = (
        bool(cells)
        and start is not None
        and end is not None
        and cells[0] == start.coord
        and cells[-1] == end.coord
        and _steps_are_adjacent(cells)
    )

    if not cells:
        message = "No path given."
    elif stray_in_walls:
        message = "Path crosses walls."
    elif not touches_goal:
        message = "Path does not reach the goal."
    elif not connected:
        message = "Path is not continuous from start to goal."
    else:
        message = "Path successfully connects start to goal."

    return PathEvaluation(
        connected=connected,
        touches_goal=touches_goal,
        stray_in_walls=stray_in_walls,
        length=max(len(cells) - 1, 0),
        message=message,
    )


def _steps_are_adjacent(cells: Sequence[Coord]) -> bool:
    return all(abs(r0 - r1) + abs(c0 - c1) == 1 for (r0, c0), (r1, c1) in zip(cells, cells[1:]))


__all__ = [
    "PathEvaluation",
    "carved_connector_count",
    "evaluate_path",
    "interior_cell_count",
    "is_perfect",
    "shortest_path_length",
    "traced_path",
]
