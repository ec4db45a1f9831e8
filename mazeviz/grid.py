"""Cell grid shared by the maze generator and the path solver."""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, replace
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

Coord = Tuple[int, int]  # (row, col)

WALL = 1
PATH = 0

# Fixed order: up, down, left, right. Searches break ties on it.
DIRECTIONS: Tuple[Coord, ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))


@dataclass
class Cell:
    row: int
    col: int
    is_wall: bool = True
    is_start: bool = False
    is_end: bool = False
    is_visited: bool = False
    is_path: bool = False
    is_current: bool = False
    distance: float = math.inf
    heuristic: int = 0
    parent: Optional[Coord] = None

    @property
    def coord(self) -> Coord:
        return (self.row, self.col)

    def to_dict(self) -> dict:
        return {
            "row": self.row,
            "col": self.col,
            "is_wall": self.is_wall,
            "is_start": self.is_start,
            "is_end": self.is_end,
            "is_visited": self.is_visited,
            "is_path": self.is_path,
            "is_current": self.is_current,
        }


class Grid:
    """Rectangular ``rows x cols`` collection of cells, origin top-left."""

    def __init__(self, rows: int, cols: int, cells: List[List[Cell]]) -> None:
        self.rows = rows
        self.cols = cols
        self.cells = cells

    def __getitem__(self, coord: Coord) -> Cell:
        row, col = coord
        return self.cells[row][col]

    def __iter__(self) -> Iterator[Cell]:
        for row in self.cells:
            yield from row

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    @property
    def start(self) -> Optional[Cell]:
        return next((cell for cell in self if cell.is_start), None)

    @property
    def end(self) -> Optional[Cell]:
        return next((cell for cell in self if cell.is_end), None)

    @property
    def total_cells(self) -> int:
        return self.rows * self.cols

    def open_cell_count(self) -> int:
        return sum(1 for cell in self if not cell.is_wall)

    def snapshot(self) -> "Grid":
        """Return an independent copy; later mutations do not leak into it."""

        return Grid(self.rows, self.cols, [[replace(cell) for cell in row] for row in self.cells])

    def to_array(self) -> np.ndarray:
        """Wall matrix, ``WALL`` where the cell is a wall and ``PATH`` otherwise."""

        return np.array(
            [[WALL if cell.is_wall else PATH for cell in row] for row in self.cells],
            dtype=np.uint8,
        )

    def move_start(self, row: int, col: int) -> None:
        self._move_endpoint("start", row, col)

    def move_end(self, row: int, col: int) -> None:
        self._move_endpoint("end", row, col)

    # ------------------------------------------------------------------

    def _move_endpoint(self, kind: str, row: int, col: int) -> None:
        if not self.in_bounds(row, col):
            raise ValueError(f"({row}, {col}) is outside the {self.rows}x{self.cols} grid")
        target = self.cells[row][col]
        if target.is_wall:
            raise ValueError("Cannot place on a wall. Choose an open cell.")
        if target.is_start or target.is_end:
            raise ValueError(f"Position ({row}, {col}) already occupied")
        for cell in self:
            if kind == "start":
                cell.is_start = cell is target
            else:
                cell.is_end = cell is target


def create_grid(rows: int, cols: int) -> Grid:
    """Build an all-wall grid with start at (1, 1) and end at (rows-2, cols-2)."""

    if rows < 3 or cols < 3:
        raise ValueError("rows and cols must be at least 3")
    cells = [[Cell(row=r, col=c) for c in range(cols)] for r in range(rows)]
    start = cells[1][1]
    start.is_start = True
    start.is_wall = False
    end = cells[rows - 2][cols - 2]
    end.is_end = True
    end.is_wall = False
    return Grid(rows, cols, cells)


def neighbors4(cell: Cell, grid: Grid) -> List[Cell]:
    """Open cells directly up, down, left and right of ``cell``, in that order."""

    result: List[Cell] = []
    for dr, dc in DIRECTIONS:
        nr, nc = cell.row + dr, cell.col + dc
        if grid.in_bounds(nr, nc) and not grid.cells[nr][nc].is_wall:
            result.append(grid.cells[nr][nc])
    return result


def reset_search_state(grid: Grid, *, preserve_endpoints: bool = False) -> None:
    """Clear visited/path/current/distance/parent on every cell.

    With ``preserve_endpoints`` the start and end cells keep their visited flag.
    After a search that marked the start visited, DFS, Dijkstra, A*, Greedy and
    Best-First skip it on the next run and return ``(0, 0)``; reset with the
    default to search again from scratch.
    """

    for cell in grid:
        if not (preserve_endpoints and (cell.is_start or cell.is_end)):
            cell.is_visited = False
        cell.is_path = False
        cell.is_current = False
        cell.distance = math.inf
        cell.parent = None


def bfs_distances(grid: Grid, source: Coord) -> Dict[Coord, int]:
    """Step distance from ``source`` to every open cell reachable from it."""

    distances = {source: 0}
    queue: deque[Coord] = deque([source])
    while queue:
        row, col = queue.popleft()
        for neighbor in neighbors4(grid.cells[row][col], grid):
            if neighbor.coord not in distances:
                distances[neighbor.coord] = distances[(row, col)] + 1
                queue.append(neighbor.coord)
    return distances


__all__ = [
    "Cell",
    "Coord",
    "DIRECTIONS",
    "Grid",
    "PATH",
    "WALL",
    "bfs_distances",
    "create_grid",
    "neighbors4",
    "reset_search_state",
]
