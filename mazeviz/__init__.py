"""Maze construction and path search engines with step-by-step animation."""

__all__ = [
    "AbstractMazeEngine",
    "Cell",
    "Grid",
    "create_grid",
    "neighbors4",
    "reset_search_state",
    "StepEmitter",
    "StepSink",
    "FrameRecorder",
    "GenerationAlgorithm",
    "MazeGenerator",
    "generate",
    "repair_connectivity",
    "SolverAlgorithm",
    "SolverMode",
    "MazeSolver",
    "SolveResult",
    "solve",
    "Stats",
    "compare_solvers",
]

from .base import AbstractMazeEngine
from .grid import Cell, Grid, create_grid, neighbors4, reset_search_state
from .steps import FrameRecorder, StepEmitter, StepSink
from .maze import (
    GenerationAlgorithm,
    MazeGenerator,
    generate,
    repair_connectivity,
)
from .maze import (
    SolverAlgorithm,
    SolverMode,
    MazeSolver,
    SolveResult,
    solve,
)
from .maze import Stats, compare_solvers
