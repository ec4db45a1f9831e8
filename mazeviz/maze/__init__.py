"""Maze generation, search and comparison package."""

__all__ = [
    "ALGORITHM_INFO",
    "GenerationAlgorithm",
    "MazeGenerator",
    "MazeSolver",
    "PathEvaluation",
    "SolveResult",
    "SolverAlgorithm",
    "SolverMode",
    "Stats",
    "compare_solvers",
    "evaluate_path",
    "generate",
    "repair_connectivity",
    "shortest_path_length",
    "solve",
]

from .generator import GenerationAlgorithm, MazeGenerator, generate, repair_connectivity
from .solver import ALGORITHM_INFO, MazeSolver, SolveResult, SolverAlgorithm, SolverMode, solve
from .evaluator import PathEvaluation, evaluate_path, shortest_path_length
from .compare import Stats, compare_solvers
