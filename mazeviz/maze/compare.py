"""Run several solvers side by side on copies of one maze."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Union

from ..base import parse_algorithm
from ..grid import Grid, reset_search_state
from ..steps import Sleeper, StepSink
from .solver import SolverAlgorithm, solve

logger = logging.getLogger(__name__)

SinkFactory = Callable[[SolverAlgorithm], Optional[StepSink]]


@dataclass
class Stats:
    algorithm: str
    visited: int
    path_length: int
    time_ms: float
    total_cells: int

    def to_dict(self) -> dict:
        return {
            "algorithm": self.algorithm,
            "visited": self.visited,
            "path_length": self.path_length,
            "time_ms": self.time_ms,
            "total_cells": self.total_cells,
        }


def compare_solvers(
    grid: Grid,
    algorithms: Iterable[Union[str, SolverAlgorithm]],
    *,
    find_optimal_path: bool = True,
    step_interval_ms: int = 0,
    sink_factory: Optional[SinkFactory] = None,
    sleep: Sleeper = time.sleep,
) -> List[Stats]:
    """Solve an independent, freshly reset copy of ``grid`` per algorithm.

    The runs share nothing, so they execute concurrently; results come back in
    the order the algorithms were given. ``grid`` itself is left untouched.
    """

    selected = [parse_algorithm(SolverAlgorithm, algorithm) for algorithm in algorithms]
    if not selected:
        return []

    def run(algorithm: SolverAlgorithm) -> Stats:
        board = grid.snapshot()
        reset_search_state(board)
        sink = sink_factory(algorithm) if sink_factory is not None else None
        started = time.perf_counter()
        result = solve(board, algorithm, sink, step_interval_ms, find_optimal_path, sleep=sleep)
        elapsed = (time.perf_counter() - started) * 1000.0
        return Stats(
            algorithm=algorithm.value,
            visited=result.visited,
            path_length=result.path_length,
            time_ms=round(elapsed, 3),
            total_cells=board.total_cells,
        )

    logger.debug(f"Comparing {', '.join(a.value for a in selected)} on a {grid.rows}x{grid.cols} grid")
    with ThreadPoolExecutor(max_workers=len(selected)) as pool:
        return list(pool.map(run, selected))


__all__ = ["SinkFactory", "Stats", "compare_solvers"]
