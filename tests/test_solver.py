import math
import unittest

from mazeviz.grid import create_grid, neighbors4, reset_search_state
from mazeviz.maze.evaluator import evaluate_path, shortest_path_length, traced_path
from mazeviz.maze.generator import GenerationAlgorithm, generate
from mazeviz.maze.solver import (
    ALGORITHM_INFO,
    MazeSolver,
    SolveResult,
    SolverAlgorithm,
    SolverMode,
    heuristic,
    solve,
)
from mazeviz.steps import FrameRecorder

OPTIMAL = [
    SolverAlgorithm.BFS,
    SolverAlgorithm.DIJKSTRA,
    SolverAlgorithm.ASTAR,
    SolverAlgorithm.BIDIRECTIONAL,
]
HEURISTIC_OR_DEPTH_FIRST = [
    SolverAlgorithm.DFS,
    SolverAlgorithm.GREEDY,
    SolverAlgorithm.BEST_FIRST,
]


def open_room(rows=5, cols=5):
    grid = create_grid(rows, cols)
    for cell in grid:
        if 0 < cell.row < rows - 1 and 0 < cell.col < cols - 1:
            cell.is_wall = False
    return grid


def corridor():
    """3x7 grid whose only open row runs straight from start (1, 1) to end (1, 5)."""

    grid = create_grid(3, 7)
    for col in range(1, 6):
        grid.cells[1][col].is_wall = False
    return grid


def sorted_list_dijkstra(grid):
    """Dijkstra that stable-sorts every open cell by distance before each pop."""

    grid.start.distance = 0
    unvisited = [cell for cell in grid if not cell.is_wall]
    visited = 0
    while unvisited:
        unvisited.sort(key=lambda cell: cell.distance)
        current = unvisited.pop(0)
        if current.distance == math.inf:
            break
        current.is_visited = True
        visited += 1
        if current.is_end:
            length = 0
            while current.parent is not None:
                current = grid[current.parent]
                length += 1
            return SolveResult(visited=visited, path_length=length)
        for neighbor in neighbors4(current, grid):
            if not neighbor.is_visited and current.distance + 1 < neighbor.distance:
                neighbor.distance = current.distance + 1
                neighbor.parent = current.coord
    return SolveResult(visited=visited, path_length=0)


class ScenarioTests(unittest.TestCase):
    def test_five_by_five_maze(self) -> None:
        grid = generate(create_grid(5, 5), GenerationAlgorithm.RECURSIVE, seed=7)
        reset_search_state(grid)
        result = solve(grid, "bfs")
        self.assertEqual(result.path_length, 4)
        self.assertLessEqual(result.visited, 9)

    def test_isolated_end_reports_explored_cells(self) -> None:
        for algorithm in SolverAlgorithm:
            with self.subTest(algorithm=algorithm.value):
                grid = create_grid(7, 7)
                grid.cells[1][2].is_wall = False
                grid.cells[1][3].is_wall = False
                result = solve(grid, algorithm)
                self.assertEqual(result.path_length, 0)
                self.assertFalse(result.found)
                expected = 2 if algorithm is SolverAlgorithm.BIDIRECTIONAL else 3
                self.assertEqual(result.visited, expected)

    def test_missing_endpoint_returns_empty_result(self) -> None:
        grid = corridor()
        grid.start.is_start = False
        self.assertEqual(solve(grid, "astar"), SolveResult(visited=0, path_length=0))

    def test_keeping_endpoint_flags_blocks_a_repeat_search(self) -> None:
        grid = generate(create_grid(9, 11), "kruskal", seed=1)
        self.assertTrue(solve(grid, "dfs").found)
        reset_search_state(grid, preserve_endpoints=True)
        self.assertEqual(solve(grid, "dfs"), SolveResult(visited=0, path_length=0))
        reset_search_state(grid)
        self.assertTrue(solve(grid, "dfs").found)

    def test_straight_corridor(self) -> None:
        expected_visits = {SolverAlgorithm.BIDIRECTIONAL: 4}
        for algorithm in SolverAlgorithm:
            with self.subTest(algorithm=algorithm.value):
                result = solve(corridor(), algorithm)
                self.assertEqual(result.path_length, 4)
                self.assertEqual(result.visited, expected_visits.get(algorithm, 5))


class OpenRoomTests(unittest.TestCase):
    """Exact expansion orders on a 3x3 open interior, start (1, 1), end (3, 3)."""

    def test_dijkstra_breaks_ties_by_expansion_then_row_major(self) -> None:
        grid = open_room()
        result = solve(grid, "dijkstra")
        self.assertEqual(result, SolveResult(visited=9, path_length=4))
        self.assertEqual(traced_path(grid), [(1, 1), (1, 2), (1, 3), (2, 3), (3, 3)])

    def test_astar_pops_earlier_queued_cells_first(self) -> None:
        grid = open_room()
        result = solve(grid, "astar")
        self.assertEqual(result, SolveResult(visited=9, path_length=4))
        self.assertEqual(traced_path(grid), [(1, 1), (2, 1), (3, 1), (3, 2), (3, 3)])

    def test_greedy_heads_straight_for_the_goal(self) -> None:
        for algorithm in ("greedy", "bestfirst"):
            with self.subTest(algorithm=algorithm):
                grid = open_room()
                self.assertEqual(solve(grid, algorithm), SolveResult(visited=5, path_length=4))

    def test_dfs_wanders(self) -> None:
        grid = open_room()
        self.assertEqual(solve(grid, "dfs"), SolveResult(visited=9, path_length=8))
        self.assertEqual(
            traced_path(grid),
            [(1, 1), (1, 2), (1, 3), (2, 3), (2, 2), (2, 1), (3, 1), (3, 2), (3, 3)],
        )

    def test_bidirectional_splices_both_halves(self) -> None:
        grid = open_room()
        self.assertEqual(solve(grid, "bidirectional"), SolveResult(visited=4, path_length=4))
        self.assertEqual(traced_path(grid), [(1, 1), (2, 1), (2, 2), (2, 3), (3, 3)])
        marked = sorted(cell.coord for cell in grid if cell.is_path)
        self.assertEqual(marked, [(2, 1), (2, 2), (2, 3)])


class GeneratedMazeSearchTests(unittest.TestCase):
    def setUp(self) -> None:
        self.mazes = [
            generate(create_grid(15, 21), algorithm, seed=seed)
            for algorithm in GenerationAlgorithm
            for seed in range(3)
        ]

    def test_optimal_algorithms_match_bfs_distance(self) -> None:
        for maze in self.mazes:
            shortest = shortest_path_length(maze)
            for algorithm in OPTIMAL:
                with self.subTest(algorithm=algorithm.value):
                    grid = maze.snapshot()
                    result = solve(grid, algorithm)
                    self.assertEqual(result.path_length, shortest)
                    self.assertTrue(evaluate_path(grid, traced_path(grid)).is_valid)

    def test_other_algorithms_return_valid_paths(self) -> None:
        for maze in self.mazes:
            shortest = shortest_path_length(maze)
            for algorithm in HEURISTIC_OR_DEPTH_FIRST:
                with self.subTest(algorithm=algorithm.value):
                    grid = maze.snapshot()
                    result = solve(grid, algorithm)
                    if not result.found:
                        continue
                    self.assertGreaterEqual(result.path_length, shortest)
                    evaluation = evaluate_path(grid, traced_path(grid))
                    self.assertTrue(evaluation.is_valid, evaluation.message)
                    self.assertEqual(evaluation.length, result.path_length)

    def test_dijkstra_matches_sorted_list_expansion(self) -> None:
        for maze in self.mazes + [open_room(), open_room(7, 9)]:
            with self.subTest(rows=maze.rows, cols=maze.cols):
                expected_grid = maze.snapshot()
                expected = sorted_list_dijkstra(expected_grid)
                grid = maze.snapshot()
                self.assertEqual(solve(grid, "dijkstra"), expected)
                self.assertEqual(traced_path(grid), traced_path(expected_grid))

    def test_visited_never_exceeds_open_cells(self) -> None:
        for maze in self.mazes:
            for algorithm in SolverAlgorithm:
                with self.subTest(algorithm=algorithm.value):
                    grid = maze.snapshot()
                    result = solve(grid, algorithm)
                    self.assertLessEqual(result.visited, grid.open_cell_count())

    def test_fast_mode_explores_identically_without_marking(self) -> None:
        maze = self.mazes[0]
        for algorithm in SolverAlgorithm:
            with self.subTest(algorithm=algorithm.value):
                shortest_grid = maze.snapshot()
                fast_grid = maze.snapshot()
                marked = solve(shortest_grid, algorithm, find_optimal_path=SolverMode.SHORTEST.find_optimal_path)
                silent = solve(fast_grid, algorithm, find_optimal_path=SolverMode.FAST.find_optimal_path)
                self.assertEqual(marked, silent)
                self.assertEqual(sum(cell.is_path for cell in shortest_grid), marked.path_length - 1)
                self.assertFalse(any(cell.is_path for cell in fast_grid))
                self.assertEqual(
                    [cell.is_visited for cell in shortest_grid],
                    [cell.is_visited for cell in fast_grid],
                )


class FrameTests(unittest.TestCase):
    def test_frames_are_published_and_current_marks_cleared(self) -> None:
        for algorithm in SolverAlgorithm:
            with self.subTest(algorithm=algorithm.value):
                grid = generate(create_grid(9, 9), "sidewinder", seed=4)
                recorder = FrameRecorder()
                result = solve(grid, algorithm, recorder)
                self.assertTrue(result.found)
                self.assertGreater(len(recorder), result.path_length)
                self.assertTrue(any(cell.is_current for cell in recorder.frames[0]))
                self.assertFalse(any(cell.is_current for cell in grid))

    def test_every_frame_is_followed_by_a_pause(self) -> None:
        recorder = FrameRecorder()
        pauses = []
        solver = MazeSolver(step_sink=recorder, step_interval_ms=3, sleep=pauses.append)
        solver.solve(corridor(), SolverAlgorithm.BFS)
        self.assertEqual(len(pauses), len(recorder))
        self.assertTrue(all(pause == 0.003 for pause in pauses))

    def test_bfs_frames_cover_whole_levels(self) -> None:
        recorder = FrameRecorder()
        solve(open_room(), "bfs", recorder)
        current_per_frame = [sum(cell.is_current for cell in frame) for frame in recorder.frames[:3]]
        self.assertEqual(current_per_frame, [1, 2, 3])


class HelperTests(unittest.TestCase):
    def test_heuristic_is_manhattan_distance(self) -> None:
        grid = create_grid(7, 9)
        self.assertEqual(heuristic(grid.start, grid.end), 10)

    def test_unknown_algorithm_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            solve(corridor(), "teleport")

    def test_run_dispatches_like_solve(self) -> None:
        result = MazeSolver(find_optimal_path=False).run(corridor(), "BFS")
        self.assertEqual(result, SolveResult(visited=5, path_length=4))

    def test_every_algorithm_has_display_info(self) -> None:
        self.assertEqual(set(ALGORITHM_INFO), set(SolverAlgorithm))
        for algorithm in OPTIMAL:
            self.assertTrue(ALGORITHM_INFO[algorithm].optimal)


if __name__ == "__main__":
    unittest.main()
