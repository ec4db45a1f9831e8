import tempfile
import unittest
from pathlib import Path

from PIL import Image

from mazeviz.grid import create_grid
from mazeviz.maze.generator import generate
from mazeviz.maze.solver import solve
from mazeviz.render import (
    END_COLOR,
    START_COLOR,
    WALL_COLOR,
    cell_color,
    render_grid,
    save_animation,
)
from mazeviz.steps import FrameRecorder


class RenderGridTests(unittest.TestCase):
    def test_canvas_size_and_cell_colors(self) -> None:
        grid = create_grid(5, 7)
        image = render_grid(grid, cell_size=10)
        self.assertEqual(image.size, (70, 50))
        self.assertEqual(image.getpixel((15, 15)), START_COLOR)
        self.assertEqual(image.getpixel((55, 35)), END_COLOR)
        self.assertEqual(image.getpixel((5, 5)), WALL_COLOR)

    def test_endpoint_color_wins_over_search_flags(self) -> None:
        grid = create_grid(5, 5)
        grid.start.is_current = True
        grid.start.is_visited = True
        self.assertEqual(cell_color(grid.start), START_COLOR)

    def test_cell_size_must_exceed_gap(self) -> None:
        with self.assertRaises(ValueError):
            render_grid(create_grid(5, 5), cell_size=1)


class SaveAnimationTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def test_writes_one_gif_frame_per_snapshot(self) -> None:
        grid = generate(create_grid(7, 7), "binarytree", seed=1)
        recorder = FrameRecorder()
        solve(grid, "bfs", recorder)
        destination = save_animation(recorder.frames, Path(self.tmp.name) / "gif" / "bfs.gif", cell_size=6)
        self.assertTrue(destination.exists())
        with Image.open(destination) as image:
            self.assertEqual(image.size, (42, 42))
            self.assertGreater(getattr(image, "n_frames", 1), 1)

    def test_requires_frames(self) -> None:
        with self.assertRaises(ValueError):
            save_animation([], Path(self.tmp.name) / "empty.gif")


if __name__ == "__main__":
    unittest.main()
