"""Pillow rendering of grid snapshots."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence, Tuple

from PIL import Image, ImageDraw

from .base import PathLike
from .grid import Cell, Grid

Color = Tuple[int, int, int]

START_COLOR = (34, 197, 94)
END_COLOR = (239, 68, 68)
CURRENT_COLOR = (250, 204, 21)
PATH_COLOR = (59, 130, 246)
VISITED_COLOR = (192, 132, 252)
WALL_COLOR = (51, 65, 85)
OPEN_COLOR = (255, 255, 255)
GRID_LINE_COLOR = (203, 213, 225)


def cell_color(cell: Cell) -> Color:
    if cell.is_start:
        return START_COLOR
    if cell.is_end:
        return END_COLOR
    if cell.is_current:
        return CURRENT_COLOR
    if cell.is_path:
        return PATH_COLOR
    if cell.is_visited:
        return VISITED_COLOR
    if cell.is_wall:
        return WALL_COLOR
    return OPEN_COLOR


def render_grid(grid: Grid, *, cell_size: int = 16, gap: int = 1) -> Image.Image:
    """Draw every cell as a filled square separated by ``gap`` pixels of grid line."""

    if cell_size <= gap:
        raise ValueError("cell_size must be larger than gap")
    canvas = Image.new("RGB", (grid.cols * cell_size, grid.rows * cell_size), GRID_LINE_COLOR)
    draw = ImageDraw.Draw(canvas)
    for cell in grid:
        left = cell.col * cell_size
        top = cell.row * cell_size
        draw.rectangle(
            (left, top, left + cell_size - 1 - gap, top + cell_size - 1 - gap),
            fill=cell_color(cell),
        )
    return canvas


def save_animation(
    frames: Sequence[Grid],
    path: PathLike,
    *,
    cell_size: int = 16,
    duration_ms: int = 40,
) -> Path:
    """Write the frames as a looping animated GIF."""

    if not frames:
        raise ValueError("At least one frame is required")
    destination = Path(path)
    destination.parent.mkdir(parents=True, exist_ok=True)
    images = [render_grid(frame, cell_size=cell_size) for frame in frames]
    images[0].save(
        destination,
        save_all=True,
        append_images=images[1:],
        duration=duration_ms,
        loop=0,
    )
    return destination


__all__ = ["cell_color", "render_grid", "save_animation"]
