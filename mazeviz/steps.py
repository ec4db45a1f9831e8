"""Frame publishing for animated generation and search.

Engines stay synchronous: at every frame boundary they hand a snapshot of the
grid to the caller's sink and then pause for the configured interval.
"""

from __future__ import annotations

import time
from typing import Callable, Iterable, List, Optional

from .grid import Cell, Grid

StepSink = Callable[[Grid], None]
Sleeper = Callable[[float], None]


class StepEmitter:
    """Publishes read-only grid snapshots to a sink and paces the caller."""

    def __init__(
        self,
        sink: Optional[StepSink] = None,
        interval_ms: int = 0,
        *,
        sleep: Sleeper = time.sleep,
    ) -> None:
        if interval_ms < 0:
            raise ValueError("step interval must be non-negative")
        self.sink = sink
        self.interval_ms = interval_ms
        self._sleep = sleep

    @property
    def animated(self) -> bool:
        return self.interval_ms > 0

    def publish(self, grid: Grid) -> None:
        if self.sink is not None:
            self.sink(grid.snapshot())

    def pause(self, interval_ms: Optional[float] = None) -> None:
        delay = self.interval_ms if interval_ms is None else interval_ms
        if delay > 0:
            self._sleep(delay / 1000.0)

    def carve(self, grid: Grid, *, interval_ms: Optional[float] = None) -> None:
        """Frame after one carving action; a no-op unless animated."""

        if not self.animated:
            return
        self.publish(grid)
        self.pause(interval_ms)

    def commit(self, grid: Grid, frame: Iterable[Cell]) -> None:
        """Publish a search frame, pause, then clear its ``is_current`` marks."""

        cells = list(frame)
        if not cells:
            return
        self.publish(grid)
        self.pause()
        for cell in cells:
            cell.is_current = False


class FrameRecorder:
    """Step sink that keeps every snapshot it receives."""

    def __init__(self, limit: Optional[int] = None) -> None:
        self.limit = limit
        self.frames: List[Grid] = []

    def __call__(self, grid: Grid) -> None:
        if self.limit is not None and len(self.frames) >= self.limit:
            return
        self.frames.append(grid)

    def __len__(self) -> int:
        return len(self.frames)


__all__ = ["FrameRecorder", "Sleeper", "StepEmitter", "StepSink"]
