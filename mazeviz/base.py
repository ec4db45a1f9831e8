"""Shared scaffolding for the maze engines."""

from __future__ import annotations

import json
import random
import time
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Generic, Iterable, List, Optional, Type, TypeVar, Union

from .grid import Grid
from .steps import Sleeper, StepEmitter, StepSink

PathLike = Union[str, Path]
ResultT = TypeVar("ResultT")
AlgorithmT = TypeVar("AlgorithmT", bound=Enum)


def parse_algorithm(enum_type: Type[AlgorithmT], value: Union[str, AlgorithmT]) -> AlgorithmT:
    """Map an algorithm name onto its enum member."""

    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(str(value).lower())
    except ValueError as exc:
        choices = ", ".join(member.value for member in enum_type)
        raise ValueError(f"Unknown algorithm '{value}'. Choose one of: {choices}") from exc


class AbstractMazeEngine(ABC, Generic[ResultT]):
    """Base class for engines that mutate a grid and publish frames."""

    def __init__(
        self,
        *,
        step_sink: Optional[StepSink] = None,
        step_interval_ms: int = 0,
        seed: Optional[int] = None,
        sleep: Sleeper = time.sleep,
    ) -> None:
        self.emitter = StepEmitter(step_sink, step_interval_ms, sleep=sleep)
        self._rng = random.Random(seed)

    @abstractmethod
    def run(self, grid: Grid, algorithm: Any) -> ResultT:
        """Run the named algorithm on ``grid`` in place."""


def write_report(
    records: Iterable[Any],
    report_path: PathLike,
    *,
    append: bool = True,
) -> List[Dict[str, Any]]:
    """Serialize result records to JSON, appending to an existing report if requested."""

    path = Path(report_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    existing: List[Dict[str, Any]] = []
    if append and path.exists():
        existing = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(existing, list):
            raise ValueError(f"Report {path} must contain a JSON list")
    payload = existing + [record_to_dict(record) for record in records]
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return payload


def record_to_dict(record: Any) -> Dict[str, Any]:
    if isinstance(record, dict):
        return record
    if hasattr(record, "to_dict"):
        return getattr(record, "to_dict")()
    raise TypeError("Report records must be dicts or implement to_dict().")


__all__ = [
    "AbstractMazeEngine",
    "PathLike",
    "parse_algorithm",
    "record_to_dict",
    "write_report",
]
