"""
Timing utilities.

Snapshot creation and whole rotation runs are wrapped in ``timed_section``
so their duration can be reported to the operator and the debug log.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Generator

from loguru import logger


@dataclass
class TimingMetrics:
    """Elapsed wall-clock time of one named section."""

    name: str
    elapsed_seconds: float = 0.0

    def log(self, level: str = "debug") -> None:
        getattr(logger, level)(f"Timing [{self.name}]: {self.elapsed_seconds:.3f}s")

    def to_dict(self) -> dict[str, float | str]:
        return {"name": self.name, "elapsed_seconds": self.elapsed_seconds}


@contextmanager
def timed_section(name: str) -> Generator[TimingMetrics, None, None]:
    """
    Measure the wrapped block.

    ``elapsed_seconds`` is filled in on exit, including when the block
    raises, so it is only meaningful after the ``with`` statement.

    Usage:
        with timed_section("create export20240315.zip") as timing:
            write_archive()
        print(timing.elapsed_seconds)
    """
    metrics = TimingMetrics(name=name)
    start = time.perf_counter()
    try:
        yield metrics
    finally:
        metrics.elapsed_seconds = time.perf_counter() - start
