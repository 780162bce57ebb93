"""
Timing utilities for the file format benchmarks.
Tracks wall time and, when psutil is installed, resident memory.
"""

import time
from collections.abc import Callable
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

import polars as pl
import structlog

try:
    import psutil

    HAS_PSUTIL = True
except ImportError:
    HAS_PSUTIL = False

logger = structlog.get_logger()


@dataclass
class TimingResult:
    """Timing captured for one labelled block"""

    label: str
    seconds: float = 0.0
    n_values: int = 0
    peak_memory_mb: float | None = None


@contextmanager
def timed(label: str, n_values: int = 0):
    """
    Context manager to time a block of code.

    Usage:
        with timed("csv_write", n_values=2048) as t:
            df.write_csv(path)
        # t.seconds is now populated
    """
    process = psutil.Process() if HAS_PSUTIL else None
    start_memory = process.memory_info().rss / 1024 / 1024 if process else None
    result = TimingResult(label=label, n_values=n_values, peak_memory_mb=start_memory)

    start = time.perf_counter()
    try:
        yield result
    finally:
        result.seconds = time.perf_counter() - start

        if process:
            end_memory = process.memory_info().rss / 1024 / 1024
            result.peak_memory_mb = max(start_memory or 0, end_memory)

        logger.debug(
            "timing",
            label=label,
            seconds=round(result.seconds, 6),
            n_values=n_values,
            memory_mb=round(result.peak_memory_mb, 1) if result.peak_memory_mb else None,
        )


def elapsed(func: Callable[..., Any], *args, **kwargs) -> tuple[float, Any]:
    """Call func once and return (seconds, result)."""
    start = time.perf_counter()
    value = func(*args, **kwargs)
    return time.perf_counter() - start, value


@dataclass
class TimingSeries:
    """Run time versus problem size, kept as parallel lists"""

    label: str
    sizes: list[int] = field(default_factory=list)
    seconds: list[float] = field(default_factory=list)

    def add(self, size: int, seconds: float) -> None:
        self.sizes.append(size)
        self.seconds.append(seconds)

    def __len__(self) -> int:
        return len(self.sizes)

    def samples(self) -> list[tuple[int, float]]:
        return list(zip(self.sizes, self.seconds))

    def to_frame(self) -> pl.DataFrame:
        return pl.DataFrame(
            {
                "series": [self.label] * len(self),
                "size": self.sizes,
                "seconds": self.seconds,
            },
            schema={"series": pl.Utf8, "size": pl.Int64, "seconds": pl.Float64},
        )


def series_to_frame(series: list[TimingSeries]) -> pl.DataFrame:
    """Stack several series into one long (series, size, seconds) frame"""
    frames = [s.to_frame() for s in series]
    if not frames:
        return TimingSeries("").to_frame()
    return pl.concat(frames)
