"""
Benchmark records and the rich tables that report them.
"""

from dataclasses import asdict, dataclass
from pathlib import Path

import polars as pl
import structlog
from rich.table import Table

from .config import console, format_size, format_time
from .formats import TableFormat
from .timing import TimingSeries, timed

logger = structlog.get_logger()

WRITE = "Write"
READ_FIRST = "Read (first time)"
READ_SECOND = "Read (second time)"


@dataclass
class BenchmarkRecord:
    """One row of a results table"""

    dataset: str
    format: str
    operation: str
    seconds: float
    n_values: int
    size_bytes: int


def benchmark_format(
    fmt: TableFormat,
    table: pl.DataFrame,
    path: Path,
    dataset: str,
    warmup: bool = True,
) -> list[BenchmarkRecord]:
    """
    Time one write and two reads of table in the given format.

    With warmup, the write/read pair is run once untimed first so imports
    and first-call setup don't land in the measurements.
    """
    n_values = table.height * table.width

    if warmup:
        fmt.write(table, path)
        fmt.read(path)

    with timed(f"{fmt.name}_write", n_values) as write_t:
        fmt.write(table, path)
    with timed(f"{fmt.name}_read_first", n_values) as first_t:
        fmt.read(path)
    with timed(f"{fmt.name}_read_second", n_values) as second_t:
        fmt.read(path)

    size = path.stat().st_size
    logger.info(
        "format_benchmarked",
        dataset=dataset,
        format=fmt.name,
        write_s=round(write_t.seconds, 4),
        read_s=round(second_t.seconds, 4),
        size_bytes=size,
    )
    return [
        BenchmarkRecord(dataset, fmt.name, op, t.seconds, n_values, size)
        for op, t in ((WRITE, write_t), (READ_FIRST, first_t), (READ_SECOND, second_t))
    ]


def print_results_table(title: str, records: list[BenchmarkRecord]) -> None:
    """Print records grouped by format, in the order they were produced"""
    if not records:
        return

    table = Table(title=title)
    table.add_column("Format", style="cyan")
    table.add_column("Operation")
    table.add_column("Time", style="blue", justify="right")
    table.add_column("Values", style="yellow", justify="right")
    table.add_column("File size", style="green", justify="right")

    previous = None
    for r in records:
        table.add_row(
            r.format.upper() if r.format != previous else "",
            r.operation,
            format_time(r.seconds),
            f"{r.n_values:,}",
            format_size(r.size_bytes),
        )
        previous = r.format

    console.print(table)


def print_series_table(title: str, series: list[TimingSeries]) -> None:
    """Print run time vs problem size, one column per series"""
    if not series:
        return

    table = Table(title=title)
    table.add_column("Size", style="cyan", justify="right")
    for s in series:
        table.add_column(s.label, style="blue", justify="right")

    sizes = series[0].sizes
    for i, size in enumerate(sizes):
        table.add_row(
            f"{size:,}",
            *(format_time(s.seconds[i]) if i < len(s) else "" for s in series),
        )

    console.print(table)


def records_to_frame(records: list[BenchmarkRecord]) -> pl.DataFrame:
    schema = {
        "dataset": pl.String,
        "format": pl.String,
        "operation": pl.String,
        "seconds": pl.Float64,
        "n_values": pl.Int64,
        "size_bytes": pl.Int64,
    }
    return pl.DataFrame([asdict(r) for r in records], schema=schema)
