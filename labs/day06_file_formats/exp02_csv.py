"""
Experiment 2: CSV Files

CSV is easy for any program to read, but every Float64 becomes ~17-19
characters of text and must be parsed back.

Measures:
- write/read of a small random table (first and second read)
- scaling of write/read time with row count
- reading and writing the real-world dataset

Goal: Build intuition for text I/O cost before comparing binary formats.
"""

import numpy as np

from .config import (
    console,
    format_size,
    format_time,
    print_metric,
    print_section_header,
    print_step,
)
from .datasets import random_table
from .results import benchmark_format, print_results_table, print_series_table
from .session import REAL, SMALL, LabSession
from .timing import TimingSeries, elapsed


def _test_small_csv(session: LabSession):
    """Small random table: write, read first, read second."""
    console.print("\n[yellow]→ Small CSV file of random Float64 values...[/yellow]")
    table = session.small_table()
    fmt = session.fmt("csv")
    path = session.scratch_path("random_numbers.csv")

    records = session.add_records(benchmark_format(fmt, table, path, SMALL, warmup=False))
    print_results_table("Small CSV file of random Float64 values", records)

    write, first, _ = records
    ratio = first.seconds / write.seconds if write.seconds > 0 else float("nan")
    print_metric("Read/write time ratio", f"{ratio:.2f}x")


def _test_csv_scaling(session: LabSession):
    """Write and read CSV files with increasing row counts."""
    console.print("\n[yellow]→ CSV scaling with number of rows...[/yellow]")
    fmt = session.fmt("csv")
    rng = np.random.default_rng(session.config.benchmarks.seed)

    write_series = TimingSeries("Write")
    read_series = TimingSeries("Read (first)")
    read2_series = TimingSeries("Read (second)")

    for n in session.config.benchmarks.row_sizes:
        print_step(f"{n:,} rows...")
        path = session.scratch_path(f"random_numbers_{n}.csv")
        table = random_table(n, 2, seed=int(rng.integers(2**31)))

        seconds, _ = elapsed(fmt.write, table, path)
        write_series.add(n, seconds)
        seconds, _ = elapsed(fmt.read, path)
        read_series.add(n, seconds)
        seconds, _ = elapsed(fmt.read, path)
        read2_series.add(n, seconds)

    series = [write_series, read_series, read2_series]
    session.series.extend(series)
    print_series_table("CSV file with 2 columns of Float64s", series)

    console.print("[dim]Flat for small files, linear in the number of values for large ones[/dim]")


def _test_real_csv(session: LabSession):
    """Read the downloaded dataset, then write it back out."""
    console.print("\n[yellow]→ Real-world CSV (Kepler DR25 injections)...[/yellow]")
    table = session.real_table()
    source = session.real_csv()
    print_metric("Rows x columns", f"{table.height:,} x {table.width}")
    print_metric("Read time (first parse)", format_time(session.csv_read_seconds))

    fmt = session.fmt("csv", REAL)
    out_path = session.real_output_path(fmt)
    records = session.add_records(benchmark_format(fmt, table, out_path, REAL, warmup=False))
    print_results_table("Real-world CSV", records)

    print_metric("Original file size", format_size(source.size_bytes))


def run(session: LabSession | None = None):
    session = session or LabSession.from_config_file()
    print_section_header("Experiment 2: CSV Files")

    _test_small_csv(session)
    _test_csv_scaling(session)
    _test_real_csv(session)


if __name__ == "__main__":
    run()
