#!/usr/bin/env python3
"""
Run all file format experiments.

Usage:
    python -m labs.day06_file_formats.run_all
    python -m labs.day06_file_formats.run_all --experiments 2,4
    python -m labs.day06_file_formats.run_all --config my_lab.yaml --results-csv results.csv
    python -m labs.day06_file_formats.run_all -e 1,2 --series-csv series.csv
"""

import argparse
import time
from pathlib import Path

import structlog
from rich.console import Console
from rich.panel import Panel

from . import (
    exp01_timing_basics,
    exp02_csv,
    exp03_hdf5,
    exp04_fits,
    exp05_download_vs_disk,
)
from .logging_config import setup_logging
from .results import records_to_frame
from .session import LabSession
from .timing import series_to_frame

console = Console()
logger = structlog.get_logger()

EXPERIMENTS = {
    1: ("Benchmarking Basics", exp01_timing_basics.run),
    2: ("CSV Files", exp02_csv.run),
    3: ("Binary Containers", exp03_hdf5.run),
    4: ("Flexible Format (FITS)", exp04_fits.run),
    5: ("Download vs Disk", exp05_download_vs_disk.run),
}


def parse_experiments(value: str | None) -> list[int]:
    """
    Parse a comma-separated list of experiment numbers.

    Raises:
        ValueError: not a list of numbers, or a number with no experiment
    """
    if not value:
        return list(EXPERIMENTS.keys())

    try:
        to_run = [int(x.strip()) for x in value.split(",")]
    except ValueError:
        raise ValueError("Invalid format. Use comma-separated numbers (e.g., '1,3,5')") from None

    invalid = [x for x in to_run if x not in EXPERIMENTS]
    if invalid:
        raise ValueError(
            f"Invalid experiment numbers: {invalid}. Valid options: {list(EXPERIMENTS.keys())}"
        )
    return to_run


def run_experiments(to_run: list[int], session: LabSession) -> list[tuple[int, str, float, str]]:
    """Run experiments in order; a failing experiment is reported and the rest still run."""
    results = []
    for exp_num in to_run:
        name, run_func = EXPERIMENTS[exp_num]

        console.print(f"\n{'=' * 80}")
        start = time.perf_counter()

        try:
            run_func(session)
            duration = time.perf_counter() - start
            results.append((exp_num, name, duration, "✅"))
        except Exception as e:
            duration = time.perf_counter() - start
            results.append((exp_num, name, duration, "❌"))
            logger.error("experiment_failed", experiment=exp_num, error=str(e), exc_info=True)
            console.print(f"\n[red]Error in Experiment {exp_num}:[/red]")
            console.print(f"[red]{e}[/red]")

    return results


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run file I/O & file format experiments")
    parser.add_argument(
        "--experiments",
        "-e",
        type=str,
        help="Comma-separated list of experiment numbers to run (e.g., '1,3,5'). Defaults to all.",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to lab.yaml (default: uses $LAB_CONFIG, then the bundled file)",
    )
    parser.add_argument(
        "--results-csv",
        type=Path,
        help="Write every benchmark record to this CSV file",
    )
    parser.add_argument(
        "--series-csv",
        type=Path,
        help="Write the run time vs size samples (π estimate, CSV scaling) to this CSV file",
    )
    args = parser.parse_args(argv)

    try:
        to_run = parse_experiments(args.experiments)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        return 2

    session = LabSession.from_config_file(args.config)
    setup_logging(session.config.logging.resolved_level)

    console.print(
        Panel.fit(
            "[bold magenta]Day 06: File I/O & File Formats[/bold magenta]\n"
            "[dim]Benchmarking CSV, HDF5, FITS and Parquet on synthetic and real data[/dim]",
            border_style="magenta",
        )
    )

    console.print(f"\n[cyan]Running {len(to_run)} experiment(s):[/cyan]")
    for exp_num in to_run:
        console.print(f"  • Experiment {exp_num}: {EXPERIMENTS[exp_num][0]}")

    total_start = time.perf_counter()
    results = run_experiments(to_run, session)
    total_duration = time.perf_counter() - total_start

    console.print(f"\n{'=' * 80}")
    console.print("\n[bold green]Experiment Summary:[/bold green]\n")

    for exp_num, name, duration, status in results:
        console.print(f"  {status} Experiment {exp_num}: {name} ({duration:.2f}s)")

    console.print(f"\n[bold]Total time:[/bold] {total_duration:.2f}s")

    if args.results_csv:
        records_to_frame(session.records).write_csv(args.results_csv)
        console.print(f"[dim]Wrote {len(session.records)} records to {args.results_csv}[/dim]")

    if args.series_csv:
        series = series_to_frame(session.series)
        series.write_csv(args.series_csv)
        console.print(f"[dim]Wrote {series.height} series samples to {args.series_csv}[/dim]")

    console.print("\n[bold cyan]Key Takeaways:[/bold cyan]")
    console.print("1. Time the second call, not just the first; caches and setup skew the first.")
    console.print("2. Binary formats store Float64s in 8 bytes and skip parsing.")
    console.print("3. Real data has strings and missing values that change the picture.")
    console.print("4. Downloading is usually far slower than reading from local disk.")

    failed = sum(1 for *_, status in results if status != "✅")
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
