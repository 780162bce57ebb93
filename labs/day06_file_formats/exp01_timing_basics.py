"""
Experiment 1: Benchmarking Basics

Time a Monte Carlo estimate of π over a range of sample counts.

Small problems are dominated by fixed overhead, so run time grows slower than
linearly; past a few thousand samples it scales roughly linearly while the
error shrinks like 1/sqrt(n).

Goal: Get comfortable reading run time vs problem size before timing file I/O.
"""

import math

import numpy as np
from rich.table import Table

from .config import console, format_time, print_metric, print_section_header, print_step
from .session import LabSession
from .timing import TimingSeries, elapsed


def estimate_pi(n: int, rng: np.random.Generator | None = None) -> float:
    """Fraction of n random points in the unit square inside the quarter circle, times 4."""
    rng = rng or np.random.default_rng()
    x = rng.random(n)
    y = rng.random(n)
    return 4.0 * np.count_nonzero(x * x + y * y <= 1.0) / n


def run(session: LabSession | None = None):
    session = session or LabSession.from_config_file()
    print_section_header("Experiment 1: Benchmarking Basics (Monte Carlo π)")

    sizes = session.config.benchmarks.pi_sizes
    rng = np.random.default_rng(session.config.benchmarks.seed)

    print_step("Warming up...")
    estimate_pi(2, rng)

    print_step(f"Timing {len(sizes)} problem sizes ({sizes[0]:,} to {sizes[-1]:,} samples)...")
    series = TimingSeries("estimate_pi")
    errors = []
    for n in sizes:
        seconds, estimate = elapsed(estimate_pi, n, rng)
        series.add(n, seconds)
        errors.append(abs(estimate - math.pi))
    session.series.append(series)

    table = Table(title="Monte Carlo π: run time and error")
    table.add_column("Samples", style="cyan", justify="right")
    table.add_column("Run time", style="blue", justify="right")
    table.add_column("|error|", style="yellow", justify="right")
    for (n, seconds), err in zip(series.samples(), errors):
        table.add_row(f"{n:,}", format_time(seconds), f"{err:.2e}")
    console.print(table)

    per_sample = series.seconds[-1] / series.sizes[-1]
    print_metric("Time per sample (largest n)", f"{per_sample * 1e9:.2f} ns")

    console.print("\n[bold green]Key Insights:[/bold green]")
    console.print("  • Small n: fixed overhead dominates, run time is roughly flat")
    console.print("  • Large n: run time grows linearly with the number of samples")
    console.print("  • Bumps come from caches, allocation and whatever else the machine is doing")


if __name__ == "__main__":
    run()
