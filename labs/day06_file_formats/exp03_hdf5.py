"""
Experiment 3: Binary Containers (HDF5, plus Parquet for reference)

A Float64 takes exactly 8 bytes in a binary file versus ~17+ characters of
text, and reading it back needs no parsing.

But the real dataset holds string columns and many small integers, so a
binary container is not automatically smaller than the CSV.

Goal: Compare file size and read/write time of binary containers against CSV.
"""

import polars as pl

from .config import console, format_size, print_metric, print_section_header
from .results import benchmark_format, print_results_table
from .session import REAL, SMALL, LabSession

FORMATS = ["hdf5", "parquet"]


def _test_small(session: LabSession):
    console.print("\n[cyan]→ Small random table in binary containers...[/cyan]")
    table = session.small_table()
    for name in FORMATS:
        fmt = session.fmt(name)
        path = fmt.path_for(session.scratch_path("random_numbers"))
        session.add_records(benchmark_format(fmt, table, path, SMALL))

    print_results_table(
        "CSV vs binary (small file of random values)",
        session.records_for(SMALL, ["csv", *FORMATS]),
    )


def _test_real(session: LabSession):
    console.print("\n[cyan]→ Real-world dataset in binary containers...[/cyan]")
    table = session.real_table()
    source = session.real_csv()
    for name in FORMATS:
        fmt = session.fmt(name, REAL)
        path = session.real_output_path(fmt)
        records = session.add_records(benchmark_format(fmt, table, path, REAL))
        ratio = records[0].size_bytes / source.size_bytes
        print_metric(f"{name} size vs CSV", f"{format_size(records[0].size_bytes)} ({ratio:.0%})")

    print_results_table(
        "CSV vs binary (real-world dataset)",
        session.records_for(REAL, ["csv", *FORMATS]),
    )

    strings = [name for name, dtype in table.schema.items() if dtype == pl.String]
    console.print(
        f"\n[dim]String columns in the real dataset: {', '.join(strings) or 'none'}[/dim]"
    )


def run(session: LabSession | None = None):
    session = session or LabSession.from_config_file()
    print_section_header("Experiment 3: Binary Containers (HDF5/Parquet)")

    _test_small(session)
    _test_real(session)

    console.print("\n[bold green]Key Insights:[/bold green]")
    console.print("  • Float64 columns: 8 bytes per value in binary vs ~19 characters in CSV")
    console.print("  • Variable-length strings carry per-value overhead in HDF5")
    console.print("  • Parquet's compression and encodings shrink repetitive columns")


if __name__ == "__main__":
    run()
