"""
Experiment 4: Flexible Format (FITS)

Astronomers often store tables as FITS binary tables. FITS has no native
missing values, so null strings are written empty and numeric nulls as NaN.

Writes go through write_fits_table, which reports failure in its result
instead of raising; a failed write is shown and the timing skipped.

Goal: See where FITS lands relative to CSV and HDF5 on size and speed.
"""

from .config import console, print_metric, print_section_header, print_step
from .results import benchmark_format, print_results_table
from .session import REAL, SMALL, LabSession
from .tables import read_fits_tables, write_fits_table


def _check_round_trip(table, path, label: str) -> bool:
    """Write once through the adapter and report what came back."""
    print_step(f"Writing {label} through the FITS adapter...")
    result = write_fits_table(path, table)
    if not result.ok:
        console.print(f"  [red]✗ FITS write failed:[/red] {result.error.cause}")
        return False

    read = read_fits_tables(path)
    print_metric("Fields read", f"{len(read.columns)} of {table.width}")
    if read.skipped:
        print_metric("Fields skipped", ", ".join(read.skipped), color="yellow")
    if not read.is_tabular:
        console.print("  [yellow]Fields have differing shapes; returned as a mapping[/yellow]")
    return True


def _test_small(session: LabSession):
    console.print("\n[magenta]→ Small random table as FITS...[/magenta]")
    table = session.small_table()
    fmt = session.fmt("fits")
    path = fmt.path_for(session.scratch_path("random_numbers"))

    if _check_round_trip(table, path, "small table"):
        session.add_records(benchmark_format(fmt, table, path, SMALL))

    print_results_table(
        "CSV vs HDF5 vs FITS (small file of random values)",
        session.records_for(SMALL, ["csv", "hdf5", "fits"]),
    )


def _test_real(session: LabSession):
    console.print("\n[magenta]→ Real-world dataset as FITS...[/magenta]")
    table = session.real_table()
    fmt = session.fmt("fits", REAL)
    path = session.real_output_path(fmt)

    if _check_round_trip(table, path, "real-world table"):
        session.add_records(benchmark_format(fmt, table, path, REAL))

    print_results_table(
        "CSV vs HDF5 vs FITS (real-world dataset)",
        session.records_for(REAL, ["csv", "hdf5", "fits"]),
    )


def run(session: LabSession | None = None):
    session = session or LabSession.from_config_file()
    print_section_header("Experiment 4: Flexible Format (FITS)")

    _test_small(session)
    _test_real(session)

    console.print("\n[bold green]Key Insights:[/bold green]")
    console.print("  • FITS stores fixed-width binary columns with a small text header")
    console.print("  • Strings are padded to the longest value in the column")
    console.print("  • Missing values need a convention (NaN, empty string) chosen by the writer")


if __name__ == "__main__":
    run()
