"""
Experiment 5: Download vs Disk

How does fetching the dataset over the network compare to reading it from
local disk in each format?

If a project needs large remote files, it can pay to download once and
preprocess into a faster format.

Goal: Put network and disk costs side by side.
"""

from rich.table import Table

from .config import console, format_size, format_time, print_section_header, print_step
from .results import READ_SECOND, benchmark_format
from .session import REAL, LabSession

FORMATS = ["csv", "hdf5", "parquet", "fits"]


def _read_times(session: LabSession) -> dict[str, tuple[float, int]]:
    """Second-read time and file size per format, benchmarking any format not yet run."""
    table = session.real_table()

    times = {}
    for name in FORMATS:
        records = [r for r in session.records_for(REAL, [name]) if r.operation == READ_SECOND]
        if not records:
            print_step(f"Benchmarking {name}...")
            fmt = session.fmt(name, REAL)
            path = session.real_output_path(fmt)
            records = [
                r
                for r in session.add_records(benchmark_format(fmt, table, path, REAL))
                if r.operation == READ_SECOND
            ]
        times[name] = (records[-1].seconds, records[-1].size_bytes)
    return times


def run(session: LabSession | None = None):
    session = session or LabSession.from_config_file()
    print_section_header("Experiment 5: Download vs Disk")

    download = session.real_csv()
    times = _read_times(session)

    table = Table(title="Getting the real-world dataset into memory")
    table.add_column("Source", style="cyan")
    table.add_column("Time", style="blue", justify="right")
    table.add_column("Size", style="green", justify="right")
    table.add_column("vs download", style="yellow", justify="right")

    if download.skipped:
        table.add_row("Download", "skipped (cached)", format_size(download.size_bytes), "")
    else:
        table.add_row(
            "Download", format_time(download.seconds), format_size(download.size_bytes), "1x"
        )

    for name, (seconds, size) in times.items():
        speedup = (
            f"{download.seconds / seconds:,.0f}x faster"
            if not download.skipped and seconds > 0
            else ""
        )
        table.add_row(f"Read {name.upper()}", format_time(seconds), format_size(size), speedup)

    console.print(table)
    console.print("[dim]Download time depends on where the server is relative to you[/dim]")


if __name__ == "__main__":
    run()
