"""
Input data for the experiments: the downloaded real-world CSV and small
random tables.
"""

import time
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

import httpx
import numpy as np
import polars as pl
import structlog

from .config import CsvConfig, validate_table_shape
from .formats import get_format

logger = structlog.get_logger()

CHUNK_SIZE = 1024 * 1024
DOWNLOAD_TIMEOUT_S = 60.0


@dataclass
class DownloadResult:
    """Where a download landed and what it cost"""

    url: str
    path: Path
    seconds: float
    size_bytes: int
    skipped: bool = False


def filename_from_url(url: str) -> str:
    """Last path segment of the URL, e.g. kplr_dr25_inj1_plti.csv"""
    name = Path(urlparse(url).path).name
    if not name:
        raise ValueError(f"URL has no file name: {url}")
    return name


def download(
    url: str,
    dest_dir: str | Path,
    skip_existing: bool = False,
    client: httpx.Client | None = None,
) -> DownloadResult:
    """
    Download url into dest_dir, keeping the remote file name.

    Args:
        url: HTTP(S) URL to fetch
        dest_dir: Directory for the file (created if missing)
        skip_existing: Return immediately if the file is already there
        client: httpx client to use (a short-lived one is created if None)

    Returns:
        DownloadResult with the elapsed wall time of the transfer

    Raises:
        httpx.HTTPStatusError: server answered with an error status
    """
    dest_dir = Path(dest_dir)
    dest_dir.mkdir(parents=True, exist_ok=True)
    path = dest_dir / filename_from_url(url)

    if skip_existing and path.exists():
        logger.info("download_skipped", url=url, path=str(path))
        return DownloadResult(url, path, 0.0, path.stat().st_size, skipped=True)

    owns_client = client is None
    if owns_client:
        client = httpx.Client(follow_redirects=True, timeout=DOWNLOAD_TIMEOUT_S)

    logger.info("download_started", url=url, path=str(path))
    start = time.perf_counter()
    try:
        with client.stream("GET", url) as response:
            response.raise_for_status()
            with open(path, "wb") as f:
                for chunk in response.iter_bytes(CHUNK_SIZE):
                    f.write(chunk)
    finally:
        if owns_client:
            client.close()
    seconds = time.perf_counter() - start

    size = path.stat().st_size
    logger.info(
        "download_finished",
        url=url,
        seconds=round(seconds, 3),
        size_mb=round(size / 1024 / 1024, 2),
    )
    return DownloadResult(url, path, seconds, size)


def random_table(n_rows: int, n_cols: int = 2, seed: int | None = None) -> pl.DataFrame:
    """
    Table of uniform random Float64 values with columns col_1..col_n.
    """
    validate_table_shape(n_rows, n_cols)
    rng = np.random.default_rng(seed)
    return pl.DataFrame({f"col_{i}": rng.random(n_rows) for i in range(1, n_cols + 1)})


def real_csv_options(csv_config: CsvConfig) -> dict:
    """CsvFormat options for the real-world CSV"""
    return {
        "string_columns": list(csv_config.string_columns),
        "missing_string": csv_config.missing_string,
        # Scan every row; late float values in an integer-looking column break a partial scan
        "infer_schema_length": None,
    }


def read_real_csv(path: str | Path, csv_config: CsvConfig) -> pl.DataFrame:
    """
    Read the downloaded CSV.

    ID columns that look numeric are kept as strings and the configured
    marker is read as null.
    """
    return get_format("csv", real_csv_options(csv_config)).read(Path(path))
