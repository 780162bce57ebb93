"""
Adapter between polars DataFrames and FITS binary tables.

The FITS writer wants a mapping of named arrays rather than a DataFrame, and
the reader hands back one array per field. This module does the conversion in
both directions:

- table_to_columns: DataFrame -> ordered {name: array}
- write_fits_table: DataFrame -> FITS file, returning a WriteResult
- read_fits_tables: FITS file -> FitsReadResult (columns, plus a DataFrame
  when every field has the same shape)
"""

import re
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
import polars as pl
import structlog
from astropy.io import fits
from astropy.table import Table

logger = structlog.get_logger()

# Binary table field names live in TTYPE1..TTYPEn
FIELD_NAME_KEYWORD = re.compile(r"^TTYPE(\d+)$")

# First HDU after the mandatory primary HDU
DEFAULT_HDU = 1


class TableWriteError(Exception):
    """A table could not be written; the underlying exception is kept as .cause"""

    def __init__(self, path: Path, cause: Exception):
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Failed to write table to {self.path}: {cause}")


@dataclass(frozen=True)
class WriteResult:
    """Outcome of write_fits_table. error is None on success."""

    path: Path
    error: TableWriteError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> "WriteResult":
        if self.error is not None:
            raise self.error
        return self


@dataclass
class FitsReadResult:
    """
    Fields read from one FITS HDU.

    columns always holds every field that could be read. table is a DataFrame
    built from those columns when they all share one shape, otherwise None.
    """

    path: Path
    hdu: int
    columns: dict[str, np.ndarray] = field(default_factory=dict)
    skipped: list[str] = field(default_factory=list)
    table: pl.DataFrame | None = None

    @property
    def is_tabular(self) -> bool:
        return self.table is not None


def table_to_columns(table: pl.DataFrame) -> dict[str, np.ndarray]:
    """Convert a DataFrame to an ordered {column name: values} dict."""
    return {name: table.get_column(name).to_numpy() for name in table.columns}


def binary_ready(table: pl.DataFrame) -> pl.DataFrame:
    """
    Replace nulls that binary containers cannot hold.

    Strings get "" and Boolean columns with nulls become Float64 (1.0, 0.0,
    NaN). Boolean columns without nulls are left as logicals.
    """
    nullable_flags = [
        name
        for name, dtype in table.schema.items()
        if dtype == pl.Boolean and table.get_column(name).null_count() > 0
    ]
    return table.with_columns(
        pl.col(pl.String).fill_null(""),
        *[pl.col(name).cast(pl.Float64) for name in nullable_flags],
    )


def _fits_array(name: str, values: np.ndarray) -> np.ndarray:
    if values.dtype == object:
        raise TypeError(f"Column '{name}' has no FITS equivalent (object values)")
    return values


def write_fits_table(path: str | Path, table: pl.DataFrame) -> WriteResult:
    """
    Write a DataFrame to a FITS file as a binary table in HDU 1.

    Failures while converting, opening, writing or closing are logged and
    returned in the WriteResult; they are not raised.
    """
    path = Path(path)
    try:
        columns = table_to_columns(binary_ready(table))
        hdu = fits.table_to_hdu(
            Table({name: _fits_array(name, values) for name, values in columns.items()})
        )
        hdul = fits.HDUList([fits.PrimaryHDU(), hdu])
        hdul.writeto(path, overwrite=True)
    except Exception as e:
        error = TableWriteError(path, e)
        logger.warning("fits_write_failed", path=str(path), error=str(e))
        return WriteResult(path=path, error=error)

    logger.debug("fits_written", path=str(path), rows=table.height, columns=table.width)
    return WriteResult(path=path)


def field_names(header: fits.Header) -> list[str]:
    """Field names from the TTYPEn keywords of a table header, in n order."""
    numbered = []
    for keyword, value in header.items():
        match = FIELD_NAME_KEYWORD.match(keyword)
        if match:
            numbered.append((int(match.group(1)), str(value)))
    return [name for _, name in sorted(numbered)]


def _native(values: np.ndarray) -> np.ndarray:
    """FITS stores big-endian ASCII; polars needs native byte order and str."""
    if values.dtype.kind == "S":
        return np.char.decode(values, "ascii")
    if values.dtype.kind in "biufc" and not values.dtype.isnative:
        return values.astype(values.dtype.newbyteorder("="))
    return values


def read_fits_tables(path: str | Path, hdu: int = DEFAULT_HDU) -> FitsReadResult:
    """
    Read the columns of the binary table in one HDU of a FITS file.

    Args:
        path: FITS file to read
        hdu: 0-based HDU index (default 1, the first HDU after the primary)

    Returns:
        FitsReadResult. Fields that fail to read are logged and listed in
        .skipped. .table is set only when all fields have the same shape.

    Raises:
        IndexError: hdu is not an HDU of the file
    """
    path = Path(path)
    result = FitsReadResult(path=path, hdu=hdu)

    with fits.open(path, memmap=False) as hdul:
        if not 0 <= hdu < len(hdul):
            raise IndexError(f"HDU {hdu} out of range for {path} ({len(hdul)} HDUs)")
        table_hdu = hdul[hdu]

        for name in field_names(table_hdu.header):
            try:
                result.columns[name] = _native(np.array(table_hdu.data[name]))
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(
                    "fits_field_unreadable", path=str(path), hdu=hdu, field=name, error=str(e)
                )
                result.skipped.append(name)

    shapes = {values.shape for values in result.columns.values()}
    if len(shapes) == 1:
        result.table = pl.DataFrame(
            [pl.Series(name, values) for name, values in result.columns.items()]
        )
    else:
        logger.info(
            "fits_fields_not_tabular", path=str(path), hdu=hdu, shapes=sorted(map(str, shapes))
        )

    return result
