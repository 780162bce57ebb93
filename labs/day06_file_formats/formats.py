"""
Pluggable table file formats.
All formats are auto-registered via decorators and looked up by name.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import h5py
import numpy as np
import polars as pl
import structlog

from .tables import DEFAULT_HDU, binary_ready, read_fits_tables, write_fits_table

logger = structlog.get_logger()

# HDF5 group attribute holding the column order
COLUMNS_ATTR = "columns"
DEFAULT_KEY = "data"


class TableFormat(ABC):
    """
    Abstract base class for table file formats.

    Each format writes a DataFrame to a single file and reads it back.
    """

    name: str = ""
    suffix: str = ""

    def __init__(self, options: dict[str, Any] | None = None):
        self.options = options or {}
        self.logger = logger.bind(format=self.name)

    @abstractmethod
    def write(self, table: pl.DataFrame, path: Path) -> None:
        """Write table to path, replacing any existing file."""
        pass

    @abstractmethod
    def read(self, path: Path) -> pl.DataFrame:
        """Read a table previously written by write()."""
        pass

    def path_for(self, base: Path) -> Path:
        """Swap the suffix of base for this format's suffix"""
        return Path(base).with_suffix(self.suffix)


FORMAT_REGISTRY: dict[str, type[TableFormat]] = {}


def register_format(name: str):
    """
    Decorator to register a format implementation.

    Usage:
        @register_format("csv")
        class CsvFormat(TableFormat):
            ...
    """

    def decorator(cls):
        cls.name = name
        FORMAT_REGISTRY[name] = cls
        return cls

    return decorator


def get_format(name: str, options: dict[str, Any] | None = None) -> TableFormat:
    """
    Factory function to instantiate a format by name.

    Args:
        name: Format name (csv, hdf5, fits, parquet)
        options: Format-specific options

    Returns:
        Initialized TableFormat instance
    """
    if name not in FORMAT_REGISTRY:
        available = ", ".join(FORMAT_REGISTRY.keys())
        raise ValueError(f"Unknown format: {name}. Available: {available}")

    return FORMAT_REGISTRY[name](options)


@register_format("csv")
class CsvFormat(TableFormat):
    """
    Delimited text via polars.

    Options:
        string_columns: columns read as strings regardless of content
        missing_string: marker written for nulls and treated as null on read
        infer_schema_length: rows scanned to infer column types
    """

    suffix = ".csv"

    def write(self, table: pl.DataFrame, path: Path) -> None:
        table.write_csv(path, null_value=self.options.get("missing_string", ""))

    def read(self, path: Path) -> pl.DataFrame:
        schema_overrides = {name: pl.String for name in self.options.get("string_columns", [])}
        missing = self.options.get("missing_string")
        return pl.read_csv(
            path,
            schema_overrides=schema_overrides or None,
            null_values=[missing] if missing else None,
            infer_schema_length=self.options.get("infer_schema_length", 100),
        )


@register_format("hdf5")
class Hdf5Format(TableFormat):
    """HDF5 via h5py: one group per table, one dataset per column"""

    suffix = ".h5"

    def write(self, table: pl.DataFrame, path: Path) -> None:
        save_hdf5(path, {self.options.get("key", DEFAULT_KEY): table})

    def read(self, path: Path) -> pl.DataFrame:
        return load_hdf5(path, self.options.get("key", DEFAULT_KEY))


@register_format("fits")
class FitsFormat(TableFormat):
    """FITS binary table via astropy"""

    suffix = ".fits"

    def write(self, table: pl.DataFrame, path: Path) -> None:
        write_fits_table(path, table).raise_for_error()

    def read(self, path: Path) -> pl.DataFrame:
        result = read_fits_tables(path, hdu=self.options.get("hdu", DEFAULT_HDU))
        if not result.is_tabular:
            self.logger.warning("fits_not_tabular", path=str(path), fields=list(result.columns))
            raise ValueError(f"Fields in {path} have differing shapes; not a table")
        return result.table


@register_format("parquet")
class ParquetFormat(TableFormat):
    """Columnar Parquet via polars"""

    suffix = ".parquet"

    def write(self, table: pl.DataFrame, path: Path) -> None:
        table.write_parquet(path, compression=self.options.get("compression", "snappy"))

    def read(self, path: Path) -> pl.DataFrame:
        return pl.read_parquet(path)


def _hdf5_array(series: pl.Series) -> np.ndarray:
    if series.dtype == pl.String:
        return np.array(series.to_list(), dtype=h5py.string_dtype())
    values = series.to_numpy()
    if values.dtype == object:
        raise TypeError(f"Column '{series.name}' has no HDF5 equivalent (object values)")
    return values


def save_hdf5(path: str | Path, tables: dict[str, pl.DataFrame]) -> None:
    """
    Save tables to an HDF5 file, one group per key.

    Args:
        path: Destination file (overwritten)
        tables: Mapping of key -> DataFrame

    Raises:
        TypeError: a column has no HDF5 equivalent (nothing is written)
    """
    arrays = {
        key: {s.name: _hdf5_array(s) for s in binary_ready(table).get_columns()}
        for key, table in tables.items()
    }

    with h5py.File(path, "w") as f:
        for key, columns in arrays.items():
            group = f.create_group(key)
            group.attrs[COLUMNS_ATTR] = list(columns)
            for name, values in columns.items():
                group.create_dataset(name, data=values)

    logger.debug("hdf5_written", path=str(path), keys=list(tables))


def load_hdf5(path: str | Path, key: str = DEFAULT_KEY) -> pl.DataFrame:
    """
    Load one table saved by save_hdf5.

    Raises:
        KeyError: key is not a table in the file
    """
    with h5py.File(path, "r") as f:
        if key not in f:
            raise KeyError(f"No table '{key}' in {path}. Available: {list(f.keys())}")
        group = f[key]
        names = [
            name.decode() if isinstance(name, bytes) else str(name)
            for name in group.attrs[COLUMNS_ATTR]
        ]

        columns = []
        for name in names:
            dataset = group[name]
            if h5py.check_string_dtype(dataset.dtype) is not None:
                values = dataset.asstr()[()]
                columns.append(pl.Series(name, list(values), dtype=pl.String))
            else:
                columns.append(pl.Series(name, dataset[()]))

    return pl.DataFrame(columns)
