"""
State shared by the experiments in one run.

The real-world CSV is downloaded and parsed at most once per session; every
experiment that needs it asks the session. Results accumulate here so the
runner can print a summary and export them.
"""

from dataclasses import dataclass, field
from pathlib import Path

import polars as pl
import structlog

from .config import LabConfig, load_config
from .datasets import DownloadResult, download, random_table, read_real_csv, real_csv_options
from .formats import TableFormat, get_format
from .results import BenchmarkRecord
from .timing import TimingSeries, elapsed

logger = structlog.get_logger()

SMALL = "small"
REAL = "real"


@dataclass
class LabSession:
    config: LabConfig
    records: list[BenchmarkRecord] = field(default_factory=list)
    series: list[TimingSeries] = field(default_factory=list)
    download_result: DownloadResult | None = None
    csv_read_seconds: float | None = None
    _real_table: pl.DataFrame | None = field(default=None, repr=False)
    _small_table: pl.DataFrame | None = field(default=None, repr=False)

    @classmethod
    def from_config_file(cls, config_path: str | None = None) -> "LabSession":
        return cls(config=load_config(config_path))

    @property
    def data_dir(self) -> Path:
        path = self.config.data.path
        path.mkdir(parents=True, exist_ok=True)
        return path

    def scratch_path(self, filename: str) -> Path:
        return self.data_dir / filename

    def fmt(self, name: str, dataset: str = SMALL) -> TableFormat:
        """Format instance, with the CSV reader options for the real dataset"""
        options = {}
        if name == "csv" and dataset == REAL:
            options = real_csv_options(self.config.csv)
        return get_format(name, options)

    def small_table(self) -> pl.DataFrame:
        if self._small_table is None:
            cfg = self.config.small_table
            self._small_table = random_table(cfg.rows, cfg.cols, seed=cfg.seed)
        return self._small_table

    def real_csv(self) -> DownloadResult:
        """Download the real-world CSV (once per session)"""
        if self.download_result is None:
            data = self.config.data
            self.download_result = download(data.url, self.data_dir, data.skip_existing)
        return self.download_result

    def real_table(self) -> pl.DataFrame:
        """Parse the real-world CSV, timing the first parse"""
        if self._real_table is None:
            path = self.real_csv().path
            self.csv_read_seconds, self._real_table = elapsed(
                read_real_csv, path, self.config.csv
            )
            logger.info(
                "real_table_loaded",
                path=str(path),
                rows=self._real_table.height,
                columns=self._real_table.width,
                seconds=round(self.csv_read_seconds, 3),
            )
        return self._real_table

    def real_output_path(self, fmt: TableFormat) -> Path:
        """Next to the download; CSV gets a _2 suffix so the original is kept"""
        source = self.real_csv().path
        if fmt.suffix == source.suffix:
            return source.with_name(f"{source.stem}_2{source.suffix}")
        return fmt.path_for(source)

    def add_records(self, records: list[BenchmarkRecord]) -> list[BenchmarkRecord]:
        self.records.extend(records)
        return records

    def records_for(self, dataset: str, formats: list[str] | None = None) -> list[BenchmarkRecord]:
        """Records of one dataset, optionally restricted to some formats"""
        return [
            r
            for r in self.records
            if r.dataset == dataset and (formats is None or r.format in formats)
        ]
