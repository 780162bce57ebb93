"""
Tests for the session, the experiments and the runner.
No network: the real dataset is pre-seeded into the session.
"""

import math

import numpy as np
import polars as pl
import pytest
from polars.testing import assert_frame_equal

from labs.day06_file_formats import (
    exp02_csv,
    exp03_hdf5,
    exp04_fits,
    exp05_download_vs_disk,
    run_all,
)
from labs.day06_file_formats.config import LabConfig
from labs.day06_file_formats.datasets import DownloadResult, read_real_csv
from labs.day06_file_formats.exp01_timing_basics import estimate_pi
from labs.day06_file_formats.formats import get_format
from labs.day06_file_formats.results import READ_FIRST, READ_SECOND, WRITE
from labs.day06_file_formats.session import REAL, SMALL, LabSession

REAL_CSV = "TCE_ID,kepid,depth\n757076-01,757076,120.5\n757099-01,757099,NA\n"


@pytest.fixture
def session(tmp_path):
    config = LabConfig(
        data={"data_dir": str(tmp_path / "data")},
        small_table={"rows": 32, "cols": 2},
        benchmarks={"row_sizes": [2, 8], "pi_sizes": [1, 16, 256]},
    )
    return LabSession(config=config)


@pytest.fixture
def seeded_session(session):
    """Session whose real-world CSV is already 'downloaded'"""
    path = session.scratch_path("kplr_dr25_inj1_plti.csv")
    path.write_text(REAL_CSV)
    session.download_result = DownloadResult(
        url=session.config.data.url, path=path, seconds=1.0, size_bytes=path.stat().st_size
    )
    return session


class TestEstimatePi:
    def test_converges(self):
        estimate = estimate_pi(200_000, np.random.default_rng(0))
        assert abs(estimate - math.pi) < 0.02

    def test_bounds(self):
        assert 0.0 <= estimate_pi(1, np.random.default_rng(0)) <= 4.0


class TestLabSession:
    """Test shared experiment state"""

    def test_small_table_is_cached(self, session):
        table = session.small_table()
        assert table.shape == (32, 2)
        assert session.small_table() is table

    def test_real_table_parsed_once(self, seeded_session):
        table = seeded_session.real_table()
        assert table["TCE_ID"].to_list() == ["757076-01", "757099-01"]
        assert seeded_session.csv_read_seconds is not None
        assert seeded_session.real_table() is table

    def test_real_output_paths(self, seeded_session):
        """Test CSV output never overwrites the download"""
        source = seeded_session.real_csv().path
        csv_out = seeded_session.real_output_path(get_format("csv"))
        fits_out = seeded_session.real_output_path(get_format("fits"))

        assert csv_out == source.with_name("kplr_dr25_inj1_plti_2.csv")
        assert fits_out == source.with_suffix(".fits")

    def test_records_for(self, seeded_session):
        exp04_fits.run(seeded_session)

        assert {r.dataset for r in seeded_session.records} == {SMALL, REAL}
        assert len(seeded_session.records_for(REAL, ["fits"])) == 3
        assert seeded_session.records_for(REAL, ["csv"]) == []


class TestExperiments:
    """Test the experiments against a seeded session"""

    def test_csv(self, seeded_session):
        """Test the real table is written beside the download, not over it"""
        source = seeded_session.real_csv().path
        exp02_csv.run(seeded_session)

        assert len(seeded_session.records_for(SMALL, ["csv"])) == 3
        real = seeded_session.records_for(REAL, ["csv"])
        assert [r.operation for r in real] == [WRITE, READ_FIRST, READ_SECOND]

        out = source.with_name("kplr_dr25_inj1_plti_2.csv")
        assert source.read_text() == REAL_CSV
        assert real[0].size_bytes == out.stat().st_size
        assert_frame_equal(
            read_real_csv(out, seeded_session.config.csv), seeded_session.real_table()
        )

    def test_csv_scaling_series(self, seeded_session):
        exp02_csv.run(seeded_session)

        labels = [s.label for s in seeded_session.series]
        assert labels == ["Write", "Read (first)", "Read (second)"]
        assert all(s.sizes == [2, 8] for s in seeded_session.series)

    def test_binary_containers(self, seeded_session):
        """Test HDF5 and Parquet sizes are measured on the files beside the CSV"""
        source = seeded_session.real_csv().path
        exp03_hdf5.run(seeded_session)

        for name, suffix in (("hdf5", ".h5"), ("parquet", ".parquet")):
            assert len(seeded_session.records_for(SMALL, [name])) == 3
            real = seeded_session.records_for(REAL, [name])
            assert [r.operation for r in real] == [WRITE, READ_FIRST, READ_SECOND]
            assert real[0].size_bytes == source.with_suffix(suffix).stat().st_size
        assert seeded_session.records_for(REAL, ["csv"]) == []

    def test_download_vs_disk_benchmarks_every_format(self, seeded_session):
        exp05_download_vs_disk.run(seeded_session)

        second_reads = [
            r.format for r in seeded_session.records_for(REAL) if r.operation == READ_SECOND
        ]
        assert second_reads == exp05_download_vs_disk.FORMATS

    def test_download_vs_disk_reuses_records(self, seeded_session, monkeypatch):
        """Test formats already benchmarked are not run again"""
        exp04_fits.run(seeded_session)
        fits_records = seeded_session.records_for(REAL, ["fits"])

        benchmarked = []
        benchmark = exp05_download_vs_disk.benchmark_format

        def counting(fmt, *args, **kwargs):
            benchmarked.append(fmt.name)
            return benchmark(fmt, *args, **kwargs)

        monkeypatch.setattr(exp05_download_vs_disk, "benchmark_format", counting)

        exp05_download_vs_disk.run(seeded_session)
        assert benchmarked == ["csv", "hdf5", "parquet"]
        assert seeded_session.records_for(REAL, ["fits"]) == fits_records

        exp05_download_vs_disk.run(seeded_session)
        assert benchmarked == ["csv", "hdf5", "parquet"]
        assert len(seeded_session.records_for(REAL)) == 12


class TestParseExperiments:
    def test_defaults_to_all(self):
        assert run_all.parse_experiments(None) == [1, 2, 3, 4, 5]

    def test_subset(self):
        assert run_all.parse_experiments("1, 4") == [1, 4]

    def test_invalid_number(self):
        with pytest.raises(ValueError, match="Invalid experiment numbers"):
            run_all.parse_experiments("1,9")

    def test_invalid_format(self):
        with pytest.raises(ValueError, match="comma-separated"):
            run_all.parse_experiments("one")


class TestRunExperiments:
    """Test a failing experiment doesn't stop the others"""

    def test_failure_is_isolated(self, session, monkeypatch):
        ran = []

        def broken(s):
            raise RuntimeError("disk full")

        monkeypatch.setattr(
            run_all,
            "EXPERIMENTS",
            {1: ("Broken", broken), 2: ("Fine", lambda s: ran.append(s))},
        )

        results = run_all.run_experiments([1, 2], session)

        assert [status for *_, status in results] == ["❌", "✅"]
        assert ran == [session]

    def test_main_rejects_bad_experiments(self):
        assert run_all.main(["--experiments", "42"]) == 2

    def test_main_runs_selected(self, tmp_path, monkeypatch):
        """Test the CLI end to end on the π demo, exporting results"""
        config = tmp_path / "lab.yaml"
        config.write_text(
            f"data:\n  data_dir: {tmp_path / 'data'}\nbenchmarks:\n  pi_sizes: [1, 4, 16]\n"
        )
        out = tmp_path / "results.csv"
        series_out = tmp_path / "series.csv"

        code = run_all.main(
            [
                "-e",
                "1",
                "--config",
                str(config),
                "--results-csv",
                str(out),
                "--series-csv",
                str(series_out),
            ]
        )

        assert code == 0
        assert out.exists()
        series = pl.read_csv(series_out)
        assert series.columns == ["series", "size", "seconds"]
        assert series["series"].to_list() == ["estimate_pi"] * 3
        assert series["size"].to_list() == [1, 4, 16]
