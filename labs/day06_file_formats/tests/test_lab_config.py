"""
Lean tests for configuration validation and logging setup.
Tests the Pydantic models and config loading logic.
"""

import logging

import pytest
import structlog

from labs.day06_file_formats.config import (
    DEFAULT_CONFIG,
    BenchmarkConfig,
    LabConfig,
    LoggingConfig,
    SmallTableConfig,
    format_size,
    format_time,
    interpolate_env_vars,
    load_config,
)
from labs.day06_file_formats.logging_config import resolve_level, setup_logging


class TestSmallTableConfig:
    """Test small table shape validation"""

    def test_defaults(self):
        config = SmallTableConfig()
        assert config.rows == 1024
        assert config.cols == 2

    def test_row_presets(self):
        """Test row preset resolution"""
        assert SmallTableConfig(rows="small").rows == 1024
        assert SmallTableConfig(rows="large").rows == 1_048_576

    def test_zero_rows(self):
        with pytest.raises(ValueError, match="at least one row"):
            SmallTableConfig(rows=0)

    def test_too_many_columns(self):
        with pytest.raises(ValueError, match="no more than 1024"):
            SmallTableConfig(cols=1025)

    def test_too_many_values(self):
        """Test >8GB tables are rejected"""
        with pytest.raises(ValueError, match="8GB"):
            SmallTableConfig(rows=2**21, cols=1024)


class TestBenchmarkConfig:
    """Test benchmark problem sizes"""

    def test_default_sizes(self):
        config = BenchmarkConfig()
        assert config.row_sizes[0] == 2
        assert config.row_sizes[-1] == 2**20
        assert config.pi_sizes == [2**i for i in range(22)]

    def test_non_positive_size(self):
        with pytest.raises(ValueError):
            BenchmarkConfig(row_sizes=[2, 0])


class TestLabConfig:
    """Test complete configuration"""

    def test_valid_config(self):
        config = LabConfig()
        assert config.data.url.endswith("kplr_dr25_inj1_plti.csv")
        assert config.data.skip_existing is False
        assert config.csv.string_columns == ["TCE_ID"]
        assert config.csv.missing_string == "NA"

    def test_unresolved_log_level_falls_back(self):
        assert LoggingConfig().resolved_level == "INFO"
        assert LoggingConfig(level="debug").resolved_level == "DEBUG"


class TestEnvInterpolation:
    """Test environment variable interpolation"""

    def test_interpolate_nested(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        data = {"logging": {"level": "${LOG_LEVEL}"}, "sizes": ["${LOG_LEVEL}", 2]}

        result = interpolate_env_vars(data)
        assert result["logging"]["level"] == "DEBUG"
        assert result["sizes"] == ["DEBUG", 2]

    def test_missing_env_var(self):
        """Test missing env var returns original string"""
        result = interpolate_env_vars("${NONEXISTENT_VAR}")
        assert result == "${NONEXISTENT_VAR}"


class TestConfigLoader:
    """Test config loading from file"""

    def test_load_bundled_config(self, monkeypatch):
        monkeypatch.delenv("LAB_CONFIG", raising=False)

        config = load_config()
        assert isinstance(config, LabConfig)
        assert config == load_config(str(DEFAULT_CONFIG))
        assert config.small_table.rows == 1024

    def test_env_var_selects_file(self, tmp_path, monkeypatch):
        path = tmp_path / "lab.yaml"
        path.write_text("small_table:\n  rows: 16\n  cols: 3\ndata:\n  skip_existing: true\n")
        monkeypatch.setenv("LAB_CONFIG", str(path))

        config = load_config()
        assert config.small_table.rows == 16
        assert config.small_table.cols == 3
        assert config.data.skip_existing is True

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert load_config(str(path)) == LabConfig()

    def test_invalid_values_rejected(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("small_table:\n  cols: 0\n")

        with pytest.raises(ValueError):
            load_config(str(path))

    def test_load_nonexistent_config(self):
        with pytest.raises(FileNotFoundError):
            load_config("/nonexistent/lab.yaml")


class TestFormatting:
    def test_format_time(self):
        assert format_time(2.5) == "2.500s"
        assert format_time(0.0125) == "12.5ms"
        assert format_time(0.0000025) == "2.5µs"

    def test_format_size(self):
        assert format_size(2048) == "2.00 KB"
        assert format_size(3 * 1024 * 1024) == "3.00 MB"


class TestSetupLogging:
    """Test structlog level handling"""

    @pytest.fixture(autouse=True)
    def reset_structlog(self):
        yield
        structlog.reset_defaults()

    def test_resolve_level(self):
        assert resolve_level("debug") == logging.DEBUG
        assert resolve_level("WARNING") == logging.WARNING

    def test_unknown_level_means_info(self):
        assert resolve_level("chatty") == logging.INFO
        assert resolve_level(None) == logging.INFO

    def test_filters_below_level(self, capsys):
        assert setup_logging("WARNING", colors=False) == logging.WARNING

        log = structlog.get_logger()
        log.info("hidden_event")
        log.warning("shown_event", path="t.fits")

        err = capsys.readouterr().err
        assert "hidden_event" not in err
        assert "shown_event" in err
        assert "path=t.fits" in err
