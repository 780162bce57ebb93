"""
Shared configuration and console helpers for the file format experiments.

Config is loaded from YAML, validated with Pydantic and supports ${VAR}
environment interpolation.
"""

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator
from rich.console import Console

DEFAULT_CONFIG = Path(__file__).resolve().parent / "lab.yaml"

# rows * cols beyond this would be a >8GB file of Float64s
MAX_VALUES = 1024**3
MAX_COLUMNS = 1024

console = Console()


def validate_table_shape(n_rows: int, n_cols: int) -> None:
    """Raise ValueError for table shapes the lab refuses to generate."""
    if n_rows < 1:
        raise ValueError("Make sure to specify at least one row.")
    if not 1 <= n_cols <= MAX_COLUMNS:
        raise ValueError(
            f"Make sure to specify at least one column and no more than {MAX_COLUMNS}."
        )
    if n_rows * n_cols > MAX_VALUES:
        raise ValueError("The values you chose would result in a >8GB file!")


class DataConfig(BaseModel):
    """Where the real-world dataset comes from and where files are written"""

    url: str = Field(
        default="https://personal.psu.edu/~ebf11/data/kplr_dr25_inj1_plti.csv",
        description="Remote CSV used for the real-world benchmarks",
    )
    data_dir: str = Field(default="data", description="Directory for downloads and scratch files")
    skip_existing: bool = Field(
        default=False, description="Skip the download if the file is already present"
    )

    @property
    def path(self) -> Path:
        return Path(self.data_dir)


class SmallTableConfig(BaseModel):
    """Random Float64 table used for the small-file benchmarks"""

    rows: int | Literal["small", "medium", "large"] = Field(
        default=1024, description="small=1024, medium=65536, large=1048576, or custom int"
    )
    cols: int = Field(default=2, description="Number of columns (1-1024)")
    seed: int | None = Field(default=42, description="Random seed (null for random)")

    @field_validator("rows")
    @classmethod
    def resolve_rows(cls, v):
        """Convert preset names to integers"""
        presets = {
            "small": 1024,
            "medium": 65_536,
            "large": 1_048_576,
        }
        return presets.get(v, v) if isinstance(v, str) else v

    @model_validator(mode="after")
    def validate_shape(self):
        """Reject tables that are empty or would not fit on a laptop disk"""
        validate_table_shape(self.rows, self.cols)
        return self


class BenchmarkConfig(BaseModel):
    """Problem sizes for the scaling benchmarks"""

    row_sizes: list[int] = Field(
        default=[2**1, 2**3, 2**5, 2**7, 2**9, 2**11, 2**13, 2**15, 2**17, 2**20],
        description="Row counts for the CSV scaling benchmark",
    )
    pi_sizes: list[int] = Field(
        default=[2**i for i in range(22)],
        description="Sample counts for the Monte Carlo timing demo",
    )
    seed: int | None = Field(default=42, description="Random seed for benchmark data")

    @field_validator("row_sizes", "pi_sizes")
    @classmethod
    def positive_sizes(cls, v):
        if any(n < 1 for n in v):
            raise ValueError(f"Problem sizes must be positive: {v}")
        return v


class CsvConfig(BaseModel):
    """Reader options for the real-world CSV"""

    string_columns: list[str] = Field(
        default=["TCE_ID"], description="Columns that must stay strings (e.g. '10000-01')"
    )
    missing_string: str = Field(default="NA", description="Marker for missing values")


class LoggingConfig(BaseModel):
    level: str = Field(default="${LOG_LEVEL}", description="DEBUG, INFO, WARNING or ERROR")

    @property
    def resolved_level(self) -> str:
        """Unresolved ${VAR} placeholders fall back to INFO"""
        if self.level.startswith("${"):
            return "INFO"
        return self.level.upper()


class LabConfig(BaseModel):
    """Complete configuration schema"""

    data: DataConfig = Field(default_factory=DataConfig)
    small_table: SmallTableConfig = Field(default_factory=SmallTableConfig)
    benchmarks: BenchmarkConfig = Field(default_factory=BenchmarkConfig)
    csv: CsvConfig = Field(default_factory=CsvConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def interpolate_env_vars(data: Any) -> Any:
    """
    Recursively interpolate environment variables in config.
    Supports ${VAR_NAME} syntax.
    """
    if isinstance(data, dict):
        return {k: interpolate_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [interpolate_env_vars(item) for item in data]
    elif isinstance(data, str) and data.startswith("${") and data.endswith("}"):
        var_name = data[2:-1]
        return os.environ.get(var_name, data)
    return data


def load_config(config_path: str | None = None) -> LabConfig:
    """
    Load and validate configuration from YAML file.

    Args:
        config_path: Path to lab.yaml (uses $LAB_CONFIG, then the bundled file, if None)

    Returns:
        Validated LabConfig object
    """
    if config_path is None:
        config_path = os.environ.get("LAB_CONFIG", str(DEFAULT_CONFIG))

    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(
            f"Config file not found: {path}\n"
            f"Try setting LAB_CONFIG environment variable or pass --config"
        )

    with open(path) as f:
        raw_config = yaml.safe_load(f) or {}

    return LabConfig(**interpolate_env_vars(raw_config))


def print_section_header(title: str):
    """Print a formatted section header."""
    console.print(f"\n[bold cyan]{title}[/bold cyan]")


def print_step(step: str):
    """Print a verbose step description."""
    console.print(f"  [dim]→[/dim] {step}")


def print_metric(label: str, value: str, color: str = "green"):
    """Print a formatted metric."""
    console.print(f"  [{color}]✓ {label}:[/{color}] {value}")


def format_time(seconds: float) -> str:
    """Format time in seconds to human-readable string."""
    if seconds < 1e-3:
        return f"{seconds * 1e6:.1f}µs"
    if seconds < 1:
        return f"{seconds * 1000:.1f}ms"
    return f"{seconds:.3f}s"


def format_size(size_bytes: int) -> str:
    """Format size in bytes to human-readable string."""
    size_mb = size_bytes / (1024 * 1024)
    if size_mb < 1:
        return f"{size_bytes / 1024:.2f} KB"
    return f"{size_mb:.2f} MB"
