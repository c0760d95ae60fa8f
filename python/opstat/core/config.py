"""Configuration management for opstat."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsError

from opstat.core.errors import ConfigError


class ForkConfig(BaseModel):
    """Protocol upgrade activation heights (mainnet defaults).

    The homestead fee table is the baseline and applies from genesis.
    """

    eip150_block: int = Field(default=2_463_000, ge=0, description="Gas repricing")
    eip158_block: int = Field(default=2_675_000, ge=0, description="State clearing")
    byzantium_block: int = Field(default=4_370_000, ge=0)
    constantinople_block: int = Field(default=7_280_000, ge=0, description="Shift ops")

    @model_validator(mode="after")
    def _check_order(self) -> ForkConfig:
        heights = [
            self.eip150_block,
            self.eip158_block,
            self.byzantium_block,
            self.constantinople_block,
        ]
        if heights != sorted(heights):
            raise ValueError(f"fork activation heights out of order: {heights}")
        return self

    def annotations(self) -> list[tuple[str, int]]:
        """(label, height) pairs for the repricing forks, for chart markers."""
        return [
            ("EIP150", self.eip150_block),
            ("EIP158", self.eip158_block),
            ("Byzantium", self.byzantium_block),
            ("Constantinople", self.constantinople_block),
        ]


class DataConfig(BaseModel):
    """Checkpoint file discovery."""

    metrics_dir: Path = Field(default=Path("metrics"))
    file_prefix: str = Field(default="metrics_to", min_length=1)
    strict: bool = Field(default=False, description="Abort on the first undecodable file")


class AnalysisConfig(BaseModel):
    """Series and ranking parameters."""

    activity_threshold: int = Field(
        default=500, ge=0, description="Minimum invocations per interval for a series point"
    )
    moving_average_window: int = Field(default=10, ge=1)
    default_metric: str = Field(default="time_per_gas")
    include_restarts: bool = Field(default=False)


class ChartConfig(BaseModel):
    """Chart rendering."""

    output_dir: Path = Field(default=Path("charts"))
    width: float = Field(default=16.0, gt=0)
    height: float = Field(default=9.0, gt=0)
    dpi: int = Field(default=100, ge=10)
    annotate_forks: bool = Field(default=True)


class OpstatConfig(BaseSettings):
    """Root configuration for opstat."""

    forks: ForkConfig = Field(default_factory=ForkConfig)
    data: DataConfig = Field(default_factory=DataConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    charts: ChartConfig = Field(default_factory=ChartConfig)

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")

    model_config = {"env_prefix": "OPSTAT_", "env_nested_delimiter": "__"}

    @classmethod
    def from_yaml(cls, path: Path) -> OpstatConfig:
        import yaml
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"{path}: invalid YAML: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{path}: expected a mapping, got {type(data).__name__}")
        try:
            return cls(**data)
        except (ValidationError, SettingsError) as e:
            raise ConfigError(f"{path}: {e}") from e

    @classmethod
    def load(cls, path: Path | None = None) -> OpstatConfig:
        """Settings from ``path`` if it exists, otherwise from the environment alone."""
        if path is not None and path.exists():
            return cls.from_yaml(path)
        try:
            return cls()
        except (ValidationError, SettingsError) as e:
            raise ConfigError(f"environment: {e}") from e
