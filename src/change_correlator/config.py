"""
Configuration loading and validation for the Lint Change Correlator.

This module handles configuration file parsing, validation, and provides
sensible defaults for all configuration options.
"""

from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field


class DiffConfig(BaseModel):
    """Configuration for the patch builder."""

    context_lines: int = Field(
        default=3,
        ge=0,
        description="Unchanged lines emitted before and after each change.",
    )
    binary_sniff_bytes: int = Field(
        default=8000,
        gt=0,
        description="Leading bytes scanned for a NUL byte to detect binary content.",
    )


class RenameConfig(BaseModel):
    """Configuration for rename detection in the tree differ."""

    enabled: bool = Field(
        default=True,
        description="Pair deleted and added files into renames.",
    )
    similarity_threshold: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Minimum shared-content ratio for a rename.",
    )
    tie_break: Literal["lexicographic"] = Field(
        default="lexicographic",
        description="How equally similar candidates are resolved.",
    )


class ConcurrencyConfig(BaseModel):
    """Configuration for the per-file worker pool."""

    max_workers: Optional[int] = Field(
        default=None,
        ge=1,
        description="Worker threads for per-file diffs (default: available CPUs).",
    )


class OutputConfig(BaseModel):
    """Configuration for output formatting."""

    colorize: bool = Field(
        default=True,
        description="Use colors in terminal output.",
    )
    verbose: bool = Field(
        default=False,
        description="Enable verbose output.",
    )


class LoggingConfig(BaseModel):
    """Configuration for log output."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Root log level used by the CLI.",
    )


class Config(BaseModel):
    """Root configuration model for the Lint Change Correlator."""

    diff: DiffConfig = Field(default_factory=DiffConfig)
    renames: RenameConfig = Field(default_factory=RenameConfig)
    concurrency: ConcurrencyConfig = Field(default_factory=ConcurrencyConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    class Config:
        """Pydantic model configuration."""

        extra = "forbid"


def load_config(config_path: Optional[Path] = None) -> Config:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Path to the configuration file. If None, returns defaults.

    Returns:
        Config object with loaded or default values.

    Raises:
        FileNotFoundError: If the specified config file doesn't exist.
        ValueError: If the config file is invalid.
    """
    if config_path is None:
        return Config()

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return Config(**data)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in configuration file: {e}") from e
    except Exception as e:
        raise ValueError(f"Failed to load configuration: {e}") from e


def find_config_file(start_path: Path) -> Optional[Path]:
    """
    Search for a configuration file starting from the given path.

    Searches for `.change-correlator.yaml` or `.change-correlator.yml`
    in the start path and parent directories.

    Args:
        start_path: Directory to start searching from.

    Returns:
        Path to the config file if found, None otherwise.
    """
    config_names = [".change-correlator.yaml", ".change-correlator.yml"]

    current = start_path.resolve()
    while current != current.parent:
        for name in config_names:
            config_path = current / name
            if config_path.exists():
                return config_path
        current = current.parent

    return None
