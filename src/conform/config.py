"""Configuration management for the conform CLI tool.

Handles configuration loading from multiple sources with precedence:
CLI args > environment variables > .conformrc > pyproject.toml > defaults
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

# tomllib is only available in Python 3.11+
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found]


@dataclass
class ConformConfig:
    """Configuration for the conform CLI tool.

    Attributes:
        config_file: Specification document to check against (default: "conform.yaml")
        context_dir: Directory to check (default: ".")
        fetch_timeout: Timeout in seconds for fetching remote documents (default: 30.0)
        max_workers: Maximum concurrent fetches per include list (default: 8)
    """

    config_file: str = "conform.yaml"
    context_dir: str = "."
    fetch_timeout: float = 30.0
    max_workers: int = 8

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If any configuration value is invalid.
        """
        if not self.config_file or not isinstance(self.config_file, str):
            raise ValueError("config_file must be a non-empty string")

        if not self.context_dir or not isinstance(self.context_dir, str):
            raise ValueError("context_dir must be a non-empty string")

        if isinstance(self.fetch_timeout, bool) or not isinstance(self.fetch_timeout, (int, float)):
            raise ValueError("fetch_timeout must be a number")
        if self.fetch_timeout <= 0:
            raise ValueError("fetch_timeout must be greater than 0")

        if isinstance(self.max_workers, bool) or not isinstance(self.max_workers, int):
            raise ValueError("max_workers must be an integer")
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")

    def get_context_path(self, base_path: Path | None = None) -> Path:
        """Get the full path to the directory being checked.

        Args:
            base_path: Base path to resolve from. Defaults to current directory.

        Returns:
            Path to the context directory.
        """
        base = base_path or Path.cwd()
        return base / self.context_dir

    def get_config_path(self, base_path: Path | None = None) -> Path:
        """Get the full path to the local specification document.

        Args:
            base_path: Base path to resolve from. Defaults to current directory.

        Returns:
            Path to the specification document.
        """
        base = base_path or Path.cwd()
        return base / self.config_file


# Config files searched upwards from the start directory, lowest precedence
# first. Each entry is the file name and the table holding conform's keys.
CONFIG_FILES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("pyproject.toml", ("tool", "conform")),
    (".conformrc", ()),
)

ENV_PREFIX = "CONFORM_"


def find_config_file(filename: str = ".conformrc", start_dir: Path | None = None) -> Path | None:
    """Find a configuration file by traversing up the directory tree.

    Args:
        filename: Name of the config file to find.
        start_dir: Directory to start searching from. Defaults to current directory.

    Returns:
        Path to the closest matching file, or None if there is none.
    """
    current = (start_dir or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / filename
        if candidate.is_file():
            return candidate
    return None


def _known_fields(data: dict[str, Any]) -> dict[str, Any]:
    names = {f.name for f in fields(ConformConfig)}
    return {k: v for k, v in data.items() if k in names and v is not None}


def _load_file_layer(
    filename: str, table: tuple[str, ...], start_dir: Path | None
) -> dict[str, Any]:
    """Read conform's settings from the closest ``filename``.

    A missing or unparsable file, or one without the ``table``, contributes
    nothing. Unknown keys are dropped.
    """
    path = find_config_file(filename, start_dir)
    if path is None:
        return {}

    try:
        with open(path, "rb") as f:
            data: Any = tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError):
        return {}

    for key in table:
        data = data.get(key) if isinstance(data, dict) else None
    if not isinstance(data, dict):
        return {}
    return _known_fields(data)


def _load_env_layer() -> dict[str, Any]:
    """Read settings from ``CONFORM_<FIELD>`` environment variables.

    Numeric fields are converted using the type of their default value.

    Raises:
        ValueError: If a numeric variable has a non-numeric value.
    """
    result: dict[str, Any] = {}
    for f in fields(ConformConfig):
        value = os.environ.get(ENV_PREFIX + f.name.upper())
        if value is None:
            continue
        kind = type(f.default)
        if kind is str:
            result[f.name] = value
            continue
        try:
            result[f.name] = kind(value)
        except ValueError:
            raise ValueError(f"{f.name} must be a number, got {value!r}") from None
    return result


def load_config(
    cli_overrides: dict[str, Any] | None = None,
    start_dir: Path | None = None,
) -> ConformConfig:
    """Load configuration with full precedence chain.

    Precedence (highest to lowest):
    1. CLI arguments (cli_overrides)
    2. Environment variables (CONFORM_*)
    3. .conformrc file
    4. pyproject.toml [tool.conform] section
    5. Default values

    Args:
        cli_overrides: Configuration overrides from CLI arguments. None values
            are skipped so unset options don't mask lower layers.
        start_dir: Directory to start searching for config files.

    Returns:
        Fully resolved ConformConfig instance.

    Raises:
        ValueError: If the resulting configuration is invalid.
    """
    merged: dict[str, Any] = {}
    for filename, table in CONFIG_FILES:
        merged.update(_load_file_layer(filename, table, start_dir))
    merged.update(_load_env_layer())
    merged.update(_known_fields(cli_overrides or {}))
    return ConformConfig(**merged)
