"""CLI utility functions for conform.

Provides helper functions for:
- Config wiring: Extracting Typer CLI options and passing to load_config
- Path checks: Verifying the context directory
- Error formatting: Consistent user-friendly error messages with exit codes
- Logging: Routing library log records through rich
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.logging import RichHandler

from conform.config import ConformConfig, load_config

# Exit code conventions
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1  # User error (bad specification, unreachable include, etc.)
EXIT_SYSTEM_ERROR = 2  # System error (permissions, I/O, etc.)
EXIT_PROBLEMS_FOUND = 3  # The checked directory doesn't conform


# -----------------------------------------------------------------------------
# Error Formatting Helpers
# -----------------------------------------------------------------------------


def error(msg: str, *, exit_code: int = EXIT_USER_ERROR) -> NoReturn:
    """Print an error message and exit with the given exit code.

    Args:
        msg: The error message to display.
        exit_code: Exit code to use (default: EXIT_USER_ERROR=1).

    Raises:
        typer.Exit: Always raises to exit the program.
    """
    styled_prefix = typer.style("Error:", fg=typer.colors.RED, bold=True)
    typer.echo(f"{styled_prefix} {msg}", err=True)
    raise typer.Exit(code=exit_code)


def warning(msg: str) -> None:
    """Print a warning message to stderr.

    Args:
        msg: The warning message to display.
    """
    styled_prefix = typer.style("Warning:", fg=typer.colors.YELLOW, bold=True)
    typer.echo(f"{styled_prefix} {msg}", err=True)


def success(msg: str) -> None:
    """Print a success message to stdout.

    Args:
        msg: The success message to display.
    """
    styled_prefix = typer.style("Success:", fg=typer.colors.GREEN, bold=True)
    typer.echo(f"{styled_prefix} {msg}")


def info(msg: str) -> None:
    """Print an info message to stdout."""
    typer.echo(msg)


def format_problem_count(count: int) -> str:
    """Format the summary line for a number of problems."""
    noun = "problem" if count == 1 else "problems"
    return f"Found {count} {noun}"


# -----------------------------------------------------------------------------
# Path Helpers
# -----------------------------------------------------------------------------


def ensure_directory(path: Path, path_type: str = "directory") -> Path:
    """Ensure a path exists and is a directory.

    Args:
        path: The path to check.
        path_type: Human-readable name for the path (for error messages).

    Returns:
        The verified path.

    Raises:
        typer.Exit: If the path doesn't exist or is not a directory.
    """
    if not path.exists():
        error(f"{path_type} does not exist: {path}")

    if not path.is_dir():
        error(f"{path_type} is not a directory: {path}")

    return path


# -----------------------------------------------------------------------------
# Config Wiring Helper
# -----------------------------------------------------------------------------


def wire_config(
    config_file: str | None = None,
    context_dir: str | None = None,
    fetch_timeout: float | None = None,
    start_dir: Path | None = None,
) -> ConformConfig:
    """Wire CLI options to load_config with appropriate overrides.

    Args:
        config_file: Override for the specification document path.
        context_dir: Override for the directory to check.
        fetch_timeout: Override for the remote fetch timeout.
        start_dir: Directory to start searching for config files.

    Returns:
        Fully resolved ConformConfig instance.

    Raises:
        typer.Exit: If configuration is invalid.
    """
    cli_overrides: dict[str, Any] = {}

    if config_file is not None:
        cli_overrides["config_file"] = config_file
    if context_dir is not None:
        cli_overrides["context_dir"] = context_dir
    if fetch_timeout is not None:
        cli_overrides["fetch_timeout"] = fetch_timeout

    try:
        return load_config(cli_overrides=cli_overrides, start_dir=start_dir)
    except ValueError as e:
        error(f"Invalid configuration: {e}", exit_code=EXIT_USER_ERROR)


# -----------------------------------------------------------------------------
# Logging
# -----------------------------------------------------------------------------


def configure_logging(verbose: bool = False) -> None:
    """Send conform's log records to stderr through rich.

    Args:
        verbose: Log at DEBUG instead of WARNING.
    """
    logger = logging.getLogger("conform")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


# -----------------------------------------------------------------------------
# Typer Option Factory Functions
# -----------------------------------------------------------------------------
# Typer consumes Option objects when decorating commands, so each command
# needs its own instance.


def file_option() -> Any:
    """Create a Typer Option for --file / -f."""
    return typer.Option(
        None,
        "--file",
        "-f",
        help="The specification file to check against (default: conform.yaml).",
    )


def url_option() -> Any:
    """Create a Typer Option for --url / -u."""
    return typer.Option(
        None,
        "--url",
        "-u",
        help="A URL to fetch the specification from instead of --file.",
    )


def context_option() -> Any:
    """Create a Typer Option for --context / -c."""
    return typer.Option(
        None,
        "--context",
        "-c",
        help="The folder to check against the specification (default: .).",
        envvar="CONFORM_CONTEXT_DIR",
    )


def timeout_option() -> Any:
    """Create a Typer Option for --timeout."""
    return typer.Option(
        None,
        "--timeout",
        help="Timeout in seconds for fetching remote documents (default: 30).",
        envvar="CONFORM_FETCH_TIMEOUT",
    )


def json_option() -> Any:
    """Create a Typer Option for --json."""
    return typer.Option(False, "--json", help="Output as JSON.")


def verbose_option() -> Any:
    """Create a Typer Option for --verbose."""
    return typer.Option(False, "--verbose", help="Log resolution and checking details.")
