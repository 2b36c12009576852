"""conform CLI Tool - Main entry point."""

from __future__ import annotations

import json
from typing import Any

import typer
import yaml
from rich.console import Console

from conform import __version__
from conform.checker import FilesAndFolders, check_folder
from conform.cli_utils import (
    EXIT_PROBLEMS_FOUND,
    EXIT_SUCCESS,
    EXIT_SYSTEM_ERROR,
    configure_logging,
    context_option,
    ensure_directory,
    error,
    file_option,
    format_problem_count,
    info,
    json_option,
    success,
    timeout_option,
    url_option,
    verbose_option,
    warning,
    wire_config,
)
from conform.config import ConformConfig
from conform.document import dump_items
from conform.errors import CheckIOError, ConformError
from conform.problems import problem_kind
from conform.resolver import load_source, resolve

app = typer.Typer(
    name="conform",
    help="Check that a folder conforms to a YAML|JSON|TOML specification.",
    add_completion=False,
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"conform version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Check that a folder conforms to a YAML|JSON|TOML specification."""


def _load_items(config: ConformConfig, url: str | None) -> list[FilesAndFolders]:
    """Load the root specification and resolve its includes.

    Raises:
        typer.Exit: If the specification or any include can't be loaded.
    """
    reference = url or str(config.get_config_path())
    try:
        document, source = load_source(reference, timeout=config.fetch_timeout)
        items = resolve(
            document,
            source,
            max_workers=config.max_workers,
            timeout=config.fetch_timeout,
        )
    except ConformError as e:
        error(str(e))

    if not items:
        warning(f"{reference} contains no checks")
    return items


# -----------------------------------------------------------------------------
# Check Command
# -----------------------------------------------------------------------------


@app.command()
def check(
    file: str | None = file_option(),
    url: str | None = url_option(),
    context: str | None = context_option(),
    timeout: float | None = timeout_option(),
    json_output: bool = json_option(),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Print only the problem count, not each problem.",
    ),
    summary: bool = typer.Option(
        False,
        "--summary",
        "-s",
        help="Print a success line when the folder conforms.",
    ),
    verbose: bool = verbose_option(),
) -> None:
    """Check a folder against a specification.

    The specification is loaded from --file (default: conform.yaml) or
    --url, its includes are fetched and merged, and every check is run
    against the --context folder (default: .).

    A conforming folder exits 0 without output. Otherwise every problem is
    printed to stderr and the exit code is 3.
    """
    configure_logging(verbose)
    if file is not None and url is not None:
        error("--file and --url are mutually exclusive")

    config = wire_config(config_file=file, context_dir=context, fetch_timeout=timeout)
    items = _load_items(config, url)

    root = ensure_directory(config.get_context_path(), "Context directory")
    try:
        found = check_folder(root, items)
    except CheckIOError as e:
        error(str(e), exit_code=EXIT_SYSTEM_ERROR)

    if json_output:
        result: dict[str, Any] = {
            "valid": not found,
            "count": len(found),
            "problems": [
                {
                    "kind": problem_kind(problem),
                    "path": str(problem.path),
                    "message": problem.message,
                }
                for problem in found
            ],
        }
        console.print_json(json.dumps(result))
        raise typer.Exit(code=EXIT_PROBLEMS_FOUND if found else EXIT_SUCCESS)

    if not found:
        if summary:
            success(f"{root} conforms ({len(items)} checks)")
        return

    if not quiet:
        for problem in found:
            typer.echo(problem.message, err=True)
    error(format_problem_count(len(found)), exit_code=EXIT_PROBLEMS_FOUND)


# -----------------------------------------------------------------------------
# Show Command
# -----------------------------------------------------------------------------


@app.command()
def show(
    file: str | None = file_option(),
    url: str | None = url_option(),
    timeout: float | None = timeout_option(),
    json_output: bool = json_option(),
    verbose: bool = verbose_option(),
) -> None:
    """Print the resolved specification with every include merged in.

    Schemas inferred from examples are shown as validator literals.
    """
    configure_logging(verbose)
    if file is not None and url is not None:
        error("--file and --url are mutually exclusive")

    config = wire_config(config_file=file, fetch_timeout=timeout)
    items = _load_items(config, url)
    resolved = {"config": dump_items(items)}

    if json_output:
        console.print_json(json.dumps(resolved))
    else:
        info(yaml.safe_dump(resolved, sort_keys=False, allow_unicode=True).rstrip("\n"))
