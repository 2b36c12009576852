"""Tests for conform CLI utility functions."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
import typer
from rich.logging import RichHandler
from typer.testing import CliRunner

from conform.cli_utils import (
    EXIT_PROBLEMS_FOUND,
    EXIT_SUCCESS,
    EXIT_SYSTEM_ERROR,
    EXIT_USER_ERROR,
    configure_logging,
    context_option,
    ensure_directory,
    error,
    file_option,
    format_problem_count,
    info,
    success,
    warning,
    wire_config,
)

# Default CliRunner - note that stderr is mixed into stdout by default
runner = CliRunner()


class TestErrorFormatting:
    """Tests for error formatting helpers."""

    def test_error_exits_with_user_error_code_by_default(self) -> None:
        """Test that error() exits with EXIT_USER_ERROR by default."""
        app = typer.Typer()

        @app.command()
        def cmd() -> None:
            error("Test error message")

        result = runner.invoke(app, [])
        assert result.exit_code == EXIT_USER_ERROR
        assert "Error:" in result.output
        assert "Test error message" in result.output

    def test_error_exits_with_custom_exit_code(self) -> None:
        """Test that error() can use a custom exit code."""
        app = typer.Typer()

        @app.command()
        def cmd() -> None:
            error("System error", exit_code=EXIT_SYSTEM_ERROR)

        result = runner.invoke(app, [])
        assert result.exit_code == EXIT_SYSTEM_ERROR

    def test_messages_do_not_exit(self) -> None:
        """Test that warning(), success() and info() don't exit."""
        app = typer.Typer()

        @app.command()
        def cmd() -> None:
            warning("This is a warning")
            success("It worked")
            info("Plain text")
            typer.echo("Continued execution")

        result = runner.invoke(app, [])
        assert result.exit_code == EXIT_SUCCESS
        assert "Warning: This is a warning" in result.output
        assert "Success: It worked" in result.output
        assert "Plain text" in result.output
        assert "Continued execution" in result.output

    def test_format_problem_count(self) -> None:
        """Test the summary line is pluralised."""
        assert format_problem_count(1) == "Found 1 problem"
        assert format_problem_count(3) == "Found 3 problems"

    def test_exit_code_constants(self) -> None:
        """Test exit code constants have expected values."""
        assert EXIT_SUCCESS == 0
        assert EXIT_USER_ERROR == 1
        assert EXIT_SYSTEM_ERROR == 2
        assert EXIT_PROBLEMS_FOUND == 3


class TestPathHelpers:
    """Tests for path helpers."""

    def test_ensure_directory_success(self, tmp_path: Path) -> None:
        """Test that an existing directory is returned."""
        assert ensure_directory(tmp_path) == tmp_path

    def test_ensure_directory_not_found(self, tmp_path: Path) -> None:
        """Test that a missing directory exits with a user error."""
        with pytest.raises(typer.Exit) as exc_info:
            ensure_directory(tmp_path / "missing", "Context directory")
        assert exc_info.value.exit_code == EXIT_USER_ERROR

    def test_ensure_directory_not_a_directory(self, tmp_path: Path) -> None:
        """Test that a file exits with a user error."""
        file_path = tmp_path / "file.txt"
        file_path.write_text("")

        app = typer.Typer()

        @app.command()
        def cmd() -> None:
            ensure_directory(file_path, "Context directory")

        result = runner.invoke(app, [])
        assert result.exit_code == EXIT_USER_ERROR
        assert "Context directory is not a directory" in result.output


class TestConfigWiring:
    """Tests for config wiring helpers."""

    def test_wire_config_no_overrides(self, tmp_path: Path, _clean_env: None) -> None:
        """Test wire_config with no overrides uses defaults."""
        config = wire_config(start_dir=tmp_path)
        assert config.config_file == "conform.yaml"
        assert config.context_dir == "."
        assert config.fetch_timeout == 30.0

    def test_wire_config_with_all_overrides(self, tmp_path: Path, _clean_env: None) -> None:
        """Test wire_config passes every override through."""
        config = wire_config(
            config_file="rules.json",
            context_dir="app",
            fetch_timeout=3.0,
            start_dir=tmp_path,
        )
        assert config.config_file == "rules.json"
        assert config.context_dir == "app"
        assert config.fetch_timeout == 3.0

    def test_wire_config_cli_overrides_file(self, tmp_path: Path, _clean_env: None) -> None:
        """Test CLI overrides beat .conformrc, which beats defaults."""
        (tmp_path / ".conformrc").write_text('context_dir = "rc"\nconfig_file = "rc.yaml"\n')

        config = wire_config(context_dir="cli", start_dir=tmp_path)
        assert config.context_dir == "cli"
        assert config.config_file == "rc.yaml"

    def test_wire_config_invalid_value_exits(self, tmp_path: Path, _clean_env: None) -> None:
        """Test that an invalid configuration exits with a user error."""
        app = typer.Typer()

        @app.command()
        def cmd() -> None:
            wire_config(fetch_timeout=-1.0, start_dir=tmp_path)

        result = runner.invoke(app, [])
        assert result.exit_code == EXIT_USER_ERROR
        assert "Invalid configuration" in result.output
        assert "fetch_timeout must be greater than 0" in result.output


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_levels(self) -> None:
        """Test verbose switches the conform logger to DEBUG."""
        configure_logging(verbose=True)
        assert logging.getLogger("conform").level == logging.DEBUG
        configure_logging(verbose=False)
        assert logging.getLogger("conform").level == logging.WARNING

    def test_handler_installed_once(self) -> None:
        """Test repeated calls don't stack handlers."""
        configure_logging()
        configure_logging()
        handlers = [
            h for h in logging.getLogger("conform").handlers if isinstance(h, RichHandler)
        ]
        assert len(handlers) == 1


class TestTyperOptionFactoryFunctions:
    """Tests for Typer Option factory functions."""

    def test_factory_creates_unique_instances(self) -> None:
        """Test that each factory call creates a new instance."""
        assert file_option() is not file_option()

    def test_options_work_in_command(self, _clean_env: None) -> None:
        """Test that factory options can be used in commands."""
        app = typer.Typer()

        @app.command()
        def cmd(
            file: str | None = file_option(),
            context: str | None = context_option(),
        ) -> None:
            typer.echo(f"file={file}")
            typer.echo(f"context={context}")

        result = runner.invoke(app, ["-f", "rules.toml", "--context", "app"])
        assert result.exit_code == 0
        assert "file=rules.toml" in result.output
        assert "context=app" in result.output

    def test_options_read_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that options fall back to CONFORM_* environment variables."""
        monkeypatch.setenv("CONFORM_CONTEXT_DIR", "from-env")
        app = typer.Typer()

        @app.command()
        def cmd(context: str | None = context_option()) -> None:
            typer.echo(f"context={context}")

        result = runner.invoke(app, [])
        assert "context=from-env" in result.output
