"""Pytest configuration and fixtures for conform tests."""

import os

import pytest

# Set a fixed terminal width to prevent line wrapping issues in CI
# This must be set before any Rich imports
os.environ.setdefault("COLUMNS", "200")
os.environ.setdefault("LINES", "50")
# Disable Rich's terminal detection to ensure consistent output
os.environ.setdefault("TERM", "dumb")

CONFORM_ENV_VARS = [
    "CONFORM_CONFIG_FILE",
    "CONFORM_CONTEXT_DIR",
    "CONFORM_FETCH_TIMEOUT",
    "CONFORM_MAX_WORKERS",
]


@pytest.fixture
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Unset CONFORM_* environment variables for the duration of a test."""
    for var in CONFORM_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
