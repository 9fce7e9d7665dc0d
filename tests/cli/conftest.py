"""Shared fixtures for CLI tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from typer.testing import CliRunner

from arbor.cli import app, state
from tests.conftest import DB_URL

if TYPE_CHECKING:
    from click.testing import Result


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_backend(seeded_backend, http_client):
    """Route CLI requests to the seeded fake backend."""
    state.http_client = http_client
    yield seeded_backend
    state.http_client = None


def invoke(runner: CliRunner, args: list[str], url: str | None = DB_URL) -> "Result":
    """Invoke CLI with the database URL injected before the subcommand."""
    if url:
        args = ["--url", url] + args
    return runner.invoke(app, args, catch_exceptions=False)
