"""CLI helpers for building a Database from global options and the environment."""

from __future__ import annotations

import os

import typer

from arbor.cli import _exitcodes as ec
from arbor.cli._output import print_error
from arbor.config import ArborConfig
from arbor.database import Database
from arbor.errors import ApiError, TransactionConflictError, UsageError


def _config_from_state() -> ArborConfig:
    from arbor.cli import state

    url = state.url or os.getenv("ARBOR_DATABASE_URL")
    return ArborConfig(
        database_url=url,
        request_timeout_s=state.timeout,
        user_agent=os.getenv("ARBOR_USER_AGENT"),
    )


def open_database() -> Database:
    """Open the database selected by --url / ARBOR_DATABASE_URL."""
    from arbor.cli import state

    config = _config_from_state()
    if not config.database_url:
        print_error("No database URL; pass --url or set ARBOR_DATABASE_URL")
        raise typer.Exit(ec.USAGE_ERROR)
    try:
        return Database(config, state.http_client)
    except Exception as e:
        print_error(f"Cannot open database: {e}")
        raise typer.Exit(ec.USAGE_ERROR)


def fail(err: Exception) -> typer.Exit:
    """Report ``err`` and return the typer.Exit to raise for it."""
    print_error(str(err))
    if isinstance(err, TransactionConflictError):
        return typer.Exit(ec.CONFLICT)
    if isinstance(err, (UsageError, ValueError, TypeError)):
        return typer.Exit(ec.USAGE_ERROR)
    if isinstance(err, ApiError):
        return typer.Exit(ec.API_ERROR)
    return typer.Exit(ec.GENERAL_ERROR)
