"""Arbor CLI: operator console for reading and writing a remote database."""

from __future__ import annotations

import logging
from typing import Optional

import httpx
import typer

from arbor.cli import data, query, rules, transaction

app = typer.Typer(
    name="arbor",
    help="Arbor CLI — read, query and write a realtime JSON database over REST.",
    no_args_is_help=True,
)


class _State:
    """Global CLI state shared across subcommands."""

    url: str | None = None
    timeout: float = 10.0
    json_output: bool = False
    # Injected by tests; None means a fresh client per invocation.
    http_client: httpx.Client | None = None


state = _State()


def _version_callback(value: bool) -> None:
    if value:
        from arbor import __version__

        print(f"arbor {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    url: Optional[str] = typer.Option(
        None,
        "--url",
        envvar="ARBOR_DATABASE_URL",
        help="Database URL (e.g. https://my-project.firebaseio.com)",
    ),
    timeout: float = typer.Option(
        10.0,
        "--timeout",
        envvar="ARBOR_REQUEST_TIMEOUT_S",
        help="Request timeout in seconds",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output when supported"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log requests to stderr"),
    version: bool = typer.Option(
        False, "--version", help="Show version", is_eager=True, callback=_version_callback
    ),
) -> None:
    """Global options for all arbor commands."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
        )

    state.url = url
    state.timeout = timeout
    state.json_output = json_output
    if ctx.invoked_subcommand is None and not version:
        print(ctx.get_help())
        raise typer.Exit()


app.add_typer(rules.app, name="rules", help="Read and replace security rules")

app.command(name="get")(data.get_cmd)
app.command(name="set")(data.set_cmd)
app.command(name="update")(data.update_cmd)
app.command(name="push")(data.push_cmd)
app.command(name="remove")(data.remove_cmd)
app.command(name="query")(query.query_cmd)
app.command(name="cas")(transaction.cas_cmd)


def main() -> None:
    """Entry point for the arbor CLI."""
    app()
