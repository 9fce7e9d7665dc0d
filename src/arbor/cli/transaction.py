"""arbor cas — compare-and-set through an ETag transaction."""

from __future__ import annotations

from typing import Any, Optional

import typer

from arbor.cli import _exitcodes as ec
from arbor.cli._client import fail, open_database
from arbor.cli._output import parse_json_arg, print_error, print_object
from arbor.errors import ArborError
from arbor.transaction import Transaction

_NO_EXPECTATION: Any = object()


def cas_cmd(
    path: str = typer.Argument(..., help="Path to write"),
    value_json: str = typer.Argument(..., help="New value as JSON"),
    expect: Optional[str] = typer.Option(
        None, "--expect", help="Only write if the current value equals this JSON"
    ),
) -> None:
    """Write PATH only if nobody changed it since it was read."""
    from arbor.cli import state

    try:
        value = parse_json_arg(value_json)
        expected = parse_json_arg(expect) if expect is not None else _NO_EXPECTATION
    except ValueError as e:
        print_error(f"Invalid JSON argument: {e}")
        raise typer.Exit(ec.USAGE_ERROR)

    db = open_database()
    try:
        location = db.reference(path)

        def unit_of_work(tx: Transaction) -> dict[str, Any]:
            current = tx.snapshot(location)
            if expected is not _NO_EXPECTATION and current.value != expected:
                return {"path": location.path or "/", "status": "mismatch", "current": current.value}
            tx.set(location, value)
            # The ETag the write was conditioned on, not the new version's.
            return {
                "path": location.path or "/",
                "status": "committed",
                "if_match": tx.etag(location),
            }

        result = db.run_transaction(unit_of_work)
        print_object(result, json_mode=state.json_output)
        if result["status"] == "mismatch":
            raise typer.Exit(ec.CONFLICT)
    except ArborError as e:
        raise fail(e)
    finally:
        db.close()
