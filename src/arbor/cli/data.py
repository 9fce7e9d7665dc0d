"""arbor get/set/update/push/remove — direct reads and writes at a path."""

from __future__ import annotations

import typer

from arbor.cli import _exitcodes as ec
from arbor.cli._client import fail, open_database
from arbor.cli._output import parse_json_arg, print_error, print_object, print_value
from arbor.errors import ArborError


def _parse_value(raw: str) -> object:
    try:
        return parse_json_arg(raw)
    except ValueError as e:
        print_error(f"VALUE_JSON is not valid JSON: {e}")
        raise typer.Exit(ec.USAGE_ERROR)


def get_cmd(
    path: str = typer.Argument("/", help="Path to read"),
    shallow: bool = typer.Option(False, "--shallow", help="Truncate nested objects to true"),
    fmt: str = typer.Option("json", "--format", help="Output format: json or yaml"),
) -> None:
    """Read the value at PATH."""
    db = open_database()
    try:
        location = db.reference(path)
        snapshot = location.shallow().read() if shallow else location.read()
        print_value(snapshot.value, fmt=fmt)
    except ArborError as e:
        raise fail(e)
    finally:
        db.close()


def set_cmd(
    path: str = typer.Argument(..., help="Path to write"),
    value_json: str = typer.Argument(..., help="New value as JSON"),
) -> None:
    """Replace the value at PATH."""
    from arbor.cli import state

    value = _parse_value(value_json)
    db = open_database()
    try:
        location = db.reference(path).set(value)
        print_object({"path": location.path or "/", "status": "set"}, json_mode=state.json_output)
    except ArborError as e:
        raise fail(e)
    finally:
        db.close()


def update_cmd(
    path: str = typer.Argument(..., help="Path to update"),
    values_json: str = typer.Argument(..., help="JSON object of relative paths to values"),
) -> None:
    """Update several children of PATH at once."""
    from arbor.cli import state

    values = _parse_value(values_json)
    if not isinstance(values, dict):
        print_error("update expects a JSON object")
        raise typer.Exit(ec.USAGE_ERROR)
    db = open_database()
    try:
        location = db.reference(path).update(values)
        print_object(
            {"path": location.path or "/", "updated": len(values)}, json_mode=state.json_output
        )
    except ArborError as e:
        raise fail(e)
    finally:
        db.close()


def push_cmd(
    path: str = typer.Argument(..., help="Parent path"),
    value_json: str = typer.Argument(..., help="Value of the new child as JSON"),
) -> None:
    """Append a child with a generated key under PATH."""
    from arbor.cli import state

    value = _parse_value(value_json)
    db = open_database()
    try:
        child = db.reference(path).push(value)
        print_object({"path": child.path, "key": child.key}, json_mode=state.json_output)
    except ArborError as e:
        raise fail(e)
    finally:
        db.close()


def remove_cmd(
    path: str = typer.Argument(..., help="Path to delete"),
) -> None:
    """Delete the value at PATH."""
    from arbor.cli import state

    db = open_database()
    try:
        location = db.reference(path).remove()
        print_object(
            {"path": location.path or "/", "status": "removed"}, json_mode=state.json_output
        )
    except ArborError as e:
        raise fail(e)
    finally:
        db.close()
