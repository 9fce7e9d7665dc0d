"""arbor rules — inspect and replace the database's security rules."""

from __future__ import annotations

import json
from pathlib import Path

import typer
import yaml

from arbor.cli import _exitcodes as ec
from arbor.cli._client import fail, open_database
from arbor.cli._output import print_error, print_value
from arbor.errors import ArborError
from arbor.rules import RuleSet

app = typer.Typer(no_args_is_help=True)


@app.command(name="get")
def rules_get_cmd(
    fmt: str = typer.Option("json", "--format", help="Output format: json or yaml"),
) -> None:
    """Print the current rules document."""
    db = open_database()
    try:
        print_value(db.get_rules().to_dict(), fmt=fmt)
    except (ArborError, ValueError) as e:
        raise fail(e)
    finally:
        db.close()


@app.command(name="set")
def rules_set_cmd(
    file: Path = typer.Argument(..., help="Rules document (.json, .yaml or .yml)"),
) -> None:
    """Replace the rules document with FILE."""
    if not file.exists():
        print_error(f"Rules file not found: {file}")
        raise typer.Exit(ec.USAGE_ERROR)

    text = file.read_text(encoding="utf-8")
    try:
        if file.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
        rule_set = RuleSet.from_dict(data)
    except (ValueError, TypeError, yaml.YAMLError) as e:
        print_error(f"Invalid rules document: {e}")
        raise typer.Exit(ec.USAGE_ERROR)

    db = open_database()
    try:
        db.update_rules(rule_set)
        print("Rules updated")
    except ArborError as e:
        raise fail(e)
    finally:
        db.close()
