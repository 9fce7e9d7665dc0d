"""Output formatting helpers for the CLI."""

from __future__ import annotations

import json
import sys
from typing import Any

import yaml


def print_value(value: Any, *, fmt: str = "json") -> None:
    """Print a decoded JSON value as JSON (default) or YAML."""
    if fmt == "yaml":
        print(yaml.safe_dump(value, default_flow_style=False, sort_keys=False), end="")
        return
    print(json.dumps(value, indent=2, ensure_ascii=False))


def print_object(data: dict[str, Any], *, json_mode: bool = False) -> None:
    """Print a flat result object as JSON or key-value lines."""
    if json_mode:
        print(json.dumps(data, indent=2, default=str))
        return
    for k, v in data.items():
        print(f"{k}: {v}")


def print_error(msg: str) -> None:
    """Print an error message to stderr."""
    print(f"Error: {msg}", file=sys.stderr)


def parse_json_arg(raw: str, *, lenient: bool = False) -> Any:
    """Decode a JSON argument; lenient mode falls back to the raw string."""
    try:
        return json.loads(raw)
    except ValueError:
        if lenient:
            return raw
        raise
