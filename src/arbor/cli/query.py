"""arbor query — ordered and filtered reads."""

from __future__ import annotations

from typing import Any, Optional

import typer

from arbor.cli import _exitcodes as ec
from arbor.cli._client import fail, open_database
from arbor.cli._output import parse_json_arg, print_error, print_object, print_value
from arbor.errors import ArborError, IndexNotDefinedError
from arbor.query import Query


def build_query(
    query: Query,
    *,
    order_by_key: bool = False,
    order_by_value: bool = False,
    order_by_child: str | None = None,
    start_at: str | None = None,
    end_at: str | None = None,
    equal_to: str | None = None,
    limit_to_first: int | None = None,
    limit_to_last: int | None = None,
    shallow: bool = False,
) -> Query:
    """Refine ``query`` from CLI options; bound values are JSON literals or bare strings."""
    orderings = sum([order_by_key, order_by_value, order_by_child is not None])
    if orderings > 1:
        raise typer.BadParameter("Use only one of --order-by-key/--order-by-value/--order-by-child")

    if order_by_key:
        query = query.order_by_key()
    elif order_by_value:
        query = query.order_by_value()
    elif order_by_child is not None:
        query = query.order_by_child(order_by_child)

    if start_at is not None:
        query = query.start_at(parse_json_arg(start_at, lenient=True))
    if end_at is not None:
        query = query.end_at(parse_json_arg(end_at, lenient=True))
    if equal_to is not None:
        query = query.equal_to(parse_json_arg(equal_to, lenient=True))
    if limit_to_first is not None:
        query = query.limit_to_first(limit_to_first)
    if limit_to_last is not None:
        query = query.limit_to_last(limit_to_last)
    if shallow:
        query = query.shallow()
    return query


def query_cmd(
    path: str = typer.Argument(..., help="Path to query"),
    order_by_key: bool = typer.Option(False, "--order-by-key", help="Order children by key"),
    order_by_value: bool = typer.Option(False, "--order-by-value", help="Order by value"),
    order_by_child: Optional[str] = typer.Option(
        None, "--order-by-child", help="Order by the value at a child path"
    ),
    start_at: Optional[str] = typer.Option(None, "--start-at", help="Inclusive lower bound"),
    end_at: Optional[str] = typer.Option(None, "--end-at", help="Inclusive upper bound"),
    equal_to: Optional[str] = typer.Option(None, "--equal-to", help="Exact match"),
    limit_to_first: Optional[int] = typer.Option(None, "--limit-to-first", min=1),
    limit_to_last: Optional[int] = typer.Option(None, "--limit-to-last", min=1),
    shallow: bool = typer.Option(False, "--shallow", help="Truncate nested objects to true"),
    show_url: bool = typer.Option(False, "--show-url", help="Print the request URL only"),
    fmt: str = typer.Option("json", "--format", help="Output format: json or yaml"),
) -> None:
    """Run an ordered/filtered read against PATH."""
    from arbor.cli import state

    db = open_database()
    try:
        q = build_query(
            db.reference(path).query(),
            order_by_key=order_by_key,
            order_by_value=order_by_value,
            order_by_child=order_by_child,
            start_at=start_at,
            end_at=end_at,
            equal_to=equal_to,
            limit_to_first=limit_to_first,
            limit_to_last=limit_to_last,
            shallow=shallow,
        )
        if show_url:
            print(q.effective_url())
            return
        print_value(q.value(), fmt=fmt)
    except IndexNotDefinedError as e:
        hint: dict[str, Any] = {"error": e.message}
        if e.index_path is not None:
            hint["index_path"] = e.index_path
            hint["index_on"] = e.index_on
        if state.json_output:
            print_object(hint, json_mode=True)
        else:
            print_error(e.message)
            if e.index_path is not None:
                print_error(f"Add '.indexOn': '{e.index_on}' at '{e.index_path}' to the rules")
        raise typer.Exit(ec.API_ERROR)
    except (ArborError, ValueError, TypeError) as e:
        raise fail(e)
    finally:
        db.close()
