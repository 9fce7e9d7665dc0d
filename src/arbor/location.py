"""Locations: validated absolute paths into the store, with direct reads and writes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
from urllib.parse import quote, unquote, urlsplit

from arbor.errors import (
    ApiError,
    InvalidPathError,
    NoChildrenError,
    NoParentError,
    UnboundLocationError,
)
from arbor.snapshot import Snapshot

if TYPE_CHECKING:
    from arbor.query import Query
    from arbor.transport import HttpTransport

logger = logging.getLogger(__name__)

MAX_DEPTH = 64
MAX_KEY_BYTES = 768
FORBIDDEN_CHARS = frozenset(".#$[]")


# --- Path validation helpers ---


def validate_segment(segment: str) -> None:
    """Validate a single key."""
    if not segment:
        raise InvalidPathError(segment, "empty key")
    bad = sorted(FORBIDDEN_CHARS.intersection(segment))
    if bad:
        raise InvalidPathError(segment, f"keys must not contain {' '.join(repr(c) for c in bad)}")
    if any(ord(c) < 0x20 or ord(c) == 0x7F for c in segment):
        raise InvalidPathError(segment, "keys must not contain control characters")
    if len(segment.encode("utf-8")) > MAX_KEY_BYTES:
        raise InvalidPathError(segment, f"keys must be at most {MAX_KEY_BYTES} bytes")


def split_path(path: str) -> tuple[str, ...]:
    """Split a slash separated path into validated segments; empty parts are ignored."""
    if not isinstance(path, str):
        raise InvalidPathError(repr(path), "paths must be strings")
    segments = tuple(s for s in path.split("/") if s)
    for segment in segments:
        validate_segment(segment)
    return segments


def normalize_endpoint(url: str) -> str:
    """Reduce a base URL to ``scheme://host[:port]``.

    Credentials in the URL are dropped so they never reach ``to_url()`` or logs.
    """
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.hostname:
        raise InvalidPathError(url, "expected an absolute http(s) URL")
    try:
        port = parts.port
    except ValueError as e:
        raise InvalidPathError(url, f"invalid port: {e}") from e
    host = f"[{parts.hostname}]" if ":" in parts.hostname else parts.hostname
    return f"{parts.scheme}://{host}" + (f":{port}" if port is not None else "")


def url_segments(url: str) -> tuple[str, ...]:
    """Validated path segments of an absolute URL, without any ``.json`` suffix."""
    path = urlsplit(url).path
    if path.endswith(".json"):
        path = path[: -len(".json")]
    return split_path(unquote(path))


@dataclass(frozen=True)
class Location:
    """An absolute, immutable address inside a store.

    Navigation returns new Locations; the receiver is never modified. Paths are
    validated when a Location is created, so holders can trust ``segments``.
    """

    endpoint: str
    segments: tuple[str, ...] = ()
    transport: HttpTransport | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if len(self.segments) > MAX_DEPTH:
            raise InvalidPathError(
                "/".join(self.segments), f"paths must be at most {MAX_DEPTH} keys deep"
            )
        for segment in self.segments:
            validate_segment(segment)

    @classmethod
    def from_url(cls, url: str, transport: HttpTransport | None = None) -> Location:
        """Parse an absolute URL (endpoint plus percent-encoded path)."""
        return cls(normalize_endpoint(url), url_segments(url), transport)

    # --- Navigation ---

    @property
    def path(self) -> str:
        return "/".join(self.segments)

    @property
    def key(self) -> str | None:
        return self.segments[-1] if self.segments else None

    @property
    def is_root(self) -> bool:
        return not self.segments

    def child(self, name: str) -> Location:
        """Location for ``name`` (a key or relative path) beneath this one."""
        segments = split_path(name)
        if not segments:
            raise InvalidPathError(name, "empty child path")
        return Location(self.endpoint, self.segments + segments, self.transport)

    def parent(self) -> Location:
        if not self.segments:
            raise NoParentError()
        return Location(self.endpoint, self.segments[:-1], self.transport)

    def root(self) -> Location:
        return Location(self.endpoint, (), self.transport)

    def to_url(self) -> str:
        return f"{self.endpoint}/" + "/".join(quote(s, safe="") for s in self.segments)

    def __str__(self) -> str:
        return self.to_url()

    # --- Queries ---

    def query(self) -> Query:
        from arbor.query import Query

        return Query(self)

    def order_by_key(self) -> Query:
        return self.query().order_by_key()

    def order_by_value(self) -> Query:
        return self.query().order_by_value()

    def order_by_child(self, path: str) -> Query:
        return self.query().order_by_child(path)

    def start_at(self, value: bool | int | float | str) -> Query:
        return self.query().start_at(value)

    def end_at(self, value: bool | int | float | str) -> Query:
        return self.query().end_at(value)

    def equal_to(self, value: bool | int | float | str) -> Query:
        return self.query().equal_to(value)

    def limit_to_first(self, limit: int) -> Query:
        return self.query().limit_to_first(limit)

    def limit_to_last(self, limit: int) -> Query:
        return self.query().limit_to_last(limit)

    def shallow(self) -> Query:
        return self.query().shallow()

    # --- Reads and writes ---

    def bound_transport(self) -> HttpTransport:
        if self.transport is None:
            raise UnboundLocationError(self)
        return self.transport

    def read(self) -> Snapshot:
        value, _ = self.bound_transport().request_json("GET", self.to_url())
        return Snapshot(self, value)

    def value(self) -> Any:
        return self.read().value

    def child_keys(self) -> list[str]:
        value = self.shallow().value()
        if not isinstance(value, (dict, list)):
            raise NoChildrenError(self)
        if isinstance(value, list):
            return [str(i) for i, item in enumerate(value) if item is not None]
        return list(value)

    def set(self, value: Any) -> Location:
        """Replace the value at this location (PUT)."""
        self.bound_transport().request("PUT", self.to_url(), json_body=value)
        return self

    def update(self, values: dict[str, Any]) -> Location:
        """Multi-location update (PATCH); keys are paths relative to this location."""
        if not isinstance(values, dict):
            raise TypeError(f"update() expects a mapping, got {type(values).__name__}")
        body: dict[str, Any] = {}
        for rel_path, item in values.items():
            segments = split_path(rel_path)
            if not segments:
                raise InvalidPathError(rel_path, "empty update path")
            if len(self.segments) + len(segments) > MAX_DEPTH:
                raise InvalidPathError(rel_path, f"paths must be at most {MAX_DEPTH} keys deep")
            body["/".join(segments)] = item
        self.bound_transport().request("PATCH", self.to_url(), json_body=body)
        return self

    def push(self, value: Any = None) -> Location:
        """Append a child under a backend-generated key (POST); returns its location."""
        result, _ = self.bound_transport().request_json(
            "POST", self.to_url(), json_body=value if value is not None else {}
        )
        name = result.get("name") if isinstance(result, dict) else None
        if not isinstance(name, str):
            raise ApiError(f"Unexpected push response: {result!r}", method="POST", url=self.to_url())
        logger.debug("pushed new child %s under %s", name, self.path or "/")
        return self.child(name)

    def remove(self) -> Location:
        self.bound_transport().request("DELETE", self.to_url())
        return self
