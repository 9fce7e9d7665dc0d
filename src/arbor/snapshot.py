"""Snapshots: immutable point-in-time values read from a location."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from arbor.location import Location


def check_json_value(value: Any, _trail: str = "") -> None:
    """Raise TypeError unless ``value`` is a decoded JSON value."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return
    if isinstance(value, list):
        for i, item in enumerate(value):
            check_json_value(item, f"{_trail}/{i}")
        return
    if isinstance(value, dict):
        for k, item in value.items():
            if not isinstance(k, str):
                raise TypeError(f"Non-string key {k!r} at '{_trail or '/'}'")
            check_json_value(item, f"{_trail}/{k}")
        return
    raise TypeError(f"Unsupported value of type {type(value).__name__} at '{_trail or '/'}'")


def _children(value: Any) -> dict[str, Any]:
    if isinstance(value, dict):
        return value
    if isinstance(value, list):
        return {str(i): item for i, item in enumerate(value) if item is not None}
    return {}


class Snapshot:
    """The value at a location at the moment it was read.

    A snapshot never re-fetches; navigating into it with child() slices the
    value it already holds.
    """

    __slots__ = ("_location", "_value")

    def __init__(self, location: Location, value: Any) -> None:
        check_json_value(value)
        self._location = location
        self._value = value

    @property
    def location(self) -> Location:
        return self._location

    @property
    def key(self) -> str | None:
        return self._location.key

    @property
    def value(self) -> Any:
        return self._value

    def exists(self) -> bool:
        return self._value is not None

    def child(self, path: str) -> Snapshot:
        location = self._location.child(path)
        current = self._value
        for segment in location.segments[len(self._location.segments) :]:
            current = _children(current).get(segment)
            if current is None:
                break
        return Snapshot(location, current)

    def has_child(self, path: str) -> bool:
        return self.child(path).exists()

    def has_children(self) -> bool:
        return bool(_children(self._value))

    def num_children(self) -> int:
        return len(_children(self._value))

    def child_keys(self) -> list[str]:
        return list(_children(self._value))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Snapshot):
            return NotImplemented
        return self._location == other._location and self._value == other._value

    def __hash__(self) -> int:
        return hash(self._location)

    def __repr__(self) -> str:
        return f"Snapshot(location={self._location.to_url()!r}, value={self._value!r})"
