"""Query DSL: immutable, composable reads over a location."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import quote, urlencode

from arbor.errors import AlreadyOrderedError, ApiError, IndexNotDefinedError, QueryError
from arbor.filters import (
    FILTER_TYPES,
    SORTER_TYPES,
    EndAt,
    EqualTo,
    Filter,
    LimitToFirst,
    LimitToLast,
    OrderByChild,
    OrderByKey,
    OrderByValue,
    Shallow,
    Sorter,
    StartAt,
    apply_filter,
    apply_sorter,
    query_params,
)
from arbor.snapshot import Snapshot

if TYPE_CHECKING:
    from arbor.location import Location

logger = logging.getLogger(__name__)

INDEX_NOT_DEFINED_MARKER = "index not defined"


class Query:
    """Sorts and filters the data at a location.

    Every refining method returns a new Query that shares the receiver's
    Location; the receiver is left untouched. At most one ordering may be set.
    """

    __slots__ = ("_location", "_filters", "_sorter")

    def __init__(
        self,
        location: Location,
        filters: tuple[Filter, ...] = (),
        sorter: Sorter | None = None,
    ) -> None:
        self._location = location
        self._filters = tuple(filters)
        self._sorter = sorter

    @property
    def location(self) -> Location:
        return self._location

    @property
    def filters(self) -> tuple[Filter, ...]:
        return self._filters

    @property
    def sorter(self) -> Sorter | None:
        return self._sorter

    # --- Composition ---

    def with_filter(self, f: Filter) -> Query:
        if not isinstance(f, FILTER_TYPES):
            raise TypeError(f"Expected a filter, got {type(f).__name__}")
        return Query(self._location, self._filters + (f,), self._sorter)

    def with_sorter(self, sorter: Sorter) -> Query:
        if not isinstance(sorter, SORTER_TYPES):
            raise TypeError(f"Expected a sorter, got {type(sorter).__name__}")
        if self._sorter is not None:
            raise AlreadyOrderedError(self._sorter, sorter)
        return Query(self._location, self._filters, sorter)

    def order_by_key(self) -> Query:
        return self.with_sorter(OrderByKey())

    def order_by_value(self) -> Query:
        return self.with_sorter(OrderByValue())

    def order_by_child(self, path: str) -> Query:
        return self.with_sorter(OrderByChild(path))

    def start_at(self, value: bool | int | float | str) -> Query:
        """Inclusive lower bound on the ordering value."""
        return self.with_filter(StartAt(value))

    def end_at(self, value: bool | int | float | str) -> Query:
        """Inclusive upper bound on the ordering value."""
        return self.with_filter(EndAt(value))

    def equal_to(self, value: bool | int | float | str) -> Query:
        return self.with_filter(EqualTo(value))

    def limit_to_first(self, limit: int) -> Query:
        return self.with_filter(LimitToFirst(limit))

    def limit_to_last(self, limit: int) -> Query:
        return self.with_filter(LimitToLast(limit))

    def shallow(self) -> Query:
        """Truncate nested objects to ``true``."""
        return self.with_filter(Shallow())

    # --- URL ---

    def params(self) -> list[tuple[str, str]]:
        """Query parameters in wire order: the ordering first, then filters."""
        pairs: list[tuple[str, str]] = []
        if self._sorter is not None:
            pairs.extend(query_params(self._sorter))
        for f in self._filters:
            pairs.extend(query_params(f))
        return pairs

    def effective_url(self) -> str:
        url = self._location.to_url()
        pairs = self.params()
        if not pairs:
            return url
        return f"{url}?{urlencode(pairs, quote_via=quote, safe='')}"

    def __str__(self) -> str:
        return self.effective_url()

    def __repr__(self) -> str:
        return (
            f"Query(location={self._location.path or '/'!r}, "
            f"sorter={self._sorter!r}, filters={list(self._filters)!r})"
        )

    # --- Reads ---

    def apply(self, value: Any) -> Any:
        """Re-apply this query's ordering and filters to a decoded value."""
        if self._sorter is not None:
            value = apply_sorter(self._sorter, value)
        for f in self._filters:
            value = apply_filter(f, value, self._sorter)
        return value

    def read(self) -> Snapshot:
        transport = self._location.bound_transport()
        try:
            value, _ = transport.request_json("GET", self.effective_url())
        except ApiError as e:
            if INDEX_NOT_DEFINED_MARKER in e.message.lower():
                raise IndexNotDefinedError.wrap(e, query=self) from e
            raise QueryError.wrap(e, query=self) from e

        logger.debug("re-applying %r to response", self)
        return Snapshot(self._location, self.apply(value))

    def value(self) -> Any:
        return self.read().value
