"""Structured error types for Arbor."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from arbor.location import Location
    from arbor.query import Query


class ArborError(Exception):
    """Base error for all Arbor errors."""


class UsageError(ArborError):
    """Raised for local misuse; never involves the network."""


class InvalidPathError(UsageError):
    """Raised when a path or segment violates the location rules."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid path '{path}': {reason}")


class NoParentError(UsageError):
    """Raised when the parent of the root location is requested."""

    def __init__(self) -> None:
        super().__init__("The root location has no parent")


class AlreadyOrderedError(UsageError):
    """Raised when a second sorter is added to a query."""

    def __init__(self, existing: Any, requested: Any) -> None:
        self.existing = existing
        self.requested = requested
        super().__init__(
            f"This query is already ordered by {existing!r}; cannot also order by {requested!r}"
        )


class NotSnapshottedError(UsageError):
    """Raised when a transaction writes a location it has not snapshotted."""

    def __init__(self, location: Location) -> None:
        self.location = location
        super().__init__(
            f"The location '{location.path or '/'}' must be snapshotted "
            "in this transaction before it can be changed"
        )


class UnboundLocationError(UsageError):
    """Raised when I/O is attempted on a location without a transport."""

    def __init__(self, location: Location) -> None:
        self.location = location
        super().__init__(
            f"Location '{location.to_url()}' is not bound to a database; "
            "obtain it via Database.reference()"
        )


class ApiError(ArborError):
    """Raised when a request fails in transport or with a non-2xx response.

    ``status`` is ``None`` when no response was received at all.
    """

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        method: str | None = None,
        url: str | None = None,
    ) -> None:
        self.message = message
        self.status = status
        self.method = method
        self.url = url
        prefix = f"HTTP {status}" if status is not None else "Request failed"
        super().__init__(f"{prefix}: {message}")

    @classmethod
    def wrap(cls, error: ApiError, **extra: Any) -> Any:
        """Re-raise-ready copy of ``error`` as this subclass with extra context."""
        return cls(
            error.message,
            status=error.status,
            method=error.method,
            url=error.url,
            **extra,
        )


class QueryError(ApiError):
    """Raised when a query read fails."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        method: str | None = None,
        url: str | None = None,
        query: Query | None = None,
    ) -> None:
        self.query = query
        super().__init__(message, status=status, method=method, url=url)


_INDEX_HINT_RE = re.compile(r'"\.indexOn"\s*:\s*"([^"]*)"\s*,\s*for path\s*"([^"]*)"')


class IndexNotDefinedError(QueryError):
    """Raised when the backend reports a missing ``.indexOn`` rule for a query.

    When the backend's message carries its usual hint, ``index_on`` and
    ``index_path`` hold the suggested index so it can be added with
    ``RuleSet.with_index(err.index_path, err.index_on)``.
    """

    @property
    def index_on(self) -> str | None:
        m = _INDEX_HINT_RE.search(self.message)
        return m.group(1) if m else None

    @property
    def index_path(self) -> str | None:
        m = _INDEX_HINT_RE.search(self.message)
        return m.group(2) if m else None


class TransactionConflictError(ApiError):
    """Raised when a transactional write is rejected by its ETag precondition."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        method: str | None = None,
        url: str | None = None,
        location: Location | None = None,
        api_error: ApiError | None = None,
    ) -> None:
        self.location = location
        self.api_error = api_error
        super().__init__(message, status=status, method=method, url=url)


class NoChildrenError(ArborError):
    """Raised when child keys are requested from a non-object value."""

    def __init__(self, location: Location) -> None:
        self.location = location
        super().__init__(f"The value at '{location.path or '/'}' has no children")
