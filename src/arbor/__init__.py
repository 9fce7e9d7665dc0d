"""Arbor: a client for hierarchical JSON data stores served over REST."""

__version__ = "0.1.0"

from arbor.config import ArborConfig
from arbor.database import SERVER_TIMESTAMP, Database
from arbor.errors import (
    AlreadyOrderedError,
    ApiError,
    ArborError,
    IndexNotDefinedError,
    InvalidPathError,
    NoChildrenError,
    NoParentError,
    NotSnapshottedError,
    QueryError,
    TransactionConflictError,
    UnboundLocationError,
    UsageError,
)
from arbor.filters import (
    EndAt,
    EqualTo,
    LimitToFirst,
    LimitToLast,
    OrderByChild,
    OrderByKey,
    OrderByValue,
    Shallow,
    StartAt,
)
from arbor.location import Location
from arbor.query import Query
from arbor.rules import RuleSet
from arbor.snapshot import Snapshot
from arbor.transaction import Transaction, TransactionState

__all__ = [
    "__version__",
    "ArborConfig",
    "Database",
    "SERVER_TIMESTAMP",
    "Location",
    "Query",
    "Snapshot",
    "Transaction",
    "TransactionState",
    "RuleSet",
    "StartAt",
    "EndAt",
    "EqualTo",
    "LimitToFirst",
    "LimitToLast",
    "Shallow",
    "OrderByKey",
    "OrderByValue",
    "OrderByChild",
    "ArborError",
    "UsageError",
    "InvalidPathError",
    "NoParentError",
    "AlreadyOrderedError",
    "NotSnapshottedError",
    "UnboundLocationError",
    "ApiError",
    "QueryError",
    "IndexNotDefinedError",
    "TransactionConflictError",
    "NoChildrenError",
]
