"""Optimistic-concurrency transactions based on ETags."""

from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING, Any

from arbor.errors import ApiError, NotSnapshottedError, TransactionConflictError
from arbor.snapshot import Snapshot
from arbor.transport import UNSET

if TYPE_CHECKING:
    from arbor.location import Location

logger = logging.getLogger(__name__)

ETAG_REQUEST_HEADER = "X-Firebase-ETag"
PRECONDITION_FAILED = 412


class TransactionState(str, enum.Enum):
    UNSNAPSHOTTED = "unsnapshotted"
    SNAPSHOTTED = "snapshotted"
    COMMITTED = "committed"
    CONFLICTED = "conflicted"


class Transaction:
    """One read-decide-write unit of work.

    Writes are only allowed for locations this instance has snapshotted; each
    write carries the ETag from that snapshot as an ``If-Match`` precondition.
    A rejected precondition raises TransactionConflictError and is never
    retried here: the caller restarts the whole unit of work.
    """

    def __init__(self) -> None:
        self._etags: dict[str, str] = {}
        self._states: dict[str, TransactionState] = {}

    def snapshot(self, location: Location) -> Snapshot:
        url = location.to_url()
        value, response = location.bound_transport().request_json(
            "GET", url, headers={ETAG_REQUEST_HEADER: "true"}
        )
        etag = response.headers.get("ETag")
        if etag is None:
            raise ApiError(
                "Response did not disclose an ETag",
                status=response.status_code,
                method="GET",
                url=url,
            )
        self._etags[url] = etag
        self._states[url] = TransactionState.SNAPSHOTTED
        return Snapshot(location, value)

    def etag(self, location: Location) -> str:
        try:
            return self._etags[location.to_url()]
        except KeyError:
            raise NotSnapshottedError(location) from None

    def state(self, location: Location) -> TransactionState:
        return self._states.get(location.to_url(), TransactionState.UNSNAPSHOTTED)

    def set(self, location: Location, value: Any) -> None:
        """Replace the value at ``location`` if it is unchanged since the snapshot."""
        self._commit("PUT", location, value)

    write = set

    def remove(self, location: Location) -> None:
        self._commit("DELETE", location)

    def _commit(self, method: str, location: Location, value: Any = UNSET) -> None:
        etag = self.etag(location)
        transport = location.bound_transport()
        url = location.to_url()
        try:
            transport.request(method, url, headers={"If-Match": etag}, json_body=value)
        except ApiError as e:
            if e.status != PRECONDITION_FAILED:
                raise
            self._states[url] = TransactionState.CONFLICTED
            logger.info("transaction conflict on %s (etag %s)", location.path or "/", etag)
            raise TransactionConflictError.wrap(e, location=location, api_error=e) from e
        self._states[url] = TransactionState.COMMITTED
        logger.info("committed %s on %s", method, location.path or "/")
