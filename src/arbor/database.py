"""The Database facade: entry point for locations, rules and transactions."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar
from urllib.parse import urlsplit

import httpx

from arbor.config import ArborConfig
from arbor.errors import InvalidPathError
from arbor.location import Location, normalize_endpoint, split_path, url_segments
from arbor.rules import RuleSet
from arbor.transaction import Transaction
from arbor.transport import HttpTransport

logger = logging.getLogger(__name__)

T = TypeVar("T")

SERVER_TIMESTAMP: dict[str, str] = {".sv": "timestamp"}
RULES_PATH = ".settings/rules"


class Database:
    """A remote realtime database reached over REST."""

    def __init__(self, config: ArborConfig, http_client: httpx.Client | None = None) -> None:
        if not config.database_url:
            raise ValueError("ArborConfig.database_url is required")
        self.config = config
        self.endpoint = normalize_endpoint(config.database_url)
        self.transport = HttpTransport(config, http_client)

    @classmethod
    def from_url(
        cls, url: str, *, http_client: httpx.Client | None = None, **options: Any
    ) -> Database:
        return cls(ArborConfig(database_url=url, **options), http_client)

    def root(self) -> Location:
        return Location(self.endpoint, (), self.transport)

    def reference(self, path: str | None = None) -> Location:
        """Location for ``path``, or the root when no path is given."""
        return Location(self.endpoint, split_path(path or ""), self.transport)

    def reference_from_url(self, url: str) -> Location:
        """Location for an absolute URL on this database's host.

        Only the URL's path is used; requests always go to this database's
        own endpoint, whatever scheme or port the URL names.
        """
        if not isinstance(url, str):
            raise InvalidPathError(repr(url), "expected a URL string")
        given = urlsplit(url).hostname
        expected = urlsplit(self.endpoint).hostname
        if given != expected:
            raise InvalidPathError(
                url, f"host '{given}' is not covered by the database for host '{expected}'"
            )
        return Location(self.endpoint, url_segments(url), self.transport)

    # --- Rules ---

    def get_rules(self) -> RuleSet:
        data, _ = self.transport.request_json("GET", f"{self.endpoint}/{RULES_PATH}")
        return RuleSet.from_dict(data)

    def update_rules(self, rule_set: RuleSet) -> None:
        self.transport.request("PUT", f"{self.endpoint}/{RULES_PATH}", json_body=rule_set.to_dict())
        logger.info("updated security rules on %s", self.endpoint)

    # --- Transactions ---

    def run_transaction(self, fn: Callable[[Transaction], T]) -> T:
        """Run ``fn`` with a fresh Transaction and return its result."""
        return fn(Transaction())

    # --- Lifecycle ---

    def close(self) -> None:
        self.transport.close()

    def __enter__(self) -> Database:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
