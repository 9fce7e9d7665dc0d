"""Shared test fixtures for Arbor tests."""

from __future__ import annotations

import copy
import hashlib
import json
from collections.abc import Callable
from typing import Any
from urllib.parse import unquote

import httpx
import pytest

from arbor import Database

DB_URL = "https://db.example"


class FakeRealtimeBackend:
    """In-memory stand-in for a realtime database REST endpoint.

    Query parameters other than ``shallow`` are ignored on purpose, so tests
    exercise the client's local ordering and filtering.
    """

    def __init__(self, data: Any = None) -> None:
        self.data: Any = copy.deepcopy(data)
        self.rules: dict[str, Any] = {"rules": {".read": "auth != null", ".write": "auth != null"}}
        self.requests: list[httpx.Request] = []
        self.queued_errors: list[tuple[int, str]] = []
        self.hooks: list[Callable[[httpx.Request], None]] = []
        self._push_counter = 0

    # --- Tree helpers ---

    def get_at(self, segments: list[str]) -> Any:
        node = self.data
        for s in segments:
            if isinstance(node, list) and s.isdigit() and int(s) < len(node):
                node = node[int(s)]
            elif isinstance(node, dict) and s in node:
                node = node[s]
            else:
                return None
        return node

    def set_at(self, segments: list[str], value: Any) -> None:
        if not segments:
            self.data = copy.deepcopy(value)
            return
        if value is None:
            self._delete_at(segments)
            return
        if not isinstance(self.data, dict):
            self.data = {}
        node = self.data
        for s in segments[:-1]:
            if not isinstance(node.get(s), dict):
                node[s] = {}
            node = node[s]
        node[segments[-1]] = copy.deepcopy(value)

    def _delete_at(self, segments: list[str]) -> None:
        # Empty parents disappear, as on the real service.
        trail: list[tuple[dict[str, Any], str]] = []
        node = self.data
        for s in segments:
            if not isinstance(node, dict) or s not in node:
                return
            trail.append((node, s))
            node = node[s]
        for parent, key in reversed(trail):
            parent.pop(key, None)
            if parent:
                break
        if self.data == {}:
            self.data = None

    @staticmethod
    def etag_of(value: Any) -> str:
        canonical = json.dumps(value, sort_keys=True, separators=(",", ":"))
        return hashlib.sha1(canonical.encode("utf-8")).hexdigest()

    # --- Request handling ---

    def fail_next(self, status: int, message: str) -> None:
        self.queued_errors.append((status, message))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for hook in self.hooks:
            hook(request)
        if self.queued_errors:
            status, message = self.queued_errors.pop(0)
            return httpx.Response(status, json={"error": message})

        path = request.url.path
        assert path.endswith(".json"), path
        path = unquote(path[: -len(".json")])
        if path == "/.settings/rules":
            return self._rules(request)
        segments = [s for s in path.split("/") if s]

        current = self.get_at(segments)
        if_match = request.headers.get("If-Match")
        if if_match is not None and if_match != self.etag_of(current):
            return httpx.Response(412, json={"error": "ETag mismatch"})

        body = json.loads(request.content) if request.content else None
        if request.method == "GET":
            value = current
            if request.url.params.get("shallow") == "true" and isinstance(value, dict):
                value = {k: True if isinstance(v, (dict, list)) else v for k, v in value.items()}
            headers = {}
            if request.headers.get("X-Firebase-ETag") == "true":
                headers["ETag"] = self.etag_of(current)
            return httpx.Response(200, json=value, headers=headers)
        if request.method == "PUT":
            self.set_at(segments, body)
            return httpx.Response(200, json=body)
        if request.method == "PATCH":
            for rel_path, item in body.items():
                self.set_at(segments + rel_path.split("/"), item)
            return httpx.Response(200, json=body)
        if request.method == "POST":
            self._push_counter += 1
            name = f"-Nkey{self._push_counter:04d}"
            self.set_at(segments + [name], body)
            return httpx.Response(200, json={"name": name})
        if request.method == "DELETE":
            self.set_at(segments, None)
            return httpx.Response(200, json=None)
        return httpx.Response(405, json={"error": "Method not allowed"})

    def _rules(self, request: httpx.Request) -> httpx.Response:
        if request.method == "PUT":
            self.rules = json.loads(request.content)
        return httpx.Response(200, json=self.rules)


# --- Fixtures ---


@pytest.fixture
def backend():
    """An empty fake backend."""
    return FakeRealtimeBackend()


@pytest.fixture
def http_client(backend):
    client = httpx.Client(transport=httpx.MockTransport(backend))
    yield client
    client.close()


@pytest.fixture
def db(http_client):
    """A Database wired to the fake backend."""
    database = Database.from_url(DB_URL, http_client=http_client)
    yield database
    database.close()


@pytest.fixture
def seeded_backend(backend):
    backend.data = {
        "users": {
            "carol": {"name": "Carol", "age": 41, "team": {"name": "blue"}},
            "alice": {"name": "Alice", "age": 30, "team": {"name": "red"}},
            "bob": {"name": "Bob", "age": 25},
            "dave": {"name": "Dave", "age": 30, "team": {"name": "red"}},
        },
        "scores": {"c": 1, "a": 2, "b": 3},
        "counter": 7,
    }
    return backend
