"""HTTP transport: one blocking request per call, failures mapped to ApiError."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from arbor import __version__
from arbor.config import ArborConfig
from arbor.errors import ApiError

logger = logging.getLogger(__name__)

UNSET: Any = object()


def rest_url(url: str) -> str:
    """Append the ``.json`` suffix to the path part of ``url``."""
    base, sep, query = url.partition("?")
    return f"{base}.json{sep}{query}"


def error_message(response: httpx.Response) -> str:
    """Extract the backend's error text from a response body."""
    text = response.text
    try:
        body = json.loads(text)
    except ValueError:
        return text.strip() or response.reason_phrase
    if isinstance(body, dict) and "error" in body:
        return str(body["error"])
    return text.strip() or response.reason_phrase


class HttpTransport:
    """Thin wrapper around an ``httpx.Client``.

    The transport owns the client only when it created it; an injected client
    is left open on close().
    """

    def __init__(self, config: ArborConfig, client: httpx.Client | None = None) -> None:
        self.config = config
        self._owns_client = client is None
        if client is None:
            client = httpx.Client(timeout=config.request_timeout_s)
        self._client = client
        self._user_agent = config.user_agent or f"arbor/{__version__}"

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        json_body: Any = UNSET,
    ) -> httpx.Response:
        target = rest_url(url) if self.config.append_json_suffix else url
        send_headers = {"User-Agent": self._user_agent}
        if headers:
            send_headers.update(headers)

        content: bytes | None = None
        if json_body is not UNSET:
            content = json.dumps(json_body, separators=(",", ":")).encode("utf-8")
            send_headers["Content-Type"] = "application/json"

        try:
            response = self._client.request(method, target, headers=send_headers, content=content)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, target, e)
            raise ApiError(str(e) or type(e).__name__, method=method, url=target) from e

        logger.debug("%s %s -> %s", method, target, response.status_code)
        if response.is_error:
            message = error_message(response)
            logger.warning("%s %s returned %s: %s", method, target, response.status_code, message)
            raise ApiError(message, status=response.status_code, method=method, url=target)
        return response

    def request_json(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        json_body: Any = UNSET,
    ) -> tuple[Any, httpx.Response]:
        """Issue a request and decode its JSON body (empty body decodes to None)."""
        response = self.request(method, url, headers=headers, json_body=json_body)
        return decode_body(response), response

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


def decode_body(response: httpx.Response) -> Any:
    raw = response.content
    if not raw:
        return None
    try:
        return json.loads(raw.decode("utf-8"))
    except ValueError as e:
        raise ApiError(
            f"Response body is not valid JSON: {e}",
            status=response.status_code,
            method=response.request.method,
            url=str(response.request.url),
        ) from e
