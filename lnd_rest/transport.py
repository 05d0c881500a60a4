"""
Authenticated HTTPS transport for the LND REST gateway.

Every call opens its own httpx client with an SSL context that trusts only
the node's pinned certificate and sends the macaroon header. Responses come
back either fully decoded (call_json) or as an open stream (call_stream).
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from .credentials import Credentials
from .errors import (
    DecodeError,
    RemoteError,
    RemoteSentinelError,
    TransportError,
    remote_error_message,
)
from .result import JsonResult, json_decoder
from .stream import ResponseStream

logger = logging.getLogger(__name__)


def _is_sentinel(value: Any) -> bool:
    # int 0 or the string "0"; bools are ints in Python and must not match
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value == 0
    return value == "0"


def classify_body(body: bytes, status_code: Optional[int] = None) -> JsonResult:
    """
    Decode a full response body and classify it.

    The gateway signals failure inconsistently, so the body decides, not the
    HTTP status:

      1. body is not JSON (NaN/Infinity included)  -> DecodeError
      2. body is the bare sentinel ``0``            -> RemoteSentinelError
      3. body has a non-empty ``error`` field       -> RemoteError(error.message)
      4. anything else                              -> success

    Args:
        body: Raw response bytes.
        status_code: HTTP status, kept on the result / error for reference.

    Returns:
        JsonResult wrapping the decoded value.
    """
    text = body.decode("utf-8", errors="replace")
    stripped = text.strip()
    if not stripped:
        raise DecodeError("Empty response body", body=text)

    try:
        # Streaming routes may write several records; the first one wins
        value, _ = json_decoder.raw_decode(stripped)
    except ValueError as e:
        raise DecodeError(f"Invalid JSON in response body: {e}", body=text) from e

    if _is_sentinel(value):
        raise RemoteSentinelError(stripped, body=text, status_code=status_code)

    if isinstance(value, dict):
        error = value.get("error")
        if error is not None and error != "":
            raise RemoteError(remote_error_message(error), body=text, status_code=status_code)

    return JsonResult(value, status_code=status_code)


class LndTransport:
    """
    Low-level request layer bound to one set of credentials.

    Holds no connection state between calls, so one instance can be shared
    by concurrent tasks.
    """

    def __init__(
        self,
        credentials: Credentials,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            credentials: Host, pinned TLS certificate and macaroon.
            timeout: Client-side timeout in seconds (None = wait forever,
                which subscriptions need).
            transport: Optional httpx transport, e.g. httpx.MockTransport in tests.
        """
        self.credentials = credentials
        self.timeout = timeout
        self._transport = transport

    def url(self, path: str) -> str:
        """Join host and path with exactly one slash."""
        return self.credentials.host.rstrip("/") + "/" + path.lstrip("/")

    def _build_client(self) -> httpx.AsyncClient:
        kwargs: Dict[str, Any] = {
            "headers": self.credentials.headers(),
            "timeout": self.timeout,
        }
        if self._transport is not None:
            kwargs["transport"] = self._transport
        else:
            kwargs["verify"] = self.credentials.ssl_context()
        return httpx.AsyncClient(**kwargs)

    async def make_request(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> ResponseStream:
        """
        Send one request and return the response with its body unread.

        Args:
            method: HTTP verb.
            path: Path relative to the host, e.g. "v1/getinfo".
            params: JSON object body; None sends no body.

        Returns:
            ResponseStream owning the response and its client.
        """
        content: Optional[bytes] = None
        headers: Dict[str, str] = {}
        if params is not None:
            try:
                content = json.dumps(dict(params), allow_nan=False).encode("utf-8")
            except (TypeError, ValueError) as e:
                raise TransportError(f"Could not encode request params as JSON: {e}") from e
            headers["Content-Type"] = "application/json"

        url = self.url(path)
        client = self._build_client()
        try:
            request = client.build_request(method.upper(), url, content=content, headers=headers)
            logger.debug("LND %s %s", request.method, path)
            response = await client.send(request, stream=True)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            await client.aclose()
            raise TransportError(f"{method.upper()} {url} failed: {e}") from e
        except BaseException:
            await client.aclose()
            raise

        logger.debug("LND response: %s %d", path, response.status_code)
        return ResponseStream(response, client)

    async def call_json(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> JsonResult:
        """Send a request, read the whole body and decode it (see classify_body)."""
        stream = await self.make_request(method, path, params)
        async with stream:
            body = await stream.aread()
        return classify_body(body, status_code=stream.status_code)

    async def call_stream(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> ResponseStream:
        """Send a request and return the open body. The caller must close it."""
        return await self.make_request(method, path, params)

    def __repr__(self) -> str:
        return f"LndTransport(host={self.credentials.host!r})"
