"""
Open response bodies.

A ResponseStream owns one httpx response opened in streaming mode together
with the per-call client that produced it. ``call_json`` drains and closes
it; ``call_stream`` hands it to the caller, who must close it.
"""

from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Optional

import httpx

from .errors import DecodeError, RemoteError, TransportError, remote_error_message
from .result import JsonResult, json_decoder

logger = logging.getLogger(__name__)

_WHITESPACE = " \t\r\n"


class ResponseStream:
    """
    A live response body from the node.

    Usage:
        async with await lnd.invoices_subscribe() as stream:
            async for event in stream.events():
                print(event.get("result.state").as_str())
    """

    def __init__(self, response: httpx.Response, client: httpx.AsyncClient):
        self._response = response
        self._client = client
        self._closed = False
        self._buffer = ""
        self._chunks: Optional[AsyncIterator[str]] = None

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self._response.headers

    @property
    def closed(self) -> bool:
        return self._closed

    async def aread(self) -> bytes:
        """Read the remaining body into memory."""
        try:
            return await self._response.aread()
        except httpx.HTTPError as e:
            raise TransportError(f"Error reading response body: {e}") from e

    async def aiter_bytes(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._response.aiter_bytes():
                yield chunk
        except httpx.HTTPError as e:
            raise TransportError(f"Error reading response stream: {e}") from e

    async def aiter_text(self) -> AsyncIterator[str]:
        try:
            async for text in self._response.aiter_text():
                yield text
        except httpx.HTTPError as e:
            raise TransportError(f"Error reading response stream: {e}") from e

    async def aiter_lines(self) -> AsyncIterator[str]:
        try:
            async for line in self._response.aiter_lines():
                yield line
        except httpx.HTTPError as e:
            raise TransportError(f"Error reading response stream: {e}") from e

    async def events(self) -> AsyncIterator[JsonResult]:
        """
        Yield each JSON record the node writes, as it arrives.

        Records may be newline-delimited or written back to back; a record
        split across chunks is buffered until complete. A record of the form
        ``{"error": {...}}`` raises RemoteError. A malformed record raises
        DecodeError as soon as the line holding it is complete, without
        waiting for the stream to end.

        The bad record is dropped before either error is raised, so calling
        ``events()`` again resumes with the next record.
        """
        if self._chunks is None:
            self._chunks = self.aiter_text()
        while True:
            event = self._next_event()
            if event is not None:
                yield event
                continue
            try:
                text = await self._chunks.__anext__()
            except StopAsyncIteration:
                break
            self._buffer += text

        if self._buffer.strip(_WHITESPACE):
            tail, self._buffer = self._buffer, ""
            raise DecodeError(f"Unparseable data at end of stream: {tail[:200]!r}", body=tail)

    def _next_event(self) -> Optional[JsonResult]:
        """Take one record off the buffer, or None if more data is needed."""
        self._buffer = self._buffer.lstrip(_WHITESPACE)
        if not self._buffer:
            return None
        try:
            value, end = json_decoder.raw_decode(self._buffer)
        except ValueError as e:
            # A truncated record fails at the end of the buffer; anything
            # that fails before a newline is malformed
            pos = e.pos if isinstance(e, json.JSONDecodeError) else 0
            cut = self._buffer.find("\n", pos)
            if cut == -1:
                return None
            record, self._buffer = self._buffer[:cut], self._buffer[cut + 1:]
            raise DecodeError(f"Malformed record in stream: {record[:200]!r}", body=record) from e
        record, self._buffer = self._buffer[:end], self._buffer[end:]
        return self._classify_event(value, record)

    def _classify_event(self, value: Any, record: str) -> JsonResult:
        if isinstance(value, dict):
            error = value.get("error")
            if error is not None and error != "":
                raise RemoteError(remote_error_message(error), body=record, status_code=self.status_code)
        return JsonResult(value, status_code=self.status_code)

    def __aiter__(self) -> AsyncIterator[JsonResult]:
        return self.events()

    async def aclose(self) -> None:
        """Close the response and its connection. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        try:
            await self._response.aclose()
        finally:
            await self._client.aclose()
        logger.debug("Closed response stream for %s", self._response.request.url.path)

    async def __aenter__(self) -> "ResponseStream":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<ResponseStream {self.status_code} {state}>"
