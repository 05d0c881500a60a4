"""
Error types raised by the LND REST client.

Every failure is one of a small closed set so callers can match on the kind
instead of sniffing message strings:

    LndError
    ├── CredentialsError     bad or unloadable TLS cert / macaroon / host
    ├── TransportError       network, TLS or request-encoding failure
    ├── DecodeError          response body is not JSON
    └── RemoteError          the node reported a failure in the body
        └── RemoteSentinelError   the body was the bare sentinel ``0``
"""

from __future__ import annotations

from typing import Any, Optional


class LndError(Exception):
    """Base class for all lnd-rest errors."""


class CredentialsError(LndError, ValueError):
    """TLS certificate, macaroon or host failed validation or could not be loaded."""


class TransportError(LndError):
    """
    The request never produced a usable response.

    Raised for DNS, connection, TLS verification, read and timeout failures,
    and for request params that cannot be encoded as JSON. The underlying
    exception is kept as ``__cause__``.
    """


class DecodeError(LndError):
    """The response body could not be parsed as JSON."""

    def __init__(self, message: str, body: str = ""):
        super().__init__(message)
        self.body = body


class RemoteError(LndError):
    """The node answered, but the body reports a failure."""

    def __init__(self, message: str, body: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.body = body
        self.status_code = status_code


class RemoteSentinelError(RemoteError):
    """The body was the bare ``0`` some gateway routes return on failure."""


def remote_error_message(error: Any) -> str:
    """
    Message for an ``error`` field: ``error.message`` for objects, the text
    itself for strings, and "" for any other value (``false``, ``0``, arrays).
    """
    if isinstance(error, dict):
        message = error.get("message")
        return "" if message is None else str(message)
    return error if isinstance(error, str) else ""
