"""
Credentials for talking to an LND node.

LND authenticates REST calls with a macaroon (sent hex-encoded in the
``Grpc-Metadata-macaroon`` header) and serves them over TLS with a
self-signed certificate. The certificate is pinned: the SSL context built
here trusts that certificate and nothing else.
"""

from __future__ import annotations

import os
import re
import ssl
from dataclasses import dataclass
from typing import Callable, Union

from .errors import CredentialsError

MACAROON_HEADER = "Grpc-Metadata-macaroon"

# bytes are used as-is, str / PathLike name a file, callables return bytes
CredentialSource = Union[bytes, str, "os.PathLike[str]", Callable[[], bytes]]

_HEX_RE = re.compile(r"^[0-9a-fA-F]+$")


def load_source(source: CredentialSource, what: str = "credential") -> bytes:
    """
    Load raw bytes from a credential source.

    Args:
        source: Raw bytes, a file path (str or PathLike), or a zero-argument
            callable returning bytes (e.g. a secrets-manager lookup).
        what: Name used in error messages ("TLS certificate", "macaroon").

    Returns:
        The credential bytes.
    """
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)

    if isinstance(source, (str, os.PathLike)):
        try:
            with open(os.path.expanduser(source), "rb") as f:
                return f.read()
        except OSError as e:
            raise CredentialsError(f"Could not read {what} from {os.fspath(source)}: {e}") from e

    if callable(source):
        try:
            data = source()
        except Exception as e:
            raise CredentialsError(f"Could not load {what}: {e}") from e
        if not isinstance(data, (bytes, bytearray)):
            raise CredentialsError(f"{what} source returned {type(data).__name__}, expected bytes")
        return bytes(data)

    raise CredentialsError(f"Unsupported {what} source: {type(source).__name__}")


def encode_macaroon(macaroon: bytes) -> str:
    """Hex-encode raw macaroon bytes for the macaroon header."""
    if not macaroon:
        raise CredentialsError("Macaroon is empty")
    return macaroon.hex()


def pinned_ssl_context(tls_cert: bytes) -> ssl.SSLContext:
    """
    Build an SSL context that trusts only the given PEM certificate(s).

    Passing ``cadata`` to ``create_default_context`` skips the system
    trust store entirely.
    """
    try:
        pem = tls_cert.decode("ascii")
    except UnicodeDecodeError as e:
        raise CredentialsError("TLS certificate is not PEM text") from e

    if "-----BEGIN CERTIFICATE-----" not in pem:
        raise CredentialsError("TLS certificate contains no PEM-encoded certificate")

    try:
        return ssl.create_default_context(cadata=pem)
    except (ssl.SSLError, ValueError) as e:
        raise CredentialsError(f"Invalid TLS certificate: {e}") from e


@dataclass(frozen=True)
class Credentials:
    """Immutable connection credentials for one LND node."""
    host: str           # base URI, e.g. https://127.0.0.1:8080
    tls_cert: bytes     # PEM
    macaroon_hex: str

    def __post_init__(self) -> None:
        if not self.host:
            raise CredentialsError("LND host is required")
        if not self.macaroon_hex or not _HEX_RE.match(self.macaroon_hex):
            raise CredentialsError("Macaroon must be a non-empty hex string")
        # Fail at construction rather than on the first request
        pinned_ssl_context(self.tls_cert)

    @classmethod
    def load(
        cls,
        host: str,
        tls_cert: CredentialSource,
        macaroon: CredentialSource,
    ) -> "Credentials":
        """
        Load credentials from sources.

        Args:
            host: Base URI of the node's REST listener.
            tls_cert: Source of the PEM certificate.
            macaroon: Source of the raw (binary) macaroon.
        """
        cert_bytes = load_source(tls_cert, "TLS certificate")
        macaroon_bytes = load_source(macaroon, "macaroon")
        return cls(
            host=host,
            tls_cert=cert_bytes,
            macaroon_hex=encode_macaroon(macaroon_bytes),
        )

    def ssl_context(self) -> ssl.SSLContext:
        """A fresh SSL context trusting only the pinned certificate."""
        return pinned_ssl_context(self.tls_cert)

    def headers(self) -> dict:
        """Authentication headers sent with every request."""
        return {MACAROON_HEADER: self.macaroon_hex}

    def __repr__(self) -> str:
        return f"Credentials(host={self.host!r}, tls_cert=<{len(self.tls_cert)} bytes>, macaroon_hex=<redacted>)"
