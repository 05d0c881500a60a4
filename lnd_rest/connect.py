"""
Client bootstrap.

connect() loads credentials, builds the client and makes one get_info call
to prove the node is reachable and the macaroon is accepted. It either
returns a working client or raises; deciding whether that ends the process
is up to the caller.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from .config import LndConfig
from .credentials import CredentialSource, Credentials
from .errors import LndError
from .lnd import Lnd
from .transport import LndTransport

logger = logging.getLogger(__name__)


async def connect(
    host: str,
    tls_cert: CredentialSource,
    macaroon: CredentialSource,
    timeout: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Lnd:
    """
    Connect to an LND node.

    Args:
        host: Base URI of the REST listener, e.g. https://127.0.0.1:8080.
        tls_cert: PEM certificate source (bytes, file path, or callable).
        macaroon: Raw macaroon source (bytes, file path, or callable).
        timeout: Client-side timeout in seconds (None = no deadline).
        transport: Optional httpx transport (tests).

    Returns:
        Lnd client that has passed a get_info liveness check.

    Raises:
        CredentialsError: a credential could not be loaded or is invalid.
        TransportError / DecodeError / RemoteError: the liveness check failed.
    """
    try:
        credentials = Credentials.load(host, tls_cert, macaroon)
        lnd = Lnd(LndTransport(credentials, timeout=timeout, transport=transport))
        info = await lnd.get_info()
    except LndError as e:
        logger.error("Could not connect to LND at %s: %s", host, e)
        raise

    logger.info(
        "Connected to LND node %s (%s) at %s",
        info.get("alias").as_str() or "<no alias>",
        info.get("identity_pubkey").as_str()[:16],
        host,
    )
    return lnd


async def connect_from_config(
    config: LndConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Lnd:
    """Connect using an LndConfig (see LndConfig.from_env)."""
    return await connect(
        config.host,
        config.tls_cert_path,
        config.macaroon_path,
        timeout=config.timeout,
        transport=transport,
    )
