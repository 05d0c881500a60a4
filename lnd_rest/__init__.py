"""
⚡ lnd-rest — async client for the LND REST gateway.

Talks to a Lightning Network Daemon over HTTPS with macaroon auth, trusting
only the node's own (pinned) TLS certificate.

Usage:
    from lnd_rest import connect

    lnd = await connect(
        "https://127.0.0.1:8080",
        tls_cert="~/.lnd/tls.cert",
        macaroon="~/.lnd/data/chain/bitcoin/mainnet/admin.macaroon",
    )
    info = await lnd.get_info()
    print(info.get("alias").as_str())
"""

from .config import LndConfig
from .connect import connect, connect_from_config
from .credentials import Credentials, load_source, pinned_ssl_context
from .errors import (
    CredentialsError,
    DecodeError,
    LndError,
    RemoteError,
    RemoteSentinelError,
    TransportError,
)
from .lnd import Lnd, settled_invoices
from .models import (
    AddInvoiceResult,
    ChannelBalance,
    Invoice,
    InvoiceList,
    NodeInfo,
    Payment,
    PayReq,
)
from .result import JsonResult
from .stream import ResponseStream
from .transport import LndTransport, classify_body

__version__ = "0.1.0"

__all__ = [
    # Main API
    "connect",
    "connect_from_config",
    "Lnd",
    "LndConfig",
    "settled_invoices",
    # Transport
    "LndTransport",
    "Credentials",
    "ResponseStream",
    "JsonResult",
    "classify_body",
    "load_source",
    "pinned_ssl_context",
    # Errors
    "LndError",
    "CredentialsError",
    "TransportError",
    "DecodeError",
    "RemoteError",
    "RemoteSentinelError",
    # Models
    "NodeInfo",
    "AddInvoiceResult",
    "Invoice",
    "InvoiceList",
    "ChannelBalance",
    "PayReq",
    "Payment",
]
