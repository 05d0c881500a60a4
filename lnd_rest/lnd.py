"""
LND REST API operations.

Each method shapes one gateway request (path + JSON params) and hands it to
the transport. Errors come straight from the transport; nothing here adds
its own classification.

Usage:
    lnd = await connect("https://127.0.0.1:8080", "~/.lnd/tls.cert", admin_macaroon_path)
    invoice = await lnd.create_invoice(1000, "coffee")
    print(invoice.get("payment_request").as_str())
"""

from __future__ import annotations

from typing import Any, AsyncIterator, Dict, Mapping, Optional

from .models import Invoice
from .result import JsonResult
from .stream import ResponseStream
from .transport import LndTransport

# Server-side payment timeout sent with every pay_invoice call
PAY_TIMEOUT_SECONDS = 60


class Lnd:
    """
    Client for one LND node's REST gateway.

    Stateless apart from the transport's immutable credentials, so a single
    instance can be shared across tasks.
    """

    def __init__(self, transport: LndTransport):
        self.transport = transport

    @property
    def host(self) -> str:
        return self.transport.credentials.host

    async def make_request(
        self, method: str, path: str, params: Optional[Mapping[str, Any]] = None
    ) -> ResponseStream:
        return await self.transport.make_request(method, path, params)

    async def call_json(
        self, method: str, path: str, params: Optional[Mapping[str, Any]] = None
    ) -> JsonResult:
        return await self.transport.call_json(method, path, params)

    async def call_stream(
        self, method: str, path: str, params: Optional[Mapping[str, Any]] = None
    ) -> ResponseStream:
        return await self.transport.call_stream(method, path, params)

    async def get_info(self) -> JsonResult:
        """Node identity, alias, chain sync state and channel counts."""
        return await self.call_json("GET", "v1/getinfo")

    async def create_invoice(self, value: int, memo: str) -> JsonResult:
        """
        Create an invoice.

        Args:
            value: Amount in satoshis.
            memo: Invoice description.

        Returns:
            Result with payment_request, r_hash and add_index.
        """
        data = {"value": value, "memo": memo}
        return await self.call_json("POST", "v1/invoices", data)

    async def list_invoices(self) -> JsonResult:
        return await self.call_json("GET", "v1/invoices")

    async def pay_invoice(self, invoice: str, fee_limit_msat: float) -> JsonResult:
        """
        Pay a bolt11 invoice through the router.

        Args:
            invoice: Bolt11 payment request.
            fee_limit_msat: Maximum routing fee in millisatoshis.

        Returns:
            The first payment status update the router writes.
        """
        data: Dict[str, Any] = {
            "timeout_seconds": PAY_TIMEOUT_SECONDS,
            "payment_request": invoice,
            "fee_limit_msat": fee_limit_msat,
        }
        return await self.call_json("POST", "v2/router/send", data)

    async def balance_channel(self) -> JsonResult:
        """Aggregate local/remote balance across all channels."""
        return await self.call_json("GET", "v1/balance/channels")

    async def decode_invoice(self, invoice: str) -> JsonResult:
        """
        Decode a bolt11 payment request.

        The invoice is put into the path without URL escaping, so it must
        already be URL-safe (plain bech32 bolt11 strings are).
        """
        return await self.call_json("GET", "v1/payreq/" + invoice)

    async def invoices_subscribe(self) -> ResponseStream:
        """
        Open the invoice event stream.

        Returns as soon as the node answers; the node then writes one
        ``{"result": {...invoice...}}`` record per invoice update. Close the
        stream when done.
        """
        return await self.call_stream("GET", "v1/invoices/subscribe")

    def __repr__(self) -> str:
        return f"Lnd(host={self.host!r})"


async def settled_invoices(stream: ResponseStream) -> AsyncIterator[Invoice]:
    """
    Yield each invoice that reaches the SETTLED state on a subscription stream.

    Usage:
        async with await lnd.invoices_subscribe() as stream:
            async for invoice in settled_invoices(stream):
                print(invoice.memo, invoice.amt_paid_sat)
    """
    async for event in stream.events():
        invoice = Invoice.from_result(event)
        if invoice.is_settled:
            yield invoice
