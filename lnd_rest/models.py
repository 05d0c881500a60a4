"""
Typed views over decoded LND responses.

The client returns JsonResult everywhere; these dataclasses are for callers
that want named fields. Each ``from_result`` tolerates missing fields and
LND's habit of encoding int64 values as JSON strings. Records from
streaming routes arrive wrapped as ``{"result": {...}}`` and are unwrapped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .result import JsonResult

INVOICE_SETTLED = "SETTLED"


def _unwrap(result: JsonResult) -> JsonResult:
    inner = result.get("result")
    return inner if inner.exists else result


@dataclass
class NodeInfo:
    """Result of get_info."""
    identity_pubkey: str
    alias: str = ""
    version: str = ""
    block_height: int = 0
    num_active_channels: int = 0
    num_peers: int = 0
    synced_to_chain: bool = False
    testnet: bool = False
    chains: List[str] = field(default_factory=list)

    @classmethod
    def from_result(cls, result: JsonResult) -> "NodeInfo":
        chains = [
            f"{c.get('chain').as_str()}/{c.get('network').as_str()}"
            for c in result.get("chains").as_list()
        ]
        return cls(
            identity_pubkey=result.get("identity_pubkey").as_str(),
            alias=result.get("alias").as_str(),
            version=result.get("version").as_str(),
            block_height=result.get("block_height").as_int(),
            num_active_channels=result.get("num_active_channels").as_int(),
            num_peers=result.get("num_peers").as_int(),
            synced_to_chain=result.get("synced_to_chain").as_bool(),
            testnet=result.get("testnet").as_bool(),
            chains=chains,
        )


@dataclass
class AddInvoiceResult:
    """Result of create_invoice."""
    payment_request: str
    r_hash: str                    # base64, as LND's REST gateway encodes bytes
    add_index: int = 0
    payment_addr: str = ""

    @classmethod
    def from_result(cls, result: JsonResult) -> "AddInvoiceResult":
        return cls(
            payment_request=result.get("payment_request").as_str(),
            r_hash=result.get("r_hash").as_str(),
            add_index=result.get("add_index").as_int(),
            payment_addr=result.get("payment_addr").as_str(),
        )


@dataclass
class Invoice:
    """One invoice, from list_invoices or an invoices_subscribe event."""
    payment_request: str
    r_hash: str = ""
    memo: str = ""
    value: int = 0
    value_msat: int = 0
    state: str = ""
    settled: bool = False
    amt_paid_sat: int = 0
    creation_date: int = 0
    settle_date: Optional[int] = None
    add_index: int = 0
    settle_index: int = 0
    r_preimage: Optional[str] = None

    @property
    def is_settled(self) -> bool:
        return self.state == INVOICE_SETTLED or self.settled

    @classmethod
    def from_result(cls, result: JsonResult) -> "Invoice":
        result = _unwrap(result)
        settle_date = result.get("settle_date").as_int()
        preimage = result.get("r_preimage").as_str()
        return cls(
            payment_request=result.get("payment_request").as_str(),
            r_hash=result.get("r_hash").as_str(),
            memo=result.get("memo").as_str(),
            value=result.get("value").as_int(),
            value_msat=result.get("value_msat").as_int(),
            state=result.get("state").as_str(),
            settled=result.get("settled").as_bool(),
            amt_paid_sat=result.get("amt_paid_sat").as_int(),
            creation_date=result.get("creation_date").as_int(),
            settle_date=settle_date or None,
            add_index=result.get("add_index").as_int(),
            settle_index=result.get("settle_index").as_int(),
            r_preimage=preimage or None,
        )


@dataclass
class InvoiceList:
    """Result of list_invoices."""
    invoices: List[Invoice]
    first_index_offset: int = 0
    last_index_offset: int = 0

    @classmethod
    def from_result(cls, result: JsonResult) -> "InvoiceList":
        return cls(
            invoices=[Invoice.from_result(item) for item in result.get("invoices").as_list()],
            first_index_offset=result.get("first_index_offset").as_int(),
            last_index_offset=result.get("last_index_offset").as_int(),
        )


@dataclass
class ChannelBalance:
    """Result of balance_channel, in satoshis."""
    local_sat: int
    remote_sat: int = 0
    pending_open_local_sat: int = 0

    @classmethod
    def from_result(cls, result: JsonResult) -> "ChannelBalance":
        local = result.get("local_balance.sat")
        # Older nodes only report the deprecated flat "balance" field
        local_sat = local.as_int() if local.exists else result.get("balance").as_int()
        return cls(
            local_sat=local_sat,
            remote_sat=result.get("remote_balance.sat").as_int(),
            pending_open_local_sat=result.get("pending_open_local_balance.sat").as_int(),
        )


@dataclass
class PayReq:
    """Result of decode_invoice."""
    destination: str
    payment_hash: str
    num_satoshis: int = 0
    num_msat: int = 0
    description: str = ""
    timestamp: int = 0
    expiry: int = 0
    cltv_expiry: int = 0

    @classmethod
    def from_result(cls, result: JsonResult) -> "PayReq":
        return cls(
            destination=result.get("destination").as_str(),
            payment_hash=result.get("payment_hash").as_str(),
            num_satoshis=result.get("num_satoshis").as_int(),
            num_msat=result.get("num_msat").as_int(),
            description=result.get("description").as_str(),
            timestamp=result.get("timestamp").as_int(),
            expiry=result.get("expiry").as_int(),
            cltv_expiry=result.get("cltv_expiry").as_int(),
        )


@dataclass
class Payment:
    """A payment status update from pay_invoice."""
    payment_hash: str
    status: str = ""
    payment_preimage: str = ""
    value_sat: int = 0
    fee_sat: int = 0
    fee_msat: int = 0
    failure_reason: str = ""

    @property
    def succeeded(self) -> bool:
        return self.status == "SUCCEEDED"

    @property
    def failed(self) -> bool:
        return self.status == "FAILED"

    @classmethod
    def from_result(cls, result: JsonResult) -> "Payment":
        result = _unwrap(result)
        return cls(
            payment_hash=result.get("payment_hash").as_str(),
            status=result.get("status").as_str(),
            payment_preimage=result.get("payment_preimage").as_str(),
            value_sat=result.get("value_sat").as_int(),
            fee_sat=result.get("fee_sat").as_int(),
            fee_msat=result.get("fee_msat").as_int(),
            failure_reason=result.get("failure_reason").as_str(),
        )
