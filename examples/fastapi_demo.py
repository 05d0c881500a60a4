"""
⚡ lnd-rest FastAPI Demo

Small HTTP front-end for an LND node: node info, invoices, payments, and a
background task that logs every settled invoice.

Run:
    pip install -e ".[examples]"
    LND_REST_HOST=https://127.0.0.1:8080 \
    LND_TLS_CERT_PATH=~/.lnd/tls.cert \
    LND_MACAROON_PATH=~/.lnd/data/chain/bitcoin/regtest/admin.macaroon \
    python examples/fastapi_demo.py
"""

import asyncio
import contextlib
import logging
import sys

import uvicorn
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from lnd_rest import (
    ChannelBalance,
    Lnd,
    LndConfig,
    LndError,
    NodeInfo,
    PayReq,
    RemoteError,
    connect_from_config,
    settled_invoices,
)

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("lnd-demo")

lnd: Lnd


async def watch_invoices(client: Lnd) -> None:
    """Log settled invoices until cancelled. The subscription is not reopened if it drops."""
    try:
        async with await client.invoices_subscribe() as stream:
            async for invoice in settled_invoices(stream):
                logger.info("⚡ Invoice settled: %s (%d sats)", invoice.memo or "<no memo>", invoice.amt_paid_sat)
    except LndError as e:
        logger.warning("Invoice subscription ended: %s", e)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    global lnd
    try:
        lnd = await connect_from_config(LndConfig.from_env())
    except (LndError, ValueError) as e:
        # Nothing works without a node
        logger.critical("Startup failed: %s", e)
        sys.exit(1)

    watcher = asyncio.create_task(watch_invoices(lnd))
    yield
    watcher.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await watcher


app = FastAPI(
    title="lnd-rest Demo",
    description="LND REST gateway demo with FastAPI",
    version="0.1.0",
    lifespan=lifespan,
)


def to_http_error(e: LndError) -> HTTPException:
    if isinstance(e, RemoteError):
        return HTTPException(status_code=400, detail={"error": e.message})
    return HTTPException(status_code=502, detail={"error": str(e)})


class NewInvoice(BaseModel):
    value: int
    memo: str = ""


class PayRequest(BaseModel):
    invoice: str
    fee_limit_msat: float = 10000


# --- Routes ---


@app.get("/")
async def root():
    """Node summary."""
    try:
        info = NodeInfo.from_result(await lnd.get_info())
    except LndError as e:
        raise to_http_error(e)
    return {
        "alias": info.alias,
        "pubkey": info.identity_pubkey,
        "block_height": info.block_height,
        "synced": info.synced_to_chain,
        "active_channels": info.num_active_channels,
    }


@app.get("/balance")
async def balance():
    try:
        bal = ChannelBalance.from_result(await lnd.balance_channel())
    except LndError as e:
        raise to_http_error(e)
    return {"local_sat": bal.local_sat, "remote_sat": bal.remote_sat}


@app.post("/invoices")
async def create_invoice(body: NewInvoice):
    try:
        result = await lnd.create_invoice(body.value, body.memo)
    except LndError as e:
        raise to_http_error(e)
    return {"payment_request": result.get("payment_request").as_str()}


@app.get("/invoices")
async def list_invoices():
    try:
        result = await lnd.list_invoices()
    except LndError as e:
        raise to_http_error(e)
    return result.value


@app.get("/decode/{invoice}")
async def decode(invoice: str):
    try:
        req = PayReq.from_result(await lnd.decode_invoice(invoice))
    except LndError as e:
        raise to_http_error(e)
    return {"destination": req.destination, "sats": req.num_satoshis, "description": req.description}


@app.post("/pay")
async def pay(body: PayRequest):
    try:
        result = await lnd.pay_invoice(body.invoice, body.fee_limit_msat)
    except LndError as e:
        raise to_http_error(e)
    return result.value


# --- Run ---

if __name__ == "__main__":
    print("\n⚡ lnd-rest FastAPI Demo")
    print("=" * 40)
    print("Endpoints:")
    print("  GET  /                 — Node summary")
    print("  GET  /balance          — Channel balance")
    print("  POST /invoices         — Create invoice")
    print("  GET  /invoices         — List invoices")
    print("  GET  /decode/{invoice} — Decode a payment request")
    print("  POST /pay              — Pay an invoice")
    print()
    uvicorn.run(app, host="127.0.0.1", port=8402)
