"""Shared fixtures: generated TLS material, a fake LND node and a local HTTPS server."""

import datetime
import http.server
import ipaddress
import json
import ssl
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID

from lnd_rest.credentials import Credentials
from lnd_rest.lnd import Lnd
from lnd_rest.transport import LndTransport


HOST = "https://127.0.0.1:8080"
MACAROON = bytes.fromhex("0201036c6e6402f801030a10b0ad")
MACAROON_HEX = MACAROON.hex()
PUBKEY = "02" + "ab" * 32


# --- TLS material ---


@dataclass
class CertPair:
    cert: x509.Certificate
    key: ec.EllipticCurvePrivateKey

    @property
    def cert_pem(self) -> bytes:
        return self.cert.public_bytes(serialization.Encoding.PEM)

    @property
    def key_pem(self) -> bytes:
        return self.key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.TraditionalOpenSSL,
            serialization.NoEncryption(),
        )


def _san() -> x509.SubjectAlternativeName:
    return x509.SubjectAlternativeName(
        [x509.DNSName("localhost"), x509.IPAddress(ipaddress.ip_address("127.0.0.1"))]
    )


def make_ca(common_name: str) -> CertPair:
    """A self-signed CA certificate, like the tls.cert LND generates."""
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=30))
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .add_extension(
            x509.KeyUsage(
                digital_signature=True,
                content_commitment=False,
                key_encipherment=False,
                data_encipherment=False,
                key_agreement=False,
                key_cert_sign=True,
                crl_sign=True,
                encipher_only=False,
                decipher_only=False,
            ),
            critical=True,
        )
        .add_extension(x509.SubjectKeyIdentifier.from_public_key(key.public_key()), critical=False)
        .add_extension(_san(), critical=False)
        .sign(key, hashes.SHA256())
    )
    return CertPair(cert, key)


def make_leaf(ca: CertPair) -> CertPair:
    """A server certificate for 127.0.0.1 / localhost signed by ``ca``."""
    key = ec.generate_private_key(ec.SECP256R1())
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "localhost")]))
        .issuer_name(ca.cert.subject)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=30))
        .add_extension(x509.BasicConstraints(ca=False, path_length=None), critical=True)
        .add_extension(x509.ExtendedKeyUsage([ExtendedKeyUsageOID.SERVER_AUTH]), critical=False)
        .add_extension(x509.SubjectKeyIdentifier.from_public_key(key.public_key()), critical=False)
        .add_extension(
            x509.AuthorityKeyIdentifier.from_issuer_public_key(ca.key.public_key()),
            critical=False,
        )
        .add_extension(_san(), critical=False)
        .sign(ca.key, hashes.SHA256())
    )
    return CertPair(cert, key)


@pytest.fixture(scope="session")
def node_ca() -> CertPair:
    return make_ca("lnd autogenerated cert")


@pytest.fixture(scope="session")
def other_ca() -> CertPair:
    return make_ca("somebody else")


@pytest.fixture(scope="session")
def tls_cert(node_ca) -> bytes:
    return node_ca.cert_pem


# --- Fake LND over httpx.MockTransport ---


Handler = Callable[[httpx.Request], httpx.Response]


class FakeLnd:
    """Records requests and answers them from a route table."""

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Handler] = {}
        self.requests: List[httpx.Request] = []

    def on(self, method: str, path: str, handler: Handler) -> None:
        self.routes[(method, path)] = handler

    def json(self, method: str, path: str, body: Any, status: int = 200) -> None:
        self.on(method, path, lambda request: httpx.Response(status, json=body))

    def text(self, method: str, path: str, text: str, status: int = 200) -> None:
        self.on(method, path, lambda request: httpx.Response(status, text=text))

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"code": 5, "message": "Not Found", "details": []})
        return handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_body(self) -> Optional[Dict[str, Any]]:
        content = self.last_request.content
        return json.loads(content) if content else None


@pytest.fixture
def fake_lnd() -> FakeLnd:
    return FakeLnd()


@pytest.fixture
def credentials(tls_cert) -> Credentials:
    return Credentials(host=HOST, tls_cert=tls_cert, macaroon_hex=MACAROON_HEX)


@pytest.fixture
def transport(credentials, fake_lnd) -> LndTransport:
    return LndTransport(credentials, transport=fake_lnd.transport)


@pytest.fixture
def lnd(transport) -> Lnd:
    return Lnd(transport)


# --- Local HTTPS server ---


class _NodeHandler(http.server.BaseHTTPRequestHandler):
    def do_GET(self):
        body = json.dumps({
            "alias": "tls-node",
            "identity_pubkey": PUBKEY,
            "seen_macaroon": self.headers.get("Grpc-Metadata-macaroon"),
        }).encode("utf-8")
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass


@pytest.fixture
def https_node(node_ca, tmp_path):
    """An HTTPS server on 127.0.0.1 presenting a certificate signed by ``node_ca``."""
    leaf = make_leaf(node_ca)
    cert_file = tmp_path / "server.crt"
    key_file = tmp_path / "server.key"
    cert_file.write_bytes(leaf.cert_pem)
    key_file.write_bytes(leaf.key_pem)

    ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    ctx.load_cert_chain(str(cert_file), str(key_file))

    server = http.server.ThreadingHTTPServer(("127.0.0.1", 0), _NodeHandler)
    server.socket = ctx.wrap_socket(server.socket, server_side=True)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"https://127.0.0.1:{server.server_address[1]}"
    finally:
        server.shutdown()
        server.server_close()
