"""
Connection settings.

LndConfig collects what connect() needs. Build it directly, or from the
environment:

    LND_REST_HOST      https://127.0.0.1:8080 (bare host:port gets https://)
    LND_TLS_CERT_PATH  path to tls.cert
    LND_MACAROON_PATH  path to a macaroon, e.g. admin.macaroon
    LND_TIMEOUT        optional client timeout in seconds
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional


@dataclass
class LndConfig:
    """Settings for one LND node connection."""
    host: str
    tls_cert_path: str
    macaroon_path: str
    timeout: Optional[float] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "LndConfig":
        """
        Read settings from environment variables.

        Args:
            environ: Mapping to read instead of os.environ.

        Returns:
            LndConfig.
        """
        env = os.environ if environ is None else environ

        def required(name: str) -> str:
            value = env.get(name, "").strip()
            if not value:
                raise ValueError(f"{name} is required")
            return value

        host = required("LND_REST_HOST")
        if "://" not in host:
            host = f"https://{host}"

        timeout: Optional[float] = None
        raw_timeout = env.get("LND_TIMEOUT", "").strip()
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                raise ValueError(f"LND_TIMEOUT must be a number of seconds, got {raw_timeout!r}")

        return cls(
            host=host,
            tls_cert_path=os.path.expanduser(required("LND_TLS_CERT_PATH")),
            macaroon_path=os.path.expanduser(required("LND_MACAROON_PATH")),
            timeout=timeout,
        )
