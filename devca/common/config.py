"""Environment settings: CA file locations and the listen address."""

import os

DEFAULT_CA_CERT = "ca.crt"
DEFAULT_CA_KEY = "ca.key"


def ca_paths():
    """Return (certificate path, key path) of the signing CA."""
    return (
        os.getenv("CA_CERT", DEFAULT_CA_CERT),
        os.getenv("CA_KEY", DEFAULT_CA_KEY),
    )


def listen_address():
    """Return (host, port) for the HTTP server."""
    return (
        os.getenv("HOST", "127.0.0.1"),
        int(os.getenv("PORT") or 80),
    )
