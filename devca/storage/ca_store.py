"""Load the signing CA from the certificate and key files on disk."""

from devca.common.config import ca_paths
from devca.crypto.pki import SigningIdentity


def read_ca_files(cert_path: str = None, key_path: str = None):
    """Return (certificate PEM, key PEM) bytes, defaulting to the configured paths."""
    default_cert, default_key = ca_paths()
    with open(cert_path or default_cert, "rb") as f:
        cert_pem = f.read()
    with open(key_path or default_key, "rb") as f:
        key_pem = f.read()
    return cert_pem, key_pem


def load_ca(cert_path: str = None, key_path: str = None) -> SigningIdentity:
    """
    Load the CA identity.
    Raises OSError when a file is missing and FormatError for bad PEM.
    """
    cert_pem, key_pem = read_ca_files(cert_path, key_path)
    return SigningIdentity.load(cert_pem, key_pem)
