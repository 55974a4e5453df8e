"""Zip bundle of an issued identity: cert.crt, cert.key and ca.crt."""

import io
import zipfile

from devca.crypto.pki import SigningIdentity

CERT_FILE = "cert.crt"
KEY_FILE = "cert.key"
ROOT_FILE = "ca.crt"


def write_bundle(identity: SigningIdentity, fileobj):
    """
    Write the bundle as a zip archive to a binary file object.
    cert.crt holds the certificate followed by its intermediates.
    """
    with zipfile.ZipFile(fileobj, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        with zf.open(CERT_FILE, "w") as f:
            identity.write_cert(f)
            identity.write_intermediates(f)
        with zf.open(KEY_FILE, "w") as f:
            identity.write_key(f)
        with zf.open(ROOT_FILE, "w") as f:
            identity.write_root(f)


def bundle_bytes(identity: SigningIdentity) -> bytes:
    buf = io.BytesIO()
    write_bundle(identity, buf)
    return buf.getvalue()
