#!/usr/bin/env python3
"""
Generate a development root CA (RSA or EC key + self-signed X.509 cert).
Usage: python gen_ca.py [--ec]
Writes the paths named by CA_CERT / CA_KEY (default ca.crt and ca.key).
"""
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import datetime
from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from dotenv import load_dotenv

from devca.common.config import ca_paths
from devca.common.utils import add_years, now_utc
from devca.crypto.keys import PrivateKey, generate_rsa
from devca.crypto.pki import VALIDITY_YEARS, random_serial, subject_name

CA_COMMON_NAME = "jmn.link CA"


def build_root(key: PrivateKey, common_name: str = CA_COMMON_NAME) -> x509.Certificate:
    """Self-signed CA certificate for key."""
    subject = issuer = subject_name(common_name)
    now = now_utc()
    ski = x509.SubjectKeyIdentifier.from_public_key(key.public_key())
    return (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(key.public_key())
        .serial_number(random_serial())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(add_years(now, VALIDITY_YEARS))
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .add_extension(ski, critical=False)
        .add_extension(x509.AuthorityKeyIdentifier.from_issuer_subject_key_identifier(ski), critical=False)
        .sign(key.key, key.signing_hash())
    )


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    load_dotenv()
    cert_path, key_path = ca_paths()

    if "--ec" in argv:
        key = PrivateKey.wrap(ec.generate_private_key(ec.SECP256R1()))
    else:
        key = generate_rsa()
    cert = build_root(key)

    with open(key_path, "wb") as f:
        f.write(key.to_pem())
    with open(cert_path, "wb") as f:
        f.write(cert.public_bytes(serialization.Encoding.PEM))

    print(f"Wrote {cert_path} and {key_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
