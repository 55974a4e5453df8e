"""
Signing identities and X.509 validation helpers.

A SigningIdentity holds a private key, its certificate and the ancestor
chain (index 0 = root of trust). It is loaded from PEM, issues child
identities and writes its parts back out as PEM.
"""
import ipaddress
import secrets
import datetime
from typing import Iterable, Optional, Sequence, Tuple

from cryptography import x509
from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.x509.oid import NameOID
from cryptography.hazmat.primitives import hashes, serialization
from pydantic import BaseModel, ConfigDict

from devca.common.errors import CryptoError, FormatError, WriteError
from devca.common.utils import add_years, decode_pem, now_utc
from devca.crypto.keys import PrivateKey, generate_rsa, parse_private_key

SERIAL_LIMIT = 2 ** 61
VALIDITY_YEARS = 100

# Fixed subject fields of every issued certificate, in RDN order
SUBJECT_DEFAULTS = (
    (NameOID.COUNTRY_NAME, "CA"),
    (NameOID.STATE_OR_PROVINCE_NAME, "Ontario"),
    (NameOID.LOCALITY_NAME, "Kingston"),
    (NameOID.ORGANIZATION_NAME, "jmn.link"),
    (NameOID.ORGANIZATIONAL_UNIT_NAME, "IT"),
)


def subject_name(common_name: str) -> x509.Name:
    attrs = [x509.NameAttribute(oid, value) for oid, value in SUBJECT_DEFAULTS]
    if common_name:
        attrs.append(x509.NameAttribute(NameOID.COMMON_NAME, common_name))
    return x509.Name(attrs)


def alt_names(dns_names: Iterable[str], ip_addresses: Iterable[str]) -> list:
    """Build SAN entries, DNS names first, rejecting malformed values."""
    names = []
    for name in dns_names:
        try:
            names.append(x509.DNSName(name))
        except (TypeError, ValueError) as e:
            raise FormatError(f"Invalid DNS name {name!r}: {e}") from e
    for ip in ip_addresses:
        try:
            names.append(x509.IPAddress(ipaddress.ip_address(ip)))
        except ValueError as e:
            raise FormatError(f"Invalid IP address {ip!r}") from e
    return names


def random_serial() -> int:
    # X.509 serials must be positive
    return secrets.randbelow(SERIAL_LIMIT - 1) + 1


def _write_pem(sink, data: bytes):
    try:
        sink.write(data)
    except OSError as e:
        raise WriteError(f"Unable to write PEM output: {e}") from e


def _cert_pem(cert: x509.Certificate) -> bytes:
    return cert.public_bytes(serialization.Encoding.PEM)


class SigningIdentity(BaseModel):
    private_key: PrivateKey
    certificate: x509.Certificate
    chain: Tuple[x509.Certificate, ...] = ()

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    # -------------------- Load -------------------- #

    @classmethod
    def load(cls, cert_pem, key_pem) -> "SigningIdentity":
        """
        Create an identity from a PEM certificate and PEM private key.
        The certificate is taken as the trust root, so the chain is empty.
        The key is not checked against the certificate here.
        """
        block = decode_pem(cert_pem)
        if block is None:
            raise FormatError("Certificate is not in PEM format")
        label, der = block
        if label != "CERTIFICATE":
            raise FormatError("Provided certificate PEM is not a 'CERTIFICATE'")
        try:
            cert = x509.load_der_x509_certificate(der)
        except ValueError as e:
            raise FormatError(f"Unable to parse certificate: {e}") from e

        block = decode_pem(key_pem)
        if block is None:
            raise FormatError("Key is not in PEM format")
        key = parse_private_key(*block)

        return cls(private_key=key, certificate=cert, chain=())

    # -------------------- Issue -------------------- #

    def issue(self, common_name: str, dns_names: Sequence[str] = (),
              ip_addresses: Sequence[str] = ()) -> "SigningIdentity":
        """Create a new non-CA identity signed by this one."""
        subject = subject_name(common_name)
        names = alt_names(dns_names, ip_addresses)

        try:
            key = generate_rsa()
        except (ValueError, UnsupportedAlgorithm) as e:
            raise CryptoError(f"Key generation failed: {e}") from e

        now = now_utc()
        builder = (
            x509.CertificateBuilder()
            .subject_name(subject)
            .issuer_name(self.certificate.subject)
            .public_key(key.public_key())
            .serial_number(random_serial())
            .not_valid_before(now)
            .not_valid_after(add_years(now, VALIDITY_YEARS))
        )
        if names:
            builder = builder.add_extension(x509.SubjectAlternativeName(names), critical=False)
        try:
            ski = self.certificate.extensions.get_extension_for_class(x509.SubjectKeyIdentifier)
        except x509.ExtensionNotFound:
            pass
        else:
            builder = builder.add_extension(
                x509.AuthorityKeyIdentifier.from_issuer_subject_key_identifier(ski.value),
                critical=False,
            )

        try:
            signed = builder.sign(self.private_key.key, self.private_key.signing_hash())
            cert = x509.load_der_x509_certificate(signed.public_bytes(serialization.Encoding.DER))
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise CryptoError(f"Signing failed: {e}") from e

        return SigningIdentity(
            private_key=key,
            certificate=cert,
            chain=self.chain + (self.certificate,),
        )

    # -------------------- PEM export -------------------- #

    def cert_pem(self) -> bytes:
        return _cert_pem(self.certificate)

    def intermediates_pem(self) -> bytes:
        # closest to the leaf first; chain[0] is the root and is excluded
        return b"".join(_cert_pem(c) for c in reversed(self.chain[1:]))

    def root_pem(self) -> bytes:
        if not self.chain:
            return b""
        return _cert_pem(self.chain[0])

    def key_pem(self) -> bytes:
        return self.private_key.to_pem()

    def write_cert(self, sink):
        """Write the certificate as a CERTIFICATE block."""
        _write_pem(sink, self.cert_pem())

    def write_intermediates(self, sink):
        """Write every intermediate certificate. No-op without intermediates."""
        for cert in reversed(self.chain[1:]):
            _write_pem(sink, _cert_pem(cert))

    def write_root(self, sink):
        """Write the root of the trust chain. No-op for a self-signed identity."""
        if self.chain:
            _write_pem(sink, _cert_pem(self.chain[0]))

    def write_key(self, sink):
        """Write the private key as PKCS#1 (RSA) or SEC1 (EC)."""
        _write_pem(sink, self.key_pem())


# -------------------- Validation helpers -------------------- #

def load_cert(pem_bytes):
    """Load certificate from PEM bytes (string or bytes)."""
    if isinstance(pem_bytes, str):
        pem_bytes = pem_bytes.encode()
    return x509.load_pem_x509_certificate(pem_bytes)


def load_certs(pem_bytes) -> list:
    """Load every certificate in a PEM stream; empty input gives an empty list."""
    if isinstance(pem_bytes, str):
        pem_bytes = pem_bytes.encode()
    if not pem_bytes.strip():
        return []
    return x509.load_pem_x509_certificates(pem_bytes)


def get_cn(cert: x509.Certificate):
    attrs = cert.subject.get_attributes_for_oid(NameOID.COMMON_NAME)
    return attrs[0].value if attrs else None


def get_cert_fingerprint(cert: x509.Certificate) -> str:
    """Return SHA-256 fingerprint of certificate as hex string."""
    return cert.fingerprint(hashes.SHA256()).hex()


def _check_validity(cert: x509.Certificate, now: datetime.datetime):
    if cert.not_valid_before_utc > now or cert.not_valid_after_utc < now:
        raise ValueError(f"BAD CERT: EXPIRED/NOT YET VALID ({get_cn(cert)})")


def verify_chain(leaf: x509.Certificate, intermediates: Sequence[x509.Certificate],
                 root: x509.Certificate, now: Optional[datetime.datetime] = None) -> bool:
    """
    Verify leaf up to root, picking issuers from intermediates by subject.
    Checks each signature and validity window; raises ValueError on failure.
    """
    if now is None:
        now = datetime.datetime.now(datetime.timezone.utc)

    pool = list(intermediates)
    current = leaf
    _check_validity(current, now)
    # each intermediate can be used at most once, so the walk terminates
    for _ in range(len(pool) + 1):
        if current.issuer == root.subject:
            try:
                current.verify_directly_issued_by(root)
            except (ValueError, TypeError, InvalidSignature) as e:
                raise ValueError(f"BAD CERT: UNTRUSTED or signature invalid ({e})") from e
            _check_validity(root, now)
            return True

        issuer = next((c for c in pool if c.subject == current.issuer), None)
        if issuer is None:
            break
        pool.remove(issuer)
        try:
            current.verify_directly_issued_by(issuer)
        except (ValueError, TypeError, InvalidSignature) as e:
            raise ValueError(f"BAD CERT: UNTRUSTED or signature invalid ({e})") from e
        _check_validity(issuer, now)
        current = issuer

    raise ValueError(f"BAD CERT: UNTRUSTED (no path from {get_cn(leaf)} to {get_cn(root)})")
