"""
Private key handling for signing identities.

PrivateKey is a tagged variant over the key algorithms a CA can sign with:
RSA, elliptic-curve and Ed25519. Every algorithm-specific operation branches
on the tag rather than inspecting the key object.
"""
from enum import Enum
from typing import Optional, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa
from pydantic import BaseModel, ConfigDict

from devca.common.errors import FormatError, UnsupportedKeyTypeError

RSA_KEY_SIZE = 2048
RSA_PUBLIC_EXPONENT = 65537

# PEM label -> (DER tag of the element after the version, key kinds allowed)
# PKCS#8 carries an AlgorithmIdentifier SEQUENCE, PKCS#1 the modulus INTEGER
# and SEC1 the private key OCTET STRING.
KEY_LABELS = {
    "PRIVATE KEY": (0x30, None),
    "RSA PRIVATE KEY": (0x02, ("rsa",)),
    "EC PRIVATE KEY": (0x04, ("ec",)),
}


class KeyKind(str, Enum):
    RSA = "rsa"
    EC = "ec"
    ED25519 = "ed25519"


class PrivateKey(BaseModel):
    kind: KeyKind
    key: Union[rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey, ed25519.Ed25519PrivateKey]

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    @classmethod
    def wrap(cls, key) -> "PrivateKey":
        """Tag a cryptography private key object; FormatError for other algorithms."""
        if isinstance(key, rsa.RSAPrivateKey):
            return cls(kind=KeyKind.RSA, key=key)
        if isinstance(key, ec.EllipticCurvePrivateKey):
            return cls(kind=KeyKind.EC, key=key)
        if isinstance(key, ed25519.Ed25519PrivateKey):
            return cls(kind=KeyKind.ED25519, key=key)
        raise FormatError(f"Unsupported private key algorithm {type(key).__name__}")

    def public_key(self):
        return self.key.public_key()

    def signing_hash(self) -> Optional[hashes.HashAlgorithm]:
        """Digest used when this key signs a certificate (None for Ed25519)."""
        if self.kind is KeyKind.RSA:
            return hashes.SHA256()
        if self.kind is KeyKind.EC:
            size = self.key.curve.key_size
            if size <= 256:
                return hashes.SHA256()
            if size <= 384:
                return hashes.SHA384()
            return hashes.SHA512()
        return None

    def to_pem(self) -> bytes:
        """
        PKCS#1 ("RSA PRIVATE KEY") for RSA, SEC1 ("EC PRIVATE KEY") for EC.
        Raises UnsupportedKeyTypeError for anything else.
        """
        if self.kind is KeyKind.RSA or self.kind is KeyKind.EC:
            return self.key.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.TraditionalOpenSSL,
                encryption_algorithm=serialization.NoEncryption(),
            )
        raise UnsupportedKeyTypeError(f"Unknown private key type {self.kind.value}")


def _skip_element(der: bytes, offset: int) -> int:
    """Offset just past the DER element starting at offset."""
    length = der[offset + 1]
    start = offset + 2
    if length & 0x80:
        count = length & 0x7F
        length = int.from_bytes(der[start:start + count], "big")
        start += count
    return start + length


def _second_tag(der: bytes):
    """Tag of the element after the version INTEGER, None if the shape is wrong."""
    try:
        if der[0] != 0x30:
            return None
        # first element sits right after the outer SEQUENCE header
        offset = 2 + (der[1] & 0x7F if der[1] & 0x80 else 0)
        if der[offset] != 0x02:
            return None
        return der[_skip_element(der, offset)]
    except IndexError:
        return None


def parse_private_key(label: str, der: bytes) -> PrivateKey:
    """Parse DER key material according to the PEM label it was armored with."""
    if label not in KEY_LABELS:
        raise FormatError("Provided key PEM is not a private key")
    shape, allowed = KEY_LABELS[label]
    if _second_tag(der) != shape:
        raise FormatError(f"Key material is not encoded as {label}")
    try:
        key = serialization.load_der_private_key(der, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise FormatError(f"Unable to parse {label}: {e}") from e

    wrapped = PrivateKey.wrap(key)
    if allowed is not None and wrapped.kind.value not in allowed:
        raise FormatError(f"{label} block holds a {wrapped.kind.value} key")
    return wrapped


def generate_rsa(key_size: int = RSA_KEY_SIZE) -> PrivateKey:
    key = rsa.generate_private_key(public_exponent=RSA_PUBLIC_EXPONENT, key_size=key_size)
    return PrivateKey(kind=KeyKind.RSA, key=key)
