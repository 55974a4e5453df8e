"""Helper signatures: now_utc, add_years, b64d, decode_pem."""

import re
import base64
import binascii
import datetime
from typing import Optional, Tuple

_PEM_BLOCK = re.compile(
    rb"-----BEGIN ([^\r\n]*?)-----[ \t]*\r?\n((?:(?!-----BEGIN ).)*?)-----END \1-----", re.S
)


def now_utc() -> datetime.datetime:
    """Return the current UTC time truncated to whole seconds."""
    return datetime.datetime.now(datetime.timezone.utc).replace(microsecond=0)


def add_years(moment: datetime.datetime, years: int) -> datetime.datetime:
    """Shift by calendar years; Feb 29 becomes Mar 1 in a non-leap target year."""
    try:
        return moment.replace(year=moment.year + years)
    except ValueError:
        return moment.replace(year=moment.year + years, month=3, day=1)


def b64d(s) -> bytes:
    """Base64-decode a string or bytes, rejecting non-alphabet characters."""
    return base64.b64decode(s, validate=True)


def _strip_headers(body: bytes) -> bytes:
    lines = body.splitlines()
    if lines and b":" in lines[0]:
        # RFC 1421 headers run up to the first blank line
        while lines and lines[0].strip():
            lines.pop(0)
    return b"".join(line.strip() for line in lines)


def decode_pem(data) -> Optional[Tuple[str, bytes]]:
    """
    Return (label, der) for the first well-formed PEM block in data.
    Text before the block is ignored. Returns None when no block decodes.
    """
    if isinstance(data, str):
        data = data.encode()
    for match in _PEM_BLOCK.finditer(data):
        try:
            der = b64d(_strip_headers(match.group(2)))
        except (binascii.Error, ValueError):
            continue
        return match.group(1).decode("ascii", "replace"), der
    return None
