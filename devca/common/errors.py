"""Error taxonomy shared by the CA core, the bundle writer and the server."""


class CAError(Exception):
    """Base class for every error raised by devca."""


class FormatError(CAError, ValueError):
    """Malformed or mislabeled PEM input, or an unusable identity field."""


class CryptoError(CAError):
    """Key generation, serial generation, signing or re-parsing failed."""


class UnsupportedKeyTypeError(CAError, TypeError):
    """The private key algorithm has no PEM export in this service."""


class WriteError(CAError, IOError):
    """The output sink rejected a write during export."""
