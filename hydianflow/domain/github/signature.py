"""
GitHub delivery signature verification.

GitHub signs every delivery with HMAC-SHA256 over the raw body and sends it as
``X-Hub-Signature-256: sha256=<hex>``. The body must be verified byte-exact,
before any JSON decoding.
"""
import hashlib
import hmac
import re

_SIGNATURE_PREFIX = "sha256="
_HEX_DIGEST_RE = re.compile(r"[0-9a-fA-F]+")


def compute_signature(secret: str | bytes, body: bytes) -> str:
    """Hex HMAC-SHA256 of ``body``; the value GitHub puts after ``sha256=``."""
    key = secret.encode("utf-8") if isinstance(secret, str) else secret
    return hmac.new(key, body, hashlib.sha256).hexdigest()


def _split_header(signature_header: str | None) -> str | None:
    """Return the hex digest of a ``sha256=<hex>`` header, or None if malformed."""
    if not signature_header:
        return None
    algorithm, sep, digest = signature_header.strip().partition("=")
    if not sep or algorithm.lower() != _SIGNATURE_PREFIX[:-1]:
        return None
    if not _HEX_DIGEST_RE.fullmatch(digest):
        return None
    return digest


def is_well_formed(signature_header: str | None) -> bool:
    """True when the header has the ``sha256=<hex>`` shape (digest not checked)."""
    return _split_header(signature_header) is not None


class SignatureVerifier:
    """
    Verifies ``X-Hub-Signature-256`` against a shared secret.

    The secret is passed in at construction; an empty secret rejects
    every delivery.
    """

    def __init__(self, secret: str | bytes):
        self._secret = secret.encode("utf-8") if isinstance(secret, str) else secret

    @property
    def configured(self) -> bool:
        return bool(self._secret)

    def verify(self, body: bytes, signature_header: str | None) -> bool:
        if not self._secret:
            return False
        received = _split_header(signature_header)
        if received is None:
            return False
        expected = compute_signature(self._secret, body)
        if len(received) != len(expected):
            return False
        # constant-time compare
        return hmac.compare_digest(received.lower(), expected)
