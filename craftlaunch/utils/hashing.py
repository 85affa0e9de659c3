"""Content digests and verification."""

import hashlib
from typing import Optional

from ..errors import HashMismatch

SUPPORTED_ALGORITHMS = ("sha1", "sha256")


def digest(data: bytes, algorithm: str = "sha1") -> str:
    """Return the lowercase hex digest of ``data``."""
    if algorithm not in SUPPORTED_ALGORITHMS:
        raise ValueError(f"Unsupported hash algorithm: {algorithm}")
    return hashlib.new(algorithm, data).hexdigest()


def matches(data: bytes, expected: str, algorithm: str = "sha1") -> bool:
    return digest(data, algorithm) == expected.lower()


def verify(data: bytes, expected: str, algorithm: str = "sha1", url: Optional[str] = None) -> str:
    """Raise HashMismatch unless ``data`` hashes to ``expected``."""
    actual = digest(data, algorithm)
    if actual != expected.lower():
        raise HashMismatch(expected, actual, url)
    return actual
