"""Content hashing for blobs and commits."""

import hashlib

from trakit.constants import HASH_ALGORITHM, HASH_LENGTH


def compute_digest(content: bytes) -> str:
    """Compute the hex digest of content.

    The same function addresses blobs and identifies commits, so both are
    derived from hashing a canonical byte sequence.

    Args:
        content: Binary data to hash

    Returns:
        Lowercase hex string (64 characters for SHA-256)
    """
    hasher = hashlib.new(HASH_ALGORITHM)
    hasher.update(content)
    return hasher.hexdigest()


def is_full_digest(value: str) -> bool:
    """Check whether value looks like a complete lowercase hex digest."""
    if not isinstance(value, str) or len(value) != HASH_LENGTH:
        return False
    return all(c in "0123456789abcdef" for c in value)
