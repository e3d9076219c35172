"""SHA-256 identifier hashing.

hash_string() emits uppercase hex byte pairs joined by "-" (the format the
predictor has always sent for the user id). normalize_digest() turns that
into plain lowercase hex, which is what the machine id uses.
"""
from __future__ import annotations

import hashlib
import logging

logger = logging.getLogger(__name__)

DIGEST_SEPARATOR = "-"


def hash_string(value: str | None) -> str:
    """Return the SHA-256 of the UTF-8 bytes of value, or "" for blank input.

    Never raises. A failure in the hashing primitive also yields "".
    """
    if value is None or not value.strip():
        return ""

    try:
        digest = hashlib.sha256(value.encode("utf-8")).digest()
    except Exception as e:
        logger.debug("Failed to hash identifier: %s", e)
        return ""
    return DIGEST_SEPARATOR.join(f"{b:02X}" for b in digest)


def normalize_digest(digest: str) -> str:
    """Strip separators and lowercase a hash_string() result."""
    return digest.replace(DIGEST_SEPARATOR, "").lower()
