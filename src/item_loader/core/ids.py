"""Deterministic internal ids.

The destination item table keys items by 24-character lowercase hex ids.
Authors write human-readable external ids instead, so every external id is
mapped through a content hash: the same external id yields the same internal
id on every run, in every process, on every platform.
"""

from __future__ import annotations

from hashlib import sha256

#: Length of an internal id in hex characters (12 digest bytes).
INTERNAL_ID_LENGTH = 24

_ID_BYTES = INTERNAL_ID_LENGTH // 2


def generate_internal_id(external_id: str) -> str:
    """Map an external id to its 24-character internal id.

    Takes the first 12 bytes of the SHA-256 digest of the UTF-8 encoded
    external id and renders them as lowercase hex.  The result is right-padded
    with ``"0"`` should the digest ever be shorter than 12 bytes.

    Example::

        >>> generate_internal_id("coin01") == generate_internal_id("coin01")
        True
        >>> len(generate_internal_id("coin01"))
        24
    """
    digest = sha256(external_id.encode("utf-8")).digest()
    return digest[:_ID_BYTES].hex().ljust(INTERNAL_ID_LENGTH, "0")
