"""Hash functions used by the gateway: SHA-256, Keccak-256 and ENS namehash."""

from __future__ import annotations

import hashlib
from functools import reduce

from Crypto.Hash import keccak


def _as_bytes(data: bytes | bytearray | memoryview | str) -> bytes:
    return data.encode("utf-8") if isinstance(data, str) else bytes(data)


def sha256(data: bytes | bytearray | memoryview | str) -> bytes:
    """Return the SHA-256 digest of the data."""
    return hashlib.sha256(_as_bytes(data)).digest()


def keccak256(data: bytes | bytearray | memoryview | str) -> bytes:
    """Return the Keccak-256 digest of the data (the Ethereum variant, not SHA3-256)."""
    return keccak.new(data=_as_bytes(data), digest_bits=256).digest()


def namehash(name: str) -> bytes:
    """Compute the ENS namehash of a dotted name; the empty name hashes to 32 zero bytes."""
    if not name:
        return bytes(32)
    return reduce(
        lambda node, label: keccak256(node + keccak256(label)),
        reversed(name.split(".")),
        bytes(32),
    )