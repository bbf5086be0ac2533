"""secp256k1 ECDSA signing and public-key recovery with Ethereum conventions."""

from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple

from .hashing import keccak256

FIELD_PRIME = 2**256 - 2**32 - 977
CURVE_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
_GENERATOR = (
    0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798,
    0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8,
)

_Point = Optional[Tuple[int, int]]


def _add(a: _Point, b: _Point) -> _Point:
    if a is None:
        return b
    if b is None:
        return a
    x1, y1 = a
    x2, y2 = b
    if x1 == x2:
        if (y1 + y2) % FIELD_PRIME == 0:
            return None
        slope = 3 * x1 * x1 * pow(2 * y1, -1, FIELD_PRIME) % FIELD_PRIME
    else:
        slope = (y2 - y1) * pow(x2 - x1, -1, FIELD_PRIME) % FIELD_PRIME
    x3 = (slope * slope - x1 - x2) % FIELD_PRIME
    return x3, (slope * (x1 - x3) - y1) % FIELD_PRIME


def _multiply(point: _Point, scalar: int) -> _Point:
    result: _Point = None
    while scalar:
        if scalar & 1:
            result = _add(result, point)
        point = _add(point, point)
        scalar >>= 1
    return result


def _address_of(point: _Point) -> str:
    if point is None:
        raise ValueError("point at infinity has no address")
    x, y = point
    return "0x" + keccak256(x.to_bytes(32, "big") + y.to_bytes(32, "big"))[12:].hex()


def _strip_hex(text: str) -> bytes:
    digits = text[2:] if text[:2].lower() == "0x" else text
    try:
        return bytes.fromhex(digits)
    except ValueError as exc:
        raise ValueError(f"invalid hex: {text!r}") from exc


def _digest_int(digest: bytes) -> int:
    if len(digest) != 32:
        raise ValueError("a message digest must be 32 bytes long")
    return int.from_bytes(digest, "big")


def hash_message(message: str | bytes) -> bytes:
    """Hash a message with the Ethereum signed-message prefix (EIP-191)."""
    raw = message.encode("utf-8") if isinstance(message, str) else bytes(message)
    prefix = b"\x19Ethereum Signed Message:\n" + str(len(raw)).encode("ascii")
    return keccak256(prefix + raw)


@dataclass(frozen=True)
class Signature:
    """An ECDSA signature with its recovery value ``v``."""

    r: int
    s: int
    v: int

    @classmethod
    def from_hex(cls, text: str) -> Signature:
        """Parse 65 bytes of hex (r, s, v), with or without ``0x``."""
        raw = _strip_hex(text)
        if len(raw) != 65:
            raise ValueError(f"a signature must be 65 bytes long, got {len(raw)}")
        return cls(int.from_bytes(raw[:32], "big"), int.from_bytes(raw[32:64], "big"), raw[64])

    def to_bytes(self) -> bytes:
        """Return r and s as 32 big-endian bytes each, followed by the v byte."""
        return self.r.to_bytes(32, "big") + self.s.to_bytes(32, "big") + bytes([self.v])

    @property
    def recovery_id(self) -> int:
        if self.v in (0, 1):
            return self.v
        if self.v in (27, 28):
            return self.v - 27
        if self.v >= 35:
            return (self.v - 35) % 2
        raise ValueError(f"invalid recovery value v={self.v}")

    def recover(self, message: str | bytes) -> str:
        """Recover the address that signed a message under the EIP-191 prefix."""
        return recover_address(self, hash_message(message))


def recover_address(signature: Signature, digest: bytes) -> str:
    """Recover the signer's address (lowercase ``0x`` hex) from a signature over a digest."""
    z = _digest_int(digest)
    r, s = signature.r, signature.s
    if not (1 <= r < CURVE_ORDER and 1 <= s < CURVE_ORDER):
        raise ValueError("signature values out of range")
    recovery_id = signature.recovery_id
    x = r + (recovery_id >> 1) * CURVE_ORDER
    if x >= FIELD_PRIME:
        raise ValueError("invalid signature point")
    alpha = (pow(x, 3, FIELD_PRIME) + 7) % FIELD_PRIME
    beta = pow(alpha, (FIELD_PRIME + 1) // 4, FIELD_PRIME)
    if beta * beta % FIELD_PRIME != alpha:
        raise ValueError("invalid signature point")
    y = beta if beta & 1 == recovery_id & 1 else FIELD_PRIME - beta
    r_inverse = pow(r, -1, CURVE_ORDER)
    public = _add(
        _multiply((x, y), s * r_inverse % CURVE_ORDER),
        _multiply(_GENERATOR, -z * r_inverse % CURVE_ORDER),
    )
    return _address_of(public)


@dataclass(frozen=True)
class Wallet:
    """A secp256k1 signing key with its Ethereum address."""

    _scalar: int = field(repr=False)

    def __post_init__(self) -> None:
        if not 1 <= self._scalar < CURVE_ORDER:
            raise ValueError("signing key out of range")

    @classmethod
    def from_hex(cls, key: str) -> Wallet:
        """Load a 32-byte signing key given as hex, with or without ``0x``."""
        raw = _strip_hex(key.strip())
        if len(raw) != 32:
            raise ValueError("a signing key must be 32 bytes long")
        return cls(int.from_bytes(raw, "big"))

    @property
    def address(self) -> str:
        return _address_of(_multiply(_GENERATOR, self._scalar))

    def _nonces(self, digest: bytes) -> Iterator[int]:
        """Deterministic nonce candidates as in RFC 6979 with HMAC-SHA256."""

        def mac(mac_key: bytes, data: bytes) -> bytes:
            return hmac.new(mac_key, data, hashlib.sha256).digest()

        scalar_bytes = self._scalar.to_bytes(32, "big")
        reduced = (int.from_bytes(digest, "big") % CURVE_ORDER).to_bytes(32, "big")
        v = b"\x01" * 32
        k = mac(b"\x00" * 32, v + b"\x00" + scalar_bytes + reduced)
        v = mac(k, v)
        k = mac(k, v + b"\x01" + scalar_bytes + reduced)
        v = mac(k, v)
        while True:
            v = mac(k, v)
            candidate = int.from_bytes(v, "big")
            if 1 <= candidate < CURVE_ORDER:
                yield candidate
            k = mac(k, v + b"\x00")
            v = mac(k, v)

    def sign_hash(self, digest: bytes) -> Signature:
        """Sign a 32-byte digest; the result has low ``s`` and ``v`` of 27 or 28."""
        z = _digest_int(digest)
        for nonce in self._nonces(digest):
            point = _multiply(_GENERATOR, nonce)
            assert point is not None
            r = point[0] % CURVE_ORDER
            if r == 0:
                continue
            s = pow(nonce, -1, CURVE_ORDER) * (z + r * self._scalar) % CURVE_ORDER
            if s == 0:
                continue
            recovery_id = (point[1] & 1) | (2 if point[0] >= CURVE_ORDER else 0)
            if s > CURVE_ORDER // 2:
                s = CURVE_ORDER - s
                recovery_id ^= 1
            return Signature(r, s, 27 + recovery_id)
        raise AssertionError("unreachable")