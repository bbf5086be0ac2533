"""Address encoders for the non-Bitcoin coins the gateway supports."""

from __future__ import annotations

import base64
import binascii
import hashlib
import re
import zlib

import cbor2

from ..hashing import sha256
from . import bech32
from .base import MulticoinEncoder, MulticoinEncoderError
from .base58 import RIPPLE_ALPHABET, Base58Error, b58decode

_HEX = re.compile(r"(?:0x)?([0-9a-fA-F]*)")
_BASE32 = re.compile(r"[A-Z2-7]*")
_UNSIGNED = re.compile(r"\+?[0-9]+")
_SS58_PREFIX = b"SS58PRE"


def _base58(data: str, alphabet: str | None = None) -> bytes:
    try:
        return b58decode(data) if alphabet is None else b58decode(data, alphabet)
    except Base58Error:
        raise MulticoinEncoderError("failed to decode bs58") from None


def _bech32_with_prefix(data: str, prefix: str, decode_reason: str, prefix_reason: str) -> bytes:
    try:
        hrp, payload = bech32.decode(data)
    except bech32.Bech32Error:
        raise MulticoinEncoderError(decode_reason) from None
    if hrp != prefix:
        raise MulticoinEncoderError(prefix_reason)
    return payload


class BinanceEncoder(MulticoinEncoder):
    """Binance Chain bech32 addresses with the ``bnb`` prefix."""

    def encode(self, data: str) -> bytes:
        return _bech32_with_prefix(data, "bnb", "failed to decode bech32", "invalid binance hrp")


def _encode_cardano_byron(data: str) -> bytes:
    if not data.startswith(("Ae2", "Ddz")):
        raise MulticoinEncoderError("invalid bryon address prefix")

    decoded = _base58(data)
    try:
        item = cbor2.loads(decoded)
    except ValueError:
        raise MulticoinEncoderError("failed to cbor decode") from None

    if not (
        isinstance(item, list)
        and len(item) == 2
        and isinstance(item[0], cbor2.CBORTag)
        and isinstance(item[1], int)
        and not isinstance(item[1], bool)
    ):
        raise MulticoinEncoderError("invalid cbor structure")

    tagged, checksum = item
    payload = tagged.value
    if not isinstance(payload, bytes):
        raise MulticoinEncoderError("invalid cbor structure")
    if tagged.tag != 24 or checksum != zlib.crc32(payload):
        raise MulticoinEncoderError("invalid cbor structure")
    return payload


def _encode_cardano_shelley(data: str) -> bytes:
    return _bech32_with_prefix(
        data, "addr", "failed to bech32 encode", "invalid bech32 address prefix"
    )


class CardanoEncoder(MulticoinEncoder):
    """Cardano Byron (base58 CBOR) or Shelley (bech32 ``addr``) addresses."""

    def encode(self, data: str) -> bytes:
        try:
            return _encode_cardano_byron(data)
        except MulticoinEncoderError:
            return _encode_cardano_shelley(data)


class EvmEncoder(MulticoinEncoder):
    """EVM addresses: hex text, with or without a ``0x`` prefix."""

    def encode(self, data: str) -> bytes:
        match = _HEX.fullmatch(data)
        if match is None:
            raise MulticoinEncoderError("invalid hex character")
        digits = match.group(1)
        if len(digits) % 2:
            raise MulticoinEncoderError("odd number of hex digits")
        return bytes.fromhex(digits)


def _parse_unsigned(text: str, bits: int) -> int:
    if not _UNSIGNED.fullmatch(text):
        raise MulticoinEncoderError("")
    value = int(text)
    if value >> bits:
        raise MulticoinEncoderError("")
    return value


class HederaEncoder(MulticoinEncoder):
    """Hedera ``shard.realm.account`` identifiers as 4 + 8 + 8 big-endian bytes."""

    def encode(self, data: str) -> bytes:
        parts = data.split(".")
        if len(parts) != 3:
            raise MulticoinEncoderError("invalid length")
        shard_text, realm_text, account_text = parts
        shard = _parse_unsigned(shard_text, 32)
        realm = _parse_unsigned(realm_text, 64)
        account = _parse_unsigned(account_text, 64)
        return shard.to_bytes(4, "big") + realm.to_bytes(8, "big") + account.to_bytes(8, "big")


class PolkadotEncoder(MulticoinEncoder):
    """Polkadot SS58 addresses; returns the account bytes without prefix or checksum."""

    def encode(self, data: str) -> bytes:
        decoded = _base58(data)
        # prefix byte, at least 1 byte of data and 2 bytes of a hash
        if len(decoded) < 4:
            raise MulticoinEncoderError("")
        payload, checksum = decoded[1:-2], decoded[-2:]
        expected = hashlib.blake2b(_SS58_PREFIX + b"\x00" + payload, digest_size=64).digest()
        if checksum != expected[:2]:
            raise MulticoinEncoderError("invalid checksum")
        return payload


class RippleEncoder(MulticoinEncoder):
    """Ripple base58check addresses in the Ripple alphabet; keeps the version byte."""

    def encode(self, data: str) -> bytes:
        decoded = _base58(data, RIPPLE_ALPHABET)
        # at least 1 byte of data and 4 bytes of checksum
        if len(decoded) < 5:
            raise MulticoinEncoderError("")
        payload, checksum = decoded[:-4], decoded[-4:]
        if sha256(sha256(payload))[:4] != checksum:
            raise MulticoinEncoderError("invalid checksum")
        return payload


class SolanaEncoder(MulticoinEncoder):
    """Solana addresses: plain base58 of the public key."""

    def encode(self, data: str) -> bytes:
        return _base58(data)


class StellarEncoder(MulticoinEncoder):
    """Stellar base32 strkeys with a CRC16-XMODEM checksum; returns the key bytes."""

    def encode(self, data: str) -> bytes:
        if not _BASE32.fullmatch(data):
            raise MulticoinEncoderError("failed to decode base32")
        try:
            decoded = base64.b32decode(data + "=" * (-len(data) % 8))
        except binascii.Error:
            raise MulticoinEncoderError("failed to decode base32") from None

        # version byte, at least 1 byte of data and 2 bytes of a hash
        if len(decoded) < 4:
            raise MulticoinEncoderError("")
        body, checksum_bytes = decoded[:-2], decoded[-2:]
        if int.from_bytes(checksum_bytes, "little") != binascii.crc_hqx(body, 0):
            raise MulticoinEncoderError("invalid checksum")
        return body[1:]