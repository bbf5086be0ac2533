"""Bech32 and Bech32m decoding, including segwit address validation."""

from __future__ import annotations

from enum import Enum

CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
_CHARSET_MAP = {char: value for value, char in enumerate(CHARSET)}
_GENERATOR = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)
_CHECKSUM_LENGTH = 6
_MAX_LENGTH = 1023
_SEGWIT_MAX_LENGTH = 90


class Bech32Error(ValueError):
    """Raised when a string is not a valid bech32 or segwit address."""


class _Variant(Enum):
    BECH32 = 1
    BECH32M = 0x2BC830A3


def _polymod(values: list[int]) -> int:
    checksum = 1
    for value in values:
        top = checksum >> 25
        checksum = ((checksum & 0x1FFFFFF) << 5) ^ value
        for bit, generator in enumerate(_GENERATOR):
            if (top >> bit) & 1:
                checksum ^= generator
    return checksum


def _hrp_expand(hrp: str) -> list[int]:
    return [ord(char) >> 5 for char in hrp] + [0] + [ord(char) & 31 for char in hrp]


def _split(address: str, max_length: int) -> tuple[str, list[int], _Variant]:
    if address.lower() != address and address.upper() != address:
        raise Bech32Error("mixed case")
    if len(address) > max_length:
        raise Bech32Error("address too long")
    address = address.lower()
    separator = address.rfind("1")
    if separator < 1:
        raise Bech32Error("missing human-readable part or separator")
    hrp, data_part = address[:separator], address[separator + 1 :]
    if len(hrp) > 83 or any(not 33 <= ord(char) <= 126 for char in hrp):
        raise Bech32Error("invalid human-readable part")
    if len(data_part) < _CHECKSUM_LENGTH:
        raise Bech32Error("checksum too short")
    try:
        values = [_CHARSET_MAP[char] for char in data_part]
    except KeyError as exc:
        raise Bech32Error(f"invalid character {exc.args[0]!r}") from None
    try:
        variant = _Variant(_polymod(_hrp_expand(hrp) + values))
    except ValueError:
        raise Bech32Error("invalid checksum") from None
    return hrp, values[:-_CHECKSUM_LENGTH], variant


def _to_bytes(values: list[int], strict: bool) -> bytes:
    accumulator = 0
    bits = 0
    out = bytearray()
    for value in values:
        accumulator = (accumulator << 5) | value
        bits += 5
        while bits >= 8:
            bits -= 8
            out.append((accumulator >> bits) & 0xFF)
        accumulator &= (1 << bits) - 1
    if strict and (bits >= 5 or accumulator):
        raise Bech32Error("invalid padding")
    return bytes(out)


def decode(address: str) -> tuple[str, bytes]:
    """Decode a bech32 or bech32m string into its lowercase prefix and data bytes."""
    hrp, values, _ = _split(address, _MAX_LENGTH)
    return hrp, _to_bytes(values, strict=False)


def decode_segwit(address: str) -> tuple[str, int, bytes]:
    """Decode a segwit address into (prefix, witness version, witness program)."""
    hrp, values, variant = _split(address, _SEGWIT_MAX_LENGTH)
    if not values:
        raise Bech32Error("missing witness version")
    version, program_values = values[0], values[1:]
    if version > 16:
        raise Bech32Error("invalid witness version")
    program = _to_bytes(program_values, strict=True)
    if not 2 <= len(program) <= 40:
        raise Bech32Error("invalid witness program length")
    if version == 0 and len(program) not in (20, 32):
        raise Bech32Error("invalid version 0 witness program length")
    expected = _Variant.BECH32 if version == 0 else _Variant.BECH32M
    if variant is not expected:
        raise Bech32Error("checksum variant does not match witness version")
    return hrp, version, program