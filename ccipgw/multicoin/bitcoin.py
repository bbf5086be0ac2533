"""Bitcoin-style address encoders: P2PKH, P2SH and SegWit output scripts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ..hashing import sha256
from . import bech32
from .base import MulticoinEncoder, MulticoinEncoderError
from .base58 import Base58Error, b58decode


def _base58check_hash(data: str, accepted_versions: tuple[int, ...]) -> bytes:
    """Validate a base58check address and return the hash that follows its version byte."""
    try:
        decoded = b58decode(data)
    except Base58Error:
        raise MulticoinEncoderError("failed to decode bs58") from None

    # version byte, at least one data byte, 4 bytes of checksum
    if len(decoded) < 6:
        raise MulticoinEncoderError("")
    if decoded[0] not in accepted_versions:
        raise MulticoinEncoderError("invalid version")

    body, checksum = decoded[:-4], decoded[-4:]
    if sha256(sha256(body))[:4] != checksum:
        raise MulticoinEncoderError("invalid checksum")
    return body[1:]


@dataclass(frozen=True)
class P2PKHEncoder(MulticoinEncoder):
    """Pay-to-public-key-hash addresses, turned into their locking script."""

    accepted_versions: tuple[int, ...]

    def encode(self, data: str) -> bytes:
        key_hash = _base58check_hash(data, tuple(self.accepted_versions))
        return bytes([0x76, 0xA9, len(key_hash) & 0xFF]) + key_hash + bytes([0x88, 0xAC])


@dataclass(frozen=True)
class P2SHEncoder(MulticoinEncoder):
    """Pay-to-script-hash addresses, turned into their locking script."""

    accepted_versions: tuple[int, ...]

    def encode(self, data: str) -> bytes:
        script_hash = _base58check_hash(data, tuple(self.accepted_versions))
        return bytes([0xA9, len(script_hash) & 0xFF]) + script_hash + bytes([0x87])


@dataclass(frozen=True)
class SegWitEncoder(MulticoinEncoder):
    """Bech32/Bech32m segwit addresses with a fixed human-readable part."""

    human_readable_part: str

    def encode(self, data: str) -> bytes:
        try:
            hrp, version, program = bech32.decode_segwit(data)
        except bech32.Bech32Error:
            raise MulticoinEncoderError("failed to bech32 decode") from None

        if hrp != self.human_readable_part.lower():
            raise MulticoinEncoderError("invalid segwit prefix")

        if version == 0:
            opcode = 0x00
        elif 1 <= version <= 16:
            opcode = version + 0x50
        else:
            raise MulticoinEncoderError("invalid segwit version")

        return bytes([opcode, len(program) & 0xFF]) + program


class BitcoinEncoder(MulticoinEncoder):
    """Accepts segwit (when a prefix is given), P2PKH and P2SH addresses, in that order."""

    def __init__(
        self,
        segwit_hrp: str | None,
        p2pkh_versions: Iterable[int],
        p2sh_versions: Iterable[int],
    ) -> None:
        self.segwit_encoder = SegWitEncoder(segwit_hrp) if segwit_hrp is not None else None
        self.p2pkh_encoder = P2PKHEncoder(tuple(p2pkh_versions))
        self.p2sh_encoder = P2SHEncoder(tuple(p2sh_versions))

    def encode(self, data: str) -> bytes:
        if self.segwit_encoder is not None:
            try:
                return self.segwit_encoder.encode(data)
            except MulticoinEncoderError:
                pass
        for encoder in (self.p2pkh_encoder, self.p2sh_encoder):
            try:
                return encoder.encode(data)
            except MulticoinEncoderError:
                continue
        raise MulticoinEncoderError("")