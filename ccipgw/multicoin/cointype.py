"""Coin types as used by ENS multichain address records."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

_EVM_FLAG = 0x8000_0000
_U32_MAX = 0xFFFF_FFFF


class Slip44(IntEnum):
    """SLIP-44 coin types the gateway knows how to encode."""

    BITCOIN = 0
    LITECOIN = 2
    DOGECOIN = 3
    ETHEREUM = 60
    ETHEREUM_CLASSIC = 61
    ROOTSTOCK = 137
    RIPPLE = 144
    STELLAR = 148
    POLKADOT = 354
    SOLANA = 501
    BINANCE = 714
    CARDANO = 1815
    HEDERA = 3030


@dataclass(frozen=True)
class CoinType:
    """A coin type: a known Slip44 coin, another SLIP-44 number, or EVM (``slip44`` is None)."""

    slip44: Slip44 | int | None

    @classmethod
    def from_int(cls, value: int) -> CoinType:
        """Classify a 32-bit coin type; values with the high bit set are EVM chains."""
        if not 0 <= value <= _U32_MAX:
            raise ValueError(f"coin type {value} does not fit in 32 bits")
        if value >= _EVM_FLAG:
            return cls.evm()
        try:
            return cls(Slip44(value))
        except ValueError:
            return cls(value)

    @classmethod
    def evm(cls) -> CoinType:
        """The coin type shared by all EVM chains."""
        return cls(None)

    @property
    def is_evm(self) -> bool:
        return self.slip44 is None