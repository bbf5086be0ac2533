"""Selection of the address encoder that belongs to a coin type."""

from __future__ import annotations

from typing import Callable

from .base import MulticoinEncoder, NotSupportedError
from .bitcoin import BitcoinEncoder
from .chains import (
    BinanceEncoder,
    CardanoEncoder,
    EvmEncoder,
    HederaEncoder,
    PolkadotEncoder,
    RippleEncoder,
    SolanaEncoder,
    StellarEncoder,
)
from .cointype import CoinType, Slip44

_ENCODERS: dict[Slip44, Callable[[], MulticoinEncoder]] = {
    Slip44.ETHEREUM: EvmEncoder,
    Slip44.ETHEREUM_CLASSIC: EvmEncoder,
    Slip44.ROOTSTOCK: EvmEncoder,
    Slip44.BITCOIN: lambda: BitcoinEncoder("bc", [0x00], [0x05]),
    Slip44.LITECOIN: lambda: BitcoinEncoder("ltc", [0x30], [0x32, 0x05]),
    Slip44.DOGECOIN: lambda: BitcoinEncoder(None, [0x1E], [0x16]),
    Slip44.SOLANA: SolanaEncoder,
    Slip44.HEDERA: HederaEncoder,
    Slip44.STELLAR: StellarEncoder,
    Slip44.RIPPLE: RippleEncoder,
    Slip44.CARDANO: CardanoEncoder,
    Slip44.BINANCE: BinanceEncoder,
    Slip44.POLKADOT: PolkadotEncoder,
}


def encoder_for(coin_type: CoinType) -> MulticoinEncoder:
    """Return the encoder for a coin type, or raise NotSupportedError."""
    if coin_type.is_evm:
        return EvmEncoder()
    factory = _ENCODERS.get(coin_type.slip44)
    if factory is None:
        raise NotSupportedError()
    return factory()


def encode_address(coin_type: CoinType, data: str) -> bytes:
    """Encode a textual address of the given coin type into its binary form."""
    return encoder_for(coin_type).encode(data)