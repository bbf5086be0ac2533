"""Decoding of the resolver function calls carried inside a CCIP-read request."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from . import abi


class ResolverFunctionCallDecodingError(ValueError):
    """Raised when resolver calldata cannot be decoded."""

    def __init__(self, message: str, selector: str | None = None) -> None:
        super().__init__(message)
        self.selector = selector


class ResolverFunctionCall:
    """Base class of the resolver calls the gateway understands."""


@dataclass(frozen=True)
class Addr(ResolverFunctionCall):
    """addr(bytes32 node) returns (address)"""

    namehash: bytes


@dataclass(frozen=True)
class Name(ResolverFunctionCall):
    """name(bytes32 node) returns (string)"""

    namehash: bytes


@dataclass(frozen=True)
class Abi(ResolverFunctionCall):
    """abi(bytes32 node, uint256 contentTypes) returns (uint256, bytes)"""


@dataclass(frozen=True)
class Text(ResolverFunctionCall):
    """text(bytes32 node, string key) returns (string)"""

    namehash: bytes
    record: str


@dataclass(frozen=True)
class ContentHash(ResolverFunctionCall):
    """contenthash(bytes32 node) returns (bytes)"""


@dataclass(frozen=True)
class InterfaceImplementer(ResolverFunctionCall):
    """interfaceImplementer(bytes32 node, bytes4 interfaceID) returns (address)"""


@dataclass(frozen=True)
class AddrMultichain(ResolverFunctionCall):
    """addr(bytes32 node, uint256 coinType) returns (bytes)"""

    namehash: bytes
    coin_type: int


@dataclass(frozen=True)
class PubKey(ResolverFunctionCall):
    """pubkey(bytes32 node) returns (bytes32, bytes32)"""


_DECODERS: dict[str, Callable[[bytes], ResolverFunctionCall]] = {
    "3b3b57de": lambda payload: Addr(*abi.decode(["bytes32"], payload)),
    "691f3431": lambda payload: Name(*abi.decode(["bytes32"], payload)),
    "2203ab56": lambda payload: Abi(),
    "59d1d43c": lambda payload: Text(*abi.decode(["bytes32", "string"], payload)),
    "bc1c58d1": lambda payload: ContentHash(),
    "b8f2bbb4": lambda payload: InterfaceImplementer(),
    "f1cb7e06": lambda payload: AddrMultichain(*abi.decode(["bytes32", "uint64"], payload)),
    "c8690233": lambda payload: PubKey(),
}


def decode_call(data: bytes) -> ResolverFunctionCall:
    """Decode resolver calldata (4-byte selector followed by ABI arguments)."""
    raw = bytes(data)
    if len(raw) < 4:
        raise ResolverFunctionCallDecodingError("Invalid payload")
    selector = raw[:4].hex()
    decoder = _DECODERS.get(selector)
    if decoder is None:
        raise ResolverFunctionCallDecodingError(f"Invalid selector {selector}", selector)
    try:
        return decoder(raw[4:])
    except abi.AbiError as exc:
        raise ResolverFunctionCallDecodingError("ABI decode error", selector) from exc