"""Signing of resolved CCIP-read results in the form the offchain resolver verifies."""

from __future__ import annotations

from dataclasses import dataclass

from . import abi
from .hashing import keccak256
from .secp256k1 import Wallet

_SIGNATURE_PREFIX = 0x1900


class SignError(Exception):
    """Raised when a result cannot be signed."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Unknown error {reason}")
        self.reason = reason


@dataclass(frozen=True)
class UnsignedPayload:
    """An ABI-encoded result with what is needed to sign it for the requesting resolver."""

    data: bytes
    sender: str | bytes
    request_hash: bytes
    result_hash: bytes
    expires: int

    def sign(self, wallet: Wallet) -> str:
        """Sign the result and return ``abi.encode(data, expires, signature)`` as ``0x`` hex."""
        try:
            packed = abi.encode_packed(
                ["uint16", "address", "uint64", "bytes32", "bytes32"],
                [
                    _SIGNATURE_PREFIX,
                    self.sender,
                    self.expires,
                    self.request_hash,
                    self.result_hash,
                ],
            )
        except abi.AbiError as exc:
            raise SignError(str(exc)) from exc

        signature = wallet.sign_hash(keccak256(packed)).to_bytes()
        try:
            encoded = abi.encode(
                ["bytes", "uint256", "bytes"], [self.data, self.expires, signature]
            )
        except abi.AbiError as exc:
            raise SignError(str(exc)) from exc
        return "0x" + encoded.hex()