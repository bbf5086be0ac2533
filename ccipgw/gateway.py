"""CCIP-read gateway: decoding requests, resolving them and shaping the responses."""

from __future__ import annotations

import json
import logging
import re
import time
from dataclasses import dataclass
from typing import Any

from . import abi
from .database import Database, NodeNotFoundError
from .dns import decode_name
from .hashing import keccak256, namehash
from .lookup import (
    Addr,
    AddrMultichain,
    ResolverFunctionCall,
    ResolverFunctionCallDecodingError,
    Text,
    decode_call,
)
from .multicoin.base import MulticoinEncoderError
from .multicoin.cointype import CoinType
from .multicoin.encoding import encode_address
from .secp256k1 import Wallet
from .signing import SignError, UnsignedPayload

logger = logging.getLogger(__name__)

_RESOLVE_SELECTOR = "0x9061b923"
_TTL = 3600
_ETHEREUM_COIN = 60
_U32_MASK = 0xFFFF_FFFF
_HEX_DIGITS = re.compile(r"[0-9a-fA-F]*")
_ADDRESS = re.compile(r"(?:0x)?([0-9a-fA-F]{40})")


def _hex(text: str) -> bytes | None:
    if len(text) % 2 or not _HEX_DIGITS.fullmatch(text):
        return None
    return bytes.fromhex(text)


def _parse_address(text: str) -> bytes | None:
    match = _ADDRESS.fullmatch(text)
    return bytes.fromhex(match.group(1)) if match else None


@dataclass
class GlobalState:
    """What every request handler shares: the record store and the signing wallet."""

    db: Database
    wallet: Wallet


class ResolverDecodeError(ValueError):
    """Raised when the body of a gateway request cannot be decoded."""


class ResolveError(Exception):
    """Raised when a decoded query cannot be answered."""


@dataclass(frozen=True)
class GatewayResponse:
    """Either the signed result (HTTP 200) or an error message (HTTP 400)."""

    ok: bool
    value: str

    @classmethod
    def data(cls, data: str) -> GatewayResponse:
        return cls(True, data)

    @classmethod
    def error(cls, message: str) -> GatewayResponse:
        return cls(False, message)

    @property
    def status_code(self) -> int:
        return 200 if self.ok else 400

    def to_json(self) -> str:
        """Return the JSON body: ``{"data": ...}`` or ``{"message": ...}``."""
        return json.dumps({"data": self.value} if self.ok else {"message": self.value})


_ERROR_PREFIXES: tuple[tuple[type[Exception], str], ...] = (
    (ResolverDecodeError, "Invalid prefix"),
    (ResolveError, "Resolve error"),
    (SignError, "Sign error"),
)


class CCIPEndpointError(Exception):
    """Wraps a decode, resolve or sign failure of a gateway request."""

    def __init__(self, cause: Exception) -> None:
        prefix = next((text for kind, text in _ERROR_PREFIXES if isinstance(cause, kind)), None)
        if prefix is None:
            raise TypeError(f"unexpected cause: {type(cause).__name__}")
        super().__init__(f"{prefix}: {cause}")
        self.cause = cause

    def to_response(self) -> GatewayResponse:
        return GatewayResponse.error(str(self))


@dataclass(frozen=True)
class ResolveCCIPPostPayload:
    """Body of a CCIP-read POST request."""

    data: str
    sender: str

    @classmethod
    def from_json(cls, raw: str | bytes) -> ResolveCCIPPostPayload:
        """Parse the JSON body; unknown fields are ignored. Raises ValueError."""
        body = json.loads(raw)
        if not isinstance(body, dict):
            raise ValueError("request body must be a JSON object")
        fields = {}
        for key in ("data", "sender"):
            value = body.get(key)
            if not isinstance(value, str):
                raise ValueError(f"missing or non-string field `{key}`")
            fields[key] = value
        return cls(**fields)

    def decode(self) -> UnresolvedQuery:
        """Extract the queried name and the resolver call from ``resolve(bytes,bytes)`` data."""
        if not self.data.startswith(_RESOLVE_SELECTOR):
            raise ResolverDecodeError("Invalid prefix")
        raw = _hex(self.data[len(_RESOLVE_SELECTOR):])
        if raw is None:
            raise ResolverDecodeError("Invalid hex")
        try:
            encoded_name, call = abi.decode(["bytes", "bytes"], raw)
        except abi.AbiError as exc:
            raise ResolverDecodeError("Invalid abi") from exc
        try:
            text = encoded_name.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ResolverDecodeError("Invalid utf8") from exc
        try:
            name = decode_name(text)
        except ValueError as exc:
            raise ResolverDecodeError("Invalid bytes") from exc
        logger.info("Decoded name: %s", name)
        try:
            function_call = decode_call(call)
        except ResolverFunctionCallDecodingError as exc:
            raise ResolverDecodeError("Resolver Function Call") from exc
        return UnresolvedQuery(name=name, data=function_call, calldata=self)


@dataclass(frozen=True)
class UnresolvedQuery:
    """A decoded request waiting to be answered from the database."""

    name: str
    data: ResolverFunctionCall
    calldata: ResolveCCIPPostPayload

    def _address(self, state: GlobalState, node: bytes, key: str) -> str:
        try:
            value = state.db.get_addresses(node, [key]).get(key)
        except NodeNotFoundError:
            raise ResolveError("Unknown error") from None
        if value is None:
            raise ResolveError("Unknown error")
        return value

    def _result(self, state: GlobalState) -> tuple[list[str], list[Any]]:
        call = self.data
        node = namehash(self.name)
        if isinstance(call, Text):
            logger.info("Resolution name=%s record=%s", self.name, call.record)
            if call.namehash != node:
                raise ResolveError("Hash mismatch")
            try:
                value = state.db.get_records(node, [call.record]).get(call.record)
            except NodeNotFoundError:
                value = None
            if value is None:
                raise ResolveError(f"Record not found: {call.record}")
            return ["string"], [value]
        if isinstance(call, AddrMultichain):
            logger.info("Resolution Address Multichain name=%s chain=%d", self.name, call.coin_type)
            value = self._address(state, node, str(call.coin_type))
            coin_type = CoinType.from_int(call.coin_type & _U32_MASK)
            try:
                encoded = encode_address(coin_type, value)
            except MulticoinEncoderError as exc:
                logger.debug("error while trying to encode %d: %s", call.coin_type, exc)
                raise ResolveError("Unparsable") from exc
            return ["bytes"], [encoded]
        if isinstance(call, Addr):
            logger.info("Resolution Address name=%s", self.name)
            address = _parse_address(self._address(state, node, str(_ETHEREUM_COIN)))
            if address is None:
                raise ResolveError("Unparsable")
            return ["address"], [address]
        logger.info("Unimplemented Method")
        return [], []

    def resolve(self, state: GlobalState) -> UnsignedPayload:
        """Look the query up and return the ABI-encoded result ready for signing."""
        types, values = self._result(state)
        expires = int(time.time()) + _TTL
        sender = _parse_address(self.calldata.sender)
        if sender is None:
            raise ResolveError("Sender unparsable")
        request = self.calldata.data
        while request.startswith("0x"):
            request = request[2:]
        request_payload = _hex(request)
        if request_payload is None:
            raise ResolveError("Payload unparsable")
        data = abi.encode(types, values)
        return UnsignedPayload(
            data=data,
            sender=sender,
            request_hash=keccak256(request_payload),
            result_hash=keccak256(data),
            expires=expires,
        )


def handle(payload: ResolveCCIPPostPayload, state: GlobalState) -> GatewayResponse:
    """Decode, resolve and sign a request; failures raise CCIPEndpointError."""
    try:
        signed = payload.decode().resolve(state).sign(state.wallet)
    except (ResolverDecodeError, ResolveError, SignError) as exc:
        raise CCIPEndpointError(exc) from exc
    return GatewayResponse.data(signed)