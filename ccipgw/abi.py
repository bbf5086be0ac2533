"""Minimal Ethereum ABI encoding for the flat tuples the gateway exchanges.

Supported types: ``uintN``, ``bytesN``, ``address``, ``bytes`` and ``string``.
Addresses are accepted as 20 raw bytes or hex text and decoded as ``0x``-prefixed lowercase hex.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from itertools import count
from typing import Any, Iterable, Sequence

_WORD = 32


class AbiError(ValueError):
    """Raised when a value cannot be ABI encoded or data cannot be decoded."""


@dataclass(frozen=True)
class _Type:
    kind: str
    size: int = 0

    @property
    def dynamic(self) -> bool:
        return self.kind in ("bytes", "string")


def _parse(name: str) -> _Type:
    if name in ("bytes", "string", "address"):
        return _Type(name)
    if name == "uint":
        return _Type("uint", 256)
    match = re.fullmatch(r"(uint|bytes)([1-9][0-9]*)", name)
    if match:
        kind, size = match.group(1), int(match.group(2))
        if kind == "uint" and size % 8 == 0 and 8 <= size <= 256:
            return _Type("uint", size)
        if kind == "bytes" and 1 <= size <= 32:
            return _Type("fixed", size)
    raise AbiError(f"unsupported type: {name}")


def _parse_all(types: Iterable[str], values: Iterable[Any] | None = None) -> list[_Type]:
    parsed = [_parse(name) for name in types]
    if values is not None and len(parsed) != len(values):
        raise AbiError(f"expected {len(parsed)} values, got {len(values)}")
    return parsed


def _raw_bytes(value: Any) -> bytes:
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise AbiError(f"expected bytes, got {type(value).__name__}")
    return bytes(value)


def _address(value: Any) -> bytes:
    if isinstance(value, str):
        text = value[2:] if value[:2].lower() == "0x" else value
        try:
            raw = bytes.fromhex(text)
        except ValueError as exc:
            raise AbiError(f"invalid address: {value}") from exc
    else:
        raw = _raw_bytes(value)
    if len(raw) != 20:
        raise AbiError("an address must be 20 bytes long")
    return raw


def _uint(value: Any, size: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise AbiError(f"expected an integer, got {type(value).__name__}")
    if value < 0 or value >> size:
        raise AbiError(f"{value} does not fit in uint{size}")
    return value


def _fixed(value: Any, size: int) -> bytes:
    raw = _raw_bytes(value)
    if len(raw) != size:
        raise AbiError(f"bytes{size} needs exactly {size} bytes, got {len(raw)}")
    return raw


def _dynamic_bytes(typ: _Type, value: Any) -> bytes:
    if typ.kind == "string":
        if not isinstance(value, str):
            raise AbiError(f"expected a string, got {type(value).__name__}")
        return value.encode("utf-8")
    return _raw_bytes(value)


def _pad_right(raw: bytes) -> bytes:
    return raw + bytes(-len(raw) % _WORD)


def _encode_static(typ: _Type, value: Any) -> bytes:
    if typ.kind == "uint":
        return _uint(value, typ.size).to_bytes(_WORD, "big")
    if typ.kind == "fixed":
        return _pad_right(_fixed(value, typ.size))
    return bytes(12) + _address(value)


def encode(types: Sequence[str], values: Sequence[Any]) -> bytes:
    """ABI-encode values as a tuple of the given types."""
    values = list(values)
    parsed = _parse_all(types, values)
    heads: list[bytes] = []
    tails: list[bytes] = []
    offset = _WORD * len(parsed)
    for typ, value in zip(parsed, values):
        if typ.dynamic:
            raw = _dynamic_bytes(typ, value)
            tail = len(raw).to_bytes(_WORD, "big") + _pad_right(raw)
            heads.append(offset.to_bytes(_WORD, "big"))
            tails.append(tail)
            offset += len(tail)
        else:
            heads.append(_encode_static(typ, value))
    return b"".join(heads + tails)


def _word(data: bytes, position: int) -> bytes:
    if position + _WORD > len(data):
        raise AbiError("data too short")
    return data[position : position + _WORD]


def _decode_one(typ: _Type, data: bytes, position: int) -> Any:
    word = _word(data, position)
    if typ.dynamic:
        offset = int.from_bytes(word, "big")
        length = int.from_bytes(_word(data, offset), "big")
        start = offset + _WORD
        if start + length > len(data):
            raise AbiError("data too short")
        raw = data[start : start + length]
        if typ.kind == "bytes":
            return raw
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise AbiError("string is not valid UTF-8") from exc
    if typ.kind == "uint":
        value = int.from_bytes(word, "big")
        if value >> typ.size:
            raise AbiError(f"value does not fit in uint{typ.size}")
        return value
    if typ.kind == "fixed":
        return word[: typ.size]
    return "0x" + word[12:].hex()


def decode(types: Sequence[str], data: bytes) -> list[Any]:
    """Decode ABI data holding a tuple of the given types."""
    raw = bytes(data)
    parsed = _parse_all(types)
    return [_decode_one(typ, raw, position) for typ, position in zip(parsed, count(0, _WORD))]


def _encode_packed_one(typ: _Type, value: Any) -> bytes:
    if typ.kind == "uint":
        return _uint(value, typ.size).to_bytes(typ.size // 8, "big")
    if typ.kind == "fixed":
        return _fixed(value, typ.size)
    if typ.kind == "address":
        return _address(value)
    return _dynamic_bytes(typ, value)


def encode_packed(types: Sequence[str], values: Sequence[Any]) -> bytes:
    """Encode values without padding, each at its natural width (as ``abi.encodePacked``)."""
    values = list(values)
    parsed = _parse_all(types, values)
    return b"".join(_encode_packed_one(typ, value) for typ, value in zip(parsed, values))