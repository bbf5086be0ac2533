"""Decoding of DNS wire-format names as used by ENS wildcard resolution."""

from __future__ import annotations


def decode_name(data: bytes | str) -> str:
    """Turn a DNS-encoded name (length-prefixed labels ending in a zero byte) into dotted form.

    Raises ValueError when the encoding is truncated or a label is not valid UTF-8.
    """
    raw = data.encode("utf-8") if isinstance(data, str) else bytes(data)
    labels: list[str] = []
    position = 0
    while True:
        if position >= len(raw):
            raise ValueError("DNS name is missing its terminating zero byte")
        length = raw[position]
        if length == 0:
            break
        start = position + 1
        end = start + length
        if end > len(raw):
            raise ValueError("DNS label runs past the end of the data")
        labels.append(raw[start:end].decode("utf-8"))
        position = end
    return ".".join(labels)