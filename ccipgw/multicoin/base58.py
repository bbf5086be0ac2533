"""Base58 decoding with the Bitcoin and Ripple alphabets."""

from __future__ import annotations

BITCOIN_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
RIPPLE_ALPHABET = "rpshnaf39wBUDNEGHJKLM4PQRST7VWXYZ2bcdeCg65jkm8oFqi1tuvAxyz"


class Base58Error(ValueError):
    """Raised when text is not valid base58 in the chosen alphabet."""


def b58decode(data: str, alphabet: str = BITCOIN_ALPHABET) -> bytes:
    """Decode base58 text; each leading zero digit becomes a zero byte."""
    if len(alphabet) != 58 or len(set(alphabet)) != 58:
        raise ValueError("a base58 alphabet needs 58 distinct characters")
    digits = {char: index for index, char in enumerate(alphabet)}
    number = 0
    for char in data:
        try:
            number = number * 58 + digits[char]
        except KeyError:
            raise Base58Error(f"invalid base58 character {char!r}") from None
    leading = len(data) - len(data.lstrip(alphabet[0]))
    body = number.to_bytes((number.bit_length() + 7) // 8, "big")
    return bytes(leading) + body