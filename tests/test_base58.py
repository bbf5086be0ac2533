import pytest

from ccipgw.hashing import sha256
from ccipgw.multicoin.base58 import BITCOIN_ALPHABET, RIPPLE_ALPHABET, Base58Error, b58decode

GENESIS = "1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa"


def test_decodes_bitcoin_address():
    decoded = b58decode(GENESIS)
    assert len(decoded) == 25
    assert decoded[0] == 0
    assert decoded[1:21] == bytes.fromhex("62e907b15cbf27d5425399ebf6f0fb50ebb88f18")


def test_bitcoin_address_checksum_holds():
    decoded = b58decode(GENESIS)
    assert sha256(sha256(decoded[:-4]))[:4] == decoded[-4:]


def test_leading_zero_digits_become_zero_bytes():
    assert b58decode("111") == bytes(3)


def test_single_digit():
    assert b58decode("2") == b"\x01"


def test_empty_text():
    assert b58decode("") == b""


def test_ripple_alphabet_matches_bitcoin_digits():
    translated = GENESIS.translate(str.maketrans(BITCOIN_ALPHABET, RIPPLE_ALPHABET))
    assert b58decode(translated, RIPPLE_ALPHABET) == b58decode(GENESIS)


def test_ripple_zero_digit():
    assert b58decode("rrr", RIPPLE_ALPHABET) == bytes(3)


@pytest.mark.parametrize("text", ["0abc", "Oops", "Il", "abc!"])
def test_invalid_characters(text):
    with pytest.raises(Base58Error):
        b58decode(text)


def test_invalid_alphabet():
    with pytest.raises(ValueError):
        b58decode("abc", "abc")