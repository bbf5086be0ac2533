import pytest

from ccipgw.hashing import keccak256, sha256
from ccipgw.secp256k1 import (
    CURVE_ORDER,
    Signature,
    Wallet,
    hash_message,
    recover_address,
)


@pytest.fixture
def wallet():
    return Wallet.from_hex(sha256("secret").hex())


def test_address_of_scalar_one():
    unit_wallet = Wallet.from_hex("0x" + "00" * 31 + "01")
    assert unit_wallet.address == "0x7e5f4552091a69125d5dfcb7b8c2659029395bdf"


def test_sign_and_recover(wallet):
    digest = keccak256(b"payload")
    signature = wallet.sign_hash(digest)
    assert recover_address(signature, digest) == wallet.address


def test_signature_is_low_s_with_ethereum_v(wallet):
    signature = wallet.sign_hash(keccak256(b"payload"))
    assert 1 <= signature.s <= CURVE_ORDER // 2
    assert signature.v in (27, 28)


def test_signing_is_deterministic(wallet):
    digest = keccak256(b"payload")
    first = wallet.sign_hash(digest)
    second = wallet.sign_hash(digest)
    assert first.to_bytes() == second.to_bytes()
    assert recover_address(second, digest) == wallet.address


def test_different_digests_give_different_signatures(wallet):
    assert wallet.sign_hash(keccak256(b"a")) != wallet.sign_hash(keccak256(b"b"))


def test_wrong_digest_recovers_other_address(wallet):
    signature = wallet.sign_hash(keccak256(b"payload"))
    assert recover_address(signature, keccak256(b"other")) != wallet.address


def test_bytes_round_trip(wallet):
    signature = wallet.sign_hash(keccak256(b"payload"))
    raw = signature.to_bytes()
    assert len(raw) == 65
    assert raw[64] == signature.v
    assert Signature.from_hex(raw.hex()) == signature
    assert Signature.from_hex("0x" + raw.hex()) == signature


def test_hash_message_prefix():
    assert hash_message("hello world") == keccak256(b"\x19Ethereum Signed Message:\n11hello world")
    assert hash_message(b"hello world") == hash_message("hello world")


def test_recover_signed_message(wallet):
    message = '{"name":"luc.example"}'
    signature = wallet.sign_hash(hash_message(message))
    assert signature.recover(message) == wallet.address


@pytest.mark.parametrize("v_offset", [0, 27])
def test_recovery_accepts_both_v_conventions(wallet, v_offset):
    digest = keccak256(b"payload")
    signature = wallet.sign_hash(digest)
    adjusted = Signature(signature.r, signature.s, signature.v - 27 + v_offset)
    assert recover_address(adjusted, digest) == wallet.address


def test_invalid_v_rejected(wallet):
    signature = wallet.sign_hash(keccak256(b"payload"))
    with pytest.raises(ValueError):
        recover_address(Signature(signature.r, signature.s, 5), keccak256(b"payload"))


@pytest.mark.parametrize(
    "key",
    ["00" * 32, "0x" + "00" * 31, "zz" * 32, f"{CURVE_ORDER:064x}"],
)
def test_invalid_keys(key):
    with pytest.raises(ValueError):
        Wallet.from_hex(key)


def test_signature_length_checked():
    with pytest.raises(ValueError):
        Signature.from_hex("0x" + "11" * 64)


def test_digest_length_checked(wallet):
    with pytest.raises(ValueError):
        wallet.sign_hash(b"short")


def test_wallet_repr_hides_key():
    key_hex = sha256("secret").hex()
    assert key_hex not in repr(Wallet.from_hex(key_hex))
    assert str(int(key_hex, 16)) not in repr(Wallet.from_hex(key_hex))