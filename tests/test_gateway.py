import json
from unittest.mock import patch

import pytest

from ccipgw import abi
from ccipgw.database import Database
from ccipgw.gateway import (
    CCIPEndpointError,
    GatewayResponse,
    GlobalState,
    ResolveCCIPPostPayload,
    ResolveError,
    ResolverDecodeError,
    handle,
)
from ccipgw.hashing import keccak256, namehash
from ccipgw.lookup import Abi, Addr, Text
from ccipgw.secp256k1 import Signature, Wallet, recover_address

NAME = "luc.myeth.id"
SENDER = "0x" + "11" * 20
AVATAR = "https://example.com/avatar.png"


def dns_encode(name):
    return b"".join(bytes([len(label)]) + label.encode() for label in name.split(".")) + b"\x00"


def request_for(call, name=NAME, sender=SENDER):
    body = abi.encode(["bytes", "bytes"], [dns_encode(name), call])
    return ResolveCCIPPostPayload(data="0x9061b923" + body.hex(), sender=sender)


def text_call(record, node=None):
    node = namehash(NAME) if node is None else node
    return bytes.fromhex("59d1d43c") + abi.encode(["bytes32", "string"], [node, record])


def addr_call():
    return bytes.fromhex("3b3b57de") + abi.encode(["bytes32"], [namehash(NAME)])


def multichain_call(coin):
    return bytes.fromhex("f1cb7e06") + abi.encode(["bytes32", "uint256"], [namehash(NAME), coin])


@pytest.fixture
def state():
    db = Database()
    yield GlobalState(db=db, wallet=Wallet(0xC0FFEE))
    db.close()


def test_decode_text_call():
    query = request_for(text_call("avatar")).decode()
    assert query.name == NAME
    assert query.data == Text(namehash(NAME), "avatar")


def test_decode_addr_call():
    assert request_for(addr_call()).decode().data == Addr(namehash(NAME))


@pytest.mark.parametrize(
    "data, message",
    [
        ("0xdeadbeef", "Invalid prefix"),
        ("0x9061b923zz", "Invalid hex"),
        ("0x9061b92300", "Invalid abi"),
    ],
)
def test_decode_errors(data, message):
    with pytest.raises(ResolverDecodeError) as info:
        ResolveCCIPPostPayload(data=data, sender=SENDER).decode()
    assert str(info.value) == message


def test_decode_unknown_selector():
    with pytest.raises(ResolverDecodeError) as info:
        request_for(bytes.fromhex("00000000")).decode()
    assert str(info.value) == "Resolver Function Call"


def test_from_json_ignores_extra_fields():
    raw = json.dumps({"data": "0x9061b923", "sender": SENDER, "extra": 1}).encode()
    assert ResolveCCIPPostPayload.from_json(raw) == ResolveCCIPPostPayload("0x9061b923", SENDER)


def test_from_json_requires_fields():
    with pytest.raises(ValueError):
        ResolveCCIPPostPayload.from_json('{"data": "0x"}')


def test_resolve_text(state):
    state.db.upsert(namehash(NAME), {"avatar": AVATAR}, {})
    payload = request_for(text_call("avatar"))
    with patch("time.time", return_value=1_700_000_000):
        unsigned = payload.decode().resolve(state)
    assert abi.decode(["string"], unsigned.data) == [AVATAR]
    assert unsigned.result_hash == keccak256(unsigned.data)
    assert unsigned.request_hash == keccak256(bytes.fromhex(payload.data[2:]))
    assert unsigned.expires - 1_700_000_000 == 3600
    assert unsigned.sender == bytes.fromhex(SENDER[2:])


def test_resolve_text_hash_mismatch(state):
    with pytest.raises(ResolveError) as info:
        request_for(text_call("avatar", node=bytes(32))).decode().resolve(state)
    assert str(info.value) == "Hash mismatch"


def test_resolve_missing_record(state):
    state.db.upsert(namehash(NAME), {"header": AVATAR}, {})
    with pytest.raises(ResolveError) as info:
        request_for(text_call("avatar")).decode().resolve(state)
    assert str(info.value) == "Record not found: avatar"


def test_resolve_addr(state):
    owner = "0x" + "22" * 20
    state.db.upsert(namehash(NAME), {}, {"60": owner})
    unsigned = request_for(addr_call()).decode().resolve(state)
    assert abi.decode(["address"], unsigned.data) == [owner]


def test_resolve_addr_unparsable(state):
    state.db.upsert(namehash(NAME), {}, {"60": "nonsense"})
    with pytest.raises(ResolveError) as info:
        request_for(addr_call()).decode().resolve(state)
    assert str(info.value) == "Unparsable"


def test_resolve_addr_unknown_node(state):
    with pytest.raises(ResolveError) as info:
        request_for(addr_call()).decode().resolve(state)
    assert str(info.value) == "Unknown error"


def test_resolve_multichain_bitcoin(state):
    state.db.upsert(namehash(NAME), {}, {"0": "1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa"})
    unsigned = request_for(multichain_call(0)).decode().resolve(state)
    assert abi.decode(["bytes"], unsigned.data) == [
        bytes.fromhex("76a91462e907b15cbf27d5425399ebf6f0fb50ebb88f1888ac")
    ]


def test_resolve_multichain_evm(state):
    owner = "0x" + "22" * 20
    state.db.upsert(namehash(NAME), {}, {"2147483649": owner})
    unsigned = request_for(multichain_call(2147483649)).decode().resolve(state)
    assert abi.decode(["bytes"], unsigned.data) == [bytes.fromhex(owner[2:])]


def test_resolve_multichain_unparsable(state):
    state.db.upsert(namehash(NAME), {}, {"0": "not-an-address"})
    with pytest.raises(ResolveError) as info:
        request_for(multichain_call(0)).decode().resolve(state)
    assert str(info.value) == "Unparsable"


def test_resolve_unimplemented_method_gives_empty_result(state):
    query = request_for(bytes.fromhex("2203ab56")).decode()
    assert query.data == Abi()
    assert query.resolve(state).data == b""


def test_resolve_bad_sender(state):
    state.db.upsert(namehash(NAME), {"avatar": AVATAR}, {})
    with pytest.raises(ResolveError) as info:
        request_for(text_call("avatar"), sender="nobody").decode().resolve(state)
    assert str(info.value) == "Sender unparsable"


def test_handle_signs_result(state):
    state.db.upsert(namehash(NAME), {"avatar": AVATAR}, {})
    payload = request_for(text_call("avatar"))
    response = handle(payload, state)
    assert response.status_code == 200
    body = json.loads(response.to_json())
    data, expires, signature = abi.decode(
        ["bytes", "uint256", "bytes"], bytes.fromhex(body["data"][2:])
    )
    assert abi.decode(["string"], data) == [AVATAR]
    packed = abi.encode_packed(
        ["uint16", "address", "uint64", "bytes32", "bytes32"],
        [0x1900, SENDER, expires, keccak256(bytes.fromhex(payload.data[2:])), keccak256(data)],
    )
    signer = recover_address(Signature.from_hex(signature.hex()), keccak256(packed))
    assert signer == state.wallet.address


def test_handle_wraps_decode_error(state):
    with pytest.raises(CCIPEndpointError) as info:
        handle(ResolveCCIPPostPayload(data="0x", sender=SENDER), state)
    assert str(info.value) == "Invalid prefix: Invalid prefix"
    response = info.value.to_response()
    assert response.status_code == 400
    assert json.loads(response.to_json()) == {"message": "Invalid prefix: Invalid prefix"}


def test_handle_wraps_resolve_error(state):
    with pytest.raises(CCIPEndpointError) as info:
        handle(request_for(text_call("avatar")), state)
    assert str(info.value) == "Resolve error: Record not found: avatar"


def test_gateway_response_data():
    response = GatewayResponse.data("0x")
    assert response.status_code == 200
    assert json.loads(response.to_json()) == {"data": "0x"}