# ccipgw

An offchain gateway that answers ENS CCIP-Read (EIP-3668) lookups. A resolver
contract reverts with `OffchainLookup`, the client posts the call data to this
gateway, and the gateway looks the name up in its own SQLite store, ABI-encodes
the answer and signs it so the contract can verify where it came from.

Resolver calls that are answered from the store:

- `addr(bytes32)` – the Ethereum address (stored under coin type `"60"`)
- `addr(bytes32,uint256)` – addresses for other chains, encoded per coin type
- `text(bytes32,string)` – text records such as `avatar` or `url`

The calls `name`, `abi`, `contenthash`, `interfaceImplementer` and `pubkey`
are recognised but answered with an empty (signed) result.

Addresses for Bitcoin, Litecoin, Dogecoin, Ethereum, Ethereum Classic,
Rootstock, EVM chains (coin types with the high bit set), Solana, Hedera,
Stellar, Ripple, Cardano, Binance and Polkadot are turned into their binary
form before they are returned. Other coin types are reported as unparsable.

## Installing

```
pip install .
```

To run the tests as well:

```
pip install ".[test]"
pytest
```

## Running the gateway

The gateway reads its settings from the environment; a `.env` file found from
the working directory is loaded too:

- `PRIVATE_KEY` – the hex-encoded secp256k1 key (with or without `0x`) that
  signs every response; its address must be the signer the resolver contract
  trusts. The gateway stops with an error when it is missing.
- `PORT` – the port to listen on, `3000` when unset.
- `DATABASE_PATH` – the SQLite file holding the records, `ens_data.db` when
  unset. The table is created if it does not exist.

Then start it:

```
ccipgw
```

or, to also enable the `/update` endpoint:

```
ccipgw --selfservice
```

It listens on `0.0.0.0`, allows cross-origin requests, and serves:

- `GET /` – the banner `CCIP Gateway v0.0.1!`, handy as a health check.
- `POST /gateway` – the CCIP-Read endpoint. The body is JSON with `data`
  (the `0x9061b923…` call data of `resolve(bytes,bytes)`) and `sender`
  (the resolver address); it is parsed whatever the content type. A good
  answer is `{"data": "0x…"}` with status 200, holding
  `abi.encode(result, expires, signature)` with results valid for one hour;
  a failure is `{"message": "…"}` with status 400.
- `GET /view/{name}` – every record and address stored for a name, as
  `{"name": …, "records": {…}, "addresses": {…}}`, or 404 when nothing is
  stored.
- `POST /update` – only with `--selfservice`. The body holds `payload`, a JSON
  string with `name`, `records`, `addresses` and `time`, and `auth`, a
  65-byte hex signature (EIP-191 personal message) over that string. The
  signer must be the address already stored for the name under coin type
  `"60"`; otherwise the answer is 403. A name with nothing stored gives 404.
  On success the name's records and addresses are replaced and the answer is
  `ok`.

## What it does not do

There is no command or endpoint for adding a name that has nothing stored yet:
`/update` only changes names that already have an owner address. Seed new names
through the library, for example:

```python
from ccipgw.database import bootstrap
from ccipgw.hashing import namehash

db = bootstrap("ens_data.db")
db.upsert(
    namehash("alice.example.eth"),
    {"url": "https://example.com"},
    {"60": "0x0000000000000000000000000000000000000001"},
)
db.close()
```

## Using it as a library

The pieces the server is built from can be used directly:

```python
from ccipgw.dns import decode_name
from ccipgw.hashing import namehash
from ccipgw.multicoin.cointype import CoinType
from ccipgw.multicoin.encoding import encode_address

print(decode_name(b"\x03luc\x04myeth\x02id\x00"))   # luc.myeth.id
print(namehash("luc.myeth.id").hex())

script = encode_address(CoinType.from_int(0), "1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa")
print(script.hex())  # 76a91462e907b15cbf27d5425399ebf6f0fb50ebb88f1888ac
```

Other modules:

- `ccipgw.abi` – `encode`, `decode` and `encode_packed` for flat tuples of
  `uintN`, `bytesN`, `address`, `bytes` and `string`.
- `ccipgw.lookup` – `decode_call` turns resolver calldata into `Addr`, `Text`,
  `AddrMultichain` and the other call classes.
- `ccipgw.secp256k1` – `Wallet` (signing with deterministic nonces and low `s`),
  `Signature` and `recover_address`.
- `ccipgw.signing` – `UnsignedPayload.sign(wallet)` produces the signed
  response data.
- `ccipgw.gateway` – `ResolveCCIPPostPayload`, `handle` and `GatewayResponse`,
  the request pipeline without HTTP.
- `ccipgw.selfservice` – `update_name`, `view_name` and `verify_eoa_payload`.

To run the web application inside your own server, build it with
`ccipgw.server.create_app(state, selfservice)`, where `state` is a
`ccipgw.gateway.GlobalState(db, wallet)`, and hand it to any ASGI server.