"""Self-service endpoints: owners updating their records, and viewing what is stored."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

from .gateway import GlobalState
from .hashing import namehash
from .secp256k1 import Signature

logger = logging.getLogger(__name__)

_ADDRESS = re.compile(r"(?:0x)?([0-9a-fA-F]{40})")
_OWNER_COIN = "60"


class AuthError(PermissionError):
    """Raised when an update is not authorised by the name's owner."""


def _normalise_address(owner: str | bytes) -> str:
    if isinstance(owner, (bytes, bytearray)):
        if len(owner) != 20:
            raise ValueError("an address must be 20 bytes long")
        return "0x" + bytes(owner).hex()
    match = _ADDRESS.fullmatch(owner)
    if match is None:
        raise ValueError(f"invalid address: {owner!r}")
    return "0x" + match.group(1).lower()


def _string_map(value: Any, field: str) -> dict[str, str]:
    if not isinstance(value, dict) or not all(
        isinstance(key, str) and isinstance(item, str) for key, item in value.items()
    ):
        raise ValueError(f"`{field}` must map strings to strings")
    return dict(value)


@dataclass(frozen=True)
class UpdateNamePayload:
    """An update request: the JSON text of the update and its authorisation."""

    payload: str
    auth: str


@dataclass(frozen=True)
class SignableUpdateNamePayload:
    """The signed content of an update."""

    name: str
    records: dict[str, str]
    addresses: dict[str, str]
    time: int

    @classmethod
    def _from_json(cls, raw: str) -> SignableUpdateNamePayload:
        body = json.loads(raw)
        if not isinstance(body, dict):
            raise ValueError("update payload must be a JSON object")
        name, moment = body.get("name"), body.get("time")
        if not isinstance(name, str):
            raise ValueError("`name` must be a string")
        if isinstance(moment, bool) or not isinstance(moment, int) or moment < 0:
            raise ValueError("`time` must be a non-negative integer")
        return cls(
            name=name,
            records=_string_map(body.get("records"), "records"),
            addresses=_string_map(body.get("addresses"), "addresses"),
            time=moment,
        )


@dataclass(frozen=True)
class ViewPayload:
    """Everything stored for a name."""

    name: str
    records: dict[str, Optional[str]]
    addresses: dict[str, Optional[str]]


def verify_eoa_payload(auth: str, message: str, owner: str | bytes) -> bool:
    """Whether ``auth`` is the owner's EIP-191 signature of ``message``."""
    recovered = Signature.from_hex(auth).recover(message)
    expected = _normalise_address(owner)
    logger.info("Recovered payload: %s", recovered)
    logger.info("Owner: %s", expected)
    return recovered == expected


def update_name(state: GlobalState, payload: UpdateNamePayload, eoa_auth: bool = True) -> None:
    """Replace a name's records and addresses, checking the owner's signature if asked."""
    logger.info("Update name: %r", payload)
    update = SignableUpdateNamePayload._from_json(payload.payload)
    node = namehash(update.name)
    owner_text = state.db.get_addresses(node, [_OWNER_COIN])[_OWNER_COIN]
    if owner_text is None:
        raise AuthError("name has no owner address")
    owner = _normalise_address(owner_text)
    if eoa_auth and not verify_eoa_payload(payload.auth, payload.payload, owner):
        raise AuthError("auth error")
    state.db.upsert(node, dict(update.records), dict(update.addresses))


def view_name(state: GlobalState, name: str) -> ViewPayload:
    """Return all records and addresses stored for a name."""
    records, addresses = state.db.get_all(namehash(name))
    return ViewPayload(name=name, records=records, addresses=addresses)