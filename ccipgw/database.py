"""Storage of ENS records and addresses per node, backed by SQLite."""

from __future__ import annotations

import json
import logging
import os
import sqlite3
import threading
from pathlib import Path
from typing import Iterable, Mapping, Optional

logger = logging.getLogger(__name__)

Values = dict[str, Optional[str]]

_SCHEMA = (
    "CREATE TABLE IF NOT EXISTS ens_data ("
    "node BLOB PRIMARY KEY, records TEXT NOT NULL, addresses TEXT NOT NULL)"
)
_UPSERT = (
    "INSERT INTO ens_data (node, records, addresses) VALUES (?, ?, ?) "
    "ON CONFLICT (node) DO UPDATE SET records = excluded.records, "
    "addresses = excluded.addresses"
)


class NodeNotFoundError(LookupError):
    """Raised when no data is stored for a node."""

    def __init__(self, node: bytes) -> None:
        super().__init__(f"no data stored for node 0x{node.hex()}")
        self.node = node


class Database:
    """Records and addresses keyed by namehash; each is a map of key to optional value."""

    def __init__(self, path: str | Path = ":memory:") -> None:
        self._connection = sqlite3.connect(str(path), check_same_thread=False)
        self._lock = threading.Lock()
        with self._lock, self._connection:
            self._connection.execute(_SCHEMA)

    def __enter__(self) -> Database:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __len__(self) -> int:
        with self._lock:
            (total,) = self._connection.execute("SELECT COUNT(*) FROM ens_data").fetchone()
        return total

    def upsert(
        self,
        node: bytes,
        records: Mapping[str, Optional[str]],
        addresses: Mapping[str, Optional[str]],
    ) -> None:
        """Store the records and addresses of a node, replacing what was there."""
        with self._lock, self._connection:
            self._connection.execute(
                _UPSERT, (bytes(node), json.dumps(dict(records)), json.dumps(dict(addresses)))
            )

    def _row(self, node: bytes) -> tuple[Values, Values]:
        key = bytes(node)
        with self._lock:
            row = self._connection.execute(
                "SELECT records, addresses FROM ens_data WHERE node = ?", (key,)
            ).fetchone()
        if row is None:
            raise NodeNotFoundError(key)
        records, addresses = row
        return json.loads(records), json.loads(addresses)

    def get_records(self, node: bytes, keys: Iterable[str]) -> Values:
        """Return the requested text records of a node; absent ones map to None."""
        records, _ = self._row(node)
        return {str(key): records.get(str(key)) for key in keys}

    def get_addresses(self, node: bytes, keys: Iterable[str]) -> Values:
        """Return the requested addresses (keyed by coin type) of a node; absent ones map to None."""
        _, addresses = self._row(node)
        logger.info("node = %s", bytes(node).hex())
        return {str(key): addresses.get(str(key)) for key in keys}

    def get_all(self, node: bytes) -> tuple[Values, Values]:
        """Return every record and every address stored for a node."""
        return self._row(node)

    def close(self) -> None:
        """Close the underlying connection."""
        self._connection.close()


def bootstrap(path: str | Path | None = None) -> Database:
    """Open the database, creating its table if needed; DATABASE_PATH is the default location."""
    logger.info("Bootstrapping the database...")
    location = path if path is not None else os.environ.get("DATABASE_PATH", "ens_data.db")
    database = Database(location)
    logger.info("Total rows: %d", len(database))
    return database