"""
Durable key-value storage on top of SQLite.

``StableMemory`` partitions one database into numbered segments and hands
out at most one structure per segment:

* ``StableMap`` — an ordered map from unsigned 64-bit keys to records,
  stored in ``stable_entries``;
* ``StableCell`` — a single unsigned 64-bit value, stored in
  ``stable_cells``.

Keys and cell values are written as 8 byte big-endian BLOBs.  SQLite
compares BLOBs with ``memcmp``, so ``ORDER BY key`` walks keys in numeric
order across the whole unsigned range.

Every mutating call runs inside ``Database.transaction()``; when the
caller already holds a transaction the call simply joins it.  SQLite
failures are re-raised as ``StorageError``.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Dict, Generic, Iterator, List, Optional, Tuple, TypeVar

from pydantic import BaseModel

from ..core.constants import U64_MAX
from ..core.db import Database
from ..core.exceptions import StorageCorruptionError, StorageError
from .codec import RecordCodec

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

# Rows fetched per round trip while iterating a map.
SCAN_BATCH_SIZE = 256


def encode_u64(value: int) -> bytes:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"Expected an integer key, got {type(value).__name__}")
    if value < 0 or value > U64_MAX:
        raise ValueError(f"Key {value} is outside the unsigned 64-bit range")
    return value.to_bytes(8, "big")


def decode_u64(raw: bytes) -> int:
    if len(raw) != 8:
        raise StorageCorruptionError(f"Stored key has {len(raw)} bytes, expected 8")
    return int.from_bytes(raw, "big")


class StableMemory:
    """Allocator of segments within one database."""

    def __init__(self, database: Database) -> None:
        self.database = database
        self._claimed: Dict[int, str] = {}

    def _claim(self, segment: int, kind: str) -> None:
        if segment < 0:
            raise ValueError("Segment ids must be non-negative")
        if segment in self._claimed:
            raise ValueError(f"Segment {segment} is already used by a {self._claimed[segment]}")
        self._claimed[segment] = kind

    def map(self, segment: int, codec: RecordCodec[M]) -> "StableMap[M]":
        self._claim(segment, "map")
        return StableMap(self.database, segment, codec)

    def cell(self, segment: int, initial: int = 0) -> "StableCell":
        self._claim(segment, "cell")
        return StableCell(self.database, segment, initial)


class StableMap(Generic[M]):
    """Ordered, persistent map of ``int`` keys to records of one model type."""

    def __init__(self, database: Database, segment: int, codec: RecordCodec[M]) -> None:
        self.database = database
        self.segment = segment
        self.codec = codec

    def _fetch(self, raw_key: bytes) -> Optional[M]:
        try:
            row = self.database.execute(
                "SELECT value FROM stable_entries WHERE segment = ? AND key = ?",
                (self.segment, raw_key),
            ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to read segment {self.segment}: {exc}") from exc
        if row is None:
            return None
        return self.codec.decode(row["value"])

    def get(self, key: int) -> Optional[M]:
        return self._fetch(encode_u64(key))

    def insert(self, key: int, record: M) -> Optional[M]:
        """Store ``record`` under ``key`` and return the value it replaced."""
        raw_key = encode_u64(key)
        # Encode before touching the database so an oversized record
        # leaves the segment unchanged.
        raw_value = self.codec.encode(record)
        with self.database.transaction():
            previous = self._fetch(raw_key)
            try:
                self.database.execute(
                    "INSERT OR REPLACE INTO stable_entries (segment, key, value) VALUES (?, ?, ?)",
                    (self.segment, raw_key, raw_value),
                )
            except sqlite3.Error as exc:
                raise StorageError(f"Failed to write key {key} in segment {self.segment}: {exc}") from exc
        return previous

    def remove(self, key: int) -> Optional[M]:
        """Delete ``key`` and return the removed value, if any."""
        raw_key = encode_u64(key)
        with self.database.transaction():
            previous = self._fetch(raw_key)
            if previous is None:
                return None
            try:
                self.database.execute(
                    "DELETE FROM stable_entries WHERE segment = ? AND key = ?",
                    (self.segment, raw_key),
                )
            except sqlite3.Error as exc:
                raise StorageError(f"Failed to remove key {key} from segment {self.segment}: {exc}") from exc
        return previous

    def iterate(self) -> Iterator[Tuple[int, M]]:
        """Yield ``(key, record)`` pairs in ascending key order.

        Rows are read in batches, each batch resuming after the last key
        seen, so a scan never holds a cursor open across yields.  Every
        call starts a new scan from the smallest key.
        """
        last_key: Optional[bytes] = None
        while True:
            if last_key is None:
                sql = "SELECT key, value FROM stable_entries WHERE segment = ? ORDER BY key LIMIT ?"
                params: tuple = (self.segment, SCAN_BATCH_SIZE)
            else:
                sql = (
                    "SELECT key, value FROM stable_entries WHERE segment = ? AND key > ? "
                    "ORDER BY key LIMIT ?"
                )
                params = (self.segment, last_key, SCAN_BATCH_SIZE)
            try:
                rows = self.database.execute(sql, params).fetchall()
            except sqlite3.Error as exc:
                raise StorageError(f"Failed to scan segment {self.segment}: {exc}") from exc
            for row in rows:
                yield decode_u64(row["key"]), self.codec.decode(row["value"])
            if len(rows) < SCAN_BATCH_SIZE:
                return
            last_key = rows[-1]["key"]

    def values(self) -> List[M]:
        return [record for _, record in self.iterate()]

    def __contains__(self, key: int) -> bool:
        raw_key = encode_u64(key)
        try:
            row = self.database.execute(
                "SELECT 1 FROM stable_entries WHERE segment = ? AND key = ?",
                (self.segment, raw_key),
            ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to read segment {self.segment}: {exc}") from exc
        return row is not None

    def __len__(self) -> int:
        try:
            row = self.database.execute(
                "SELECT COUNT(*) AS n FROM stable_entries WHERE segment = ?", (self.segment,)
            ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to count segment {self.segment}: {exc}") from exc
        return int(row["n"])


class StableCell:
    """A single persistent unsigned 64-bit value."""

    def __init__(self, database: Database, segment: int, initial: int = 0) -> None:
        self.database = database
        self.segment = segment
        self.initial = initial
        encode_u64(initial)

    def get(self) -> int:
        try:
            row = self.database.execute(
                "SELECT value FROM stable_cells WHERE segment = ?", (self.segment,)
            ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to read cell {self.segment}: {exc}") from exc
        if row is None:
            return self.initial
        return decode_u64(row["value"])

    def set(self, value: int) -> int:
        """Persist ``value`` and return the previous one."""
        raw_value = encode_u64(value)
        with self.database.transaction():
            previous = self.get()
            try:
                self.database.execute(
                    "INSERT OR REPLACE INTO stable_cells (segment, value) VALUES (?, ?)",
                    (self.segment, raw_value),
                )
            except sqlite3.Error as exc:
                raise StorageError(f"Failed to write cell {self.segment}: {exc}") from exc
        logger.debug("Cell %s set from %s to %s", self.segment, previous, value)
        return previous
