"""
Durable counter and keyed record store built on partitions.

``IdCounter`` mints strictly increasing unsigned 64-bit identifiers and
``RecordStore`` maps such identifiers to encoded records.  Both persist
through the partition they were given, so reopening the same database
file resumes the sequences and the maps exactly where they were.

Every call is one SQLite transaction.  Read-modify-write calls open it
with ``BEGIN IMMEDIATE`` so the write lock is held from the first read;
two processes sharing the file cannot interleave inside one of them.
Any ``sqlite3.Error``, on reads as well as writes, surfaces as
``OperationFailed``.
"""

import logging
import sqlite3
import struct
from contextlib import contextmanager
from typing import Generic, Iterator, Optional, TypeVar

from .codec import U64_MAX, RecordCodec
from .db import CELL, MAP, Partition
from .errors import OperationFailed

logger = logging.getLogger(__name__)

_U64 = struct.Struct(">Q")

R = TypeVar("R")


def encode_u64(value: int) -> bytes:
    return _U64.pack(value)


def decode_u64(data: bytes) -> int:
    return _U64.unpack(data)[0]


@contextmanager
def _storage_call(partition: Partition, action: str, write: bool = False) -> Iterator[sqlite3.Cursor]:
    """Cursor for one storage call; SQLite errors become ``OperationFailed``."""
    try:
        with partition.cursor() as cursor:
            if write:
                cursor.execute("BEGIN IMMEDIATE")
            yield cursor
    except sqlite3.Error as e:
        logger.error("Storage call failed in partition %s (%s): %s", partition.index, action, e)
        raise OperationFailed(f"Failed to {action}") from e


class IdCounter:
    """Persisted u64 that only ever increases."""

    def __init__(self, partition: Partition, initial: int = 0) -> None:
        if partition.kind != CELL:
            raise ValueError(f"IdCounter needs a cell partition, got {partition!r}")
        self.partition = partition
        with _storage_call(partition, "initialise counter", write=True) as cursor:
            cursor.execute(
                "INSERT OR IGNORE INTO cells (partition_id, value) VALUES (?, ?)",
                (partition.index, encode_u64(initial)),
            )

    def _read(self, cursor: sqlite3.Cursor) -> int:
        row = cursor.execute(
            "SELECT value FROM cells WHERE partition_id = ?", (self.partition.index,)
        ).fetchone()
        return decode_u64(row["value"])

    def get(self) -> int:
        """Return the last issued value (0 before the first ``next``)."""
        with _storage_call(self.partition, "read counter") as cursor:
            return self._read(cursor)

    def next(self) -> int:
        """Persist and return the next identifier.

        Raises
        ------
        OperationFailed
            If the counter is exhausted or the write does not complete.
        """
        with _storage_call(self.partition, "generate ID", write=True) as cursor:
            current = self._read(cursor)
            if current >= U64_MAX:
                raise OperationFailed(
                    f"Counter in partition {self.partition.index} is exhausted"
                )
            cursor.execute(
                "UPDATE cells SET value = ? WHERE partition_id = ?",
                (encode_u64(current + 1), self.partition.index),
            )
        return current + 1


class RecordStore(Generic[R]):
    """Durable ordered map from u64 keys to records.

    All operations are single-key.  There is no "already exists"
    signal: ``insert`` replaces whatever was stored under the key.
    """

    def __init__(self, partition: Partition, codec: RecordCodec) -> None:
        if partition.kind != MAP:
            raise ValueError(f"RecordStore needs a map partition, got {partition!r}")
        self.partition = partition
        self.codec = codec

    def _fetch(self, cursor: sqlite3.Cursor, key: int) -> Optional[bytes]:
        row = cursor.execute(
            "SELECT value FROM entries WHERE partition_id = ? AND key = ?",
            (self.partition.index, encode_u64(key)),
        ).fetchone()
        return row["value"] if row else None

    def get(self, key: int) -> Optional[R]:
        with _storage_call(self.partition, f"read record {key}") as cursor:
            data = self._fetch(cursor, key)
        return self.codec.decode(data) if data is not None else None

    def insert(self, key: int, record: R) -> Optional[R]:
        """Store ``record`` under ``key`` and return the record it replaced."""
        data = self.codec.encode(record)
        with _storage_call(self.partition, f"store record {key}", write=True) as cursor:
            previous = self._fetch(cursor, key)
            cursor.execute(
                "INSERT OR REPLACE INTO entries (partition_id, key, value) VALUES (?, ?, ?)",
                (self.partition.index, encode_u64(key), data),
            )
        return self.codec.decode(previous) if previous is not None else None

    def remove(self, key: int) -> Optional[R]:
        """Delete ``key`` and return the record that was stored there."""
        with _storage_call(self.partition, f"remove record {key}", write=True) as cursor:
            previous = self._fetch(cursor, key)
            if previous is not None:
                cursor.execute(
                    "DELETE FROM entries WHERE partition_id = ? AND key = ?",
                    (self.partition.index, encode_u64(key)),
                )
        return self.codec.decode(previous) if previous is not None else None

    def __contains__(self, key: int) -> bool:
        with _storage_call(self.partition, f"look up record {key}") as cursor:
            return self._fetch(cursor, key) is not None

    def __len__(self) -> int:
        with _storage_call(self.partition, "count records") as cursor:
            row = cursor.execute(
                "SELECT COUNT(*) AS count FROM entries WHERE partition_id = ?",
                (self.partition.index,),
            ).fetchone()
        return row["count"]
