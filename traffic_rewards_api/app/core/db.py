"""
SQLite storage region and partition bookkeeping.

A single SQLite file is the durable region for the whole service.  The
``MemoryManager`` divides it into independently addressable partitions
identified by a small integer index; each counter and each record map
owns exactly one partition.  Partition contents live in two shared
tables keyed by partition index (``cells`` for scalar counters and
``entries`` for ordered maps), so stores never collide even though they
share one file.

Like the rest of the application, every operation opens its own
connection through ``get_cursor`` and commits or rolls back as a unit.
The migration mechanism stores applied versions in the ``migrations``
table and executes new ones in order.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator

from .config import settings

logger = logging.getLogger(__name__)

# Partition indices fit in one byte; 255 marks an unallocated slot.
MAX_PARTITIONS = 255

CELL = "cell"
MAP = "map"

MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: partition registry and partition payload tables
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS partitions (
            id INTEGER PRIMARY KEY,
            kind TEXT NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        -- One scalar per partition.  Values are 8-byte big-endian
        -- unsigned integers because SQLite integers are signed.
        CREATE TABLE IF NOT EXISTS cells (
            partition_id INTEGER PRIMARY KEY,
            value BLOB NOT NULL,
            FOREIGN KEY(partition_id) REFERENCES partitions(id)
        );

        -- Ordered maps.  Keys are 8-byte big-endian blobs so that
        -- SQLite's memcmp ordering matches unsigned numeric ordering.
        CREATE TABLE IF NOT EXISTS entries (
            partition_id INTEGER NOT NULL,
            key BLOB NOT NULL,
            value BLOB NOT NULL,
            PRIMARY KEY (partition_id, key),
            FOREIGN KEY(partition_id) REFERENCES partitions(id)
        ) WITHOUT ROWID;
        """,
    ),
]


def get_database_path() -> str:
    """Compute the path to the SQLite database file from settings.

    Absolute paths are used as is; relative ones are resolved against
    the project root.
    """
    db_url = settings.database_url
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / db_url).resolve())


def get_connection(db_path: str) -> sqlite3.Connection:
    """Open a connection to ``db_path`` with name-addressable rows."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_cursor(db_path: str) -> Iterator[sqlite3.Cursor]:
    """Yield a cursor; commit on success, roll back on error, always close."""
    conn = get_connection(db_path)
    try:
        yield conn.cursor()
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db(db_path: str) -> None:
    """Create the database file if needed and apply pending migrations."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    with get_cursor(db_path) as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        row = cursor.execute("SELECT MAX(version) AS version FROM migrations").fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                cursor.executescript(sql)
                cursor.execute("INSERT INTO migrations (version) VALUES (?)", (version,))
                logger.info("Applied storage migration %s to %s", version, db_path)
                current_version = version


class Partition:
    """Handle to one partition of the durable region.

    Only the store that acquired it may use the handle.  ``cursor()``
    yields a transactional cursor on the shared database file; callers
    scope their queries with ``partition.index``.
    """

    def __init__(self, manager: "MemoryManager", index: int, kind: str) -> None:
        self.manager = manager
        self.index = index
        self.kind = kind

    def cursor(self):
        return get_cursor(self.manager.db_path)

    def __repr__(self) -> str:
        return f"Partition(index={self.index}, kind={self.kind!r})"


class MemoryManager:
    """Split one SQLite file into numbered partitions.

    Parameters
    ----------
    db_path : str
        Location of the SQLite file.  Created, and migrated, on
        construction.
    """

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self._acquired: Dict[int, Partition] = {}
        init_db(db_path)

    def get(self, index: int, kind: str) -> Partition:
        """Acquire the partition ``index`` for a store of the given ``kind``.

        The kind is recorded the first time a partition is claimed and
        must match on every later run.  Each index can be acquired once
        per manager.
        """
        if not 0 <= index < MAX_PARTITIONS:
            raise ValueError(f"Partition index {index} out of range 0..{MAX_PARTITIONS - 1}")
        if kind not in (CELL, MAP):
            raise ValueError(f"Unknown partition kind {kind!r}")
        if index in self._acquired:
            raise ValueError(f"Partition {index} is already in use")

        with get_cursor(self.db_path) as cursor:
            row = cursor.execute(
                "SELECT kind FROM partitions WHERE id = ?", (index,)
            ).fetchone()
            if row is None:
                cursor.execute(
                    "INSERT INTO partitions (id, kind) VALUES (?, ?)", (index, kind)
                )
            elif row["kind"] != kind:
                raise ValueError(
                    f"Partition {index} holds a {row['kind']}, cannot reuse it as a {kind}"
                )

        partition = Partition(self, index, kind)
        self._acquired[index] = partition
        logger.debug("Acquired %r in %s", partition, self.db_path)
        return partition
