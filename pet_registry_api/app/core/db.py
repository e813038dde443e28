"""
SQLite database integration and simple migration system.

The registry keeps all of its state in one SQLite file: a table of
single value cells (the identifier counter) and a table of keyed entries
partitioned by segment (pets, found reports).  ``Database`` owns the one
connection used by the process and hands out transactions; ``init_db``
applies migrations on application start.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .config import settings
from .exceptions import StorageError

logger = logging.getLogger(__name__)

MEMORY_DATABASE = ":memory:"

MIGRATIONS: list[tuple[int, str]] = [
    (
        1,
        """
        -- Single value cells, one per segment (segment 0 holds the id counter).
        CREATE TABLE IF NOT EXISTS stable_cells (
            segment INTEGER PRIMARY KEY,
            value BLOB NOT NULL
        );

        -- Keyed entries.  Keys are 8 byte big-endian integers so that the
        -- BLOB ordering SQLite applies equals numeric key order.
        CREATE TABLE IF NOT EXISTS stable_entries (
            segment INTEGER NOT NULL,
            key BLOB NOT NULL,
            value BLOB NOT NULL,
            PRIMARY KEY (segment, key)
        ) WITHOUT ROWID;
        """,
    ),
]


def get_database_path(database_url: Optional[str] = None) -> str:
    """Compute the path to the SQLite database file.

    If the configured URL is an absolute path or ``:memory:``, use it
    directly.  Otherwise resolve it relative to the package root.
    """
    db_url = database_url or settings.database_url
    if db_url == MEMORY_DATABASE or os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent  # pet_registry_api/
    return str((base_dir / db_url).resolve())


class Database:
    """A single SQLite connection plus re-entrant transactions.

    The connection runs in autocommit mode; ``transaction`` issues
    ``BEGIN IMMEDIATE`` for the outermost block and joins nested blocks to
    it, so a store call made inside a service transaction becomes part of
    that transaction instead of committing on its own.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self._conn: Optional[sqlite3.Connection] = None
        self._depth = 0

    def connect(self) -> "Database":
        if self._conn is None:
            logger.info("Opening registry database at %s", self.path)
            # Calls are serialized by the service lock, so the connection
            # may be used from whichever worker thread handles a request.
            conn = sqlite3.connect(self.path, isolation_level=None, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA synchronous = FULL")
            self._conn = conn
        return self

    @property
    def connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("Database is not connected")
        return self._conn

    def execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        return self.connection.execute(sql, params)

    @contextmanager
    def transaction(self) -> Iterator["Database"]:
        """Run the enclosed block atomically.

        The outermost block commits on success and rolls back on any
        exception; the exception is re-raised either way.
        """
        conn = self.connection
        if self._depth == 0:
            try:
                conn.execute("BEGIN IMMEDIATE")
            except sqlite3.Error as exc:
                raise StorageError(f"Cannot start transaction on {self.path}: {exc}") from exc
        self._depth += 1
        try:
            yield self
        except BaseException:
            self._depth -= 1
            if self._depth == 0 and conn.in_transaction:
                conn.execute("ROLLBACK")
                logger.debug("Rolled back transaction on %s", self.path)
            raise
        else:
            self._depth -= 1
            if self._depth == 0:
                try:
                    conn.execute("COMMIT")
                except sqlite3.Error as exc:
                    if conn.in_transaction:
                        conn.execute("ROLLBACK")
                    raise StorageError(f"Cannot commit transaction on {self.path}: {exc}") from exc

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.info("Closed registry database at %s", self.path)


def init_db(database: Database) -> None:
    """Apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version, and applies any new migrations defined in
    ``MIGRATIONS``.  If you add a new migration, append it with an
    incremented version number.
    """
    conn = database.connection
    conn.execute("CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)")
    row = conn.execute("SELECT MAX(version) AS version FROM migrations").fetchone()
    current_version = row["version"] if row and row["version"] is not None else 0

    for version, sql in MIGRATIONS:
        if version > current_version:
            conn.executescript(sql)
            conn.execute("INSERT INTO migrations (version) VALUES (?)", (version,))
            logger.info("Applied database migration %s", version)
            current_version = version


def open_database(database_url: Optional[str] = None) -> Database:
    """Connect to the configured database and bring its schema up to date."""
    database = Database(get_database_path(database_url)).connect()
    init_db(database)
    return database
