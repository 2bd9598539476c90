"""Shared SQLite connection handling for the durable stores."""

import json
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from ..errors import PersistenceError


class SQLiteStore:
    """Base class for SQLite-backed stores.

    Each operation opens its own connection in WAL mode so concurrent
    requests can read while another writes.
    """

    def __init__(self, db_path: Path):
        """Initialize the store and create its schema.

        Args:
            db_path: Path to the SQLite database file
        """
        self.db_path = db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)

        with self._transaction() as conn:
            self._init_db(conn)

    def _get_connection(self) -> sqlite3.Connection:
        """Get a new database connection with WAL mode for concurrency."""
        conn = sqlite3.connect(
            str(self.db_path),
            timeout=30.0,  # 30 second timeout if locked
            check_same_thread=False,
        )
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA busy_timeout=30000")
        conn.execute("PRAGMA synchronous=NORMAL")
        return conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection, committing on success.

        Raises:
            PersistenceError: If any SQLite operation fails
        """
        try:
            conn = self._get_connection()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to open {self.db_path}: {e}", e) from e
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise PersistenceError(f"Database operation failed: {e}", e) from e
        finally:
            conn.close()

    def _init_db(self, conn: sqlite3.Connection) -> None:
        raise NotImplementedError


def placeholders(values: list) -> str:
    """Build a ``?, ?, ?`` parameter list for an IN clause."""
    return ", ".join("?" for _ in values)


def dump_list(values: list[str]) -> str:
    return json.dumps(values)


def load_list(raw: str | None) -> list[str]:
    return json.loads(raw) if raw else []


def load_time(raw: str) -> datetime:
    return datetime.fromisoformat(raw)
