"""SQLite database adapter."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from rowkey.column_types import ColumnType
from rowkey.errors import DatabaseConnectionError
from rowkey.protocols import Connection

from .base import DatabaseAdapter
from .types import DatabaseConfig, DatabaseType


def _timestamp_text(value: datetime) -> str:
    # SQLite's own date functions write "YYYY-MM-DD HH:MM:SS" and "%f" millis.
    timespec = "milliseconds" if value.microsecond else "seconds"
    return value.isoformat(sep=" ", timespec=timespec)


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite database adapter.

    Uses the built-in sqlite3 module. SQLite stores decimals and temporal
    values as text, so bound key values are converted to the same text form
    (``2007-08-09``, ``12:34:56``, ``2007-08-09 12:34:56``,
    ``2014-10-30 20:31:10.212``). Timestamp columns must hold that form for
    doc id lookups to match.
    """

    parameter_converters = {
        ColumnType.BIGDECIMAL: str,
        ColumnType.DATE: lambda value: value.isoformat(),
        ColumnType.TIME: lambda value: value.isoformat(timespec="seconds"),
        ColumnType.TIMESTAMP: _timestamp_text,
    }

    def __init__(
        self,
        path: str = ":memory:",
        *,
        readonly: bool = False,
        timeout: float = 5.0,
        **kwargs: Any,
    ):
        config = DatabaseConfig(
            db_type=DatabaseType.SQLITE,
            path=path,
            connect_timeout=timeout,
            readonly=readonly,
            options=kwargs,
        )
        super().__init__(config)
        self._conn: sqlite3.Connection | None = None

    def connect(self) -> None:
        """Connect to SQLite database."""
        path = self._config.path or ":memory:"
        uri = path.startswith("file:")

        try:
            self._conn = sqlite3.connect(
                path,
                timeout=self._config.connect_timeout,
                check_same_thread=False,
                uri=uri,
            )
            self._conn.row_factory = sqlite3.Row

            if self._config.readonly:
                self._conn.execute("PRAGMA query_only = ON")

            self._connected = True

        except sqlite3.Error as e:
            raise DatabaseConnectionError(
                f"Failed to connect to SQLite: {e}",
                cause=e,
            ) from e

    def disconnect(self) -> None:
        """Close SQLite connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
            self._connected = False

    def get_connection(self) -> Connection:
        """Get the SQLite connection."""
        if not self._conn:
            self.connect()
        return self._conn

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Transaction context manager."""
        conn = self.get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def query(self, sql: str, params: tuple = ()) -> list[dict[str, Any]]:
        """Execute query and return results as dicts."""
        conn = self.get_connection()
        cursor = conn.execute(sql, params)
        return [dict(row) for row in cursor.fetchall()]


__all__ = [
    "SQLiteAdapter",
]
