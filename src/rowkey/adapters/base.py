"""Database adapter base class.

Features:
    - Abstract ``connect()``, ``disconnect()``, ``get_connection()``,
      ``transaction()``
    - ``execute()`` / ``query()`` with DB-API positional parameters
    - ``new_parameters()``: a parameter sink carrying the driver's value
      converters, for binding doc id values
    - Context-manager protocol for connection lifecycle
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from rowkey.column_types import ColumnType
from rowkey.parameters import Converter, PositionalParameters
from rowkey.protocols import Connection

from .types import DatabaseConfig, DatabaseType


class DatabaseAdapter(ABC):
    """
    Abstract base class for database adapters.

    Provides common functionality and defines the interface
    that all adapters must implement.
    """

    #: Converters applied to bound key values; empty when the driver binds
    #: every native value directly.
    parameter_converters: Mapping[ColumnType, Converter] = {}

    def __init__(self, config: DatabaseConfig):
        self._config = config
        self._connected = False

    @property
    def db_type(self) -> DatabaseType:
        """Database type."""
        return self._config.db_type

    @property
    def is_connected(self) -> bool:
        """Whether adapter is connected."""
        return self._connected

    @abstractmethod
    def connect(self) -> None:
        """Establish connection to database."""
        ...

    @abstractmethod
    def disconnect(self) -> None:
        """Close connection to database."""
        ...

    @abstractmethod
    def get_connection(self) -> Connection:
        """Get a connection."""
        ...

    @abstractmethod
    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Context manager for a transaction."""
        ...

    def new_parameters(self) -> PositionalParameters:
        """Create an empty parameter sink for this driver."""
        return PositionalParameters(self.parameter_converters)

    def execute(self, sql: str, params: tuple = ()) -> Any:
        """Execute SQL statement."""
        conn = self.get_connection()
        return conn.execute(sql, params)

    def query(self, sql: str, params: tuple = ()) -> list[dict[str, Any]]:
        """Execute query and return results as dicts."""
        conn = self.get_connection()
        cursor = conn.execute(sql, params)
        columns = [desc[0] for desc in cursor.description]
        return [dict(zip(columns, row, strict=False)) for row in cursor.fetchall()]

    def query_one(self, sql: str, params: tuple = ()) -> dict[str, Any] | None:
        """Execute query and return single result."""
        results = self.query(sql, params)
        return results[0] if results else None

    def __enter__(self) -> DatabaseAdapter:
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.disconnect()


__all__ = [
    "DatabaseAdapter",
]
