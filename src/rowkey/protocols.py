"""
Structural protocols for the collaborators the key codec talks to.

The codec never depends on a specific driver. It reads key columns from
anything shaped like a row and binds parameters into anything shaped like a
parameter sink.

Architecture:
    ::

        protocols.py
        ├── KeyRow          — row[name], optional keys()  (sqlite3.Row, dict,
        │                     SQLAlchemy RowMapping)
        ├── ParameterSink   — bind(column_type, value), one positional slot
        │                     per call
        └── Connection      — DB-API connection used by the adapters

Guardrails:
    ❌ DON'T: Import sqlite3 or psycopg in codec code
    ✅ DO: Accept a KeyRow / ParameterSink and let adapters supply them
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from rowkey.column_types import ColumnType


@runtime_checkable
class KeyRow(Protocol):
    """A result row addressable by column name.

    A value of ``None`` means SQL NULL.
    """

    def __getitem__(self, name: str) -> Any:
        ...

    def keys(self) -> Iterable[str]:
        ...


@runtime_checkable
class ParameterSink(Protocol):
    """Receives positional SQL parameters in order."""

    def bind(self, column_type: ColumnType, value: Any) -> None:
        """Bind ``value`` of ``column_type`` into the next parameter slot."""
        ...


@runtime_checkable
class Connection(Protocol):
    """
    Minimal SYNCHRONOUS DB-API connection interface.

    Satisfied by ``sqlite3.Connection`` and psycopg connections.
    """

    def execute(self, sql: str, params: tuple[Any, ...] | list[Any] = ()) -> Any:
        ...

    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        ...


__all__ = [
    "KeyRow",
    "ParameterSink",
    "Connection",
]
