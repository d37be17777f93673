"""
rowkey — reversible document ids for database rows.

The identity layer of a database-to-search-index connector: it turns a
row's composite, typed unique key into one opaque doc id string, and turns
that id back into typed SQL parameters for re-fetching the row or its ACL.

Modules
-------
unique_key      UniqueKeyBuilder / UniqueKey: declaration, encode, decode, bind
column_types    ColumnType and SqlType enums, canonical forms, type mapping
escaping        Escape-and-join codec for doc id fields
parameters      PositionalParameters, the DB-API parameter sink
protocols       KeyRow, ParameterSink, Connection
errors          Typed error hierarchy
reflection      SQLAlchemy discovery of source column types
adapters        Database adapters (SQLite)
lookup          DocumentLookup: list ids, fetch content and ACL rows by id
settings        pydantic-settings configuration and build_unique_key()
logging         structlog configuration
cli             Typer CLI

Examples:
    >>> from rowkey import UniqueKeyBuilder
    >>> key = UniqueKeyBuilder("a:string, b:string").build()
    >>> key.encode({"a": "5/5", "b": "6/6"})
    '5_/5/6_/6'
"""

from rowkey.column_types import ColumnType, SqlType
from rowkey.errors import (
    ColumnNotFoundError,
    ConfigError,
    InvalidDocIdUrlError,
    KeyDeclarationError,
    KeyValueParseError,
    MalformedDocIdError,
    NullKeyColumnError,
    RowKeyError,
    UnsupportedColumnTypeError,
)
from rowkey.parameters import PositionalParameters
from rowkey.unique_key import KeyColumn, UniqueKey, UniqueKeyBuilder

__version__ = "0.1.0"

__all__ = [
    "ColumnType",
    "SqlType",
    "KeyColumn",
    "UniqueKey",
    "UniqueKeyBuilder",
    "PositionalParameters",
    # Errors
    "RowKeyError",
    "ConfigError",
    "KeyDeclarationError",
    "UnsupportedColumnTypeError",
    "NullKeyColumnError",
    "InvalidDocIdUrlError",
    "MalformedDocIdError",
    "KeyValueParseError",
    "ColumnNotFoundError",
]
