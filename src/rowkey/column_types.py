"""
Logical column types for unique key columns.

``ColumnType`` is the closed set of value types a unique key column may
have. Each member knows how to read a driver value, format it into the
canonical string used inside a doc id, and parse that string back into the
native value bound as a SQL parameter.

``SqlType`` is the closed set of source-database type codes, named after
the generic ANSI/JDBC type names. Columns declared without an explicit
type are resolved through the fixed ``SqlType -> ColumnType`` table.

Canonical forms:
    ::

        INT         decimal integer            345
        LONG        decimal integer            4567890
        BIGDECIMAL  fixed-point decimal text   1234567.89
        STRING      verbatim                   abc
        DATE        YYYY-MM-DD                 2007-08-09
        TIME        HH:MM:SS                   12:34:56
        TIMESTAMP   epoch milliseconds         1186662896000

Timestamps use epoch milliseconds so that fractional-second, locale and
timezone formatting differences between databases never reach the id.
Naive datetimes are taken as UTC and parsed timestamps are returned as
naive UTC datetimes.

Examples:
    >>> ColumnType.from_keyword("BigDecimal")
    <ColumnType.BIGDECIMAL: 'bigdecimal'>
    >>> ColumnType.TIMESTAMP.format(datetime(2014, 10, 30, 20, 31, 10, 212000))
    '1414701070212'
    >>> ColumnType.DATE.parse("2014-01-01")
    datetime.date(2014, 1, 1)
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from sqlalchemy import types as sqltypes

from rowkey.errors import KeyValueParseError, RowKeyError, UnsupportedColumnTypeError

INT_MIN, INT_MAX = -(2**31), 2**31 - 1
LONG_MIN, LONG_MAX = -(2**63), 2**63 - 1

EPOCH = datetime(1970, 1, 1)
_ONE_MILLISECOND = timedelta(milliseconds=1)


class ColumnType(str, Enum):
    """Logical type of a unique key column."""

    INT = "int"
    LONG = "long"
    BIGDECIMAL = "bigdecimal"
    STRING = "string"
    DATE = "date"
    TIME = "time"
    TIMESTAMP = "timestamp"

    @classmethod
    def from_keyword(cls, keyword: str) -> ColumnType | None:
        """Look up a declaration type keyword, case-insensitively."""
        try:
            return cls(keyword.strip().lower())
        except ValueError:
            return None

    def read(self, value: Any, column: str | None = None) -> Any:
        """Coerce a non-NULL driver value into this type's native value."""
        try:
            return self._read(value)
        except (TypeError, ValueError, ArithmeticError) as e:
            raise KeyValueParseError(column, self.value, value, cause=e) from e

    def _read(self, value: Any) -> Any:
        match self:
            case ColumnType.INT:
                return _check_range(_to_int(value), INT_MIN, INT_MAX)
            case ColumnType.LONG:
                return _check_range(_to_int(value), LONG_MIN, LONG_MAX)
            case ColumnType.BIGDECIMAL:
                return _to_decimal(value)
            case ColumnType.STRING:
                if isinstance(value, bytes):
                    return value.decode("utf-8")
                return str(value)
            case ColumnType.DATE:
                if isinstance(value, datetime):
                    return value.date()
                if isinstance(value, date):
                    return value
                return datetime.fromisoformat(_require_str(value).strip()).date()
            case ColumnType.TIME:
                if isinstance(value, datetime):
                    return value.time()
                if isinstance(value, time):
                    return value
                return time.fromisoformat(_require_str(value).strip())
            case ColumnType.TIMESTAMP:
                if isinstance(value, datetime):
                    return value
                if isinstance(value, date):
                    return datetime.combine(value, time())
                return datetime.fromisoformat(_require_str(value).strip())
            case _:
                raise RowKeyError(f"Unhandled column type: {self!r}")

    def format(self, value: Any) -> str:
        """Render a native value in its canonical doc id form."""
        match self:
            case ColumnType.INT | ColumnType.LONG:
                return str(int(value))
            case ColumnType.BIGDECIMAL:
                return format(value, "f")
            case ColumnType.STRING:
                return value
            case ColumnType.DATE:
                return value.isoformat()
            case ColumnType.TIME:
                return value.strftime("%H:%M:%S")
            case ColumnType.TIMESTAMP:
                return str(_epoch_millis(value))
            case _:
                raise RowKeyError(f"Unhandled column type: {self!r}")

    def parse(self, text: str, column: str | None = None) -> Any:
        """Parse a canonical string into the native value bound as a parameter."""
        try:
            return self._parse(text)
        except (TypeError, ValueError, ArithmeticError) as e:
            raise KeyValueParseError(column, self.value, text, cause=e) from e

    def _parse(self, text: str) -> Any:
        match self:
            case ColumnType.INT:
                return _check_range(_parse_int(text), INT_MIN, INT_MAX)
            case ColumnType.LONG:
                return _check_range(_parse_int(text), LONG_MIN, LONG_MAX)
            case ColumnType.BIGDECIMAL:
                return _finite(Decimal(text.strip()))
            case ColumnType.STRING:
                return text
            case ColumnType.DATE:
                return datetime.strptime(text, "%Y-%m-%d").date()
            case ColumnType.TIME:
                return datetime.strptime(text, "%H:%M:%S").time()
            case ColumnType.TIMESTAMP:
                return EPOCH + _parse_int(text) * _ONE_MILLISECOND
            case _:
                raise RowKeyError(f"Unhandled column type: {self!r}")


def _require_str(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"unexpected driver value of type {type(value).__name__}")
    return value


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        value = Decimal(repr(value))
    if isinstance(value, Decimal):
        if not value.is_finite() or value != value.to_integral_value():
            raise ValueError(f"{value!r} is not an integer")
        return int(value)
    return _parse_int(_require_str(value).strip())


def _parse_int(text: str) -> int:
    # Stricter than int(), which also accepts underscores and whitespace.
    digits = text[1:] if text[:1] in ("+", "-") else text
    if not (digits.isascii() and digits.isdigit()):
        raise ValueError(f"invalid integer {text!r}")
    return int(text)


def _check_range(value: int, low: int, high: int) -> int:
    if not low <= value <= high:
        raise ValueError(f"{value} is outside [{low}, {high}]")
    return value


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, bool):
        return Decimal(int(value))
    if isinstance(value, Decimal):
        return _finite(value)
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return _finite(Decimal(repr(value)))
    return _finite(Decimal(_require_str(value).strip()))


def _finite(value: Decimal) -> Decimal:
    if not value.is_finite():
        raise InvalidOperation(f"{value} is not finite")
    return value


def _epoch_millis(value: datetime) -> int:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return (value - EPOCH) // _ONE_MILLISECOND


class SqlType(str, Enum):
    """Source-database type codes, named after the generic ANSI/JDBC types."""

    BIT = "BIT"
    BOOLEAN = "BOOLEAN"
    TINYINT = "TINYINT"
    SMALLINT = "SMALLINT"
    INTEGER = "INTEGER"
    BIGINT = "BIGINT"
    REAL = "REAL"
    FLOAT = "FLOAT"
    DOUBLE = "DOUBLE"
    DECIMAL = "DECIMAL"
    NUMERIC = "NUMERIC"
    CHAR = "CHAR"
    VARCHAR = "VARCHAR"
    LONGVARCHAR = "LONGVARCHAR"
    NCHAR = "NCHAR"
    NVARCHAR = "NVARCHAR"
    LONGNVARCHAR = "LONGNVARCHAR"
    CLOB = "CLOB"
    NCLOB = "NCLOB"
    DATALINK = "DATALINK"
    DATE = "DATE"
    TIME = "TIME"
    TIMESTAMP = "TIMESTAMP"
    BINARY = "BINARY"
    VARBINARY = "VARBINARY"
    LONGVARBINARY = "LONGVARBINARY"
    BLOB = "BLOB"
    ARRAY = "ARRAY"
    STRUCT = "STRUCT"
    OTHER = "OTHER"


SQL_TYPE_TO_COLUMN_TYPE: dict[SqlType, ColumnType] = {
    SqlType.BIT: ColumnType.INT,
    SqlType.BOOLEAN: ColumnType.INT,
    SqlType.TINYINT: ColumnType.INT,
    SqlType.SMALLINT: ColumnType.INT,
    SqlType.INTEGER: ColumnType.INT,
    SqlType.BIGINT: ColumnType.LONG,
    SqlType.DECIMAL: ColumnType.BIGDECIMAL,
    SqlType.NUMERIC: ColumnType.BIGDECIMAL,
    SqlType.CHAR: ColumnType.STRING,
    SqlType.VARCHAR: ColumnType.STRING,
    SqlType.LONGVARCHAR: ColumnType.STRING,
    SqlType.NCHAR: ColumnType.STRING,
    SqlType.NVARCHAR: ColumnType.STRING,
    SqlType.LONGNVARCHAR: ColumnType.STRING,
    SqlType.DATALINK: ColumnType.STRING,
    SqlType.DATE: ColumnType.DATE,
    SqlType.TIME: ColumnType.TIME,
    SqlType.TIMESTAMP: ColumnType.TIMESTAMP,
}


def column_type_for_sql_type(column: str, sql_type: SqlType) -> ColumnType:
    """Translate a source type code for ``column`` into a ColumnType.

    Raises:
        UnsupportedColumnTypeError: binary, LOB, structured and floating
            point types cannot identify a row.
    """
    try:
        return SQL_TYPE_TO_COLUMN_TYPE[sql_type]
    except KeyError:
        name = sql_type.value if isinstance(sql_type, SqlType) else str(sql_type)
        raise UnsupportedColumnTypeError(column, name) from None


# Generic SQLAlchemy classes, most specific first.
_GENERIC_SQL_TYPES: list[tuple[type, SqlType]] = [
    (sqltypes.Boolean, SqlType.BOOLEAN),
    (sqltypes.BigInteger, SqlType.BIGINT),
    (sqltypes.SmallInteger, SqlType.SMALLINT),
    (sqltypes.Integer, SqlType.INTEGER),
    (sqltypes.Float, SqlType.FLOAT),
    (sqltypes.Numeric, SqlType.NUMERIC),
    (sqltypes.UnicodeText, SqlType.LONGNVARCHAR),
    (sqltypes.Text, SqlType.LONGVARCHAR),
    (sqltypes.Unicode, SqlType.NVARCHAR),
    (sqltypes.String, SqlType.VARCHAR),
    (sqltypes.DateTime, SqlType.TIMESTAMP),
    (sqltypes.Date, SqlType.DATE),
    (sqltypes.Time, SqlType.TIME),
    (sqltypes.LargeBinary, SqlType.BLOB),
]


def sql_type_of(type_engine: Any) -> SqlType:
    """Classify a SQLAlchemy type (instance or class) as a SqlType.

    Dialect types named after a standard type (``BIGINT``, ``NUMERIC``,
    ``NVARCHAR``) map by name; other types map through their generic
    SQLAlchemy class; anything else is ``OTHER``.
    """
    type_class = type_engine if isinstance(type_engine, type) else type(type_engine)
    visit_name = getattr(type_class, "__visit_name__", "")
    if isinstance(visit_name, str) and visit_name.isupper():
        try:
            return SqlType(visit_name)
        except ValueError:
            pass
    for generic, sql_type in _GENERIC_SQL_TYPES:
        if issubclass(type_class, generic):
            return sql_type
    return SqlType.OTHER


__all__ = [
    "ColumnType",
    "SqlType",
    "SQL_TYPE_TO_COLUMN_TYPE",
    "column_type_for_sql_type",
    "sql_type_of",
]
