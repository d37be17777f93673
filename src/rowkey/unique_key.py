"""
Unique key declaration, doc id encoding and SQL parameter binding.

A unique key declaration such as ``"id:int, name:string"`` names the
columns that identify a row. ``UniqueKeyBuilder`` parses and validates the
declaration, optionally resolves untyped columns from source column types,
and configures which key columns feed the content and ACL queries.
``build()`` freezes the result into an immutable ``UniqueKey``.

``UniqueKey`` turns a row into a doc id and a doc id back into SQL
parameters:

    ::

        row (345, "a/b")
            │ format each column by ColumnType
            ▼
        ["345", "a/b"] ──escape + join──▶ "345/a_/b"        encode()
                                              │
        ["345", "a/b"] ◀──split + unescape────┘              decode()
            │ parse each field by ColumnType, in parameter-list order
            ▼
        sink.bind(INT, 345); sink.bind(STRING, "a/b")        bind_*_parameters()

Examples:
    >>> key = UniqueKeyBuilder("numnum:int, strstr:string").build()
    >>> key.encode({"numnum": 345, "strstr": "abc"})
    '345/abc'
    >>> key.decode("5_/5/abc")
    ['5/5', 'abc']

Guardrails:
    ❌ DON'T: Encode NULL key values as empty fields (two rows would share an id)
    ✅ DO: Let NullKeyColumnError propagate and skip the row

    ❌ DON'T: Truncate or pad a decoded id with the wrong field count
    ✅ DO: Reject it with MalformedDocIdError
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import AnyUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from rowkey.column_types import ColumnType, SqlType, column_type_for_sql_type
from rowkey.errors import (
    ColumnNotFoundError,
    InvalidDocIdUrlError,
    KeyDeclarationError,
    KeyValueParseError,
    MalformedDocIdError,
    NullKeyColumnError,
)
from rowkey.escaping import escape_field, join_fields, split_fields
from rowkey.logging import get_logger
from rowkey.protocols import KeyRow, ParameterSink

logger = get_logger(__name__)

UNIQUE_KEY_SETTING = "db.unique_key"
DOC_ID_IS_URL_SETTING = "db.doc_id_is_url"
CONTENT_PARAMETERS_SETTING = "db.single_doc_content_sql_parameters"
ACL_PARAMETERS_SETTING = "db.acl_sql_parameters"

_URL_ADAPTER = TypeAdapter(AnyUrl)
# Characters RFC 3986 never allows unencoded in a URI.
_ILLEGAL_URI_CHARS = re.compile(r'[\x00-\x20\x7f<>"{}|\\^`]')
_BAD_PERCENT_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_URI_SCHEME = re.compile(r"[A-Za-z][A-Za-z0-9+.-]*:")


@dataclass(frozen=True, slots=True)
class KeyColumn:
    """A declared key column."""

    name: str
    column_type: ColumnType


def _split_list(text: str) -> list[str]:
    return [item.strip() for item in text.split(",")]


class UniqueKeyBuilder:
    """
    Mutable builder for a :class:`UniqueKey`.

    Declaration syntax errors, unknown type keywords and duplicate names fail
    in the constructor; unknown parameter columns fail in the setters;
    unresolved types and URL-mode shape fail in :meth:`build`.

    Not thread-safe; build once per configuration load.
    """

    def __init__(self, declaration: str):
        if declaration is None:
            raise TypeError("unique key declaration must not be None")
        if not declaration.strip():
            raise KeyDeclarationError(
                f"Invalid {UNIQUE_KEY_SETTING} parameter: value cannot be empty."
            )

        self._names: list[str] = []
        self._types: dict[str, ColumnType | None] = {}
        # casefolded name -> declared name
        self._lookup: dict[str, str] = {}

        for entry in _split_list(declaration):
            name, sep, type_token = entry.partition(":")
            name = name.strip()
            column_type = None
            if sep:
                type_token = type_token.strip()
                column_type = ColumnType.from_keyword(type_token)
                if column_type is None:
                    raise KeyDeclarationError(
                        f"Invalid unique key type '{type_token}' for '{name}'.",
                        column=name,
                    )
            if not name:
                raise KeyDeclarationError(
                    f"Invalid {UNIQUE_KEY_SETTING} parameter: "
                    f"empty column name in {declaration!r}."
                )
            folded = name.casefold()
            if folded in self._lookup:
                raise KeyDeclarationError(
                    f"Invalid {UNIQUE_KEY_SETTING} configuration: "
                    f"key name '{name}' was repeated.",
                    column=name,
                )
            self._lookup[folded] = name
            self._names.append(name)
            self._types[name] = column_type

        self._doc_id_is_url = False
        self._content_columns: list[str] = []
        self._acl_columns: list[str] = []

    # -- Configuration -----------------------------------------------------

    def add_column_types(self, sql_types: Mapping[str, SqlType]) -> UniqueKeyBuilder:
        """Resolve columns declared without a type from source type codes.

        Names match case-insensitively. Explicitly typed columns and names
        outside the declaration are left alone.

        Raises:
            UnsupportedColumnTypeError: a needed column has a type that
                cannot be used in a unique key.
        """
        by_folded = {name.casefold(): sql_type for name, sql_type in sql_types.items()}
        for name in self._names:
            if self._types[name] is not None:
                continue
            sql_type = by_folded.get(name.casefold())
            if sql_type is not None:
                self._types[name] = column_type_for_sql_type(name, sql_type)
        return self

    def set_doc_id_is_url(self, doc_id_is_url: bool) -> UniqueKeyBuilder:
        self._doc_id_is_url = doc_id_is_url
        return self

    def set_content_sql_columns(self, columns: str) -> UniqueKeyBuilder:
        """Set the key columns bound, in order, into the content query."""
        self._content_columns = self._parse_parameter_list(columns, CONTENT_PARAMETERS_SETTING)
        return self

    def set_acl_sql_columns(self, columns: str) -> UniqueKeyBuilder:
        """Set the key columns bound, in order, into the ACL query."""
        self._acl_columns = self._parse_parameter_list(columns, ACL_PARAMETERS_SETTING)
        return self

    def _parse_parameter_list(self, columns: str, setting: str) -> list[str]:
        if columns is None:
            raise TypeError(f"{setting} must not be None")
        if not columns.strip():
            return []
        names = _split_list(columns)
        for name in names:
            if name.casefold() not in self._lookup:
                raise KeyDeclarationError(
                    f"Unknown column '{name}' from {setting}",
                    column=name,
                ).with_context(parameter_list=setting)
        return names

    # -- Read-back ---------------------------------------------------------

    @property
    def doc_id_sql_columns(self) -> list[str]:
        """Declared key column names, in order."""
        return list(self._names)

    @property
    def column_types(self) -> dict[str, ColumnType]:
        """Known column types, keyed by declared name."""
        return {name: t for name, t in self._types.items() if t is not None}

    @property
    def content_sql_columns(self) -> list[str]:
        return list(self._content_columns)

    @property
    def acl_sql_columns(self) -> list[str]:
        return list(self._acl_columns)

    @property
    def doc_id_is_url(self) -> bool:
        return self._doc_id_is_url

    # -- Build -------------------------------------------------------------

    def build(self) -> UniqueKey:
        """Validate and freeze into a :class:`UniqueKey`."""
        unresolved = [name for name in self._names if self._types[name] is None]
        if unresolved:
            raise KeyDeclarationError(
                "Unknown column type for the following columns: "
                f"[{', '.join(unresolved)}]"
            ).with_context(unresolved=unresolved)

        columns = tuple(KeyColumn(name, self._types[name]) for name in self._names)

        if self._doc_id_is_url and (
            len(columns) != 1 or columns[0].column_type is not ColumnType.STRING
        ):
            raise KeyDeclarationError(
                f"Invalid {UNIQUE_KEY_SETTING} value: The key must be a single "
                f"string column when {DOC_ID_IS_URL_SETTING} is true."
            )

        index = {column.name.casefold(): i for i, column in enumerate(columns)}
        all_columns = tuple(range(len(columns)))
        content = tuple(index[n.casefold()] for n in self._content_columns) or all_columns
        acl = tuple(index[n.casefold()] for n in self._acl_columns) or all_columns

        key = UniqueKey(
            columns=columns,
            doc_id_is_url=self._doc_id_is_url,
            content_indexes=content,
            acl_indexes=acl,
        )
        logger.debug(
            "unique_key_built",
            columns=[f"{c.name}:{c.column_type.value}" for c in columns],
            doc_id_is_url=self._doc_id_is_url,
        )
        return key


@dataclass(frozen=True, slots=True)
class UniqueKey:
    """
    Immutable doc id codec for one unique key declaration.

    Stateless after construction; safe to share across threads. Build it with
    :class:`UniqueKeyBuilder`.
    """

    columns: tuple[KeyColumn, ...]
    doc_id_is_url: bool
    content_indexes: tuple[int, ...]
    acl_indexes: tuple[int, ...]

    @property
    def column_names(self) -> list[str]:
        return [column.name for column in self.columns]

    @property
    def content_sql_columns(self) -> list[str]:
        return [self.columns[i].name for i in self.content_indexes]

    @property
    def acl_sql_columns(self) -> list[str]:
        return [self.columns[i].name for i in self.acl_indexes]

    # -- Encoding ----------------------------------------------------------

    def encode(self, row: KeyRow | Mapping[str, Any]) -> str:
        """Make the doc id for ``row``.

        Raises:
            NullKeyColumnError: a key column is NULL.
            InvalidDocIdUrlError: URL mode and the value is not an absolute URI.
            ColumnNotFoundError: the row lacks a key column.
        """
        if self.doc_id_is_url:
            column = self.columns[0]
            url = self._read(row, column)
            _validate_url(url)
            return url

        fields = []
        for column in self.columns:
            value = self._read(row, column)
            fields.append(escape_field(column.column_type.format(value)))
        return join_fields(fields)

    def encode_values(self, values: list[str]) -> str:
        """Make the doc id from column value strings, in declared order.

        Each value is parsed and re-rendered in canonical form, so ``"0100"``
        for an int column gives the same id as a row holding 100.
        """
        if len(values) != len(self.columns):
            raise MalformedDocIdError(
                f"Wrong number of values for primary key: expected "
                f"{len(self.columns)}, got {len(values)}"
            )
        canonical = [
            column.column_type.format(column.column_type.parse(text, column.name))
            for column, text in zip(self.columns, values)
        ]
        if self.doc_id_is_url:
            _validate_url(canonical[0])
            return canonical[0]
        return join_fields(escape_field(text) for text in canonical)

    @staticmethod
    def _read(row: KeyRow | Mapping[str, Any], column: KeyColumn) -> Any:
        value = _row_value(row, column.name)
        if value is None:
            raise NullKeyColumnError(column.name)
        return column.column_type.read(value, column.name)

    # -- Decoding ----------------------------------------------------------

    def decode(self, doc_id: str) -> list[str]:
        """Split a doc id into one canonical string per key column.

        Raises:
            MalformedDocIdError: wrong field count or dangling escape.
        """
        if self.doc_id_is_url:
            return [doc_id]
        values = split_fields(doc_id)
        if len(values) != len(self.columns):
            raise MalformedDocIdError(
                f"Wrong number of values for primary key: expected "
                f"{len(self.columns)}, found {len(values)} in {doc_id!r}",
                doc_id=doc_id,
            )
        return values

    # -- Binding -----------------------------------------------------------

    def bind_content_parameters(self, sink: ParameterSink, doc_id: str) -> None:
        """Bind the content query parameters for ``doc_id`` into ``sink``.

        Raises:
            MalformedDocIdError: the id is structurally invalid.
            KeyValueParseError: a field does not parse as its column type.
        """
        self._bind(sink, doc_id, self.content_indexes)

    def bind_acl_parameters(self, sink: ParameterSink, doc_id: str) -> None:
        """Bind the ACL query parameters for ``doc_id`` into ``sink``."""
        self._bind(sink, doc_id, self.acl_indexes)

    def _bind(self, sink: ParameterSink, doc_id: str, indexes: tuple[int, ...]) -> None:
        values = self.decode(doc_id)
        for i in indexes:
            column = self.columns[i]
            try:
                value = column.column_type.parse(values[i], column.name)
            except KeyValueParseError as e:
                raise e.with_context(doc_id=doc_id)
            sink.bind(column.column_type, value)

    def __repr__(self) -> str:
        decl = ", ".join(f"{c.name}:{c.column_type.value}" for c in self.columns)
        return f"UniqueKey({decl!r}, doc_id_is_url={self.doc_id_is_url})"


def _row_value(row: KeyRow | Mapping[str, Any], name: str) -> Any:
    try:
        return row[name]
    except (KeyError, IndexError):
        pass
    keys = getattr(row, "keys", None)
    if keys is not None:
        folded = name.casefold()
        for key in keys():
            if key.casefold() == folded:
                return row[key]
    raise ColumnNotFoundError(name)


def _rfc3986_violation(value: str) -> str | None:
    """Name the first RFC 3986 rule ``value`` breaks that ``AnyUrl`` would repair."""
    scheme = _URI_SCHEME.match(value)
    if scheme is None:
        return "not an absolute URI"
    bad_escape = _BAD_PERCENT_ESCAPE.search(value)
    if bad_escape:
        return f"malformed percent-encoding at position {bad_escape.start()}"
    if value.count("#") > 1:
        return "more than one '#'"
    rest = value[scheme.end():]
    if rest.startswith("//"):
        authority_end = len(rest)
        for delimiter in "/?#":
            found = rest.find(delimiter, 2)
            if found != -1:
                authority_end = min(authority_end, found)
        rest = rest[authority_end:]
    if "[" in rest or "]" in rest:
        return "'[' or ']' outside the host"
    return None


def _validate_url(value: str) -> None:
    match = _ILLEGAL_URI_CHARS.search(value)
    if match:
        raise InvalidDocIdUrlError(value, f"illegal character {match.group()!r}")
    violation = _rfc3986_violation(value)
    if violation:
        raise InvalidDocIdUrlError(value, violation)
    try:
        _URL_ADAPTER.validate_python(value)
    except PydanticValidationError as e:
        raise InvalidDocIdUrlError(
            value, e.errors()[0]["msg"] if e.errors() else "not an absolute URI", cause=e
        ) from e


__all__ = [
    "KeyColumn",
    "UniqueKey",
    "UniqueKeyBuilder",
]
