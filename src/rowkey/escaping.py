"""
Reversible escape-and-join codec for doc id fields.

A doc id is the key column values, each escaped, joined with an unescaped
separator. The escape character escapes itself, so the transform is a
bijection over arbitrary strings without length prefixes, and ids stay
readable when debugging.

Examples:
    >>> escape_field("5/5")
    '5_/5'
    >>> join_fields([escape_field("5/5"), escape_field("6/6")])
    '5_/5/6_/6'
    >>> split_fields("5_/5/6_/6")
    ['5/5', '6/6']
    >>> split_fields("")
    ['']
"""

from __future__ import annotations

from collections.abc import Iterable

from rowkey.errors import MalformedDocIdError

ESCAPE_CHAR = "_"
SEPARATOR = "/"


def escape_field(value: str) -> str:
    """Escape ``_`` as ``__`` and ``/`` as ``_/`` in a single pass."""
    out = []
    for ch in value:
        if ch == ESCAPE_CHAR or ch == SEPARATOR:
            out.append(ESCAPE_CHAR)
        out.append(ch)
    return "".join(out)


def join_fields(fields: Iterable[str]) -> str:
    """Join already-escaped fields with the separator."""
    return SEPARATOR.join(fields)


def split_fields(doc_id: str) -> list[str]:
    """Split a joined id into its unescaped fields.

    Raises:
        MalformedDocIdError: the id ends with a lone escape character.
    """
    fields: list[str] = []
    current: list[str] = []
    i = 0
    n = len(doc_id)
    while i < n:
        ch = doc_id[i]
        if ch == ESCAPE_CHAR:
            if i + 1 == n:
                raise MalformedDocIdError(
                    f"Dangling escape character at end of doc id: {doc_id!r}",
                    doc_id=doc_id,
                )
            nxt = doc_id[i + 1]
            if nxt == SEPARATOR or nxt == ESCAPE_CHAR:
                current.append(nxt)
                i += 2
                continue
            current.append(ch)
        elif ch == SEPARATOR:
            fields.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    fields.append("".join(current))
    return fields


def unescape_field(escaped: str) -> str:
    """Reverse :func:`escape_field` for a single field.

    Raises:
        MalformedDocIdError: the text holds an unescaped separator or ends
            with a lone escape character.
    """
    fields = split_fields(escaped)
    if len(fields) != 1:
        raise MalformedDocIdError(
            f"Unescaped separator in single field: {escaped!r}",
            doc_id=escaped,
        )
    return fields[0]


__all__ = [
    "ESCAPE_CHAR",
    "SEPARATOR",
    "escape_field",
    "join_fields",
    "split_fields",
    "unescape_field",
]
