"""DB-API parameter sink."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from rowkey.column_types import ColumnType

Converter = Callable[[Any], Any]


class PositionalParameters:
    """
    Collects bound values for ``cursor.execute(sql, params)``.

    Each ``bind`` call fills the next positional slot. ``converters`` maps a
    column type to a function applied before the value is stored, for
    drivers that cannot bind the native value directly.

    Example:
        params = PositionalParameters()
        unique_key.bind_content_parameters(params, doc_id)
        conn.execute(sql, params.values)
    """

    def __init__(self, converters: Mapping[ColumnType, Converter] | None = None):
        self._converters = dict(converters or {})
        self._values: list[Any] = []
        self._types: list[ColumnType] = []

    def bind(self, column_type: ColumnType, value: Any) -> None:
        converter = self._converters.get(column_type)
        self._values.append(converter(value) if converter else value)
        self._types.append(column_type)

    @property
    def values(self) -> tuple[Any, ...]:
        """Bound values in slot order."""
        return tuple(self._values)

    @property
    def types(self) -> tuple[ColumnType, ...]:
        """Column type of each slot."""
        return tuple(self._types)

    def clear(self) -> None:
        self._values.clear()
        self._types.clear()

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"PositionalParameters({self._values!r})"


__all__ = [
    "Converter",
    "PositionalParameters",
]
