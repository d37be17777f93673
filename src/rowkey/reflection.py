"""Source column type discovery with SQLAlchemy reflection."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from sqlalchemy import inspect

from rowkey.column_types import SqlType, sql_type_of
from rowkey.errors import ColumnNotFoundError
from rowkey.logging import get_logger

logger = get_logger(__name__)


def reflect_column_types(
    bind: Any,
    table: str,
    columns: Iterable[str],
    *,
    schema: str | None = None,
) -> dict[str, SqlType]:
    """Look up the source type code of each of ``columns`` in ``table``.

    ``bind`` is a SQLAlchemy ``Engine`` or ``Connection``. Column names match
    case-insensitively; results are keyed by the names as requested.

    Raises:
        ColumnNotFoundError: a requested column is not in the table.
    """
    reflected = {
        column["name"].casefold(): column["type"]
        for column in inspect(bind).get_columns(table, schema=schema)
    }

    found: dict[str, SqlType] = {}
    for name in columns:
        name = name.strip()
        try:
            type_engine = reflected[name.casefold()]
        except KeyError:
            raise ColumnNotFoundError(name, where=f"table '{table}'") from None
        found[name] = sql_type_of(type_engine)

    logger.debug(
        "column_types_reflected",
        table=table,
        column_types={name: t.value for name, t in found.items()},
    )
    return found


__all__ = ["reflect_column_types"]
