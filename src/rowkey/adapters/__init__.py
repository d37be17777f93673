"""Database adapters.

Architecture::

    DatabaseAdapter (base.py)        Abstract base with connect/execute/query
        |-- SQLiteAdapter            stdlib sqlite3

    DatabaseConfig (types.py)        Connection parameters
    DatabaseType (types.py)          Enum of supported backends

Guardrails:
    ❌ ``conn.execute("SELECT * FROM t WHERE id=" + doc_id)``
    ✅ ``key.bind_content_parameters(params, doc_id)`` then
       ``conn.execute("SELECT * FROM t WHERE id=?", params.values)``
"""

from .base import DatabaseAdapter
from .sqlite import SQLiteAdapter
from .types import DatabaseConfig, DatabaseType

__all__ = [
    "DatabaseType",
    "DatabaseConfig",
    "DatabaseAdapter",
    "SQLiteAdapter",
]
