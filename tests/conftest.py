"""
Shared pytest fixtures for rowkey tests.

This module provides:
- Logging and settings isolation between tests
- A populated in-memory SQLite database behind an adapter
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
import structlog

from rowkey.adapters import SQLiteAdapter
from rowkey.logging import clear_context
from rowkey.settings import clear_settings_cache


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Restore structlog defaults so capture_logs sees every event."""
    yield
    clear_context()
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep DB_* variables from the environment out of settings tests."""
    for name in (
        "DB_UNIQUE_KEY",
        "DB_DOC_ID_IS_URL",
        "DB_SINGLE_DOC_CONTENT_SQL_PARAMETERS",
        "DB_ACL_SQL_PARAMETERS",
        "DB_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


DATA_ROWS = [
    (1, "a", "first"),
    (2, "b/c", "second"),
    (3, "d_e", "third"),
    (None, "orphan", "null key"),
    (5, "5/5//", "slashes"),
]

ACL_ROWS = [
    (1, "alice"),
    (1, "bob"),
    (2, "carol"),
]


@pytest.fixture
def sqlite_adapter() -> Iterator[SQLiteAdapter]:
    """In-memory database with a ``data`` table and an ``acl`` table."""
    adapter = SQLiteAdapter()
    with adapter:
        with adapter.transaction() as conn:
            conn.execute("CREATE TABLE data (id INTEGER, name VARCHAR(20), body TEXT)")
            conn.execute("CREATE TABLE acl (id INTEGER, principal VARCHAR(20))")
            for row in DATA_ROWS:
                conn.execute("INSERT INTO data VALUES (?, ?, ?)", row)
            for row in ACL_ROWS:
                conn.execute("INSERT INTO acl VALUES (?, ?)", row)
        yield adapter
