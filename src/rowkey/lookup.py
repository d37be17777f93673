"""
Doc id listing and per-document row lookup.

``DocumentLookup`` runs the connector's three queries through a
``UniqueKey``:

    ::

        everything_sql            SELECT id, name FROM data
            └─ list_doc_ids()     encode every row; log and skip rows whose
                                  key cannot be encoded
        single_doc_content_sql    SELECT * FROM data WHERE id = ? AND name = ?
            └─ fetch_content(id)  bind content parameters, first row or None
        acl_sql                   SELECT * FROM acl WHERE id = ?
            └─ fetch_acl(id)      bind ACL parameters, all rows

Examples:
    >>> lookup = DocumentLookup(
    ...     adapter,
    ...     key,
    ...     everything_sql="SELECT id, name FROM data",
    ...     single_doc_content_sql="SELECT * FROM data WHERE id = ? AND name = ?",
    ... )
    >>> list(lookup.list_doc_ids())
    ['1/a', '2/b']
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from rowkey.adapters.base import DatabaseAdapter
from rowkey.errors import InvalidDocIdUrlError, KeyValueParseError, NullKeyColumnError
from rowkey.logging import LogContext, get_logger
from rowkey.unique_key import UniqueKey

logger = get_logger(__name__)

# Per-row faults: the row is reported and skipped, the listing continues.
_SKIPPABLE_ROW_ERRORS = (NullKeyColumnError, InvalidDocIdUrlError, KeyValueParseError)


class DocumentLookup:
    """Encodes listed rows into doc ids and fetches rows back by doc id."""

    def __init__(
        self,
        adapter: DatabaseAdapter,
        unique_key: UniqueKey,
        *,
        everything_sql: str,
        single_doc_content_sql: str,
        acl_sql: str | None = None,
    ):
        self._adapter = adapter
        self._key = unique_key
        self._everything_sql = everything_sql
        self._content_sql = single_doc_content_sql
        self._acl_sql = acl_sql

    @property
    def unique_key(self) -> UniqueKey:
        return self._key

    def list_doc_ids(self) -> Iterator[str]:
        """Yield the doc id of every row of the listing query."""
        conn = self._adapter.get_connection()
        cursor = conn.execute(self._everything_sql, ())
        skipped = 0
        listed = 0
        for row in cursor:
            try:
                doc_id = self._key.encode(row)
            except _SKIPPABLE_ROW_ERRORS as e:
                skipped += 1
                logger.warning("row_skipped", error=e.message, **e.context.to_dict())
                continue
            listed += 1
            yield doc_id
        logger.info("doc_ids_listed", listed=listed, skipped=skipped)

    def fetch_content(self, doc_id: str) -> dict[str, Any] | None:
        """Fetch the content row for ``doc_id``, or None if it is gone."""
        params = self._adapter.new_parameters()
        self._key.bind_content_parameters(params, doc_id)
        with LogContext(doc_id=doc_id):
            row = self._adapter.query_one(self._content_sql, params.values)
            if row is None:
                logger.info("content_not_found")
            return row

    def fetch_acl(self, doc_id: str) -> list[dict[str, Any]]:
        """Fetch the ACL rows for ``doc_id``; empty without an ACL query."""
        if not self._acl_sql:
            return []
        params = self._adapter.new_parameters()
        self._key.bind_acl_parameters(params, doc_id)
        with LogContext(doc_id=doc_id):
            rows = self._adapter.query(self._acl_sql, params.values)
            logger.debug("acl_fetched", rows=len(rows))
            return rows


__all__ = ["DocumentLookup"]
