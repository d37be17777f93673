"""Tests for ``rowkey.lookup.DocumentLookup`` — listing ids and fetching rows by id."""

from __future__ import annotations

import pytest
from structlog.testing import capture_logs

from rowkey.errors import KeyValueParseError, MalformedDocIdError
from rowkey.lookup import DocumentLookup
from rowkey.unique_key import UniqueKeyBuilder

EVERYTHING_SQL = "SELECT id, name FROM data ORDER BY rowid"
CONTENT_SQL = "SELECT * FROM data WHERE id = ? AND name = ?"
ACL_SQL = "SELECT principal FROM acl WHERE id = ? ORDER BY principal"


@pytest.fixture
def lookup(sqlite_adapter) -> DocumentLookup:
    key = UniqueKeyBuilder("id:int, name:string").set_acl_sql_columns("id").build()
    return DocumentLookup(
        sqlite_adapter,
        key,
        everything_sql=EVERYTHING_SQL,
        single_doc_content_sql=CONTENT_SQL,
        acl_sql=ACL_SQL,
    )


class TestListDocIds:
    def test_lists_encoded_ids(self, lookup):
        assert list(lookup.list_doc_ids()) == ["1/a", "2/b_/c", "3/d__e", "5/5_/5_/_/"]

    def test_null_key_row_skipped_and_logged(self, lookup):
        with capture_logs() as logs:
            ids = list(lookup.list_doc_ids())
        assert len(ids) == 4
        skipped = [entry for entry in logs if entry["event"] == "row_skipped"]
        assert len(skipped) == 1
        assert skipped[0]["log_level"] == "warning"
        assert skipped[0]["column"] == "id"
        summary = [entry for entry in logs if entry["event"] == "doc_ids_listed"]
        assert summary[0]["listed"] == 4
        assert summary[0]["skipped"] == 1

    def test_unparsable_row_skipped(self, sqlite_adapter):
        key = UniqueKeyBuilder("name:int").build()
        lookup = DocumentLookup(
            sqlite_adapter,
            key,
            everything_sql="SELECT name FROM data",
            single_doc_content_sql=CONTENT_SQL,
        )
        assert list(lookup.list_doc_ids()) == []

    def test_every_listed_id_fetches_its_row(self, lookup):
        for doc_id in lookup.list_doc_ids():
            row = lookup.fetch_content(doc_id)
            assert row is not None
            assert lookup.unique_key.encode(row) == doc_id

    def test_fractional_timestamp_id_fetches_its_row(self, sqlite_adapter):
        sqlite_adapter.execute("CREATE TABLE events (at TIMESTAMP, body TEXT)")
        sqlite_adapter.execute(
            "INSERT INTO events VALUES ('2014-10-30 20:31:10.212', 'x')"
        )
        lookup = DocumentLookup(
            sqlite_adapter,
            UniqueKeyBuilder("at:timestamp").build(),
            everything_sql="SELECT at FROM events",
            single_doc_content_sql="SELECT * FROM events WHERE at = ?",
        )
        assert list(lookup.list_doc_ids()) == ["1414701070212"]
        row = lookup.fetch_content("1414701070212")
        assert row is not None
        assert row["body"] == "x"


class TestFetchContent:
    def test_fetch(self, lookup):
        assert lookup.fetch_content("2/b_/c") == {"id": 2, "name": "b/c", "body": "second"}

    def test_fetch_slashes(self, lookup):
        assert lookup.fetch_content("5/5_/5_/_/")["body"] == "slashes"

    def test_missing_row(self, lookup):
        with capture_logs() as logs:
            assert lookup.fetch_content("9/zzz") is None
        assert logs[0]["event"] == "content_not_found"

    def test_malformed_id(self, lookup):
        with pytest.raises(MalformedDocIdError):
            lookup.fetch_content("1/a/extra")

    def test_unparsable_id(self, lookup):
        with pytest.raises(KeyValueParseError):
            lookup.fetch_content("one/a")


class TestFetchAcl:
    def test_fetch(self, lookup):
        assert lookup.fetch_acl("1/a") == [{"principal": "alice"}, {"principal": "bob"}]

    def test_no_rows(self, lookup):
        assert lookup.fetch_acl("3/d__e") == []

    def test_without_acl_query(self, sqlite_adapter):
        lookup = DocumentLookup(
            sqlite_adapter,
            UniqueKeyBuilder("id:int, name:string").build(),
            everything_sql=EVERYTHING_SQL,
            single_doc_content_sql=CONTENT_SQL,
        )
        assert lookup.fetch_acl("1/a") == []
