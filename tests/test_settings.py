"""Tests for ``rowkey.settings`` — DB_* settings and key construction.

Covers:
- Defaults and environment overrides
- build_unique_key() wiring of all four key settings
- Settings cache
"""

from __future__ import annotations

import pytest

from rowkey.column_types import ColumnType, SqlType
from rowkey.errors import KeyDeclarationError
from rowkey.settings import (
    RowKeySettings,
    build_unique_key,
    clear_settings_cache,
    get_settings,
)


class TestRowKeySettingsDefaults:
    def test_defaults(self):
        s = RowKeySettings(_env_file=None)
        assert s.unique_key == ""
        assert s.doc_id_is_url is False
        assert s.single_doc_content_sql_parameters == ""
        assert s.acl_sql_parameters == ""
        assert s.log_level == "INFO"


class TestRowKeySettingsEnvOverride:
    def test_unique_key_from_env(self, monkeypatch):
        monkeypatch.setenv("DB_UNIQUE_KEY", "id:int, name:string")
        s = RowKeySettings(_env_file=None)
        assert s.unique_key == "id:int, name:string"

    def test_doc_id_is_url_from_env(self, monkeypatch):
        monkeypatch.setenv("DB_DOC_ID_IS_URL", "true")
        assert RowKeySettings(_env_file=None).doc_id_is_url is True

    def test_parameter_lists_from_env(self, monkeypatch):
        monkeypatch.setenv("DB_SINGLE_DOC_CONTENT_SQL_PARAMETERS", "id, name")
        monkeypatch.setenv("DB_ACL_SQL_PARAMETERS", "id")
        s = RowKeySettings(_env_file=None)
        assert s.single_doc_content_sql_parameters == "id, name"
        assert s.acl_sql_parameters == "id"

    def test_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("DB_UNIQUE_KEY=url:string\nDB_DOC_ID_IS_URL=1\n")
        s = RowKeySettings(_env_file=env_file)
        assert s.unique_key == "url:string"
        assert s.doc_id_is_url is True


class TestBuildUniqueKey:
    def test_all_settings_applied(self):
        s = RowKeySettings(
            _env_file=None,
            unique_key="id:int, name:string",
            single_doc_content_sql_parameters="name, id",
            acl_sql_parameters="id",
        )
        key = build_unique_key(s)
        assert key.column_names == ["id", "name"]
        assert key.content_sql_columns == ["name", "id"]
        assert key.acl_sql_columns == ["id"]
        assert key.doc_id_is_url is False

    def test_url_mode(self):
        s = RowKeySettings(_env_file=None, unique_key="url:string", doc_id_is_url=True)
        assert build_unique_key(s).doc_id_is_url is True

    def test_column_types_resolve_untyped_columns(self):
        s = RowKeySettings(_env_file=None, unique_key="id, name:string")
        key = build_unique_key(s, {"ID": SqlType.BIGINT})
        assert [c.column_type for c in key.columns] == [ColumnType.LONG, ColumnType.STRING]

    def test_empty_declaration_rejected(self):
        with pytest.raises(KeyDeclarationError):
            build_unique_key(RowKeySettings(_env_file=None))


class TestSettingsCache:
    def test_cached(self, monkeypatch):
        monkeypatch.setenv("DB_UNIQUE_KEY", "a:int")
        first = get_settings()
        monkeypatch.setenv("DB_UNIQUE_KEY", "b:int")
        assert get_settings() is first
        assert get_settings().unique_key == "a:int"

    def test_force_reload(self, monkeypatch):
        monkeypatch.setenv("DB_UNIQUE_KEY", "a:int")
        get_settings()
        monkeypatch.setenv("DB_UNIQUE_KEY", "b:int")
        assert get_settings(_force_reload=True).unique_key == "b:int"

    def test_clear(self, monkeypatch):
        monkeypatch.setenv("DB_UNIQUE_KEY", "a:int")
        first = get_settings()
        clear_settings_cache()
        assert get_settings() is not first
