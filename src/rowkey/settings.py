"""Connector key settings.

The unique key is configured through four settings, read from ``DB_*``
environment variables or a ``.env`` file:

    ::

        DB_UNIQUE_KEY="id:int, name:string"
        DB_DOC_ID_IS_URL=false
        DB_SINGLE_DOC_CONTENT_SQL_PARAMETERS="id, name"
        DB_ACL_SQL_PARAMETERS="id"

Examples:
    >>> settings = RowKeySettings(unique_key="id:int, name:string")
    >>> build_unique_key(settings).column_names
    ['id', 'name']
"""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from rowkey.column_types import SqlType
from rowkey.unique_key import UniqueKey, UniqueKeyBuilder


class RowKeySettings(BaseSettings):
    """Unique key configuration for one connector."""

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Unique key ───────────────────────────────────────────────
    unique_key: str = Field(default="", description="Key declaration, e.g. 'id:int, name:string'")
    doc_id_is_url: bool = Field(default=False, description="The single key column is the doc URL")
    single_doc_content_sql_parameters: str = Field(
        default="",
        description="Key columns bound into the content query; empty means all key columns",
    )
    acl_sql_parameters: str = Field(
        default="",
        description="Key columns bound into the ACL query; empty means all key columns",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = Field(default="INFO")


def build_unique_key(
    settings: RowKeySettings,
    column_types: Mapping[str, SqlType] | None = None,
) -> UniqueKey:
    """Build the :class:`UniqueKey` described by ``settings``.

    ``column_types`` resolves key columns declared without a type, usually
    from :func:`rowkey.reflection.reflect_column_types`.
    """
    builder = UniqueKeyBuilder(settings.unique_key)
    if column_types:
        builder.add_column_types(column_types)
    return (
        builder.set_doc_id_is_url(settings.doc_id_is_url)
        .set_content_sql_columns(settings.single_doc_content_sql_parameters)
        .set_acl_sql_columns(settings.acl_sql_parameters)
        .build()
    )


_settings_cache: dict[str, RowKeySettings] = {}


def get_settings(*, _force_reload: bool = False) -> RowKeySettings:
    """Load, validate, and cache a :class:`RowKeySettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]
    settings = RowKeySettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()


__all__ = [
    "RowKeySettings",
    "build_unique_key",
    "get_settings",
    "clear_settings_cache",
]
