"""Database types and configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class DatabaseType(str, Enum):
    """Supported database types."""

    SQLITE = "sqlite"


@dataclass
class DatabaseConfig:
    """Configuration for a database connection."""

    db_type: DatabaseType = DatabaseType.SQLITE

    # SQLite
    path: str | None = None

    # Options
    connect_timeout: float = 5.0
    readonly: bool = False

    # Extra options (driver-specific)
    options: dict[str, Any] = field(default_factory=dict)


__all__ = [
    "DatabaseType",
    "DatabaseConfig",
]
