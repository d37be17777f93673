"""
Structured error types for rowkey.

Every failure the key codec can produce is a typed error carrying a
category, a retry flag, structured context and an optional chained cause.
Surrounding connector layers decide whether to skip a row, log, or refuse
to start based on the error type, never on message text.

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                        RowKeyError                            │
        │  (category, retryable, context, cause)                       │
        ├──────────────────────────────────────────────────────────────┤
        │                                                               │
        │  ConfigError            ValidationError      ParseError       │
        │  (CONFIG)               (VALIDATION)         (PARSE)          │
        │       │                      │                   │            │
        │  KeyDeclarationError    NullKeyColumnError   MalformedDocId   │
        │       │                 InvalidDocIdUrl      KeyValueParse    │
        │  UnsupportedColumnType                                        │
        │                                                               │
        │  DatabaseError          DatabaseConnectionError               │
        │  (DATABASE)             (DATABASE, retryable)                 │
        │       │                                                       │
        │  ColumnNotFoundError                                          │
        └──────────────────────────────────────────────────────────────┘

Taxonomy:
    - **Configuration errors** are fatal at startup: malformed declaration,
      unknown type keyword, duplicate column, unresolved type, URL mode with
      the wrong column shape, unknown parameter column.
    - **NullKeyColumnError** is per-row at encode time. The row must be
      skipped or reported, never encoded with a placeholder.
    - **MalformedDocIdError** is raised at decode time for a wrong field
      count or a dangling escape character. The id must be rejected.
    - **InvalidDocIdUrlError** is raised in URL mode only.
    - **KeyValueParseError** is raised at bind time when a decoded field does
      not parse as its column type.

Examples:
    >>> error = NullKeyColumnError("numnum")
    >>> error.retryable
    False
    >>> error.context.column
    'numnum'
    >>> error.to_dict()["category"]
    'VALIDATION'
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    # Configuration errors (never retryable)
    CONFIG = "CONFIG"             # Declaration syntax, types, parameter lists

    # Data errors
    VALIDATION = "VALIDATION"     # NULL key values, bad URLs
    PARSE = "PARSE"               # Malformed ids, unparsable values

    # Infrastructure errors
    DATABASE = "DATABASE"         # Connections, missing columns

    # Internal errors
    INTERNAL = "INTERNAL"         # Bugs, unexpected state
    UNKNOWN = "UNKNOWN"           # Uncategorized errors


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        column: Key column the error concerns
        column_type: Logical or source type involved
        parameter_list: Configuration name of the parameter list involved
        doc_id: Document id being decoded
        value: Offending raw value, as text
        metadata: Additional key-value pairs
    """

    column: str | None = None
    column_type: str | None = None
    parameter_list: str | None = None
    doc_id: str | None = None
    value: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["column", "column_type", "parameter_list", "doc_id", "value"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class RowKeyError(Exception):
    """
    Base exception for all rowkey errors.

    Subclasses set ``default_category`` and ``default_retryable`` to give
    sensible defaults for their domain.

    Examples:
        >>> error = RowKeyError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.with_context(column="id").context.column
        'id'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> RowKeyError:
        """
        Add context to this error (fluent API).

        Usage:
            raise KeyValueParseError("Bad value").with_context(
                column="numnum",
                doc_id="abc/def",
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(RowKeyError):
    """
    Configuration error.

    Never retryable - configuration must be fixed.
    """

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class KeyDeclarationError(ConfigError):
    """Unique key declaration or parameter list is invalid."""

    def __init__(self, message: str, *, column: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.column = column
        if column is not None:
            self.context.column = column


class UnsupportedColumnTypeError(KeyDeclarationError):
    """A source column type cannot be used in a unique key."""

    def __init__(self, column: str, sql_type: str, message: str | None = None):
        self.sql_type = sql_type
        super().__init__(
            message
            or f"Invalid unique key SQL type {sql_type} for column '{column}': "
            "type not supported for unique key.",
            column=column,
        )
        self.context.column_type = sql_type


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(RowKeyError):
    """
    Row data validation error.

    Never retryable - the row must be fixed or skipped.
    """

    default_category = ErrorCategory.VALIDATION
    default_retryable = False


class NullKeyColumnError(ValidationError):
    """A unique key column is SQL NULL for the row being encoded."""

    def __init__(self, column: str, message: str | None = None):
        self.column = column
        super().__init__(message or f"Column '{column}' of the unique key is null.")
        self.context.column = column


class InvalidDocIdUrlError(ValidationError):
    """The sole key column is not a syntactically valid absolute URI."""

    def __init__(self, value: str, reason: str, *, cause: Exception | None = None):
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid doc id URL {value!r}: {reason}", cause=cause)
        self.context.value = value


# =============================================================================
# PARSE ERRORS
# =============================================================================


class ParseError(RowKeyError):
    """Error parsing an id or a value."""

    default_category = ErrorCategory.PARSE
    default_retryable = False


class MalformedDocIdError(ParseError):
    """The doc id cannot have been produced by this codec."""

    def __init__(self, message: str, *, doc_id: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.doc_id = doc_id
        if doc_id is not None:
            self.context.doc_id = doc_id


class KeyValueParseError(ParseError):
    """A value cannot be read or parsed as its declared column type."""

    def __init__(
        self,
        column: str | None,
        column_type: str,
        value: Any,
        *,
        cause: Exception | None = None,
    ):
        self.column = column
        self.column_type = column_type
        self.value = value
        target = f"column '{column}'" if column else "unique key value"
        super().__init__(
            f"Cannot parse {value!r} as {column_type} for {target}",
            cause=cause,
        )
        self.context.column = column
        self.context.column_type = column_type
        self.context.value = str(value)


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class DatabaseError(RowKeyError):
    """Database query or schema error."""

    default_category = ErrorCategory.DATABASE
    default_retryable = False


class ColumnNotFoundError(DatabaseError):
    """A key column is missing from a row or a table."""

    def __init__(self, column: str, where: str = "row"):
        self.column = column
        super().__init__(f"Column '{column}' not found in {where}")
        self.context.column = column


class DatabaseConnectionError(DatabaseError):
    """Database connection error."""

    default_retryable = True


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, RowKeyError):
        return error.retryable
    return isinstance(error, (ConnectionError, TimeoutError))


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, RowKeyError):
        return error.category
    if isinstance(error, ValueError):
        return ErrorCategory.VALIDATION
    if isinstance(error, (KeyError, AttributeError)):
        return ErrorCategory.CONFIG
    return ErrorCategory.UNKNOWN


__all__ = [
    # Category enum
    "ErrorCategory",
    # Context
    "ErrorContext",
    # Base
    "RowKeyError",
    # Config
    "ConfigError",
    "KeyDeclarationError",
    "UnsupportedColumnTypeError",
    # Validation
    "ValidationError",
    "NullKeyColumnError",
    "InvalidDocIdUrlError",
    # Parse
    "ParseError",
    "MalformedDocIdError",
    "KeyValueParseError",
    # Database
    "DatabaseError",
    "ColumnNotFoundError",
    "DatabaseConnectionError",
    # Utilities
    "is_retryable",
    "categorize_error",
]
