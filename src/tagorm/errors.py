"""
Structured error types for tagorm.

Every failure raised by schema derivation, SQL generation, filter merging
or statement execution is an :class:`OrmError`.  Errors carry a category,
an :class:`ErrorContext` (table, field, statement) and an optional chained
cause so callers can log them as structured events.

Manifesto:
    - **Typed Error Hierarchy:** One class per failure the caller can act on
    - **Synchronous Propagation:** Generation errors surface to the caller
      immediately, nothing is retried
    - **Rich Context:** Errors carry the table/field/statement involved
    - **Error Chaining:** Driver failures are preserved as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                          OrmError                                │
        │             (category, context, cause, to_dict)                  │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  SchemaError              QueryError          DatabaseError      │
        │  (SCHEMA)                 (QUERY)             (DATABASE)         │
        │     │                        │                    │              │
        │  NotAStructError          MissingFilterError   ExecutionError    │
        │  TypeResolutionError                                             │
        │  MultiplePrimaryKeysError                                        │
        │  InvalidForeignKeyError   ConfigError                            │
        │  DuplicateConstraintError (CONFIG)                               │
        │                              │                                   │
        │                           InvalidDriverError                     │
        │                           MissingDSNError                        │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    >>> error = TypeResolutionError("birth_date", table="users")
    >>> error.category
    <ErrorCategory.SCHEMA: 'SCHEMA'>
    >>> error.context.table
    'users'

    >>> try:
    ...     raise OSError("connection reset")
    ... except OSError as e:
    ...     raise ExecutionError("insert failed", cause=e)
    Traceback (most recent call last):
    ...
    ExecutionError: insert failed

Guardrails:
    ❌ DON'T: Raise bare ``Exception`` from generation code
    ✅ DO: Raise the narrowest OrmError subclass

    ❌ DON'T: Swallow the driver exception when wrapping it
    ✅ DO: Pass it as ``cause=`` so the traceback keeps it

Tags:
    error-handling, exception-hierarchy, error-context, tagorm
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and log routing."""

    SCHEMA = "SCHEMA"             # Model shape, tags, type inference
    VALIDATION = "VALIDATION"     # Caller-supplied values
    QUERY = "QUERY"               # Statement building, filters
    DATABASE = "DATABASE"         # Driver / server failures
    CONFIG = "CONFIG"             # Settings, drivers, DSNs
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        table: Table the failing operation targeted
        field: Model field involved, if any
        statement: SQL text that was being built or executed
        metadata: Additional key-value pairs
    """

    table: str | None = None
    field: str | None = None
    statement: str | None = None
    metadata: dict[str, Any] = dataclasses.field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result: dict[str, Any] = {}
        for key in ("table", "field", "statement"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class OrmError(Exception):
    """
    Base exception for all tagorm errors.

    Subclasses set ``default_category`` to classify themselves.  The
    original exception, when one exists, is chained through ``cause`` and
    ``__cause__``.

    Examples:
        >>> error = OrmError("something broke").with_context(table="users")
        >>> error.to_dict()["context"]
        {'table': 'users'}
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> OrmError:
        """
        Add context to this error (fluent API).

        Usage:
            raise SchemaError("bad tag").with_context(table="users", field="age")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
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
# SCHEMA ERRORS
# =============================================================================


class SchemaError(OrmError):
    """Model definition cannot be turned into a relation."""

    default_category = ErrorCategory.SCHEMA


class NotAStructError(SchemaError):
    """The value handed to the mapper is not a dataclass model."""

    def __init__(self, value: Any):
        self.value = value
        name = getattr(value, "__name__", None) or type(value).__name__
        super().__init__(f"{name} is not a struct")


class TypeResolutionError(SchemaError):
    """No SQL type could be inferred and no ``type`` tag was supplied."""

    def __init__(self, field_name: str, *, table: str | None = None, type_name: str | None = None):
        self.field_name = field_name
        self.type_name = type_name
        detail = f" of type {type_name}" if type_name else ""
        super().__init__(
            f"Cannot resolve SQL type for field {field_name!r}{detail}; add a 'type:' tag",
            context=ErrorContext(table=table, field=field_name),
        )


class MultiplePrimaryKeysError(SchemaError):
    """More than one field carries the ``primaryKey`` tag."""

    def __init__(self, table: str, fields: list[str]):
        self.fields = fields
        super().__init__(
            f"Table {table!r} declares more than one primary key: {', '.join(fields)}",
            context=ErrorContext(table=table),
        )


class InvalidForeignKeyError(SchemaError):
    """A ``foreignKey`` tag value is not of the form ``column->parentColumn``."""

    def __init__(self, definition: str, *, table: str | None = None, field_name: str | None = None):
        self.definition = definition
        super().__init__(
            f"Invalid foreign key definition: {definition}",
            context=ErrorContext(table=table, field=field_name),
        )


class DuplicateConstraintError(SchemaError):
    """A constraint with the same name is already registered."""

    def __init__(self, constraint_name: str):
        self.constraint_name = constraint_name
        super().__init__(f"Constraint already registered: {constraint_name}")


# =============================================================================
# QUERY ERRORS
# =============================================================================


class QueryError(OrmError):
    """Statement could not be built from the supplied inputs."""

    default_category = ErrorCategory.QUERY


class MissingFilterError(QueryError):
    """Update/delete/find invoked without a usable predicate filter."""


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class DatabaseError(OrmError):
    """Database-side failure."""

    default_category = ErrorCategory.DATABASE


class ExecutionError(DatabaseError):
    """The executor failed to run a statement; the driver error is the cause."""

    def __init__(
        self,
        message: str,
        *,
        statement: str | None = None,
        table: str | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(
            message,
            context=ErrorContext(table=table, statement=statement),
            cause=cause,
        )


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(OrmError):
    """Configuration error.  Must be fixed before connecting."""

    default_category = ErrorCategory.CONFIG


class InvalidDriverError(ConfigError):
    """Driver name is empty or not supported for execution."""

    def __init__(self, driver: str | None, message: str | None = None):
        self.driver = driver
        super().__init__(message or "invalid driver")


class MissingDSNError(ConfigError):
    """No database URL was configured."""

    def __init__(self) -> None:
        super().__init__("dataSourceName is empty")


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "OrmError",
    "SchemaError",
    "NotAStructError",
    "TypeResolutionError",
    "MultiplePrimaryKeysError",
    "InvalidForeignKeyError",
    "DuplicateConstraintError",
    "QueryError",
    "MissingFilterError",
    "DatabaseError",
    "ExecutionError",
    "ConfigError",
    "InvalidDriverError",
    "MissingDSNError",
]
