"""SQL dialect abstraction for schema and statement generation.

Provides a ``Dialect`` protocol and concrete implementations for the
database families tagorm knows about.  The DDL and DML generators ask the
dialect for every backend-specific fragment (placeholders, column type
spelling, auto-increment, ``RETURNING``) so the generators themselves stay
free of ``if dialect == ...`` branches.

Manifesto:
    Only PostgreSQL is fully supported for execution.  MySQL and SQLite are
    modeled far enough to render DDL/DML text, which keeps the generators
    honest about where dialects differ.

    - **One interface:** Dialect protocol for all SQL fragments
    - **Stateless:** Dialect instances are shared singletons
    - **Extensible:** register_dialect() for custom backends / test doubles

Compatibility table::

    ┌──────────────┬────────────┬────────────┬─────────────┐
    │              │ postgres   │ mysql      │ sqlite      │
    ├──────────────┼────────────┼────────────┼─────────────┤
    │ placeholder  │ $1, $2     │ %s, %s     │ ?, ?        │
    │ autoIncrement│ SERIAL     │ <TYPE>     │ <TYPE>      │
    │              │            │ AUTO_INCR. │ AUTOINCR.   │
    │ json         │ JSONB      │ JSON       │ JSON        │
    │ RETURNING *  │ yes        │ no         │ no          │
    │ execution    │ asyncpg    │ -          │ -           │
    └──────────────┴────────────┴────────────┴─────────────┘

Examples:
    >>> from tagorm.dialect import get_dialect
    >>> d = get_dialect("postgres")
    >>> d.placeholders(3)
    '$1, $2, $3'
    >>> d.render_type("json")
    'JSONB'

Tags:
    dialect, sql, ddl, dml, tagorm
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Dialect(Protocol):
    """SQL dialect contract.

    Every method returns a SQL fragment valid for the target database.
    """

    @property
    def name(self) -> str:
        """Dialect name (e.g. ``'postgres'``)."""
        ...

    @property
    def supports_returning(self) -> bool:
        """Whether ``INSERT``/``UPDATE`` accept a ``RETURNING`` clause."""
        ...

    # -- Placeholder generation --------------------------------------------

    def placeholder(self, index: int) -> str:
        """Single positional placeholder (1-based index)."""
        ...

    def placeholders(self, count: int, start: int = 1) -> str:
        """Comma-separated placeholder list starting at ``start``."""
        ...

    # -- DDL helpers -------------------------------------------------------

    def render_type(self, sql_type: str, auto_increment: bool = False) -> str:
        """Column type as written in ``CREATE TABLE``."""
        ...

    def auto_increment_modifier(self) -> str:
        """Modifier text written after the type for ``autoIncrement`` columns.

        Empty when the type itself already encodes it (PostgreSQL ``SERIAL``).
        """
        ...

    # -- DML helpers -------------------------------------------------------

    def returning_clause(self) -> str:
        """Suffix appended to insert/update statements, or ``''``."""
        ...


# =========================================================================
# Concrete Dialect Implementations
# =========================================================================


class PostgreSQLDialect:
    """PostgreSQL dialect - ``$n`` placeholders (asyncpg), ``SERIAL``, ``JSONB``."""

    @property
    def name(self) -> str:
        return "postgres"

    @property
    def supports_returning(self) -> bool:
        return True

    def placeholder(self, index: int) -> str:
        return f"${index}"

    def placeholders(self, count: int, start: int = 1) -> str:
        return ", ".join(f"${i}" for i in range(start, start + count))

    def render_type(self, sql_type: str, auto_increment: bool = False) -> str:
        if auto_increment:
            return "SERIAL"
        if sql_type.lower() == "json":
            return "JSONB"
        return sql_type.upper()

    def auto_increment_modifier(self) -> str:
        return ""

    def returning_clause(self) -> str:
        return " RETURNING *"


class MySQLDialect:
    """MySQL dialect - ``%s`` placeholders, ``AUTO_INCREMENT``."""

    @property
    def name(self) -> str:
        return "mysql"

    @property
    def supports_returning(self) -> bool:
        return False

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "%s"

    def placeholders(self, count: int, start: int = 1) -> str:  # noqa: ARG002
        return ", ".join("%s" for _ in range(count))

    def render_type(self, sql_type: str, auto_increment: bool = False) -> str:  # noqa: ARG002
        return sql_type.upper()

    def auto_increment_modifier(self) -> str:
        return "AUTO_INCREMENT"

    def returning_clause(self) -> str:
        return ""


class SQLiteDialect:
    """SQLite dialect - ``?`` placeholders, ``AUTOINCREMENT``."""

    @property
    def name(self) -> str:
        return "sqlite"

    @property
    def supports_returning(self) -> bool:
        return False

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "?"

    def placeholders(self, count: int, start: int = 1) -> str:  # noqa: ARG002
        return ", ".join("?" for _ in range(count))

    def render_type(self, sql_type: str, auto_increment: bool = False) -> str:  # noqa: ARG002
        return sql_type.upper()

    def auto_increment_modifier(self) -> str:
        return "AUTOINCREMENT"

    def returning_clause(self) -> str:
        return ""


# =========================================================================
# Registry / Factory
# =========================================================================

# Pre-instantiated singletons (dialects are stateless)
_DIALECTS: dict[str, Dialect] = {
    "postgres": PostgreSQLDialect(),
    "postgresql": PostgreSQLDialect(),  # alias
    "mysql": MySQLDialect(),
    "sqlite": SQLiteDialect(),
}


def get_dialect(name: str) -> Dialect:
    """Get a dialect by database type name.

    Args:
        name: One of ``'postgres'``, ``'postgresql'``, ``'mysql'``, ``'sqlite'``.

    Returns:
        Pre-instantiated :class:`Dialect` for the requested backend.

    Raises:
        ValueError: If ``name`` is not recognised.
    """
    key = name.lower()
    if key not in _DIALECTS:
        raise ValueError(
            f"Unknown dialect '{name}'. "
            f"Supported: {sorted(set(_DIALECTS) - {'postgresql'})}"
        )
    return _DIALECTS[key]


def register_dialect(name: str, dialect: Dialect) -> None:
    """Register a custom dialect implementation.

    Args:
        name: Lookup key (lower-cased automatically).
        dialect: Instance implementing :class:`Dialect`.
    """
    _DIALECTS[name.lower()] = dialect


__all__ = [
    "Dialect",
    "PostgreSQLDialect",
    "MySQLDialect",
    "SQLiteDialect",
    "get_dialect",
    "register_dialect",
]
