"""DML generation: INSERT, UPDATE, DELETE and SELECT statements.

Every builder returns a :class:`~tagorm.query.Statement` pairing the SQL
text with the values bound to its placeholders, in placeholder order.
Foreign-key fields never contribute a column or a value.

Bound values pass through the value's ``to_db()`` hook when it has one,
so :class:`~tagorm.datatypes.JSON` reaches the driver as text and
:class:`~tagorm.datatypes.Date` as a plain ``datetime.date``.  Plain dicts
are sent as JSON text too.
"""

from __future__ import annotations

import json
from typing import Any

from tagorm.descriptor import is_zero
from tagorm.dialect import Dialect, PostgreSQLDialect
from tagorm.errors import QueryError
from tagorm.query import QueryFilter, Statement, merge_filter, require_filter
from tagorm.table import TableModel


def bind_value(value: Any) -> Any:
    """Convert ``value`` through its ``to_db()`` hook; a plain dict becomes JSON text."""
    to_db = getattr(value, "to_db", None)
    if callable(to_db):
        return to_db()
    if isinstance(value, dict):
        return json.dumps(value)
    return value


def columns(obj: Any) -> tuple[list[str], list[str]]:
    """Column names and table-qualified column names, foreign keys excluded.

    >>> columns(User)
    (['id', 'name'], ['users.id', 'users.name'])
    """
    table = TableModel.build(obj)
    names = [f.column_name for f in table.column_fields]
    return names, [f"{table.table_name}.{name}" for name in names]


def insert_statement(instance: Any, dialect: Dialect | None = None) -> Statement:
    """``INSERT INTO <t> (<cols>) VALUES (...)`` for one model instance.

    A zero-valued primary key (``None``, ``0``, ``""``, nil UUID) is left out
    so the database assigns it; any other primary key value is inserted.
    """
    dialect = dialect or PostgreSQLDialect()
    table = TableModel.build(instance)

    names: list[str] = []
    values: list[Any] = []
    for f in table.column_fields:
        value = getattr(instance, f.name)
        if f.is_primary_key and is_zero(value):
            continue
        names.append(f.column_name)
        values.append(bind_value(value))

    if names:
        text = (
            f"INSERT INTO {table.table_name} ({', '.join(names)}) "
            f"VALUES ({dialect.placeholders(len(values))})"
        )
    else:
        text = f"INSERT INTO {table.table_name} DEFAULT VALUES"
    return Statement(text + dialect.returning_clause(), values)


def update_statement(
    instance: Any,
    query_filter: QueryFilter | None,
    dialect: Dialect | None = None,
) -> Statement:
    """``UPDATE <t> SET a = $1, ... WHERE <filter>`` for one model instance.

    Every non-key column is written, in declaration order.  The filter's
    placeholders are renumbered to follow the SET values.

    Raises:
        MissingFilterError: ``query_filter`` is missing, has no clause or no args.
        QueryError: the model has no column besides its keys.
    """
    dialect = dialect or PostgreSQLDialect()
    query_filter = require_filter(query_filter)
    table = TableModel.build(instance)

    assignments: list[str] = []
    values: list[Any] = []
    for f in table.column_fields:
        if f.is_primary_key:
            continue
        values.append(bind_value(getattr(instance, f.name)))
        assignments.append(f"{f.column_name} = {dialect.placeholder(len(values))}")

    if not assignments:
        raise QueryError(f"{table.table_name} has no columns to update").with_context(
            table=table.table_name
        )

    text = f"UPDATE {table.table_name} SET {', '.join(assignments)}"
    statement = merge_filter(text, values, query_filter)
    return Statement(statement.text + dialect.returning_clause(), statement.values)


def delete_statement(
    obj: Any,
    query_filter: QueryFilter | None,
    dialect: Dialect | None = None,  # noqa: ARG001
) -> Statement:
    """``DELETE FROM <t>  WHERE <filter>``; the filter is mandatory."""
    query_filter = require_filter(query_filter)
    table = TableModel.build(obj)
    return merge_filter(f"DELETE FROM {table.table_name} ", [], query_filter)


def select_statement(
    obj: Any,
    query_filter: QueryFilter | None = None,
    dialect: Dialect | None = None,  # noqa: ARG001
) -> Statement:
    """``SELECT <t>.<c>, ... FROM <t> `` plus an optional filter."""
    table = TableModel.build(obj)
    qualified = [f"{table.table_name}.{f.column_name}" for f in table.column_fields]
    return merge_filter(f"SELECT {', '.join(qualified)} FROM {table.table_name} ", [], query_filter)


__all__ = [
    "bind_value",
    "columns",
    "insert_statement",
    "update_statement",
    "delete_statement",
    "select_statement",
]
