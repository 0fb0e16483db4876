"""DDL generation - ``CREATE TABLE IF NOT EXISTS`` and foreign-key ``ALTER TABLE``.

Rendering a table is a one-shot transition::

    Unrendered ──render()──► Rendered(text) ──render()──► Rendered(text)

:func:`render` never mutates its inputs and returns the ``Rendered`` state
unchanged when handed one, so the text a table model produced first is
the text it keeps producing, whatever happens to its field list later.
Foreign keys are registered into the caller's registry on the
``Unrendered → Rendered`` transition only.

Output shape::

    CREATE TABLE IF NOT EXISTS users (
      id SERIAL,
      name VARCHAR(255) not null,
      PRIMARY KEY (id),
      UNIQUE (email),
      UNIQUE(first_name, last_name)
    );
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from tagorm.dialect import Dialect, PostgreSQLDialect
from tagorm.errors import TypeResolutionError
from tagorm.table import Field, ForeignKey, ForeignKeyRegistry, TableModel
from tagorm.tags import AUTO_INCREMENT, CHECK, CONSTRAINT_KEYS, SILENT_KEYS

INDENT = "  "


@dataclass(frozen=True)
class Unrendered:
    """Table model whose CREATE statement has not been produced yet."""


@dataclass(frozen=True)
class Rendered:
    """Table model with its CREATE statement fixed."""

    text: str


RenderState = Union[Unrendered, Rendered]


def render_column(f: Field, dialect: Dialect, table_name: str | None = None) -> str:
    """``<column> <TYPE>[ modifiers...]`` for one field, without indentation.

    Raises:
        TypeResolutionError: no SQL type was inferred and no ``type`` tag is set.
    """
    sql_type = f.sql_type
    if not sql_type:
        type_name = getattr(f.python_type, "__name__", None) or str(f.python_type)
        raise TypeResolutionError(f.name, table=table_name, type_name=type_name)

    parts = [f"{f.column_name} {dialect.render_type(sql_type, f.is_auto_increment)}"]

    for key, value in f.tags.items():
        if key in SILENT_KEYS:
            continue
        if key == AUTO_INCREMENT:
            modifier = dialect.auto_increment_modifier()
            if modifier:
                parts.append(modifier)
        elif key == CHECK:
            parts.append(f"CHECK ({value})")
        elif key in CONSTRAINT_KEYS:
            # table-level: unique, uniqueIndex, foreignKey and its actions
            continue
        elif value:
            parts.append(f"{key} {value}")
        else:
            parts.append(key)

    return " ".join(parts)


def render_create_table(table: TableModel, dialect: Dialect) -> str:
    """Render the CREATE statement for ``table`` (no caching, no registration)."""
    lines = [render_column(f, dialect, table.table_name) for f in table.column_fields]

    if table.primary_key is not None:
        lines.append(f"PRIMARY KEY ({table.primary_key.column_name})")

    for f in table.unique_fields:
        lines.append(f"UNIQUE ({f.column_name})")

    for group in table.composite_indexes.values():
        if group:
            lines.append(f"UNIQUE({', '.join(f.column_name for f in group)})")

    body = ",\n".join(INDENT + line for line in lines)
    return f"CREATE TABLE IF NOT EXISTS {table.table_name} (\n{body}\n);"


def render(
    state: RenderState,
    table: TableModel,
    dialect: Dialect,
    registry: ForeignKeyRegistry | None = None,
) -> Rendered:
    """Advance ``state`` to ``Rendered``.

    Already-rendered states come back as-is.  On the first render each of
    the table's foreign keys is added to ``registry`` unless a constraint
    with the same name is already there.
    """
    if isinstance(state, Rendered):
        return state

    text = render_create_table(table, dialect)
    if registry is not None:
        for fk in table.foreign_keys:
            registry.add(fk)
    return Rendered(text)


def render_foreign_key(fk: ForeignKey) -> str:
    """``ALTER TABLE <child> ADD CONSTRAINT ... FOREIGN KEY ... REFERENCES ...``."""
    return fk.to_sql()


def alter_statements(registry: ForeignKeyRegistry, table_name: str) -> list[str]:
    """Foreign-key statements to run after ``table_name`` has been created."""
    return [render_foreign_key(fk) for fk in registry.for_table(table_name)]


def schema(obj: Any, dialect: Dialect | None = None) -> str:
    """CREATE statement for a model class or instance."""
    return TableModel.build(obj).create_statement(dialect or PostgreSQLDialect())


__all__ = [
    "Unrendered",
    "Rendered",
    "RenderState",
    "render_column",
    "render_create_table",
    "render",
    "render_foreign_key",
    "alter_statements",
    "schema",
]
