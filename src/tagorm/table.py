"""Table model - the in-memory relation built from a type descriptor.

Architecture::

    TypeDescriptor ──► TableModel.build() ──► TableModel
                                               ├── fields            (ordered Field list)
                                               ├── primary_key       (≤ 1 Field)
                                               ├── unique_fields     (UNIQUE (col))
                                               ├── composite_indexes (UNIQUE(col, col))
                                               ├── foreign_keys      (outgoing ForeignKey records)
                                               └── render_state      (Unrendered → Rendered)

Foreign keys are described on the *parent* model: a field whose type is
another model (or a list of them) and whose tag is
``foreignKey:<child column>-><parent column>`` declares that the child
table's column references this table.  The resulting ``ALTER TABLE`` runs
against the child table, so the registry keys foreign keys by child table.
"""

from __future__ import annotations

import dataclasses
import typing
from dataclasses import dataclass, field
from typing import Any

from tagorm.descriptor import FieldDescriptor, TypeDescriptor, describe, unwrap_optional
from tagorm.dialect import Dialect
from tagorm.errors import DuplicateConstraintError, InvalidForeignKeyError, MultiplePrimaryKeysError
from tagorm.naming import snake_case, table_name_for
from tagorm.tags import (
    AUTO_INCREMENT,
    FOREIGN_KEY,
    ON_DELETE,
    ON_UPDATE,
    PRIMARY_KEY,
    TYPE,
    UNIQUE,
    UNIQUE_INDEX,
)


@dataclass
class Field:
    """One model member mapped to one column."""

    name: str
    python_type: Any
    tags: dict[str, str] = field(default_factory=dict)
    inferred_type: str = ""

    @classmethod
    def from_descriptor(cls, descriptor: FieldDescriptor) -> Field:
        return cls(
            name=descriptor.name,
            python_type=descriptor.python_type,
            tags=dict(descriptor.tags),
            inferred_type=descriptor.sql_type_hint,
        )

    @property
    def column_name(self) -> str:
        return snake_case(self.name)

    @property
    def sql_type(self) -> str:
        """Explicit ``type`` tag when present, else the inferred type."""
        return self.tags.get(TYPE) or self.inferred_type

    @property
    def is_primary_key(self) -> bool:
        return PRIMARY_KEY in self.tags

    @property
    def is_foreign_key(self) -> bool:
        return FOREIGN_KEY in self.tags

    @property
    def is_auto_increment(self) -> bool:
        return AUTO_INCREMENT in self.tags


@dataclass(frozen=True)
class ForeignKey:
    """Outgoing reference from a child table to a parent table."""

    constraint_name: str
    column: str
    table: str
    parent_table: str
    parent_column: str
    on_delete: str = ""
    on_update: str = ""

    def to_sql(self) -> str:
        sql = (
            f"ALTER TABLE {self.table} ADD CONSTRAINT {self.constraint_name} "
            f"FOREIGN KEY ({snake_case(self.column)}) "
            f"REFERENCES {self.parent_table} ({snake_case(self.parent_column)})"
        )
        if self.on_delete:
            sql += f" ON DELETE {self.on_delete}"
        if self.on_update:
            sql += f" ON UPDATE {self.on_update}"
        return sql


class ForeignKeyRegistry:
    """Foreign keys keyed by referencing (child) table, unique by constraint name.

    Owned by one migration session; nothing here is process-wide.
    """

    def __init__(self) -> None:
        self._by_table: dict[str, list[ForeignKey]] = {}
        self._names: set[str] = set()

    def __contains__(self, constraint_name: object) -> bool:
        return constraint_name in self._names

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> typing.Iterator[ForeignKey]:
        for fks in self._by_table.values():
            yield from fks

    def register(self, fk: ForeignKey) -> None:
        """Add ``fk``; raises :class:`DuplicateConstraintError` on a name clash."""
        if fk.constraint_name in self._names:
            raise DuplicateConstraintError(fk.constraint_name)
        self._names.add(fk.constraint_name)
        self._by_table.setdefault(fk.table, []).append(fk)

    def add(self, fk: ForeignKey) -> bool:
        """Add ``fk`` unless its constraint name is known.  Returns whether it was added."""
        if fk.constraint_name in self._names:
            return False
        self.register(fk)
        return True

    def for_table(self, table_name: str) -> list[ForeignKey]:
        return list(self._by_table.get(table_name, []))

    def tables(self) -> list[str]:
        return list(self._by_table)


def _referenced_model(tp: Any) -> Any:
    """Model class behind a foreign-key field (``Child``, ``Child | None``, ``list[Child]``)."""
    tp = unwrap_optional(tp)
    if typing.get_origin(tp) in (list, tuple, set, frozenset):
        args = typing.get_args(tp)
        tp = unwrap_optional(args[0]) if args else tp
    return tp


def foreign_key_for(table_name: str, f: Field) -> ForeignKey:
    """Build the ForeignKey record declared by field ``f`` of ``table_name``."""
    definition = f.tags[FOREIGN_KEY]
    parts = definition.split("->")
    if len(parts) != 2 or not all(p.strip() for p in parts):
        raise InvalidForeignKeyError(definition, table=table_name, field_name=f.name)

    target = _referenced_model(f.python_type)
    if not (isinstance(target, type) and dataclasses.is_dataclass(target)):
        raise InvalidForeignKeyError(definition, table=table_name, field_name=f.name).with_context(
            reason=f"referenced type {target!r} is not a model"
        )

    child_column, parent_column = (p.strip() for p in parts)
    return ForeignKey(
        constraint_name=f"{snake_case(table_name)}_{snake_case(f.name)}_fkey",
        column=child_column,
        table=table_name_for(target),
        parent_table=snake_case(table_name),
        parent_column=parent_column,
        on_delete=f.tags.get(ON_DELETE, ""),
        on_update=f.tags.get(ON_UPDATE, ""),
    )


@dataclass
class TableModel:
    """One relation: ordered fields plus resolved key and uniqueness constraints."""

    table_name: str
    fields: list[Field]
    model: type | None = None
    primary_key: Field | None = None
    unique_fields: list[Field] = field(default_factory=list)
    composite_indexes: dict[str, list[Field]] = field(default_factory=dict)
    foreign_keys: list[ForeignKey] = field(default_factory=list)
    render_state: Any = None

    def __post_init__(self) -> None:
        if self.render_state is None:
            from tagorm.ddl import Unrendered

            self.render_state = Unrendered()

    @classmethod
    def build(cls, obj: Any, table_name: str | None = None) -> TableModel:
        """Build a fresh table model from a model class, instance or descriptor.

        Raises:
            NotAStructError: ``obj`` is not a dataclass model.
            MultiplePrimaryKeysError: more than one field is tagged ``primaryKey``.
            InvalidForeignKeyError: a ``foreignKey`` tag is malformed.
        """
        descriptor = obj if isinstance(obj, TypeDescriptor) else describe(obj)
        name = table_name or descriptor.table_name
        fields = [Field.from_descriptor(fd) for fd in descriptor.fields]
        table = cls(table_name=name, fields=fields, model=descriptor.model)

        primary_keys = [f for f in fields if f.is_primary_key]
        if len(primary_keys) > 1:
            raise MultiplePrimaryKeysError(name, [f.name for f in primary_keys])
        table.primary_key = primary_keys[0] if primary_keys else None

        for f in fields:
            if UNIQUE in f.tags:
                table.unique_fields.append(f)
            index_name = f.tags.get(UNIQUE_INDEX)
            if index_name is not None:
                table.composite_indexes.setdefault(index_name, []).append(f)
            if f.is_foreign_key:
                table.foreign_keys.append(foreign_key_for(name, f))

        return table

    @property
    def column_fields(self) -> list[Field]:
        """Fields that map to a column of this table (foreign-key fields do not)."""
        return [f for f in self.fields if not f.is_foreign_key]

    def get_field(self, name: str) -> Field:
        for f in self.fields:
            if f.name == name:
                return f
        raise KeyError(name)

    def create_statement(self, dialect: Dialect, registry: ForeignKeyRegistry | None = None) -> str:
        """Render ``CREATE TABLE`` once; later calls return the same text."""
        from tagorm.ddl import render

        self.render_state = render(self.render_state, self, dialect, registry)
        return self.render_state.text


__all__ = [
    "Field",
    "ForeignKey",
    "ForeignKeyRegistry",
    "TableModel",
    "foreign_key_for",
]
