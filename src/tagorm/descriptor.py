"""Type descriptors - static field metadata for model classes.

A model is a dataclass whose fields optionally carry an ORM tag string
(see :mod:`tagorm.tags`).  Its :class:`TypeDescriptor` is computed at
registration time and reused by every schema derivation afterwards::

    @model
    class User:
        id: int = column("primaryKey;autoIncrement", default=0)
        name: str = column("not null", default="")

    describe(User).fields[0].tags
    # {'primaryKey': '', 'autoIncrement': ''}

``@model`` applies :func:`dataclasses.dataclass` when the class is not one
already.  Plain dataclasses work too; their descriptor is built and cached
the first time :func:`describe` sees them.

A model may refer to a model declared later in the same module.  Until
that name exists its descriptor is not cached, and the first
:func:`describe` after the module finishes loading resolves it.
"""

from __future__ import annotations

import dataclasses
import datetime as _dt
import types
import typing
import uuid
from dataclasses import dataclass
from typing import Any, TypeVar, Union

from tagorm.errors import NotAStructError
from tagorm.naming import table_name_for
from tagorm.tags import FOREIGN_KEY, PRIMARY_KEY, TAG_METADATA_KEY, parse_tags

T = TypeVar("T")

DESCRIPTOR_ATTR = "__tagorm_descriptor__"

_SCALAR_TYPES: dict[type, str] = {
    str: "varchar(255)",
    int: "integer",
    float: "real",
    bool: "boolean",
    bytes: "bytea",
    uuid.UUID: "uuid",
    dict: "json",
}

_ARRAY_TYPES: dict[type, str] = {
    str: "text[]",
    int: "integer[]",
    float: "real[]",
    bool: "boolean[]",
    bytes: "bytea[]",
}


@dataclass(frozen=True)
class FieldDescriptor:
    """One public member of a model, as declared."""

    name: str
    python_type: Any
    tags: dict[str, str]

    @property
    def type_name(self) -> str:
        tp = self.python_type
        return getattr(tp, "__name__", None) or str(tp)

    @property
    def sql_type_hint(self) -> str:
        """Inferred SQL type, ``''`` when the type is not mapped."""
        return resolve_sql_type(self.python_type)

    @property
    def is_primary_key(self) -> bool:
        return PRIMARY_KEY in self.tags

    @property
    def is_foreign_key(self) -> bool:
        return FOREIGN_KEY in self.tags


@dataclass(frozen=True)
class TypeDescriptor:
    """Static description of a model class."""

    model: type
    table_name: str
    fields: tuple[FieldDescriptor, ...]
    resolved: bool = True

    @property
    def name(self) -> str:
        return self.model.__name__

    def get_field(self, name: str) -> FieldDescriptor:
        for f in self.fields:
            if f.name == name:
                return f
        raise KeyError(name)


# =========================================================================
# Type inference
# =========================================================================


def unwrap_optional(tp: Any) -> Any:
    """Return ``X`` for ``Optional[X]`` / ``X | None``, else ``tp`` unchanged."""
    origin = typing.get_origin(tp)
    if origin is Union or origin is types.UnionType:
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def resolve_sql_type(tp: Any) -> str:
    """Guess the SQL column type for a Python annotation.

    Returns ``''`` for types with no mapping; the DDL generator turns that
    into a :class:`~tagorm.errors.TypeResolutionError` unless the field
    carries an explicit ``type`` tag.

    >>> resolve_sql_type(str), resolve_sql_type(list[int])
    ('varchar(255)', 'integer[]')
    """
    tp = unwrap_optional(tp)

    origin = typing.get_origin(tp)
    if origin in (list, tuple, set, frozenset):
        args = typing.get_args(tp)
        element = unwrap_optional(args[0]) if args else None
        return _ARRAY_TYPES.get(element, "text[]")
    if tp in (list, tuple):
        return "text[]"

    if not isinstance(tp, type):
        return ""

    hint = getattr(tp, "__sql_type__", None)
    if hint:
        return str(hint)

    # datetime is a date subclass, so check it first
    if issubclass(tp, _dt.datetime):
        return "timestamptz"
    if issubclass(tp, _dt.date):
        return "date"

    # bool is an int subclass, so check exact matches before subclasses
    if tp in _SCALAR_TYPES:
        return _SCALAR_TYPES[tp]
    for base, sql_type in _SCALAR_TYPES.items():
        if base is not bool and issubclass(tp, base):
            return sql_type
    return ""


def is_zero(value: Any) -> bool:
    """Whether ``value`` is the zero value of its type.

    A zero-valued primary key is left out of inserts so the database
    assigns it.
    """
    if value is None:
        return True
    if isinstance(value, uuid.UUID):
        return value.int == 0
    if isinstance(value, (bool, int, float, str, bytes)):
        return not value
    return False


# =========================================================================
# Descriptor construction / registry
# =========================================================================


def _model_class(obj: Any) -> type:
    cls = obj if isinstance(obj, type) else type(obj)
    if not dataclasses.is_dataclass(cls):
        raise NotAStructError(obj)
    return cls


def _field_hints(cls: type) -> dict[str, Any] | None:
    """Resolved annotations, or ``None`` while a referenced name is undefined."""
    try:
        return typing.get_type_hints(cls)
    except NameError:
        return None


def build_descriptor(cls: type) -> TypeDescriptor:
    """Introspect a dataclass and return its descriptor.

    When an annotation names a class that does not exist yet (a model
    declared further down the module), the raw annotations are kept and
    the descriptor is marked unresolved.
    """
    hints = _field_hints(cls)
    fields: list[FieldDescriptor] = []

    for f in dataclasses.fields(cls):
        if f.name.startswith("_"):
            continue
        fields.append(
            FieldDescriptor(
                name=f.name,
                python_type=f.type if hints is None else hints.get(f.name, f.type),
                tags=parse_tags(f.metadata.get(TAG_METADATA_KEY)),
            )
        )

    return TypeDescriptor(
        model=cls,
        table_name=table_name_for(cls),
        fields=tuple(fields),
        resolved=hints is not None,
    )


def describe(obj: Any) -> TypeDescriptor:
    """Return the descriptor for a model class or instance.

    Only descriptors whose annotations all resolved are cached on the class;
    an unresolved one is rebuilt on the next call.

    Raises:
        NotAStructError: ``obj`` is neither a dataclass nor an instance of one.
    """
    cls = _model_class(obj)
    descriptor = cls.__dict__.get(DESCRIPTOR_ATTR)
    if descriptor is None:
        descriptor = build_descriptor(cls)
        if descriptor.resolved:
            setattr(cls, DESCRIPTOR_ATTR, descriptor)
    return descriptor


def model(cls: type[T]) -> type[T]:
    """Class decorator registering a model and computing its descriptor."""
    if not dataclasses.is_dataclass(cls):
        cls = dataclass(cls)
    describe(cls)
    return cls


__all__ = [
    "FieldDescriptor",
    "TypeDescriptor",
    "resolve_sql_type",
    "unwrap_optional",
    "is_zero",
    "build_descriptor",
    "describe",
    "model",
]
