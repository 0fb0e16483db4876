"""Row marshaling: database rows back into model instances.

Columns map to fields by snake-cased name.  A field whose declared type
defines ``from_db`` gets the converted value, and a plain ``dict`` field
decodes JSON text.  Foreign-key fields and fields with no matching column
keep their defaults (or, when filling an instance, their current value).
"""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Mapping
from typing import Any, TypeVar

from tagorm.descriptor import unwrap_optional
from tagorm.table import TableModel

T = TypeVar("T")


def convert(python_type: Any, value: Any) -> Any:
    """Apply the type's ``from_db`` hook to a raw column value."""
    target = unwrap_optional(python_type)
    if not isinstance(target, type):
        return value
    from_db = getattr(target, "from_db", None)
    if callable(from_db):
        return from_db(value)
    if issubclass(target, dict) and isinstance(value, (str, bytes)):
        return json.loads(value)
    return value


def hydrate(instance: T, row: Mapping[str, Any]) -> T:
    """Copy matching columns of ``row`` onto ``instance`` in place and return it."""
    table = TableModel.build(instance)
    for f in table.column_fields:
        if f.column_name in row:
            setattr(instance, f.name, convert(f.python_type, row[f.column_name]))
    return instance


def instantiate(cls: type[T], row: Mapping[str, Any]) -> T:
    """Construct ``cls`` from ``row``.

    Matching columns become constructor arguments, so models with required
    fields and frozen models work.  Fields missing from the row fall back to
    their defaults.
    """
    table = TableModel.build(cls)
    init_fields = {f.name for f in dataclasses.fields(cls) if f.init}
    kwargs = {
        f.name: convert(f.python_type, row[f.column_name])
        for f in table.column_fields
        if f.name in init_fields and f.column_name in row
    }
    return cls(**kwargs)


__all__ = ["convert", "hydrate", "instantiate"]
