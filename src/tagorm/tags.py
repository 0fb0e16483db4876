"""Tag grammar for model fields.

A tag string is a ``;``-separated list of ``key`` or ``key:value`` parts::

    "primaryKey;not null;autoIncrement"
    "type:varchar(200);not null;uniqueIndex:username_index"
    "foreignKey:user_id->id;onDelete:CASCADE;onUpdate:CASCADE"

Keys in :data:`CONSTRAINT_KEYS` drive constraint generation; ``type`` and
``primaryKey`` are consumed by the table model.  Any other key is written
verbatim into the column definition (``not null``, ``default:20`` →
``default 20``), which is an escape hatch for SQL the mapper does not model.
"""

from __future__ import annotations

from dataclasses import field
from typing import Any

TAG_METADATA_KEY = "orm"

PRIMARY_KEY = "primaryKey"
TYPE = "type"
UNIQUE = "unique"
UNIQUE_INDEX = "uniqueIndex"
AUTO_INCREMENT = "autoIncrement"
CHECK = "check"
FOREIGN_KEY = "foreignKey"
ON_DELETE = "onDelete"
ON_UPDATE = "onUpdate"

CONSTRAINT_KEYS = frozenset(
    {UNIQUE, CHECK, UNIQUE_INDEX, AUTO_INCREMENT, FOREIGN_KEY, ON_DELETE, ON_UPDATE}
)

# Never echoed into the column definition.
SILENT_KEYS = frozenset({TYPE, PRIMARY_KEY})


def parse_tags(raw: str | None) -> dict[str, str]:
    """Parse a tag string into an ordered ``{key: value}`` mapping.

    Parts are trimmed and empty parts dropped.  Each part is split on its
    first ``:``, so values may themselves contain colons.  A later part with
    the same key overwrites an earlier one but keeps the original position.

    >>> parse_tags("not null; default:20 ;check:age > 20")
    {'not null': '', 'default': '20', 'check': 'age > 20'}
    """
    tags: dict[str, str] = {}
    if not raw:
        return tags

    for part in raw.split(";"):
        part = part.strip()
        if not part:
            continue
        key, sep, value = part.partition(":")
        tags[key.strip()] = value.strip() if sep else ""
    return tags


def column(tags: str = "", **kwargs: Any) -> Any:
    """Declare a dataclass field carrying an ORM tag string.

    Thin wrapper around :func:`dataclasses.field`; all keyword arguments
    (``default``, ``default_factory``, ...) are forwarded.

    >>> from dataclasses import dataclass
    >>> @dataclass
    ... class User:
    ...     id: int = column("primaryKey;autoIncrement", default=0)
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[TAG_METADATA_KEY] = tags
    return field(metadata=metadata, **kwargs)


__all__ = [
    "TAG_METADATA_KEY",
    "PRIMARY_KEY",
    "TYPE",
    "UNIQUE",
    "UNIQUE_INDEX",
    "AUTO_INCREMENT",
    "CHECK",
    "FOREIGN_KEY",
    "ON_DELETE",
    "ON_UPDATE",
    "CONSTRAINT_KEYS",
    "SILENT_KEYS",
    "parse_tags",
    "column",
]
