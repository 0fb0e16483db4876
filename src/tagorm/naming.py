"""Identifier helpers: snake-casing and table-name derivation."""

from __future__ import annotations

import re
from typing import Any

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z\d])([A-Z])")
_SEPARATORS = re.compile(r"[\s\-.]+")

TABLE_NAME_ATTR = "__tablename__"


def snake_case(name: str) -> str:
    """Convert ``CamelCase``/``mixedCase`` identifiers to ``snake_case``.

    Runs of capitals are treated as one word, so ``UserID`` becomes
    ``user_id`` and ``HTTPServer`` becomes ``http_server``.  Names that are
    already snake-cased pass through unchanged.

    >>> snake_case("BirthDate")
    'birth_date'
    >>> snake_case("UserID")
    'user_id'
    """
    name = _SEPARATORS.sub("_", name.strip())
    name = _ACRONYM_BOUNDARY.sub(r"\1_\2", name)
    name = _WORD_BOUNDARY.sub(r"\1_\2", name)
    return name.lower()


def pluralize(name: str) -> str:
    """Naive English plural used for table names.

    Trailing ``y`` becomes ``ies``, a trailing ``s`` is left alone and
    everything else gets an ``s``.  Irregular nouns are not special-cased.

    >>> pluralize("category"), pluralize("status"), pluralize("user")
    ('categories', 'status', 'users')
    """
    if name.endswith("y"):
        return name[:-1] + "ies"
    if name.endswith("s"):
        return name
    return name + "s"


def table_name_for(model: Any) -> str:
    """Resolve the table name for a model class or instance.

    A ``__tablename__`` attribute wins verbatim; otherwise the class name is
    snake-cased and pluralized.
    """
    cls = model if isinstance(model, type) else type(model)
    override = getattr(cls, TABLE_NAME_ATTR, None)
    if override:
        return str(override)
    return pluralize(snake_case(cls.__name__))


__all__ = ["snake_case", "pluralize", "table_name_for", "TABLE_NAME_ATTR"]
