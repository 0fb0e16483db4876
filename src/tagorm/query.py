"""Query filters and WHERE-clause merging.

A :class:`QueryFilter` is the caller's predicate: a WHERE fragment whose
positional placeholders start at ``$1``, plus the values for them::

    QueryFilter(where="id = $1 AND active = $2", args=[7, True])

Generated UPDATE statements already bind their SET values to ``$1..$k``,
so the filter's placeholders are shifted past them before the clause is
appended::

    UPDATE users SET name = $1, age = $2 WHERE id = $3      values: [name, age, 7]

Placeholder matching is plain text substitution.  A ``$1`` inside a string
literal in the clause is rewritten like any other.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, NamedTuple

from tagorm.errors import MissingFilterError

_PLACEHOLDER = re.compile(r"\$(\d+)")


class Statement(NamedTuple):
    """SQL text plus the values bound to its placeholders, in order."""

    text: str
    values: list[Any]


@dataclass
class QueryFilter:
    """Caller-supplied predicate for select/update/delete.

    Attributes:
        where: WHERE clause without the keyword, placeholders ``$1..$n``
        args: Values for the clause placeholders
        query: Raw statement replacing the generated one entirely
    """

    where: str = ""
    args: Sequence[Any] = field(default_factory=list)
    query: str | None = None

    def __post_init__(self) -> None:
        self.args = list(self.args)

    @property
    def is_valid(self) -> bool:
        return bool(self.where) and bool(self.args)

    def validate(self) -> None:
        """Raise :class:`MissingFilterError` unless both clause and args are set."""
        if not self.where:
            raise MissingFilterError("query filter where clause cannot be empty")
        if not self.args:
            raise MissingFilterError("query filter args cannot be empty")


def require_filter(query_filter: QueryFilter | None) -> QueryFilter:
    """Return ``query_filter`` if it is usable, else raise :class:`MissingFilterError`."""
    if query_filter is None:
        raise MissingFilterError("query filter cannot be None")
    query_filter.validate()
    return query_filter


def renumber_placeholders(clause: str, arg_count: int, offset: int) -> str:
    """Shift ``$1..$arg_count`` in ``clause`` past ``offset`` bound values.

    Positions are visited in order; each position whose token occurs in the
    clause takes the next free number (``offset + 1``, ``offset + 2``, ...).
    Every occurrence of a token is rewritten in one pass, so a rewritten
    token is never picked up again.  Tokens above ``arg_count`` are left
    alone.

    >>> renumber_placeholders("id = $1", 1, 2)
    'id = $3'
    >>> renumber_placeholders("a = $1 OR b = $1 OR c = $12", 1, 4)
    'a = $5 OR b = $5 OR c = $12'
    """
    present = {int(n) for n in _PLACEHOLDER.findall(clause)}
    mapping: dict[int, int] = {}
    next_number = offset
    for position in range(1, arg_count + 1):
        if position in present:
            next_number += 1
            mapping[position] = next_number

    if not mapping:
        return clause

    def _replace(match: re.Match[str]) -> str:
        number = int(match.group(1))
        if number in mapping:
            return f"${mapping[number]}"
        return match.group(0)

    return _PLACEHOLDER.sub(_replace, clause)


def merge_filter(
    text: str,
    values: Sequence[Any],
    query_filter: QueryFilter | None,
) -> Statement:
    """Splice a filter into a generated statement.

    - A raw ``query`` on the filter replaces ``text``.
    - With a clause and args, `` WHERE <clause>`` is appended; when
      ``values`` is non-empty the clause placeholders are renumbered past it.
    - Filter args are always appended after ``values``, one per position,
      even when their placeholder does not occur in the clause.
    """
    merged = list(values)
    if query_filter is None:
        return Statement(text, merged)

    if query_filter.query:
        text = query_filter.query

    if query_filter.where and query_filter.args:
        clause = query_filter.where
        if merged:
            clause = renumber_placeholders(clause, len(query_filter.args), len(merged))
        text += " WHERE " + clause
        merged.extend(query_filter.args)
    elif query_filter.query and query_filter.args:
        merged.extend(query_filter.args)

    return Statement(text, merged)


__all__ = [
    "Statement",
    "QueryFilter",
    "require_filter",
    "renumber_placeholders",
    "merge_filter",
]
