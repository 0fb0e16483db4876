"""Custom value types with database and JSON conversion hooks.

Value types participate in the mapper through a small duck-typed
contract:

- ``__sql_type__``: class attribute naming the SQL type used when a field
  of this type carries no explicit ``type`` tag.
- ``to_db()``: convert the value to what the driver binds.
- ``from_db(value)``: classmethod rebuilding the value from a driver row.

``Date`` and ``JSON`` additionally offer a portable text codec
(``to_json`` / ``from_json``) for application code.
"""

from __future__ import annotations

import datetime as _dt
import json
from typing import Any

DATE_LAYOUT = "%Y-%m-%d"


class Date(_dt.date):
    """Calendar date without a time component (``YYYY-MM-DD``)."""

    __sql_type__ = "date"

    @classmethod
    def from_string(cls, value: str) -> Date:
        """Parse ``YYYY-MM-DD``; raises ``ValueError`` on any other layout."""
        try:
            parsed = _dt.datetime.strptime(value, DATE_LAYOUT)
        except ValueError as exc:
            raise ValueError("date should be of the format: yyyy-mm-dd") from exc
        return cls(parsed.year, parsed.month, parsed.day)

    @classmethod
    def from_date(cls, value: _dt.date) -> Date:
        return cls(value.year, value.month, value.day)

    @classmethod
    def from_db(cls, value: Any) -> Date | None:
        if value is None:
            return None
        if isinstance(value, str):
            return cls.from_string(value[:10])
        if isinstance(value, _dt.datetime):
            value = value.date()
        return cls.from_date(value)

    def to_db(self) -> _dt.date:
        return _dt.date(self.year, self.month, self.day)

    def to_json(self) -> str:
        return json.dumps(str(self))

    @classmethod
    def from_json(cls, data: str | bytes) -> Date:
        value = json.loads(data)
        if not isinstance(value, str):
            raise ValueError(f"date should be a string, got {value!r}")
        return cls.from_string(value)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"


class JSON(dict):
    """JSON object column value (``json``, rendered ``jsonb`` on PostgreSQL)."""

    __sql_type__ = "json"

    def to_db(self) -> str:
        return json.dumps(self)

    @classmethod
    def from_db(cls, value: Any) -> JSON | None:
        if value is None:
            return None
        if isinstance(value, (bytes, bytearray)):
            value = value.decode("utf-8")
        if isinstance(value, str):
            value = json.loads(value)
        return cls(value)

    def to_json(self) -> str:
        return json.dumps(self)

    @classmethod
    def from_json(cls, data: str | bytes) -> JSON:
        return cls(json.loads(data))


__all__ = ["Date", "JSON", "DATE_LAYOUT"]
